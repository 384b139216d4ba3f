import math
from pydantic import BaseModel, Field
from typing import Any, Generic, TypeVar, List

T = TypeVar('T')

DEFAULT_PAGE_LIMIT = 20


class PaginatedEnvelope(BaseModel, Generic[T]):
    """목록형 API 필드의 공통 페이지네이션 래퍼"""
    items: List[T] = Field(default_factory=list)
    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT
    total: int = 0
    totalPages: int = 1

    @classmethod
    def empty(cls) -> "PaginatedEnvelope[Any]":
        return cls(items=[], page=1, limit=DEFAULT_PAGE_LIMIT, total=0, totalPages=1)

    @classmethod
    def from_counts(
        cls, items: List[Any], page: int, limit: int, total: int
    ) -> "PaginatedEnvelope[Any]":
        """totalPages = ceil(total / limit), page는 [1, totalPages] 범위로 보정"""
        total_pages = max(1, math.ceil(total / limit)) if limit > 0 else 1
        page = min(max(page, 1), total_pages)
        return cls(
            items=items, page=page, limit=limit, total=total, totalPages=total_pages
        )

    @property
    def pagination(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.totalPages,
        }


class PageParams(BaseModel):
    """지갑 조회 시 거래/인벤토리 페이지 파라미터"""
    transactions_page: int = Field(1, ge=1)
    transactions_limit: int = Field(DEFAULT_PAGE_LIMIT, ge=1, le=500)
    inventory_page: int = Field(1, ge=1)
    inventory_limit: int = Field(DEFAULT_PAGE_LIMIT, ge=1, le=500)

    def as_query(self) -> dict:
        return {
            "transactionsPage": self.transactions_page,
            "transactionsLimit": self.transactions_limit,
            "inventoryPage": self.inventory_page,
            "inventoryLimit": self.inventory_limit,
        }
