import logging
from typing import Any

from fastapi import APIRouter, Depends, Path, Query

from gachadash.core.exception_handlers import error_response
from gachadash.deps import get_session_key, get_wallet_service
from gachadash.schemas.common import BaseResponse, ErrorCode
from gachadash.schemas.pagination import DEFAULT_PAGE_LIMIT, PageParams
from gachadash.schemas.wallet import TimeFrame
from gachadash.services.wallet_service import WalletService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wallets", tags=["wallets"])


@router.get("/{identifier}", response_model=BaseResponse)
async def get_wallet_stats(
    identifier: str = Path(..., min_length=1, description="지갑 주소, 사용자명 또는 이메일"),
    time_frame: TimeFrame = Query(TimeFrame.ALL, alias="timeFrame"),
    transactions_page: int = Query(1, ge=1, alias="transactionsPage"),
    transactions_limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=500, alias="transactionsLimit"),
    inventory_page: int = Query(1, ge=1, alias="inventoryPage"),
    inventory_limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=500, alias="inventoryLimit"),
    session_key: str = Depends(get_session_key),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> Any:
    """지갑 구매/당첨/인벤토리 통계 조회 (API 실패 시 mock 데이터로 대체)"""
    if not identifier.strip():
        return error_response(
            400, ErrorCode.WALLET_REQUIRED, "Please enter a wallet address."
        )

    paging = PageParams(
        transactions_page=transactions_page,
        transactions_limit=transactions_limit,
        inventory_page=inventory_page,
        inventory_limit=inventory_limit,
    )
    result = await wallet_service.get_wallet_stats(
        identifier, time_frame=time_frame, paging=paging, session_key=session_key
    )
    if result.stats is None:
        return BaseResponse(
            success=True, data=None, meta={**result.meta, "tags": result.tags}
        )

    return BaseResponse(
        success=True,
        data=result.stats.model_dump(mode="json"),
        meta={**result.meta, "tags": result.tags, "timeFrame": time_frame.value},
    )


@router.get("/{identifier}/mock", response_model=BaseResponse)
async def get_mock_wallet_stats(
    identifier: str = Path(..., min_length=1),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> Any:
    """Mock 데이터 기반 통계 미리보기"""
    stats = wallet_service.get_mock_stats(identifier)
    return BaseResponse(
        success=True,
        data=stats.model_dump(mode="json") if stats else None,
        meta={"dataSource": "mock"},
    )
