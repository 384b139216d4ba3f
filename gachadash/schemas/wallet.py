from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from gachadash.utils.date_utils import parse_timestamp, to_iso


class TimeFrame(str, Enum):
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    ALL = "all"

    @property
    def days(self) -> Optional[int]:
        return {"7d": 7, "30d": 30}.get(self.value)


class InventoryTier(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class DataSource(str, Enum):
    API = "api"
    MOCK = "mock"


class PayloadKind(str, Enum):
    CURRENT = "current"
    LEGACY = "legacy"
    ABSENT = "absent"


class Transaction(BaseModel):
    model_config = ConfigDict(extra="allow")

    txHash: str = ""
    amount: Optional[float] = None
    packAmount: Optional[float] = None
    packName: Optional[str] = None
    collection: Optional[str] = None
    totalWinnings: float = 0
    loggedAt: Optional[str] = None
    isFreePack: Optional[bool] = None


class PackBreakdownEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    packName: str = ""
    packAmount: Optional[float] = None
    count: int = Field(0, ge=0)
    totalSpent: float = Field(0, ge=0)
    totalWinnings: float = Field(0, ge=0)
    rtp: float = 0


class FreePackRedemption(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: Optional[str] = None
    txHash: Optional[str] = None
    presetId: Optional[Any] = None
    redeemedAt: Optional[str] = None

    @field_validator("code", "txHash", mode="before")
    @classmethod
    def _scalar_to_text(cls, v: Any) -> Optional[str]:
        if isinstance(v, str):
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return None

    @field_validator("redeemedAt", mode="before")
    @classmethod
    def _timestamp_to_iso(cls, v: Any) -> Optional[str]:
        if v is None or isinstance(v, str):
            return v
        parsed = parse_timestamp(v)
        return to_iso(parsed) if parsed else None


class InventoryDetails(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    img: Optional[str] = None
    year: Optional[Any] = None
    grade: Optional[str] = None
    set: Optional[str] = None


class InventoryItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    uuid: Optional[str] = None
    tier: Optional[InventoryTier] = None
    value: float = Field(0, ge=0)
    details: InventoryDetails = Field(default_factory=InventoryDetails)
    variety: Optional[str] = None


_CURRENT_MARKERS = (
    "totalWinnings",
    "inventoryWins",
    "freePackRedemptions",
    "totalFreePacksRedeemed",
    "username",
)
_LEGACY_MARKERS = ("totalSpent", "totalPacks", "packBreakdown", "transactions")


def _has_current_transactions(transactions: Any) -> bool:
    if isinstance(transactions, dict) and isinstance(transactions.get("data"), list):
        return True
    if isinstance(transactions, list):
        return any(isinstance(tx, dict) and "amount" in tx for tx in transactions)
    return False


class LegacyWalletPayload(BaseModel):
    """1세대 응답: 평평한 transactions 배열과 packAmount 기반 거래"""

    model_config = ConfigDict(extra="allow")

    wallet: Optional[str] = None
    totalSpent: float = 0
    totalPacks: int = 0
    packBreakdown: List[PackBreakdownEntry] = Field(default_factory=list)
    transactions: List[Transaction] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def require_legacy_shape(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not any(k in data for k in _LEGACY_MARKERS):
            raise ValueError("not a legacy wallet payload")
        return data


class CurrentWalletPayload(BaseModel):
    """2세대 응답: 페이지네이션 envelope, 당첨금, 무료팩 정보 포함"""

    model_config = ConfigDict(extra="allow")

    wallet: Optional[str] = None
    username: Optional[str] = None
    totalSpent: float = 0
    totalPacks: int = 0
    totalWinnings: float = 0
    rtp: Optional[float] = None
    packBreakdown: List[PackBreakdownEntry] = Field(default_factory=list)
    transactions: Any = None
    inventoryWins: Any = None
    totalFreePacksRedeemed: int = 0
    freePackRedemptions: List[FreePackRedemption] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def require_current_shape(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValueError("not a wallet payload")
        if any(k in data for k in _CURRENT_MARKERS):
            return data
        if _has_current_transactions(data.get("transactions")):
            return data
        raise ValueError("not a current wallet payload")


class PieSlice(BaseModel):
    name: str
    value: float
    count: int
    packPrice: Optional[float] = None


class ActivityPoint(BaseModel):
    date: str
    amount: float
    winnings: float


class WalletStats(BaseModel):
    wallet: Optional[str] = None
    username: Optional[str] = None
    schemaVersion: PayloadKind = PayloadKind.ABSENT
    totalSpent: float = 0
    totalPacks: int = 0
    avgOrderValue: float = 0
    totalWinnings: float = 0
    netWinnings: float = 0
    rtp: float = 0
    pieData: List[PieSlice] = Field(default_factory=list)
    chartData: List[ActivityPoint] = Field(default_factory=list)
    tier: str
    priceToNameMap: Dict[str, str] = Field(default_factory=dict)
    transactions: List[Dict[str, Any]] = Field(default_factory=list)
    transactionsPagination: Dict[str, int] = Field(default_factory=dict)
    inventoryItems: List[Dict[str, Any]] = Field(default_factory=list)
    inventoryPagination: Dict[str, int] = Field(default_factory=dict)
    totalFreePacksRedeemed: int = 0
    freePacks: List[FreePackRedemption] = Field(default_factory=list)
