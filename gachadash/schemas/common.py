from pydantic import BaseModel
from typing import Optional
from enum import Enum


class ErrorCode(str, Enum):
    # Upstream purchase / leaderboard / report API
    UPSTREAM_ERROR = "UPSTREAM_001"
    UPSTREAM_TIMEOUT = "UPSTREAM_002"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_003"
    INVALID_PARAMS = "UPSTREAM_004"

    # Hosted profile store
    STORE_NOT_CONFIGURED = "STORE_001"
    STORE_ERROR = "STORE_002"
    PROFILE_NOT_FOUND = "STORE_003"

    # Wallet lookups
    WALLET_REQUIRED = "WALLET_001"


class Error(BaseModel):
    code: ErrorCode
    message: str
    details: Optional[dict] = None


class BaseResponse(BaseModel):
    success: bool = True
    data: Optional[dict] = None
    error: Optional[Error] = None
    meta: Optional[dict] = None
