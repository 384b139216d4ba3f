import logging
from typing import Any

from fastapi import APIRouter, Depends

from gachadash.core.constants import LEADERBOARD_TYPES
from gachadash.core.exception_handlers import error_response
from gachadash.deps import get_leaderboard_service
from gachadash.schemas.common import BaseResponse, ErrorCode
from gachadash.services.leaderboard_service import LeaderboardService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("/{leaderboard_type}", response_model=BaseResponse)
async def get_leaderboard(
    leaderboard_type: str,
    leaderboard_service: LeaderboardService = Depends(get_leaderboard_service),
) -> Any:
    """전체 / 주간 리더보드 상위 랭커"""
    if leaderboard_type not in LEADERBOARD_TYPES:
        return error_response(
            400,
            ErrorCode.INVALID_PARAMS,
            'Leaderboard type must be "total" or "weekly"',
        )

    entries = await leaderboard_service.get_top(leaderboard_type)
    return BaseResponse(
        success=True,
        data={"type": leaderboard_type, "entries": entries},
        meta={"count": len(entries)},
    )
