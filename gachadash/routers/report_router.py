from typing import Any

from fastapi import APIRouter, Depends

from gachadash.deps import get_report_service
from gachadash.schemas.common import BaseResponse
from gachadash.services.report_service import ReportService

router = APIRouter(prefix="/report", tags=["report"])


@router.get("", response_model=BaseResponse)
async def get_report(
    report_service: ReportService = Depends(get_report_service),
) -> Any:
    """오늘 / 누적 팩 구매 리포트"""
    report = await report_service.get_report()
    return BaseResponse(success=True, data=report)
