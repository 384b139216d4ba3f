import logging
import traceback
from typing import Any, Dict

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from gachadash.schemas.common import BaseResponse, Error, ErrorCode

from .exceptions import InternalServerError

logger = logging.getLogger("gachadash")


def _request_context(request: Request) -> Dict[str, Any]:
    client = request.client.host if request.client else "-"
    return {
        "method": request.method,
        "url": str(request.url),
        "client": client,
    }


def _error_content(code: str, message: str, details: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "success": False,
        "data": None,
        "error": {"code": code, "message": message, "details": details},
        "meta": None,
    }


async def handle_base_api_exception(request, exc):
    ctx = _request_context(request)
    log = logger.error if getattr(exc, "status_code", 500) >= 500 else logger.warning
    log(
        f"[BaseAPIException] {ctx['method']} {ctx['url']} from {ctx['client']} -> {exc.status_code}: {exc.message}"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(exc.error_code, exc.message, exc.details),
    )


async def handle_gacha_api_error(request, exc):
    """Upstream errors that escaped the mock fallback (leaderboard, report)."""
    ctx = _request_context(request)
    logger.warning(
        f"[GachaAPIError] {ctx['method']} {ctx['url']} -> {exc.status_code} {exc.error_code.value}: {exc.message}"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(exc.error_code.value, exc.message, {}),
    )


async def handle_http_exception(request, exc):
    ctx = _request_context(request)
    error_msg = f"[HTTPException] {ctx['method']} {ctx['url']} from {ctx['client']} -> {exc.status_code}: {exc.detail}"

    if getattr(exc, "status_code", 500) >= 500:
        tb_str = ''.join(traceback.format_tb(exc.__traceback__))
        logger.error(f"{error_msg}\n\nStack Trace:\n{tb_str}")
    else:
        logger.warning(error_msg)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content("HTTP_ERROR", str(exc.detail), {}),
    )


async def handle_validation_error(request, exc):
    ctx = _request_context(request)
    logger.warning(
        f"[ValidationError] {ctx['method']} {ctx['url']} from {ctx['client']} -> 422: {exc.errors()}"
    )
    return JSONResponse(
        status_code=422,
        content=_error_content(
            "VALIDATION_001", "Validation failed", {"errors": jsonable_encoder(exc.errors())}
        ),
    )


async def handle_unexpected_error(request, exc):
    ctx = _request_context(request)
    tb_str = ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(
        f"[Unhandled Error] {ctx['method']} {ctx['url']} from {ctx['client']}\n"
        f"Exception Type: {type(exc).__name__}\n"
        f"Exception Message: {str(exc)}\n\n"
        f"Full Stack Trace:\n{tb_str}"
    )

    internal = InternalServerError()
    return JSONResponse(
        status_code=internal.status_code,
        content=_error_content(internal.error_code, internal.message, {}),
    )


def error_response(status_code: int, code: ErrorCode, message: str) -> JSONResponse:
    """Error envelope returned directly by routers (no exception raised)"""
    return JSONResponse(
        status_code=status_code,
        content=BaseResponse(
            success=False, data=None, error=Error(code=code, message=message), meta=None
        ).model_dump(mode="json"),
    )
