from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import httpx

from gachadash.config import Settings
from gachadash.core.constants import LEADERBOARD_TYPES
from gachadash.schemas.common import ErrorCode
from gachadash.schemas.pagination import PageParams

logger = logging.getLogger(__name__)


class GachaAPIError(Exception):
    """Purchase / leaderboard / report API 호출 중 발생한 오류"""

    def __init__(self, status_code: int, error_code: ErrorCode, message: str):
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        super().__init__(message)

    @property
    def is_timeout(self) -> bool:
        return self.error_code == ErrorCode.UPSTREAM_TIMEOUT


class GachaApiClient:
    """Read-only client for the gacha platform's admin, leaderboard and report endpoints"""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._base_url = settings.GACHA_API_BASE_URL.rstrip("/")
        self._timeout = httpx.Timeout(settings.API_TIMEOUT_SECONDS, connect=5.0)
        self._report_timeout = httpx.Timeout(settings.REPORT_TIMEOUT_SECONDS, connect=5.0)
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._settings.ADMIN_PASSWORD:
            headers["x-admin-password"] = self._settings.ADMIN_PASSWORD
        return headers

    async def _get_json(
        self,
        path: str,
        timeout: httpx.Timeout,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        started_at = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=timeout, transport=self._transport
            ) as client:
                response = await client.get(path, params=params, headers=self._headers())
        except httpx.TimeoutException as exc:
            raise GachaAPIError(
                status_code=504,
                error_code=ErrorCode.UPSTREAM_TIMEOUT,
                message="Request timeout - please try again",
            ) from exc
        except httpx.RequestError as exc:
            logger.warning("Gacha API request error on %s: %s", path, exc)
            raise GachaAPIError(
                status_code=503,
                error_code=ErrorCode.UPSTREAM_UNAVAILABLE,
                message="Gacha API is temporarily unavailable",
            ) from exc

        elapsed_ms = int((time.perf_counter() - started_at) * 1000)
        logger.info(f"GET {path} -> {response.status_code} in {elapsed_ms}ms")

        if response.status_code >= 400:
            logger.error(
                f"Gacha API error body for {path}: {response.text[:500] or '<empty>'}"
            )
            raise GachaAPIError(
                status_code=502,
                error_code=ErrorCode.UPSTREAM_ERROR,
                message=f"API Error: {response.status_code} {response.reason_phrase}",
            )

        try:
            return response.json()
        except ValueError as exc:
            raise GachaAPIError(
                status_code=502,
                error_code=ErrorCode.UPSTREAM_ERROR,
                message="Gacha API returned a non-JSON response",
            ) from exc

    async def fetch_pack_purchases(
        self, identifier: str, paging: Optional[PageParams] = None
    ) -> Any:
        """
        Fetch purchase data for a wallet address, username or email.

        Raises:
            ValueError: identifier is empty
            GachaAPIError: upstream failure or timeout
        """
        if not identifier or not identifier.strip():
            raise ValueError("Wallet address is required")

        logger.debug(f"Admin password {self._settings.admin_password_status}")
        path = f"{self._settings.PACK_PURCHASES_PATH}/{identifier.strip()}"
        params = paging.as_query() if paging else None
        return await self._get_json(path, self._timeout, params=params)

    async def fetch_leaderboard(self, leaderboard_type: str = "total") -> Any:
        if leaderboard_type not in LEADERBOARD_TYPES:
            raise ValueError('Leaderboard type must be "total" or "weekly"')
        return await self._get_json(f"/leaderboard/{leaderboard_type}", self._timeout)

    async def fetch_report(self, retries: Optional[int] = None) -> Any:
        """Fetch today's and all-time purchase report; timeouts are retried."""
        retries = self._settings.REPORT_RETRIES if retries is None else retries
        path = f"/report/{self._settings.REPORT_ID}"

        while True:
            try:
                return await self._get_json(path, self._report_timeout)
            except GachaAPIError as exc:
                if not exc.is_timeout:
                    raise
                if retries <= 0:
                    timeout_s = self._settings.REPORT_TIMEOUT_SECONDS
                    raise GachaAPIError(
                        status_code=504,
                        error_code=ErrorCode.UPSTREAM_TIMEOUT,
                        message=(
                            f"Request timeout after {timeout_s:g}s - The API may be "
                            "slow or unavailable. Please try again."
                        ),
                    ) from exc
                logger.info(f"Report request timed out. Retrying... {retries} attempts remaining")
                retries -= 1
                await asyncio.sleep(self._settings.REPORT_RETRY_DELAY_SECONDS)
