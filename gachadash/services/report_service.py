import logging
from typing import Any, Dict, Optional

from gachadash.config import Settings
from gachadash.services.gacha_client import GachaApiClient
from gachadash.services.redis_service import RedisService
from gachadash.utils.cache_utils import (
    calculate_day_capped_ttl,
    generate_report_cache_key,
)

logger = logging.getLogger(__name__)


class ReportService:
    """Today / all-time pack purchase report"""

    def __init__(
        self,
        settings: Settings,
        client: GachaApiClient,
        redis_service: Optional[RedisService] = None,
    ):
        self._settings = settings
        self._client = client
        self._redis = redis_service

    async def get_report(self) -> Dict[str, Any]:
        cache_key = generate_report_cache_key(self._settings.REPORT_ID)

        if self._redis:
            cached = await self._redis.get(cache_key)
            if cached is not None:
                logger.info(f"Cache HIT: {cache_key}")
                return cached

        report = await self._client.fetch_report()
        if not isinstance(report, dict):
            report = {"data": report}
        logger.info(f"Report received with keys: {sorted(report.keys())}")

        if self._redis:
            ttl = calculate_day_capped_ttl(
                self._settings.REPORT_CACHE_TTL_SECONDS, self._settings.TIMEZONE
            )
            await self._redis.set(cache_key, report, ttl)
        return report
