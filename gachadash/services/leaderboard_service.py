import logging
from typing import Any, Dict, List, Optional

from gachadash.config import Settings
from gachadash.services.gacha_client import GachaApiClient
from gachadash.services.redis_service import RedisService
from gachadash.utils.cache_utils import generate_leaderboard_cache_key

logger = logging.getLogger(__name__)

# keys seen wrapping the ranking list, checked in order
_LIST_KEYS = ("topRankers", "data", "leaderboard")


def extract_leaderboard_entries(response: Any, top_n: int = 50) -> List[Dict[str, Any]]:
    """
    Pull ranked entries out of any of the leaderboard response shapes.

    Entries without a wallet are dropped; missing ranks are filled with the
    1-based position.
    """
    entries: List[Any] = []
    if isinstance(response, list):
        entries = response
    elif isinstance(response, dict):
        for key in _LIST_KEYS:
            if isinstance(response.get(key), list):
                entries = response[key]
                break

    valid = [e for e in entries if isinstance(e, dict) and e.get("wallet")]
    return [
        {**entry, "rank": entry.get("rank") or index + 1}
        for index, entry in enumerate(valid[:top_n])
    ]


class LeaderboardService:
    def __init__(
        self,
        settings: Settings,
        client: GachaApiClient,
        redis_service: Optional[RedisService] = None,
    ):
        self._settings = settings
        self._client = client
        self._redis = redis_service

    async def get_top(self, leaderboard_type: str = "total") -> List[Dict[str, Any]]:
        """
        Top-N ranking, served from cache when available.

        Raises:
            ValueError: unknown leaderboard type
            GachaAPIError: upstream failure
        """
        top_n = self._settings.LEADERBOARD_TOP_N
        cache_key = generate_leaderboard_cache_key(leaderboard_type, top_n)

        if self._redis:
            cached = await self._redis.get(cache_key)
            if cached is not None:
                logger.info(f"Cache HIT: {cache_key}")
                return cached

        response = await self._client.fetch_leaderboard(leaderboard_type)
        entries = extract_leaderboard_entries(response, top_n)
        logger.info(f"Leaderboard {leaderboard_type}: {len(entries)} entries")

        if self._redis:
            await self._redis.set(
                cache_key, entries, self._settings.LEADERBOARD_CACHE_TTL_SECONDS
            )
        return entries

    async def find_rank(self, wallet: Optional[str]) -> Optional[int]:
        """Rank of the wallet in the total leaderboard; None if absent or unavailable"""
        if not wallet:
            return None
        try:
            entries = await self.get_top("total")
        except Exception as e:
            logger.warning(f"Failed to fetch leaderboard: {e}")
            return None

        target = wallet.lower()
        for entry in entries:
            if str(entry.get("wallet", "")).lower() == target:
                return int(entry["rank"])
        return None
