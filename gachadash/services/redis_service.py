"""
Redis-backed response cache for slow upstream endpoints (leaderboard, report).
- Never raises; a failed lookup is a cache miss, a failed write is ignored
- Disabled entirely unless REDIS_ENABLED is set
- JSON serialization of cached values
"""

from typing import Optional, Any
import redis.asyncio as redis
import json
import logging
from gachadash.config import Settings

logger = logging.getLogger(__name__)


class RedisService:
    def __init__(self, settings: Settings):
        self._settings = settings
        self._client: Optional[redis.Redis] = None
        self._unavailable = False

    @property
    def enabled(self) -> bool:
        return self._settings.REDIS_ENABLED and not self._unavailable

    async def _get_client(self) -> Optional[redis.Redis]:
        """Lazy connection; a failed ping disables the cache for this instance"""
        if not self.enabled:
            return None
        if self._client is None:
            try:
                redis_kwargs = {
                    "host": self._settings.REDIS_HOST,
                    "port": self._settings.REDIS_PORT,
                    "db": self._settings.REDIS_DB,
                    "decode_responses": True,
                    "socket_connect_timeout": 2,
                    "health_check_interval": 30,
                }
                if self._settings.REDIS_PASSWORD:
                    redis_kwargs["password"] = self._settings.REDIS_PASSWORD

                self._client = redis.Redis(**redis_kwargs)
                await self._client.ping()
            except Exception as e:
                logger.warning(f"Redis connection failed, caching disabled: {e}")
                self._client = None
                self._unavailable = True
        return self._client

    async def get(self, key: str) -> Optional[Any]:
        try:
            client = await self._get_client()
            if client is None:
                return None
            value = await client.get(key)
            return json.loads(value) if value else None
        except Exception as e:
            logger.warning(f"Redis GET failed for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        try:
            client = await self._get_client()
            if client is None:
                return False
            await client.setex(key, ttl_seconds, json.dumps(value))
            return True
        except Exception as e:
            logger.warning(f"Redis SET failed for {key}: {e}")
            return False

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None
