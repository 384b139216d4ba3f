"""
Hosted profile store client (Supabase PostgREST).

Tables:
- ``user_profiles``: one row per wallet with a ``tags`` array
- ``profile_comments``: admin comments keyed by wallet, author and timestamp

Calls never raise. Each returns a ``StoreResult``; when the store is not
configured, reads come back empty and writes come back with an error message.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

import httpx

from gachadash.config import Settings
from gachadash.schemas.common import ErrorCode

logger = logging.getLogger(__name__)

PROFILES_TABLE = "user_profiles"
COMMENTS_TABLE = "profile_comments"

NOT_CONFIGURED_MESSAGE = (
    "Supabase is not configured. Please set SUPABASE_URL and SUPABASE_ANON_KEY."
)


@dataclass
class StoreResult:
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class StoreContext:
    """Long-lived state for one store client: which warnings were already logged"""

    configured: bool
    warnings_shown: Set[str] = field(default_factory=set)

    def warn_once(self, key: str, message: str) -> None:
        if key in self.warnings_shown:
            return
        self.warnings_shown.add(key)
        logger.warning(message)


class StoreRequestError(Exception):
    pass


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProfileStore:
    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._transport = transport
        self._timeout = httpx.Timeout(settings.SUPABASE_TIMEOUT_SECONDS, connect=5.0)
        self.context = StoreContext(configured=settings.supabase_configured)
        if not self.context.configured:
            self.context.warn_once(
                "startup",
                "Supabase not configured. Announcements, profile comments and "
                "user tags will not work until SUPABASE_URL and SUPABASE_ANON_KEY are set.",
            )

    @property
    def configured(self) -> bool:
        return self.context.configured

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        key = self._settings.SUPABASE_ANON_KEY
        headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        base_url = f"{self._settings.SUPABASE_URL.rstrip('/')}/rest/v1"
        try:
            async with httpx.AsyncClient(
                base_url=base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method,
                    f"/{table}",
                    params=params,
                    json=json,
                    headers=self._headers(prefer),
                )
        except httpx.HTTPError as exc:
            raise StoreRequestError(f"{method} {table} failed: {exc}") from exc

        if response.status_code >= 400:
            raise StoreRequestError(
                f"{method} {table} -> {response.status_code}: {response.text[:300]}"
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise StoreRequestError(f"{method} {table} returned invalid JSON") from exc

    def _not_configured(self, operation: str) -> StoreResult:
        self.context.warn_once(operation, NOT_CONFIGURED_MESSAGE)
        return StoreResult(
            error=NOT_CONFIGURED_MESSAGE, error_code=ErrorCode.STORE_NOT_CONFIGURED
        )

    @staticmethod
    def _first(rows: Any) -> Optional[Dict[str, Any]]:
        if isinstance(rows, list):
            return rows[0] if rows else None
        return rows if isinstance(rows, dict) else None

    @staticmethod
    def _store_error(operation: str, exc: Exception) -> StoreResult:
        logger.error(f"Error in {operation}: {exc}")
        return StoreResult(error=str(exc), error_code=ErrorCode.STORE_ERROR)

    # ------------------------------------------------------------------
    # Profiles / tags
    # ------------------------------------------------------------------

    async def get_profile(self, wallet: str) -> StoreResult:
        if not self.configured:
            self.context.warn_once("get_profile", "Supabase not configured, returning empty profile")
            return StoreResult(data=None)
        try:
            rows = await self._request(
                "GET",
                PROFILES_TABLE,
                params={"select": "*", "wallet_address": f"eq.{wallet}"},
            )
            return StoreResult(data=self._first(rows))
        except StoreRequestError as e:
            return self._store_error("get_profile", e)

    async def get_tags(self, wallet: str) -> StoreResult:
        result = await self.get_profile(wallet)
        if not result.ok:
            return StoreResult(data=[], error=result.error, error_code=result.error_code)
        tags = (result.data or {}).get("tags")
        return StoreResult(data=list(tags) if isinstance(tags, list) else [])

    async def add_tag(self, wallet: str, tag: str, author: str = "Admin") -> StoreResult:
        """Add a tag to the wallet's profile; adding an existing tag is a no-op."""
        if not self.configured:
            return self._not_configured("add_tag")

        existing = await self.get_profile(wallet)
        if not existing.ok:
            return existing

        profile = existing.data or {}
        tags = list(profile.get("tags") or []) if isinstance(profile.get("tags"), list) else []
        if tag in tags:
            return StoreResult(data=existing.data)
        tags.append(tag)

        try:
            rows = await self._request(
                "POST",
                PROFILES_TABLE,
                params={"on_conflict": "wallet_address"},
                json={
                    "wallet_address": wallet,
                    "tags": tags,
                    "created_by": author,
                    "updated_at": _now_iso(),
                },
                prefer="resolution=merge-duplicates,return=representation",
            )
        except StoreRequestError as e:
            return self._store_error("add_tag", e)

        logger.info(f"Tag '{tag}' added to {wallet} by {author}")
        return StoreResult(data=self._first(rows))

    async def remove_tag(self, wallet: str, tag: str) -> StoreResult:
        if not self.configured:
            return self._not_configured("remove_tag")

        existing = await self.get_profile(wallet)
        if not existing.ok or not existing.data:
            return StoreResult(
                error="Profile not found", error_code=ErrorCode.PROFILE_NOT_FOUND
            )

        current = existing.data.get("tags")
        tags = [t for t in (current if isinstance(current, list) else []) if t != tag]

        try:
            rows = await self._request(
                "PATCH",
                PROFILES_TABLE,
                params={"wallet_address": f"eq.{wallet}"},
                json={"tags": tags, "updated_at": _now_iso()},
                prefer="return=representation",
            )
        except StoreRequestError as e:
            return self._store_error("remove_tag", e)

        logger.info(f"Tag '{tag}' removed from {wallet}")
        return StoreResult(data=self._first(rows))

    async def update_profile(
        self, wallet: str, updates: Dict[str, Any], author: str = "Admin"
    ) -> StoreResult:
        if not self.configured:
            return self._not_configured("update_profile")

        payload = {**updates, "updated_at": _now_iso()}
        payload.setdefault("wallet_address", wallet)
        payload.setdefault("created_by", author)
        try:
            rows = await self._request(
                "POST",
                PROFILES_TABLE,
                params={"on_conflict": "wallet_address"},
                json=payload,
                prefer="resolution=merge-duplicates,return=representation",
            )
        except StoreRequestError as e:
            return self._store_error("update_profile", e)
        return StoreResult(data=self._first(rows))

    async def get_all_tags(self) -> StoreResult:
        if not self.configured:
            return StoreResult(data=[])
        try:
            rows = await self._request("GET", PROFILES_TABLE, params={"select": "tags"})
        except StoreRequestError as e:
            result = self._store_error("get_all_tags", e)
            result.data = []
            return result

        all_tags: Set[str] = set()
        for profile in rows or []:
            if isinstance(profile.get("tags"), list):
                all_tags.update(profile["tags"])
        return StoreResult(data=sorted(all_tags))

    async def get_profiles_by_tags(self, tags: List[str]) -> StoreResult:
        """Profiles carrying at least one of ``tags``"""
        if not self.configured or not tags:
            return StoreResult(data=[])
        try:
            rows = await self._request("GET", PROFILES_TABLE, params={"select": "*"})
        except StoreRequestError as e:
            result = self._store_error("get_profiles_by_tags", e)
            result.data = []
            return result

        wanted = set(tags)
        matches = [
            profile
            for profile in rows or []
            if isinstance(profile.get("tags"), list) and wanted.intersection(profile["tags"])
        ]
        return StoreResult(data=matches)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def get_comments(self, wallet: str) -> StoreResult:
        if not self.configured:
            return StoreResult(data=[])
        try:
            rows = await self._request(
                "GET",
                COMMENTS_TABLE,
                params={
                    "select": "*",
                    "wallet_address": f"eq.{wallet}",
                    "order": "created_at.desc",
                },
            )
        except StoreRequestError as e:
            result = self._store_error("get_comments", e)
            result.data = []
            return result
        return StoreResult(data=rows or [])

    async def add_comment(self, wallet: str, comment: str, author: str = "Admin") -> StoreResult:
        if not self.configured:
            return self._not_configured("add_comment")
        try:
            rows = await self._request(
                "POST",
                COMMENTS_TABLE,
                json=[
                    {
                        "wallet_address": wallet,
                        "comment": comment,
                        "author": author,
                        "created_at": _now_iso(),
                    }
                ],
                prefer="return=representation",
            )
        except StoreRequestError as e:
            return self._store_error("add_comment", e)

        logger.info(f"Comment added to {wallet} by {author}")
        return StoreResult(data=self._first(rows))

    async def delete_comment(self, comment_id: Any) -> StoreResult:
        if not self.configured:
            return self._not_configured("delete_comment")
        try:
            await self._request(
                "DELETE", COMMENTS_TABLE, params={"id": f"eq.{comment_id}"}
            )
        except StoreRequestError as e:
            return self._store_error("delete_comment", e)
        return StoreResult(data=None)

    async def get_announcements_feed(self, limit: int = 100) -> StoreResult:
        """Latest comments across all wallets"""
        if not self.configured:
            return StoreResult(data=[])
        try:
            rows = await self._request(
                "GET",
                COMMENTS_TABLE,
                params={"select": "*", "order": "created_at.desc", "limit": str(limit)},
            )
        except StoreRequestError as e:
            result = self._store_error("get_announcements_feed", e)
            result.data = []
            return result
        return StoreResult(data=rows or [])
