"""
Wallet Service

One search runs: fetch → (mock on failure) → time-frame filter → analytics →
enrichment with leaderboard rank and stored tags.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from gachadash.config import Settings
from gachadash.core.exceptions import UpstreamError, UpstreamTimeoutError, ValidationError
from gachadash.schemas.pagination import PageParams
from gachadash.schemas.wallet import DataSource, TimeFrame, WalletStats
from gachadash.services.analytics import filter_by_time_frame, process_analytics
from gachadash.services.gacha_client import GachaAPIError, GachaApiClient
from gachadash.services.leaderboard_service import LeaderboardService
from gachadash.services.mock_data import generate_mock_data
from gachadash.services.normalizer import to_number
from gachadash.services.profile_store import ProfileStore
from gachadash.utils.sequencer import RequestSequencer

logger = logging.getLogger(__name__)


@dataclass
class WalletSnapshotResult:
    stats: Optional[WalletStats]
    data_source: DataSource
    leaderboard_rank: Optional[int] = None
    tags: List[str] = field(default_factory=list)
    request_id: Optional[int] = None
    superseded: bool = False
    fallback_reason: Optional[str] = None

    @property
    def meta(self) -> Dict[str, Any]:
        return {
            "dataSource": self.data_source.value,
            "leaderboardRank": self.leaderboard_rank,
            "requestId": self.request_id,
            "superseded": self.superseded,
            "fallbackReason": self.fallback_reason,
        }


class WalletService:
    def __init__(
        self,
        settings: Settings,
        client: GachaApiClient,
        leaderboard_service: LeaderboardService,
        profile_store: ProfileStore,
        sequencer: RequestSequencer,
    ):
        self._settings = settings
        self._client = client
        self._leaderboard = leaderboard_service
        self._store = profile_store
        self._sequencer = sequencer

    def build_mock_payload(self, identifier: str) -> Dict[str, Any]:
        return generate_mock_data(
            identifier,
            transaction_count=self._settings.MOCK_TRANSACTION_COUNT,
            history_days=self._settings.MOCK_HISTORY_DAYS,
            free_pack_probability=self._settings.MOCK_FREE_PACK_PROBABILITY,
        )

    async def fetch_payload(
        self, identifier: str, paging: Optional[PageParams] = None
    ) -> Tuple[Any, DataSource, Optional[str]]:
        """
        Raw payload plus where it came from.

        Upstream failures fall back to mock data unless MOCK_FALLBACK_ENABLED
        is off, in which case they surface as UpstreamError/UpstreamTimeoutError.
        """
        try:
            payload = await self._client.fetch_pack_purchases(identifier, paging)
            return payload, DataSource.API, None
        except GachaAPIError as e:
            logger.warning(
                f"API failed, using mock fallback. wallet={identifier} "
                f"code={e.error_code.value} error={e.message}"
            )
            if not self._settings.MOCK_FALLBACK_ENABLED:
                if e.is_timeout:
                    raise UpstreamTimeoutError(e.message) from e
                raise UpstreamError(e.message, details={"code": e.error_code.value}) from e
            return self.build_mock_payload(identifier), DataSource.MOCK, e.message

    async def get_wallet_stats(
        self,
        identifier: str,
        time_frame: TimeFrame = TimeFrame.ALL,
        paging: Optional[PageParams] = None,
        session_key: Optional[str] = None,
    ) -> WalletSnapshotResult:
        """
        Build the wallet snapshot for one search.

        Args:
            identifier: Wallet address, username or email
            time_frame: Restricts transactions and recomputes totals; the tier
                always uses the lifetime total
            paging: Transaction / inventory page parameters passed upstream
            session_key: Client session used for stale-response detection

        Raises:
            ValidationError: identifier is empty
        """
        identifier = (identifier or "").strip()
        if not identifier:
            raise ValidationError("Please enter a wallet address.")

        request_id = self._sequencer.begin(session_key) if session_key else None

        payload, source, fallback_reason = await self.fetch_payload(identifier, paging)

        lifetime_total = None
        if isinstance(payload, dict) and payload.get("totalSpent"):
            lifetime_total = to_number(payload.get("totalSpent"))
        filtered = (
            filter_by_time_frame(payload, time_frame)
            if isinstance(payload, dict)
            else payload
        )
        stats = process_analytics(filtered, lifetime_total)

        wallet = (stats.wallet if stats and stats.wallet else identifier)
        rank = await self._leaderboard.find_rank(wallet)
        tags_result = await self._store.get_tags(wallet)

        result = WalletSnapshotResult(
            stats=stats,
            data_source=source,
            leaderboard_rank=rank,
            tags=tags_result.data or [],
            request_id=request_id,
            fallback_reason=fallback_reason,
        )
        if session_key and request_id is not None:
            result.superseded = not self._sequencer.is_current(session_key, request_id)
            if result.superseded:
                logger.info(
                    f"Wallet lookup {identifier} (request {request_id}) superseded for session {session_key}"
                )
        return result

    def get_mock_stats(self, identifier: str) -> Optional[WalletStats]:
        identifier = (identifier or "").strip()
        if not identifier:
            raise ValidationError("Please enter a wallet address.")
        return process_analytics(self.build_mock_payload(identifier))
