import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from gachadash.config import Settings
from gachadash.core.exceptions import (
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
)
from gachadash.schemas.common import ErrorCode
from gachadash.schemas.wallet import DataSource, TimeFrame
from gachadash.services.gacha_client import GachaAPIError
from gachadash.services.profile_store import StoreResult
from gachadash.services.wallet_service import WalletService
from gachadash.utils.date_utils import to_iso
from gachadash.utils.sequencer import RequestSequencer

WALLET = "0xfc006b59d81504832cfa4f3d40be17224663d4e9"


@pytest.fixture
def settings():
    return Settings(_env_file=None, MOCK_TRANSACTION_COUNT=10)


@pytest.fixture
def mock_client():
    client = Mock()
    client.fetch_pack_purchases = AsyncMock()
    return client


@pytest.fixture
def mock_leaderboard():
    leaderboard = Mock()
    leaderboard.find_rank = AsyncMock(return_value=4)
    return leaderboard


@pytest.fixture
def mock_store():
    store = Mock()
    store.get_tags = AsyncMock(return_value=StoreResult(data=["Whale"]))
    return store


@pytest.fixture
def sequencer():
    return RequestSequencer()


@pytest.fixture
def wallet_service(settings, mock_client, mock_leaderboard, mock_store, sequencer):
    return WalletService(settings, mock_client, mock_leaderboard, mock_store, sequencer)


def _legacy_payload():
    now = datetime.now(timezone.utc)
    return {
        "wallet": WALLET,
        "totalSpent": 300,
        "totalPacks": 3,
        "packBreakdown": [
            {"packName": "Starter Pack", "packAmount": 30, "count": 2},
            {"packName": "Pokémon Master Pack", "packAmount": 250, "count": 1},
        ],
        "transactions": [
            {"packName": "Starter Pack", "packAmount": 30, "loggedAt": to_iso(now - timedelta(days=1))},
            {"packName": "Starter Pack", "packAmount": 30, "loggedAt": to_iso(now - timedelta(days=3))},
            {"packName": "Pokémon Master Pack", "packAmount": 250, "loggedAt": to_iso(now - timedelta(days=60))},
        ],
    }


def test_api_payload_is_enriched(wallet_service, mock_client):
    mock_client.fetch_pack_purchases.return_value = _legacy_payload()

    result = asyncio.run(wallet_service.get_wallet_stats(WALLET))

    assert result.data_source == DataSource.API
    assert result.stats.totalSpent == 300
    assert result.stats.tier == "Minnow"
    assert result.leaderboard_rank == 4
    assert result.tags == ["Whale"]
    assert result.fallback_reason is None
    assert result.meta["dataSource"] == "api"


def test_identifier_is_required(wallet_service):
    with pytest.raises(ValidationError):
        asyncio.run(wallet_service.get_wallet_stats("   "))


def test_upstream_failure_falls_back_to_mock(wallet_service, mock_client):
    mock_client.fetch_pack_purchases.side_effect = GachaAPIError(
        502, ErrorCode.UPSTREAM_ERROR, "API Error: 401 Unauthorized"
    )

    result = asyncio.run(wallet_service.get_wallet_stats(WALLET))

    assert result.data_source == DataSource.MOCK
    assert result.fallback_reason == "API Error: 401 Unauthorized"
    assert result.stats.wallet == WALLET
    assert result.stats.totalPacks == 10


def test_upstream_failure_without_fallback_raises(
    mock_client, mock_leaderboard, mock_store, sequencer
):
    settings = Settings(_env_file=None, MOCK_FALLBACK_ENABLED=False)
    service = WalletService(settings, mock_client, mock_leaderboard, mock_store, sequencer)
    mock_client.fetch_pack_purchases.side_effect = GachaAPIError(
        502, ErrorCode.UPSTREAM_ERROR, "API Error: 500 Internal Server Error"
    )

    with pytest.raises(UpstreamError):
        asyncio.run(service.get_wallet_stats(WALLET))

    mock_client.fetch_pack_purchases.side_effect = GachaAPIError(
        504, ErrorCode.UPSTREAM_TIMEOUT, "Request timeout - please try again"
    )

    with pytest.raises(UpstreamTimeoutError):
        asyncio.run(service.get_wallet_stats(WALLET))


def test_time_frame_keeps_lifetime_tier(wallet_service, mock_client):
    mock_client.fetch_pack_purchases.return_value = _legacy_payload()

    result = asyncio.run(
        wallet_service.get_wallet_stats(WALLET, time_frame=TimeFrame.LAST_7_DAYS)
    )

    assert result.stats.totalSpent == 60
    assert result.stats.totalPacks == 2
    assert [s.name for s in result.stats.pieData] == ["Starter Pack"]
    assert result.stats.tier == "Minnow"


def test_unrecognised_payload_yields_no_stats(wallet_service, mock_client):
    mock_client.fetch_pack_purchases.return_value = "not a wallet"

    result = asyncio.run(wallet_service.get_wallet_stats(WALLET))

    assert result.stats is None
    assert result.data_source == DataSource.API


def test_overlapping_lookup_is_superseded(wallet_service, mock_client, sequencer):
    payload = _legacy_payload()

    def newer_search_starts(identifier, paging):
        sequencer.begin("session-1")
        return payload

    mock_client.fetch_pack_purchases.side_effect = newer_search_starts

    stale = asyncio.run(wallet_service.get_wallet_stats(WALLET, session_key="session-1"))

    mock_client.fetch_pack_purchases.side_effect = None
    mock_client.fetch_pack_purchases.return_value = payload
    fresh = asyncio.run(wallet_service.get_wallet_stats(WALLET, session_key="session-1"))

    assert stale.request_id == 1
    assert stale.superseded is True
    assert fresh.request_id == 3
    assert fresh.superseded is False


def test_sessions_are_sequenced_independently(wallet_service, mock_client):
    mock_client.fetch_pack_purchases.return_value = _legacy_payload()

    a = asyncio.run(wallet_service.get_wallet_stats(WALLET, session_key="a"))
    b = asyncio.run(wallet_service.get_wallet_stats(WALLET, session_key="b"))

    assert (a.request_id, b.request_id) == (1, 1)
    assert not a.superseded and not b.superseded


def test_mock_stats(wallet_service):
    stats = wallet_service.get_mock_stats(WALLET)

    assert stats.wallet == WALLET
    assert stats.totalPacks == 10
