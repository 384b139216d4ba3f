import pytest
from fastapi.testclient import TestClient

from gachadash.core.exceptions import UpstreamError
from gachadash.deps import (
    get_leaderboard_service,
    get_report_service,
    get_wallet_service,
)
from gachadash.main import app
from gachadash.schemas.common import ErrorCode
from gachadash.schemas.wallet import DataSource
from gachadash.services.analytics import process_analytics
from gachadash.services.gacha_client import GachaAPIError
from gachadash.services.wallet_service import WalletSnapshotResult

WALLET = "0xabc"


@pytest.fixture(autouse=True)
def clear_overrides():
    app.dependency_overrides.clear()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


def _stats():
    return process_analytics(
        {
            "wallet": WALLET,
            "totalSpent": 60,
            "totalPacks": 2,
            "packBreakdown": [
                {"packName": "Starter Pack", "packAmount": 30, "count": 2, "totalSpent": 60}
            ],
            "transactions": [],
        }
    )


class _StubWalletService:
    def __init__(self):
        self.calls = []

    async def get_wallet_stats(self, identifier, time_frame, paging, session_key):
        self.calls.append((identifier, time_frame, paging, session_key))
        return WalletSnapshotResult(
            stats=_stats(),
            data_source=DataSource.MOCK,
            leaderboard_rank=12,
            tags=["Whale"],
            request_id=1,
            fallback_reason="API Error: 401 Unauthorized",
        )

    def get_mock_stats(self, identifier):
        return _stats()


def test_get_wallet_stats_success(client):
    stub = _StubWalletService()
    app.dependency_overrides[get_wallet_service] = lambda: stub

    response = client.get(
        f"/api/v1/wallets/{WALLET}?timeFrame=30d&transactionsPage=2&transactionsLimit=10",
        headers={"X-Session-Id": "tab-1"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["wallet"] == WALLET
    assert body["data"]["totalSpent"] == 60
    assert body["data"]["pieData"][0]["name"] == "Starter Pack"
    assert body["meta"]["dataSource"] == "mock"
    assert body["meta"]["leaderboardRank"] == 12
    assert body["meta"]["tags"] == ["Whale"]
    assert body["meta"]["timeFrame"] == "30d"
    assert body["meta"]["superseded"] is False

    identifier, time_frame, paging, session_key = stub.calls[0]
    assert identifier == WALLET
    assert time_frame.value == "30d"
    assert paging.transactions_page == 2
    assert paging.transactions_limit == 10
    assert session_key == "tab-1"


def test_get_wallet_stats_blank_identifier(client):
    app.dependency_overrides[get_wallet_service] = lambda: _StubWalletService()

    response = client.get("/api/v1/wallets/%20%20")

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == ErrorCode.WALLET_REQUIRED.value


def test_get_wallet_stats_invalid_time_frame(client):
    app.dependency_overrides[get_wallet_service] = lambda: _StubWalletService()

    response = client.get(f"/api/v1/wallets/{WALLET}?timeFrame=1y")

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_001"


def test_get_wallet_stats_upstream_error(client):
    class _FailingService:
        async def get_wallet_stats(self, *args, **kwargs):
            raise UpstreamError("API Error: 500 Internal Server Error")

    app.dependency_overrides[get_wallet_service] = lambda: _FailingService()

    response = client.get(f"/api/v1/wallets/{WALLET}")

    assert response.status_code == 502
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "UPSTREAM_001"
    assert body["error"]["message"] == "API Error: 500 Internal Server Error"


def test_get_mock_wallet_stats(client):
    app.dependency_overrides[get_wallet_service] = lambda: _StubWalletService()

    response = client.get(f"/api/v1/wallets/{WALLET}/mock")

    assert response.status_code == 200
    body = response.json()
    assert body["meta"]["dataSource"] == "mock"
    assert body["data"]["totalPacks"] == 2


class _StubLeaderboardService:
    async def get_top(self, leaderboard_type):
        return [{"wallet": "0x1", "rank": 1}, {"wallet": "0x2", "rank": 2}]


def test_get_leaderboard(client):
    app.dependency_overrides[get_leaderboard_service] = lambda: _StubLeaderboardService()

    response = client.get("/api/v1/leaderboard/weekly")

    assert response.status_code == 200
    body = response.json()
    assert body["data"]["type"] == "weekly"
    assert len(body["data"]["entries"]) == 2
    assert body["meta"]["count"] == 2


def test_get_leaderboard_invalid_type(client):
    app.dependency_overrides[get_leaderboard_service] = lambda: _StubLeaderboardService()

    response = client.get("/api/v1/leaderboard/monthly")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == ErrorCode.INVALID_PARAMS.value


def test_get_report_timeout(client):
    class _TimeoutReportService:
        async def get_report(self):
            raise GachaAPIError(
                status_code=504,
                error_code=ErrorCode.UPSTREAM_TIMEOUT,
                message="Request timeout after 30s - The API may be slow or unavailable. Please try again.",
            )

    app.dependency_overrides[get_report_service] = lambda: _TimeoutReportService()

    response = client.get("/api/v1/report")

    assert response.status_code == 504
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == ErrorCode.UPSTREAM_TIMEOUT.value


def test_get_report(client):
    class _StubReportService:
        async def get_report(self):
            return {"today": {"packs": 3}, "allTime": {"packs": 300}}

    app.dependency_overrides[get_report_service] = lambda: _StubReportService()

    response = client.get("/api/v1/report")

    assert response.status_code == 200
    assert response.json()["data"]["allTime"]["packs"] == 300


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
