from fastapi import Request

from gachadash.services.leaderboard_service import LeaderboardService
from gachadash.services.profile_store import ProfileStore
from gachadash.services.report_service import ReportService
from gachadash.services.wallet_service import WalletService


def get_wallet_service(request: Request) -> WalletService:
    return request.app.container.services.wallet_service()


def get_leaderboard_service(request: Request) -> LeaderboardService:
    return request.app.container.services.leaderboard_service()


def get_report_service(request: Request) -> ReportService:
    return request.app.container.services.report_service()


def get_profile_store(request: Request) -> ProfileStore:
    return request.app.container.clients.profile_store()


def get_session_key(request: Request) -> str:
    """Client session used to order overlapping wallet searches"""
    session_id = request.headers.get("x-session-id")
    if session_id:
        return session_id
    return request.client.host if request.client else "anonymous"
