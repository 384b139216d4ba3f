from fastapi import APIRouter

from gachadash.config import settings
from gachadash.schemas.health import HealthCheckResponse

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint."""

    return HealthCheckResponse(
        environment=settings.ENVIRONMENT,
        store_configured=settings.supabase_configured,
        admin_password_set=bool(settings.ADMIN_PASSWORD),
        mock_fallback_enabled=settings.MOCK_FALLBACK_ENABLED,
    )
