"""Pydantic models for health endpoints."""

from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    """Response model for service health checks."""

    status: str = "healthy"
    environment: str = "development"
    store_configured: bool = False
    admin_password_set: bool = False
    mock_fallback_enabled: bool = True
