"""Response models for the messages proxy."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_serializer


class HealthResponse(BaseModel):
    """Basic liveness answer of ``GET /health``."""

    status: str = Field("ok", description="Always 'ok' while the server runs")
    message: str = Field("Backend server is running", description="Human readable status")


class ProbeResponse(BaseModel):
    """Liveness/readiness probe answer."""

    status: str = Field(..., description="alive, ready or not_ready")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    uptime_seconds: Optional[float] = Field(None, description="Application uptime in seconds")
    reason: Optional[str] = Field(None, description="Why the service is not ready")
    services: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    @field_serializer("timestamp")
    def serialize_timestamp(self, dt: datetime) -> str:
        return dt.isoformat()


class ErrorResponse(BaseModel):
    """Error body returned by the proxy for local failures."""

    error: str = Field(..., description="Error summary")
    message: Optional[str] = Field(None, description="Underlying error message")


class UpstreamErrorResponse(BaseModel):
    """Error body mirroring a failed oracle call."""

    status: int = Field(..., description="HTTP status returned by the oracle")
    error: str = Field(..., description="Oracle error message")
    details: Dict[str, Any] = Field(default_factory=dict, description="Oracle error object")
