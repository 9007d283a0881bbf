"""API Models package for request/response schemas."""

from .requests import MessagesRequest
from .responses import (
    ErrorResponse,
    HealthResponse,
    ProbeResponse,
    UpstreamErrorResponse,
)

__all__ = [
    # Response models
    "ErrorResponse",
    "HealthResponse",
    "ProbeResponse",
    "UpstreamErrorResponse",
    # Request models
    "MessagesRequest",
]
