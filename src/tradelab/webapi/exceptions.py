"""Proxy exception classes and error handlers."""

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from ..config.logging import get_logger
from .models.responses import ErrorResponse, UpstreamErrorResponse

logger = get_logger(__name__)


class ProxyException(Exception):
    """Base exception for the messages proxy."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def body(self) -> Dict[str, Any]:
        return ErrorResponse(error=self.message).model_dump(exclude_none=True)


class MissingFieldsError(ProxyException):
    """The request body lacks model, max_tokens or messages."""

    def __init__(self):
        super().__init__("Missing required fields: model, max_tokens, or messages", 400)


class MissingCredentialError(ProxyException):
    """The oracle API key is not set on the server."""

    def __init__(self):
        super().__init__("Anthropic API key not configured on server", 500)


class UpstreamError(ProxyException):
    """The oracle answered with an error status."""

    def __init__(
        self,
        status_code: int,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message or "Error from Anthropic API", status_code)
        self.details = details or {}

    def body(self) -> Dict[str, Any]:
        return UpstreamErrorResponse(
            status=self.status_code, error=self.message, details=self.details
        ).model_dump()


class InternalProxyError(ProxyException):
    """Any other failure while forwarding a request."""

    def __init__(self, message: Optional[str] = None):
        super().__init__("Internal server error", 500)
        self.detail_message = message or "Unknown error occurred"

    def body(self) -> Dict[str, Any]:
        return ErrorResponse(error=self.message, message=self.detail_message).model_dump()


async def proxy_exception_handler(request: Request, exc: ProxyException) -> JSONResponse:
    """Handle proxy exceptions."""
    request_id = getattr(request.state, "request_id", None)

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Proxy request failed",
        exception_type=type(exc).__name__,
        message=exc.message,
        status_code=exc.status_code,
        request_id=request_id,
        path=request.url.path,
    )

    return JSONResponse(status_code=exc.status_code, content=exc.body())


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    request_id = getattr(request.state, "request_id", None)

    logger.error(
        "Unexpected exception occurred",
        exception_type=type(exc).__name__,
        message=str(exc),
        request_id=request_id,
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )

    error_response = ErrorResponse(
        error="Internal server error",
        message=str(exc) or "Unknown error occurred",
    )
    return JSONResponse(status_code=500, content=error_response.model_dump())


def setup_exception_handlers(app):
    """Register exception handlers with FastAPI app."""
    app.add_exception_handler(ProxyException, proxy_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Exception handlers registered")
