"""FastAPI application proxying oracle message requests."""

import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ..config.logging import get_logger
from ..config.settings import Settings, get_settings
from .exceptions import (
    InternalProxyError,
    MissingCredentialError,
    MissingFieldsError,
    ProxyException,
    setup_exception_handlers,
)
from .health import router as health_router
from .models.requests import MessagesRequest
from .upstream import forward_messages

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "Starting TradeLab proxy",
        port=settings.endpoint_port,
        allowed_origin=settings.frontend_url,
    )
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY not set in environment variables")

    yield

    logger.info("Shutting down TradeLab proxy")


async def add_request_id_middleware(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    # Log request start
    logger.info(
        "Request started",
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        remote_addr=request.client.host if request.client else None,
    )

    response = await call_next(request)

    # Add request ID to response headers
    response.headers["X-Request-ID"] = request_id

    # Log request completion
    logger.info(
        "Request completed",
        request_id=request_id,
        status_code=response.status_code,
        method=request.method,
        path=request.url.path,
    )

    return response


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="TradeLab Oracle Proxy",
        description="Pass-through proxy that keeps the oracle API key on the server.",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Add middleware for request tracking
    app.middleware("http")(add_request_id_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    app.include_router(health_router, tags=["Health & Status"])

    @app.post("/api/claude/messages", summary="Proxy a messages request to the oracle")
    async def proxy_messages(
        body: MessagesRequest,
        settings: Settings = Depends(get_settings),
    ) -> Dict[str, Any]:
        """Forward ``{model, max_tokens, messages}`` and return the oracle response verbatim."""
        if body.missing_fields():
            raise MissingFieldsError()

        if not settings.anthropic_api_key:
            raise MissingCredentialError()

        try:
            return await forward_messages(body.upstream_payload(), settings)
        except ProxyException:
            raise
        except Exception as e:
            logger.error("Error calling Anthropic API", error=str(e), exc_info=True)
            raise InternalProxyError(str(e)) from e

    return app
