"""Forwarding of proxied requests to the oracle API."""

from typing import Any, Dict

import aiohttp

from ..config.logging import get_logger
from ..config.settings import Settings
from .exceptions import InternalProxyError, UpstreamError

logger = get_logger(__name__)


async def forward_messages(payload: Dict[str, Any], settings: Settings) -> Dict[str, Any]:
    """
    Send a messages request to the oracle and return its JSON body verbatim.

    Raises:
        UpstreamError: If the oracle answers with an error status
        InternalProxyError: If the oracle cannot be reached
    """
    headers = {
        "x-api-key": settings.anthropic_api_key or "",
        "anthropic-version": settings.anthropic_version,
        "content-type": "application/json",
    }
    timeout = aiohttp.ClientTimeout(total=settings.oracle_timeout_seconds)

    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(
                settings.anthropic_api_url, json=payload, headers=headers
            ) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = {"error": {"message": await response.text()}}

                if response.status >= 400:
                    error = body.get("error") if isinstance(body, dict) else None
                    if not isinstance(error, dict):
                        error = {"message": str(error)} if error else {}
                    raise UpstreamError(response.status, error.get("message"), error)

                logger.debug(
                    "Oracle response received",
                    status=response.status,
                    model=payload.get("model"),
                )
                return body
    except aiohttp.ClientError as e:
        logger.error("Oracle API unreachable", error=str(e))
        raise InternalProxyError(str(e)) from e
