"""HTTP client for the oracle, talking to the messages proxy."""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from ..config.logging import get_logger
from ..config.settings import get_settings
from ..exceptions import OracleRequestError

logger = get_logger(__name__)


class OracleClient:
    """Posts conversation requests to ``{api_base_url}/api/claude/messages``."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.model = model or settings.oracle_model
        self.timeout_seconds = timeout_seconds or settings.oracle_timeout_seconds
        self.logger = logger.bind(component="oracle_client")

    @property
    def messages_url(self) -> str:
        return f"{self.base_url}/api/claude/messages"

    async def create_message(
        self, messages: List[Dict[str, Any]], max_tokens: int
    ) -> Dict[str, Any]:
        """
        Send one request and return the oracle's response body.

        Raises:
            OracleRequestError: On a non-2xx status or a transport failure
        """
        payload = {"model": self.model, "max_tokens": max_tokens, "messages": messages}
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        self.logger.info("Oracle request", messages=len(messages), max_tokens=max_tokens)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.messages_url, json=payload) as response:
                    if response.status != 200:
                        try:
                            error_data = await response.json()
                        except (aiohttp.ContentTypeError, ValueError):
                            error_data = {"error": "Unknown error"}
                        message = error_data.get("error") or f"HTTP error! status: {response.status}"
                        self.logger.warning(
                            "Oracle request failed", status=response.status, error=message
                        )
                        raise OracleRequestError(
                            message,
                            status=response.status,
                            details=error_data.get("details") or {},
                        )
                    return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.warning("Oracle unreachable", error=str(e))
            raise OracleRequestError("Failed to communicate with backend server") from e

    async def complete(self, messages: List[Dict[str, Any]], max_tokens: int) -> str:
        """Send a request and return the text of the assistant reply."""
        return response_text(await self.create_message(messages, max_tokens))

    async def check_backend_health(self) -> bool:
        """Whether the proxy answers its health check."""
        timeout = aiohttp.ClientTimeout(total=10)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(f"{self.base_url}/health") as response:
                    return response.status == 200
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.warning("Backend health check failed", error=str(e))
            return False


def response_text(response: Dict[str, Any]) -> str:
    """Concatenate the text blocks of a messages response."""
    blocks = response.get("content") or []
    return "".join(
        block.get("text", "") for block in blocks if block.get("type") == "text"
    )
