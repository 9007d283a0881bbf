"""Request models for the messages proxy."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MessagesRequest(BaseModel):
    """
    Body of ``POST /api/claude/messages``.

    Every field is optional at the schema level so that missing fields are
    reported with the proxy's own 400 message instead of a 422.
    """

    model: Optional[str] = Field(None, description="Oracle model identifier")
    max_tokens: Optional[int] = Field(None, description="Maximum tokens to generate")
    messages: Optional[List[Dict[str, Any]]] = Field(
        None, description="Conversation turns; content may embed base64 documents"
    )

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    def missing_fields(self) -> List[str]:
        return [
            name
            for name in ("model", "max_tokens", "messages")
            if not getattr(self, name)
        ]

    def upstream_payload(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": self.messages,
        }
