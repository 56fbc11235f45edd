"""AI proxy request bodies."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field

from .common import ApiModel

__all__ = ["ChatMessage", "ChatRequest", "MemoryRequest"]


class ChatMessage(ApiModel):
    role: str
    content: str = ""


class ChatRequest(ApiModel):
    model: Optional[str] = None
    messages: List[ChatMessage] = Field(default_factory=list)
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


class MemoryRequest(ApiModel):
    context: str = ""
    response: str = ""
    session_id: str = ""
    save_to_memory: bool = True
    field: str = ""
    previous_values: Optional[Dict[str, str]] = None
