"""Configuration and request shaping for the Ollama / n8n proxy."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

__all__ = ["AiSettings", "chat_url", "build_chat_body", "upstream_error", "auth_headers"]

DEFAULT_TEMPERATURE = 0.5
DEFAULT_MAX_TOKENS = 400


@dataclass(slots=True)
class AiSettings:
    """Upstream endpoints for the AI proxy."""

    ollama_base_url: str = "http://localhost:11434"
    ollama_api_key: Optional[str] = None
    default_model: str = "llama3.1:8b"
    n8n_webhook_url: str = "http://localhost:5678/webhook/ai-suggest-agent"
    timeout_seconds: float = 300.0
    memory_timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls) -> "AiSettings":
        return cls(
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434"),
            ollama_api_key=os.getenv("OLLAMA_API_KEY") or None,
            default_model=os.getenv("OLLAMA_DEFAULT_MODEL", "llama3.1:8b"),
            n8n_webhook_url=os.getenv(
                "N8N_WEBHOOK_URL", "http://localhost:5678/webhook/ai-suggest-agent"
            ),
            timeout_seconds=float(os.getenv("OLLAMA_TIMEOUT_SECONDS", "300")),
        )


def chat_url(base_url: str) -> str:
    """Use a base that already names the chat endpoint as-is."""

    if "/api/chat" in base_url or "/v1/chat" in base_url:
        return base_url
    return f"{base_url.rstrip('/')}/api/chat/completions"


def auth_headers(settings: AiSettings) -> Dict[str, str]:
    if settings.ollama_api_key:
        return {"Authorization": f"Bearer {settings.ollama_api_key}"}
    return {}


def build_chat_body(
    settings: AiSettings,
    *,
    model: Optional[str],
    messages: list[dict[str, Any]],
    temperature: Optional[float],
    max_tokens: Optional[int],
) -> Dict[str, Any]:
    body = {
        "model": model or settings.default_model,
        "messages": messages,
        "stream": True,
        "temperature": DEFAULT_TEMPERATURE if temperature is None else temperature,
        "max_tokens": DEFAULT_MAX_TOKENS if max_tokens is None else max_tokens,
    }
    return {key: value for key, value in body.items() if value is not None}


def upstream_error(text: str) -> Any:
    """업스트림 오류 본문에서 detail/error 메시지를 추출."""
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        return {"error": f"Ollama API error: {text}"}
    if isinstance(parsed, dict):
        if "detail" in parsed:
            return {"error": parsed["detail"]}
        if "error" in parsed:
            return {"error": parsed["error"]}
    return parsed
