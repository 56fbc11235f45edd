"""Proxy endpoints for the Ollama chat service and the n8n memory webhook."""

from __future__ import annotations

import logging
from typing import Iterator

import requests
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from ..ai import AiSettings, auth_headers, build_chat_body, chat_url, upstream_error
from ..schemas.ai import ChatRequest, MemoryRequest

__all__ = ["router", "CHUNK_SIZE", "CONNECT_ERROR_MESSAGE"]

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])

CHUNK_SIZE = 1024
CONNECT_ERROR_MESSAGE = "Failed to connect to Ollama service. Is it running?"
STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def get_ai_settings(request: Request) -> AiSettings:
    return request.app.state.ai_settings


@router.get("/models")
def list_models(settings: AiSettings = Depends(get_ai_settings)):
    url = f"{settings.ollama_base_url.rstrip('/')}/api/tags"
    try:
        upstream = requests.get(url, headers=auth_headers(settings), timeout=settings.timeout_seconds)
    except requests.exceptions.ConnectionError:
        logger.error("Ollama is unreachable at %s", url)
        return JSONResponse(status_code=503, content={"error": CONNECT_ERROR_MESSAGE})
    except requests.RequestException:
        logger.exception("Error fetching available models from Ollama")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch available models"})

    if not upstream.ok:
        return JSONResponse(
            status_code=upstream.status_code,
            content={"error": "Failed to fetch models from Ollama"},
        )
    return Response(content=upstream.content, media_type="application/json")


def _relay(upstream) -> Iterator[bytes]:
    try:
        for chunk in upstream.iter_content(chunk_size=CHUNK_SIZE):
            if chunk:
                yield chunk
    finally:
        upstream.close()


@router.post("/chat")
def chat(body: ChatRequest, settings: AiSettings = Depends(get_ai_settings)):
    """Ollama(OpenAI 호환) 스트리밍 채팅 프록시."""
    url = chat_url(settings.ollama_base_url)
    payload = build_chat_body(
        settings,
        model=body.model,
        messages=[message.model_dump() for message in body.messages],
        temperature=body.temperature,
        max_tokens=body.max_tokens,
    )
    logger.info("Proxying chat request to %s using model %s", url, payload["model"])

    try:
        upstream = requests.post(
            url,
            json=payload,
            headers=auth_headers(settings),
            stream=True,
            timeout=settings.timeout_seconds,
        )
    except requests.exceptions.ConnectionError:
        logger.exception("Failed to connect to Ollama API")
        return JSONResponse(status_code=503, content={"error": CONNECT_ERROR_MESSAGE})
    except requests.RequestException as exc:
        logger.exception("Error proxying chat request to Ollama")
        return JSONResponse(status_code=500, content={"error": f"Internal server error: {exc}"})

    if not upstream.ok:
        text = upstream.text
        upstream.close()
        logger.error("Ollama API returned error %s: %s", upstream.status_code, text)
        # WWW-Authenticate is not forwarded so browsers never show a login prompt.
        return JSONResponse(status_code=upstream.status_code, content=upstream_error(text))

    return StreamingResponse(
        _relay(upstream), media_type="text/event-stream", headers=STREAM_HEADERS
    )


@router.post("/save-memory")
def save_memory(body: MemoryRequest, settings: AiSettings = Depends(get_ai_settings)):
    logger.info("Saving conversation to n8n memory at %s", settings.n8n_webhook_url)
    try:
        upstream = requests.post(
            settings.n8n_webhook_url,
            json=body.model_dump(by_alias=True),
            timeout=settings.memory_timeout_seconds,
        )
    except requests.RequestException:
        logger.warning("Failed to save to n8n memory (non-critical)", exc_info=True)
    else:
        if not upstream.ok:
            logger.warning("n8n webhook returned error: %s", upstream.status_code)
    return {"success": True}
