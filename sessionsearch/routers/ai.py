"""Assistant chat API: intent -> context -> completion."""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from sessionsearch import config
from sessionsearch.models import AIStatus, ChatRequest, ChatResponse
from sessionsearch.observability import start_span
from sessionsearch.routers.deps import get_completion_client, get_search_engine
from sessionsearch.services.completion import (
    CompletionError,
    CompletionOptions,
    CompletionUnavailableError,
)
from sessionsearch.services.context_builder import ContextBuilder
from sessionsearch.services.prompting import compose_prompt, load_system_prompt

logger = logging.getLogger("sessionsearch.ai")

ai_router = APIRouter(prefix="/api/ai", tags=["ai"])


def _system_prompt(request: Request) -> str:
    prompt = getattr(request.app.state, "system_prompt", None)
    if prompt:
        return prompt
    return load_system_prompt(config.SYSTEM_PROMPT_PATH)


def _sse(payload: str) -> str:
    return f"data: {payload}\n\n"


@ai_router.post("/chat")
async def chat(request: Request, payload: ChatRequest):
    message = payload.message.strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message is required")

    client = get_completion_client(request)
    if not client.is_available():
        raise HTTPException(
            status_code=503,
            detail="AI service is not available. Please check your API key.",
        )

    with start_span("ai.build_context"):
        intent, context = ContextBuilder(get_search_engine(request)).build_for_message(message)
    logger.info("Chat intent: type=%s value=%s rule=%s", intent.type, intent.value, intent.rule)

    prompt = compose_prompt(_system_prompt(request), context, message)
    options = CompletionOptions.from_overrides(
        model=payload.model,
        temperature=payload.temperature,
        max_tokens=payload.max_tokens,
        top_p=payload.top_p,
        stop=payload.stop,
    )

    if payload.stream:
        async def _events():
            try:
                async for chunk in client.stream(prompt, options):
                    yield _sse(json.dumps({"content": chunk}))
            except (CompletionError, CompletionUnavailableError) as exc:
                yield _sse(json.dumps({"error": str(exc)}))
            yield _sse("[DONE]")

        return StreamingResponse(
            _events(),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    try:
        response = await client.complete(prompt, options)
    except CompletionUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    except CompletionError as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    return ChatResponse(
        message=message,
        response=response,
        intent=intent,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )


@ai_router.get("/status", response_model=AIStatus)
def status(request: Request):
    available = get_completion_client(request).is_available()
    return AIStatus(
        available=available,
        message="AI service is ready" if available else "AI service is not available. Please check your API key.",
    )
