"""Session listing and detail API."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from sessionsearch.models import (
    MessageView,
    SessionDetailResponse,
    SessionListResponse,
    SessionView,
)
from sessionsearch.routers.deps import get_search_engine

sessions_router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@sessions_router.get("", response_model=SessionListResponse)
def list_sessions(request: Request):
    sessions = [SessionView.from_session(s) for s in get_search_engine(request).all_sessions()]
    return SessionListResponse(sessions=sessions, total=len(sessions))


@sessions_router.get("/{session_id}", response_model=SessionDetailResponse)
def get_session(request: Request, session_id: str):
    """Session detail with its messages in sequence order."""
    engine = get_search_engine(request)
    session = engine.session_by_id(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    messages = [MessageView.from_message(m) for m in engine.session_messages(session_id)]
    return SessionDetailResponse(
        session=SessionView.from_session(session),
        messages=messages,
        messageCount=len(messages),
    )
