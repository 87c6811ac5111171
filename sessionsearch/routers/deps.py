"""Shared accessors for objects the application lifespan puts on ``app.state``."""
from __future__ import annotations

from fastapi import HTTPException, Request

from sessionsearch.entity_store import StoreManager
from sessionsearch.services.completion import CompletionClient
from sessionsearch.services.search import SearchEngine


def get_store_manager(request: Request) -> StoreManager:
    manager = getattr(request.app.state, "store_manager", None)
    if manager is None:
        raise HTTPException(status_code=503, detail="Entity store not initialized")
    return manager


def get_search_engine(request: Request) -> SearchEngine:
    # One snapshot per request.
    return SearchEngine(get_store_manager(request).store)


def get_completion_client(request: Request) -> CompletionClient:
    client = getattr(request.app.state, "completion_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="AI service not initialized")
    return client
