"""Keyword / filtered search API."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from sessionsearch import config
from sessionsearch.models import (
    AISearchRequest,
    FilterOptions,
    MessageView,
    SearchFilters,
    SearchResponse,
)
from sessionsearch.routers.deps import get_search_engine

search_router = APIRouter(prefix="/api/search", tags=["search"])


def _split_csv(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [item for item in raw.split(",") if item]


@search_router.get("", response_model=SearchResponse)
def search_messages(
    request: Request,
    q: str | None = None,
    users: str | None = None,
    projectNames: str | None = None,
    workingDirectories: str | None = None,
    dateFrom: str | None = None,
    dateTo: str | None = None,
):
    """Search messages by text and/or filters, newest first."""
    query = (q or "").strip()
    filters = SearchFilters(
        users=_split_csv(users),
        projectNames=_split_csv(projectNames),
        workingDirectories=_split_csv(workingDirectories),
        dateFrom=dateFrom or None,
        dateTo=dateTo or None,
    )
    if not query and filters.is_empty():
        return SearchResponse(results=[], total=0, query="", filters=filters)

    messages = get_search_engine(request).search_with_filters(query, filters)
    results = [MessageView.from_message(m) for m in messages]
    return SearchResponse(results=results, total=len(results), query=query, filters=filters)


@search_router.get("/filters", response_model=FilterOptions)
def filter_options(request: Request):
    """Users, projects, working directories and dates present in the corpus."""
    return get_search_engine(request).available_filters()


@search_router.get("/suggestions", response_model=SearchResponse)
def suggestions(request: Request, q: str | None = None, limit: int | None = None):
    """Top keyword matches for type-ahead."""
    query = (q or "").strip()
    if len(query) < config.SUGGESTION_MIN_QUERY_LENGTH:
        return SearchResponse(results=[], total=0, query=query)
    size = limit if limit and limit > 0 else config.SUGGESTION_DEFAULT_LIMIT
    messages = get_search_engine(request).suggestions(query, size)
    results = [MessageView.from_message(m) for m in messages]
    return SearchResponse(results=results, total=len(results), query=query)


@search_router.post("/ai", response_model=SearchResponse)
def ai_search(request: Request, payload: AISearchRequest):
    """Keyword search behind the assistant search box."""
    query = payload.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Query is required")
    messages = get_search_engine(request).search(query)
    if payload.limit:
        messages = messages[: payload.limit]
    results = [MessageView.from_message(m) for m in messages]
    return SearchResponse(results=results, total=len(results), query=query, searchMode="ai")
