"""Entity store status and explicit reload."""
from __future__ import annotations

import asyncio

from fastapi import APIRouter, Request

from sessionsearch.models import StoreStatus
from sessionsearch.routers.deps import get_store_manager

data_router = APIRouter(prefix="/api/data", tags=["data"])


@data_router.get("/status", response_model=StoreStatus)
def store_status(request: Request):
    return get_store_manager(request).store.status()


@data_router.post("/reload", response_model=StoreStatus)
async def reload_store(request: Request):
    """Rebuild the corpus from disk and swap it in."""
    manager = get_store_manager(request)
    store = await asyncio.to_thread(manager.reload, "api")
    return store.status()
