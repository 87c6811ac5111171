"""Session search FastAPI backend: main application entry point."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sessionsearch import config
from sessionsearch.entity_store import StoreManager
from sessionsearch.file_watcher import file_watcher
from sessionsearch.observability import initialize as initialize_observability, shutdown as shutdown_observability
from sessionsearch.routers.ai import ai_router
from sessionsearch.routers.data import data_router
from sessionsearch.routers.search import search_router
from sessionsearch.routers.sessions import sessions_router
from sessionsearch.services.completion import CompletionClient
from sessionsearch.services.prompting import load_system_prompt

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("sessionsearch")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info("Session search backend starting up")
    initialize_observability(app)

    # 1. Build the first corpus snapshot
    manager = StoreManager(config.DATA_DIR, config.DATA_FILES)
    await asyncio.to_thread(manager.load)
    app.state.store_manager = manager

    # 2. Completion client and system prompt
    app.state.completion_client = CompletionClient()
    app.state.system_prompt = load_system_prompt(config.SYSTEM_PROMPT_PATH)

    # 3. Reload on data file changes
    if config.WATCH_ENABLED:
        await file_watcher.start(manager)

    yield

    logger.info("Session search backend shutting down")
    await file_watcher.stop()
    shutdown_observability(app)


app = FastAPI(
    title="Session Search API",
    description="Search and assistant API over AI coding assistant session exports",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        config.FRONTEND_ORIGIN,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(search_router)
app.include_router(sessions_router)
app.include_router(ai_router)
app.include_router(data_router)


@app.get("/api/health")
def health():
    """Health check endpoint."""
    manager = getattr(app.state, "store_manager", None)
    return {
        "status": "ok",
        "store": "loaded" if manager is not None and manager.is_loaded else "empty",
        "watcher": "running" if file_watcher.is_running else "stopped",
    }
