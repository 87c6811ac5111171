"""Immutable corpus snapshots and the manager that swaps them on reload."""
from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError

from sessionsearch.models import Engineer, Message, Session, StoreStatus
from sessionsearch.observability import record_load, record_load_failure, start_span
from sessionsearch.parsers.exports import ExportParseError, load_export_file

logger = logging.getLogger("sessionsearch.store")


@dataclass(frozen=True)
class EntityStore:
    """One fully built corpus. Never mutated after construction."""

    sessions: tuple[Session, ...] = ()
    messages: tuple[Message, ...] = ()
    engineers: tuple[Engineer, ...] = ()
    sources_loaded: tuple[str, ...] = ()
    sources_skipped: tuple[str, ...] = ()
    generation: int = 0
    trigger: str = ""
    loaded_at: str = ""
    _sessions_by_id: dict[str, Session] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def build(
        cls,
        sessions: Iterable[Session],
        messages: Iterable[Message],
        *,
        engineers: Iterable[Engineer] = (),
        sources_loaded: Iterable[str] = (),
        sources_skipped: Iterable[str] = (),
        generation: int = 0,
        trigger: str = "",
    ) -> "EntityStore":
        session_tuple = tuple(sessions)
        by_id: dict[str, Session] = {}
        for session in session_tuple:
            by_id.setdefault(session.id, session)
        return cls(
            sessions=session_tuple,
            messages=tuple(messages),
            engineers=tuple(engineers),
            sources_loaded=tuple(sources_loaded),
            sources_skipped=tuple(sources_skipped),
            generation=generation,
            trigger=trigger,
            loaded_at=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            _sessions_by_id=by_id,
        )

    def get_session(self, session_id: str) -> Optional[Session]:
        return self._sessions_by_id.get(session_id)

    def status(self) -> StoreStatus:
        return StoreStatus(
            generation=self.generation,
            loadedAt=self.loaded_at or None,
            trigger=self.trigger,
            sourcesLoaded=list(self.sources_loaded),
            sourcesSkipped=list(self.sources_skipped),
            totalSessions=len(self.sessions),
            totalMessages=len(self.messages),
        )


def build_store(
    data_dir: Path,
    files: Iterable[str],
    *,
    generation: int = 0,
    trigger: str = "load",
) -> EntityStore:
    """Read every export in order. Bad documents are skipped whole."""
    sessions: list[Session] = []
    messages: list[Message] = []
    engineers: list[Engineer] = []
    loaded: list[str] = []
    skipped: list[str] = []

    for name in files:
        path = data_dir / name
        if not path.exists():
            logger.warning("File not found: %s", path)
            record_load_failure(name, reason="missing")
            skipped.append(name)
            continue
        try:
            parsed = load_export_file(path)
        except (OSError, json.JSONDecodeError, ExportParseError, ValidationError) as exc:
            logger.warning("Error loading %s: %s", name, exc)
            record_load_failure(name, reason="invalid")
            skipped.append(name)
            continue
        sessions.extend(parsed.sessions)
        messages.extend(parsed.messages)
        if parsed.engineer is not None:
            engineers.append(parsed.engineer)
        loaded.append(name)

    return EntityStore.build(
        sessions,
        messages,
        engineers=engineers,
        sources_loaded=loaded,
        sources_skipped=skipped,
        generation=generation,
        trigger=trigger,
    )


class StoreManager:
    """Owns the current snapshot.

    Readers take ``manager.store`` once per request and keep using that
    object; ``load``/``reload`` build a complete replacement before swapping
    the single reference, so a reader never sees a partially built corpus.
    """

    def __init__(self, data_dir: Path, files: Iterable[str]):
        self.data_dir = Path(data_dir)
        self.files = list(files)
        self._store = EntityStore()
        self._rebuild_lock = threading.Lock()

    @property
    def store(self) -> EntityStore:
        return self._store

    @property
    def is_loaded(self) -> bool:
        return self._store.generation > 0

    def load(self) -> EntityStore:
        return self._rebuild("load")

    def reload(self, trigger: str = "api") -> EntityStore:
        return self._rebuild(trigger)

    def _rebuild(self, trigger: str) -> EntityStore:
        with self._rebuild_lock:
            started = time.perf_counter()
            with start_span("store.rebuild", {"trigger": trigger, "files": len(self.files)}):
                store = build_store(
                    self.data_dir,
                    self.files,
                    generation=self._store.generation + 1,
                    trigger=trigger,
                )
            self._store = store
            duration_ms = (time.perf_counter() - started) * 1000
        record_load(
            "partial" if store.sources_skipped else "ok",
            duration_ms,
            documents=len(store.sources_loaded),
        )
        logger.info(
            "Loaded %d sessions and %d messages from %d/%d sources (trigger=%s, generation=%d)",
            len(store.sessions),
            len(store.messages),
            len(store.sources_loaded),
            len(self.files),
            trigger,
            store.generation,
        )
        return store
