"""Data directory watcher using watchfiles.

Rebuilds the entity store whenever one of the configured export files is
added, modified or deleted.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable, Optional

from watchfiles import Change, awatch

from sessionsearch.entity_store import StoreManager

logger = logging.getLogger("sessionsearch.watcher")


class FileWatcher:
    """Background watcher that triggers a full store reload on change."""

    def __init__(self):
        self._task: Optional[asyncio.Task] = None
        self._running = False

    async def start(self, manager: StoreManager) -> None:
        if self._running:
            logger.warning("File watcher already running")
            return
        if not manager.data_dir.exists():
            logger.warning("Data directory %s does not exist, watcher not started", manager.data_dir)
            return

        self._running = True
        self._task = asyncio.create_task(self._watch_loop(manager))
        logger.info("File watcher started for %s", manager.data_dir)

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("File watcher stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    async def _watch_loop(self, manager: StoreManager) -> None:
        try:
            async for changes in awatch(manager.data_dir):
                if not self._running:
                    break
                relevant = relevant_changes(changes, manager.files)
                if not relevant:
                    continue
                logger.info("Detected %d data file changes, reloading...", len(relevant))
                try:
                    await asyncio.to_thread(manager.reload, "watcher")
                except Exception as exc:  # noqa: BLE001
                    logger.error("Error reloading entity store: %s", exc)
        except asyncio.CancelledError:
            logger.info("File watcher task cancelled")
        except Exception as exc:  # noqa: BLE001
            logger.error("File watcher error: %s", exc)
        finally:
            self._running = False


def relevant_changes(
    changes: Iterable[tuple[Change, str]],
    watched_files: Iterable[str],
) -> list[tuple[str, Path]]:
    """Keep only changes to configured export files, as (change_type, path)."""
    names = set(watched_files)
    result = []
    for change_type, path_str in changes:
        path = Path(path_str)
        if path.name not in names:
            continue
        if change_type == Change.deleted:
            result.append(("deleted", path))
        elif change_type in (Change.modified, Change.added):
            result.append(("modified", path))
    return result


# Singleton instance
file_watcher = FileWatcher()
