import asyncio
import unittest
from pathlib import Path
from unittest.mock import patch

from watchfiles import Change

from sessionsearch import file_watcher as watcher_module
from sessionsearch.file_watcher import FileWatcher, relevant_changes
from sessionsearch.entity_store import StoreManager
from sessionsearch.tests.fixtures import FIXTURE_FILES, CorpusTestCase


class RelevantChangesTests(unittest.TestCase):
    def test_only_configured_files_are_kept(self) -> None:
        changes = {
            (Change.modified, "/data/andrewwang.json"),
            (Change.added, "/data/notes.txt"),
            (Change.modified, "/data/andrewwang.json.swp"),
        }
        self.assertEqual(
            relevant_changes(changes, FIXTURE_FILES),
            [("modified", Path("/data/andrewwang.json"))],
        )

    def test_change_types(self) -> None:
        deleted = relevant_changes([(Change.deleted, "/data/dianalu.json")], FIXTURE_FILES)
        added = relevant_changes([(Change.added, "/data/dianalu.json")], FIXTURE_FILES)
        self.assertEqual(deleted, [("deleted", Path("/data/dianalu.json"))])
        self.assertEqual(added, [("modified", Path("/data/dianalu.json"))])


class FileWatcherTests(CorpusTestCase, unittest.IsolatedAsyncioTestCase):
    async def test_missing_directory_does_not_start(self) -> None:
        watcher = FileWatcher()
        manager = StoreManager(self.data_dir / "missing", FIXTURE_FILES)
        with self.assertLogs("sessionsearch.watcher", level="WARNING"):
            await watcher.start(manager)
        self.assertFalse(watcher.is_running)

    async def test_relevant_change_triggers_reload(self) -> None:
        manager = self.manager()
        manager.load()
        batches = [
            {(Change.added, str(self.data_dir / "scratch.tmp"))},
            {(Change.modified, str(self.data_dir / "andrewwang.json"))},
        ]

        async def _fake_awatch(path):
            for batch in batches:
                yield batch

        watcher = FileWatcher()
        watcher._running = True
        with patch.object(watcher_module, "awatch", _fake_awatch):
            await watcher._watch_loop(manager)

        self.assertEqual(manager.store.generation, 2)
        self.assertEqual(manager.store.trigger, "watcher")
        self.assertFalse(watcher.is_running)

    async def test_stop_cancels_task(self) -> None:
        started = asyncio.Event()

        async def _idle_awatch(path):
            started.set()
            await asyncio.Event().wait()
            yield set()

        watcher = FileWatcher()
        with patch.object(watcher_module, "awatch", _idle_awatch):
            await watcher.start(self.manager())
            self.assertTrue(watcher.is_running)
            await started.wait()
            await watcher.stop()
        self.assertFalse(watcher.is_running)


if __name__ == "__main__":
    unittest.main()
