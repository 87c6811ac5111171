"""Small two-engineer corpus shared by the test modules."""
from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from typing import Any

from sessionsearch.entity_store import EntityStore, StoreManager, build_store


def _message(mid: str, session_id: str, seq: int | None, ts: str | None, content: str) -> dict[str, Any]:
    return {
        "id": mid,
        "sessionId": session_id,
        "type": "user",
        "sequenceNumber": seq,
        "timestamp": ts,
        "parentId": None,
        "content": content,
        "rawMetadata": {"source": "fixture"},
        "typeSpecificData": {},
    }


def andrew_export() -> dict[str, Any]:
    return {
        "engineer": {"username": "andrewwang", "email": "andrew@example.com", "role": "Backend"},
        "projects": [
            {
                "id": "p1",
                "name": "alpha-api",
                "workingDirectory": "/work/alpha",
                "metadata": {"primaryLanguage": "Python", "framework": "FastAPI"},
            },
            {
                "id": "p2",
                "name": "beta-cli",
                "workingDirectory": "/work/beta",
                "metadata": {"primaryLanguage": "Go"},
            },
        ],
        "sessions": [
            {"id": "s1", "projectId": "p1", "startedAt": "2025-11-01T08:55:00Z", "producer": "claude-code",
             "producerVersion": "1.0.0", "schemaVersion": 2, "metadata": {"taskDescription": "Refactor auth middleware"}},
            {"id": "s2", "projectId": "p2", "metadata": {"taskDescription": "Add export command"}},
            {"id": "s3", "projectId": "p-missing", "metadata": {}},
        ],
        "messages": [
            _message("a1", "s1", 2, "2025-11-01T10:00:00Z", "second message about tokens"),
            _message("a2", "s1", 1, "2025-11-01T09:00:00Z", "Start with the login flow"),
            _message("a3", "s2", 1, "2025-11-05T12:00:00Z", "Add CSV export"),
            _message("a4", "s2", 2, "2025-11-10T23:59:59.500Z", "late night fix"),
            _message("a5", "s3", 1, "2025-11-11T00:00:00Z", "session with unknown project"),
            _message("a6", "s-unknown", 1, "2025-10-31T12:00:00Z", "orphan message"),
            _message("a7", "s1", 3, None, "no timestamp here"),
        ],
    }


def diana_export() -> dict[str, Any]:
    # Reuses project id "p1" and references session "s1" from the other
    # export; neither may resolve across documents.
    return {
        "engineer": {"username": "dianalu", "email": "diana@example.com", "role": "Frontend"},
        "projects": [
            {
                "id": "p1",
                "name": "gamma-web",
                "workingDirectory": "/work/gamma",
                "metadata": {"primaryLanguage": "TypeScript", "framework": "React"},
            },
        ],
        "sessions": [
            {"id": "s10", "projectId": "p1", "metadata": {"taskDescription": "Fix date picker"}},
        ],
        "messages": [
            _message("d1", "s10", 1, "2025-11-03T08:00:00Z", "date picker bug"),
            _message("d2", "s10", 2, "2025-11-03T08:00:00Z", "same timestamp as the previous one"),
            _message("d3", "s1", 1, "2025-11-04T00:00:00Z", "cross document reference"),
        ],
    }


FIXTURE_FILES = ["andrewwang.json", "dianalu.json"]


class CorpusTestCase(unittest.TestCase):
    """Writes the fixture exports to a temporary data directory."""

    def setUp(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        self.data_dir = Path(tmpdir.name)
        self.write_export("andrewwang.json", andrew_export())
        self.write_export("dianalu.json", diana_export())

    def write_export(self, name: str, document: Any) -> Path:
        path = self.data_dir / name
        content = document if isinstance(document, str) else json.dumps(document)
        path.write_text(content, encoding="utf-8")
        return path

    def build(self, files: list[str] | None = None) -> EntityStore:
        return build_store(self.data_dir, files or FIXTURE_FILES, generation=1)

    def manager(self, files: list[str] | None = None) -> StoreManager:
        return StoreManager(self.data_dir, files or FIXTURE_FILES)
