"""Parse per-engineer assistant exports into enriched corpus entities."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from sessionsearch.models import Engineer, Message, Project, Session


class ExportParseError(ValueError):
    """Raised when an export document does not have the expected shape."""


@dataclass
class ParsedExport:
    source: str
    engineer: Optional[Engineer]
    projects: list[Project] = field(default_factory=list)
    sessions: list[Session] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)


def _as_list(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    raw = data.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ExportParseError(f"'{key}' must be a list, got {type(raw).__name__}")
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ExportParseError(f"'{key}[{idx}]' must be an object")
    return raw


def _index_first(items: list[Any]) -> dict[str, Any]:
    # Duplicate ids resolve to the first occurrence in document order.
    index: dict[str, Any] = {}
    for item in items:
        index.setdefault(item.id, item)
    return index


def parse_export_document(data: Any, source: str = "") -> ParsedExport:
    """Build enriched entities from one decoded export document.

    References are resolved only against this document. A session whose
    ``projectId`` is unknown keeps ``project=None``; a message whose
    ``sessionId`` is unknown keeps ``session=None`` and ``project=None``.
    Any validation error propagates so the caller can skip the whole document.
    """
    if not isinstance(data, dict):
        raise ExportParseError(f"export root must be an object, got {type(data).__name__}")

    raw_engineer = data.get("engineer")
    engineer = Engineer.model_validate(raw_engineer) if isinstance(raw_engineer, dict) else None

    projects = [Project.model_validate(raw) for raw in _as_list(data, "projects")]
    projects_by_id = _index_first(projects)

    sessions: list[Session] = []
    for raw in _as_list(data, "sessions"):
        sessions.append(
            Session.model_validate(
                {
                    **raw,
                    "engineer": engineer,
                    "project": projects_by_id.get(raw.get("projectId")),
                }
            )
        )
    sessions_by_id = _index_first(sessions)

    messages: list[Message] = []
    for raw in _as_list(data, "messages"):
        session = sessions_by_id.get(raw.get("sessionId"))
        messages.append(
            Message.model_validate(
                {
                    **raw,
                    "engineer": engineer,
                    "session": session,
                    "project": session.project if session else None,
                }
            )
        )

    return ParsedExport(
        source=source,
        engineer=engineer,
        projects=projects,
        sessions=sessions,
        messages=messages,
    )


def load_export_file(path: Path) -> ParsedExport:
    """Read and parse a single export file.

    Raises ``OSError``, ``json.JSONDecodeError``, ``ExportParseError`` or
    ``pydantic.ValidationError``.
    """
    content = path.read_text(encoding="utf-8")
    return parse_export_document(json.loads(content), source=path.name)
