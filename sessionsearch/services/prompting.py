"""System prompt loading and final prompt composition."""
from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger("sessionsearch.ai")

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant that helps engineers search through their "
    "coding assistant history."
)


def load_system_prompt(path: Path) -> str:
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return DEFAULT_SYSTEM_PROMPT
    except OSError as exc:
        logger.error("Error loading system prompt %s: %s", path, exc)
        return DEFAULT_SYSTEM_PROMPT
    return content.strip() or DEFAULT_SYSTEM_PROMPT


def compose_prompt(system_prompt: str, context: str, message: str) -> str:
    return (
        f"{system_prompt}\n\n{context}\n\n**User Question:** {message}\n\n"
        "Please provide a helpful, conversational response based on the data above."
    )
