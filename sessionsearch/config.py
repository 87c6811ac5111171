"""Session search service configuration."""
import os
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    value = os.getenv(name)
    if value is None:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]

# Project root (one level up from sessionsearch/)
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Per-engineer exports
DATA_DIR = Path(os.getenv("SESSIONSEARCH_DATA_DIR", str(PROJECT_ROOT / "data")))
DATA_FILES = _env_list(
    "SESSIONSEARCH_DATA_FILES",
    ["andrewwang.json", "dianalu.json", "daniellin.json"],
)
WATCH_ENABLED = _env_bool("SESSIONSEARCH_WATCH_ENABLED", True)

# Completion API (Groq exposes an OpenAI-compatible endpoint)
GROQ_API_KEY = os.getenv("GROQ_API_KEY", "")
AI_BASE_URL = os.getenv("SESSIONSEARCH_AI_BASE_URL", "https://api.groq.com/openai/v1")
AI_MODEL = os.getenv("SESSIONSEARCH_AI_MODEL", "openai/gpt-oss-20b")
AI_TEMPERATURE = _env_float("SESSIONSEARCH_AI_TEMPERATURE", 1.0)
AI_MAX_TOKENS = _env_int("SESSIONSEARCH_AI_MAX_TOKENS", 8192)
AI_TOP_P = _env_float("SESSIONSEARCH_AI_TOP_P", 1.0)
SYSTEM_PROMPT_PATH = Path(
    os.getenv(
        "SESSIONSEARCH_SYSTEM_PROMPT_PATH",
        str(Path(__file__).resolve().parent / "prompts" / "ai-assistant-prompt.txt"),
    )
)

# Suggestions
SUGGESTION_DEFAULT_LIMIT = _env_int("SESSIONSEARCH_SUGGESTION_LIMIT", 5)
SUGGESTION_MIN_QUERY_LENGTH = 2

# Observability
OTEL_ENABLED = _env_bool("SESSIONSEARCH_OTEL_ENABLED", False)
OTEL_ENDPOINT = os.getenv("SESSIONSEARCH_OTEL_ENDPOINT", "http://localhost:4318")
OTEL_SERVICE_NAME = os.getenv("SESSIONSEARCH_OTEL_SERVICE_NAME", "sessionsearch-backend")
PROM_PORT = _env_int("SESSIONSEARCH_PROM_PORT", 9464)

# Server settings
HOST = os.getenv("SESSIONSEARCH_HOST", "0.0.0.0")
PORT = _env_int("SESSIONSEARCH_PORT", 5000)

# CORS
FRONTEND_ORIGIN = os.getenv("SESSIONSEARCH_FRONTEND_ORIGIN", "http://localhost:3000")
