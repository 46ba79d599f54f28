"""Session viewer configuration."""
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


def _env_path(name: str, default: Path) -> Path:
    value = os.getenv(name)
    if not value or not value.strip():
        return default
    return Path(value.strip()).expanduser()


# Session logs: one subdirectory per project, *.jsonl files inside
LOG_ROOT = _env_path("SESSIONVIEW_LOG_ROOT", Path.home() / ".claude" / "projects")

# Raw line paging
MAX_PAGE_SIZE = max(1, _env_int("SESSIONVIEW_MAX_PAGE_SIZE", 1000))

# Reuse scan results for files whose mtime/size did not change
SCAN_CACHE_ENABLED = _env_bool("SESSIONVIEW_SCAN_CACHE_ENABLED", True)

LOG_LEVEL = os.getenv("SESSIONVIEW_LOG_LEVEL", "INFO").upper()

# Server settings
HOST = os.getenv("SESSIONVIEW_HOST", "127.0.0.1")
PORT = _env_int("SESSIONVIEW_PORT", 3001)

# CORS
FRONTEND_ORIGIN = os.getenv("SESSIONVIEW_FRONTEND_ORIGIN", "http://localhost:5173")
