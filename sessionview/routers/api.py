"""API router for session discovery, messages and raw log access."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import PlainTextResponse

from sessionview import config
from sessionview.date_utils import format_iso_utc
from sessionview.models import (
    PaginatedResponse,
    Session,
    SessionLogLine,
    SessionMessage,
)
from sessionview.parsers.scanner import ScanCache
from sessionview.parsers.sessions import (
    SessionInfo,
    discover_sessions,
    find_session,
    load_session,
    load_session_lines,
    read_session_raw,
)
from sessionview.session_messages import event_to_message

logger = logging.getLogger("sessionview")

sessions_router = APIRouter(prefix="/api/sessions", tags=["sessions"])

_scan_cache = ScanCache()


def _cache() -> ScanCache | None:
    return _scan_cache if config.SCAN_CACHE_ENABLED else None


def _to_session(info: SessionInfo) -> Session:
    return Session(
        id=info.id,
        project=info.project,
        slug=info.slug,
        createdAt=format_iso_utc(info.created_at) if info.created_at else None,
        updatedAt=format_iso_utc(info.updated_at) if info.updated_at else None,
        messageCount=info.message_count,
        firstMessage=info.first_message,
        projectPath=info.project_path,
        filePath=str(info.path),
    )


def _io_failure(action: str, exc: OSError) -> HTTPException:
    logger.error("Failed to %s: %s", action, exc)
    return HTTPException(status_code=500, detail=f"Failed to {action}: {exc}")


def _require_session(session_id: str) -> SessionInfo:
    try:
        info = find_session(config.LOG_ROOT, session_id, cache=_cache())
    except OSError as exc:
        raise _io_failure("discover sessions", exc)
    if info is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return info


@sessions_router.get("", response_model=list[Session])
def list_sessions(project: Optional[str] = Query(None, description="Substring of the project directory name")):
    """List discovered sessions, most recently active first.

    Sessions without a user prompt (e.g. snapshot-only files) are hidden.
    """
    try:
        sessions = discover_sessions(config.LOG_ROOT, cache=_cache())
    except OSError as exc:
        raise _io_failure("discover sessions", exc)

    return [
        _to_session(info)
        for info in sessions
        if info.first_message is not None and (not project or project in info.project)
    ]


@sessions_router.get("/{session_id}", response_model=Session)
def get_session(session_id: str):
    """Get metadata for a single session."""
    return _to_session(_require_session(session_id))


@sessions_router.get("/{session_id}/messages", response_model=list[SessionMessage])
def get_session_messages(session_id: str):
    """Load a session fully and return its renderable messages in file order."""
    info = _require_session(session_id)
    try:
        events = load_session(info.path)
    except OSError as exc:
        raise _io_failure(f"load session {session_id}", exc)

    messages = []
    for event in events:
        message = event_to_message(event)
        if message is not None:
            messages.append(message)
    return messages


@sessions_router.get("/{session_id}/raw", response_class=PlainTextResponse)
def get_session_raw_log(session_id: str):
    """Return the raw JSONL content of a session file."""
    info = _require_session(session_id)
    try:
        return PlainTextResponse(read_session_raw(info.path))
    except OSError as exc:
        raise _io_failure(f"read session {session_id}", exc)


@sessions_router.get("/{session_id}/lines", response_model=PaginatedResponse[SessionLogLine])
def get_session_log_lines(
    session_id: str,
    offset: int = Query(0, ge=0),
    limit: int = Query(200, ge=1),
):
    """Fetch a page of raw JSONL lines (1-based line numbers)."""
    info = _require_session(session_id)
    limit = min(limit, config.MAX_PAGE_SIZE)
    try:
        lines, total = load_session_lines(info.path, offset, limit)
    except OSError as exc:
        raise _io_failure(f"read session {session_id}", exc)

    return PaginatedResponse[SessionLogLine](
        items=[SessionLogLine(lineNumber=number, content=content) for number, content in lines],
        total=total,
        offset=offset,
        limit=limit,
    )
