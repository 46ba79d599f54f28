"""Discover session JSONL files and load them for detailed viewing.

Layout under the log root::

    <root>/<project-dir>/<session-id>.jsonl

Discovery scans every file cheaply (see ``scanner``); loading decodes one
chosen file fully into events.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from sessionview.parsers.events import DecodeError, Event, decode_event
from sessionview.parsers.scanner import (
    ScanCache,
    SessionMeta,
    iter_nonempty_lines,
    scan_session_metadata,
)

logger = logging.getLogger("sessionview.parsers")

_SESSION_SUFFIX = ".jsonl"


@dataclass(frozen=True)
class SessionInfo:
    """Summary of one session file, rebuilt on every discovery pass."""

    id: str
    project: str
    path: Path
    slug: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    message_count: int = 0
    first_message: str | None = None
    # Real working directory of the session, taken from the first ``cwd`` field.
    project_path: str | None = None


def _session_info(path: Path, project: str, meta: SessionMeta) -> SessionInfo:
    return SessionInfo(
        id=path.stem,
        project=project,
        path=path,
        slug=meta.slug,
        created_at=meta.first_timestamp,
        updated_at=meta.last_timestamp,
        message_count=meta.line_count,
        first_message=meta.first_message,
        project_path=meta.project_path,
    )


def _sort_by_recency(sessions: list[SessionInfo]) -> list[SessionInfo]:
    dated = [s for s in sessions if s.updated_at is not None]
    undated = [s for s in sessions if s.updated_at is None]
    dated.sort(key=lambda s: s.updated_at, reverse=True)
    return dated + undated


def _session_files(project_dir: Path) -> list[Path]:
    return sorted(
        p for p in project_dir.iterdir()
        if p.suffix == _SESSION_SUFFIX and p.is_file()
    )


def discover_sessions(root: Path, cache: ScanCache | None = None) -> list[SessionInfo]:
    """Scan every ``<root>/<project>/*.jsonl`` file, most recently active first.

    A missing root yields an empty list. Files (or project directories) that
    cannot be read are logged and left out; they never abort the pass.
    Sessions without any timestamp sort after all dated ones.
    """
    root = Path(root)
    if not root.is_dir():
        return []

    sessions: list[SessionInfo] = []
    for project_dir in sorted(root.iterdir()):
        if not project_dir.is_dir():
            continue
        try:
            files = _session_files(project_dir)
        except OSError as exc:
            logger.warning("Skipping unreadable project directory %s: %s", project_dir, exc)
            continue

        for path in files:
            try:
                meta = cache.scan(path) if cache is not None else scan_session_metadata(path)
            except OSError as exc:
                logger.warning("Failed to scan %s: %s", path, exc)
                continue
            sessions.append(_session_info(path, project_dir.name, meta))

    if cache is not None:
        cache.retain(s.path for s in sessions)

    logger.debug("Discovered %s sessions under %s", len(sessions), root)
    return _sort_by_recency(sessions)


def find_session(root: Path, session_id: str, cache: ScanCache | None = None) -> SessionInfo | None:
    """Return the discovered session with *session_id*, or None when there is none."""
    for session in discover_sessions(root, cache=cache):
        if session.id == session_id:
            return session
    return None


def load_session(path: Path) -> list[Event]:
    """Decode every non-empty line of a session file into events, in file order.

    Lines that fail to decode are logged and skipped.

    Raises:
        OSError: the file cannot be opened or read.
    """
    events: list[Event] = []
    for line_number, line in enumerate(iter_nonempty_lines(Path(path)), 1):
        try:
            events.append(decode_event(line))
        except DecodeError as exc:
            logger.warning("Failed to parse %s line %s: %s", path, line_number, exc)
    return events


def load_session_lines(path: Path, offset: int, limit: int) -> tuple[list[tuple[int, str]], int]:
    """Return one page of raw lines and the file's total line count.

    Lines are the same non-empty lines the scanner counts, numbered from 1,
    so ``total`` always equals the session's ``message_count``. An offset
    past the end gives an empty page.
    """
    if offset < 0 or limit < 0:
        raise ValueError("offset and limit must be non-negative")

    page: list[tuple[int, str]] = []
    total = 0
    for line_number, line in enumerate(iter_nonempty_lines(Path(path)), 1):
        total = line_number
        if offset < line_number <= offset + limit:
            page.append((line_number, line))
    return page, total


def read_session_raw(path: Path) -> str:
    """Return the full text of a session file."""
    return Path(path).read_text(encoding="utf-8", errors="replace")
