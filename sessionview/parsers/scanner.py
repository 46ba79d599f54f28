"""Lightweight metadata scan of session JSONL files.

Listing sessions only needs a handful of fields per file, so instead of
decoding every line this module looks fields up by their quoted key
(``"slug":"``) and reads the string value that follows.
"""
from __future__ import annotations

import logging
import os
import re
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator

from sessionview.date_utils import parse_iso_timestamp

logger = logging.getLogger("sessionview.parsers")

_USER_TYPE_MARKER = '"type":"user"'
_TOOL_RESULT_MARKER = '"toolUseResult"'
_ESCAPE_PATTERN = re.compile(r'\\(["\\nt])')
_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t"}
_PREVIEW_ESCAPES = {'"': '"', "\\": "\\", "n": " ", "t": " "}


@dataclass(frozen=True)
class SessionMeta:
    slug: str | None = None
    first_timestamp: datetime | None = None
    last_timestamp: datetime | None = None
    line_count: int = 0
    first_message: str | None = None
    project_path: str | None = None


def iter_nonempty_lines(path: Path) -> Iterator[str]:
    """Yield the non-empty lines of *path* without their line terminators.

    This is the single line definition used for counting, paging and
    decoding. A line holding only whitespace is not empty: it counts, and
    fails to decode like any other malformed line. Invalid UTF-8 (e.g. a
    multibyte character cut off by a concurrent append) is replaced rather
    than raised.
    """
    with open(path, "r", encoding="utf-8", errors="replace") as handle:
        for raw in handle:
            line = raw.rstrip("\r\n")
            if not line:
                continue
            yield line


def _closing_quote(text: str, start: int) -> int | None:
    index = start
    length = len(text)
    while index < length:
        char = text[index]
        if char == "\\":
            index += 2
        elif char == '"':
            return index
        else:
            index += 1
    return None


def _unescape(raw: str, table: dict[str, str]) -> str:
    return _ESCAPE_PATTERN.sub(lambda match: table[match.group(1)], raw)


def _extract(line: str, key: str, table: dict[str, str]) -> str | None:
    pattern = f'"{key}":"'
    found = line.find(pattern)
    if found < 0:
        return None
    start = found + len(pattern)
    end = _closing_quote(line, start)
    if end is None or end == start:
        return None
    return _unescape(line[start:end], table)


def extract_json_string(line: str, key: str) -> str | None:
    """Return the string value of the first ``"key":"..."`` in *line*.

    Only ``\\n``, ``\\t``, ``\\"`` and ``\\\\`` are unescaped; any other escape
    sequence is returned literally. Empty and unterminated values yield None.
    The first textual match wins, so a key nested deeper in the object can
    shadow a top-level one that appears later on the line.
    """
    return _extract(line, key, _ESCAPES)


def extract_user_content_string(line: str) -> str | None:
    """Return a one-line preview of a user line's string ``content``.

    Array content never matches because the value must open with a quote.
    """
    return _extract(line, "content", _PREVIEW_ESCAPES)


def _is_plain_user_line(line: str) -> bool:
    return _USER_TYPE_MARKER in line and _TOOL_RESULT_MARKER not in line


def scan_session_metadata(path: Path) -> SessionMeta:
    """Single forward pass collecting list-view metadata for one session file.

    Raises:
        OSError: the file cannot be opened or read.
    """
    slug: str | None = None
    first_ts: datetime | None = None
    last_ts: datetime | None = None
    line_count = 0
    first_message: str | None = None
    project_path: str | None = None

    for line in iter_nonempty_lines(path):
        line_count += 1

        if slug is None:
            slug = extract_json_string(line, "slug")

        ts = parse_iso_timestamp(extract_json_string(line, "timestamp"))
        if ts is not None:
            if first_ts is None:
                first_ts = ts
            last_ts = ts

        if project_path is None:
            project_path = extract_json_string(line, "cwd")

        if first_message is None and _is_plain_user_line(line):
            first_message = extract_user_content_string(line)

    # Append-only logs keep these ordered; guard against a writer whose clock stepped back.
    if first_ts is not None and last_ts is not None and last_ts < first_ts:
        last_ts = first_ts

    return SessionMeta(
        slug=slug,
        first_timestamp=first_ts,
        last_timestamp=last_ts,
        line_count=line_count,
        first_message=first_message,
        project_path=project_path,
    )


class ScanCache:
    """Read-through cache of scan results keyed by absolute path.

    Entries are validated against ``(st_mtime_ns, st_size)`` on every lookup,
    so a file that changed since it was scanned is always rescanned.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[tuple[int, int], SessionMeta]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def scan(self, path: Path) -> SessionMeta:
        key = os.path.abspath(path)
        stats = os.stat(key)
        signature = (stats.st_mtime_ns, stats.st_size)

        with self._lock:
            cached = self._entries.get(key)
        if cached is not None and cached[0] == signature:
            return cached[1]

        meta = scan_session_metadata(Path(key))
        with self._lock:
            self._entries[key] = (signature, meta)
        return meta

    def retain(self, paths: Iterable[Path]) -> None:
        """Drop entries for files that are no longer present."""
        keep = {os.path.abspath(path) for path in paths}
        with self._lock:
            stale = [key for key in self._entries if key not in keep]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("Evicted %s scan cache entries", len(stale))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
