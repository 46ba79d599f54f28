"""Typed event model for JSONL session log lines.

Each line of a session log is one JSON object whose ``type`` field selects
one of six event kinds. Attribute names mirror the wire keys (camelCase on
the envelope, snake_case inside message payloads) so models validate
straight from ``json`` text without alias tables.
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    TypeAdapter,
    ValidationError,
    field_validator,
)


class DecodeError(ValueError):
    """Raised when a log line does not match any known event shape."""


class _Frozen(BaseModel):
    # Strict: wire values are never coerced, so "1520" is not a duration and
    # a bare number is not a timestamp.
    model_config = ConfigDict(frozen=True, strict=True)


# ── User message payload ───────────────────────────────────────────

class ToolResultBlock(_Frozen):
    type: str
    tool_use_id: str
    content: Any
    is_error: Optional[bool] = None


class PlainText(_Frozen):
    kind: Literal["text"] = "text"
    text: str


class ToolResults(_Frozen):
    kind: Literal["tool_results"] = "tool_results"
    results: list[ToolResultBlock]


class UserMessage(_Frozen):
    role: str
    # Resolved once at decode time; None when the raw value is neither a
    # string nor an array of tool_result objects.
    content: Optional[Union[PlainText, ToolResults]]

    @field_validator("content", mode="before")
    @classmethod
    def _resolve_content(cls, value: Any) -> Any:
        if isinstance(value, (PlainText, ToolResults)):
            return value
        if isinstance(value, str):
            return PlainText(text=value)
        if isinstance(value, list):
            try:
                # Strict models take nested models only as instances.
                return ToolResults(results=[ToolResultBlock(**item) for item in value])
            except (TypeError, ValidationError):
                return None
        return None

    def text(self) -> str | None:
        if isinstance(self.content, PlainText):
            return self.content.text
        return None

    def tool_results(self) -> list[ToolResultBlock] | None:
        if isinstance(self.content, ToolResults):
            return list(self.content.results)
        return None


# ── Assistant message payload ──────────────────────────────────────

class ThinkingBlock(_Frozen):
    type: Literal["thinking"]
    thinking: str


class TextBlock(_Frozen):
    type: Literal["text"]
    text: str


class ToolUseBlock(_Frozen):
    type: Literal["tool_use"]
    id: str
    name: str
    input: Any


class ToolResultContentBlock(_Frozen):
    type: Literal["tool_result"]
    tool_use_id: str
    content: Any


ContentBlock = Annotated[
    Union[ThinkingBlock, TextBlock, ToolUseBlock, ToolResultContentBlock],
    Field(discriminator="type"),
]


class Usage(_Frozen):
    input_tokens: Optional[NonNegativeInt] = None
    output_tokens: Optional[NonNegativeInt] = None
    cache_creation_input_tokens: Optional[NonNegativeInt] = None
    cache_read_input_tokens: Optional[NonNegativeInt] = None


class AssistantMessage(_Frozen):
    role: str
    model: Optional[str] = None
    id: Optional[str] = None
    content: list[ContentBlock]
    stop_reason: Optional[str] = None
    usage: Optional[Usage] = None


# ── Event envelopes ────────────────────────────────────────────────

class _EventBase(_Frozen):
    def get_timestamp(self) -> datetime | None:
        return None

    def get_session_id(self) -> str | None:
        return None


class _Identity(_EventBase):
    """Fields every conversational event carries, including ``system``."""

    uuid: str
    parentUuid: Optional[str] = None
    sessionId: str
    timestamp: AwareDatetime

    def get_timestamp(self) -> datetime | None:
        return self.timestamp

    def get_session_id(self) -> str | None:
        return self.sessionId


class CommonFields(_Identity):
    """Identity plus the environment fields shared by user/assistant/progress."""

    version: Optional[str] = None
    cwd: Optional[str] = None
    gitBranch: Optional[str] = None
    isSidechain: Optional[bool] = None
    userType: Optional[str] = None
    slug: Optional[str] = None


class UserEvent(CommonFields):
    type: Literal["user"]
    message: UserMessage
    toolUseResult: Any = None
    sourceToolAssistantUUID: Optional[str] = None
    permissionMode: Optional[str] = None


class AssistantEvent(CommonFields):
    type: Literal["assistant"]
    message: AssistantMessage
    requestId: Optional[str] = None


class ProgressEvent(CommonFields):
    type: Literal["progress"]
    data: Any
    toolUseID: Optional[str] = None
    parentToolUseID: Optional[str] = None


class SystemEvent(_Identity):
    # Only the identity subset: no version/cwd/gitBranch/sidechain/slug.
    type: Literal["system"]
    subtype: Optional[str] = None
    durationMs: Optional[NonNegativeInt] = None
    isMeta: Optional[bool] = None


class FileHistorySnapshotEvent(_EventBase):
    type: Literal["file-history-snapshot"]
    messageId: str
    snapshot: Any
    isSnapshotUpdate: Optional[bool] = None


class QueueOperationEvent(_EventBase):
    type: Literal["queue-operation"]
    operation: str
    sessionId: str
    timestamp: Optional[AwareDatetime] = None
    content: Optional[str] = None

    def get_timestamp(self) -> datetime | None:
        return self.timestamp

    def get_session_id(self) -> str | None:
        return self.sessionId


Event = Annotated[
    Union[
        UserEvent,
        AssistantEvent,
        ProgressEvent,
        SystemEvent,
        FileHistorySnapshotEvent,
        QueueOperationEvent,
    ],
    Field(discriminator="type"),
]

EVENT_TYPES = (
    "user",
    "assistant",
    "progress",
    "system",
    "file-history-snapshot",
    "queue-operation",
)

_EVENT_ADAPTER: TypeAdapter[Event] = TypeAdapter(Event)


def _describe(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    suffix = f" (+{len(errors) - 1} more)" if len(errors) > 1 else ""
    return f"{location or '<line>'}: {message}{suffix}"


def decode_event(line: str | bytes) -> Event:
    """Decode one JSONL line into its event variant.

    Raises:
        DecodeError: the line is not JSON, ``type`` is missing or unknown, or
            the matched variant's required fields are absent or mis-shaped.
    """
    try:
        return _EVENT_ADAPTER.validate_json(line)
    except ValidationError as exc:
        raise DecodeError(_describe(exc)) from exc
