"""Pydantic response models served to the session viewer frontend."""
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Any, Literal, Optional, Union, Generic, TypeVar

T = TypeVar("T")

class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T]
    total: int
    offset: int
    limit: int
# ── Session list models ─────────────────────────────────────────────

class Session(BaseModel):
    id: str
    project: str
    slug: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    messageCount: int = 0
    firstMessage: Optional[str] = None
    projectPath: Optional[str] = None  # real cwd of the session, not the encoded directory name
    filePath: Optional[str] = None


class SessionLogLine(BaseModel):
    lineNumber: int
    content: str


# ── Message models ──────────────────────────────────────────────────

class UserTextContent(BaseModel):
    kind: Literal["text"] = "text"
    text: str


class ToolResultView(BaseModel):
    toolUseId: str
    content: str = ""
    isError: Optional[bool] = None


class UserToolResults(BaseModel):
    kind: Literal["tool_results"] = "tool_results"
    results: list[ToolResultView] = Field(default_factory=list)


class TextBlockView(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ThinkingBlockView(BaseModel):
    type: Literal["thinking"] = "thinking"
    thinking: str


class ToolUseBlockView(BaseModel):
    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: Any = None


class ToolResultBlockView(BaseModel):
    type: Literal["tool_result"] = "tool_result"
    toolUseId: str
    content: str = ""
    isError: Optional[bool] = None


class UsageInfo(BaseModel):
    inputTokens: Optional[int] = None
    outputTokens: Optional[int] = None
    cacheCreationInputTokens: Optional[int] = None
    cacheReadInputTokens: Optional[int] = None


class AssistantContent(BaseModel):
    model: Optional[str] = None
    stopReason: Optional[str] = None
    usage: Optional[UsageInfo] = None
    blocks: list[Union[TextBlockView, ThinkingBlockView, ToolUseBlockView, ToolResultBlockView]] = Field(
        default_factory=list
    )


class SystemInfo(BaseModel):
    subtype: Optional[str] = None
    durationMs: Optional[int] = None


class SessionMessage(BaseModel):
    uuid: str
    parentUuid: Optional[str] = None
    timestamp: str
    eventType: str  # "user" | "assistant" | "system"
    cwd: Optional[str] = None
    gitBranch: Optional[str] = None
    isSidechain: Optional[bool] = None
    slug: Optional[str] = None
    userContent: Optional[Union[UserTextContent, UserToolResults]] = None
    assistantContent: Optional[AssistantContent] = None
    systemInfo: Optional[SystemInfo] = None
