"""Convert decoded log events into the message views the frontend renders."""
from __future__ import annotations

import json
from typing import Any

from sessionview.date_utils import format_iso_utc
from sessionview.models import (
    AssistantContent,
    SessionMessage,
    SystemInfo,
    TextBlockView,
    ThinkingBlockView,
    ToolResultBlockView,
    ToolResultView,
    ToolUseBlockView,
    UsageInfo,
    UserTextContent,
    UserToolResults,
)
from sessionview.parsers.events import (
    AssistantEvent,
    ContentBlock,
    Event,
    SystemEvent,
    TextBlock,
    ThinkingBlock,
    ToolUseBlock,
    Usage,
    UserEvent,
)


def value_to_text(value: Any) -> str:
    """Render a tool result payload as text; non-strings become compact JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _user_content(event: UserEvent) -> UserTextContent | UserToolResults | None:
    # A toolUseResult sibling marks the turn as tool output rather than typed input.
    if event.toolUseResult is not None:
        results = event.message.tool_results()
        if results is None:
            return None
        return UserToolResults(
            results=[
                ToolResultView(
                    toolUseId=r.tool_use_id,
                    content=value_to_text(r.content),
                    isError=r.is_error,
                )
                for r in results
            ]
        )
    text = event.message.text()
    if text is None:
        return None
    return UserTextContent(text=text)


def _block_view(block: ContentBlock):
    if isinstance(block, TextBlock):
        return TextBlockView(text=block.text)
    if isinstance(block, ThinkingBlock):
        return ThinkingBlockView(thinking=block.thinking)
    if isinstance(block, ToolUseBlock):
        return ToolUseBlockView(id=block.id, name=block.name, input=block.input)
    return ToolResultBlockView(toolUseId=block.tool_use_id, content=value_to_text(block.content))


def _usage_info(usage: Usage | None) -> UsageInfo | None:
    if usage is None:
        return None
    return UsageInfo(
        inputTokens=usage.input_tokens,
        outputTokens=usage.output_tokens,
        cacheCreationInputTokens=usage.cache_creation_input_tokens,
        cacheReadInputTokens=usage.cache_read_input_tokens,
    )


def event_to_message(event: Event) -> SessionMessage | None:
    """Build the view for user, assistant and system events; other kinds give None."""
    if isinstance(event, UserEvent):
        return SessionMessage(
            uuid=event.uuid,
            parentUuid=event.parentUuid,
            timestamp=format_iso_utc(event.timestamp),
            eventType="user",
            cwd=event.cwd,
            gitBranch=event.gitBranch,
            isSidechain=event.isSidechain,
            slug=event.slug,
            userContent=_user_content(event),
        )

    if isinstance(event, AssistantEvent):
        message = event.message
        return SessionMessage(
            uuid=event.uuid,
            parentUuid=event.parentUuid,
            timestamp=format_iso_utc(event.timestamp),
            eventType="assistant",
            cwd=event.cwd,
            gitBranch=event.gitBranch,
            isSidechain=event.isSidechain,
            slug=event.slug,
            assistantContent=AssistantContent(
                model=message.model,
                stopReason=message.stop_reason,
                usage=_usage_info(message.usage),
                blocks=[_block_view(block) for block in message.content],
            ),
        )

    if isinstance(event, SystemEvent):
        return SessionMessage(
            uuid=event.uuid,
            parentUuid=event.parentUuid,
            timestamp=format_iso_utc(event.timestamp),
            eventType="system",
            systemInfo=SystemInfo(subtype=event.subtype, durationMs=event.durationMs),
        )

    # progress, file-history-snapshot and queue-operation events are not rendered
    return None
