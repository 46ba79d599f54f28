import json
import unittest

from sessionview.models import (
    TextBlockView,
    ThinkingBlockView,
    ToolResultBlockView,
    ToolUseBlockView,
    UserTextContent,
    UserToolResults,
)
from sessionview.parsers.events import decode_event
from sessionview.session_messages import event_to_message, value_to_text


def _decode(payload: dict):
    return decode_event(json.dumps(payload))


_ENVELOPE = {
    "uuid": "u-1",
    "parentUuid": "u-0",
    "sessionId": "s-1",
    "timestamp": "2026-02-16T10:00:00Z",
    "cwd": "/home/dev/project",
    "gitBranch": "feature/x",
    "isSidechain": False,
}


class EventToMessageTests(unittest.TestCase):
    def test_plain_user_turn(self) -> None:
        message = event_to_message(_decode({
            **_ENVELOPE,
            "type": "user",
            "message": {"role": "user", "content": "Run the tests"},
        }))

        self.assertEqual(message.eventType, "user")
        self.assertEqual(message.timestamp, "2026-02-16T10:00:00.000Z")
        self.assertEqual(message.parentUuid, "u-0")
        self.assertEqual(message.gitBranch, "feature/x")
        self.assertIsInstance(message.userContent, UserTextContent)
        self.assertEqual(message.userContent.text, "Run the tests")
        self.assertIsNone(message.assistantContent)

    def test_tool_result_user_turn(self) -> None:
        message = event_to_message(_decode({
            **_ENVELOPE,
            "type": "user",
            "message": {"role": "user", "content": [
                {"type": "tool_result", "tool_use_id": "toolu_1", "content": "3 passed", "is_error": False},
                {"type": "tool_result", "tool_use_id": "toolu_2", "content": [{"type": "text", "text": "é"}]},
            ]},
            "toolUseResult": {"stdout": "3 passed"},
        }))

        self.assertIsInstance(message.userContent, UserToolResults)
        first, second = message.userContent.results
        self.assertEqual(first.toolUseId, "toolu_1")
        self.assertEqual(first.content, "3 passed")
        self.assertFalse(first.isError)
        self.assertEqual(second.content, '[{"type":"text","text":"é"}]')

    def test_tool_results_without_marker_have_no_user_content(self) -> None:
        message = event_to_message(_decode({
            **_ENVELOPE,
            "type": "user",
            "message": {"role": "user", "content": [
                {"type": "tool_result", "tool_use_id": "toolu_1", "content": "x"},
            ]},
        }))

        self.assertIsNone(message.userContent)

    def test_assistant_turn_keeps_block_order_and_usage(self) -> None:
        message = event_to_message(_decode({
            **_ENVELOPE,
            "type": "assistant",
            "message": {
                "role": "assistant",
                "model": "claude-opus",
                "stop_reason": "end_turn",
                "usage": {"input_tokens": 1, "output_tokens": 2},
                "content": [
                    {"type": "thinking", "thinking": "hmm"},
                    {"type": "tool_use", "id": "toolu_1", "name": "Bash", "input": {"command": "ls"}},
                    {"type": "tool_result", "tool_use_id": "toolu_1", "content": {"ok": True}},
                    {"type": "text", "text": "Listed."},
                ],
            },
        }))

        content = message.assistantContent
        self.assertEqual(content.model, "claude-opus")
        self.assertEqual(content.stopReason, "end_turn")
        self.assertEqual(content.usage.outputTokens, 2)
        self.assertIsNone(content.usage.cacheReadInputTokens)
        self.assertEqual(
            [type(b) for b in content.blocks],
            [ThinkingBlockView, ToolUseBlockView, ToolResultBlockView, TextBlockView],
        )
        self.assertEqual(content.blocks[1].input, {"command": "ls"})
        self.assertEqual(content.blocks[2].content, '{"ok":true}')

    def test_system_turn_has_no_environment_fields(self) -> None:
        message = event_to_message(_decode({
            **_ENVELOPE,
            "type": "system",
            "subtype": "turn_duration",
            "durationMs": 900,
        }))

        self.assertEqual(message.eventType, "system")
        self.assertEqual(message.systemInfo.subtype, "turn_duration")
        self.assertEqual(message.systemInfo.durationMs, 900)
        self.assertIsNone(message.cwd)
        self.assertIsNone(message.gitBranch)

    def test_unrendered_event_kinds(self) -> None:
        for payload in (
            {**_ENVELOPE, "type": "progress", "data": {}},
            {"type": "file-history-snapshot", "messageId": "m", "snapshot": {}},
            {"type": "queue-operation", "operation": "dequeue", "sessionId": "s-1"},
        ):
            with self.subTest(event_type=payload["type"]):
                self.assertIsNone(event_to_message(_decode(payload)))


class ValueToTextTests(unittest.TestCase):
    def test_strings_pass_through(self) -> None:
        self.assertEqual(value_to_text("plain"), "plain")

    def test_other_values_become_compact_json(self) -> None:
        self.assertEqual(value_to_text({"a": [1, None]}), '{"a":[1,null]}')
        self.assertEqual(value_to_text(None), "null")


if __name__ == "__main__":
    unittest.main()
