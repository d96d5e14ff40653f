"""Tests for the canonical message schema."""

import json

import pytest
from pydantic import TypeAdapter, ValidationError

from ame.core.interface.models import (
    AudioContent,
    ContentPart,
    ImageContent,
    Message,
    TextContent,
    ToolCall,
    ToolChoice,
    ToolResult,
)


class TestContentParts:
    def test_discriminated_union(self) -> None:
        adapter = TypeAdapter(list[ContentPart])
        parts = adapter.validate_python(
            [
                {"type": "text", "text": "hi"},
                {"type": "image", "url": "https://example.com/a.png"},
                {"type": "audio", "data": "AAAA", "media_type": "audio/mp3"},
            ]
        )
        assert isinstance(parts[0], TextContent)
        assert isinstance(parts[1], ImageContent)
        assert isinstance(parts[2], AudioContent)

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TypeAdapter(ContentPart).validate_python({"type": "video", "url": "x"})

    def test_image_inline_data(self) -> None:
        assert ImageContent(data="aGVsbG8=", media_type="image/jpeg").as_base64() == (
            "image/jpeg",
            "aGVsbG8=",
        )

    def test_image_data_url(self) -> None:
        part = ImageContent(url="data:image/gif;base64,R0lGOD")
        assert part.as_base64() == ("image/gif", "R0lGOD")

    def test_image_remote_url_not_inline(self) -> None:
        assert ImageContent(url="https://example.com/a.png").as_base64() is None


class TestMessage:
    def test_system(self) -> None:
        msg = Message.system("Be helpful")
        assert msg.role == "system"
        assert msg.text == "Be helpful"

    def test_user_with_attachments(self) -> None:
        msg = Message.user("Look", attachments=[ImageContent(url="https://example.com/a.png")])
        assert [p.type for p in msg.content] == ["text", "image"]
        assert msg.text == "Look"

    def test_assistant_without_calls(self) -> None:
        msg = Message.assistant("Done", tool_calls=[])
        assert msg.tool_calls is None
        assert msg.text == "Done"

    def test_assistant_tool_only_has_no_content(self) -> None:
        msg = Message.assistant(tool_calls=[ToolCall(name="search")])
        assert msg.content == []
        assert msg.tool_calls is not None

    def test_tool_message_serializes_payload(self) -> None:
        result = ToolResult(tool_call_id="c1", name="search", content={"hits": [1, 2]})
        msg = Message.tool(result)
        assert msg.role == "tool"
        assert msg.tool_call_id == "c1"
        assert json.loads(msg.text) == {"hits": [1, 2]}

    def test_text_concatenates_parts(self) -> None:
        msg = Message(
            role="user",
            content=[TextContent(text="a"), ImageContent(url="x"), TextContent(text="b")],
        )
        assert msg.text == "ab"

    def test_roundtrip_json(self) -> None:
        msg = Message.assistant("x", tool_calls=[ToolCall(id="t1", name="f", arguments={"a": 1})])
        restored = Message.model_validate_json(msg.model_dump_json())
        assert restored == msg


class TestToolCall:
    def test_generated_id(self) -> None:
        a, b = ToolCall(name="f"), ToolCall(name="f")
        assert a.id != b.id
        assert len(a.id) == 12


class TestToolResult:
    @pytest.mark.parametrize(
        ("content", "rejected"),
        [
            ({"completed": False}, True),
            ({"error": True}, True),
            ({"error": "boom"}, True),
            ({"completed": True, "error": False}, False),
            ({"result": "ok"}, False),
            ("plain text", False),
            (None, False),
        ],
    )
    def test_rejected(self, content: object, rejected: bool) -> None:
        assert ToolResult(tool_call_id="c", name="t", content=content).rejected is rejected

    def test_force_next_tool(self) -> None:
        result = ToolResult(tool_call_id="c", name="t", content={"forceNextTool": "finish_agent_run"})
        assert result.force_next_tool == "finish_agent_run"

    def test_force_next_tool_absent(self) -> None:
        assert ToolResult(tool_call_id="c", name="t", content={"forceNextTool": ""}).force_next_tool is None
        assert ToolResult(tool_call_id="c", name="t", content=[1]).force_next_tool is None

    def test_serialized_falls_back_to_str(self) -> None:
        result = ToolResult(tool_call_id="c", name="t", content={"when": object})
        assert "class 'object'" in result.serialized()


class TestToolChoice:
    @pytest.mark.parametrize("mode", ["auto", "required", "none"])
    def test_parse_modes(self, mode: str) -> None:
        assert ToolChoice.parse(mode).mode == mode

    def test_parse_any_means_required(self) -> None:
        assert ToolChoice.parse("any") == ToolChoice.required()

    def test_parse_tool_name(self) -> None:
        choice = ToolChoice.parse("finish_agent_run")
        assert choice.mode == "tool"
        assert choice.name == "finish_agent_run"

    def test_parse_passthrough(self) -> None:
        choice = ToolChoice.tool("x")
        assert ToolChoice.parse(choice) is choice
