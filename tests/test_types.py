"""Tests for parser types."""

from assistant_parser.types import (
    BlockType,
    ChunkType,
    CodeBlock,
    ParsedMessage,
    StreamChunk,
    TextBlock,
    ThinkingBlock,
    ToolCall,
    ToolUseBlock,
)


class TestEnums:
    """Tests for the type enums."""

    def test_block_type_values(self):
        assert BlockType.TEXT.value == "text"
        assert BlockType.THINKING.value == "thinking"
        assert BlockType.CODE.value == "code"
        assert BlockType.TOOL_USE.value == "tool_use"

    def test_chunk_type_values(self):
        assert ChunkType.TOOL_START.value == "tool_start"
        assert ChunkType.TOOL_END.value == "tool_end"


class TestBlocks:
    """Tests for the content block dataclasses."""

    def test_text_raw_is_content(self):
        block = TextBlock(content="hi ")
        assert block.type == BlockType.TEXT
        assert block.raw == "hi "
        assert block.to_dict() == {"type": "text", "content": "hi ", "start": 0, "end": 3}

    def test_partial_text_to_dict(self):
        assert TextBlock(content="<tool", partial=True).to_dict()["partial"] is True

    def test_code_to_dict(self):
        block = CodeBlock(language=None, content="ls", raw="```\nls\n```", start=4)
        assert block.to_dict() == {
            "type": "code", "language": None, "content": "ls", "start": 4, "end": 14,
        }

    def test_thinking_to_dict(self):
        block = ThinkingBlock(content="hm", raw="<thinking>hm</thinking>")
        assert block.to_dict() == {"type": "thinking", "content": "hm", "start": 0, "end": 23}

    def test_tool_use_to_tool_call(self):
        block = ToolUseBlock(name="read_file", params={"path": "a"}, raw="...", start=7)
        call = block.to_tool_call()
        assert call == ToolCall(name="read_file", params={"path": "a"})
        assert (call.raw, call.start, call.end) == ("...", 7, 10)
        assert block.to_dict() == {
            "type": "tool_use", "name": "read_file", "params": {"path": "a"}, "start": 7, "end": 10,
        }

    def test_positions_not_part_of_equality(self):
        """Blocks and calls compare by what they say, not where they are."""
        assert TextBlock(content="a", start=3) == TextBlock(content="a")
        located = ToolCall(name="f", params={}, raw='<tool name="f"></tool>', start=9)
        assert located == ToolCall(name="f", params={})


class TestParsedMessage:
    """Tests for ParsedMessage."""

    def test_defaults(self):
        message = ParsedMessage()
        assert message.blocks == []
        assert message.tool_calls == []
        assert message.has_partial_tool is False
        assert message.raw == ""

    def test_raw_concatenates_blocks(self):
        message = ParsedMessage(blocks=[
            TextBlock(content="a "),
            ThinkingBlock(content="b", raw="<thinking>b</thinking>"),
            TextBlock(content=" c"),
        ])
        assert message.raw == "a <thinking>b</thinking> c"

    def test_to_dict(self):
        message = ParsedMessage(
            blocks=[TextBlock(content="x")],
            tool_calls=[],
            has_partial_tool=True,
            partial_tool_content='<tool name="t">',
        )
        d = message.to_dict()
        assert d["has_partial_tool"] is True
        assert d["partial_tool_content"] == '<tool name="t">'
        assert d["blocks"] == [{"type": "text", "content": "x", "start": 0, "end": 1}]


class TestStreamChunk:
    """Tests for StreamChunk."""

    def test_text_chunk(self):
        chunk = StreamChunk(type=ChunkType.TEXT, content="Hello", raw="Hello", start=2)
        assert chunk.tool_name is None
        assert chunk.end == 7
        assert chunk.to_dict() == {"type": "text", "content": "Hello", "start": 2, "end": 7}

    def test_tool_start_to_dict(self):
        chunk = StreamChunk(type=ChunkType.TOOL_START, tool_name="t")
        assert chunk.to_dict() == {"type": "tool_start", "tool_name": "t", "start": 0, "end": 0}

    def test_tool_end_to_dict(self):
        chunk = StreamChunk(type=ChunkType.TOOL_END, tool_name="t", tool_params={"a": 1}, raw="<x>", start=5)
        assert chunk.to_dict() == {
            "type": "tool_end", "tool_name": "t", "tool_params": {"a": 1}, "start": 5, "end": 8,
        }

    def test_code_to_dict(self):
        chunk = StreamChunk(type=ChunkType.CODE, content="x", language="py")
        assert chunk.to_dict() == {"type": "code", "content": "x", "language": "py", "start": 0, "end": 0}
