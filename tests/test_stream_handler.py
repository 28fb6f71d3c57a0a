"""Tests for the stream handler."""

import pytest

from assistant_parser.config import ParserOptions
from assistant_parser.stream_handler import StreamHandler, split_fragments
from assistant_parser.types import ToolCall


class TestSplitFragments:
    """Tests for split_fragments."""

    def test_fixed_size(self):
        assert list(split_fragments("abcdefg", 3)) == ["abc", "def", "g"]

    def test_empty_text(self):
        assert list(split_fragments("", 4)) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            list(split_fragments("abc", 0))


class TestStreamHandler:
    """Tests for StreamHandler.process_stream."""

    def test_echoes_text(self, capsys):
        handler = StreamHandler()
        handler.process_stream(["Hello ", "wor", "ld"])

        out = capsys.readouterr().out
        assert out == "Assistant: Hello world\n"

    def test_returns_parsed_message(self, capsys):
        handler = StreamHandler()
        result = handler.process_stream(["Reading.\n<tool name=", '"read_file">{"path": "a.ts"}</tool>'])

        assert result.tool_calls == [ToolCall(name="read_file", params={"path": "a.ts"})]
        out = capsys.readouterr().out
        assert "Reading." in out
        assert "read_file" not in out

    def test_tool_calls_handed_off(self, capsys):
        received = []
        handler = StreamHandler(on_tool_call=received.append)
        handler.process_stream(['<tool name="a">{}</tool>', '<tool name="b"><n>1</n>', "</tool>"])

        assert received == [ToolCall(name="a", params={}), ToolCall(name="b", params={"n": 1})]

    def test_verbose_output(self, capsys):
        handler = StreamHandler(verbose=True)
        handler.process_stream([
            "<thinking>plan</thinking>\n",
            "```py\nx = 1\n```\n",
            '<tool name="run"><cmd>ls</cmd></tool>',
        ])

        out = capsys.readouterr().out
        assert "[Thinking]: plan" in out
        assert "[Code: py]" in out
        assert "[Tool] run started" in out
        assert "[Tool] run finished" in out
        assert "Parsed 1 tool calls" in out

    def test_verbose_reports_open_tool(self, capsys):
        handler = StreamHandler(verbose=True)
        result = handler.process_stream(['<tool name="write">{"path": '])

        assert result.has_partial_tool is True
        assert "inside tool call 'write'" in capsys.readouterr().out

    def test_custom_options(self, capsys):
        handler = StreamHandler(options=ParserOptions(tool_tag_name="call"))
        result = handler.process_stream(['<call name="f">{"q": "x"}</call>'])
        assert result.tool_calls == [ToolCall(name="f", params={"q": "x"})]

    def test_each_stream_starts_fresh(self, capsys):
        handler = StreamHandler()
        handler.process_stream(['<tool name="a">{}'])
        result = handler.process_stream(["</tool> plain"])

        assert result.tool_calls == []
        assert "</tool> plain" in capsys.readouterr().out
