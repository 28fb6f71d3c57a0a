"""Shared test fixtures and configuration."""

import pytest

from assistant_parser.config import ParserOptions, get_settings
from assistant_parser.parser import AssistantMessageParser
from assistant_parser.stream_parser import StreamingParser
from assistant_parser.types import ChunkType, StreamChunk

# every construct, plus markup that must stay text
MIXED_MESSAGE = (
    "Let me check the project first.\n"
    "<thinking>\nThe entry point is probably src/index.ts.\n</thinking>\n"
    "```python\nprint('<tool name=\"fake\">')\n```\n"
    "Reading now, <b>bold</b> and `inline` code.\n"
    '<tool name="read_file">\n{"path": "src/index.ts"}\n</tool>\n'
    "Then run the tests:\n"
    '<tool name="execute_command"><command>npm test</command><timeout>30</timeout></tool>'
    "\nA stray </tool> tag and a <toolbox> stay text.\n"
    "```\nplain fence\n```"
)

ENV_VARS = [
    "ASSISTANT_PARSER_TOOL_TAG",
    "ASSISTANT_PARSER_THINKING_TAG",
    "ASSISTANT_PARSER_ALLOW_PARTIAL",
    "ASSISTANT_PARSER_LOG_LEVEL",
    "ASSISTANT_PARSER_CHUNK_SIZE",
]


@pytest.fixture
def clean_settings(monkeypatch, tmp_path):
    """Isolate settings from the environment and any .env file."""
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def parser():
    """Create a batch parser with default options."""
    return AssistantMessageParser()


@pytest.fixture
def chunks():
    """Collect chunks emitted by a streaming parser."""
    return []


@pytest.fixture
def streaming_parser(chunks):
    """Create a streaming parser that records its chunks."""
    return StreamingParser(chunks.append)


def stream_chunks(fragments, options: ParserOptions | None = None) -> list[StreamChunk]:
    """Feed fragments into a fresh streaming parser, flush, and return every chunk."""
    collected: list[StreamChunk] = []
    streaming = StreamingParser(collected.append, options)
    for fragment in fragments:
        streaming.feed(fragment)
    streaming.flush()
    return collected


def construct_signature(chunks: list[StreamChunk]) -> list[tuple]:
    """Reduce chunks to their non-text events, ignoring how text was split."""
    signature = []
    for chunk in chunks:
        if chunk.type == ChunkType.TOOL_END:
            signature.append(("tool_use", chunk.tool_name, chunk.tool_params, chunk.raw, chunk.start))
        elif chunk.type == ChunkType.THINKING:
            signature.append(("thinking", chunk.content, chunk.raw, chunk.start))
        elif chunk.type == ChunkType.CODE:
            signature.append(("code", chunk.language, chunk.content, chunk.raw, chunk.start))
    return signature
