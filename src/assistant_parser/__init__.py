"""Assistant Parser - structured parsing of streamed LLM output.

This package turns assistant text into typed content blocks (prose,
thinking, fenced code, tool invocations) and validated tool calls, either
from a complete message or incrementally from a fragment stream.
"""

from .config import ParserOptions
from .exceptions import ConfigurationError, ParserError, StreamClosedError
from .params import coerce_value, extract_params
from .parser import AssistantMessageParser, extract_tool_calls, parse_assistant_message
from .stream_handler import StreamHandler
from .stream_parser import StreamingParser
from .types import (
    BlockType,
    ChunkType,
    CodeBlock,
    ContentBlock,
    ParamMap,
    ParsedMessage,
    ParserState,
    StreamChunk,
    TextBlock,
    ThinkingBlock,
    ToolCall,
    ToolUseBlock,
)

__all__ = [
    # parsers
    "AssistantMessageParser",
    "StreamingParser",
    "StreamHandler",
    "ParserOptions",
    "parse_assistant_message",
    "extract_tool_calls",
    "extract_params",
    "coerce_value",
    # types
    "BlockType",
    "ChunkType",
    "CodeBlock",
    "ContentBlock",
    "ParamMap",
    "ParsedMessage",
    "ParserState",
    "StreamChunk",
    "TextBlock",
    "ThinkingBlock",
    "ToolCall",
    "ToolUseBlock",
    # exceptions
    "ParserError",
    "ConfigurationError",
    "StreamClosedError",
]
