"""Types produced by the assistant parser.

Batch parsing returns a ParsedMessage made of immutable content blocks.
Streaming parsing emits StreamChunk events to a callback as soon as each
classification is certain.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Union

# parameter name -> value, in first-seen order
ParamMap = dict[str, Any]


class BlockType(Enum):
    """Kind of a content block in a parsed message."""
    TEXT = "text"
    THINKING = "thinking"
    CODE = "code"
    TOOL_USE = "tool_use"


class ChunkType(Enum):
    """Kind of an event emitted while streaming."""
    TEXT = "text"
    THINKING = "thinking"
    CODE = "code"
    TOOL_START = "tool_start"
    TOOL_END = "tool_end"


class ParserState(Enum):
    """State of the incremental markup scanner."""
    PLAIN = auto()
    IN_TOOL_OPEN = auto()
    IN_TOOL_BODY = auto()
    IN_THINKING = auto()
    IN_CODE = auto()


# ==================== content blocks ====================
#
# Every block records where its raw text starts in the parsed input; end is
# one past its last character. Positions are provenance, not identity, so
# they are left out of equality.


@dataclass(frozen=True)
class TextBlock:
    """A run of prose between constructs.

    Attributes:
        content: The text, verbatim
        partial: True when this is the raw tail of a construct that was
            still open at end of input
        start: Offset of the text in the input
    """
    content: str
    partial: bool = False
    start: int = field(default=0, compare=False)

    @property
    def type(self) -> BlockType:
        return BlockType.TEXT

    @property
    def raw(self) -> str:
        return self.content

    @property
    def end(self) -> int:
        return self.start + len(self.content)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type.value, "content": self.content}
        if self.partial:
            result["partial"] = True
        result.update(start=self.start, end=self.end)
        return result


@dataclass(frozen=True)
class ThinkingBlock:
    """A <thinking> span."""
    content: str
    raw: str
    start: int = field(default=0, compare=False)

    @property
    def type(self) -> BlockType:
        return BlockType.THINKING

    @property
    def end(self) -> int:
        return self.start + len(self.raw)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "content": self.content, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code block. language is None for a bare fence."""
    language: str | None
    content: str
    raw: str
    start: int = field(default=0, compare=False)

    @property
    def type(self) -> BlockType:
        return BlockType.CODE

    @property
    def end(self) -> int:
        return self.start + len(self.raw)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "language": self.language,
            "content": self.content,
            "start": self.start,
            "end": self.end,
        }


@dataclass(frozen=True)
class ToolUseBlock:
    """A closed tool invocation.

    Attributes:
        name: Tool name from the opening tag
        params: Extracted parameters
        raw: The full markup, opening tag through closing tag
        start: Offset of the opening tag in the input
    """
    name: str
    params: ParamMap
    raw: str
    start: int = field(default=0, compare=False)

    @property
    def type(self) -> BlockType:
        return BlockType.TOOL_USE

    @property
    def end(self) -> int:
        return self.start + len(self.raw)

    def to_tool_call(self) -> "ToolCall":
        return ToolCall(name=self.name, params=self.params, raw=self.raw, start=self.start)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "name": self.name,
            "params": dict(self.params),
            "start": self.start,
            "end": self.end,
        }


ContentBlock = Union[TextBlock, ThinkingBlock, CodeBlock, ToolUseBlock]


@dataclass(frozen=True)
class ToolCall:
    """A tool call ready for execution.

    The parser does not validate params against any tool schema; the
    executing side must check its own required fields. raw and start
    locate the call in the message for highlighting and history
    re-analysis; two calls with the same name and params compare equal.
    """
    name: str
    params: ParamMap
    raw: str = field(default="", compare=False)
    start: int = field(default=0, compare=False)

    @property
    def end(self) -> int:
        return self.start + len(self.raw)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "params": dict(self.params)}



@dataclass(frozen=True)
class ParsedMessage:
    """Result of parsing a complete assistant message.

    Attributes:
        blocks: Content blocks in source order
        tool_calls: Every closed tool call, in source order
        has_partial_tool: True if the input ends inside an opened tool call
        partial_tool_content: Raw text of that unterminated tool call
    """
    blocks: list[ContentBlock] = field(default_factory=list)
    tool_calls: list[ToolCall] = field(default_factory=list)
    has_partial_tool: bool = False
    partial_tool_content: str | None = None

    @property
    def raw(self) -> str:
        """Reconstruct the parsed input from the blocks."""
        return "".join(block.raw for block in self.blocks)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary representation."""
        result: dict[str, Any] = {
            "blocks": [block.to_dict() for block in self.blocks],
            "tool_calls": [tc.to_dict() for tc in self.tool_calls],
            "has_partial_tool": self.has_partial_tool,
        }
        if self.partial_tool_content is not None:
            result["partial_tool_content"] = self.partial_tool_content
        return result


# ==================== streaming types ====================


@dataclass
class StreamChunk:
    """An event emitted by the streaming parser.

    Attributes:
        type: What kind of event this is
        content: Text for TEXT, body for THINKING/CODE, raw inner body for TOOL_END
        language: Fence language for CODE
        tool_name: Tool name for TOOL_START and TOOL_END
        tool_params: Extracted parameters for TOOL_END
        raw: Exact source markup covered by this event
        start: Offset of raw in the stream; end is one past its last character
    """
    type: ChunkType
    content: str = ""
    language: str | None = None
    tool_name: str | None = None
    tool_params: ParamMap | None = None
    raw: str = ""
    start: int = 0

    @property
    def end(self) -> int:
        return self.start + len(self.raw)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary representation."""
        result: dict[str, Any] = {"type": self.type.value}
        if self.type in (ChunkType.TOOL_START, ChunkType.TOOL_END):
            result["tool_name"] = self.tool_name
        if self.type == ChunkType.TOOL_END:
            result["tool_params"] = dict(self.tool_params or {})
        elif self.type != ChunkType.TOOL_START:
            result["content"] = self.content
        if self.type == ChunkType.CODE:
            result["language"] = self.language
        result.update(start=self.start, end=self.end)
        return result


# Type alias for chunk callbacks
StreamCallback = Callable[[StreamChunk], None]
