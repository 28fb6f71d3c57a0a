"""Batch parsing of complete assistant messages.

AssistantMessageParser decomposes a finished message into text, thinking,
code and tool-use blocks. It runs the same MarkupScanner as the streaming
parser, so a message parsed here yields the same constructs as the events
emitted while it was streamed.
"""

from .config import ParserOptions
from .scanner import MarkupScanner
from .types import (
    ChunkType,
    CodeBlock,
    ContentBlock,
    ParsedMessage,
    ParserState,
    StreamChunk,
    TextBlock,
    ThinkingBlock,
    ToolCall,
    ToolUseBlock,
)


class AssistantMessageParser:
    """Parser for complete assistant messages.

    Usage:
        parser = AssistantMessageParser()
        result = parser.parse(message)
        for call in result.tool_calls:
            run(call.name, call.params)
    """

    def __init__(self, options: ParserOptions | None = None):
        """Initialize the parser.

        Args:
            options: Markup options. Defaults to ParserOptions().
        """
        self.options = options or ParserOptions()

    def parse(self, content: str) -> ParsedMessage:
        """Split a message into content blocks and tool calls.

        Prose between two constructs becomes one TextBlock, whitespace
        included, so the blocks' raw text reconstructs the input exactly.
        A construct still open at the end is kept as a trailing partial
        TextBlock and does not produce a tool call.

        Args:
            content: The complete message text

        Returns:
            The parsed message
        """
        scanner = MarkupScanner(self.options)
        chunks = scanner.feed(content)
        final_chunks, unterminated = scanner.finish()
        chunks.extend(final_chunks)

        blocks: list[ContentBlock] = []
        tool_calls: list[ToolCall] = []
        text_parts: list[StreamChunk] = []

        def flush_text() -> None:
            if text_parts:
                content = "".join(part.content for part in text_parts)
                blocks.append(TextBlock(content=content, start=text_parts[0].start))
                text_parts.clear()

        for chunk in chunks:
            if chunk.type == ChunkType.TEXT:
                text_parts.append(chunk)
                continue
            if chunk.type == ChunkType.TOOL_START:
                continue

            flush_text()
            if chunk.type == ChunkType.THINKING:
                blocks.append(ThinkingBlock(content=chunk.content, raw=chunk.raw, start=chunk.start))
            elif chunk.type == ChunkType.CODE:
                blocks.append(CodeBlock(
                    language=chunk.language, content=chunk.content, raw=chunk.raw, start=chunk.start
                ))
            elif chunk.type == ChunkType.TOOL_END:
                block = ToolUseBlock(
                    name=chunk.tool_name, params=chunk.tool_params or {}, raw=chunk.raw, start=chunk.start
                )
                blocks.append(block)
                tool_calls.append(block.to_tool_call())
        flush_text()

        has_partial_tool = False
        partial_tool_content = None
        if unterminated is not None:
            blocks.append(TextBlock(content=unterminated.raw, partial=True, start=unterminated.start))
            if self.options.allow_partial_parsing and unterminated.state is ParserState.IN_TOOL_BODY:
                has_partial_tool = True
                partial_tool_content = unterminated.raw

        return ParsedMessage(
            blocks=blocks,
            tool_calls=tool_calls,
            has_partial_tool=has_partial_tool,
            partial_tool_content=partial_tool_content,
        )

    def extract_tool_calls(self, content: str) -> list[ToolCall]:
        """Return only the closed tool calls in a message."""
        return self.parse(content).tool_calls

    def extract_text(self, content: str) -> str:
        """Return the prose of a message with every construct removed.

        Each text run is stripped and empty runs are dropped; the rest are
        joined with newlines. The raw tail of an unterminated construct is
        left out too.
        """
        result = self.parse(content)
        parts = [
            block.content.strip()
            for block in result.blocks
            if isinstance(block, TextBlock) and not block.partial
        ]
        return "\n".join(part for part in parts if part)

    def has_tool_calls(self, content: str) -> bool:
        """Check whether a message contains at least one closed tool call."""
        return bool(self.parse(content).tool_calls)


def parse_assistant_message(content: str, options: ParserOptions | None = None) -> ParsedMessage:
    """Parse a message with a one-off parser."""
    return AssistantMessageParser(options).parse(content)


def extract_tool_calls(content: str) -> list[ToolCall]:
    """Extract closed tool calls using the default options."""
    return AssistantMessageParser().extract_tool_calls(content)
