"""Stream handling for assistant output.

This module provides the StreamHandler class which drives a StreamingParser
over the text fragments of one response, echoes them as they are
classified, and returns the final decomposition of the whole message.
"""

from typing import Callable, Iterable, Iterator

from .config import ParserOptions
from .stream_parser import StreamingParser
from .types import ChunkType, ParsedMessage, StreamChunk, ToolCall


def split_fragments(text: str, size: int) -> Iterator[str]:
    """Yield text in fixed-size fragments, like a token stream would.

    Args:
        text: The text to split.
        size: Fragment length, at least 1.
    """
    if size < 1:
        raise ValueError(f"Fragment size must be at least 1, got {size}")
    for start in range(0, len(text), size):
        yield text[start:start + size]


class StreamHandler:
    """Handles a streamed assistant response.

    Feeds fragments into a fresh StreamingParser and reacts to its chunks:
    - Text is printed as soon as it is classified
    - Thinking, code and tool events are printed in verbose mode
    - Completed tool calls are handed to on_tool_call
    """

    def __init__(
        self,
        verbose: bool = False,
        options: ParserOptions | None = None,
        on_tool_call: Callable[[ToolCall], None] | None = None,
    ):
        """Initialize the stream handler.

        Args:
            verbose: Whether to print verbose output during streaming.
            options: Markup options for the parser.
            on_tool_call: Receives each tool call as soon as it closes.
        """
        self.verbose = verbose
        self.options = options or ParserOptions()
        self.on_tool_call = on_tool_call
        self._has_printed_prefix = False

    def process_stream(self, fragments: Iterable[str]) -> ParsedMessage:
        """Process a stream and return the parsed message.

        Args:
            fragments: Text fragments in arrival order.

        Returns:
            The batch decomposition of the full response.
        """
        self._has_printed_prefix = False
        parser = StreamingParser(self._handle_chunk, self.options)

        for fragment in fragments:
            parser.feed(fragment)
        parser.flush()

        print()  # newline after stream

        if self.verbose and parser.open_tool_name:
            print(f"[Verbose] Stream ended inside tool call '{parser.open_tool_name}'")

        result = parser.get_result()
        if self.verbose and result.tool_calls:
            self._print_tool_calls_verbose(result.tool_calls)
        return result

    def _handle_chunk(self, chunk: StreamChunk) -> None:
        """Print a chunk and dispatch completed tool calls."""
        if chunk.type == ChunkType.TEXT:
            if not self._has_printed_prefix:
                print("Assistant: ", end="", flush=True)
                self._has_printed_prefix = True
            print(chunk.content, end="", flush=True)
            return

        if chunk.type == ChunkType.TOOL_END:
            if self.verbose:
                print(f"\n[Tool] {chunk.tool_name} finished", flush=True)
            if self.on_tool_call is not None:
                self.on_tool_call(ToolCall(
                    name=chunk.tool_name, params=chunk.tool_params or {}, raw=chunk.raw, start=chunk.start
                ))
            return

        if not self.verbose:
            return
        if chunk.type == ChunkType.TOOL_START:
            print(f"\n[Tool] {chunk.tool_name} started", flush=True)
        elif chunk.type == ChunkType.THINKING:
            print(f"\n[Thinking]: {chunk.content}", flush=True)
        elif chunk.type == ChunkType.CODE:
            print(f"\n[Code: {chunk.language or 'text'}]\n{chunk.content}", flush=True)

    def _print_tool_calls_verbose(self, tool_calls: list[ToolCall]) -> None:
        """Print tool calls in verbose mode.

        Args:
            tool_calls: List of tool calls to print.
        """
        print(f"\n[Verbose] Parsed {len(tool_calls)} tool calls:")
        for tc in tool_calls:
            print(f"  - Name: {tc.name}")
            print(f"    Params: {tc.params}")
