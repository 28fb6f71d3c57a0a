"""Stream parser for assistant output arriving in fragments.

The model's text reaches us in pieces whose boundaries can fall anywhere:
inside a tag name, an attribute, a parameter body or a code fence. This
parser keeps state across fragments and reports each construct through a
callback as soon as it is certain, never earlier.
"""

from .config import ParserOptions
from .exceptions import StreamClosedError
from .logging import get_logger
from .parser import AssistantMessageParser
from .scanner import MarkupScanner, UnterminatedConstruct
from .types import (
    ChunkType,
    ParsedMessage,
    ParserState,
    StreamCallback,
    StreamChunk,
    ToolCall,
)

logger = get_logger(__name__)


class StreamingParser:
    """Incremental parser that emits StreamChunk events.

    Text is emitted as soon as it cannot be the start of a marker.
    TOOL_START fires the moment an opening tool tag is complete; TOOL_END,
    THINKING and CODE fire once, when their construct closes. Callbacks run
    synchronously inside feed(), so they should hand off slow work rather
    than do it inline.

    A construct that never closes never emits its final chunk. Callers can
    see an open tool call through open_tool_name, and the text is always
    available from get_full_content().

    An exception raised by on_chunk propagates out of feed() or flush() and
    closes the parser: the chunks after it in the same batch are already
    consumed and are never delivered, so the instance must be reset()
    before it is used again.

    Usage:
        parser = StreamingParser(on_chunk)
        for fragment in stream:
            parser.feed(fragment)
        parser.flush()
        calls = parser.get_tool_calls()
    """

    def __init__(self, on_chunk: StreamCallback, options: ParserOptions | None = None):
        """Initialize the parser.

        Args:
            on_chunk: Called with every emitted chunk, in source order
            options: Markup options. Defaults to ParserOptions().
        """
        self.options = options or ParserOptions()
        self._callback = on_chunk
        self._scanner = MarkupScanner(self.options)
        self._fragments: list[str] = []
        self._tool_calls: list[ToolCall] = []
        self._unterminated: UnterminatedConstruct | None = None
        self._closed = False

    @property
    def state(self) -> ParserState:
        """Current parser state."""
        return self._scanner.state

    @property
    def open_tool_name(self) -> str | None:
        """Name of a tool whose TOOL_START fired but whose TOOL_END has not.

        After flush() this still names a tool call the stream ended inside.
        """
        if self._unterminated is not None:
            return self._unterminated.tool_name
        return self._scanner.open_tool_name

    @property
    def is_closed(self) -> bool:
        """Whether flush() has ended the current stream."""
        return self._closed

    def feed(self, fragment: str) -> None:
        """Process the next fragment of the stream.

        Args:
            fragment: Text of any length, aligned to nothing in particular

        Raises:
            StreamClosedError: If the stream was already flushed, or a
                callback failed earlier
        """
        if self._closed:
            raise StreamClosedError(len(fragment))
        self._fragments.append(fragment)
        chunks = self._scanner.feed(fragment)
        try:
            for chunk in chunks:
                self._dispatch(chunk)
        except Exception:
            self._closed = True
            logger.debug("Chunk callback failed; parser closed until reset()")
            raise

    def flush(self) -> None:
        """End the stream.

        Any undecided suffix is emitted as text, and a code block whose
        closing fence ends the stream is emitted. Open tool calls and
        thinking spans stay unreported. Calling flush() again does nothing.
        """
        if self._closed:
            return
        self._closed = True

        chunks, unterminated = self._scanner.finish()
        self._unterminated = unterminated
        for chunk in chunks:
            self._dispatch(chunk)
        if unterminated is not None:
            logger.debug("Stream ended inside %s; no closing chunk emitted", unterminated.state.name)

    def get_full_content(self) -> str:
        """Return every fragment fed so far, concatenated."""
        return "".join(self._fragments)

    def get_tool_calls(self) -> list[ToolCall]:
        """Return the tool calls whose TOOL_END has fired."""
        return list(self._tool_calls)

    def get_result(self) -> ParsedMessage:
        """Parse the full content received so far as a complete message."""
        return AssistantMessageParser(self.options).parse(self.get_full_content())

    def reset(self) -> None:
        """Clear all content and state. Emits nothing."""
        self._scanner.reset()
        self._fragments = []
        self._tool_calls = []
        self._unterminated = None
        self._closed = False
        logger.debug("Streaming parser reset")

    def _dispatch(self, chunk: StreamChunk) -> None:
        if chunk.type == ChunkType.TOOL_END:
            self._tool_calls.append(ToolCall(
                name=chunk.tool_name, params=chunk.tool_params or {}, raw=chunk.raw, start=chunk.start
            ))
        self._callback(chunk)
