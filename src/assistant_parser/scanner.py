"""Incremental markup scanner for assistant output.

The scanner recognizes three constructs in text that may arrive in
arbitrary fragments:

    <tool name="read_file"> ... </tool>
    <thinking> ... </thinking>
    ```python
    ...
    ```

It keeps back the shortest tail of the input that could still turn into a
marker, so no classification is ever made that a later fragment would
contradict. Both the batch parser and the streaming parser run on it, which
is what keeps their results identical for any fragmentation of the input.
"""

import re
import string
from dataclasses import dataclass
from enum import Enum, auto

from .config import ParserOptions
from .logging import get_logger, preview
from .params import extract_params
from .types import ChunkType, ParserState, StreamChunk

logger = get_logger(__name__)

FENCE = "```"

_CANDIDATE = re.compile(r"[<`]")
_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_.:-")
_LANGUAGE_CHARS = frozenset(string.ascii_letters + string.digits + "_+#.-")
_LINE_PADDING = " \t\r"

_CONSTRUCT_STATES = (ParserState.IN_TOOL_BODY, ParserState.IN_THINKING, ParserState.IN_CODE)


class MatchStatus(Enum):
    """Outcome of trying a marker at a position."""
    NONE = auto()
    PARTIAL = auto()  # consistent so far, input ran out
    COMPLETE = auto()


@dataclass(frozen=True)
class Match:
    """Result of a marker matcher.

    Attributes:
        status: Whether the marker matched
        end: Index just past the marker (COMPLETE only)
        value: Captured tool name or fence language, if any
    """
    status: MatchStatus
    end: int = 0
    value: str | None = None


NO_MATCH = Match(MatchStatus.NONE)
NEED_MORE = Match(MatchStatus.PARTIAL)


@dataclass(frozen=True)
class UnterminatedConstruct:
    """A construct still open when the input ended.

    Attributes:
        state: The scanner state it was left in
        raw: Its markup, from the opening marker to end of input
        tool_name: Name of the tool, for an unterminated tool call
        start: Offset of the opening marker in the input
    """
    state: ParserState
    raw: str
    tool_name: str | None = None
    start: int = 0


# ==================== marker matchers ====================


def partial_suffix_length(text: str, marker: str) -> int:
    """Length of the longest suffix of text that is a proper prefix of marker.

    That suffix may still become the marker once more text arrives, so it
    is not safe to classify yet.
    """
    for size in range(min(len(marker) - 1, len(text)), 0, -1):
        if text.endswith(marker[:size]):
            return size
    return 0


def match_literal(text: str, pos: int, literal: str) -> Match:
    """Match an exact string at pos."""
    window = text[pos:pos + len(literal)]
    if window == literal:
        return Match(MatchStatus.COMPLETE, pos + len(literal))
    if literal.startswith(window):
        return NEED_MORE
    return NO_MATCH


def match_tool_open(text: str, pos: int, tag: str) -> Match:
    """Match an opening tool tag such as <tool name="read_file"> at pos."""
    head = match_literal(text, pos, "<" + tag)
    if head.status is not MatchStatus.COMPLETE:
        return head

    n = len(text)
    i = head.end
    if i == n:
        return NEED_MORE
    if not text[i].isspace():
        return NO_MATCH
    while i < n and text[i].isspace():
        i += 1

    attribute = match_literal(text, i, 'name="')
    if attribute.status is not MatchStatus.COMPLETE:
        return attribute

    start = i = attribute.end
    while i < n and text[i] in _NAME_CHARS:
        i += 1
    if i == n:
        return NEED_MORE
    if text[i] != '"' or i == start:
        return NO_MATCH
    name = text[start:i]

    i += 1
    while i < n and text[i].isspace():
        i += 1
    if i == n:
        return NEED_MORE
    if text[i] != ">":
        return NO_MATCH
    return Match(MatchStatus.COMPLETE, i + 1, name)


def match_fence_open(text: str, pos: int) -> Match:
    """Match a fence opener line (```lang followed by a newline) at pos.

    The caller checks that pos is at the start of a line. The captured
    value is the language, or None for a bare fence.
    """
    head = match_literal(text, pos, FENCE)
    if head.status is not MatchStatus.COMPLETE:
        return head

    n = len(text)
    i = head.end
    while i < n and text[i] in _LANGUAGE_CHARS:
        i += 1
    language = text[head.end:i]
    while i < n and text[i] in _LINE_PADDING:
        i += 1
    if i == n:
        return NEED_MORE
    if text[i] != "\n":
        return NO_MATCH
    return Match(MatchStatus.COMPLETE, i + 1, language or None)


def match_fence_close(text: str, pos: int, at_end: bool = False) -> Match:
    """Match a closing fence line at pos.

    The line must be exactly three backticks (trailing blanks allowed),
    ended by a newline or, when at_end is set, by the end of input. The
    newline itself is not part of the match.
    """
    head = match_literal(text, pos, FENCE)
    if head.status is MatchStatus.NONE:
        return head
    if head.status is MatchStatus.PARTIAL:
        return NO_MATCH if at_end else head

    n = len(text)
    i = head.end
    while i < n and text[i] in _LINE_PADDING:
        i += 1
    if i == n:
        return Match(MatchStatus.COMPLETE, i) if at_end else NEED_MORE
    if text[i] != "\n":
        return NO_MATCH
    return Match(MatchStatus.COMPLETE, i)


# ==================== scanner ====================


class MarkupScanner:
    """State machine that classifies assistant output incrementally.

    feed() returns the chunks that became certain with the new text;
    finish() resolves whatever is left at end of input. Constructs do not
    nest: inside a construct only its own closing marker is recognized.

    Usage:
        scanner = MarkupScanner()
        for fragment in fragments:
            for chunk in scanner.feed(fragment):
                handle(chunk)
        chunks, unterminated = scanner.finish()
    """

    def __init__(self, options: ParserOptions | None = None):
        self.options = options or ParserOptions()
        self._tool_prefix = "<" + self.options.tool_tag_name
        self._tool_close = f"</{self.options.tool_tag_name}>"
        self._thinking_open = f"<{self.options.thinking_tag_name}>"
        self._thinking_close = f"</{self.options.thinking_tag_name}>"
        self.reset()

    @property
    def state(self) -> ParserState:
        """Current scanner state."""
        return self._state

    @property
    def pending(self) -> str:
        """The undecided suffix: text seen but not yet classified."""
        return self._buffer

    @property
    def open_tool_name(self) -> str | None:
        """Name of the tool call currently being accumulated, if any."""
        return self._tool_name if self._state is ParserState.IN_TOOL_BODY else None

    def reset(self) -> None:
        """Discard all state and return to PLAIN."""
        self._state = ParserState.PLAIN
        self._buffer = ""
        # character before the buffer; the start of input counts as a line start
        self._previous = "\n"
        # characters consumed so far, the offset of the buffer's first character
        self._offset = 0
        self._open_start = 0
        self._body: list[str] = []
        self._open_raw = ""
        self._tool_name: str | None = None
        self._language: str | None = None

    def feed(self, text: str) -> list[StreamChunk]:
        """Scan more text.

        Args:
            text: The next fragment of input

        Returns:
            Chunks whose classification is now certain, in source order
        """
        chunks: list[StreamChunk] = []
        if text:
            self._buffer += text
            self._drain(chunks, at_end=False)
        return chunks

    def finish(self) -> tuple[list[StreamChunk], UnterminatedConstruct | None]:
        """Resolve the remaining input as if no more text will come.

        An undecided suffix becomes text and a code fence may close at end
        of input. A construct that is still open is returned separately
        instead of as a chunk. The scanner is reset afterwards.

        Returns:
            The final chunks and the unterminated construct, if any
        """
        chunks: list[StreamChunk] = []
        self._drain(chunks, at_end=True)

        unterminated = None
        if self._state in _CONSTRUCT_STATES:
            raw = self._open_raw + "".join(self._body) + self._buffer
            unterminated = UnterminatedConstruct(self._state, raw, self._tool_name, self._open_start)
            logger.debug(
                "Input ended inside %s at offset %d: %s",
                self._state.name, self._open_start, preview(raw),
            )

        self.reset()
        return chunks, unterminated

    def _drain(self, chunks: list[StreamChunk], at_end: bool) -> None:
        # each step returns True after a transition that may leave more to scan
        while True:
            if self._state is ParserState.IN_CODE:
                progressed = self._scan_code(chunks, at_end)
            elif self._state in (ParserState.IN_TOOL_BODY, ParserState.IN_THINKING):
                progressed = self._scan_tagged_body(chunks, at_end)
            else:
                progressed = self._scan_plain(chunks, at_end)
            if not progressed:
                return

    def _scan_plain(self, chunks: list[StreamChunk], at_end: bool) -> bool:
        buf = self._buffer
        pos = 0
        while True:
            start = self._next_candidate(buf, pos)
            if start == -1:
                self._emit_text(chunks, buf)
                self._consume(len(buf))
                self._state = ParserState.PLAIN
                return False

            match, target = self._match_opening(buf, start)
            if match.status is MatchStatus.NONE or (match.status is MatchStatus.PARTIAL and at_end):
                pos = start + 1
                continue

            self._emit_text(chunks, buf[:start])
            self._consume(start)
            if match.status is MatchStatus.PARTIAL:
                self._state = target
                return False

            self._open_construct(chunks, target, buf[start:match.end], match.value)
            self._consume(match.end - start)
            return True

    def _next_candidate(self, buf: str, pos: int) -> int:
        # '<' anywhere, '`' only at a line start
        while True:
            found = _CANDIDATE.search(buf, pos)
            if found is None:
                return -1
            index = found.start()
            if buf[index] == "<":
                return index
            previous = buf[index - 1] if index else self._previous
            if previous == "\n":
                return index
            pos = index + 1

    def _match_opening(self, buf: str, start: int) -> tuple[Match, ParserState]:
        if buf[start] == "`":
            fence = match_fence_open(buf, start)
            if fence.status is MatchStatus.COMPLETE:
                return fence, ParserState.IN_CODE
            # an unconfirmed fence is plain text until its line completes
            return fence, ParserState.PLAIN

        tool = match_tool_open(buf, start, self.options.tool_tag_name)
        if tool.status is MatchStatus.COMPLETE:
            return tool, ParserState.IN_TOOL_BODY
        thinking = match_literal(buf, start, self._thinking_open)
        if thinking.status is MatchStatus.COMPLETE:
            return thinking, ParserState.IN_THINKING

        if tool.status is MatchStatus.PARTIAL:
            if buf.startswith(self._tool_prefix, start):
                return tool, ParserState.IN_TOOL_OPEN
            return tool, ParserState.PLAIN
        if thinking.status is MatchStatus.PARTIAL:
            return thinking, ParserState.PLAIN
        return NO_MATCH, ParserState.PLAIN

    def _scan_tagged_body(self, chunks: list[StreamChunk], at_end: bool) -> bool:
        close = self._tool_close if self._state is ParserState.IN_TOOL_BODY else self._thinking_close
        buf = self._buffer

        index = buf.find(close)
        if index == -1:
            keep = 0 if at_end else partial_suffix_length(buf, close)
            self._body.append(buf[:len(buf) - keep])
            self._consume(len(buf) - keep)
            return False

        self._body.append(buf[:index])
        self._close_construct(chunks, close)
        self._consume(index + len(close))
        return True

    def _scan_code(self, chunks: list[StreamChunk], at_end: bool) -> bool:
        buf = self._buffer
        index = 0
        while True:
            previous = buf[index - 1] if index else self._previous
            if previous == "\n":
                match = match_fence_close(buf, index, at_end)
                if match.status is MatchStatus.COMPLETE:
                    self._body.append(buf[:index])
                    self._close_construct(chunks, buf[index:match.end])
                    self._consume(match.end)
                    return True
                if match.status is MatchStatus.PARTIAL:
                    self._body.append(buf[:index])
                    self._consume(index)
                    return False

            newline = buf.find("\n", index)
            if newline == -1:
                self._body.append(buf)
                self._consume(len(buf))
                return False
            index = newline + 1

    def _open_construct(
        self,
        chunks: list[StreamChunk],
        state: ParserState,
        raw: str,
        value: str | None,
    ) -> None:
        self._state = state
        self._open_raw = raw
        self._open_start = self._offset
        self._body = []
        if state is ParserState.IN_TOOL_BODY:
            self._tool_name = value
            logger.debug("Tool call started: %s", value)
            chunks.append(StreamChunk(
                type=ChunkType.TOOL_START, tool_name=value, raw=raw, start=self._open_start
            ))
        elif state is ParserState.IN_CODE:
            self._language = value

    def _close_construct(self, chunks: list[StreamChunk], close_raw: str) -> None:
        body = "".join(self._body)
        raw = self._open_raw + body + close_raw

        if self._state is ParserState.IN_TOOL_BODY:
            params = extract_params(body)
            logger.debug("Tool call completed: %s (%d params)", self._tool_name, len(params))
            chunks.append(StreamChunk(
                type=ChunkType.TOOL_END,
                content=body,
                tool_name=self._tool_name,
                tool_params=params,
                raw=raw,
                start=self._open_start,
            ))
        elif self._state is ParserState.IN_THINKING:
            chunks.append(StreamChunk(
                type=ChunkType.THINKING,
                content=body.strip("\r\n"),
                raw=raw,
                start=self._open_start,
            ))
        else:
            chunks.append(StreamChunk(
                type=ChunkType.CODE,
                content=_strip_line_terminator(body),
                language=self._language,
                raw=raw,
                start=self._open_start,
            ))

        self._state = ParserState.PLAIN
        self._body = []
        self._open_raw = ""
        self._tool_name = None
        self._language = None

    def _emit_text(self, chunks: list[StreamChunk], text: str) -> None:
        if text:
            chunks.append(StreamChunk(type=ChunkType.TEXT, content=text, raw=text, start=self._offset))

    def _consume(self, count: int) -> None:
        if count:
            self._previous = self._buffer[count - 1]
            self._buffer = self._buffer[count:]
            self._offset += count


def _strip_line_terminator(body: str) -> str:
    # the newline before a closing fence ends the last code line
    if body.endswith("\r\n"):
        return body[:-2]
    if body.endswith("\n"):
        return body[:-1]
    return body
