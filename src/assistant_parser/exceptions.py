"""Custom exception hierarchy for the assistant parser.

Parsing itself never raises on model output: malformed bodies, unterminated
constructs and stray tags all degrade to a best-effort classification.
The exceptions below cover misuse of the public API and invalid options.
"""


class ParserError(Exception):
    """Base exception for all parser errors."""


# =============================================================================
# Configuration Errors - Invalid parser options
# =============================================================================

class ConfigurationError(ParserError):
    """Parser options are invalid."""

    def __init__(self, option: str, reason: str):
        self.option = option
        self.reason = reason
        super().__init__(f"Invalid parser option '{option}': {reason}")


# =============================================================================
# Stream Errors - Misuse of the streaming assembler
# =============================================================================

class StreamClosedError(ParserError):
    """Raised when a fragment is fed after the stream was flushed or a
    chunk callback failed.

    Call reset() to start a new stream on the same instance.
    """

    def __init__(self, fragment_length: int = 0):
        self.fragment_length = fragment_length
        super().__init__(
            f"Cannot feed {fragment_length} characters: stream is closed (call reset() first)"
        )
