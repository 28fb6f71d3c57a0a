"""Main entry point for the assistant parser CLI.

Reads an assistant message from a file or stdin and prints its
decomposition, either parsed in one pass or replayed through the
streaming parser in fixed-size fragments.
"""

import argparse
import json
import sys

import yaml

from .config import ParserOptions, get_settings
from .exceptions import ConfigurationError
from .logging import get_logger, setup_logging
from .parser import AssistantMessageParser
from .stream_handler import StreamHandler, split_fragments
from .stream_parser import StreamingParser
from .types import ParsedMessage, StreamChunk

logger = get_logger(__name__)

OUTPUT_FORMATS = ["json", "text", "tools", "events"]


def load_yaml_config(path: str = "config.yaml") -> dict:
    """Load configuration from config.yaml if it exists.

    Raises:
        ConfigurationError: If the file is not valid YAML or not a mapping
    """
    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        raise ConfigurationError("config", f"{path} is not valid YAML: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            "config", f"{path} must contain a mapping, got {type(config).__name__}"
        )
    return config


def build_parser_options(args: argparse.Namespace, yaml_config: dict) -> ParserOptions:
    """Determine the parser options to use.

    Priority order:
    1. CLI arguments
    2. Config file (config.yaml, "parser" section)
    3. Environment variables (via pydantic settings)
    """
    settings = get_settings()
    parser_config = yaml_config.get("parser") or {}
    if not isinstance(parser_config, dict):
        raise ConfigurationError(
            "parser", f"config section must be a mapping, got {type(parser_config).__name__}"
        )

    allow_partial = False if args.no_partial else parser_config.get("allow_partial_parsing")
    return settings.to_parser_options(
        tool_tag_name=args.tool_tag or parser_config.get("tool_tag_name"),
        thinking_tag_name=args.thinking_tag or parser_config.get("thinking_tag_name"),
        allow_partial_parsing=allow_partial,
    )


def read_input(path: str | None) -> str:
    """Read the message from a file, or from stdin for None or '-'."""
    if path is None or path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def collect_events(text: str, options: ParserOptions, chunk_size: int) -> list[StreamChunk]:
    """Replay text through a StreamingParser and collect every chunk."""
    events: list[StreamChunk] = []
    parser = StreamingParser(events.append, options)
    for fragment in split_fragments(text, chunk_size):
        parser.feed(fragment)
    parser.flush()
    return events


def format_result(result: ParsedMessage, output_format: str, parser: AssistantMessageParser) -> str:
    """Render a parsed message for the chosen output format."""
    if output_format == "text":
        return parser.extract_text(result.raw)
    if output_format == "tools":
        return json.dumps([tc.to_dict() for tc in result.tool_calls], indent=2)
    return json.dumps(result.to_dict(), indent=2)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the assistant parser CLI."""
    parser = argparse.ArgumentParser(description="Parse assistant output into content blocks and tool calls")
    parser.add_argument(
        "file",
        nargs="?",
        help="File holding the assistant message (default: stdin)"
    )
    parser.add_argument(
        "--stream",
        action="store_true",
        help="Replay the message through the streaming parser, echoing text as it is classified"
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        help="Fragment size for streaming (default: ASSISTANT_PARSER_CHUNK_SIZE or 16)"
    )
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default="json",
        help="Output format (default: json)"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (also settable via ASSISTANT_PARSER_LOG_LEVEL env var)"
    )
    parser.add_argument(
        "--tool-tag",
        help="Element name of tool invocations (default: tool)"
    )
    parser.add_argument(
        "--thinking-tag",
        help="Element name of thinking spans (default: thinking)"
    )
    parser.add_argument(
        "--no-partial",
        action="store_true",
        help="Do not flag unterminated tool calls"
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to the YAML config file (default: config.yaml)"
    )
    args = parser.parse_args(argv)

    # setup logging early: cli flag > env var or .env file
    setup_logging(args.log_level or get_settings().log_level)

    try:
        yaml_config = load_yaml_config(args.config)
        options = build_parser_options(args, yaml_config)
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    chunk_size = args.chunk_size if args.chunk_size is not None else get_settings().stream_chunk_size
    if chunk_size < 1:
        print(f"Error: --chunk-size must be at least 1, got {chunk_size}")
        sys.exit(1)

    try:
        text = read_input(args.file)
    except OSError as e:
        print(f"Error: cannot read input: {e}")
        sys.exit(1)
    logger.info("Parsing %d characters", len(text))

    if args.format == "events":
        events = collect_events(text, options, chunk_size)
        print(json.dumps([event.to_dict() for event in events], indent=2))
        return

    message_parser = AssistantMessageParser(options)
    if args.stream:
        handler = StreamHandler(verbose=args.verbose, options=options)
        result = handler.process_stream(split_fragments(text, chunk_size))
    else:
        result = message_parser.parse(text)

    print(format_result(result, args.format, message_parser))


if __name__ == "__main__":
    main()
