"""centralized configuration management using pydantic settings.

this module provides the parser options and the environment-driven settings
they can be built from. the parser core never reads settings on its own:
callers pass a ParserOptions explicitly.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

_TAG_NAME = re.compile(r"[A-Za-z_][\w-]*")


@dataclass(frozen=True)
class ParserOptions:
    """options shared by the batch and streaming parsers.

    attributes:
        allow_partial_parsing: report unterminated tool calls via has_partial_tool
        tool_tag_name: element name of tool invocations (<tool name="...">)
        thinking_tag_name: element name of thinking spans (<thinking>)
    """

    allow_partial_parsing: bool = True
    tool_tag_name: str = "tool"
    thinking_tag_name: str = "thinking"

    def __post_init__(self) -> None:
        for option in ("tool_tag_name", "thinking_tag_name"):
            value = getattr(self, option)
            if not isinstance(value, str) or not _TAG_NAME.fullmatch(value):
                raise ConfigurationError(option, f"{value!r} is not a valid tag name")
        if self.tool_tag_name == self.thinking_tag_name:
            raise ConfigurationError(
                "thinking_tag_name", "must differ from tool_tag_name"
            )


class Settings(BaseSettings):
    """main settings class for the assistant parser.

    configuration is loaded from environment variables. a .env file in the
    working directory is also loaded if present.

    attributes:
        tool_tag_name: element name of tool invocations
        thinking_tag_name: element name of thinking spans
        allow_partial_parsing: flag unterminated tool calls in batch results
        log_level: logging level (DEBUG, INFO, WARNING, ERROR)
        stream_chunk_size: fragment size used when the cli simulates streaming
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # ignore extra env vars
        populate_by_name=True,
    )

    # markup configuration
    tool_tag_name: str = Field(default="tool", alias="ASSISTANT_PARSER_TOOL_TAG")
    thinking_tag_name: str = Field(default="thinking", alias="ASSISTANT_PARSER_THINKING_TAG")
    allow_partial_parsing: bool = Field(default=True, alias="ASSISTANT_PARSER_ALLOW_PARTIAL")

    # runtime configuration
    log_level: str = Field(default="WARNING", alias="ASSISTANT_PARSER_LOG_LEVEL")
    stream_chunk_size: int = Field(default=16, ge=1, alias="ASSISTANT_PARSER_CHUNK_SIZE")

    def to_parser_options(self, **overrides) -> ParserOptions:
        """build parser options from these settings.

        args:
            **overrides: option fields that take precedence (None values are ignored)

        returns:
            the validated parser options

        raises:
            ConfigurationError: if a tag name is invalid
        """
        values = {
            "allow_partial_parsing": self.allow_partial_parsing,
            "tool_tag_name": self.tool_tag_name,
            "thinking_tag_name": self.thinking_tag_name,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return ParserOptions(**values)


@lru_cache
def get_settings() -> Settings:
    """get the singleton settings instance.

    uses lru_cache to ensure only one instance is created.
    call get_settings.cache_clear() to reload settings if needed.

    returns:
        the settings instance
    """
    return Settings()
