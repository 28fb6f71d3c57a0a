"""Parameter extraction for tool invocation bodies.

A tool body is either a JSON object or a flat list of XML-style
<key>value</key> pairs. Model output is frequently malformed, so
extraction never raises: anything unusable yields an empty map.
"""

import json
import math
import re
from typing import Any

from .logging import get_logger, preview
from .types import ParamMap

logger = get_logger(__name__)

# top-level <key>value</key> pairs; the backreference pins the close tag
_XML_PARAM = re.compile(r"<([A-Za-z_][\w.-]*)>(.*?)</\1>", re.DOTALL)
_INTEGER = re.compile(r"[+-]?[0-9]+")
_DECIMAL = re.compile(r"[+-]?(?:[0-9]+\.[0-9]*|\.[0-9]+)")


def extract_params(raw_inner: str) -> ParamMap:
    """Extract tool parameters from the text between a tool's tags.

    JSON values keep their native types. XML-style values are coerced
    with coerce_value().

    Args:
        raw_inner: The tool body

    Returns:
        Parameter name to value, in first-seen order
    """
    body = raw_inner.strip()
    if not body:
        return {}

    if body.startswith("{"):
        params = _parse_json_object(body)
        if params is not None:
            return params
        logger.debug(
            "Tool body is not a valid JSON object, falling back to XML-style params: %s",
            preview(body),
        )

    return _parse_xml_params(body)


def coerce_value(value: str) -> Any:
    """Coerce an XML-style parameter value to bool, int or float.

    Only the exact strings "true" and "false" become booleans, and only
    plain ASCII integer or decimal literals become numbers. A literal too
    large to convert stays a string.

    Args:
        value: The trimmed text content of a parameter tag

    Returns:
        The coerced value, or the string unchanged
    """
    if value == "true":
        return True
    if value == "false":
        return False
    if _INTEGER.fullmatch(value):
        try:
            return int(value)
        except ValueError:
            # longer than the interpreter's int string conversion limit
            return value
    if _DECIMAL.fullmatch(value):
        number = float(value)
        return number if math.isfinite(number) else value
    return value


def _parse_json_object(body: str) -> ParamMap | None:
    try:
        parsed = json.loads(body, parse_int=_parse_json_int)
    except (ValueError, RecursionError):
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


def _parse_json_int(literal: str) -> int | str:
    try:
        return int(literal)
    except ValueError:
        # past the int string conversion limit; keep the digits
        return literal


def _parse_xml_params(body: str) -> ParamMap:
    params: ParamMap = {}
    for match in _XML_PARAM.finditer(body):
        # reassigning keeps the key at its first position
        params[match.group(1)] = coerce_value(match.group(2).strip())
    return params
