"""
Structure checks for loaded config data.

Every check logs what is wrong and reports it through its return value; none
of them raise.
"""
from __future__ import annotations

import json
import re
from typing import Any, Iterable, Mapping

from .logger import LogSink, get_default_logger


JSON_KEY_REGEX = re.compile(r'"([^"\\]*(?:\\.[^"\\]*)*)"\s*:')
_MISSING = object()


def js_type_of(value: Any) -> str:
    """The JS `typeof` name for a decoded JSON value."""
    if value is _MISSING:
        return "undefined"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return "object"


def assert_required_fields(obj: Mapping[str, Any], required: Iterable[str], logger: LogSink | None = None) -> bool:
    logger = logger or get_default_logger()
    tag = "assert_required_fields"
    missing = [key for key in required if key not in obj]
    if missing:
        logger.error(tag, f"Missing required fields: {', '.join(missing)}")
        return False
    logger.debug(tag, "All required fields are present")
    return True


def assert_structure(obj: Mapping[str, Any], structure: Mapping[str, str], logger: LogSink | None = None) -> bool:
    """`structure` maps field names to JS type names (string, number, boolean, object)."""
    logger = logger or get_default_logger()
    tag = "assert_structure"
    valid = True
    for key, expected_type in structure.items():
        actual_type = js_type_of(obj.get(key, _MISSING))
        if actual_type != expected_type:
            logger.warn(tag, f"Field '{key}' should be of type '{expected_type}' but got '{actual_type}'")
            valid = False
    return valid


def assert_no_duplicate_keys(json_text: str, filename: str, logger: LogSink | None = None) -> bool:
    """
    Flag keys written twice in the raw JSON text. The scan is flat, so the
    same key in two different objects counts as well.
    """
    logger = logger or get_default_logger()
    tag = "assert_no_duplicate_keys"
    seen_keys: set[str] = set()
    valid = True
    for match in JSON_KEY_REGEX.finditer(json_text):
        key = match.group(1)
        if key in seen_keys:
            logger.warn(tag, f"Duplicate key detected: {key} in {filename}")
            valid = False
        seen_keys.add(key)
    return valid


def assert_enum_value(field: str, value: Any, allowed: Iterable[Any], logger: LogSink | None = None) -> bool:
    logger = logger or get_default_logger()
    allowed = list(allowed)
    if value not in allowed:
        logger.warn("assert_enum_value", f"Field '{field}' must be one of {json.dumps(allowed)}, got '{value}'")
        return False
    return True


def assert_in_range(field: str, value: Any, minimum: float, maximum: float, logger: LogSink | None = None) -> bool:
    logger = logger or get_default_logger()
    tag = "assert_in_range"
    if js_type_of(value) != "number":
        logger.warn(tag, f"Field '{field}' must be a number, got '{js_type_of(value)}'")
        return False
    if value < minimum or value > maximum:
        logger.warn(tag, f"Field '{field}' must be between {minimum} and {maximum}, got {value}")
        return False
    return True
