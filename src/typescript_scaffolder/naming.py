"""Naming helpers shared by the inference engine and the code generators."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Literal


IDENTIFIER_REGEX = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
NUMERIC_LITERAL_REGEX = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def to_pascal_case(text: str) -> str:
    """Convert a snake/kebab/dotted or camelCase string into PascalCase."""
    normalized = text.replace(".", "_")
    normalized = re.sub(r"[^0-9a-zA-Z_]+", "_", normalized)
    parts = [part for part in normalized.split("_") if part]
    return "".join(part[:1].upper() + part[1:] for part in parts)


def to_type_name(text: str) -> str:
    """
    PascalCase for synthesized type names.
    All-caps chunks are title-cased, so "badges__PREFIX__id" -> "BadgesPrefixId".
    """
    parts = [part for part in re.split(r"[^0-9a-zA-Z]+", text) if part]
    pieces: list[str] = []
    for part in parts:
        if len(part) > 1 and part.isupper():
            part = part.capitalize()
        pieces.append(part[:1].upper() + part[1:])
    name = "".join(pieces)
    if not name:
        return "Type"
    if name[0].isdigit():
        return f"T{name}"
    return name


def derive_interface_name(file_path: str | Path) -> str:
    """
    Turn a sample file name into an interface name.
    Example: user-profile.json -> UserProfile, order_log.json -> OrderLog
    """
    file_base = Path(file_path).name
    if file_base.endswith(".json"):
        file_base = file_base[: -len(".json")]
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_]", file_base))


def derive_object_name(file_path: str | Path) -> str:
    """Like derive_interface_name, but underscores survive: get_user-list.json -> Get_UserList."""
    file_base = Path(file_path).name
    if file_base.endswith(".json"):
        file_base = file_base[: -len(".json")]
    output: list[str] = []
    for part in re.split(r"(_|-)", file_base):
        if part == "-":
            continue
        if part == "_":
            output.append("_")
            continue
        output.append(part[:1].upper() + part[1:])
    return "".join(output)


def singularize(word: str) -> str:
    """Best-effort English singular for naming array element types."""
    lowered = word.lower()
    if len(word) <= 3 or lowered.endswith("ss") or lowered.endswith("us") or lowered.endswith("is"):
        return word
    if lowered.endswith("ies"):
        return word[:-3] + ("Y" if word[-3].isupper() else "y")
    if re.search(r"(ss|x|ch|sh|zz|us)es$", lowered):
        return word[:-2]
    if lowered.endswith("s"):
        return word[:-1]
    return word


def is_valid_identifier(name: str) -> bool:
    return bool(IDENTIFIER_REGEX.match(name))


def quote_property_name(name: str) -> str:
    """Return a property key usable in a TS interface body."""
    if is_valid_identifier(name):
        return name
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def infer_primitive_type(value: str) -> Literal["string", "number", "boolean"]:
    """Infer a TS primitive from a stringified value (used for .env values)."""
    if value in ("true", "false"):
        return "boolean"
    if NUMERIC_LITERAL_REGEX.match(value.strip()):
        return "number"
    return "string"
