"""
Static extraction of exported interfaces from existing TypeScript sources.

This is a text scanner, not a type checker: it understands interface and
enum declarations, `extends` clauses between interfaces of the same file,
property JSDoc, optional markers, arrays, literal unions and references by
name. Property types are reduced to the tags consumed by the JSON Schema
mapper (string | number | boolean | array | union | enum | <reference-name>).
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterable, Optional

from .models import ParsedInterface, ParsedProperty


INTERFACE_HEADER_REGEX = re.compile(
    r"(?:^|[\s;}])(?:export\s+)?(?:declare\s+)?interface\s+(?P<name>[A-Za-z_$][\w$]*)\s*"
    r"(?P<params><[^{]*?>)?\s*(?:extends\s+(?P<extends>[^{]+?))?\s*\{"
)
ENUM_REGEX = re.compile(
    r"(?:export\s+)?(?:declare\s+)?(?:const\s+)?enum\s+(?P<name>[A-Za-z_$][\w$]*)\s*\{(?P<body>[^}]*)\}"
)
MEMBER_REGEX = re.compile(
    r"^(?:readonly\s+)?(?P<name>[A-Za-z_$][\w$]*|\"[^\"]*\"|'[^']*')(?P<optional>\?)?\s*:\s*(?P<type>.+)$",
    re.DOTALL,
)
STRING_LITERAL_REGEX = re.compile(r"^(\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*')$")
NUMBER_LITERAL_REGEX = re.compile(r"^-?\d+(\.\d+)?$")
PRIMITIVE_TAGS = ("string", "number", "boolean")
OPENERS = "{([<"
CLOSERS = "})]>"


# ============================================================
# Scanning helpers
# ============================================================

def _skip_string(text: str, index: int) -> int:
    """Index just past the string literal starting at `index`."""
    quote = text[index]
    cursor = index + 1
    while cursor < len(text) and text[cursor] != quote:
        cursor += 2 if text[cursor] == "\\" else 1
    return cursor + 1


def find_block_end(text: str, open_index: int) -> int:
    """Index of the `}` closing the `{` at `open_index` (strings and comments skipped)."""
    depth = 0
    index = open_index
    while index < len(text):
        char = text[index]
        if char in "\"'`":
            index = _skip_string(text, index)
            continue
        if text.startswith("//", index):
            newline = text.find("\n", index)
            index = len(text) if newline == -1 else newline
            continue
        if text.startswith("/*", index):
            end = text.find("*/", index + 2)
            index = len(text) if end == -1 else end + 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    raise ValueError(f"Unclosed block starting at offset {open_index}")


def split_top_level(text: str, separator: str) -> list[str]:
    """Split on `separator` outside brackets, generics and strings."""
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    index = 0
    while index < len(text):
        char = text[index]
        if char in "\"'`":
            end = _skip_string(text, index)
            current.append(text[index:end])
            index = end
            continue
        if char in OPENERS:
            depth += 1
        elif char in CLOSERS and not (char == ">" and text[index - 1: index] == "="):
            depth -= 1
        if depth == 0 and char == separator:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        index += 1
    parts.append("".join(current).strip())
    return [part for part in parts if part]


def clean_js_doc(raw: str) -> str:
    lines = []
    for line in raw.splitlines():
        line = re.sub(r"^\s*\*\s?", "", line).rstrip()
        if line:
            lines.append(line.strip())
    return "\n".join(lines)


def split_members(body: str) -> list[tuple[Optional[str], str]]:
    """
    Break an interface body into (js_doc, member_text) pairs.
    Members end at `;` or `,`, or at a newline when the member is complete.
    """
    members: list[tuple[Optional[str], str]] = []
    current: list[str] = []
    pending_doc: Optional[str] = None
    depth = 0
    index = 0

    def flush() -> None:
        nonlocal current, pending_doc
        member = "".join(current).strip()
        if member:
            members.append((pending_doc, member))
            pending_doc = None
        current = []

    while index < len(body):
        char = body[index]
        if body.startswith("/**", index):
            end = body.find("*/", index + 3)
            end = len(body) if end == -1 else end
            if depth == 0 and not "".join(current).strip():
                pending_doc = clean_js_doc(body[index + 3: end]) or None
            index = end + 2
            continue
        if body.startswith("/*", index):
            end = body.find("*/", index + 2)
            index = len(body) if end == -1 else end + 2
            continue
        if body.startswith("//", index):
            newline = body.find("\n", index)
            index = len(body) if newline == -1 else newline
            continue
        if char in "\"'`":
            end = _skip_string(body, index)
            current.append(body[index:end])
            index = end
            continue

        if char in OPENERS:
            depth += 1
        elif char in CLOSERS and not (char == ">" and body[index - 1: index] == "="):
            depth -= 1

        if depth == 0 and char in ";,":
            flush()
        elif depth == 0 and char == "\n":
            pending = "".join(current).strip()
            following = body[index + 1:].lstrip()
            continues = pending.endswith((":", "|", "&", "=>")) or following.startswith(("|", "&"))
            if continues:
                current.append(" ")
            else:
                flush()
        else:
            current.append(char)
        index += 1

    flush()
    return members


# ============================================================
# Enums and property types
# ============================================================

def _literal_value(literal: str) -> Any:
    if STRING_LITERAL_REGEX.match(literal):
        return literal[1:-1]
    if NUMBER_LITERAL_REGEX.match(literal):
        return float(literal) if "." in literal else int(literal)
    return literal


def extract_enums(text: str) -> dict[str, list[str | int | float]]:
    """{EnumName: member values}; members without initializers count up from the last number."""
    enums: dict[str, list[str | int | float]] = {}
    for match in ENUM_REGEX.finditer(text):
        values: list[str | int | float] = []
        next_number = 0
        for member in split_top_level(match.group("body"), ","):
            _, _, initializer = member.partition("=")
            initializer = initializer.strip()
            value = _literal_value(initializer) if initializer else next_number
            if isinstance(value, (int, float)):
                next_number = int(value) + 1
            values.append(value)
        enums[match.group("name")] = values
    return enums


def _closing_paren_index(text: str) -> int:
    depth = 0
    for index, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return -1


def _strip_parens(type_text: str) -> str:
    """(string | number)[] keeps its parens; ((User)) -> User"""
    type_text = type_text.strip()
    while type_text.startswith("(") and _closing_paren_index(type_text) == len(type_text) - 1:
        type_text = type_text[1:-1].strip()
    return type_text


def classify_type(type_text: str, enums: dict[str, list[str | int | float]]) -> dict[str, Any]:
    """Reduce a type annotation to ParsedProperty's type/element_type/union_types/enum_values."""
    type_text = _strip_parens(type_text)
    parts = split_top_level(type_text, "|")
    non_nullable = [part for part in parts if part not in ("null", "undefined")]
    if non_nullable and len(non_nullable) < len(parts):
        parts = non_nullable

    if len(parts) > 1:
        if all(STRING_LITERAL_REGEX.match(part) or NUMBER_LITERAL_REGEX.match(part) for part in parts):
            return {"type": "union", "union_types": [_literal_value(part) for part in parts]}
        return {"type": " | ".join(parts)}

    single = _strip_parens(parts[0]) if parts else "any"
    if single.endswith("[]"):
        return {"type": "array", "element_type": _strip_parens(single[:-2])}
    generic_array = re.fullmatch(r"(?:Readonly)?Array\s*<(.+)>", single, re.DOTALL)
    if generic_array:
        return {"type": "array", "element_type": _strip_parens(generic_array.group(1))}
    if single in enums:
        return {"type": "enum", "union_types": list(enums[single]), "enum_values": list(enums[single])}
    if STRING_LITERAL_REGEX.match(single):
        return {"type": "union", "union_types": [_literal_value(single)]}
    return {"type": single}


def parse_member(member_text: str, js_doc: Optional[str], enums: dict[str, list[str | int | float]]) -> Optional[ParsedProperty]:
    """One property signature; methods and index signatures give None."""
    match = MEMBER_REGEX.match(member_text.strip())
    if not match:
        return None
    name = match.group("name")
    if name[:1] in "\"'":
        name = name[1:-1]
    return ParsedProperty(
        name=name,
        optional=bool(match.group("optional")),
        js_doc=js_doc,
        **classify_type(match.group("type"), enums),
    )


# ============================================================
# Interfaces
# ============================================================

def _type_parameter_names(params: Optional[str]) -> list[str]:
    if not params:
        return []
    names = []
    for param in split_top_level(params.strip()[1:-1], ","):
        names.append(re.split(r"\s|=", param.strip(), maxsplit=1)[0])
    return names


def _base_names(extends_clause: Optional[str]) -> list[str]:
    if not extends_clause:
        return []
    return [re.sub(r"\s*<.*>$", "", base.strip(), flags=re.DOTALL) for base in split_top_level(extends_clause, ",")]


def _merge_properties(inherited: Iterable[ParsedProperty], own: Iterable[ParsedProperty]) -> list[ParsedProperty]:
    merged: dict[str, ParsedProperty] = {}
    for prop in inherited:
        merged[prop.name] = prop
    for prop in own:
        merged.pop(prop.name, None)
        merged[prop.name] = prop
    return list(merged.values())


def extract_interfaces_from_source(text: str) -> list[ParsedInterface]:
    """All interfaces declared in `text`, in declaration order, with inherited properties merged in."""
    enums = extract_enums(text)
    declared: dict[str, tuple[list[str], list[str], list[ParsedProperty]]] = {}

    for match in INTERFACE_HEADER_REGEX.finditer(text):
        open_index = match.end() - 1
        body = text[open_index + 1: find_block_end(text, open_index)]
        properties = []
        for js_doc, member_text in split_members(body):
            prop = parse_member(member_text, js_doc, enums)
            if prop is not None:
                properties.append(prop)
        declared[match.group("name")] = (
            _type_parameter_names(match.group("params")),
            _base_names(match.group("extends")),
            properties,
        )

    def resolve(name: str, visiting: frozenset[str]) -> list[ParsedProperty]:
        _, bases, own = declared[name]
        inherited: list[ParsedProperty] = []
        for base in bases:
            if base in declared and base not in visiting:
                inherited = _merge_properties(inherited, resolve(base, visiting | {base}))
        return _merge_properties(inherited, own)

    return [
        ParsedInterface(name=name, properties=resolve(name, frozenset({name})), type_parameters=type_parameters)
        for name, (type_parameters, _, _) in declared.items()
    ]


def extract_interfaces_from_file(file_path: str | Path) -> list[ParsedInterface]:
    return extract_interfaces_from_source(Path(file_path).read_text(encoding="utf-8"))


# ============================================================
# JSON Schema mapping
# ============================================================

JSON_SCHEMA_DRAFT = "http://json-schema.org/draft-07/schema#"


def map_type(ts_type: str, known_interfaces: Iterable[ParsedInterface], root_name: Optional[str] = None) -> dict[str, Any]:
    """Map a raw TS type string to a JSON Schema fragment."""
    ts_type = ts_type.strip()
    if ts_type in PRIMITIVE_TAGS:
        return {"type": ts_type}
    if ts_type in ("any", "unknown"):
        return {}
    if ts_type.endswith("[]"):
        return {"type": "array", "items": map_type(_strip_parens(ts_type[:-2]), known_interfaces, root_name)}
    if "|" in ts_type:
        literals = split_top_level(ts_type, "|")
        if literals and all(STRING_LITERAL_REGEX.match(literal) for literal in literals):
            return {"enum": [literal[1:-1] for literal in literals]}
    if root_name is not None and ts_type == root_name:
        return {"$ref": "#"}
    if any(known.name == ts_type for known in known_interfaces):
        return {"$ref": f"#/definitions/{ts_type}"}
    return {"type": "object"}


def map_property(prop: ParsedProperty, known_interfaces: list[ParsedInterface], root_name: Optional[str] = None) -> dict[str, Any]:
    if prop.type == "array":
        schema = {"type": "array", "items": map_type(prop.element_type or "any", known_interfaces, root_name)}
    elif prop.type == "union":
        schema = {"enum": list(prop.union_types or [])}
    elif prop.type == "enum":
        schema = {"enum": list(prop.enum_values or [])}
    else:
        schema = map_type(prop.type, known_interfaces, root_name)
    if prop.js_doc:
        schema["description"] = prop.js_doc
    return schema


def convert_to_json_schema(
    parsed: ParsedInterface,
    known_interfaces: list[ParsedInterface],
    root_name: Optional[str] = None,
) -> dict[str, Any]:
    """Draft-07 object schema for one interface; `required` is omitted when every property is optional."""
    schema: dict[str, Any] = {
        "$schema": JSON_SCHEMA_DRAFT,
        "title": parsed.name,
        "type": "object",
        "properties": {},
        "required": [],
        "definitions": {},
    }
    for prop in parsed.properties:
        schema["properties"][prop.name] = map_property(prop, known_interfaces, root_name)
        if not prop.optional:
            schema["required"].append(prop.name)
    if not schema["required"]:
        del schema["required"]
    return schema
