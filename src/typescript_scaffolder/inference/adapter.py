"""
Schema inference adapter: JSON text in, TypeScript interface text out.

Pipeline: parse -> dedup prefixing -> inference engine -> post-processing
(null fields, unprefixing, fused-token scrub, duplicate-property check) ->
root rename.
"""
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from ..errors import DuplicatePropertyError, InvalidJsonInputError
from ..logger import LogSink, get_default_logger
from ..naming import derive_interface_name, quote_property_name, singularize, to_type_name
from .dedup import PREFIX_DELIMITER, find_duplicate_keys, prefix_duplicate_keys, strip_prefix
from .engine import json_to_typescript


NULL_FIELD_REGEX = re.compile(r'^(?P<indent>\s*)(?P<name>"(?:[^"\\]|\\.)*"|[A-Za-z_$][A-Za-z0-9_$]*)\??\s*:\s*null\s*;?\s*$')
DECLARATION_REGEX = re.compile(r"^export\s+(?:interface|type)\s+([A-Za-z_$][A-Za-z0-9_$]*)", re.MULTILINE)
INTERFACE_NAME_REGEX = re.compile(r"^export\s+interface\s+([A-Za-z_$][A-Za-z0-9_$]*)", re.MULTILINE)
PROPERTY_REGEX = re.compile(r'^\s*(?P<name>"(?:[^"\\]|\\.)*"|[A-Za-z_$][A-Za-z0-9_$]*)\??\s*:')


# ============================================================
# Post-processing passes
# ============================================================

def convert_null_fields_to_optional_any(typescript_text: str) -> str:
    """Rewrite every `field: null;` line to `field?: any;`."""
    output_lines: list[str] = []
    for line in typescript_text.splitlines():
        match = NULL_FIELD_REGEX.match(line)
        if match:
            line = f"{match.group('indent')}{match.group('name')}?: any;"
        output_lines.append(line)
    return "\n".join(output_lines) + ("\n" if typescript_text.endswith("\n") else "")


def unprefix_ledger_keys(typescript_text: str, ledger: set[str]) -> str:
    """Replace every introduced prefixed key with its original name."""
    # longest first so a prefixed key never clobbers a longer one containing it
    for prefixed_key in sorted(ledger, key=len, reverse=True):
        original_key = strip_prefix(prefixed_key)
        # property names are emitted quoted and escaped when they are not identifiers
        typescript_text = typescript_text.replace(
            quote_property_name(prefixed_key), quote_property_name(original_key)
        )
        typescript_text = typescript_text.replace(prefixed_key, original_key)
    return typescript_text


def build_fused_name_map(ledger: set[str]) -> dict[str, str]:
    """
    Map the type names the engine derives from prefixed keys (the key itself,
    or its singular for array items) to the same name without the prefix
    token, e.g. badges__PREFIX__pass: BadgesPrefixPass -> BadgesPass.
    """
    fused_names: dict[str, str] = {}
    for prefixed_key in ledger:
        for name_hint in (prefixed_key, singularize(prefixed_key)):
            fused_name = to_type_name(name_hint)
            scrubbed_name = to_type_name(name_hint.replace(PREFIX_DELIMITER, "_"))
            if fused_name != scrubbed_name:
                fused_names[fused_name] = scrubbed_name
    return fused_names


def scrub_fused_prefix_tokens(typescript_text: str, ledger: set[str]) -> str:
    """
    Remove the prefix token where it got fused into a declaration name built
    from a prefixed key. Only such names are touched, so a key that merely
    spells "Prefix" keeps it. Renamed declarations keep unique names: a clash
    with an existing declaration gets a numeric suffix.
    """
    fused_names = build_fused_name_map(ledger)
    if not fused_names:
        return typescript_text

    declared_names = DECLARATION_REGEX.findall(typescript_text)
    used_names = set(declared_names)
    renames: dict[str, str] = {}

    for name in declared_names:
        scrubbed: str | None = None
        # longest first: the engine may have appended a numeric suffix
        for fused_name in sorted(fused_names, key=len, reverse=True):
            suffix = name[len(fused_name):]
            if name.startswith(fused_name) and (not suffix or suffix.isdigit()):
                scrubbed = fused_names[fused_name] + suffix
                break
        if scrubbed is None:
            continue
        candidate = scrubbed
        suffix_number = 2
        while candidate in used_names:
            candidate = f"{scrubbed}{suffix_number}"
            suffix_number += 1
        used_names.add(candidate)
        renames[name] = candidate

    for old_name, new_name in renames.items():
        typescript_text = re.sub(rf"\b{re.escape(old_name)}\b", new_name, typescript_text)
    return typescript_text


def assert_no_duplicate_properties(typescript_text: str) -> None:
    """Raise DuplicatePropertyError if any interface body declares a name twice."""
    current_interface: str | None = None
    seen: set[str] = set()
    duplicates: list[str] = []

    for line in typescript_text.splitlines():
        header = INTERFACE_NAME_REGEX.match(line)
        if header:
            current_interface = header.group(1)
            seen = set()
            duplicates = []
            continue
        if current_interface is None:
            continue
        if line.strip() == "}":
            if duplicates:
                raise DuplicatePropertyError(current_interface, duplicates)
            current_interface = None
            continue
        match = PROPERTY_REGEX.match(line)
        if not match:
            continue
        property_name = match.group("name").strip('"')
        if property_name in seen:
            duplicates.append(property_name)
        seen.add(property_name)


def rename_root_declaration(typescript_text: str, interface_name: str) -> str:
    """Rename the first declaration (and references to it) to `interface_name`."""
    match = DECLARATION_REGEX.search(typescript_text)
    if not match or match.group(1) == interface_name:
        return typescript_text
    return re.sub(rf"\b{re.escape(match.group(1))}\b", interface_name, typescript_text)


# ============================================================
# Public API
# ============================================================

def parse_json_sample(json_text: str) -> Any:
    """Parse a JSON sample, raising InvalidJsonInputError with a preview on failure."""
    try:
        return json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise InvalidJsonInputError(json_text, str(exc)) from exc


async def infer_interface(
    json_text: str,
    interface_name: str,
    logger: LogSink | None = None,
) -> str | None:
    """
    Infer TypeScript interfaces from a JSON sample.

    Malformed JSON raises InvalidJsonInputError. Any failure after parsing is
    logged as a warning and turns into a None result.
    """
    logger = logger or get_default_logger()
    tag = "infer_interface"
    logger.debug(tag, "Inferring schema...")

    parsed = parse_json_sample(json_text)

    try:
        ledger: set[str] = set()
        duplicates = find_duplicate_keys(parsed, logger=logger)
        deduplicated = prefix_duplicate_keys(parsed, duplicates, ledger)
        logger.debug(tag, f"Prefixed {len(ledger)} duplicated key(s)")

        typescript_text = json_to_typescript(deduplicated, interface_name)

        typescript_text = convert_null_fields_to_optional_any(typescript_text)
        typescript_text = unprefix_ledger_keys(typescript_text, ledger)
        typescript_text = scrub_fused_prefix_tokens(typescript_text, ledger)
        assert_no_duplicate_properties(typescript_text)

        typescript_text = rename_root_declaration(typescript_text, interface_name)
    except Exception as exc:
        logger.warn(tag, f"Failed to infer JSON schema: {exc}")
        return None

    logger.debug(tag, "Successfully inferred schema")
    return typescript_text


async def infer_interface_from_path(file_path: str | Path, logger: LogSink | None = None) -> str | None:
    """Read a JSON sample file and infer its interfaces; None when the file cannot be read."""
    logger = logger or get_default_logger()
    tag = "infer_interface_from_path"
    try:
        json_text = Path(file_path).read_text(encoding="utf-8")
    except OSError as exc:
        logger.warn(tag, f"Failed to read file: {file_path} ({exc})")
        return None

    interface_name = derive_interface_name(file_path)
    logger.debug(tag, f"Inferring interface {interface_name} from {file_path}")
    return await infer_interface(json_text, interface_name, logger=logger)
