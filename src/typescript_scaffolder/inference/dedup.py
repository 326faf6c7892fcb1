"""
Duplicate-key detection and parent-scoped prefixing for JSON samples.

A key counts as duplicated when it is an own-key of two or more distinct
objects anywhere in the tree. Duplicated keys are renamed to
`<parentLabel>__PREFIX__<key>` before inference so nested shapes never
collide, and restored afterwards from the ledger of introduced names.
"""
from __future__ import annotations

from collections import Counter
from typing import Any, Optional

from ..logger import LogSink, get_default_logger


PREFIX_TOKEN = "PREFIX"
PREFIX_DELIMITER = f"__{PREFIX_TOKEN}__"

JSONValue = Any


def find_duplicate_keys(value: JSONValue, logger: LogSink | None = None) -> set[str]:
    """Return every key name that appears on more than one object node."""
    logger = logger or get_default_logger()
    logger.debug("find_duplicate_keys", "finding globally duplicated keys...")

    key_counts: Counter[str] = Counter()

    def scan(node: JSONValue) -> None:
        if isinstance(node, list):
            for item in node:
                scan(item)
        elif isinstance(node, dict):
            # dict keys are unique, so each object contributes at most once per key
            key_counts.update(node.keys())
            for child in node.values():
                scan(child)

    scan(value)
    return {key for key, count in key_counts.items() if count > 1}


def build_prefixed_key(parent_label: str, key: str) -> str:
    return f"{parent_label}{PREFIX_DELIMITER}{key}"


def strip_prefix(prefixed_key: str) -> str:
    """Drop everything up to and including the last delimiter."""
    _, delimiter, tail = prefixed_key.rpartition(PREFIX_DELIMITER)
    return tail if delimiter else prefixed_key


def prefix_duplicate_keys(
    value: JSONValue,
    duplicates: set[str],
    ledger: Optional[set[str]] = None,
) -> JSONValue:
    """
    Return a rebuilt copy of `value` with duplicated keys prefixed by their parent label.

    The label of an object is the (already renamed) key it is held under;
    array elements inherit the key that owns the array. The root object has
    no label, so its own keys are left untouched. Key order is preserved.
    """

    def transform(node: JSONValue, parent_label: str | None) -> JSONValue:
        if isinstance(node, list):
            return [transform(item, parent_label) for item in node]
        if not isinstance(node, dict):
            return node

        rebuilt: dict[str, JSONValue] = {}
        for key, child in node.items():
            new_key = key
            if parent_label is not None and key in duplicates:
                new_key = build_prefixed_key(parent_label, key)
                if ledger is not None:
                    ledger.add(new_key)
            rebuilt[new_key] = child

        # children are visited after the rename so their label is the new key
        return {key: transform(child, key) for key, child in rebuilt.items()}

    return transform(value, None)
