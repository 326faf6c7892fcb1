from __future__ import annotations

import asyncio
import json

import pytest

from typescript_scaffolder.errors import DuplicatePropertyError, InvalidJsonInputError
from typescript_scaffolder.inference import adapter
from typescript_scaffolder.inference.adapter import (
    assert_no_duplicate_properties,
    convert_null_fields_to_optional_any,
    infer_interface,
    infer_interface_from_path,
    rename_root_declaration,
    scrub_fused_prefix_tokens,
    unprefix_ledger_keys,
)


def test_infers_a_simple_interface():
    text = asyncio.run(infer_interface('{"id": "u_1", "age": 29, "roles": ["admin"]}', "User"))
    assert text is not None
    assert text.startswith("export interface User {")
    assert "    id: string;" in text
    assert "    age: number;" in text
    assert "    roles: string[];" in text


def test_invalid_json_raises_with_preview():
    with pytest.raises(InvalidJsonInputError) as excinfo:
        asyncio.run(infer_interface('{"id": ', "User"))
    assert str(excinfo.value).startswith("Invalid JSON input")
    assert excinfo.value.preview == '{"id": '


def test_duplicate_keys_keep_their_original_names():
    sample = {
        "user": {"id": 1, "profile": {"id": "p-1", "status": "active"}},
        "metadata": {"status": "ok", "timestamp": "t"},
    }
    text = asyncio.run(infer_interface(json.dumps(sample), "Payload"))
    assert text is not None
    assert text.startswith("export interface Payload {")
    assert "    id: number;" in text
    assert "    id: string;" in text
    assert "    status: string;" in text
    assert "PREFIX" not in text
    assert "Prefix" not in text


def test_prefixed_object_names_are_scrubbed():
    sample = {"a": {"data": {"x": 1}}, "b": {"data": {"y": 2}}}
    text = asyncio.run(infer_interface(json.dumps(sample), "Root"))
    assert text is not None
    assert "export interface AData {" in text
    assert "export interface BData {" in text
    assert "    data: AData;" in text
    assert "Prefix" not in text


def test_null_fields_become_optional_any():
    text = asyncio.run(infer_interface('{"a": null, "b": 1}', "Sample"))
    assert text is not None
    assert "    a?: any;" in text
    assert "    b: number;" in text


def test_failure_after_parsing_returns_none(monkeypatch, logger):
    def explode(value, root_name):
        raise RuntimeError("boom")

    monkeypatch.setattr(adapter, "json_to_typescript", explode)
    assert asyncio.run(infer_interface('{"a": 1}', "Sample")) is None
    assert any("boom" in message for message in logger.messages("warn"))


def test_infer_from_path_derives_the_name(tmp_path):
    sample = tmp_path / "user-profile.json"
    sample.write_text('{"name": "x"}', encoding="utf-8")
    text = asyncio.run(infer_interface_from_path(sample))
    assert text is not None
    assert text.startswith("export interface UserProfile {")


def test_infer_from_missing_path_returns_none(tmp_path, logger):
    assert asyncio.run(infer_interface_from_path(tmp_path / "missing.json")) is None
    assert logger.messages("warn")


def test_convert_null_fields_keeps_other_lines():
    text = "export interface A {\n    x: null;\n    y: string;\n}\n"
    assert convert_null_fields_to_optional_any(text) == "export interface A {\n    x?: any;\n    y: string;\n}\n"


def test_scrub_keeps_names_unique():
    text = "export interface BadgesPrefixPass {\n    a: string;\n}\n\nexport interface BadgesPass {\n    b: string;\n}\n"
    scrubbed = scrub_fused_prefix_tokens(text, {"badges__PREFIX__pass"})
    assert "export interface BadgesPass2 {" in scrubbed
    assert "export interface BadgesPass {" in scrubbed


def test_scrub_leaves_names_without_prefixed_keys_alone():
    text = "export interface UrlPrefixConfig {\n    a: number;\n}\n"
    assert scrub_fused_prefix_tokens(text, set()) == text
    assert scrub_fused_prefix_tokens(text, {"badges__PREFIX__pass"}) == text


def test_keys_spelling_prefix_survive_inference():
    text = asyncio.run(infer_interface('{"urlPrefixConfig": {"a": 1}}', "Root"))
    assert text is not None
    assert "    urlPrefixConfig: UrlPrefixConfig;" in text
    assert "export interface UrlPrefixConfig {" in text


def test_duplicate_keys_needing_escapes_are_unprefixed():
    text = asyncio.run(infer_interface('{"a": {"x\\"y": 1}, "b": {"x\\"y": 2}}', "Root"))
    assert text is not None
    assert '    "x\\"y": number;' in text
    assert "PREFIX" not in text


def test_unprefix_matches_the_quoted_form():
    text = 'export interface A {\n    "a__PREFIX__first-name": string;\n    "b-c__PREFIX__id": number;\n}\n'
    unprefixed = unprefix_ledger_keys(text, {"a__PREFIX__first-name", "b-c__PREFIX__id"})
    assert unprefixed == 'export interface A {\n    "first-name": string;\n    id: number;\n}\n'


def test_duplicate_properties_raise():
    with pytest.raises(DuplicatePropertyError):
        assert_no_duplicate_properties("export interface A {\n    id: string;\n    id: number;\n}\n")


def test_rename_root_declaration_updates_references():
    text = "export interface Root {\n    self: Root;\n}\n"
    assert rename_root_declaration(text, "Node") == "export interface Node {\n    self: Node;\n}\n"
