from __future__ import annotations

import copy

from typescript_scaffolder.inference.dedup import (
    PREFIX_DELIMITER,
    find_duplicate_keys,
    prefix_duplicate_keys,
    strip_prefix,
)


MULTI_LEVEL = {
    "user": {"id": 1, "profile": {"id": "p-1", "status": "active"}},
    "metadata": {"status": "ok", "timestamp": "t"},
}


def test_unrelated_objects_have_no_duplicates():
    assert find_duplicate_keys({"a": {"x": 1}, "b": {"y": 2}, "c": {"z": 3}}) == set()


def test_duplicates_are_found_across_levels():
    assert find_duplicate_keys(MULTI_LEVEL) == {"id", "status"}


def test_objects_inside_arrays_count():
    sample = {"badges": [{"id": 1}], "owner": {"id": 2}}
    assert find_duplicate_keys(sample) == {"id"}


def test_empty_containers_pass_through():
    assert find_duplicate_keys({}) == set()
    assert find_duplicate_keys([]) == set()
    assert prefix_duplicate_keys({}, set()) == {}
    assert prefix_duplicate_keys([], {"id"}) == []


def test_prefixing_uses_the_nearest_parent_key():
    ledger: set[str] = set()
    prefixed = prefix_duplicate_keys(MULTI_LEVEL, {"id", "status"}, ledger)

    assert prefixed == {
        "user": {
            f"user{PREFIX_DELIMITER}id": 1,
            "profile": {f"profile{PREFIX_DELIMITER}id": "p-1", f"profile{PREFIX_DELIMITER}status": "active"},
        },
        "metadata": {f"metadata{PREFIX_DELIMITER}status": "ok", "timestamp": "t"},
    }
    assert ledger == {
        f"user{PREFIX_DELIMITER}id",
        f"profile{PREFIX_DELIMITER}id",
        f"profile{PREFIX_DELIMITER}status",
        f"metadata{PREFIX_DELIMITER}status",
    }


def test_array_elements_inherit_the_owning_key():
    prefixed = prefix_duplicate_keys({"badges": [{"id": 1}], "owner": {"id": 2}}, {"id"})
    assert prefixed == {
        "badges": [{f"badges{PREFIX_DELIMITER}id": 1}],
        "owner": {f"owner{PREFIX_DELIMITER}id": 2},
    }


def test_primitive_arrays_and_root_keys_are_untouched():
    sample = {"id": 1, "tags": ["id", "status"], "child": {"id": 2}}
    prefixed = prefix_duplicate_keys(sample, {"id"})
    assert prefixed["id"] == 1
    assert prefixed["tags"] == ["id", "status"]
    assert prefixed["child"] == {f"child{PREFIX_DELIMITER}id": 2}


def test_prefixing_does_not_mutate_the_input():
    original = copy.deepcopy(MULTI_LEVEL)
    prefix_duplicate_keys(MULTI_LEVEL, {"id", "status"})
    assert MULTI_LEVEL == original


def test_prefixing_preserves_key_order():
    prefixed = prefix_duplicate_keys(MULTI_LEVEL, {"id", "status"})
    assert list(prefixed["user"]) == [f"user{PREFIX_DELIMITER}id", "profile"]


def test_prefixed_tree_has_no_remaining_duplicates():
    duplicates = find_duplicate_keys(MULTI_LEVEL)
    assert find_duplicate_keys(prefix_duplicate_keys(MULTI_LEVEL, duplicates)) == set()


def test_stripping_the_ledger_recovers_the_duplicate_names():
    duplicates = find_duplicate_keys(MULTI_LEVEL)
    ledger: set[str] = set()
    prefix_duplicate_keys(MULTI_LEVEL, duplicates, ledger)
    assert {strip_prefix(key) for key in ledger} == duplicates


def test_strip_prefix_uses_the_last_delimiter():
    assert strip_prefix(f"a{PREFIX_DELIMITER}b{PREFIX_DELIMITER}c") == "c"
    assert strip_prefix("plain") == "plain"
