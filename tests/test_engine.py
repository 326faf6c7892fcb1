from __future__ import annotations

from typescript_scaffolder.inference.engine import json_to_typescript


def test_flat_object_renders_one_interface():
    text = json_to_typescript({"id": "u_1", "age": 29, "active": True}, "User")
    assert text == (
        "export interface User {\n"
        "    id: string;\n"
        "    age: number;\n"
        "    active: boolean;\n"
        "}\n"
    )


def test_identical_nested_shapes_share_one_interface():
    text = json_to_typescript({"home": {"city": "a"}, "work": {"city": "b"}}, "Root")
    assert text == (
        "export interface Root {\n"
        "    home: Home;\n"
        "    work: Home;\n"
        "}\n"
        "\n"
        "export interface Home {\n"
        "    city: string;\n"
        "}\n"
    )


def test_array_item_names_are_singularized():
    text = json_to_typescript({"users": [{"name": "x"}]}, "Team")
    assert "    users: User[];" in text
    assert "export interface User {" in text


def test_array_samples_merge_into_optional_fields():
    text = json_to_typescript([{"a": 1}, {"a": 2, "b": "x"}], "Items")
    assert text == (
        "export type Items = ItemsItem[];\n"
        "\n"
        "export interface ItemsItem {\n"
        "    a: number;\n"
        "    b?: string;\n"
        "}\n"
    )


def test_mixed_and_empty_arrays():
    text = json_to_typescript({"values": [1, "a"], "empty": []}, "Sample")
    assert "    values: (number | string)[];" in text
    assert "    empty: any[];" in text


def test_null_fields_stay_null_at_this_stage():
    assert "    note: null;" in json_to_typescript({"note": None}, "Sample")


def test_non_identifier_keys_are_quoted():
    assert '    "first-name": string;' in json_to_typescript({"first-name": "x"}, "Person")
