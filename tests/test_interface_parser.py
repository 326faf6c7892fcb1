from __future__ import annotations

from typescript_scaffolder.interface_parser import (
    classify_type,
    convert_to_json_schema,
    extract_enums,
    extract_interfaces_from_source,
    map_type,
    split_members,
    split_top_level,
)


SOURCE = """
export enum Status {
  Active = "active",
  Inactive = "inactive",
}

export interface Base {
  /** Unique identifier */
  id: string;
  createdAt?: string;
}

export interface User extends Base {
  name: string;
  age: number;
  active: boolean;
  status: Status;
  role: "admin" | "user";
  tags: string[];
  friends: Array<User>;
  manager?: User | null;
}

export interface Page<T> {
  items: T[];
  total: number;
}
"""


def by_name(interfaces):
    return {parsed.name: parsed for parsed in interfaces}


def props(parsed):
    return {prop.name: prop for prop in parsed.properties}


def test_interfaces_are_listed_in_declaration_order():
    assert [parsed.name for parsed in extract_interfaces_from_source(SOURCE)] == ["Base", "User", "Page"]


def test_inherited_properties_come_first():
    user = by_name(extract_interfaces_from_source(SOURCE))["User"]
    assert [prop.name for prop in user.properties] == [
        "id", "createdAt", "name", "age", "active", "status", "role", "tags", "friends", "manager",
    ]


def test_property_classification():
    user = props(by_name(extract_interfaces_from_source(SOURCE))["User"])
    assert user["id"].js_doc == "Unique identifier"
    assert user["createdAt"].optional
    assert user["age"].type == "number"
    assert user["status"].type == "enum"
    assert user["status"].enum_values == ["active", "inactive"]
    assert user["role"].type == "union"
    assert user["role"].union_types == ["admin", "user"]
    assert (user["tags"].type, user["tags"].element_type) == ("array", "string")
    assert (user["friends"].type, user["friends"].element_type) == ("array", "User")
    assert user["manager"].type == "User"
    assert user["manager"].optional


def test_type_parameters_are_kept():
    page = by_name(extract_interfaces_from_source(SOURCE))["Page"]
    assert page.type_parameters == ["T"]
    assert props(page)["items"].element_type == "T"


def test_child_properties_override_inherited_ones():
    source = "interface A {\n  id: string;\n}\ninterface B extends A {\n  id: number;\n}\n"
    b = by_name(extract_interfaces_from_source(source))["B"]
    assert [(prop.name, prop.type) for prop in b.properties] == [("id", "number")]


def test_enum_members_count_up_without_initializers():
    assert extract_enums("enum Level { Low, Mid = 5, High }") == {"Level": [0, 5, 6]}


def test_split_helpers_respect_nesting():
    assert split_top_level("Record<string, number>, (a: string) => void", ",") == [
        "Record<string, number>",
        "(a: string) => void",
    ]
    members = split_members("\n  a: string\n  b:\n    | 'x'\n    | 'y'\n  c: { d: number; e: string }\n")
    assert [member.split(":")[0] for _, member in members] == ["a", "b", "c"]
    assert members[0][1] == "a: string"
    assert members[2][1] == "c: { d: number; e: string }"


def test_multi_line_unions_are_one_property():
    source = "export interface Flag {\n  mode:\n    | 'on'\n    | 'off';\n  label: string;\n}\n"
    flag = props(extract_interfaces_from_source(source)[0])
    assert flag["mode"].union_types == ["on", "off"]
    assert flag["label"].type == "string"


def test_classify_mixed_unions_and_parenthesized_arrays():
    assert classify_type("string | number", {}) == {"type": "string | number"}
    assert classify_type("(string | number)[]", {}) == {"type": "array", "element_type": "string | number"}
    assert classify_type("undefined | 'only'", {}) == {"type": "union", "union_types": ["only"]}


def test_map_type():
    assert map_type("string", []) == {"type": "string"}
    assert map_type("unknown", []) == {}
    assert map_type("number[]", []) == {"type": "array", "items": {"type": "number"}}
    assert map_type('"a" | "b"', []) == {"enum": ["a", "b"]}
    assert map_type("Mystery", []) == {"type": "object"}


def test_convert_to_json_schema():
    interfaces = extract_interfaces_from_source(SOURCE)
    schema = convert_to_json_schema(by_name(interfaces)["User"], interfaces)

    assert schema["$schema"] == "http://json-schema.org/draft-07/schema#"
    assert schema["title"] == "User"
    assert schema["type"] == "object"
    assert schema["properties"]["id"] == {"type": "string", "description": "Unique identifier"}
    assert schema["properties"]["status"] == {"enum": ["active", "inactive"]}
    assert schema["properties"]["role"] == {"enum": ["admin", "user"]}
    assert schema["properties"]["friends"] == {"type": "array", "items": {"$ref": "#/definitions/User"}}
    assert schema["properties"]["manager"] == {"$ref": "#/definitions/User"}
    assert schema["required"] == ["id", "name", "age", "active", "status", "role", "tags", "friends"]
    assert schema["definitions"] == {}


def test_required_is_dropped_when_everything_is_optional():
    parsed = extract_interfaces_from_source("interface Opts {\n  a?: string;\n}\n")[0]
    assert "required" not in convert_to_json_schema(parsed, [parsed])
