"""
JSON sample -> TypeScript declarations.

Only type declarations are produced (no runtime converters). Enum inference
and union widening are never applied: strings stay `string`, and differing
shapes for the same field become a plain union.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Union

from ..naming import quote_property_name, singularize, to_type_name


# ============================================================
# Type model
# ============================================================

@dataclass(frozen=True)
class Primitive:
    name: str  # "string" | "number" | "boolean" | "null" | "any"


@dataclass(frozen=True)
class ArrayOf:
    item: "TypeNode"


@dataclass(frozen=True)
class UnionOf:
    members: tuple["TypeNode", ...]


@dataclass
class FieldSpec:
    type: "TypeNode"
    optional: bool = False


@dataclass
class ObjectShape:
    name_hint: str
    fields: dict[str, FieldSpec] = field(default_factory=dict)


TypeNode = Union[Primitive, ArrayOf, UnionOf, ObjectShape]

ANY = Primitive("any")


def signature(node: TypeNode) -> str:
    """Structural key used to merge identical shapes (key order does not matter)."""
    if isinstance(node, Primitive):
        return node.name
    if isinstance(node, ArrayOf):
        return f"array<{signature(node.item)}>"
    if isinstance(node, UnionOf):
        return "union<" + "|".join(sorted(signature(member) for member in node.members)) + ">"
    parts = [
        f"{key}{'?' if spec.optional else ''}:{signature(spec.type)}"
        for key, spec in sorted(node.fields.items())
    ]
    return "object{" + ",".join(parts) + "}"


# ============================================================
# Inference
# ============================================================

def infer_type(value: Any, name_hint: str) -> TypeNode:
    """Infer a type node for one JSON value."""
    if value is None:
        return Primitive("null")
    if isinstance(value, bool):
        return Primitive("boolean")
    if isinstance(value, (int, float)):
        return Primitive("number")
    if isinstance(value, str):
        return Primitive("string")
    if isinstance(value, list):
        if not value:
            return ArrayOf(ANY)
        item_hint = to_type_name(singularize(name_hint))
        item_types = [infer_type(item, item_hint) for item in value]
        merged = item_types[0]
        for item_type in item_types[1:]:
            merged = merge_types(merged, item_type)
        return ArrayOf(merged)
    if isinstance(value, dict):
        shape = ObjectShape(name_hint=to_type_name(name_hint))
        for key, child in value.items():
            shape.fields[key] = FieldSpec(infer_type(child, key))
        return shape
    raise TypeError(f"Unsupported JSON value of type {type(value).__name__}")


def merge_objects(left: ObjectShape, right: ObjectShape) -> ObjectShape:
    """Merge two object samples; keys missing from either side become optional."""
    merged = ObjectShape(name_hint=left.name_hint)
    for key, spec in left.fields.items():
        other = right.fields.get(key)
        if other is None:
            merged.fields[key] = FieldSpec(spec.type, optional=True)
        else:
            merged.fields[key] = FieldSpec(
                merge_types(spec.type, other.type),
                optional=spec.optional or other.optional,
            )
    for key, spec in right.fields.items():
        if key not in merged.fields:
            merged.fields[key] = FieldSpec(spec.type, optional=True)
    return merged


def _union_members(node: TypeNode) -> Iterable[TypeNode]:
    if isinstance(node, UnionOf):
        return node.members
    return (node,)


def merge_types(left: TypeNode, right: TypeNode) -> TypeNode:
    """Combine two observations of the same position."""
    if signature(left) == signature(right):
        return left
    if isinstance(left, ObjectShape) and isinstance(right, ObjectShape):
        return merge_objects(left, right)
    if isinstance(left, ArrayOf) and isinstance(right, ArrayOf):
        if left.item == ANY:
            return right
        if right.item == ANY:
            return left
        return ArrayOf(merge_types(left.item, right.item))

    members: list[TypeNode] = []
    for candidate in (*_union_members(left), *_union_members(right)):
        for index, existing in enumerate(members):
            if isinstance(existing, ObjectShape) and isinstance(candidate, ObjectShape):
                members[index] = merge_objects(existing, candidate)
                break
            if isinstance(existing, ArrayOf) and isinstance(candidate, ArrayOf):
                members[index] = merge_types(existing, candidate)
                break
            if signature(existing) == signature(candidate):
                break
        else:
            members.append(candidate)
    if len(members) == 1:
        return members[0]
    return UnionOf(tuple(members))


# ============================================================
# Rendering
# ============================================================

@dataclass
class RenderState:
    """Name reservations and the queue of interfaces still to emit."""
    used_names: set[str] = field(default_factory=set)
    names_by_signature: dict[str, str] = field(default_factory=dict)
    pending: list[tuple[str, ObjectShape]] = field(default_factory=list)

    def reserve_name(self, preferred_name: str) -> str:
        """Return a unique declaration name and reserve it immediately."""
        if preferred_name not in self.used_names:
            self.used_names.add(preferred_name)
            return preferred_name

        suffix_number = 2
        while f"{preferred_name}{suffix_number}" in self.used_names:
            suffix_number += 1

        unique_name = f"{preferred_name}{suffix_number}"
        self.used_names.add(unique_name)
        return unique_name

    def name_for(self, shape: ObjectShape, preferred_name: str | None = None) -> str:
        shape_signature = signature(shape)
        existing = self.names_by_signature.get(shape_signature)
        if existing is not None:
            return existing
        name = self.reserve_name(preferred_name or shape.name_hint)
        self.names_by_signature[shape_signature] = name
        self.pending.append((name, shape))
        return name


def render_type(state: RenderState, node: TypeNode) -> str:
    if isinstance(node, Primitive):
        return node.name
    if isinstance(node, ObjectShape):
        return state.name_for(node)
    if isinstance(node, ArrayOf):
        item = render_type(state, node.item)
        if isinstance(node.item, UnionOf):
            return f"({item})[]"
        return f"{item}[]"
    return " | ".join(render_type(state, member) for member in node.members)


def render_interface(state: RenderState, name: str, shape: ObjectShape) -> list[str]:
    output_lines = [f"export interface {name} {{"]
    for key, spec in shape.fields.items():
        optional_marker = "?" if spec.optional else ""
        output_lines.append(f"    {quote_property_name(key)}{optional_marker}: {render_type(state, spec.type)};")
    output_lines.append("}")
    return output_lines


def render_declarations(root: TypeNode, root_name: str) -> str:
    """Render the root declaration first, then every nested interface in discovery order."""
    state = RenderState()
    output_lines: list[str] = []

    if isinstance(root, ObjectShape):
        state.name_for(root, preferred_name=root_name)
    else:
        state.reserve_name(root_name)
        output_lines.append(f"export type {root_name} = {render_type(state, root)};")
        output_lines.append("")

    emitted = 0
    while emitted < len(state.pending):
        name, shape = state.pending[emitted]
        output_lines.extend(render_interface(state, name, shape))
        output_lines.append("")
        emitted += 1

    return "\n".join(output_lines).rstrip() + "\n"


def json_to_typescript(value: Any, root_name: str) -> str:
    """Infer and render TypeScript declarations for an already-parsed JSON value."""
    if isinstance(value, list):
        root = infer_type(value, f"{root_name}Item")
    else:
        root = infer_type(value, root_name)
    return render_declarations(root, root_name)
