# =============================================================================
# lib/schema_shape.py - Compact JSON Shape for LLM Prompts
# =============================================================================
# Turns a response type (usually a pydantic model) into a small JSON shape
# the model can follow, e.g.
#
#   {"type": "object",
#    "properties": {"name": {"type": "string"}, "age": {"type": "number"}},
#    "required": ["name", "age"]}
#
# The input is pydantic's JSON Schema. Each schema node is classified into
# one of a closed set of kinds and rendered by that kind's visitor:
#
#   object, string, number, boolean, array, nullable, enum  -> rendered
#   anything else (unions, refs to unknown defs, ...)       -> {}
#
# Optional fields are those missing from the parent's "required" list, so
# "optional" is handled by the object visitor rather than as its own node.
# =============================================================================

from __future__ import annotations

from enum import Enum
from typing import Any, Callable

from pydantic import TypeAdapter


class ShapeKind(str, Enum):
    OBJECT = "object"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    NULLABLE = "nullable"
    ENUM = "enum"
    REF = "ref"
    UNSUPPORTED = "unsupported"


def classify(node: dict[str, Any]) -> ShapeKind:
    """Tag a JSON Schema node with its ShapeKind."""
    if "$ref" in node:
        return ShapeKind.REF
    if "enum" in node or "const" in node:
        return ShapeKind.ENUM
    if "anyOf" in node or "oneOf" in node:
        members = node.get("anyOf") or node.get("oneOf")
        non_null = [m for m in members if m.get("type") != "null"]
        if len(non_null) == 1 and len(members) == 2:
            return ShapeKind.NULLABLE
        return ShapeKind.UNSUPPORTED
    if "allOf" in node and len(node["allOf"]) == 1:
        return ShapeKind.REF

    node_type = node.get("type")
    if node_type == "object":
        return ShapeKind.OBJECT
    if node_type == "string":
        return ShapeKind.STRING
    if node_type in ("number", "integer"):
        return ShapeKind.NUMBER
    if node_type == "boolean":
        return ShapeKind.BOOLEAN
    if node_type == "array":
        return ShapeKind.ARRAY
    return ShapeKind.UNSUPPORTED


class _ShapeBuilder:
    """Visitor over classified schema nodes. Holds $defs and the ref stack."""

    def __init__(self, defs: dict[str, Any]):
        self.defs = defs
        self._resolving: set[str] = set()
        self._visitors: dict[ShapeKind, Callable[[dict[str, Any]], dict[str, Any]]] = {
            ShapeKind.OBJECT: self.visit_object,
            ShapeKind.STRING: lambda node: {"type": "string"},
            ShapeKind.NUMBER: lambda node: {"type": "number"},
            ShapeKind.BOOLEAN: lambda node: {"type": "boolean"},
            ShapeKind.ARRAY: self.visit_array,
            ShapeKind.NULLABLE: self.visit_nullable,
            ShapeKind.ENUM: self.visit_enum,
            ShapeKind.REF: self.visit_ref,
            ShapeKind.UNSUPPORTED: lambda node: {},
        }

    def visit(self, node: dict[str, Any]) -> dict[str, Any]:
        return self._visitors[classify(node)](node)

    def visit_object(self, node: dict[str, Any]) -> dict[str, Any]:
        properties = {
            name: self.visit(child)
            for name, child in node.get("properties", {}).items()
        }
        shape: dict[str, Any] = {"type": "object", "properties": properties}
        required = [name for name in node.get("required", []) if name in properties]
        if required:
            shape["required"] = required
        return shape

    def visit_array(self, node: dict[str, Any]) -> dict[str, Any]:
        items = node.get("items")
        return {"type": "array", "items": self.visit(items) if isinstance(items, dict) else {}}

    def visit_nullable(self, node: dict[str, Any]) -> dict[str, Any]:
        members = node.get("anyOf") or node.get("oneOf")
        inner = next(m for m in members if m.get("type") != "null")
        return {**self.visit(inner), "nullable": True}

    def visit_enum(self, node: dict[str, Any]) -> dict[str, Any]:
        values = node["enum"] if "enum" in node else [node["const"]]
        value_type = node.get("type", "string")
        if value_type == "integer":
            value_type = "number"
        return {"type": value_type, "enum": list(values)}

    def visit_ref(self, node: dict[str, Any]) -> dict[str, Any]:
        if "allOf" in node:
            return self.visit(node["allOf"][0])

        ref = node["$ref"]
        name = ref.rsplit("/", 1)[-1]
        target = self.defs.get(name)
        # Recursive models stop at the first repeat
        if target is None or name in self._resolving:
            return {}

        self._resolving.add(name)
        try:
            return self.visit(target)
        finally:
            self._resolving.discard(name)


def shape_from_json_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Derive the compact shape from a JSON Schema document."""
    return _ShapeBuilder(schema.get("$defs", {})).visit(schema)


def derive_shape(response_type: Any) -> dict[str, Any]:
    """
    Derive the compact shape for any pydantic-validatable type.

    Example:
        class Person(BaseModel):
            name: str
            age: int

        derive_shape(Person)
        # {"type": "object", "properties": {...}, "required": ["name", "age"]}
    """
    return shape_from_json_schema(TypeAdapter(response_type).json_schema())
