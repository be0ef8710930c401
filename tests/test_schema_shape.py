# =============================================================================
# tests/test_schema_shape.py - Response Shape Derivation Tests
# =============================================================================

from enum import Enum, IntEnum
from typing import Literal, Optional

from pydantic import BaseModel

from lib.schema_shape import ShapeKind, classify, derive_shape, shape_from_json_schema


class Color(str, Enum):
    RED = "red"
    BLUE = "blue"


class Priority(IntEnum):
    LOW = 1
    HIGH = 2


class Address(BaseModel):
    city: str


class Person(BaseModel):
    name: str
    age: int
    score: float
    active: bool
    tags: list[str]
    nickname: Optional[str] = None
    color: Color
    mode: Literal["fast", "slow"]
    address: Address


class Node(BaseModel):
    value: int
    children: list["Node"] = []


class TestClassify:
    def test_primitives(self):
        assert classify({"type": "string"}) is ShapeKind.STRING
        assert classify({"type": "integer"}) is ShapeKind.NUMBER
        assert classify({"type": "number"}) is ShapeKind.NUMBER
        assert classify({"type": "boolean"}) is ShapeKind.BOOLEAN

    def test_nullable_union(self):
        node = {"anyOf": [{"type": "string"}, {"type": "null"}]}
        assert classify(node) is ShapeKind.NULLABLE

    def test_other_unions_are_unsupported(self):
        node = {"anyOf": [{"type": "string"}, {"type": "integer"}]}
        assert classify(node) is ShapeKind.UNSUPPORTED

    def test_unknown_node_is_unsupported(self):
        assert classify({}) is ShapeKind.UNSUPPORTED


class TestDeriveShape:
    """Tests for rendering pydantic models into prompt shapes."""

    def test_simple_model(self):
        class Simple(BaseModel):
            name: str
            age: float

        assert derive_shape(Simple) == {
            "type": "object",
            "properties": {"name": {"type": "string"}, "age": {"type": "number"}},
            "required": ["name", "age"],
        }

    def test_full_model(self):
        shape = derive_shape(Person)
        props = shape["properties"]

        assert props["age"] == {"type": "number"}
        assert props["active"] == {"type": "boolean"}
        assert props["tags"] == {"type": "array", "items": {"type": "string"}}
        assert props["nickname"] == {"type": "string", "nullable": True}
        assert props["color"] == {"type": "string", "enum": ["red", "blue"]}
        assert props["mode"] == {"type": "string", "enum": ["fast", "slow"]}
        assert props["address"] == {
            "type": "object",
            "properties": {"city": {"type": "string"}},
            "required": ["city"],
        }

    def test_optional_fields_not_required(self):
        shape = derive_shape(Person)

        assert "nickname" not in shape["required"]
        assert "name" in shape["required"]

    def test_all_optional_omits_required(self):
        class Loose(BaseModel):
            note: Optional[str] = None

        assert "required" not in derive_shape(Loose)

    def test_recursive_model_terminates(self):
        shape = derive_shape(Node)

        children = shape["properties"]["children"]
        assert children["type"] == "array"
        assert children["items"] == {}

    def test_unsupported_union_degrades_to_empty(self):
        schema = {
            "type": "object",
            "properties": {"v": {"anyOf": [{"type": "string"}, {"type": "integer"}]}},
            "required": ["v"],
        }

        assert shape_from_json_schema(schema)["properties"]["v"] == {}

    def test_numeric_enums_keep_number_type(self):
        """Integer literals and IntEnum values are not advertised as strings."""
        class Ticket(BaseModel):
            priority: Priority
            level: Literal[1, 2]

        props = derive_shape(Ticket)["properties"]

        assert props["priority"] == {"type": "number", "enum": [1, 2]}
        assert props["level"] == {"type": "number", "enum": [1, 2]}

    def test_untyped_enum_defaults_to_string(self):
        schema = {"type": "object", "properties": {"v": {"enum": ["a", "b"]}}, "required": ["v"]}

        assert shape_from_json_schema(schema)["properties"]["v"] == {"type": "string", "enum": ["a", "b"]}
