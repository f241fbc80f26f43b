"""Shallow parameter validation against a tool's InputSchema.

Only declared properties are checked, one level deep, by type tag:
"string", "number", "boolean" or "object" (None, lists and dicts all report
"object"). Undeclared params pass through untouched. No defaults, no coercion.
"""

from __future__ import annotations

from collections.abc import Mapping

from deepchain.foundation.errors import ValidationError
from deepchain.registry import InputSchema


def type_tag(value: object) -> str:
    """Runtime type tag of a parameter value."""
    match value:
        case bool():  # before int: bool is an int subclass
            return "boolean"
        case int() | float():
            return "number"
        case str():
            return "string"
        case _ if callable(value):
            return "function"
        case _:
            return "object"


def validate_params(params: Mapping[str, object], schema: InputSchema) -> None:
    """Raise ValidationError on the first missing required or mistyped declared property."""
    required = set(schema.required)
    for name, prop in schema.properties.items():
        if name not in params:
            if name in required:
                raise ValidationError(f"Missing required parameter: {name}", param=name)
            continue
        actual = type_tag(params[name])
        if prop.type and actual != prop.type:
            raise ValidationError(
                f"Invalid type for parameter {name}: expected {prop.type}, got {actual}",
                param=name,
            )
