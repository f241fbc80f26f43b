"""Tool contracts and the registry that holds them."""

from .contract import InputSchema, SchemaProperty, ToolContract
from .registry import ToolRegistry

__all__ = [
    "ToolContract",
    "InputSchema",
    "SchemaProperty",
    "ToolRegistry",
]
