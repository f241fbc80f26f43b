"""Error types and JSON aliases for deepchain."""

from .errors import (
    CacheDeserializationError,
    ChainError,
    ErrorCode,
    InvocationError,
    MissingPrerequisiteError,
    ToolNotFoundError,
    UpstreamError,
    ValidationError,
    classify_exception,
)
from .types import JsonDict, JsonPrimitive, JsonValue

__all__ = [
    "ErrorCode",
    "classify_exception",
    "ChainError",
    "ToolNotFoundError",
    "MissingPrerequisiteError",
    "ValidationError",
    "InvocationError",
    "UpstreamError",
    "CacheDeserializationError",
    "JsonDict",
    "JsonPrimitive",
    "JsonValue",
]
