"""Foundation: errors, configuration and test doubles."""

from .config import DeepchainSettings, clear_settings_cache, get_settings
from .errors import (
    CacheDeserializationError,
    ChainError,
    ErrorCode,
    InvocationError,
    JsonDict,
    JsonValue,
    MissingPrerequisiteError,
    ToolNotFoundError,
    UpstreamError,
    ValidationError,
    classify_exception,
)

__all__ = [
    "DeepchainSettings",
    "get_settings",
    "clear_settings_cache",
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
    "JsonValue",
]
