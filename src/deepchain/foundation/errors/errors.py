"""Error taxonomy for chain execution.

Every failure inside a chain step is raised as a ChainError subclass and then
converted into a failed ToolResult at the step boundary, so callers of
execute_chain only ever see errors as data.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from typing import ClassVar


class ErrorCode(StrEnum):
    """Standard error codes for chain and tool failures."""
    API_KEY_MISSING = "API_KEY_MISSING"
    API_KEY_INVALID = "API_KEY_INVALID"
    RATE_LIMITED = "RATE_LIMITED"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    INVALID_PARAMS = "INVALID_PARAMS"
    MISSING_PREREQUISITE = "MISSING_PREREQUISITE"
    PARSE_ERROR = "PARSE_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN = "UNKNOWN"


_PATTERN_CODES: dict[str, ErrorCode] = {
    "timeout": ErrorCode.TIMEOUT,
    "connection": ErrorCode.NETWORK_ERROR,
    "network": ErrorCode.NETWORK_ERROR,
    "rate": ErrorCode.RATE_LIMITED,
    "limit": ErrorCode.RATE_LIMITED,
    "auth": ErrorCode.API_KEY_INVALID,
    "parse": ErrorCode.PARSE_ERROR,
    "json": ErrorCode.PARSE_ERROR,
    "decode": ErrorCode.PARSE_ERROR,
    "validation": ErrorCode.INVALID_PARAMS,
    "value": ErrorCode.INVALID_PARAMS,
    "notfound": ErrorCode.NOT_FOUND,
}
_PATTERN_KEYS = tuple(_PATTERN_CODES.keys())  # Ordered for priority


@lru_cache(maxsize=256)
def _classify_cached(exc_key: str) -> ErrorCode:
    haystack = exc_key.lower()
    for pattern in _PATTERN_KEYS:
        if pattern in haystack:
            return _PATTERN_CODES[pattern]
    return ErrorCode.EXTERNAL_SERVICE_ERROR


def classify_exception(exc: BaseException) -> ErrorCode:
    """Map exception to error code. ChainErrors carry their own code."""
    if isinstance(exc, ChainError):
        return exc.code
    return _classify_cached(f"{type(exc).__name__} {exc}")


class ChainError(Exception):
    """Base for all chain execution errors."""

    code: ClassVar[ErrorCode] = ErrorCode.UNKNOWN


class ToolNotFoundError(ChainError):
    """Step names a tool that is not registered."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, tool_name: str, message: str | None = None) -> None:
        self.tool_name = tool_name
        super().__init__(message or f"Tool not found: {tool_name}")


class MissingPrerequisiteError(ChainError):
    """Tool requires previous results but is the first successful step."""

    code = ErrorCode.MISSING_PREREQUISITE

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool {tool_name} requires previous results")


class ValidationError(ChainError):
    """Step params do not satisfy the tool's input schema."""

    code = ErrorCode.INVALID_PARAMS

    def __init__(self, message: str, *, param: str | None = None) -> None:
        self.param = param
        super().__init__(message)


class InvocationError(ChainError):
    """Opaque failure raised by the tool-invocation collaborator."""

    code = ErrorCode.EXTERNAL_SERVICE_ERROR


class UpstreamError(InvocationError):
    """Completion provider returned an error or could not be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class CacheDeserializationError(ChainError):
    """Cached payload could not be decoded. Always treated as a cache miss."""

    code = ErrorCode.PARSE_ERROR
