"""orjson codec for cached ToolResults.

Decoding validates through pydantic; any malformed payload surfaces as
CacheDeserializationError so the executor can fall back to recomputation.

Cached results are JSON values. normalize_result applies the same conversion
to a freshly computed result (tuples become lists, and so on).
"""

from __future__ import annotations

import orjson
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from deepchain.foundation.errors import CacheDeserializationError

from .models import ToolResult

_RESULT_LIST = TypeAdapter(list[ToolResult])


def normalize_result(result: ToolResult) -> ToolResult:
    return ToolResult.model_validate(result.model_dump(mode="json"))


def encode_result(result: ToolResult) -> str:
    return orjson.dumps(result.model_dump(mode="json")).decode()


def encode_results(results: list[ToolResult]) -> str:
    return orjson.dumps(_RESULT_LIST.dump_python(results, mode="json")).decode()


def decode_result(payload: str) -> ToolResult:
    try:
        return ToolResult.model_validate(orjson.loads(payload))
    except (orjson.JSONDecodeError, PydanticValidationError) as e:
        raise CacheDeserializationError(f"Malformed cached step result: {e}") from e


def decode_results(payload: str) -> list[ToolResult]:
    try:
        return _RESULT_LIST.validate_python(orjson.loads(payload))
    except (orjson.JSONDecodeError, PydanticValidationError) as e:
        raise CacheDeserializationError(f"Malformed cached chain result: {e}") from e
