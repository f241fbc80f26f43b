"""deepchain - cached, sequential tool chains for AI code-assist operations.

Callers compose generate/complete/optimize tools into ordered chains. The
executor threads context between steps, validates params against each tool's
declarative schema, and caches results per step and per whole chain so
identical work never reaches the completion provider twice.

Quick Start:
    >>> from deepchain import ChainExecutor, ChainStep, ToolContract
    >>>
    >>> async def invoke(contract, params, context):
    ...     return params["msg"]
    >>>
    >>> executor = ChainExecutor(invoke)
    >>> executor.register_tool(ToolContract(
    ...     name="echo",
    ...     input_schema={"properties": {"msg": {"type": "string"}}, "required": ["msg"]},
    ... ))
    >>> await executor.execute_chain([ChainStep(tool_name="echo", params={"msg": "hi"})])
    [ToolResult(success=True, result='hi', error=None, metadata=None)]

Built-in tools over the DeepSeek completions API:
    >>> from deepchain.app import create_executor
    >>> executor = create_executor()  # reads DEEPSEEK_API_KEY

MCP server:
    $ python -m deepchain
"""

from __future__ import annotations

__version__ = "0.1.0"

# Cache
from .cache import DEFAULT_TTL, CacheEntry, ChainCache

# Registry
from .registry import InputSchema, SchemaProperty, ToolContract, ToolRegistry

# Validation
from .validation import type_tag, validate_params

# Chain execution
from .chain import ChainContext, ChainExecutor, ChainStep, ToolChain, ToolInvoker, ToolResult

# Errors
from .foundation.errors import (
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

# Config
from .foundation.config import DeepchainSettings, get_settings

# Built-in tools
from .tools import CodeAssistInvoker, build_prompt, builtin_contracts, register_builtin_tools

__all__ = [
    "__version__",
    "ChainCache",
    "CacheEntry",
    "DEFAULT_TTL",
    "ToolContract",
    "InputSchema",
    "SchemaProperty",
    "ToolRegistry",
    "validate_params",
    "type_tag",
    "ChainExecutor",
    "ToolInvoker",
    "ChainStep",
    "ChainContext",
    "ToolChain",
    "ToolResult",
    "ErrorCode",
    "classify_exception",
    "ChainError",
    "ToolNotFoundError",
    "MissingPrerequisiteError",
    "ValidationError",
    "InvocationError",
    "UpstreamError",
    "CacheDeserializationError",
    "DeepchainSettings",
    "get_settings",
    "CodeAssistInvoker",
    "build_prompt",
    "builtin_contracts",
    "register_builtin_tools",
]
