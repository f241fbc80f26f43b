"""Built-in code-assist tools: contracts, prompts and the completion-backed invoker."""

from .contracts import (
    COMPLETE_CODE,
    GENERATE_CODE,
    OPTIMIZE_CODE,
    builtin_contracts,
    register_builtin_tools,
)
from .invoker import DEFAULT_TEMPERATURE, CodeAssistInvoker, Completer
from .prompts import build_prompt

__all__ = [
    "GENERATE_CODE",
    "COMPLETE_CODE",
    "OPTIMIZE_CODE",
    "builtin_contracts",
    "register_builtin_tools",
    "build_prompt",
    "CodeAssistInvoker",
    "Completer",
    "DEFAULT_TEMPERATURE",
]
