"""Chain execution engine: models, result codec and the sequential executor."""

from .codec import decode_result, decode_results, encode_result, encode_results, normalize_result
from .executor import CHAIN_NAMESPACE, STEP_NAMESPACE, ChainExecutor, ToolInvoker, chain_cache_key, step_cache_key
from .models import ChainContext, ChainStep, ToolChain, ToolResult

__all__ = [
    "ChainExecutor",
    "ToolInvoker",
    "ChainStep",
    "ChainContext",
    "ToolChain",
    "ToolResult",
    "encode_result",
    "encode_results",
    "decode_result",
    "decode_results",
    "normalize_result",
    "chain_cache_key",
    "step_cache_key",
    "CHAIN_NAMESPACE",
    "STEP_NAMESPACE",
]
