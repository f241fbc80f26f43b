"""Result caching with TTL support.

Holds serialized step and whole-chain results for the executor. In-memory and
process-scoped; nothing survives a restart.
"""

from .cache import DEFAULT_TTL, KEY_SEPARATOR, CacheEntry, ChainCache, Clock

__all__ = [
    "ChainCache",
    "CacheEntry",
    "Clock",
    "DEFAULT_TTL",
    "KEY_SEPARATOR",
]
