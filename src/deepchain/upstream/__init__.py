"""Completion provider client."""

from .client import DEFAULT_BASE_URL, DEFAULT_MAX_TOKENS, CompletionClient

__all__ = ["CompletionClient", "DEFAULT_BASE_URL", "DEFAULT_MAX_TOKENS"]
