"""Wiring for the default executor: settings, upstream client and built-in tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from deepchain.cache import ChainCache
from deepchain.chain import ChainExecutor
from deepchain.foundation.config import get_settings
from deepchain.registry import ToolRegistry
from deepchain.tools import CodeAssistInvoker, register_builtin_tools
from deepchain.upstream import CompletionClient

if TYPE_CHECKING:
    from deepchain.foundation.config import DeepchainSettings
    from deepchain.tools import Completer


def create_executor(
    settings: DeepchainSettings | None = None,
    *,
    completer: Completer | None = None,
) -> ChainExecutor:
    """Executor with the built-in tools registered and a fresh cache.

    Without an explicit completer a CompletionClient is built from settings,
    which requires an API key.
    """
    settings = settings or get_settings()
    completer = completer or CompletionClient.from_settings(settings.upstream)
    registry = ToolRegistry()
    register_builtin_tools(registry)
    return ChainExecutor(
        CodeAssistInvoker(completer, default_temperature=settings.upstream.default_temperature),
        registry=registry,
        cache=ChainCache(),
        chain_ttl=settings.cache.chain_ttl,
        step_ttl=settings.cache.step_ttl,
        invoke_timeout=settings.executor.invoke_timeout,
    )
