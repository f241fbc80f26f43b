"""Tool invoker that routes built-in tools to the completion provider."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from .prompts import build_prompt

if TYPE_CHECKING:
    from deepchain.chain import ChainContext
    from deepchain.foundation.errors import JsonDict
    from deepchain.registry import ToolContract

DEFAULT_TEMPERATURE = 0.7


class Completer(Protocol):
    async def complete(self, prompt: str, *, temperature: float, max_tokens: int | None = None) -> str: ...


class CodeAssistInvoker:
    """Builds the tool's prompt and asks the completer for text.

    Context-independent: the same (tool, params) always yields the same
    request, which is what lets step results be cached by params alone.
    """

    __slots__ = ("_completer", "_default_temperature")

    def __init__(self, completer: Completer, *, default_temperature: float = DEFAULT_TEMPERATURE) -> None:
        self._completer = completer
        self._default_temperature = default_temperature

    async def __call__(self, contract: ToolContract, params: JsonDict, context: ChainContext | None = None) -> str:
        prompt = build_prompt(contract.name, params)
        # falsy temperatures (0, None) fall back to the default
        temperature = params.get("temperature") or self._default_temperature
        return await self._completer.complete(prompt, temperature=temperature)
