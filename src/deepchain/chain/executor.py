"""Sequential chain execution with step- and chain-level result caching.

Per run:
    1. Whole-chain cache lookup. A hit returns the cached list; no step runs.
    2. Otherwise steps run in declared order. Each step resolves its contract,
       checks the previous-results prerequisite, validates params, consults
       the step cache and finally invokes the tool.
    3. The first failed step ends the run (railway-oriented short-circuit).
    4. Only fully successful runs are stored in the chain cache.

Errors are data: every exception raised while running a step becomes a failed
ToolResult, so execute_chain never raises for step failures.

Chain and step entries share one ChainCache under separate namespaces
("chain:" and "step:"), so a one-step chain never collides with its own step.
Params that cannot be serialized into a key bypass the cache entirely.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Iterable, Mapping, Sequence
from typing import Protocol, runtime_checkable

from deepchain.cache import DEFAULT_TTL, ChainCache
from deepchain.foundation.errors import (
    CacheDeserializationError,
    ChainError,
    InvocationError,
    JsonDict,
    MissingPrerequisiteError,
    ToolNotFoundError,
    classify_exception,
)
from deepchain.observability import get_logger
from deepchain.registry import ToolContract, ToolRegistry
from deepchain.validation import validate_params

from .codec import decode_result, decode_results, encode_result, encode_results, normalize_result
from .models import ChainContext, ChainStep, ToolChain, ToolResult

_log = get_logger("deepchain.executor")

CHAIN_NAMESPACE = "chain:"
STEP_NAMESPACE = "step:"


@runtime_checkable
class ToolInvoker(Protocol):
    """Collaborator that actually runs a tool. May be sync or async."""

    def __call__(
        self, contract: ToolContract, params: JsonDict, context: ChainContext
    ) -> Awaitable[object] | object: ...


class ChainExecutor:
    """Runs tool chains against a registry, cache and invoker it owns.

    Args:
        invoker: Tool-invocation collaborator
        registry: Tool contracts (fresh empty registry if omitted)
        cache: Result cache (fresh in-memory cache if omitted)
        chain_ttl: TTL for whole-chain entries
        step_ttl: TTL for per-step entries
        invoke_timeout: Optional seconds before an invocation is abandoned

    Example:
        >>> executor = ChainExecutor(lambda contract, params, ctx: params["msg"])
        >>> executor.register_tool(echo_contract)
        >>> await executor.execute_chain([ChainStep(tool_name="echo", params={"msg": "hi"})])
        [ToolResult(success=True, result='hi', error=None, metadata=None)]
    """

    __slots__ = ("_invoker", "_registry", "_cache", "_chain_ttl", "_step_ttl", "_invoke_timeout")

    def __init__(
        self,
        invoker: ToolInvoker,
        *,
        registry: ToolRegistry | None = None,
        cache: ChainCache | None = None,
        chain_ttl: float = DEFAULT_TTL,
        step_ttl: float = DEFAULT_TTL,
        invoke_timeout: float | None = None,
    ) -> None:
        self._invoker = invoker
        self._registry = registry if registry is not None else ToolRegistry()
        self._cache = cache if cache is not None else ChainCache()
        self._chain_ttl = chain_ttl
        self._step_ttl = step_ttl
        self._invoke_timeout = invoke_timeout

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def cache(self) -> ChainCache:
        return self._cache

    def register_tool(self, contract: ToolContract) -> None:
        self._registry.register(contract)

    # ─────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────

    async def execute_chain(self, chain: ToolChain | Sequence[ChainStep]) -> list[ToolResult]:
        """Run a chain and return one result per executed step.

        The executed steps are always a prefix of the declared chain; a failed
        step is the last entry. When given a ToolChain, its context is replaced
        with the context produced by this run.
        """
        steps = list(chain.steps if isinstance(chain, ToolChain) else chain)
        log = _log.bind(steps=len(steps))
        try:
            chain_key: str | None = chain_cache_key(steps)
        except TypeError as e:  # orjson.JSONEncodeError is a TypeError
            log.warning("chain cache bypassed: unserializable params", error=str(e))
            chain_key = None

        if chain_key is not None and (cached := self._cached_chain(chain_key)) is not None:
            log.debug("chain cache hit")
            if isinstance(chain, ToolChain):
                chain.context = ChainContext.replay(cached)
            return cached

        results: list[ToolResult] = []
        context = ChainContext()
        for index, step in enumerate(steps):
            try:
                result = await self._execute_step(step, context)
            except Exception as e:  # step boundary: errors become data
                log.warning("step aborted", index=index, tool=step.tool_name,
                            error=str(e), code=classify_exception(e).value)
                result = ToolResult.fail(_message(e))
            results.append(result)
            if not result.success:
                break
            context.record(result)

        if all(r.success for r in results):
            if chain_key is not None:
                self._cache.set(chain_key, encode_results(results), self._chain_ttl)
                log.debug("chain cached")
        else:
            log.info("chain failed", executed=len(results), error=results[-1].error)

        if isinstance(chain, ToolChain):
            chain.context = context
        return results

    async def invoke_tool(self, tool_name: str, params: JsonDict) -> object:
        """Run one tool outside any chain: validated, uncached, with an empty context.

        Unlike execute_chain this raises: ToolNotFoundError, ValidationError or InvocationError.
        """
        contract = self._registry.get(tool_name)
        if contract is None:
            raise ToolNotFoundError(tool_name, f"Unknown tool: {tool_name}")
        validate_params(params, contract.input_schema)
        return await self._invoke(contract, params, ChainContext())

    async def _execute_step(self, step: ChainStep, context: ChainContext) -> ToolResult:
        contract = self._registry.get(step.tool_name)
        if contract is None:
            raise ToolNotFoundError(step.tool_name)
        if contract.requires_previous and not context.previous_results:
            raise MissingPrerequisiteError(step.tool_name)
        validate_params(step.params, contract.input_schema)

        try:
            step_key: str | None = step_cache_key(step.tool_name, step.params)
        except TypeError as e:
            _log.warning("step cache bypassed: unserializable params", tool=step.tool_name, error=str(e))
            step_key = None

        if step_key is not None and (payload := self._cache.get(step_key)) is not None:
            try:
                result = decode_result(payload)
            except CacheDeserializationError as e:
                _log.warning("discarding cached step result", tool=step.tool_name, error=str(e))
            else:
                _log.debug("step cache hit", tool=step.tool_name)
                return result

        try:
            output = await self._invoke(contract, step.params, context)
            # A miss returns exactly what a later hit would decode
            result = normalize_result(ToolResult.ok(output, step.metadata))
            if step_key is not None:
                self._cache.set(step_key, encode_result(result), self._step_ttl)
            return result
        except Exception as e:
            _log.warning("tool invocation failed", tool=step.tool_name, error=str(e),
                         code=classify_exception(e).value)
            return ToolResult.fail(_message(e), step.metadata)

    async def _invoke(self, contract: ToolContract, params: JsonDict, context: ChainContext) -> object:
        """Call the invoker, awaiting it if needed. Non-chain failures become InvocationError."""
        try:
            outcome = self._invoker(contract, params, context)
            if inspect.isawaitable(outcome):
                if self._invoke_timeout is not None:
                    outcome = await asyncio.wait_for(outcome, self._invoke_timeout)
                else:
                    outcome = await outcome
            return outcome
        except ChainError:
            raise
        except TimeoutError as e:
            raise InvocationError(f"Tool {contract.name} timed out after {self._invoke_timeout}s") from e
        except Exception as e:
            raise InvocationError(_message(e)) from e

    # ─────────────────────────────────────────────────────────────────
    # Chain cache
    # ─────────────────────────────────────────────────────────────────

    def _cached_chain(self, key: str) -> list[ToolResult] | None:
        if (payload := self._cache.get(key)) is None:
            return None
        try:
            return decode_results(payload)
        except CacheDeserializationError as e:
            _log.warning("discarding cached chain result", error=str(e))
            return None

    # ─────────────────────────────────────────────────────────────────
    # Chain editing (structural only, never touches the cache)
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def add_step(chain: ToolChain, step: ChainStep) -> None:
        chain.steps.append(step)

    @staticmethod
    def remove_step(chain: ToolChain, index: int) -> None:
        """Remove the step at index. Out-of-range indexes are ignored."""
        if -len(chain.steps) <= index < len(chain.steps):
            del chain.steps[index]

    @staticmethod
    def clear_chain(chain: ToolChain) -> None:
        chain.steps = []
        chain.context = ChainContext()


def chain_cache_key(steps: Iterable[ChainStep]) -> str:
    """Cache key under which a whole chain's results are stored."""
    return CHAIN_NAMESPACE + ChainCache.generate_chain_key(steps)


def step_cache_key(tool_name: str, params: Mapping[str, object]) -> str:
    """Cache key under which a single step's result is stored."""
    return STEP_NAMESPACE + ChainCache.step_key(tool_name, params)


def _message(exc: BaseException) -> str:
    return str(exc) or "Unknown error"
