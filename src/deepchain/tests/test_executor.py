"""Tests for the chain executor.

Validates:
- Whole-chain cache hits skip all invocations
- Short-circuit on the first failed step
- Step-level cache reuse across chains and warm retries
- Context threading between steps
- Errors surfaced as failed ToolResults, never raised
"""

import asyncio

import pytest

from deepchain.cache import ChainCache
from deepchain.chain import (
    ChainContext,
    ChainExecutor,
    ChainStep,
    ToolChain,
    ToolResult,
    chain_cache_key,
    step_cache_key,
)
from deepchain.foundation.testing import FakeClock, MockInvoker
from deepchain.registry import ToolContract, ToolRegistry


def step(tool: str, metadata: dict | None = None, **params: object) -> ChainStep:
    return ChainStep(tool_name=tool, params=params, metadata=metadata)


# ═════════════════════════════════════════════════════════════════════════════
# Basic execution
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_single_echo_step(executor: ChainExecutor) -> None:
    results = await executor.execute_chain([step("echo", msg="hi")])
    assert results == [ToolResult(success=True, result="hi", metadata=None)]


@pytest.mark.asyncio
async def test_accepts_tool_chain_and_wire_aliases(executor: ChainExecutor) -> None:
    chain = ToolChain.model_validate({"steps": [{"toolName": "echo", "params": {"msg": "hi"}}]})
    results = await executor.execute_chain(chain)
    assert [r.result for r in results] == ["hi"]


@pytest.mark.asyncio
async def test_empty_chain_returns_empty_list(executor: ChainExecutor, invoker: MockInvoker) -> None:
    assert await executor.execute_chain([]) == []
    invoker.assert_not_called()


@pytest.mark.asyncio
async def test_sync_invoker_is_supported(registry: ToolRegistry) -> None:
    executor = ChainExecutor(lambda contract, params, ctx: params["msg"].upper(), registry=registry)
    results = await executor.execute_chain([step("echo", msg="hi")])
    assert results[0].result == "HI"


@pytest.mark.asyncio
async def test_register_tool_makes_tool_available(invoker: MockInvoker) -> None:
    executor = ChainExecutor(invoker)
    missing = await executor.execute_chain([step("late")])
    assert missing[0].error == "Tool not found: late"

    executor.register_tool(ToolContract(name="late", description="Registered later"))
    results = await executor.execute_chain([step("late")])
    assert results[0].success


# ═════════════════════════════════════════════════════════════════════════════
# Failures are data
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_missing_tool(executor: ChainExecutor) -> None:
    results = await executor.execute_chain([step("missing_tool")])
    assert results == [ToolResult(success=False, result=None, error="Tool not found: missing_tool")]


@pytest.mark.asyncio
async def test_requires_previous_as_first_step(executor: ChainExecutor, invoker: MockInvoker) -> None:
    results = await executor.execute_chain([step("needs_prev")])
    assert len(results) == 1
    assert not results[0].success
    assert "requires previous results" in results[0].error
    invoker.assert_not_called()


@pytest.mark.asyncio
async def test_requires_previous_after_successful_step(executor: ChainExecutor) -> None:
    results = await executor.execute_chain([step("echo", msg="first"), step("needs_prev")])
    assert [r.result for r in results] == ["first", "after"]


@pytest.mark.asyncio
async def test_validation_failure_becomes_failed_result(executor: ChainExecutor, invoker: MockInvoker) -> None:
    missing = await executor.execute_chain([step("echo", metadata={"tag": 1})])
    assert missing[0].error == "Missing required parameter: msg"
    assert missing[0].metadata is None

    mistyped = await executor.execute_chain([step("echo", msg=1)])
    assert mistyped[0].error == "Invalid type for parameter msg: expected string, got number"
    invoker.assert_not_called()


@pytest.mark.asyncio
async def test_invocation_failure_keeps_step_metadata(executor: ChainExecutor) -> None:
    results = await executor.execute_chain([step("boom", metadata={"attempt": 1})])
    assert results == [
        ToolResult(success=False, result=None, error="upstream exploded", metadata={"attempt": 1})
    ]


@pytest.mark.asyncio
async def test_empty_exception_message(registry: ToolRegistry) -> None:
    def raise_bare(contract, params, ctx):
        raise RuntimeError()

    executor = ChainExecutor(raise_bare, registry=registry)
    results = await executor.execute_chain([step("boom")])
    assert results[0].error == "Unknown error"


@pytest.mark.asyncio
async def test_short_circuit_on_failure(executor: ChainExecutor, invoker: MockInvoker) -> None:
    results = await executor.execute_chain([step("boom"), step("echo", msg="never")])
    assert len(results) == 1
    assert not results[0].success
    assert invoker.calls_for("echo") == []


@pytest.mark.asyncio
async def test_executed_steps_are_a_prefix(executor: ChainExecutor) -> None:
    results = await executor.execute_chain([
        step("echo", msg="a"),
        step("echo", msg="b"),
        step("missing"),
        step("echo", msg="c"),
    ])
    assert [r.success for r in results] == [True, True, False]


@pytest.mark.asyncio
async def test_invoke_timeout(registry: ToolRegistry) -> None:
    async def slow(contract, params, ctx):
        await asyncio.sleep(5)
        return "late"

    executor = ChainExecutor(slow, registry=registry, invoke_timeout=0.01)
    results = await executor.execute_chain([step("echo", msg="x")])
    assert not results[0].success
    assert results[0].error == "Tool echo timed out after 0.01s"


# ═════════════════════════════════════════════════════════════════════════════
# Caching
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_chain_cache_hit_is_idempotent(executor: ChainExecutor, invoker: MockInvoker) -> None:
    chain = [step("echo", msg="a"), step("echo", msg="b", metadata={"k": "v"})]
    first = await executor.execute_chain(chain)
    calls = invoker.call_count

    second = await executor.execute_chain([step("echo", msg="a"), step("echo", msg="b", metadata={"k": "v"})])
    assert second == first
    assert invoker.call_count == calls == 2


@pytest.mark.asyncio
async def test_chain_hit_skips_step_cache(executor: ChainExecutor, cache: ChainCache) -> None:
    chain = [step("echo", msg="a")]
    await executor.execute_chain(chain)
    # Step entry corrupted; a whole-chain hit must not consult it
    cache.set(step_cache_key("echo", {"msg": "a"}), "{broken")
    results = await executor.execute_chain(chain)
    assert results[0].result == "a"
    assert cache.get(step_cache_key("echo", {"msg": "a"})) == "{broken"


@pytest.mark.asyncio
async def test_step_cache_reused_across_chains(executor: ChainExecutor, invoker: MockInvoker) -> None:
    await executor.execute_chain([step("echo", msg="shared")])
    results = await executor.execute_chain([step("echo", msg="shared"), step("echo", msg="new")])
    assert [r.result for r in results] == ["shared", "new"]
    assert [c.params["msg"] for c in invoker.calls_for("echo")] == ["shared", "new"]


@pytest.mark.asyncio
async def test_single_step_chain_keeps_its_step_entry(
    executor: ChainExecutor, invoker: MockInvoker, cache: ChainCache
) -> None:
    await executor.execute_chain([step("echo", msg="x")])
    assert chain_cache_key([step("echo", msg="x")]) != step_cache_key("echo", {"msg": "x"})
    assert cache.has(chain_cache_key([step("echo", msg="x")]))
    assert cache.get(step_cache_key("echo", {"msg": "x"})).startswith("{")

    await executor.execute_chain([step("echo", msg="x"), step("echo", msg="y")])
    assert [c.params["msg"] for c in invoker.calls_for("echo")] == ["x", "y"]


@pytest.mark.asyncio
async def test_step_shaped_chain_entry_is_not_a_step_hit(
    executor: ChainExecutor, invoker: MockInvoker, cache: ChainCache
) -> None:
    cache.set(chain_cache_key([step("echo", msg="a")]), '{"success": true}')
    results = await executor.execute_chain([step("echo", msg="a"), step("echo", msg="b")])
    assert [r.result for r in results] == ["a", "b"]
    assert invoker.call_count == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [{"msg": "big", "n": 2**64}, {"msg": "keys", "m": {1: "a"}}],
    ids=["int-over-64-bits", "non-str-dict-key"],
)
async def test_unserializable_params_bypass_cache(
    executor: ChainExecutor, invoker: MockInvoker, cache: ChainCache, params: dict
) -> None:
    chain = [ChainStep(tool_name="echo", params=params)]
    first = await executor.execute_chain(chain)
    second = await executor.execute_chain(chain)
    assert first == second == [ToolResult(success=True, result=params["msg"])]
    assert invoker.call_count == 2
    assert cache.size == 0


@pytest.mark.asyncio
async def test_miss_and_hit_return_same_json_result(registry: ToolRegistry, cache: ChainCache) -> None:
    invoker = MockInvoker(handlers={"echo": lambda p: (p["msg"], "b")})
    executor = ChainExecutor(invoker, registry=registry, cache=cache)
    chain = [step("echo", msg="a")]

    first = await executor.execute_chain(chain)
    second = await executor.execute_chain(chain)
    assert first[0].result == ["a", "b"]
    assert second == first
    assert invoker.call_count == 1


@pytest.mark.asyncio
async def test_step_cache_is_context_independent(executor: ChainExecutor, invoker: MockInvoker) -> None:
    await executor.execute_chain([step("echo", msg="a", metadata={"run": 1}), step("needs_prev")])
    invoker.reset()
    results = await executor.execute_chain([step("echo", msg="b"), step("needs_prev")])
    assert [c.tool_name for c in invoker.invocations] == ["echo"]
    assert results[1].result == "after"


@pytest.mark.asyncio
async def test_cached_step_keeps_original_metadata(executor: ChainExecutor) -> None:
    await executor.execute_chain([step("echo", msg="a", metadata={"origin": "first"})])
    results = await executor.execute_chain([step("echo", msg="a", metadata={"origin": "second"}), step("echo", msg="z")])
    assert results[0].metadata == {"origin": "first"}


@pytest.mark.asyncio
async def test_failed_chain_not_cached_and_retry_warm_starts(
    registry: ToolRegistry, cache: ChainCache
) -> None:
    invoker = MockInvoker(handlers={"echo": lambda p: p["msg"]}, raises=RuntimeError("flaky"))
    executor = ChainExecutor(invoker, registry=registry, cache=cache)
    chain = [step("echo", msg="a"), step("boom")]

    first = await executor.execute_chain(chain)
    assert [r.success for r in first] == [True, False]
    assert not cache.has(chain_cache_key(chain))

    invoker.raises = None
    invoker.return_value = "recovered"
    invoker.reset()
    second = await executor.execute_chain(chain)
    assert [r.result for r in second] == ["a", "recovered"]
    assert [c.tool_name for c in invoker.invocations] == ["boom"]
    assert cache.has(chain_cache_key(chain))


@pytest.mark.asyncio
async def test_failed_step_is_not_step_cached(executor: ChainExecutor, cache: ChainCache) -> None:
    await executor.execute_chain([step("boom")])
    assert not cache.has(step_cache_key("boom", {}))


@pytest.mark.asyncio
async def test_corrupt_chain_entry_degrades_to_recompute(
    executor: ChainExecutor, invoker: MockInvoker, cache: ChainCache
) -> None:
    chain = [step("echo", msg="a")]
    cache.set(chain_cache_key(chain), "not json")
    results = await executor.execute_chain(chain)
    assert results[0].result == "a"
    assert invoker.call_count == 1
    assert cache.get(chain_cache_key(chain)) != "not json"


@pytest.mark.asyncio
async def test_wrong_shape_chain_entry_degrades_to_recompute(
    executor: ChainExecutor, invoker: MockInvoker, cache: ChainCache
) -> None:
    chain = [step("echo", msg="a")]
    cache.set(chain_cache_key(chain), '{"success": true}')
    results = await executor.execute_chain(chain)
    assert results[0].result == "a"
    assert invoker.call_count == 1


@pytest.mark.asyncio
async def test_corrupt_step_entry_degrades_to_recompute(
    executor: ChainExecutor, invoker: MockInvoker, cache: ChainCache
) -> None:
    cache.set(step_cache_key("echo", {"msg": "a"}), "[oops")
    results = await executor.execute_chain([step("echo", msg="a")])
    assert results[0].result == "a"
    assert invoker.call_count == 1


@pytest.mark.asyncio
async def test_chain_cache_expires(registry: ToolRegistry, invoker: MockInvoker) -> None:
    clock = FakeClock()
    executor = ChainExecutor(invoker, registry=registry, cache=ChainCache(clock=clock), chain_ttl=10, step_ttl=10)
    chain = [step("echo", msg="a")]

    await executor.execute_chain(chain)
    clock.advance(5)
    await executor.execute_chain(chain)
    assert invoker.call_count == 1

    clock.advance(6)
    await executor.execute_chain(chain)
    assert invoker.call_count == 2


@pytest.mark.asyncio
async def test_step_ttl_outlives_chain_ttl(registry: ToolRegistry, invoker: MockInvoker) -> None:
    clock = FakeClock()
    cache = ChainCache(clock=clock)
    executor = ChainExecutor(invoker, registry=registry, cache=cache, chain_ttl=1, step_ttl=100)
    chain = [step("echo", msg="a")]

    await executor.execute_chain(chain)
    clock.advance(2)
    assert not cache.has(chain_cache_key(chain))
    await executor.execute_chain(chain)
    assert invoker.call_count == 1


# ═════════════════════════════════════════════════════════════════════════════
# Context threading
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_context_threads_results_and_metadata(executor: ChainExecutor, invoker: MockInvoker) -> None:
    await executor.execute_chain([
        step("echo", msg="a", metadata={"lang": "py", "stage": 1}),
        step("echo", msg="b", metadata={"stage": 2}),
        step("echo", msg="c"),
    ])
    seen = [(c.previous_count, c.context_metadata) for c in invoker.invocations]
    assert seen == [
        (0, {}),
        (1, {"lang": "py", "stage": 1}),
        (2, {"lang": "py", "stage": 2}),
    ]


@pytest.mark.asyncio
async def test_tool_chain_context_written_back(executor: ChainExecutor) -> None:
    chain = ToolChain(steps=[step("echo", msg="a", metadata={"k": 1}), step("missing")])
    await executor.execute_chain(chain)
    assert [r.result for r in chain.context.previous_results] == ["a"]
    assert chain.context.metadata == {"k": 1}


@pytest.mark.asyncio
async def test_tool_chain_context_rebuilt_on_cache_hit(executor: ChainExecutor) -> None:
    steps = [step("echo", msg="a", metadata={"k": 1}), step("echo", msg="b", metadata={"k": 2})]
    await executor.execute_chain(steps)

    chain = ToolChain(steps=steps)
    await executor.execute_chain(chain)
    assert len(chain.context.previous_results) == 2
    assert chain.context.metadata == {"k": 2}


def test_context_record_merges_later_over_earlier() -> None:
    ctx = ChainContext()
    ctx.record(ToolResult.ok("a", {"x": 1, "y": 1}))
    ctx.record(ToolResult.ok("b"))
    ctx.record(ToolResult.ok("c", {"y": 2}))
    assert ctx.metadata == {"x": 1, "y": 2}
    assert len(ctx.previous_results) == 3


# ═════════════════════════════════════════════════════════════════════════════
# Single tool invocation
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_invoke_tool_bypasses_cache(executor: ChainExecutor, invoker: MockInvoker, cache: ChainCache) -> None:
    assert await executor.invoke_tool("echo", {"msg": "x"}) == "x"
    assert await executor.invoke_tool("echo", {"msg": "x"}) == "x"
    assert invoker.call_count == 2
    assert cache.size == 0


@pytest.mark.asyncio
async def test_invoke_tool_raises(executor: ChainExecutor) -> None:
    from deepchain.foundation.errors import InvocationError, ToolNotFoundError, ValidationError

    with pytest.raises(ToolNotFoundError, match="Unknown tool: nope"):
        await executor.invoke_tool("nope", {})
    with pytest.raises(ValidationError):
        await executor.invoke_tool("echo", {})
    with pytest.raises(InvocationError, match="upstream exploded"):
        await executor.invoke_tool("boom", {})


# ═════════════════════════════════════════════════════════════════════════════
# Chain editing
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_chain_editing_never_touches_cache(executor: ChainExecutor, cache: ChainCache) -> None:
    chain = ToolChain(steps=[step("echo", msg="a")])
    await executor.execute_chain(chain)
    before = cache.stats()

    executor.add_step(chain, step("echo", msg="b"))
    assert [s.params["msg"] for s in chain.steps] == ["a", "b"]
    executor.remove_step(chain, 0)
    assert [s.params["msg"] for s in chain.steps] == ["b"]
    executor.remove_step(chain, 5)
    assert len(chain.steps) == 1
    executor.clear_chain(chain)
    assert chain.steps == []
    assert chain.context.previous_results == []
    assert cache.stats() == before


def test_remove_step_negative_index() -> None:
    chain = ToolChain(steps=[step("a"), step("b"), step("c")])
    ChainExecutor.remove_step(chain, -1)
    assert [s.tool_name for s in chain.steps] == ["a", "b"]
