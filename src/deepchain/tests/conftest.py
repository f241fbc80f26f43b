"""Shared fixtures for deepchain tests."""

import pytest

from deepchain.cache import ChainCache
from deepchain.chain import ChainExecutor
from deepchain.foundation.testing import FakeClock, MockInvoker
from deepchain.observability import configure_logging
from deepchain.registry import ToolContract, ToolRegistry

ECHO = ToolContract(
    name="echo",
    description="Echo a message",
    input_schema={"properties": {"msg": {"type": "string"}}, "required": ["msg"]},
)

NEEDS_PREV = ToolContract(
    name="needs_prev",
    description="Only runs after another step",
    requires_previous=True,
)

BOOM = ToolContract(name="boom", description="Always fails")


def _boom(params: dict) -> object:
    raise RuntimeError("upstream exploded")


@pytest.fixture(autouse=True)
def quiet_logs() -> None:
    configure_logging(format="none")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ChainCache:
    return ChainCache(clock=clock)


@pytest.fixture
def registry() -> ToolRegistry:
    registry = ToolRegistry()
    registry.register_all(ECHO, NEEDS_PREV, BOOM)
    return registry


@pytest.fixture
def invoker() -> MockInvoker:
    return MockInvoker(handlers={
        "echo": lambda p: p["msg"],
        "needs_prev": lambda p: "after",
        "boom": _boom,
    })


@pytest.fixture
def executor(invoker: MockInvoker, registry: ToolRegistry, cache: ChainCache) -> ChainExecutor:
    return ChainExecutor(invoker, registry=registry, cache=cache)
