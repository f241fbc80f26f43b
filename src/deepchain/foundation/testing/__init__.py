"""Test doubles for chain execution."""

from .clock import FakeClock
from .mock import Invocation, MockInvoker

__all__ = ["FakeClock", "Invocation", "MockInvoker"]
