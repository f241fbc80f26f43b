"""Chain data model: steps, context and per-step results.

Field names serialize in camelCase (toolName, previousResults) to match the
tool-call wire format; Python code may use either spelling on construction.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from deepchain.foundation.errors import JsonDict


class ToolResult(BaseModel):
    """Outcome of one step. Failures are data: success=False with an error message."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    result: Any = None
    error: str | None = None
    metadata: JsonDict | None = None

    @classmethod
    def ok(cls, result: Any, metadata: JsonDict | None = None) -> ToolResult:
        return cls(success=True, result=result, metadata=metadata)

    @classmethod
    def fail(cls, error: str, metadata: JsonDict | None = None) -> ToolResult:
        return cls(success=False, result=None, error=error, metadata=metadata)

    def to_wire(self) -> JsonDict:
        """JSON form for callers. Unset error and metadata are omitted, result is always present."""
        data = self.model_dump(mode="json")
        return {k: v for k, v in data.items() if v is not None or k == "result"}


class ChainStep(BaseModel):
    """One tool invocation in a chain."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    tool_name: str = Field(..., alias="toolName")
    params: JsonDict = Field(default_factory=dict)
    metadata: JsonDict | None = None


class ChainContext(BaseModel):
    """State threaded between steps of a single chain run."""

    model_config = ConfigDict(populate_by_name=True)

    previous_results: list[ToolResult] = Field(default_factory=list, alias="previousResults")
    metadata: JsonDict = Field(default_factory=dict)

    def record(self, result: ToolResult) -> None:
        """Append a successful result and shallow-merge its metadata (later keys win)."""
        self.previous_results.append(result)
        if result.metadata:
            self.metadata = {**self.metadata, **result.metadata}

    @classmethod
    def replay(cls, results: list[ToolResult]) -> ChainContext:
        """Rebuild the context a run would have produced from its successful results."""
        ctx = cls()
        for result in results:
            if not result.success:
                break
            ctx.record(result)
        return ctx


class ToolChain(BaseModel):
    """Ordered steps plus the context of the most recent run.

    Example:
        >>> chain = ToolChain(steps=[
        ...     ChainStep(tool_name="generate_code", params={"prompt": "fizzbuzz"}),
        ...     ChainStep(tool_name="optimize_code", params={"code": "..."}),
        ... ])
    """

    model_config = ConfigDict(populate_by_name=True)

    steps: list[ChainStep] = Field(default_factory=list)
    context: ChainContext = Field(default_factory=ChainContext)
