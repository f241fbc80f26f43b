"""Declarative tool contracts: name, input schema and chaining flags."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from deepchain.foundation.errors import JsonDict


class SchemaProperty(BaseModel):
    """One declared parameter. An empty type tag disables the type check."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: str = ""
    description: str | None = None


class InputSchema(BaseModel):
    """Shallow object schema: property type tags plus required names."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: Literal["object"] = "object"
    properties: dict[str, SchemaProperty] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)

    def to_json_schema(self) -> JsonDict:
        """Wire form for tool listings."""
        return self.model_dump(mode="json", exclude_none=True)


class ToolContract(BaseModel):
    """Immutable description of a chainable tool.

    Attributes:
        name: Unique registry key
        description: Shown to callers in tool listings
        input_schema: Shallow parameter schema checked before invocation
        chainable: Whether the tool may appear in a chain
        requires_previous: Refuse to run until an earlier step has succeeded
        metadata_schema: Optional description of the metadata the tool emits

    Example:
        >>> ToolContract(
        ...     name="echo",
        ...     description="Echo a message",
        ...     input_schema=InputSchema(
        ...         properties={"msg": SchemaProperty(type="string")},
        ...         required=["msg"],
        ...     ),
        ... )
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    input_schema: InputSchema = Field(default_factory=InputSchema, alias="inputSchema")
    chainable: bool = True
    requires_previous: bool = Field(default=False, alias="requiresPrevious")
    metadata_schema: JsonDict | None = Field(default=None, alias="metadataSchema")
