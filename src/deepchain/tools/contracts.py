"""Contracts for the built-in code-assist tools."""

from __future__ import annotations

from deepchain.registry import InputSchema, SchemaProperty, ToolContract, ToolRegistry

GENERATE_CODE = ToolContract(
    name="generate_code",
    description="Generate code using DeepSeek API",
    chainable=True,
    input_schema=InputSchema(
        properties={
            "prompt": SchemaProperty(type="string", description="The code generation prompt"),
            "language": SchemaProperty(type="string", description="Target programming language"),
            "temperature": SchemaProperty(type="number", description="Sampling temperature (0-1)"),
        },
        required=["prompt"],
    ),
)

COMPLETE_CODE = ToolContract(
    name="complete_code",
    description="Get code completions using DeepSeek",
    chainable=True,
    input_schema=InputSchema(
        properties={
            "code": SchemaProperty(type="string", description="Existing code context"),
            "prompt": SchemaProperty(type="string", description="Completion prompt"),
            "temperature": SchemaProperty(type="number", description="Sampling temperature"),
        },
        required=["code", "prompt"],
    ),
)

OPTIMIZE_CODE = ToolContract(
    name="optimize_code",
    description="Optimize code using DeepSeek",
    chainable=True,
    requires_previous=True,
    input_schema=InputSchema(
        properties={
            "code": SchemaProperty(type="string", description="Code to optimize"),
            "target": SchemaProperty(
                type="string", description="Optimization target (performance, memory, readability)"
            ),
        },
        required=["code"],
    ),
)


def builtin_contracts() -> tuple[ToolContract, ...]:
    return (GENERATE_CODE, COMPLETE_CODE, OPTIMIZE_CODE)


def register_builtin_tools(registry: ToolRegistry) -> None:
    registry.register_all(*builtin_contracts())
