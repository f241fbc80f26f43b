"""Prompt templates for the built-in tools."""

from __future__ import annotations

from collections.abc import Mapping

from deepchain.foundation.errors import ToolNotFoundError


def _or(params: Mapping[str, object], key: str, default: str) -> object:
    return params.get(key) or default


def build_prompt(tool_name: str, params: Mapping[str, object]) -> str:
    """Render the completion prompt for a built-in tool."""
    match tool_name:
        case "generate_code":
            return (
                "\n### Task: Code Generation\n"
                f"### Language: {_or(params, 'language', 'any')}\n"
                "### Requirements:\n"
                f"{params.get('prompt')}\n"
                "### Response:\n"
            )
        case "complete_code":
            return (
                "\n### Task: Code Completion\n"
                "### Context:\n"
                f"{params.get('code')}\n"
                "### Requirements:\n"
                f"{params.get('prompt')}\n"
                "### Response:\n"
            )
        case "optimize_code":
            return (
                "\n### Task: Code Optimization\n"
                f"### Target: {_or(params, 'target', 'performance')}\n"
                "### Code:\n"
                f"{params.get('code')}\n"
                "### Response:\n"
            )
        case _:
            raise ToolNotFoundError(tool_name, f"Unknown tool: {tool_name}")
