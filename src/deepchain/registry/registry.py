"""Registry of tool contracts, keyed by tool name."""

from __future__ import annotations

from collections.abc import Iterator

from .contract import ToolContract


class ToolRegistry:
    """Name -> ToolContract mapping owned by a ChainExecutor.

    Registration overwrites by name and does not inspect the schema shape.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register(ToolContract(name="echo"))
        >>> registry.get("echo").name
        'echo'
    """

    __slots__ = ("_tools",)

    def __init__(self) -> None:
        self._tools: dict[str, ToolContract] = {}

    def register(self, contract: ToolContract) -> None:
        self._tools[contract.name] = contract

    def register_all(self, *contracts: ToolContract) -> None:
        for contract in contracts:
            self.register(contract)

    def unregister(self, name: str) -> bool:
        """Remove a tool by name. Returns True if found."""
        return self._tools.pop(name, None) is not None

    def get(self, name: str) -> ToolContract | None:
        return self._tools.get(name)

    def __getitem__(self, name: str) -> ToolContract:
        return self._tools[name]

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolContract]:
        return iter(self._tools.values())

    def names(self) -> list[str]:
        return list(self._tools)

    def clear(self) -> None:
        self._tools.clear()
