"""Tool-call server surface for the chain executor.

ChainServer holds the protocol-independent logic (listing, dispatch, error
conversion). MCPServer exposes it over the Model Context Protocol via
FastMCP, for Cursor, Claude Desktop, VS Code and similar clients.

Example:
    >>> from deepchain.ext.mcp import create_mcp_server
    >>> create_mcp_server().run()  # stdio

Requires: pip install deepchain[mcp] (for FastMCP)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

import orjson
from pydantic import BaseModel

from deepchain.chain import ToolChain
from deepchain.foundation.errors import JsonDict, classify_exception
from deepchain.observability import get_logger

if TYPE_CHECKING:
    from deepchain.chain import ChainExecutor
    from deepchain.foundation.config import DeepchainSettings

Transport = Literal["stdio", "sse", "streamable-http"]

EXECUTE_CHAIN = "execute_chain"

EXECUTE_CHAIN_TOOL: JsonDict = {
    "name": EXECUTE_CHAIN,
    "description": "Execute a chain of DeepSeek tools",
    "inputSchema": {
        "type": "object",
        "properties": {
            "steps": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "toolName": {"type": "string"},
                        "params": {"type": "object"},
                    },
                    "required": ["toolName", "params"],
                },
            },
        },
        "required": ["steps"],
    },
}

_log = get_logger("deepchain.server")


class ToolCallResponse(BaseModel):
    """Text payload returned to the caller, flagged when it describes an error."""

    text: str
    is_error: bool = False


class ChainServer:
    """Protocol-independent tool-call handling.

    Every failure, including malformed chain requests, is converted to an
    error response here; nothing raises to the transport.
    """

    __slots__ = ("_name", "_executor")

    def __init__(self, name: str, executor: ChainExecutor) -> None:
        self._name = name
        self._executor = executor

    @property
    def name(self) -> str:
        return self._name

    @property
    def executor(self) -> ChainExecutor:
        return self._executor

    def list_tools(self) -> list[JsonDict]:
        """Registered tools plus execute_chain, with their input schemas."""
        tools: list[JsonDict] = [
            {
                "name": contract.name,
                "description": contract.description,
                "inputSchema": contract.input_schema.to_json_schema(),
            }
            for contract in self._executor.registry
        ]
        tools.append(EXECUTE_CHAIN_TOOL)
        return tools

    async def call_tool(self, name: str | None, arguments: JsonDict | None) -> ToolCallResponse:
        try:
            if not name:
                raise ValueError("Invalid request: missing tool name")
            if name == EXECUTE_CHAIN:
                return ToolCallResponse(text=await self._execute_chain(arguments or {}))
            output = await self._executor.invoke_tool(name, arguments or {})
            return ToolCallResponse(text=output if isinstance(output, str) else _dumps(output))
        except Exception as e:
            _log.warning("tool call failed", tool=name, error=str(e), code=classify_exception(e).value)
            return ToolCallResponse(text=f"Error: {str(e) or 'Unknown error'}", is_error=True)

    async def _execute_chain(self, arguments: JsonDict) -> str:
        steps = arguments.get("steps")
        if steps is None:
            raise ValueError("Invalid chain request: missing steps")
        results = await self._executor.execute_chain(ToolChain.model_validate({"steps": steps}))
        return _dumps([r.to_wire() for r in results])


class MCPServer(ChainServer):
    """FastMCP-backed server.

    Example:
        >>> server = MCPServer("deepseek-server", executor)
        >>> server.run(transport="sse", port=8080)
    """

    __slots__ = ("_mcp",)

    def __init__(self, name: str, executor: ChainExecutor) -> None:
        super().__init__(name, executor)
        self._mcp = self._create_server()

    def _create_server(self):
        try:
            from fastmcp import FastMCP
        except ImportError as e:
            raise ImportError(
                "MCP integration requires fastmcp. "
                "Install with: pip install deepchain[mcp]"
            ) from e

        mcp = FastMCP(self._name)
        self._register_tools(mcp)
        return mcp

    async def _respond(self, name: str, arguments: JsonDict) -> str:
        from fastmcp.exceptions import ToolError

        response = await self.call_tool(name, arguments)
        if response.is_error:
            raise ToolError(response.text)
        return response.text

    def _register_tools(self, mcp) -> None:
        """Register typed handlers for the built-in tools present in the registry, plus execute_chain."""

        async def generate_code(prompt: str, language: str | None = None, temperature: float | None = None) -> str:
            return await self._respond("generate_code", _present(prompt=prompt, language=language, temperature=temperature))

        async def complete_code(code: str, prompt: str, temperature: float | None = None) -> str:
            return await self._respond("complete_code", _present(code=code, prompt=prompt, temperature=temperature))

        async def optimize_code(code: str, target: str | None = None) -> str:
            return await self._respond("optimize_code", _present(code=code, target=target))

        async def execute_chain(steps: list[dict[str, Any]]) -> str:
            return await self._respond(EXECUTE_CHAIN, {"steps": steps})

        registry = self._executor.registry
        for handler in (generate_code, complete_code, optimize_code):
            if (contract := registry.get(handler.__name__)) is not None:
                mcp.tool(name=contract.name, description=contract.description)(handler)
        mcp.tool(name=EXECUTE_CHAIN, description=EXECUTE_CHAIN_TOOL["description"])(execute_chain)

    def run(
        self,
        transport: Transport = "stdio",
        *,
        host: str = "127.0.0.1",
        port: int = 8080,
    ) -> None:
        """Start the server (blocking)."""
        _log.info("server starting", server=self._name, transport=transport)
        if transport == "stdio":
            self._mcp.run()
        else:
            self._mcp.run(transport=transport, host=host, port=port)

    @property
    def fastmcp(self):
        return self._mcp


def create_mcp_server(settings: DeepchainSettings | None = None) -> MCPServer:
    """Build the default server: settings-driven client, built-in tools and executor."""
    from deepchain.app import create_executor
    from deepchain.foundation.config import get_settings

    settings = settings or get_settings()
    return MCPServer(settings.server_name, create_executor(settings))


def _present(**kw: object) -> JsonDict:
    return {k: v for k, v in kw.items() if v is not None}


def _dumps(value: object) -> str:
    return orjson.dumps(value, option=orjson.OPT_INDENT_2, default=str).decode()
