"""Model Context Protocol surface for deepchain."""

from .server import (
    EXECUTE_CHAIN,
    EXECUTE_CHAIN_TOOL,
    ChainServer,
    MCPServer,
    ToolCallResponse,
    Transport,
    create_mcp_server,
)

__all__ = [
    "ChainServer",
    "MCPServer",
    "ToolCallResponse",
    "Transport",
    "EXECUTE_CHAIN",
    "EXECUTE_CHAIN_TOOL",
    "create_mcp_server",
]
