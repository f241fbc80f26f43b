"""Run the deepchain MCP server on stdio: python -m deepchain"""

from __future__ import annotations

import sys

from deepchain.ext.mcp import create_mcp_server
from deepchain.foundation.config import get_settings
from deepchain.observability import configure_logging, get_logger


def main() -> None:
    settings = get_settings()
    configure_logging(format=settings.logging.format, level=settings.logging.level)
    try:
        server = create_mcp_server(settings)
    except ValueError as e:
        get_logger("deepchain").error("startup failed", error=str(e))
        sys.exit(1)
    server.run()


if __name__ == "__main__":
    main()
