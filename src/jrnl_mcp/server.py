"""jrnl MCP Server - Main entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# MCP imports are optional - only needed when running the server
try:
    from mcp.server import Server  # pragma: no cover
    from mcp.server.stdio import stdio_server  # pragma: no cover
    from mcp.types import Tool, TextContent  # pragma: no cover
    HAS_MCP = True  # pragma: no cover
except ImportError:
    HAS_MCP = False
    Server = None  # type: ignore
    Tool = None  # type: ignore
    TextContent = None  # type: ignore

from .config import ServerConfig, load_config
from .engine import JrnlEngine
from .errors import JrnlError
from .executor import make_executor
from .models import Session
from .tools import execute_tool, make_tools

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] [%(name)s] %(levelname)s: %(message)s"


def setup_logging(debug: bool = False) -> None:
    """Send all logging to stderr; stdout carries the MCP protocol."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def create_engine(config: ServerConfig) -> JrnlEngine:
    """Create an engine with a fresh session for one server instance."""
    return JrnlEngine(
        make_executor(config),
        Session(current_journal=config.default_journal),
    )


def create_server(config: ServerConfig) -> "Server":
    """Create and configure the MCP server.

    Args:
        config: Server configuration

    Returns:
        Configured MCP Server instance

    Raises:
        ImportError: If MCP package is not installed
    """
    if not HAS_MCP:
        raise ImportError(
            "MCP package not installed. Install with: pip install jrnl-mcp[mcp]"
        )

    server = Server("jrnl-mcp")
    engine = create_engine(config)
    tool_defs = make_tools()

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """Return list of available tools."""
        return [
            Tool(
                name=t["name"],
                description=t["description"],
                inputSchema=t["inputSchema"],
            )
            for t in tool_defs.values()
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle tool invocation."""
        result = await execute_tool(engine, name, arguments)
        return [TextContent(type="text", text=json.dumps(result, indent=2, default=str))]

    return server


async def run_server(config: ServerConfig) -> None:
    """Run the MCP server with stdio transport."""
    if not HAS_MCP:
        raise ImportError(
            "MCP package not installed. Install with: pip install jrnl-mcp[mcp]"
        )

    server = create_server(config)  # pragma: no cover

    async with stdio_server() as (read_stream, write_stream):  # pragma: no cover
        logger.info("jrnl MCP server started")
        await server.run(  # pragma: no cover
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


async def check_jrnl(config: ServerConfig) -> str:
    """Run ``jrnl --version`` through the configured executor.

    Raises:
        JrnlError: If jrnl is missing or fails
    """
    engine = create_engine(config)
    return await engine.version()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="jrnl MCP Server - search, tag and analyze jrnl journals over MCP"
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Path to config file (default: auto-detect in current directory)",
    )
    parser.add_argument(
        "--jrnl",
        help="jrnl executable to run (default: jrnl)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds to wait for each jrnl invocation (default: 30)",
    )
    parser.add_argument(
        "--journal",
        help="Journal selected at startup",
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Serve built-in fixture data instead of running jrnl",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging on stderr",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Print the jrnl version and exit",
    )

    args = parser.parse_args()

    # Load configuration
    try:
        config = load_config(Path.cwd(), args.config)
    except JrnlError as e:
        print(f"Error loading config: {e.describe()}", file=sys.stderr)
        sys.exit(1)

    if args.jrnl:
        config.jrnl_command = args.jrnl
    if args.timeout is not None:
        if args.timeout <= 0:
            parser.error("--timeout must be positive")
        config.timeout = args.timeout
    if args.journal:
        config.default_journal = args.journal
    if args.mock:
        config.use_fixtures = True
    if args.debug:
        config.debug = True

    setup_logging(config.debug)

    if args.check:
        try:
            version = asyncio.run(check_jrnl(config))
        except JrnlError as e:
            print(f"Error: {e.describe()}", file=sys.stderr)
            sys.exit(1)
        print(version)
        return

    # Check for MCP before starting the server
    if not HAS_MCP:
        print("Error: MCP package not installed.", file=sys.stderr)
        print("Install with: pip install jrnl-mcp[mcp]", file=sys.stderr)
        sys.exit(1)

    try:
        asyncio.run(run_server(config))
    except JrnlError as e:
        print(f"Error starting server: {e.describe()}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
