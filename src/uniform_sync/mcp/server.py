"""MCP Server for Uniform component sync using stdio transport.

This module implements the Model Context Protocol server that lets AI
agents list, compare and copy component definitions between Uniform
projects.

Transport: stdio (for Claude Desktop/Code integration)
Protocol: JSON-RPC 2.0 over MCP
"""

import argparse
import asyncio
import logging
import sys

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions

from .. import __version__
from ..core.async_utils import run_sync
from ..logger import setup_logging
from .context import AppContext
from .lifespan import server_lifespan
from .tools import ALL_SPECS, ToolRegistry, build_error_response
from .tools.registry import ToolSpec

logger = logging.getLogger(__name__)

# Initialize server instance
server = Server("uniform-component-sync")

# Global context instance (initialized in main)
_context: AppContext | None = None

# Global registry instance (initialized in main)
_registry: ToolRegistry | None = None


# ---------------------------------------------------------------------------
# Ping tool (always available)
# ---------------------------------------------------------------------------


async def _handle_ping(ctx: AppContext, args: dict) -> types.CallToolResult:
    """Handle ping tool -- report config, optionally test one stored project."""
    projects = await run_sync(ctx.projects.list_projects)
    lines = [
        f"Uniform component sync server {__version__} running.",
        f"API: {ctx.config.api_url}",
        f"Stored projects: {len(projects)}",
    ]
    project_id = args.get("project_id")
    if project_id:
        project = await run_sync(ctx.projects.get, project_id)
        metadata = await run_sync(
            ctx.gateway.fetch_project_metadata, project.id, project.api_key
        )
        lines.append(f"Connected to {metadata.name} ({metadata.project_id}).")
    return types.CallToolResult(
        content=[types.TextContent(type="text", text="\n".join(lines))]
    )


PING_SPEC = ToolSpec(
    tool=types.Tool(
        name="ping",
        description=(
            "Check the server is running. With project_id, also test the "
            "connection to Uniform using that project's stored key."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "project_id": {
                    "type": "string",
                    "description": "Stored project id to test (optional)",
                }
            },
            "required": [],
        },
    ),
    handler=_handle_ping,
)


# ---------------------------------------------------------------------------
# Global accessors
# ---------------------------------------------------------------------------


def get_context() -> AppContext:
    """Get the global AppContext instance.

    Raises:
        RuntimeError: If context is not initialized
    """
    if _context is None:
        raise RuntimeError("AppContext not initialized. Server lifespan not started.")
    return _context


def set_context(ctx: AppContext | None) -> None:
    """Set the global AppContext instance, or None to clear."""
    global _context
    _context = ctx


def get_registry() -> ToolRegistry:
    """Get the global ToolRegistry instance.

    Raises:
        RuntimeError: If registry is not initialized
    """
    if _registry is None:
        raise RuntimeError("ToolRegistry not initialized.")
    return _registry


def set_registry(registry: ToolRegistry | None) -> None:
    """Set the global ToolRegistry instance, or None to clear."""
    global _registry
    _registry = registry


# ---------------------------------------------------------------------------
# MCP protocol handlers
# ---------------------------------------------------------------------------


@server.list_tools()
async def handle_list_tools() -> list[types.Tool]:
    """List available tools (read-only mode leaves out the changing ones)."""
    return get_registry().list_tools()


@server.call_tool()
async def handle_call_tool(
    name: str, arguments: dict | None
) -> types.CallToolResult:
    """Handle tool execution via ToolRegistry dispatch."""
    ctx = get_context()
    try:
        return await get_registry().call_tool(name, arguments, ctx)
    except ValueError as e:
        # Unknown or filtered-out tool name
        return build_error_response(
            "unknown_tool",
            str(e),
            "Use list_tools to see available tools.",
            status=404,
        )


# ---------------------------------------------------------------------------
# Server lifecycle
# ---------------------------------------------------------------------------


async def main(config_overrides: dict | None = None):
    """Run the MCP server with stdio transport.

    Sets up logging for MCP mode (file only, never stdout), loads
    configuration and the stored projects via the lifespan manager, and
    starts the server with stdio transport.

    Args:
        config_overrides: Optional dict with config values to override
            (api_url, projects_file, backup_dir, debug, read_only, log_file)
    """
    overrides = config_overrides or {}

    # Must run BEFORE stdio_server so nothing reaches stdout during negotiation
    setup_logging(
        mode="mcp",
        debug=overrides.get("debug", False),
        log_file=overrides.get("log_file"),
    )

    read_only = overrides.get("read_only", False)
    all_specs = [PING_SPEC] + ALL_SPECS
    registry = ToolRegistry(all_specs, read_only=read_only)
    logger.info(
        "Registered %d tools (of %d total)",
        registry.tool_count(),
        len(all_specs),
    )
    if read_only:
        print(
            f"Read-only mode ({registry.tool_count()} of {len(all_specs)} tools enabled)",
            file=sys.stderr,
        )

    set_registry(registry)

    # set_context() is called here rather than in the lifespan so that
    # running this file as __main__ updates the module the handlers read.
    async with server_lifespan(config_overrides=overrides) as ctx:
        set_context(ctx)
        try:
            async with mcp.server.stdio.stdio_server() as (
                read_stream,
                write_stream,
            ):
                init_options = InitializationOptions(
                    server_name="uniform-component-sync",
                    server_version=__version__,
                    capabilities=server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                )
                await server.run(read_stream, write_stream, init_options)
        finally:
            set_context(None)
            set_registry(None)


def run() -> None:
    """Entry point that handles errors gracefully and parses CLI arguments."""
    parser = argparse.ArgumentParser(
        description=(
            "Uniform component sync - MCP server for comparing and copying "
            "component definitions between Uniform projects"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with default config (from .env or config.yml)
  uniform-sync-mcp

  # Use a different projects file and backup directory
  uniform-sync-mcp --projects-file ~/uniform/projects.json --backup-dir ~/uniform/backups

  # Only expose tools that change nothing
  uniform-sync-mcp --read-only

  # Custom log file location
  uniform-sync-mcp --log-file /var/log/uniform-sync-mcp.log

Note: This server uses stdio transport for JSON-RPC communication with MCP clients.
All user-facing messages are written to stderr. Do not pipe stdin/stdout manually.
        """,
    )

    parser.add_argument(
        "--api-url",
        help="Override Uniform API base URL (takes precedence over UNIFORM_API_URL and config files)",
    )
    parser.add_argument(
        "--projects-file",
        help="Path of the JSON file holding project credentials",
    )
    parser.add_argument(
        "--backup-dir",
        help="Directory backups are written to before a component is overwritten",
    )
    parser.add_argument(
        "--read-only",
        action="store_true",
        help="Disable every tool that changes stored projects or Uniform data",
    )
    parser.add_argument(
        "--log-file",
        help="Log file path (default: LOG_FILE, YAML logging.file, or /tmp/uniform-sync-mcp.log)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"uniform-sync-mcp version {__version__}",
    )

    args = parser.parse_args()

    # Build config overrides dict from CLI args
    config_overrides: dict = {}
    if args.api_url:
        config_overrides["api_url"] = args.api_url
    if args.projects_file:
        config_overrides["projects_file"] = args.projects_file
    if args.backup_dir:
        config_overrides["backup_dir"] = args.backup_dir
    if args.read_only:
        config_overrides["read_only"] = True
    if args.debug:
        config_overrides["debug"] = True
    if args.log_file:
        config_overrides["log_file"] = args.log_file

    if config_overrides:
        print(
            f"Config overrides from CLI: {', '.join(config_overrides)}",
            file=sys.stderr,
        )

    try:
        asyncio.run(main(config_overrides=config_overrides or None))
    except RuntimeError:
        # Error already printed to stderr by lifespan manager
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    run()
