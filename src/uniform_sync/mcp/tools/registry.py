"""ToolSpec and ToolRegistry for MCP tool dispatch.

- ToolSpec: Immutable dataclass linking a Tool definition, whether the tool
  changes anything, and an async handler with signature (ctx, args) -> CallToolResult.
- ToolRegistry: Optionally drops changing tools (read-only mode) at
  construction time, then provides list_tools() and call_tool() dispatch
  with error translation.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import mcp.types as types

from ...errors import UniformSyncError
from .errors import build_error_response, translate_error

if TYPE_CHECKING:
    from ..context import AppContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """Immutable specification for a single MCP tool.

    Attributes:
        tool: The MCP Tool definition (name, description, inputSchema).
        handler: Async handler with signature (ctx, args) -> CallToolResult.
        writes: True if the tool changes stored projects or Uniform data.
    """

    tool: types.Tool
    handler: Callable[[AppContext, dict], Awaitable[types.CallToolResult]]
    writes: bool = False


class ToolRegistry:
    """Registry of ToolSpecs.

    In read-only mode, specs with ``writes=True`` are left out entirely.
    """

    def __init__(self, specs: list[ToolSpec], read_only: bool = False):
        self._specs: dict[str, ToolSpec] = {}
        for spec in specs:
            if read_only and spec.writes:
                continue
            self._specs[spec.tool.name] = spec

    def list_tools(self) -> list[types.Tool]:
        """Return the Tool definitions of all registered specs."""
        return [spec.tool for spec in self._specs.values()]

    def tool_count(self) -> int:
        return len(self._specs)

    async def call_tool(
        self,
        name: str,
        arguments: dict | None,
        ctx: AppContext,
    ) -> types.CallToolResult:
        """Dispatch a tool call to its handler.

        uniform_sync errors become structured error responses with their
        own status; a bare ValueError is a validation error; anything else
        is logged and reported as a server error.

        Raises:
            ValueError: If tool name is not registered (unknown or filtered out).
        """
        spec = self._specs.get(name)
        if spec is None:
            raise ValueError(f"Unknown tool: {name}")
        args = arguments or {}
        try:
            return await spec.handler(ctx, args)
        except UniformSyncError as e:
            logger.warning("%s in %s: %s", type(e).__name__, name, e)
            return translate_error(e)
        except ValueError as e:
            return build_error_response(
                "validation_error",
                str(e),
                "Check parameter values and retry.",
                status=400,
            )
        except Exception as e:
            logger.exception("Unexpected error in tool %s", name)
            return build_error_response(
                "server_error",
                str(e),
                "Check the server log and retry.",
                status=500,
            )
