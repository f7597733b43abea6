"""Component tool handlers for MCP server.

Defines three tools:

- ``component_list`` -- list one project's component definitions.
- ``component_compare`` -- side-by-side comparison of two stored projects.
- ``component_sync`` -- copy one component definition between stored projects.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import mcp.types as types

from ...core.async_utils import run_sync
from ...errors import InputValidationError
from ...models import Component, Side
from ...sync.reporter import (
    comparison_to_json,
    format_comparison_table,
    format_sync_outcome,
    outcome_to_json,
)
from ...validators import validate_project_credentials
from .registry import ToolSpec

if TYPE_CHECKING:
    from ..context import AppContext

logger = logging.getLogger(__name__)


def _required(args: dict, key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InputValidationError(f"{key} is required", fields={key: "is required"})
    return value.strip()


async def _load_session_projects(ctx: AppContext) -> None:
    ctx.session.set_projects(await run_sync(ctx.projects.list_projects))


def _format_components(components: list[Component]) -> str:
    if not components:
        return "No components found."
    lines = []
    for c in sorted(components, key=lambda c: c.id):
        updated = c.last_updated.isoformat() if c.last_updated else "unknown"
        lines.append(
            f"{c.id}  {c.name}  ({c.parameter_count} params, updated {updated})"
        )
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_list(ctx: AppContext, args: dict) -> types.CallToolResult:
    """Handle component_list.

    Uses the given api_key, or the stored key when only project_id is given.
    """
    project_id = _required(args, "project_id")
    api_key = args.get("api_key")
    if not api_key:
        project = await run_sync(ctx.projects.get, project_id)
        api_key = project.api_key
    project_id, api_key = validate_project_credentials(project_id, api_key)

    components = await run_sync(ctx.gateway.list_components, project_id, api_key)
    return types.CallToolResult(
        content=[
            types.TextContent(type="text", text=_format_components(components))
        ],
        structuredContent={
            "project_id": project_id,
            "components": [c.model_dump(mode="json") for c in components],
        },
    )


async def _handle_compare(ctx: AppContext, args: dict) -> types.CallToolResult:
    """Handle component_compare: fetch both projects and compare."""
    project_a = _required(args, "project_a")
    project_b = _required(args, "project_b")
    if project_a == project_b:
        raise InputValidationError("project_a and project_b must differ")

    session = ctx.session
    await _load_session_projects(ctx)
    session.select(Side.A, project_a)
    session.select(Side.B, project_b)
    session.search_term = args.get("search") or ""
    await session.refresh_components(ctx.gateway)

    rows = session.table()
    a, b = session.project(Side.A), session.project(Side.B)
    return types.CallToolResult(
        content=[
            types.TextContent(type="text", text=format_comparison_table(rows, a, b))
        ],
        structuredContent=comparison_to_json(rows, a, b),
    )


async def _handle_sync(ctx: AppContext, args: dict) -> types.CallToolResult:
    """Handle component_sync.

    Reuses the session's current pair when it matches source/destination so
    the compared lists stay in step; otherwise selects source as A and
    destination as B.
    """
    source_id = _required(args, "source")
    destination_id = _required(args, "destination")
    component_id = _required(args, "component_id")
    backup = args.get("backup")
    if backup is None:
        backup = ctx.config.backup_by_default
    if source_id == destination_id:
        raise InputValidationError("source and destination must differ")

    session = ctx.session
    selected = (session.selected[Side.A], session.selected[Side.B])
    if selected == (source_id, destination_id):
        from_side = Side.A
    elif selected == (destination_id, source_id):
        from_side = Side.B
    else:
        await _load_session_projects(ctx)
        session.select(Side.A, source_id)
        session.select(Side.B, destination_id)
        from_side = Side.A

    outcome = await session.sync(ctx.engine, from_side, component_id, bool(backup))
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=format_sync_outcome(outcome))],
        structuredContent=outcome_to_json(outcome),
    )


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

COMPONENT_SPECS: list[ToolSpec] = [
    ToolSpec(
        tool=types.Tool(
            name="component_list",
            description=(
                "List a project's component definitions with name, parameter count "
                "and last update time. api_key defaults to the stored key."
            ),
            annotations=types.ToolAnnotations(readOnlyHint=True, openWorldHint=True),
            inputSchema={
                "type": "object",
                "properties": {
                    "project_id": {
                        "type": "string",
                        "description": "Uniform project id (UUID)",
                    },
                    "api_key": {
                        "type": "string",
                        "description": "API key (optional for stored projects)",
                    },
                },
                "required": ["project_id"],
            },
        ),
        handler=_handle_list,
    ),
    ToolSpec(
        tool=types.Tool(
            name="component_compare",
            description=(
                "Compare the components of two stored projects side by side. "
                "Marks which copy is newer; components missing on one side are shown as not present."
            ),
            annotations=types.ToolAnnotations(readOnlyHint=True, openWorldHint=True),
            inputSchema={
                "type": "object",
                "properties": {
                    "project_a": {
                        "type": "string",
                        "description": "Stored project id shown as A",
                    },
                    "project_b": {
                        "type": "string",
                        "description": "Stored project id shown as B",
                    },
                    "search": {
                        "type": "string",
                        "description": "Only show component ids containing this text (case-insensitive)",
                    },
                },
                "required": ["project_a", "project_b"],
            },
        ),
        handler=_handle_compare,
    ),
    ToolSpec(
        tool=types.Tool(
            name="component_sync",
            description=(
                "Copy one component definition from the source project over the "
                "destination's copy (full overwrite). Optionally writes a backup of the "
                "destination's copy first."
            ),
            annotations=types.ToolAnnotations(
                readOnlyHint=False,
                destructiveHint=True,
                idempotentHint=True,
                openWorldHint=True,
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "source": {
                        "type": "string",
                        "description": "Stored project id to copy from",
                    },
                    "destination": {
                        "type": "string",
                        "description": "Stored project id to overwrite",
                    },
                    "component_id": {
                        "type": "string",
                        "description": "Component definition id",
                    },
                    "backup": {
                        "type": "boolean",
                        "description": "Back up the destination's copy first (default from config)",
                    },
                },
                "required": ["source", "destination", "component_id"],
            },
        ),
        handler=_handle_sync,
        writes=True,
    ),
]
