"""Project tool handlers for MCP server.

Implements listing, saving, adding, updating, deleting and refreshing the
stored project credentials, plus a direct metadata lookup. Blocking store
and API calls run through run_sync(). API keys are masked in every response.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import mcp.types as types

from ...core.async_utils import run_sync
from ...errors import InputValidationError
from ...models import Project
from ...projects import group_by_team
from ...validators import validate_project_credentials
from .registry import ToolSpec

if TYPE_CHECKING:
    from ..context import AppContext

_PROJECT_ID = {
    "type": "string",
    "description": "Uniform project id (UUID)",
}
_API_KEY = {
    "type": "string",
    "description": "Uniform API key for the project (50-150 characters)",
}


def _text_result(text: str, structured: dict[str, Any]) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        structuredContent=structured,
    )


def _format_projects(projects: list[Project]) -> str:
    if not projects:
        return "No projects configured."
    lines: list[str] = []
    for team, members in group_by_team(projects).items():
        lines.append(f"{team or '(no team)'}:")
        for project in members:
            lines.append(f"  {project.label}  [{project.id}]")
    return "\n".join(lines)


def _projects_json(projects: list[Project]) -> dict[str, Any]:
    return {
        "projects": [p.public_dict() for p in projects],
        "teams": {
            team: [p.id for p in members]
            for team, members in group_by_team(projects).items()
        },
    }


async def _sync_session(ctx: AppContext) -> list[Project]:
    projects = await run_sync(ctx.projects.list_projects)
    ctx.session.set_projects(projects)
    return projects


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_list(ctx: AppContext, args: dict) -> types.CallToolResult:
    """Handle project_list."""
    projects = await _sync_session(ctx)
    return _text_result(_format_projects(projects), _projects_json(projects))


async def _handle_save(ctx: AppContext, args: dict) -> types.CallToolResult:
    """Handle project_save: replace the whole stored list."""
    records = args.get("projects")
    if not isinstance(records, list):
        raise InputValidationError("projects must be an array of project records")
    projects = await run_sync(ctx.projects.replace_all, records)
    ctx.session.set_projects(projects)
    return _text_result(
        f"Projects saved successfully ({len(projects)} projects).",
        _projects_json(projects),
    )


async def _handle_add(ctx: AppContext, args: dict) -> types.CallToolResult:
    """Handle project_add."""
    project = await run_sync(
        ctx.projects.add, args.get("project_id"), args.get("api_key")
    )
    await _sync_session(ctx)
    return _text_result(
        f"Added project {project.label} ({project.team_name or 'no team'}).",
        {"project": project.public_dict()},
    )


async def _handle_update(ctx: AppContext, args: dict) -> types.CallToolResult:
    """Handle project_update: re-fetch metadata, optionally with a new key."""
    project_id = args.get("project_id")
    if not project_id:
        raise InputValidationError("project_id is required")
    project = await run_sync(
        ctx.projects.update, project_id, args.get("api_key")
    )
    await _sync_session(ctx)
    return _text_result(
        f"Updated project {project.label}.",
        {"project": project.public_dict()},
    )


async def _handle_delete(ctx: AppContext, args: dict) -> types.CallToolResult:
    """Handle project_delete."""
    project_id = args.get("project_id")
    if not project_id:
        raise InputValidationError("project_id is required")
    removed = await run_sync(ctx.projects.delete, project_id)
    await _sync_session(ctx)
    return _text_result(
        f"Deleted project {removed.label}.",
        {"deleted": removed.id},
    )


async def _handle_refresh_names(
    ctx: AppContext, args: dict
) -> types.CallToolResult:
    """Handle project_refresh_names: refresh every project independently."""
    results = await ctx.projects.refresh_all()
    await _sync_session(ctx)

    failed = [r for r in results if not r.ok]
    lines = [
        f"Refreshed {len(results) - len(failed)} of {len(results)} projects."
    ]
    for result in failed:
        lines.append(f"  {result.project_id}: {result.error}")
    return _text_result(
        "\n".join(lines),
        {
            "results": [
                {
                    "project_id": r.project_id,
                    "ok": r.ok,
                    "display_name": r.project.display_name if r.project else None,
                    "error": r.error,
                }
                for r in results
            ],
            "refreshed": len(results) - len(failed),
            "failed": len(failed),
        },
    )


async def _handle_metadata(ctx: AppContext, args: dict) -> types.CallToolResult:
    """Handle project_metadata: look up a project without storing it."""
    project_id, api_key = validate_project_credentials(
        args.get("project_id"), args.get("api_key")
    )
    metadata = await run_sync(
        ctx.gateway.fetch_project_metadata, project_id, api_key
    )
    return _text_result(
        f"{metadata.name} (team: {metadata.team_name or 'none'})",
        {
            "projectId": metadata.project_id,
            "projectName": metadata.name,
            "teamId": metadata.team_id,
            "teamName": metadata.team_name,
        },
    )


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

PROJECT_SPECS: list[ToolSpec] = [
    ToolSpec(
        tool=types.Tool(
            name="project_list",
            description="List configured Uniform projects grouped by team. API keys are masked.",
            annotations=types.ToolAnnotations(
                readOnlyHint=True, openWorldHint=False
            ),
            inputSchema={"type": "object", "properties": {}, "required": []},
        ),
        handler=_handle_list,
    ),
    ToolSpec(
        tool=types.Tool(
            name="project_save",
            description=(
                "Replace the stored project list. Each record needs projectId and apiKey; "
                "teamId, teamName and displayName come from Uniform metadata and are "
                "overwritten by project_update and project_refresh_names."
            ),
            annotations=types.ToolAnnotations(
                readOnlyHint=False, destructiveHint=True, openWorldHint=False
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "projects": {
                        "type": "array",
                        "items": {"type": "object"},
                        "description": "Complete list of project records",
                    }
                },
                "required": ["projects"],
            },
        ),
        handler=_handle_save,
        writes=True,
    ),
    ToolSpec(
        tool=types.Tool(
            name="project_add",
            description="Add a project. Its name and team are fetched from Uniform.",
            annotations=types.ToolAnnotations(
                readOnlyHint=False, destructiveHint=False, openWorldHint=True
            ),
            inputSchema={
                "type": "object",
                "properties": {"project_id": _PROJECT_ID, "api_key": _API_KEY},
                "required": ["project_id", "api_key"],
            },
        ),
        handler=_handle_add,
        writes=True,
    ),
    ToolSpec(
        tool=types.Tool(
            name="project_update",
            description="Re-fetch a stored project's name and team, optionally replacing its API key.",
            annotations=types.ToolAnnotations(
                readOnlyHint=False,
                destructiveHint=False,
                idempotentHint=True,
                openWorldHint=True,
            ),
            inputSchema={
                "type": "object",
                "properties": {"project_id": _PROJECT_ID, "api_key": _API_KEY},
                "required": ["project_id"],
            },
        ),
        handler=_handle_update,
        writes=True,
    ),
    ToolSpec(
        tool=types.Tool(
            name="project_delete",
            description="Remove a project from the stored list. Nothing is deleted in Uniform.",
            annotations=types.ToolAnnotations(
                readOnlyHint=False, destructiveHint=True, openWorldHint=False
            ),
            inputSchema={
                "type": "object",
                "properties": {"project_id": _PROJECT_ID},
                "required": ["project_id"],
            },
        ),
        handler=_handle_delete,
        writes=True,
    ),
    ToolSpec(
        tool=types.Tool(
            name="project_refresh_names",
            description=(
                "Re-fetch name and team for every stored project. "
                "A failure on one project does not stop the others."
            ),
            annotations=types.ToolAnnotations(
                readOnlyHint=False,
                destructiveHint=False,
                idempotentHint=True,
                openWorldHint=True,
            ),
            inputSchema={"type": "object", "properties": {}, "required": []},
        ),
        handler=_handle_refresh_names,
        writes=True,
    ),
    ToolSpec(
        tool=types.Tool(
            name="project_metadata",
            description="Look up a project's name and team in Uniform without storing it.",
            annotations=types.ToolAnnotations(
                readOnlyHint=True, openWorldHint=True
            ),
            inputSchema={
                "type": "object",
                "properties": {"project_id": _PROJECT_ID, "api_key": _API_KEY},
                "required": ["project_id", "api_key"],
            },
        ),
        handler=_handle_metadata,
    ),
]
