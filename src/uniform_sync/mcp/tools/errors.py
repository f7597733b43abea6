"""Error responses for MCP tool handlers.

Every error payload carries the same structured fields so callers can branch
on them without parsing text:

    {"error": <error_type>, "status": <http-style int>,
     "status_class": "client_error" | "server_error",
     "message": <str>, "action": <str>}
"""

from typing import Any

import mcp.types as types

from ...errors import UniformSyncError


def build_error_response(
    error_type: str,
    message: str,
    corrective_action: str,
    status: int = 500,
    details: dict[str, Any] | None = None,
) -> types.CallToolResult:
    """Build a structured error response with corrective action.

    Args:
        error_type: Error category (validation_error, not_found, upstream_error, ...)
        message: Human-readable error description
        corrective_action: What the operator can do about it
        status: HTTP-style status code (4xx client input, 5xx server side)
        details: Extra structured fields (e.g. per-field validation errors)

    Returns:
        CallToolResult with isError=True

    Examples:
        >>> build_error_response("not_found", "Project X is not configured", "Use project_list.", 404)
        CallToolResult(content=[TextContent(...)], isError=True)
    """
    error_text = f"Error ({error_type}): {message}\n\nAction: {corrective_action}"
    structured: dict[str, Any] = {
        "error": error_type,
        "status": status,
        "status_class": "client_error" if 400 <= status < 500 else "server_error",
        "message": message,
        "action": corrective_action,
    }
    if details:
        structured["details"] = details

    return types.CallToolResult(
        content=[types.TextContent(type="text", text=error_text)],
        structuredContent=structured,
        isError=True,
    )


# ---------------------------------------------------------------------------
# Corrective action messages per error type
# ---------------------------------------------------------------------------

_ACTIONS: dict[str, str] = {
    "validation_error": "Check parameter values and retry.",
    "not_found": "Use project_list or component_compare to see what exists.",
    "sync_in_progress": "Wait for the running sync to finish, then refresh with component_compare.",
    "upstream_error": "Check the project id and API key, or retry later.",
    "metadata_fetch_error": "Check the project id and API key with project_metadata.",
    "sync_error": "Refresh with component_compare to see the current state, then retry the sync.",
    "persistence_error": "Check that the projects file and backup directory are writable.",
    "server_error": "Check the server log and retry.",
}


def translate_error(error: UniformSyncError) -> types.CallToolResult:
    """Translate a uniform_sync error into a structured error response."""
    details = getattr(error, "fields", None) or None
    return build_error_response(
        error.error_type,
        str(error),
        _ACTIONS.get(error.error_type, _ACTIONS["server_error"]),
        status=error.status,
        details=details,
    )
