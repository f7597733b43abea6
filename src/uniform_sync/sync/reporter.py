"""Report formatting for comparisons and transfers.

- ``format_comparison_table`` -- human-readable side-by-side listing.
- ``comparison_to_json`` -- structured dict for MCP tool output.
- ``format_sync_outcome`` / ``outcome_to_json`` -- a completed transfer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..models import Freshness, Side

if TYPE_CHECKING:
    from ..models import ComparisonRow, Component, Project, SyncOutcome

_MARKERS = {
    Freshness.NEWER: " (newer)",
    Freshness.OLDER: " (older)",
}


def _timestamp(component: Component) -> str:
    if component.last_updated is None:
        return "unknown"
    return component.last_updated.strftime("%Y-%m-%d %H:%M")


def _cell(component: Component | None, freshness: Freshness) -> str:
    if component is None:
        return "not present"
    return (
        f"{component.name} [{component.parameter_count} params, "
        f"{_timestamp(component)}]{_MARKERS.get(freshness, '')}"
    )


def format_comparison_table(
    rows: list[ComparisonRow],
    project_a: Project,
    project_b: Project,
) -> str:
    """Format comparison rows as text, one component per line.

    Args:
        rows: Rows from ``build_comparison_table``.
        project_a: Project shown on the left.
        project_b: Project shown on the right.

    Returns:
        Multi-line string with a header and a summary count.
    """
    lines = [
        f"Components: A = {project_a.label}, B = {project_b.label}",
        "",
    ]
    if not rows:
        lines.append("No components found.")
        return "\n".join(lines)

    for row in rows:
        lines.append(f"{row.component_id}")
        lines.append(f"  A: {_cell(row.a, row.freshness_a)}")
        lines.append(f"  B: {_cell(row.b, row.freshness_b)}")

    newer_a = sum(1 for r in rows if r.newer_side is Side.A)
    newer_b = sum(1 for r in rows if r.newer_side is Side.B)
    only_a = sum(1 for r in rows if r.b is None)
    only_b = sum(1 for r in rows if r.a is None)
    lines.append("")
    lines.append(
        f"{len(rows)} components: {newer_a} newer in A, {newer_b} newer in B, "
        f"{only_a} only in A, {only_b} only in B"
    )
    return "\n".join(lines)


def _component_json(component: Component | None) -> dict[str, Any] | None:
    if component is None:
        return None
    return component.model_dump(mode="json")


def comparison_to_json(
    rows: list[ComparisonRow],
    project_a: Project,
    project_b: Project,
) -> dict[str, Any]:
    """Convert comparison rows to a JSON-serialisable dict."""
    return {
        "project_a": project_a.id,
        "project_b": project_b.id,
        "rows": [
            {
                "component_id": row.component_id,
                "a": _component_json(row.a),
                "b": _component_json(row.b),
                "freshness_a": row.freshness_a.value,
                "freshness_b": row.freshness_b.value,
            }
            for row in rows
        ],
        "total": len(rows),
    }


def format_sync_outcome(outcome: SyncOutcome) -> str:
    lines = [
        f"Synced component '{outcome.component_id}' "
        f"from {outcome.source_project_id} to {outcome.destination_project_id}",
        f"  Completed: {outcome.completed_at}",
    ]
    if outcome.backup_path:
        lines.append(f"  Backup:    {outcome.backup_path}")
    else:
        lines.append("  Backup:    none")
    return "\n".join(lines)


def outcome_to_json(outcome: SyncOutcome) -> dict[str, Any]:
    return outcome.model_dump(mode="json")
