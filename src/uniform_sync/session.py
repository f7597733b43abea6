"""Operator session: the two selected projects and their component lists.

``SyncSession`` holds what the operator is currently looking at and is
passed by reference to the tool handlers. All mutation happens on the event
loop thread, so the in-flight set needs no lock: the check-and-add in
``sync`` runs without an intervening await.
"""

from __future__ import annotations

import logging

from .core.async_utils import gather_limited, run_sync, run_sync_limited
from .core.gateway import VendorGateway
from .errors import InputValidationError, SyncInProgressError
from .models import ComparisonRow, Component, Project, Side, SyncOutcome
from .projects import find_project
from .sync.comparison import build_comparison_table, filter_rows
from .sync.engine import SyncEngine
from .validators import require_component_id

logger = logging.getLogger(__name__)


class SyncSession:
    """Selections, fetched components and in-flight syncs for one operator.

    Args:
        projects: Known projects (refresh with ``set_projects``).
    """

    def __init__(self, projects: list[Project] | None = None) -> None:
        self.projects: list[Project] = list(projects or [])
        self.selected: dict[Side, str | None] = {Side.A: None, Side.B: None}
        self.components: dict[Side, list[Component]] = {Side.A: [], Side.B: []}
        self.search_term: str = ""
        self.in_flight: set[str] = set()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def set_projects(self, projects: list[Project]) -> None:
        """Replace the known projects, dropping selections that vanished."""
        self.projects = list(projects)
        known = {p.id for p in self.projects}
        for side in Side:
            if self.selected[side] not in known:
                self.clear(side)

    def project(self, side: Side) -> Project | None:
        project_id = self.selected[side]
        if project_id is None:
            return None
        return find_project(self.projects, project_id)

    def select(self, side: Side, project_id: str) -> Project:
        """Select a project for one side.

        Choosing the project already shown on the other side clears that
        side, so the two sides never show the same project.

        Raises:
            NotFoundError: If *project_id* is not a known project.
        """
        project = find_project(self.projects, project_id)
        if self.selected[side] != project.id:
            self.components[side] = []
        self.selected[side] = project.id
        if self.selected[side.other] == project.id:
            self.clear(side.other)
        return project

    def clear(self, side: Side) -> None:
        self.selected[side] = None
        self.components[side] = []

    def set_components(self, side: Side, components: list[Component]) -> None:
        self.components[side] = list(components)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def refresh_components(self, gateway: VendorGateway) -> None:
        """Re-fetch the component lists of both selected sides concurrently.

        All-or-none: if any fetch fails the error propagates and neither
        side's list is updated.
        """
        sides = [side for side in Side if self.selected[side] is not None]
        fetches = []
        for side in sides:
            project = self.project(side)
            fetches.append(
                run_sync_limited(
                    gateway.list_components, project.id, project.api_key
                )
            )
        results = await gather_limited(fetches)
        for side, components in zip(sides, results):
            self.components[side] = components

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def table(self) -> list[ComparisonRow]:
        rows = build_comparison_table(
            self.components[Side.A], self.components[Side.B]
        )
        return filter_rows(rows, self.search_term)

    # ------------------------------------------------------------------
    # Transfer
    # ------------------------------------------------------------------

    async def sync(
        self,
        engine: SyncEngine,
        from_side: Side,
        component_id: str,
        backup: bool,
    ) -> SyncOutcome:
        """Copy a component from one selected side to the other.

        On success the destination's list gets the copied component in
        place of its old entry. On failure both lists are left as they were.

        Raises:
            InputValidationError: A side has no project selected.
            SyncInProgressError: The component is already being synced.
        """
        component_id = require_component_id(component_id)
        source = self.project(from_side)
        destination = self.project(from_side.other)
        if source is None or destination is None:
            raise InputValidationError(
                "Select a project on both sides before syncing"
            )
        if component_id in self.in_flight:
            raise SyncInProgressError(component_id)

        self.in_flight.add(component_id)
        try:
            outcome = await run_sync(
                engine.sync_component,
                source,
                destination,
                component_id,
                backup,
            )
        finally:
            self.in_flight.discard(component_id)

        to_side = from_side.other
        if self.selected[to_side] == destination.id:
            self.components[to_side] = [
                c for c in self.components[to_side] if c.id != component_id
            ] + [outcome.component]
        return outcome
