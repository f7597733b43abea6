"""Project management on top of the credential store.

A project is created from an id and API key, enriched with the vendor's
metadata (name, team id, team name), and persisted. Display name and team
fields are only ever set from that metadata.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from .core.async_utils import gather_isolated, run_sync, run_sync_limited
from .core.gateway import VendorGateway
from .errors import InputValidationError, NotFoundError
from .models import Project, RefreshResult
from .store import CredentialStore
from .validators import validate_project_credentials

logger = logging.getLogger(__name__)


def group_by_team(projects: Iterable[Project]) -> dict[str, list[Project]]:
    """Group projects by team name, preserving order within each team."""
    grouped: dict[str, list[Project]] = {}
    for project in projects:
        grouped.setdefault(project.team_name, []).append(project)
    return grouped


def find_project(projects: Iterable[Project], project_id: str) -> Project:
    """Return the project with *project_id*.

    Raises:
        NotFoundError: If no project has that id.
    """
    key = (project_id or "").strip().lower()
    for project in projects:
        if project.id == key:
            return project
    raise NotFoundError(f"Project {project_id} is not configured")


class ProjectManager:
    """Add, update, delete and refresh stored projects.

    Args:
        store: Where projects are persisted.
        gateway: Used to look up project metadata.
    """

    def __init__(self, store: CredentialStore, gateway: VendorGateway) -> None:
        self.store = store
        self.gateway = gateway

    def list_projects(self) -> list[Project]:
        return self.store.load()

    def get(self, project_id: str) -> Project:
        return find_project(self.store.load(), project_id)

    def enrich(self, project_id: str, api_key: str) -> Project:
        """Build a ``Project`` from credentials plus vendor metadata.

        Raises:
            InputValidationError: Malformed id or key (no network call made).
            MetadataFetchError: The metadata lookup failed.
        """
        project_id, api_key = validate_project_credentials(project_id, api_key)
        metadata = self.gateway.fetch_project_metadata(project_id, api_key)
        return Project.from_metadata(metadata, api_key)

    def add(self, project_id: str, api_key: str) -> Project:
        """Enrich and store a new project.

        Raises:
            InputValidationError: Bad credentials or the id is already stored.
        """
        projects = self.store.load()
        if any(p.id == (project_id or "").strip().lower() for p in projects):
            raise InputValidationError(
                f"Project {project_id} is already configured",
                fields={"project_id": "already exists"},
            )
        project = self.enrich(project_id, api_key)
        projects.append(project)
        self.store.save(projects)
        logger.info("Added project %s (%s)", project.id, project.label)
        return project

    def update(self, project_id: str, api_key: str | None = None) -> Project:
        """Re-fetch metadata for a stored project, optionally with a new key."""
        projects = self.store.load()
        existing = find_project(projects, project_id)
        refreshed = self.enrich(existing.id, api_key or existing.api_key)
        projects = [refreshed if p.id == existing.id else p for p in projects]
        self.store.save(projects)
        logger.info("Updated project %s (%s)", refreshed.id, refreshed.label)
        return refreshed

    def delete(self, project_id: str) -> Project:
        projects = self.store.load()
        removed = find_project(projects, project_id)
        self.store.save([p for p in projects if p.id != removed.id])
        logger.info("Deleted project %s", removed.id)
        return removed

    def replace_all(self, records: list[dict[str, Any]]) -> list[Project]:
        """Validate and store a complete project list, replacing the old one.

        Raises:
            InputValidationError: A record is invalid or an id repeats.
        """
        projects: list[Project] = []
        seen: set[str] = set()
        for index, record in enumerate(records):
            try:
                project = Project.model_validate(record)
            except ValidationError as e:
                raise InputValidationError(
                    f"Invalid project record at index {index}: {e}"
                ) from e
            if project.id in seen:
                raise InputValidationError(
                    f"Duplicate project id {project.id} at index {index}"
                )
            seen.add(project.id)
            projects.append(project)
        self.store.save(projects)
        return projects

    async def refresh_all(self) -> list[RefreshResult]:
        """Re-enrich every stored project concurrently.

        Each refresh is isolated: a failure keeps that project's stored
        record and is reported in its ``RefreshResult``. The store is saved
        once if at least one refresh succeeded.
        """
        projects = await run_sync(self.store.load)
        outcomes = await gather_isolated(
            [
                run_sync_limited(self.enrich, p.id, p.api_key)
                for p in projects
            ]
        )

        results: list[RefreshResult] = []
        updated: list[Project] = []
        for project, outcome in zip(projects, outcomes):
            if isinstance(outcome, BaseException) and not isinstance(
                outcome, Exception
            ):
                raise outcome
            if isinstance(outcome, Project):
                updated.append(outcome)
                results.append(RefreshResult(project_id=project.id, project=outcome))
            else:
                logger.warning(
                    "Refreshing project %s failed: %s", project.id, outcome
                )
                updated.append(project)
                results.append(
                    RefreshResult(project_id=project.id, error=str(outcome))
                )

        if any(r.ok for r in results):
            await run_sync(self.store.save, updated)
        return results
