"""Component transfer between two projects.

``SyncEngine.sync_component`` copies one component definition from a source
project over the destination's copy:

1. When a backup is requested, read the destination's current definition.
2. Read the source definition; a missing component fails the transfer
   before anything is written.
3. Persist the backup (skipped when the destination does not have the
   component).
4. Write the definition to the destination as a full overwrite and report
   success once the write is acknowledged.

There is no atomicity across steps and no retry: a failed write after step 3
leaves a backup with no matching write, and the Uniform API is trusted to
apply a definition update as one unit. Each call makes exactly one attempt.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from ..core.gateway import VendorGateway
from ..errors import (
    ComponentNotFoundInSource,
    InputValidationError,
    PersistenceError,
    SyncError,
    UpstreamError,
)
from ..models import Component, Project, SyncOutcome
from ..validators import require_component_id
from .backup import BackupStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncEngine:
    """Copy component definitions between projects.

    Args:
        gateway: Uniform API adapter.
        backups: Where destination snapshots are written.
        clock: Returns the current time (injectable for tests).
    """

    def __init__(
        self,
        gateway: VendorGateway,
        backups: BackupStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.gateway = gateway
        self.backups = backups
        self._clock = clock

    def sync_component(
        self,
        source: Project,
        destination: Project,
        component_id: str,
        backup: bool = False,
    ) -> SyncOutcome:
        """Overwrite *destination*'s copy of a component with *source*'s.

        Args:
            source: Project to read from.
            destination: Project to write to.
            component_id: Component to copy.
            backup: Snapshot the destination's current copy first.

        Returns:
            A ``SyncOutcome`` describing the acknowledged write.

        Raises:
            InputValidationError: Empty component id or identical projects.
            ComponentNotFoundInSource: Source has no such component.
            PersistenceError: The backup could not be written.
            SyncError: A required Uniform API call failed.
            UpstreamError: Reading the destination for the backup failed.
        """
        component_id = require_component_id(component_id)
        if source.id == destination.id:
            raise InputValidationError(
                "Source and destination must be different projects"
            )

        logger.info(
            "Syncing component %s from %s to %s (backup=%s)",
            component_id,
            source.id,
            destination.id,
            backup,
        )

        current: dict | None = None
        if backup:
            current = self.gateway.get_component(
                destination.id, destination.api_key, component_id
            )

        try:
            definition = self.gateway.get_component(
                source.id, source.api_key, component_id
            )
        except UpstreamError as e:
            raise SyncError(
                f"Failed to read component '{component_id}' from source project {source.id}",
                cause=e,
            ) from e
        if definition is None:
            raise ComponentNotFoundInSource(component_id, source.id)

        try:
            component = Component.from_definition(definition)
        except ValueError as e:
            raise SyncError(
                f"Source definition of '{component_id}' is malformed", cause=e
            ) from e

        backup_path: Path | None = None
        if backup:
            backup_path = self._write_backup(destination, component_id, current)

        try:
            self.gateway.put_component(
                destination.id, destination.api_key, definition
            )
        except UpstreamError as e:
            raise SyncError(
                f"Failed to write component '{component_id}' to destination project {destination.id}",
                cause=e,
            ) from e

        outcome = SyncOutcome(
            component_id=component_id,
            source_project_id=source.id,
            destination_project_id=destination.id,
            component=component,
            backup_path=str(backup_path) if backup_path else None,
            completed_at=self._clock().isoformat(),
        )
        logger.info(
            "Synced component %s to project %s", component_id, destination.id
        )
        return outcome

    def _write_backup(
        self, destination: Project, component_id: str, current: dict | None
    ) -> Path | None:
        """Snapshot the destination's current copy; ``None`` if it has none."""
        if current is None:
            logger.debug(
                "Nothing to back up: %s not in project %s",
                component_id,
                destination.id,
            )
            return None
        try:
            return self.backups.write(
                component_id, destination.id, current, self._clock()
            )
        except PersistenceError:
            logger.error(
                "Backup of %s failed, transfer aborted", component_id
            )
            raise
