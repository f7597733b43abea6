"""Backup snapshots of component definitions.

Before a sync overwrites a destination component, the engine can write the
destination's current definition to ``{backup_dir}/{component}__{project}__{timestamp}.json``.
Snapshots are write-once and never read back by the tool; restoring one is
a manual operator step.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..errors import PersistenceError

logger = logging.getLogger(__name__)

# Characters that are unsafe or awkward in file names on common platforms
_UNSAFE = re.compile(r"[^A-Za-z0-9_\-]")


def _safe(part: str) -> str:
    return _UNSAFE.sub("-", part)


def backup_filename(
    component_id: str, project_id: str, taken_at: datetime
) -> str:
    """Return the deterministic file name for a snapshot.

    The timestamp is UTC ISO-8601 with ``:`` and ``.`` replaced by ``-``.
    """
    stamp = taken_at.astimezone(timezone.utc).isoformat()
    return f"{_safe(component_id)}__{_safe(project_id)}__{_safe(stamp)}.json"


class BackupStore:
    """Write backup snapshots into a directory.

    Args:
        backup_dir: Directory for snapshot files (created on first write).
    """

    def __init__(self, backup_dir: Path) -> None:
        self._backup_dir = Path(backup_dir)

    @property
    def backup_dir(self) -> Path:
        return self._backup_dir

    def write(
        self,
        component_id: str,
        project_id: str,
        definition: dict[str, Any],
        taken_at: datetime | None = None,
    ) -> Path:
        """Persist one snapshot and return its path.

        Raises:
            PersistenceError: If the directory or file cannot be written, or
                a snapshot with the same name already exists.
        """
        taken_at = taken_at or datetime.now(timezone.utc)
        target = self._backup_dir / backup_filename(
            component_id, project_id, taken_at
        )
        snapshot = {
            "component_id": component_id,
            "project_id": project_id,
            "backed_up_at": taken_at.astimezone(timezone.utc).isoformat(),
            "definition": definition,
        }

        tmp_path: str | None = None
        try:
            self._backup_dir.mkdir(parents=True, exist_ok=True)
            if target.exists():
                raise PersistenceError(f"Backup {target} already exists")
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self._backup_dir), suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(snapshot, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, target)
        except OSError as e:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
            raise PersistenceError(
                f"Error writing backup for component '{component_id}': {e}"
            ) from e

        logger.info(
            "Backed up component %s of project %s to %s",
            component_id,
            project_id,
            target,
        )
        return target
