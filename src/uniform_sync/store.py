"""Project credential store.

Persists the list of ``Project`` records as a pretty-printed UTF-8 JSON
array. A missing file reads as an empty list.

Writes are atomic (temp file + ``os.replace()``) so a reader never sees a
half-written file, but there is no locking: two overlapping saves resolve
as last writer wins.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from .errors import PersistenceError
from .models import Project

logger = logging.getLogger(__name__)


class CredentialStore:
    """Load and save project credentials.

    Args:
        path: Location of the JSON file (typically ``config/projects.json``).
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Project]:
        """Read every stored project, in file order.

        Raises:
            PersistenceError: If the file exists but cannot be read, is not
                a JSON array, or holds an invalid record.
        """
        try:
            with open(self._path, encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            logger.debug("No project store at %s", self._path)
            return []
        except (OSError, ValueError) as e:
            raise PersistenceError(
                f"Error reading projects file {self._path}: {e}"
            ) from e

        if not isinstance(data, list):
            raise PersistenceError(
                f"Projects file {self._path} must contain a JSON array"
            )
        try:
            return [Project.model_validate(record) for record in data]
        except ValidationError as e:
            raise PersistenceError(
                f"Invalid project record in {self._path}: {e}"
            ) from e

    def save(self, projects: list[Project]) -> None:
        """Persist *projects* atomically, creating the parent directory.

        Raises:
            PersistenceError: If the file cannot be written.
        """
        records = [p.to_record() for p in projects]
        directory = self._path.parent
        tmp_path: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(directory), suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, indent=2, ensure_ascii=False)
                fh.write("\n")
            os.replace(tmp_path, self._path)
        except OSError as e:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
            raise PersistenceError(
                f"Error writing projects file {self._path}: {e}"
            ) from e
        logger.info("Saved %d projects to %s", len(records), self._path)
