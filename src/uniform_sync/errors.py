"""Exception hierarchy for uniform_sync.

Every error raised out of the core carries an ``error_type`` (stable,
machine-readable) and an HTTP-style ``status`` so the tool layer can relay
it to the operator without inspecting message text.

::

    UniformSyncError
    ├── InputValidationError   400
    ├── NotFoundError          404
    │   └── ComponentNotFoundInSource
    ├── SyncInProgressError    409
    ├── UpstreamError          502
    │   └── MetadataFetchError
    ├── SyncError              502
    └── PersistenceError       500
"""

from __future__ import annotations


class UniformSyncError(Exception):
    """Base class for all uniform_sync errors."""

    error_type = "server_error"
    status = 500

    @property
    def status_class(self) -> str:
        """``client_error`` for 4xx statuses, ``server_error`` otherwise."""
        return "client_error" if 400 <= self.status < 500 else "server_error"


class InputValidationError(UniformSyncError, ValueError):
    """Malformed or missing input, rejected before any network call.

    Args:
        message: Human-readable summary.
        fields: Optional per-field messages (e.g. ``{"api_key": "..."}``).
    """

    error_type = "validation_error"
    status = 400

    def __init__(self, message: str, fields: dict[str, str] | None = None):
        super().__init__(message)
        self.fields = dict(fields or {})


class NotFoundError(UniformSyncError):
    error_type = "not_found"
    status = 404


class ComponentNotFoundInSource(NotFoundError):
    """The component to sync does not exist in the source project."""

    def __init__(self, component_id: str, project_id: str):
        super().__init__(
            f"Component '{component_id}' not found in source project {project_id}"
        )
        self.component_id = component_id
        self.project_id = project_id


class SyncInProgressError(UniformSyncError):
    """A sync for the same component is already outstanding."""

    error_type = "sync_in_progress"
    status = 409

    def __init__(self, component_id: str):
        super().__init__(f"Component '{component_id}' is already being synced")
        self.component_id = component_id


class UpstreamError(UniformSyncError):
    """A Uniform API call failed (network, auth or vendor-side fault).

    Args:
        message: Description including the vendor's message when available.
        status_code: HTTP status returned by the vendor, if any.
    """

    error_type = "upstream_error"
    status = 502

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MetadataFetchError(UpstreamError):
    """Fetching a project's metadata failed."""

    error_type = "metadata_fetch_error"


class SyncError(UniformSyncError):
    """A required step of a component transfer failed.

    The underlying ``UpstreamError`` is kept on ``cause`` and chained as
    ``__cause__`` by the raiser.
    """

    error_type = "sync_error"
    status = 502

    def __init__(self, message: str, cause: Exception | None = None):
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.cause = cause


class PersistenceError(UniformSyncError):
    """Reading or writing the credential store or a backup file failed."""

    error_type = "persistence_error"
    status = 500
