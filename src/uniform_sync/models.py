"""Pydantic models shared across uniform_sync.

Defines the data contracts that cross module boundaries:

- ``Component``: snapshot of one component definition (decoded, not raw).
- ``Project``: a stored project credential enriched with vendor metadata.
- ``ProjectMetadata``: the vendor's answer to a project lookup.
- ``Freshness`` / ``ComparisonRow``: one row of the side-by-side comparison.
- ``SyncOutcome``: result of a single component transfer.
- ``RefreshResult``: per-project result of a bulk metadata refresh.

All models are frozen (immutable). Untyped vendor JSON is decoded into these
shapes at the gateway and never passed further in.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from .validators import is_valid_uuid

logger = logging.getLogger(__name__)

_DATETIME = TypeAdapter(datetime)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp from the vendor into an aware datetime.

    Naive values are taken as UTC. Returns ``None`` for missing or
    unparseable input.
    """
    if value is None or value == "":
        return None
    try:
        parsed = _DATETIME.validate_python(value)
    except ValidationError:
        logger.debug("Unparseable timestamp %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Side(str, Enum):
    """One of the two compared projects."""

    A = "a"
    B = "b"

    @property
    def other(self) -> Side:
        return Side.B if self is Side.A else Side.A


class Component(BaseModel):
    """Snapshot of a component definition at fetch time.

    Attributes:
        id: Vendor identifier, unique within a project.
        name: Display name.
        parameter_count: Number of parameters on the definition.
        last_updated: When the vendor last modified it (``None`` if unknown).
    """

    id: str
    name: str = ""
    parameter_count: int = Field(default=0, ge=0)
    last_updated: datetime | None = None

    model_config = {"frozen": True}

    @field_validator("last_updated", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> datetime | None:
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return parse_timestamp(value)

    @classmethod
    def from_definition(cls, definition: dict[str, Any]) -> Component:
        """Decode a raw vendor component definition.

        Raises:
            ValueError: If the payload has no usable ``id``.
        """
        component_id = definition.get("id")
        if not isinstance(component_id, str) or not component_id:
            raise ValueError("component definition has no id")
        parameters = definition.get("parameters") or []
        return cls(
            id=component_id,
            name=definition.get("name") or "",
            parameter_count=len(parameters),
            last_updated=definition.get("updated"),
        )


class ProjectMetadata(BaseModel):
    """Vendor metadata for a project."""

    project_id: str
    name: str
    team_id: str = ""
    team_name: str = ""

    model_config = {"frozen": True}


class Project(BaseModel):
    """A stored project credential.

    Serialized with the store's camelCase keys (``projectId``, ``apiKey``,
    ``teamId``, ``teamName``, ``displayName``). Older records that use
    ``id`` / ``name`` are accepted on input.
    """

    id: str = Field(
        validation_alias=AliasChoices("projectId", "id"),
        serialization_alias="projectId",
    )
    api_key: str = Field(
        validation_alias=AliasChoices("apiKey", "api_key"),
        serialization_alias="apiKey",
    )
    team_id: str = Field(
        default="",
        validation_alias=AliasChoices("teamId", "team_id"),
        serialization_alias="teamId",
    )
    team_name: str = Field(
        default="",
        validation_alias=AliasChoices("teamName", "team_name"),
        serialization_alias="teamName",
    )
    display_name: str = Field(
        default="",
        validation_alias=AliasChoices("displayName", "display_name", "name"),
        serialization_alias="displayName",
    )

    model_config = {"frozen": True}

    @field_validator("id")
    @classmethod
    def _check_uuid(cls, value: str) -> str:
        if not is_valid_uuid(value):
            raise ValueError(f"project id '{value}' is not a valid UUID")
        return value.lower()

    @classmethod
    def from_metadata(cls, metadata: ProjectMetadata, api_key: str) -> Project:
        return cls(
            id=metadata.project_id,
            api_key=api_key,
            team_id=metadata.team_id,
            team_name=metadata.team_name,
            display_name=metadata.name,
        )

    @property
    def label(self) -> str:
        """Display name, falling back to the id."""
        return self.display_name or self.id

    def to_record(self) -> dict[str, str]:
        """Return the store representation of this project."""
        return self.model_dump(by_alias=True)

    def public_dict(self) -> dict[str, str]:
        """Store representation with the API key masked."""
        record = self.to_record()
        record["apiKey"] = mask_secret(self.api_key)
        return record


def mask_secret(secret: str, visible: int = 4) -> str:
    if len(secret) <= visible:
        return "*" * len(secret)
    return "*" * (len(secret) - visible) + secret[-visible:]


class Freshness(str, Enum):
    """How one side of a comparison row relates to the other."""

    NEWER = "newer"
    OLDER = "older"
    SAME = "same"
    SOLE = "sole"
    ABSENT = "absent"
    INCOMPARABLE = "incomparable"

    @property
    def highlighted(self) -> bool:
        return self in (Freshness.NEWER, Freshness.OLDER)


class ComparisonRow(BaseModel):
    """One component id across both projects.

    Attributes:
        component_id: The shared component id.
        a: Component in project A, if present.
        b: Component in project B, if present.
        freshness_a: Classification of A's copy.
        freshness_b: Classification of B's copy.
    """

    component_id: str
    a: Component | None = None
    b: Component | None = None
    freshness_a: Freshness
    freshness_b: Freshness

    model_config = {"frozen": True}

    def component(self, side: Side) -> Component | None:
        return self.a if side is Side.A else self.b

    def freshness(self, side: Side) -> Freshness:
        return self.freshness_a if side is Side.A else self.freshness_b

    @property
    def newer_side(self) -> Side | None:
        """The side holding the strictly newer copy, if any."""
        if self.freshness_a is Freshness.NEWER:
            return Side.A
        if self.freshness_b is Freshness.NEWER:
            return Side.B
        return None


class SyncOutcome(BaseModel):
    """Result of one successful component transfer.

    Attributes:
        component_id: Component that was copied.
        source_project_id: Project the definition was read from.
        destination_project_id: Project that was overwritten.
        component: The copied component as read from the source.
        backup_path: Backup file written before the overwrite, if any.
        completed_at: ISO 8601 timestamp of the acknowledged write.
    """

    component_id: str
    source_project_id: str
    destination_project_id: str
    component: Component
    backup_path: str | None = None
    completed_at: str

    model_config = {"frozen": True}


class RefreshResult(BaseModel):
    """Outcome of refreshing one project's metadata."""

    project_id: str
    project: Project | None = None
    error: str | None = None

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.error is None
