"""Schema for the YAML configuration file.

Defines Pydantic models with dedicated sections for the Uniform API
connection, local storage paths, and logging.

Usage:
    from uniform_sync.config_schema import build_config, to_fallbacks

    raw = load_hierarchical_config()
    unified = build_config(raw)
    config = load_config(yaml_fallbacks=to_fallbacks(unified))
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class UniformConfig(BaseModel):
    """Uniform API connection settings.

    All fields are optional so env vars and CLI args can supply them instead.
    """

    api_url: str | None = Field(
        default=None, description="Uniform API base URL"
    )
    component_page_limit: int | None = Field(
        default=None,
        ge=1,
        le=100000,
        description="Page size used to list all component definitions",
    )
    max_parallel_requests: int | None = Field(
        default=None,
        ge=1,
        le=100,
        description="Maximum concurrent requests to the Uniform API (1-100)",
    )
    request_timeout: float | None = Field(
        default=None, gt=0, description="Read timeout in seconds"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {"frozen": True}


class StorageConfig(BaseModel):
    """Local files written by the tool."""

    projects_file: str | None = Field(
        default=None, description="Project credential store (JSON)"
    )
    backup_dir: str | None = Field(
        default=None, description="Directory for backup snapshots"
    )
    backup_by_default: bool | None = Field(
        default=None,
        description="Back up the destination component before each sync",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            unset keeps the mode default.
        file: Optional log file path.
    """

    level: str | None = Field(default=None, description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


class UnifiedConfig(BaseModel):
    """Top-level configuration file model.

    Every section has defaults, so ``UnifiedConfig()`` is always valid.
    """

    uniform: UniformConfig = Field(default_factory=UniformConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the dict returned by
    ``load_hierarchical_config()``. Missing sections get defaults.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)


def to_fallbacks(unified: UnifiedConfig) -> dict[str, Any]:
    """Flatten the sections into the keyword names used by
    ``load_config(yaml_fallbacks=...)``, dropping unset values.
    """
    merged = {
        **unified.uniform.model_dump(),
        **unified.storage.model_dump(),
        "log_level": unified.logging.level,
        "log_file": unified.logging.file,
    }
    return {k: v for k, v in merged.items() if v is not None}
