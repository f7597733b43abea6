"""Lifespan management for MCP server startup and shutdown."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv

from ..config import load_config
from ..config_loader import discover_config_files, load_hierarchical_config
from ..config_schema import build_config, to_fallbacks
from ..core.async_utils import init_semaphore, run_sync
from ..errors import PersistenceError
from ..logger import apply_config_logging
from .context import AppContext

logger = logging.getLogger(__name__)


def _stderr_print(msg: str) -> None:
    """Print message to stderr for user feedback (safe in MCP mode)."""
    print(msg, file=sys.stderr, flush=True)


@asynccontextmanager
async def server_lifespan(
    config_overrides: dict[str, Any] | None = None,
) -> AsyncIterator[AppContext]:
    """
    Manage server startup and shutdown lifecycle.

    On startup:
    - Load .env (so values are visible to env lookups and YAML interpolation)
    - Load YAML config files if present, as fallback values
    - Merge all sources via load_config(): CLI > env vars > .env > YAML > defaults
    - Apply the resolved debug flag, log level and log file to the root logger
    - Build the gateway, project store, backup store and sync engine
    - Fail fast if the projects file exists but cannot be read

    Args:
        config_overrides: Optional dict of CLI values (api_url, projects_file,
            backup_dir, debug, log_file)

    Yields:
        The AppContext shared by all tool handlers

    Raises:
        RuntimeError: If configuration is invalid or the projects file is unreadable.
    """
    logger.info("MCP server starting...")
    _stderr_print("Uniform component sync server starting...")

    try:
        load_dotenv()

        yaml_fallbacks: dict[str, Any] | None = None
        sources = []
        config_files = discover_config_files()
        if config_files:
            unified = build_config(load_hierarchical_config(config_files))
            yaml_fallbacks = to_fallbacks(unified)
            sources.append(f"config file: {config_files[0]}")

        overrides = config_overrides or {}
        config = load_config(
            api_url=overrides.get("api_url"),
            projects_file=overrides.get("projects_file"),
            backup_dir=overrides.get("backup_dir"),
            debug=overrides.get("debug", False),
            log_file=overrides.get("log_file"),
            yaml_fallbacks=yaml_fallbacks,
        )
        apply_config_logging(
            debug=config.debug,
            level=config.log_level,
            log_file=config.log_file,
        )

        if overrides:
            sources.append("CLI arguments")
        sources.append("environment variables")
        source_desc = ", ".join(sources)
        logger.info("Configuration loaded from: %s", source_desc)
        _stderr_print(f"  Configuration loaded from: {source_desc}")
        _stderr_print(f"  Uniform API: {config.api_url}")
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        _stderr_print(f"ERROR: Configuration error: {e}")
        raise RuntimeError(f"Configuration error: {e}") from e

    ctx = AppContext.from_config(config)
    try:
        projects = await run_sync(ctx.projects.list_projects)
    except PersistenceError as e:
        logger.error("Cannot read projects file: %s", e)
        _stderr_print(f"ERROR: {e}")
        raise RuntimeError(str(e)) from e

    ctx.session.set_projects(projects)
    init_semaphore(config.max_parallel_requests)
    _stderr_print(
        f"  Projects file: {config.projects_file} ({len(projects)} projects)"
    )
    _stderr_print(f"  Backup directory: {config.backup_dir}")
    _stderr_print(f"  Parallel requests: {config.max_parallel_requests}")
    _stderr_print("Server ready. Waiting for MCP client connection...")

    yield ctx

    logger.info("MCP server shutting down")
