"""
YAML configuration files for uniform_sync.

Files are found by convention and merged section by section, the most
specific file winning. ``${VAR}`` references in string values are expanded
from the environment; unset variables are left as written.

Usage:
    from uniform_sync.config_loader import discover_config_files, load_hierarchical_config

    raw = load_hierarchical_config(discover_config_files())
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "UNIFORM_SYNC_CONFIG"
CONFIG_DIR_NAME = ".uniform_sync"


def expand_env(obj: Any) -> Any:
    """Expand ``${VAR}`` in every string inside *obj*."""
    if isinstance(obj, str):
        return os.path.expandvars(obj)
    if isinstance(obj, dict):
        return {key: expand_env(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [expand_env(item) for item in obj]
    return obj


def config_search_paths() -> list[Path]:
    """Candidate config files, most specific first.

    1. ``UNIFORM_SYNC_CONFIG`` (explicit path)
    2. ``.uniform_sync/config.yml`` or ``config.yaml`` in the working directory
    3. ``~/.config/uniform_sync/config.yml``
    """
    paths: list[Path] = []
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        paths.append(Path(explicit).expanduser().resolve())
    project_dir = Path.cwd() / CONFIG_DIR_NAME
    paths += [project_dir / "config.yml", project_dir / "config.yaml"]
    paths.append(Path.home() / ".config" / "uniform_sync" / "config.yml")
    return paths


def discover_config_files() -> list[Path]:
    """Return the search paths that exist, most specific first."""
    return [path for path in config_search_paths() if path.is_file()]


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse one YAML file into a dict of sections.

    Raises:
        ValueError: The file is not valid YAML or its root is not a mapping.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Config file {path} must contain a mapping, not {type(data).__name__}"
        )
    return expand_env(data)


def load_hierarchical_config(paths: list[Path] | None = None) -> dict[str, Any]:
    """Merge config files into one dict.

    A section (``uniform``, ``storage``, ``logging``) from a more specific
    file replaces the same section from a less specific one as a whole.

    Args:
        paths: Files to merge, most specific first. Discovered when omitted.

    Returns:
        The merged sections; empty when there are no config files.
    """
    if paths is None:
        paths = discover_config_files()

    merged: dict[str, Any] = {}
    for path in reversed(paths):
        logger.debug("Loading config: %s", path)
        merged.update(read_config_file(path))
    return merged
