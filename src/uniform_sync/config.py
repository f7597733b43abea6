"""Runtime configuration for the component sync server.

Reads settings from CLI args, environment variables, .env files, and YAML
config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    UNIFORM_API_URL: Uniform API base URL (optional, default: https://uniform.app)
    UNIFORM_PROJECTS_FILE: Path of the project credential store (default: config/projects.json)
    UNIFORM_BACKUP_DIR: Directory for backup snapshots (default: backups)
    UNIFORM_BACKUP: Back up the destination before each sync (default: true)
    UNIFORM_COMPONENT_LIMIT: Page size used to list "all" components (default: 10000)
    UNIFORM_MAX_PARALLEL_REQUESTS: Max parallel Uniform API requests (default: 4)
    UNIFORM_REQUEST_TIMEOUT: Read timeout in seconds for API calls (default: 60)
    UNIFORM_DEBUG: Enable debug logging (default: false)
    LOG_LEVEL: Log level applied once configuration is loaded (YAML: logging.level)
    LOG_FILE: Log file path (YAML: logging.file)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://uniform.app"


@dataclass
class Config:
    api_url: str = DEFAULT_API_URL
    projects_file: Path = Path("config/projects.json")
    backup_dir: Path = Path("backups")
    backup_by_default: bool = True
    component_page_limit: int = 10000
    max_parallel_requests: int = 4
    request_timeout: float = 60.0
    debug: bool = False
    log_level: str | None = None
    log_file: str | None = None


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If the API URL is malformed or a numeric field is out of range.
    """
    config.api_url = config.api_url.strip()

    if not config.api_url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid Uniform API URL '{config.api_url}': must start with http:// or https://"
        )
    if not urlparse(config.api_url).hostname:
        raise ValueError(
            f"Invalid Uniform API URL '{config.api_url}': URL must include a hostname"
        )
    config.api_url = config.api_url.removesuffix("/")

    if not (1 <= config.component_page_limit <= 100000):
        raise ValueError(
            f"Invalid component page limit {config.component_page_limit}: must be between 1 and 100000"
        )
    if not (1 <= config.max_parallel_requests <= 100):
        raise ValueError(
            f"Invalid max parallel requests {config.max_parallel_requests}: must be between 1 and 100"
        )
    if config.request_timeout <= 0:
        raise ValueError(
            f"Invalid request timeout {config.request_timeout}: must be positive"
        )
    if config.log_level is not None:
        config.log_level = config.log_level.strip().upper()
        if config.log_level not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{config.log_level}': must be one of {', '.join(_LOG_LEVELS)}"
            )


def _env_bool(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.strip().lower() in ("true", "1", "yes", "on")


def _env_number(key: str, cast: type, low: float, high: float):
    """Return a number from env var within [low, high], or None if unset."""
    raw = os.getenv(key)
    if raw is None:
        return None
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(
            f"Invalid {key} '{raw}': must be a number between {low} and {high}"
        ) from None
    if not (low <= value <= high):
        raise ValueError(
            f"Invalid {key} '{raw}': must be a number between {low} and {high}"
        )
    return value


def load_config(
    api_url: str | None = None,
    projects_file: str | None = None,
    backup_dir: str | None = None,
    debug: bool = False,
    log_file: str | None = None,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        api_url: Override Uniform API URL.
        projects_file: Override credential store path.
        backup_dir: Override backup directory.
        debug: Enable debug logging (CLI flag).
        log_file: Override log file path (CLI flag).
        yaml_fallbacks: Flat dict of values from the YAML config file
            (keys named like the ``Config`` fields).

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If any value is malformed or out of range.
    """
    fb = yaml_fallbacks or {}
    defaults = Config()

    final_url = (
        api_url
        or os.getenv("UNIFORM_API_URL")
        or fb.get("api_url")
        or defaults.api_url
    )
    final_projects = Path(
        projects_file
        or os.getenv("UNIFORM_PROJECTS_FILE")
        or fb.get("projects_file")
        or defaults.projects_file
    ).expanduser()
    final_backup_dir = Path(
        backup_dir
        or os.getenv("UNIFORM_BACKUP_DIR")
        or fb.get("backup_dir")
        or defaults.backup_dir
    ).expanduser()

    env_backup = _env_bool("UNIFORM_BACKUP")
    if env_backup is not None:
        final_backup = env_backup
    else:
        final_backup = bool(
            fb.get("backup_by_default", defaults.backup_by_default)
        )

    if debug:
        final_debug = True
    else:
        env_debug = _env_bool("UNIFORM_DEBUG")
        final_debug = (
            env_debug
            if env_debug is not None
            else bool(fb.get("debug", False))
        )

    final_level = os.getenv("LOG_LEVEL") or fb.get("log_level")
    final_log_file = log_file or os.getenv("LOG_FILE") or fb.get("log_file")

    # No CLI args for numeric fields
    limit = _env_number("UNIFORM_COMPONENT_LIMIT", int, 1, 100000)
    if limit is None:
        limit = int(fb.get("component_page_limit", defaults.component_page_limit))

    parallel = _env_number("UNIFORM_MAX_PARALLEL_REQUESTS", int, 1, 100)
    if parallel is None:
        parallel = int(
            fb.get("max_parallel_requests", defaults.max_parallel_requests)
        )

    timeout = _env_number("UNIFORM_REQUEST_TIMEOUT", float, 1, 600)
    if timeout is None:
        timeout = float(fb.get("request_timeout", defaults.request_timeout))

    config = Config(
        api_url=final_url,
        projects_file=final_projects,
        backup_dir=final_backup_dir,
        backup_by_default=final_backup,
        component_page_limit=limit,
        max_parallel_requests=parallel,
        request_timeout=timeout,
        debug=final_debug,
        log_level=final_level,
        log_file=final_log_file,
    )

    validate_config(config)

    return config
