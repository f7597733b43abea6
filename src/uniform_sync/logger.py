import json
import logging
import os
import sys

DEFAULT_MCP_LOG_FILE = "/tmp/uniform-sync-mcp.log"
_TEXT_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """Single-line JSON formatter for structured log output.

    Produces one JSON object per record with fields: ts, level, logger, msg,
    plus "exc" when exception info is attached.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _formatter(debug_format: str) -> logging.Formatter:
    if debug_format == "json":
        return JsonFormatter(datefmt=_DATE_FORMAT)
    return logging.Formatter(_TEXT_FORMAT, datefmt=_DATE_FORMAT)


def setup_logging(
    mode: str = "cli",
    debug: bool = False,
    log_file: str | None = None,
    debug_format: str = "text",
) -> None:
    """
    Configure root logging for the given execution mode.

    Args:
        mode: "mcp" logs to a file only (stdout carries JSON-RPC),
              "cli" logs to stderr and optionally to log_file as well.
        debug: Force DEBUG level regardless of LOG_LEVEL.
        log_file: Log file path (overrides LOG_FILE env var in mcp mode).
        debug_format: "text" (default) or "json".

    Environment variables:
        LOG_LEVEL: DEBUG, INFO, WARNING or ERROR.
                   Default: WARNING for mcp mode, INFO for cli mode.
        LOG_FILE: Log file for mcp mode. Default: /tmp/uniform-sync-mcp.log
    """
    default_level = "WARNING" if mode == "mcp" else "INFO"
    if debug:
        log_level = logging.DEBUG
    else:
        env_level = os.getenv("LOG_LEVEL", default_level).upper()
        log_level = getattr(logging, env_level, logging.INFO)

    handlers: list[logging.Handler] = []
    if mode == "mcp":
        target = log_file or os.getenv("LOG_FILE", DEFAULT_MCP_LOG_FILE)
        handlers.append(logging.FileHandler(target, mode="a"))
    else:
        handlers.append(logging.StreamHandler(sys.stderr))
        if log_file:
            handlers.append(logging.FileHandler(log_file, mode="a"))

    formatter = _formatter(debug_format)
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=log_level, handlers=handlers)

    # Keep HTTP client chatter out of the log unless debugging
    if log_level != logging.DEBUG:
        logging.getLogger("urllib3").setLevel(logging.WARNING)
        logging.getLogger("requests").setLevel(logging.WARNING)


def apply_config_logging(
    debug: bool = False,
    level: str | None = None,
    log_file: str | None = None,
) -> None:
    """Adjust root logging once the full configuration is known.

    ``setup_logging()`` runs before .env and YAML files are read, so
    ``UNIFORM_DEBUG``, a ``LOG_LEVEL`` from .env and the YAML ``logging``
    section only take effect here.

    Args:
        debug: Switch to DEBUG level.
        level: Level name used when ``debug`` is off.
        log_file: Send file output here instead of the current log file.
    """
    root = logging.getLogger()
    if debug:
        root.setLevel(logging.DEBUG)
    elif level:
        root.setLevel(getattr(logging, level.upper(), root.level))

    if log_file:
        target = os.path.abspath(log_file)
        file_handlers = [
            h for h in root.handlers if isinstance(h, logging.FileHandler)
        ]
        if not any(h.baseFilename == target for h in file_handlers):
            formatter = (
                file_handlers[0].formatter
                if file_handlers
                else _formatter("text")
            )
            for handler in file_handlers:
                root.removeHandler(handler)
                handler.close()
            new_handler = logging.FileHandler(target, mode="a")
            new_handler.setFormatter(formatter)
            root.addHandler(new_handler)

    if root.level == logging.DEBUG:
        logging.getLogger("urllib3").setLevel(logging.NOTSET)
        logging.getLogger("requests").setLevel(logging.NOTSET)
