"""
Logging setup for init and sync runs.

Handlers attached to the root logger:
- JSON file, only with --log-file / SKILLSYNC_LOG_FILE. Every level.
- Human status lines on stderr, HUMAN records only.
- Technical console on stderr at the configured level (WARNING for "human"
  and "warn"), lowered to INFO by -v and DEBUG by -vv. Never shows HUMAN
  records.

--quiet drops both stderr handlers. Token-like fields are masked before
any renderer sees them.
"""

import logging
import sys
from pathlib import Path
from typing import Any

import structlog

from ..config.schema import LoggingConfig
from .human import HumanLogHandler
from .levels import HUMAN

_SECRET_KEYS = frozenset({"token", "authorization", "github_token"})


def _mask_secrets(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Replace credential values with a fixed marker."""
    for key in event_dict.keys() & _SECRET_KEYS:
        if event_dict[key]:
            event_dict[key] = "***"
    return event_dict


def _pre_chain() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _mask_secrets,
    ]


def _json_file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.JSONRenderer(),
            ],
            foreign_pre_chain=_pre_chain(),
        )
    )
    return handler


def _console_handler(config: LoggingConfig) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_console_level(config))
    handler.addFilter(lambda record: record.levelno != HUMAN)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
            ],
            foreign_pre_chain=_pre_chain(),
        )
    )
    return handler


def configure_logging(config: LoggingConfig, quiet: bool = False) -> None:
    """Reset the root logger and structlog, then attach the run's handlers.

    Safe to call more than once; each call replaces the previous setup.

    Args:
        config: Level, JSON file and verbosity
        quiet: Drop the stderr handlers (the JSON file is kept)
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()
    root.setLevel(logging.DEBUG)
    structlog.reset_defaults()

    if config.file:
        root.addHandler(_json_file_handler(Path(config.file)))

    if not quiet:
        root.addHandler(HumanLogHandler(stream=sys.stderr))
        root.addHandler(_console_handler(config))

    if not root.handlers:
        root.addHandler(logging.NullHandler())

    structlog.configure(
        processors=_pre_chain() + [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "human": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _console_level(config: LoggingConfig) -> int:
    """Threshold from config.level; -v lowers it to at least INFO, -vv to DEBUG."""
    level = _LEVELS[config.level]
    if config.verbose >= 2:
        return logging.DEBUG
    if config.verbose == 1:
        return min(level, logging.INFO)
    return level
