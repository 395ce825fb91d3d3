"""structlog setup shared by the API, the CLI and library code.

Library modules only call ``structlog.get_logger()``; the process entry
point (``api.app`` lifespan, ``cli.__main__``) calls ``configure_logging``
once.  Third-party stdlib loggers go through the same formatter so a run
produces one stream of JSON lines (or console lines locally).
"""

import logging
import sys

import structlog

from keyword_clusters.exceptions import ConfigError

# Chatty dependencies: per-request INFO lines from the embedding client and
# connection chatter from the SQLite driver.
_QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def _add_app_name(logger, method_name, event_dict):
    event_dict.setdefault("app", "keyword-clusters")
    return event_dict


def _level_from_name(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ConfigError(f"Unknown log level: {log_level!r}")
    return level


def configure_logging(json_output: bool = True, log_level: str = "INFO") -> None:
    """Route structlog and stdlib records through one renderer.

    Args:
        json_output: JSON lines when ``True``, structlog's console renderer
            otherwise.
        log_level: Root level name, e.g. ``"DEBUG"`` or ``"INFO"``.

    Raises:
        ConfigError: ``log_level`` is not a logging level name.
    """
    level = _level_from_name(log_level)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_app_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    if level > logging.DEBUG:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
