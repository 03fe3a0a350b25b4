"""
Centralized Logging Configuration.

Every module logs through structlog loggers obtained from ``get_logger``.
Handlers are attached to the stdlib root logger according to the
validated ``logging`` section of the application config
(config/settings/logging.yaml).

Each record carries ``source``, naming which part of the diary emitted it:
the API bound to a request (``web``/``api``), the terminal UI (``tui``),
the operations CLI (``cli``) or background code (``internal``). Inside a
request the middleware binds it, elsewhere callers pass it through
``log_with_source``.

Usage:
    setup_logging()
    setup_logging(level="DEBUG", enable_console=False)

    logger = get_logger(__name__)
    logger.info("Note created", extra={"note_id": 4})
    log_with_source(logger, "tui", "info", "Note saved", note_id=4)
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import Processor

from diary.backend.core.config import find_project_root, get_app_config
from diary.backend.core.config_schema import LoggingSchema

VALID_SOURCES = frozenset({
    "web",
    "cli",
    "tui",
    "api",
    "internal",
    "unknown",
})

# Third-party loggers that would drown out diary events at INFO
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "httpx", "httpcore")


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _file_handler(path: str, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    """Rotating JSONL handler; relative paths land under the project root."""
    log_path = Path(path)
    if not log_path.is_absolute():
        log_path = find_project_root() / log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(log_path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
    config: LoggingSchema | None = None,
) -> None:
    """
    Configure structlog and the root logger's handlers.

    Arguments left as None fall back to ``config``, which defaults to the
    application's logging section. Calling this again replaces the handlers.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        format_type: 'console' for human-readable lines, 'json' for JSONL
        enable_console: Write to stdout (the TUI turns this off)
        enable_file_logging: Append JSONL to the configured file
        config: Logging settings to use instead of the loaded config
    """
    config = config or get_app_config().logging

    log_level = getattr(logging, (level or config.level).upper())
    use_console = config.handlers.console.enabled if enable_console is None else enable_console
    use_file = config.handlers.file.enabled if enable_file_logging is None else enable_file_logging

    shared = _shared_processors()
    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=shared,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if use_console:
        if (format_type or config.format) == "console":
            formatter = structlog.stdlib.ProcessorFormatter(
                processor=structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
                foreign_pre_chain=shared,
            )
        else:
            formatter = json_formatter
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if use_file:
        file_config = config.handlers.file
        file_handler = _file_handler(file_config.path, file_config.max_bytes, file_config.backup_count)
        file_handler.setFormatter(json_formatter)
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> Any:
    """Get a structlog logger for the given name (typically __name__)."""
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log a message tagged with the component that produced it.

    Sources outside VALID_SOURCES are recorded as ``unknown``.

    Raises:
        AttributeError: If level is not a log method name
    """
    log_method = getattr(logger, level.lower())
    log_method(message, source=source if source in VALID_SOURCES else "unknown", **kwargs)
