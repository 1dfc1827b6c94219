"""
Logging configuration for the automaton/grammar engine.
Console output through structlog, optional rotating JSON file.
"""

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

import structlog

LOG_LEVEL_ENV = "AUTOMATA_LOG_LEVEL"
LOG_DIR_ENV = "AUTOMATA_LOG_DIR"
DEFAULT_LOG_LEVEL = "WARNING"


def configure_defaults(level: int = logging.WARNING) -> None:
    """
    Drop events below level when structlog has not been configured yet.

    Used when the modules are imported as a library; setup_logging()
    replaces this configuration.
    """
    if not structlog.is_configured():
        structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


def setup_logging(
    log_level: Optional[str] = None,
    log_dir: Optional[str] = None,
    max_bytes: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3,
    console_output: bool = True,
) -> None:
    """
    Configure structured logging.

    Args:
        log_level: Logging level name. Falls back to $AUTOMATA_LOG_LEVEL,
            then WARNING.
        log_dir: Directory for the JSON log file. Falls back to
            $AUTOMATA_LOG_DIR; no file logging when neither is set.
        max_bytes: Max size per log file before rotation
        backup_count: Number of backup files to keep
        console_output: Whether to also output to stderr
    """
    if log_level is None:
        log_level = os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)
    if log_dir is None:
        log_dir = os.environ.get(LOG_DIR_ENV)

    level = getattr(logging, log_level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        json_formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.TimeStamper(fmt="iso"),
            ],
        )
        file_handler = logging.handlers.RotatingFileHandler(
            log_path / "automata.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(json_formatter)
        file_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)

    if console_output:
        console_formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=False),
            foreign_pre_chain=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
            ],
        )
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance with the given name."""
    return structlog.get_logger(name)
