"""Structured logging configuration using structlog.

The dashboard owns the terminal while it runs, so by default every log
record goes to a rotating JSON file instead of the console. The console
handler is only attached for plain CLI output (``console=True``).
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

# Log file configuration
LOG_DIR = Path.home() / ".local" / "state" / "vigilant"
LOG_FILE = LOG_DIR / "vigilant.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5
RETENTION_DAYS = 30

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _resolve_level(verbose: bool, debug: bool) -> int:
    """Map CLI verbosity flags onto a stdlib level."""
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def _cleanup_old_logs(log_dir: Path) -> None:
    """Delete log files older than RETENTION_DAYS."""
    if not log_dir.exists():
        return
    cutoff = datetime.now() - timedelta(days=RETENTION_DAYS)
    for log_file in log_dir.glob(f"{LOG_FILE.name}*"):
        try:
            if datetime.fromtimestamp(log_file.stat().st_mtime) < cutoff:
                log_file.unlink()
        except OSError:
            continue


def _file_handler(log_dir: Path, level: int) -> RotatingFileHandler:
    """Build the rotating JSON file handler."""
    log_dir.mkdir(parents=True, exist_ok=True)
    _cleanup_old_logs(log_dir)

    handler = RotatingFileHandler(
        log_dir / LOG_FILE.name,
        maxBytes=MAX_LOG_SIZE,
        backupCount=BACKUP_COUNT,
    )
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )
    return handler


def _console_handler(level: int, debug: bool, json_output: bool) -> logging.Handler:
    """Build a stderr handler with human-readable or JSON output."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=debug),
        )
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )
    return handler


def configure_logging(
    verbose: bool = False,
    debug: bool = False,
    json_output: bool = False,
    console: bool = False,
    log_dir: Path | None = None,
) -> None:
    """Configure structured logging for the application.

    File logs are written to ~/.local/state/vigilant/vigilant.log with
    rotation (10MB max, 5 backups) and retention cleanup (30 days). The
    file always captures DEBUG so a stale view can be diagnosed after the
    fact; the console handler honours the verbosity flags.

    Args:
        verbose: Enable verbose (INFO level) console output.
        debug: Enable debug mode (DEBUG level).
        json_output: Render console logs as JSON.
        console: Attach a console handler. Leave off while the TUI runs.
        log_dir: Override the log directory (used by tests).
    """
    log_level = _resolve_level(verbose, debug)

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    if console:
        root_logger.addHandler(_console_handler(log_level, debug, json_output))
    root_logger.addHandler(_file_handler(log_dir or LOG_DIR, logging.DEBUG))

    # kubernetes/urllib3 are chatty at DEBUG; keep them out unless asked
    if not debug:
        logging.getLogger("kubernetes").setLevel(logging.WARNING)
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Get a configured logger with optional initial context.

    Args:
        name: Logger name. If None, uses the calling module's name.
        **initial_context: Initial context variables to bind to the logger.

    Returns:
        A bound structlog logger.
    """
    logger: structlog.BoundLogger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
