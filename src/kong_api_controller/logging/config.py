"""structlog setup for the controller process."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

LOG_DIR = Path.home() / ".local" / "state" / "kong-api-controller"
LOG_FILE = LOG_DIR / "controller.log"
MAX_LOG_SIZE = 10 * 1024 * 1024
BACKUP_COUNT = 5
RETENTION_DAYS = 30

# Set on every handler we install so a second configure_logging() can find them.
_HANDLER_MARKER = "_kong_api_controller_handler"

SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _level_for(verbose: bool, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def _formatter(renderer: Any, pre_chain: list[Any]) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)


def _install(handler: logging.Handler) -> None:
    setattr(handler, _HANDLER_MARKER, True)
    logging.getLogger().addHandler(handler)


def _remove_installed_handlers() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            root.removeHandler(handler)
            handler.close()


def _cleanup_old_logs(log_file: Path) -> None:
    """Remove ``log_file`` and its rotations once they pass the retention window."""
    if not log_file.parent.is_dir():
        return
    cutoff = (datetime.now() - timedelta(days=RETENTION_DAYS)).timestamp()
    for candidate in log_file.parent.glob(f"{log_file.name}*"):
        try:
            if candidate.stat().st_mtime < cutoff:
                candidate.unlink()
        except OSError:
            # Another process may hold or have already rotated the file.
            continue


def _setup_file_logging(log_file: Path, shared_processors: list[Any]) -> None:
    """Attach a size-rotated JSON handler that records everything down to DEBUG."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    _cleanup_old_logs(log_file)

    handler = RotatingFileHandler(log_file, maxBytes=MAX_LOG_SIZE, backupCount=BACKUP_COUNT)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(_formatter(structlog.processors.JSONRenderer(), shared_processors))
    _install(handler)


def configure_logging(
    verbose: bool = False,
    debug: bool = False,
    json_output: bool = False,
    log_file: Path | None = None,
) -> None:
    """Route structlog and stdlib logging through one set of handlers.

    The console gets WARNING by default, INFO with ``verbose`` and DEBUG with
    ``debug``. ``json_output`` swaps the coloured console renderer for JSON
    lines, which is what log collectors in the cluster expect. With
    ``log_file`` every event is additionally written as JSON to a rotating
    file, and rotations older than ``RETENTION_DAYS`` are pruned on startup.

    Safe to call more than once: handlers from an earlier call are removed.
    """
    level = _level_for(verbose, debug)

    # The file handler wants DEBUG even when the console is quieter, so the
    # bound logger only filters when there is no file.
    structlog.configure(
        processors=[*SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if log_file else level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _remove_installed_handlers()

    if json_output:
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=debug),
        )
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(_formatter(renderer, SHARED_PROCESSORS))

    logging.getLogger().setLevel(logging.DEBUG)
    _install(console)

    # urllib3 under the kubernetes client logs each request at DEBUG.
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))

    if log_file is not None:
        _setup_file_logging(log_file, SHARED_PROCESSORS)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Return a structlog logger, pre-bound with ``initial_context`` if given."""
    logger: structlog.BoundLogger = structlog.get_logger(name)
    return logger.bind(**initial_context) if initial_context else logger
