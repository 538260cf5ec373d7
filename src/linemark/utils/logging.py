"""Logging setup for hosts embedding the editor surface.

The surface runs inside someone else's process, so nothing here touches
logging until the host asks for it: :func:`configure_from_settings` is what
``bootstrap`` calls, and it never adds a console handler unless told to.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ..services.settings import EditorSettings

__all__ = ["configure_from_settings", "get_log_path", "setup_logging"]

LOG_FILE_NAME = "linemark.log"
_DEFAULT_LOG_DIR = Path.home() / ".linemark" / "logs"
_NOISY_LOGGERS: tuple[str, ...] = ("asyncio", "markdown_it")
_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LOG_PATH: Path | None = None


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = False,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
    force: bool = False,
) -> Path:
    """Route root logging to a rotating ``linemark.log``.

    A second call is a no-op returning the existing path unless ``force`` is
    set, in which case the previous handlers are replaced.
    """

    global _LOG_PATH
    if _LOG_PATH is not None and not force:
        return _LOG_PATH

    target_dir = resolve_log_dir(log_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    log_path = target_dir / LOG_FILE_NAME

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)
    handlers: list[logging.Handler] = [
        logging.handlers.RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    _quiet_dependencies(level)

    _LOG_PATH = log_path
    return log_path


def configure_from_settings(settings: EditorSettings, *, console: bool = False) -> Path:
    """Apply ``debug_logging`` and ``log_dir`` from the loaded settings."""

    level = logging.DEBUG if settings.debug_logging else logging.INFO
    return setup_logging(level, log_dir=settings.log_dir, console=console)


def get_log_path() -> Path | None:
    return _LOG_PATH


def resolve_log_dir(log_dir: Path | str | None = None) -> Path:
    """Explicit directory, then ``LINEMARK_LOG_DIR``, then ``~/.linemark/logs``."""

    env_override = os.environ.get("LINEMARK_LOG_DIR")
    return Path(log_dir or env_override or _DEFAULT_LOG_DIR).expanduser()


def _quiet_dependencies(root_level: int) -> None:
    quiet_level = max(root_level, logging.WARNING)
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(quiet_level)
