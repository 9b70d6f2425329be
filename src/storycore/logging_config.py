# src/storycore/logging_config.py
"""
Logging setup for StoryCore.

Library modules only ever call ``logging.getLogger(__name__)``.  The API
server applies the ``[storycore.logging]`` section once at startup through
``configure_logging``; applications embedding the store and engine directly
may call it themselves or leave logging to their host.

While ``console_enabled`` is off the stderr handler is still installed, but
``DisplayFilter`` lets through only records logged with ``log_display``.
Operators see "server ready" lines while per-turn scoring stays quiet.

Usage:
    from storycore.config import load_config
    from storycore.logging_config import configure_logging, log_display

    config = load_config()
    configure_logging(config.logging, app_name="storycore-api")
    log_display(logger, logging.INFO, "Ready (preset %s)", config.preset)
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config.models import LoggingSettings

logger = logging.getLogger(__name__)

CONSOLE_FORMAT = "%(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s - %(message)s (%(filename)s:%(lineno)d)"

COMPONENT_LEVELS: Dict[str, str] = {
    "storycore": "INFO",
    "uvicorn": "INFO",
    "uvicorn.access": "WARNING",
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "asyncio": "WARNING",
}

_handlers: List[logging.Handler] = []
_components: List[str] = []
_log_file_path: Optional[Path] = None
_root_level: Optional[int] = None
_configured = False


def _level(name: str) -> int:
    return logging.getLevelNamesMapping()[name]


class DisplayFilter(logging.Filter):
    """Console gate.

    Verbose mode passes everything.  Quiet mode passes only records flagged
    ``display`` whose level reaches ``display_min_level``.
    """

    def __init__(self, verbose: bool = False, display_min_level: int = logging.INFO) -> None:
        super().__init__()
        self.verbose = verbose
        self.display_min_level = display_min_level

    def filter(self, record: logging.LogRecord) -> bool:
        if self.verbose:
            return True
        return bool(getattr(record, "display", False)) and record.levelno >= self.display_min_level


def _console_handler(settings: LoggingSettings) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    # In quiet mode the filter decides alone.
    handler.setLevel(_level(settings.console_level) if settings.console_enabled else logging.DEBUG)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handler.addFilter(DisplayFilter(settings.console_enabled, _level(settings.display_min_level)))
    return handler


def _file_handler(settings: LoggingSettings, app_name: str) -> Optional[RotatingFileHandler]:
    log_dir = Path(os.path.expanduser(settings.file_directory))
    path = log_dir / f"{app_name}.log"
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=settings.rotation_max_bytes,
            backupCount=settings.rotation_backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        log_display(logger, logging.WARNING, "Cannot open log file %s: %s", path, e)
        return None
    handler.setLevel(_level(settings.file_level))
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def is_configured() -> bool:
    return _configured


def configure_logging(
    settings: Optional[LoggingSettings] = None,
    app_name: str = "storycore",
    force_reconfigure: bool = False,
) -> Optional[Path]:
    """
    Install StoryCore's console and file handlers on the root logger.

    Only the first call takes effect unless ``force_reconfigure`` is set.
    Handlers installed by anyone else are left alone.

    Args:
        settings: The logging section; defaults to ``LoggingSettings()``.
        app_name: Stem of the log file name.
        force_reconfigure: Replace a previous configuration.

    Returns:
        Path of the log file, or ``None`` when file logging is off or the
        file could not be opened.
    """
    global _configured, _log_file_path, _root_level

    if _configured and not force_reconfigure:
        return _log_file_path
    reset_logging()

    settings = settings or LoggingSettings()
    root = logging.getLogger()
    _root_level = root.level
    root.setLevel(logging.DEBUG)

    console = _console_handler(settings)
    root.addHandler(console)
    _handlers.append(console)

    if settings.file_enabled:
        file_handler = _file_handler(settings, app_name)
        if file_handler is not None:
            root.addHandler(file_handler)
            _handlers.append(file_handler)
            _log_file_path = Path(file_handler.baseFilename)

    for name, level in {**COMPONENT_LEVELS, **settings.components}.items():
        logging.getLogger(name).setLevel(_level(level))
        _components.append(name)

    _configured = True
    logger.debug("Logging configured (log file: %s)", _log_file_path)
    return _log_file_path


def reset_logging() -> None:
    """Remove the handlers and component levels set by ``configure_logging``."""
    global _configured, _log_file_path, _root_level

    root = logging.getLogger()
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()
    if _root_level is not None:
        root.setLevel(_root_level)
    for name in _components:
        logging.getLogger(name).setLevel(logging.NOTSET)
    _handlers.clear()
    _components.clear()
    _log_file_path = None
    _root_level = None
    _configured = False


def log_display(logger: logging.Logger, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
    """Log ``msg`` so that it reaches the console even in quiet mode."""
    kwargs["extra"] = {**(kwargs.get("extra") or {}), "display": True}
    logger.log(level, msg, *args, **kwargs)
