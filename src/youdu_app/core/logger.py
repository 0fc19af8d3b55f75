"""Logging for the Youdu app SDK.

Every module logs under the ``youdu_app`` namespace. The SDK itself never
installs handlers; applications (and the CLI) call :func:`setup_logging`
to get rich console output and, optionally, a rotating log file.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from .config import LoggingConfig

ROOT_LOGGER_NAME = "youdu_app"

# Transport libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

console = Console(stderr=True)


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Install console and file handlers on the root logger.

    Handlers from an earlier call are closed and replaced, so calling this
    again with a new config reconfigures logging in place.

    Args:
        config: Logging settings. Defaults to ``LoggingConfig()``.
    """
    config = config or LoggingConfig()
    level = logging.getLevelName(config.level)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(level)

    root_logger.addHandler(
        RichHandler(console=console, show_path=False, markup=False, rich_tracebacks=True)
    )

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(config.format))
        root_logger.addHandler(file_handler)

    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)
    quiet = logging.DEBUG if level == logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)

    get_logger("setup").debug(
        "Logging configured: level=%s file=%s", config.level, config.log_file or "-"
    )


def get_logger(name: str) -> logging.Logger:
    """Return the logger for an SDK component, e.g. ``get_logger("api.media")``.

    Component loggers carry no level of their own and follow the
    ``youdu_app`` namespace logger.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
