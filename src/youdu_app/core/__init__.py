"""Core functionality: configuration and logging."""

from .config import (
    DEFAULT_CALLBACK_PATH,
    AppCredential,
    CallbackConfig,
    LoggingConfig,
    YouduConfig,
)
from .logger import get_logger, setup_logging

__all__ = [
    "DEFAULT_CALLBACK_PATH",
    "AppCredential",
    "CallbackConfig",
    "LoggingConfig",
    "YouduConfig",
    "get_logger",
    "setup_logging",
]
