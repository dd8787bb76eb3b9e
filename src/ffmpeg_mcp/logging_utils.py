"""Logging setup - stderr only, stdout carries the tool protocol."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from .config import LoggingConfig

_CONFIGURED = False

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(config: LoggingConfig | None = None, force: bool = False) -> None:
    """
    Configure the package logger once.

    Args:
        config: Logging section of the app config (defaults if None)
        force: Reconfigure even if already configured
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    config = config or LoggingConfig()
    level = getattr(logging, str(config.level).upper(), logging.INFO)

    logger = logging.getLogger("ffmpeg_mcp")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if config.console_logging:
        console = Console(stderr=True)
        logger.addHandler(RichHandler(console=console, show_path=False, rich_tracebacks=True))

    if config.file:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    _CONFIGURED = True
