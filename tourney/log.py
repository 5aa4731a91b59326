"""Logging setup shared by the CLI and the web app."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from tourney.config import LoggingConfig

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"


def configure_logging(cfg: LoggingConfig, *, console: bool = True) -> logging.Logger:
    """
    Install the console and rotating-file handlers on the root logger.

    Returns the package logger.
    """
    handlers: list[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler())
    if cfg.file:
        log_file = Path(cfg.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_file, maxBytes=2 * 1024 * 1024, backupCount=3,  # 2 MB × 3 files
                encoding="utf-8",
            )
        )

    logging.basicConfig(level=cfg.level, format=LOG_FORMAT, handlers=handlers, force=True)
    return logging.getLogger("tourney")
