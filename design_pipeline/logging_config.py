"""Logging setup for the design pipeline and its API.

Modules log through `logging.getLogger("design_pipeline.<area>")` and never
add handlers themselves; the handlers live on the two loggers configured
here, so importing the library alone stays silent.

Environment:
    LOG_DIR: directory for *.log files (default ./logs)
    LOG_LEVEL: level name for both loggers (default INFO)
    LOG_TO_FILE: "0" keeps output on the console only
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

LOG_DIR = Path(os.getenv("LOG_DIR", str(Path.cwd() / "logs")))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "1") != "0"

FILE_FORMAT = "%(asctime)s [%(name)s] [%(levelname)s] %(message)s"
CONSOLE_FORMAT = "%(asctime)s [%(name)s] %(message)s"

_configured_loggers: set[str] = set()


def setup_logger(name: str, filename: str) -> logging.Logger:
    """Attach console (and optionally file) handlers to `name` once.

    Repeated calls return the already-configured logger without stacking
    handlers.
    """
    logger = logging.getLogger(name)
    if name in _configured_loggers:
        return logger

    level = logging.getLevelName(LOG_LEVEL)
    if not isinstance(level, int):
        level = logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if LOG_TO_FILE:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(LOG_DIR / filename, encoding="utf-8")
        fh.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(fh)

    _configured_loggers.add(name)
    return logger


def get_pipeline_logger() -> logging.Logger:
    """Extraction, asset fetching and Figma client output (pipeline.log)."""
    return setup_logger("design_pipeline", "pipeline.log")


def get_api_logger() -> logging.Logger:
    """Request handling output (api.log)."""
    return setup_logger("design_pipeline.api", "api.log")


def configure_logging() -> None:
    get_pipeline_logger()
    get_api_logger()
