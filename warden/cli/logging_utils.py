"""Logging utilities for CLI."""

import logging
import os
import sys
from pathlib import Path

from warden.config import CONFIG_DIR

LOG_FILE = CONFIG_DIR / "warden.log"


def setup_logging(log_level: str | None = None, log_file: Path | None = None) -> None:
    """
    Setup logging with configurable level.

    Priority: argument > WARDEN_LOG_LEVEL env var > default (WARNING)
    """
    if log_level is None:
        log_level = os.environ.get("WARDEN_LOG_LEVEL", "WARNING")

    level = getattr(logging, log_level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    # File handler - always DEBUG level for file
    log_file = log_file or LOG_FILE
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError:
        file_handler = None
    if file_handler is not None:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        root_logger.addHandler(file_handler)

    # Console handler - configurable level
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root_logger.addHandler(console_handler)

    log = logging.getLogger("warden")
    log.setLevel(logging.DEBUG)
    log.propagate = True
