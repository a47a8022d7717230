"""
Logging setup.
"""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(log_path: str, log_level: str = "INFO", console: bool = True) -> None:
    """
    Route the root logger to a log file and, optionally, the console.

    Per-frame detail (still-present ticks, extraction misses) is logged at
    DEBUG; note appearance and disappearance at INFO.
    """
    level = log_level.upper()
    if level not in VALID_LOG_LEVELS:
        raise ValueError(f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}")

    log_dir = os.path.dirname(log_path)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)

    handlers: list[logging.Handler] = [logging.FileHandler(log_path)]
    if console:
        handlers.append(logging.StreamHandler())

    logging.basicConfig(
        level=getattr(logging, level),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    # uvicorn's access log would otherwise report every status poll
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
