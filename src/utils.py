from __future__ import annotations

import logging
import os
from pathlib import Path


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int | str = "INFO", *, log_file: Path | str | None = None) -> None:
    """Configure stdlib logging with a consistent, project-wide format.

    When `log_file` is given, a file handler is attached as well and the root
    logger drops to DEBUG so candidate scans and cache rebuilds are recorded;
    the other handlers keep `level`. This also applies when logging was
    already configured (e.g., by pytest or an earlier call).
    """
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    else:
        # Avoid duplicate handlers if called multiple times (e.g., CLI + service startup).
        root_logger.setLevel(level)

    if log_file is not None:
        _attach_file_handler(root_logger, Path(log_file), level)


def _attach_file_handler(root_logger: logging.Logger, log_file: Path, level: int | str) -> None:
    target = os.path.abspath(log_file)
    for handler in root_logger.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)

    if not any(
        isinstance(h, logging.FileHandler) and h.baseFilename == target for h in root_logger.handlers
    ):
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        file_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)
    root_logger.setLevel(logging.DEBUG)
