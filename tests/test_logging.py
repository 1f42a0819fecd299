from __future__ import annotations

import logging
from pathlib import Path

from src.utils import setup_logging


def test_log_file_attached_when_logging_already_configured(tmp_path: Path) -> None:
    root = logging.getLogger()
    existing = logging.StreamHandler()
    root.addHandler(existing)
    old_level = root.level
    log_file = tmp_path / "knn.log"

    try:
        setup_logging("INFO", log_file=log_file)
        setup_logging("INFO", log_file=log_file)

        file_handlers = [
            h for h in root.handlers if isinstance(h, logging.FileHandler) and Path(h.baseFilename) == log_file.absolute()
        ]
        assert len(file_handlers) == 1
        assert root.level == logging.DEBUG

        logging.getLogger("src.user_knn.finder").debug("Found %d candidate neighbors", 3)
        file_handlers[0].flush()
        assert "Found 3 candidate neighbors" in log_file.read_text()
    finally:
        for h in list(root.handlers):
            if isinstance(h, logging.FileHandler) and Path(h.baseFilename) == log_file.absolute():
                root.removeHandler(h)
                h.close()
        root.removeHandler(existing)
        root.setLevel(old_level)
