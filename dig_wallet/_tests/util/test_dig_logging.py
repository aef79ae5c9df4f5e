from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest
from concurrent_log_handler import ConcurrentRotatingFileHandler

from dig_wallet.util.dig_logging import initialize_logging, set_log_level


@pytest.fixture
def clean_root_logger() -> Iterator[logging.Logger]:
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield root_logger
    for handler in list(root_logger.handlers):
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)


def test_file_logging(tmp_path: Path, clean_root_logger: logging.Logger) -> None:
    initialize_logging("dig_wallet", {"log_stdout": False, "log_level": "INFO"}, tmp_path)
    file_handlers = [h for h in clean_root_logger.handlers if isinstance(h, ConcurrentRotatingFileHandler)]
    assert len(file_handlers) == 1

    logging.getLogger("dig_wallet.test").info("hello from the test")
    file_handlers[0].flush()
    log_file = tmp_path / "log" / "debug.log"
    assert "hello from the test" in log_file.read_text()


def test_invalid_log_level(tmp_path: Path, clean_root_logger: logging.Logger) -> None:
    initialize_logging("dig_wallet", {"log_stdout": True, "log_level": "INFO"}, tmp_path)
    errors = set_log_level("NOT_A_LEVEL", "dig_wallet")
    assert len(errors) == len(clean_root_logger.handlers)
    assert all("Defaulting to: WARNING" in error for error in errors)
    assert all(handler.level == logging.WARNING for handler in clean_root_logger.handlers)
