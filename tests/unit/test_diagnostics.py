import logging
from pathlib import Path

import pytest

from shellporter.diagnostics import LOG_BACKUP_COUNT, MAX_LOG_BYTES, configure_logging, reset_logging


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    reset_logging()


def test_configure_logging_writes_to_rotating_file(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "app.log"

    handler = configure_logging(str(log_path), "INFO")
    logging.getLogger("shellporter.resolver.focused_project").info("Resolver[vscode] resolved")
    handler.flush()

    assert handler.maxBytes == MAX_LOG_BYTES == 2 * 1024 * 1024
    assert handler.backupCount == LOG_BACKUP_COUNT == 1
    assert "Resolver[vscode] resolved" in log_path.read_text(encoding="utf-8")


def test_configure_logging_is_idempotent(tmp_path: Path) -> None:
    log_path = str(tmp_path / "app.log")

    first = configure_logging(log_path)
    second = configure_logging(log_path, logging.DEBUG)

    assert first is second
    package_logger = logging.getLogger("shellporter")
    assert package_logger.handlers.count(first) == 1
    assert package_logger.level == logging.DEBUG
