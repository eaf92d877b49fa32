"""Logging setup tests"""

import logging

import pytest
import structlog

from skygear.log_config import configure_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    structlog.reset_defaults()


def test_configure_logging_json(restore_logging, caplog):
    configure_logging(level="debug", fmt="json")

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING

    with caplog.at_level(logging.INFO):
        structlog.get_logger("skygear.test").info("hello", answer=42)

    assert '"answer": 42' in caplog.text
    assert '"event": "hello"' in caplog.text
