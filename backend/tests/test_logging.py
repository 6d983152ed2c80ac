"""Tests for logging setup."""

import logging

from knowledge_base.core.logging import setup_logging


def test_app_logger_has_own_handlers():
    setup_logging()
    logger = logging.getLogger("knowledge_base")

    assert {type(h).__name__ for h in logger.handlers} == {"StreamHandler", "TimedRotatingFileHandler"}
    assert logger.propagate is False
    assert logging.getLogger("knowledge_base.audit").getEffectiveLevel() == logger.level
