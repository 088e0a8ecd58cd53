"""Tests for logging setup."""

from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from reclaim.logging_setup import configure_logging, normalize_level


@pytest.mark.parametrize(
    "level,expected",
    [("debug", logging.DEBUG), (" WARNING ", logging.WARNING), (logging.ERROR, logging.ERROR)],
)
def test_normalize_level(level, expected):
    assert normalize_level(level) == expected


def test_normalize_level_unknown():
    with pytest.raises(ValueError, match="Unknown log level"):
        normalize_level("loud")


def test_configure_logging_installs_single_rich_handler():
    configure_logging("INFO")
    logger = configure_logging("INFO")
    assert logger.name == "reclaim"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], RichHandler)


def test_httpx_quiet_unless_debug():
    configure_logging("INFO")
    assert logging.getLogger("httpx").level == logging.WARNING
    configure_logging("DEBUG")
    assert logging.getLogger("httpx").level == logging.DEBUG
