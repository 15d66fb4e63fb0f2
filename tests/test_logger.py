"""Application logger tests."""

from __future__ import annotations

import logging

import pytest

from schoolroute.core.logger import get_logger, level_from_name


@pytest.fixture()
def app_logger():
    logger = get_logger()
    previous = logger.level
    yield logger
    logger.setLevel(previous)


@pytest.mark.parametrize(
    ("name", "expected"),
    [("debug", logging.DEBUG), (" WARNING ", logging.WARNING), (None, logging.INFO), ("loud", logging.INFO)],
)
def test_level_from_name(name, expected) -> None:
    assert level_from_name(name) == expected


def test_level_is_reapplied_on_later_calls(app_logger: logging.Logger) -> None:
    assert get_logger(level="DEBUG") is app_logger
    assert app_logger.level == logging.DEBUG

    get_logger(level="error")
    assert app_logger.level == logging.ERROR

    get_logger()
    assert app_logger.level == logging.ERROR


def test_child_loggers_share_handlers(app_logger: logging.Logger) -> None:
    child = app_logger.getChild("io.spreadsheet_reader")

    assert child.name == "schoolroute.io.spreadsheet_reader"
    assert not child.handlers
    assert len(app_logger.handlers) == 2
