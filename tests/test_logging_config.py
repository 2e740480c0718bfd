"""Tests for logging setup and job tagging."""

import io
import logging

import pytest

from common.logging_config import JobNameFilter, job_context, setup_logging


@pytest.fixture
def clean_root_logger():
    """Restore root logger handlers and level after the test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


def _record(message="hello"):
    return logging.LogRecord("core.splitter", logging.INFO, __file__, 1, message, None, None)


def test_filter_defaults_job_to_dash():
    record = _record()
    JobNameFilter().filter(record)
    assert record.job == "-"


def test_job_context_tags_records():
    record = _record()
    with job_context("movie.mkv"):
        JobNameFilter().filter(record)
    assert record.job == "movie.mkv"

    after = _record()
    JobNameFilter().filter(after)
    assert after.job == "-"


def test_setup_logging_is_idempotent(clean_root_logger):
    setup_logging("cli", log_level="debug")
    setup_logging("cli", log_level="WARNING")

    ours = [h for h in clean_root_logger.handlers if getattr(h, "_redsplit", False)]
    assert len(ours) == 1
    assert clean_root_logger.level == logging.WARNING
    assert ours[0].level == logging.WARNING


def test_setup_logging_format(clean_root_logger):
    setup_logging("cli", log_level="INFO")
    handler = next(h for h in clean_root_logger.handlers if getattr(h, "_redsplit", False))
    stream = io.StringIO()
    handler.setStream(stream)

    with job_context("data.bin"):
        logging.getLogger("core.restorer").info("Restore complete")

    line = stream.getvalue()
    assert " - core.restorer - INFO - [data.bin] - Restore complete" in line


def test_unknown_level_falls_back_to_info(clean_root_logger):
    setup_logging("cli", log_level="chatty")
    assert clean_root_logger.level == logging.INFO
