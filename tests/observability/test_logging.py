"""Tests for logging helpers."""

import io
import logging

import pytest

from role_detection_engine.observability import get_logger, log_elapsed


def test_get_logger_configures_a_single_handler() -> None:
    first = get_logger("role_detection_engine.tests.single")
    second = get_logger("role_detection_engine.tests.single")

    assert first is second
    assert len(second.handlers) == 1
    assert second.propagate is False


def test_level_comes_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROLE_DETECTION_LOG_LEVEL", "warning")

    logger = get_logger("role_detection_engine.tests.env_level")

    assert logger.level == logging.WARNING


def test_explicit_level_overrides_existing_logger() -> None:
    logger = get_logger("role_detection_engine.tests.override")

    get_logger("role_detection_engine.tests.override", level="DEBUG")

    assert logger.level == logging.DEBUG


def test_log_elapsed_records_duration_at_debug() -> None:
    logger = get_logger("role_detection_engine.tests.elapsed", level=logging.DEBUG)
    stream = io.StringIO()
    capture = logging.StreamHandler(stream)
    logger.addHandler(capture)
    try:
        with log_elapsed(logger, "Scoring") as elapsed:
            pass
    finally:
        logger.removeHandler(capture)

    assert elapsed.milliseconds >= 0.0
    assert "Scoring took" in stream.getvalue()
