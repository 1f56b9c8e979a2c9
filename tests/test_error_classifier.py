"""Tests for failure classification."""

import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from browser_check.detectors.error_classifier import ErrorCause, ErrorClassifier
from browser_check.errors import RuntimeTestError


@pytest.fixture
def classifier() -> ErrorClassifier:
    return ErrorClassifier()


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (ConnectionRefusedError("refused"), ErrorCause.CONNECTION_REFUSED),
        (PlaywrightTimeoutError("Timeout 15000ms exceeded."), ErrorCause.TIMEOUT),
        (asyncio.TimeoutError(), ErrorCause.TIMEOUT),
        (PlaywrightError("connect ECONNREFUSED 10.0.0.5:3000"), ErrorCause.CONNECTION_REFUSED),
        (PlaywrightError("Connection refused by peer"), ErrorCause.CONNECTION_REFUSED),
        (PlaywrightError("Navigation TIMEOUT exceeded"), ErrorCause.TIMEOUT),
        (PlaywrightError("WebSocket error: 401 Unauthorized"), ErrorCause.WEBSOCKET),
        (RuntimeError("something else"), ErrorCause.UNKNOWN),
    ],
)
def test_classify(classifier: ErrorClassifier, error: BaseException, expected: ErrorCause) -> None:
    assert classifier.classify(error) == expected


def test_refused_wins_over_later_patterns(classifier: ErrorClassifier) -> None:
    """Categories are exclusive and checked in a fixed order."""
    error = PlaywrightError("websocket timeout: connection refused")

    assert classifier.classify(error) == ErrorCause.CONNECTION_REFUSED


def test_unknown_cause_has_no_hints(classifier: ErrorClassifier) -> None:
    assert classifier.troubleshooting(ErrorCause.UNKNOWN) == []
    assert classifier.troubleshooting(ErrorCause.WEBSOCKET)


def test_runtime_error_wraps_original() -> None:
    try:
        raise PlaywrightError("WebSocket closed before handshake")
    except PlaywrightError as e:
        original = e
        wrapped = RuntimeTestError.from_exception(e, step="connection")

    assert wrapped.message == "WebSocket closed before handshake"
    assert wrapped.step == "connection"
    assert wrapped.cause == ErrorCause.WEBSOCKET
    assert wrapped.__cause__ is original
    assert "WebSocket closed before handshake" in wrapped.stack


def test_runtime_error_message_falls_back_to_type_name() -> None:
    wrapped = RuntimeTestError.from_exception(asyncio.TimeoutError())

    assert wrapped.message == "TimeoutError"
    assert wrapped.cause == ErrorCause.TIMEOUT
