"""
Exceptions raised by the browser check.
"""

import traceback
from typing import Optional

from .detectors.error_classifier import ErrorCause, ErrorClassifier


class BrowserCheckError(Exception):
    """Base class for browser check errors."""


class ConfigurationError(BrowserCheckError):
    """Required configuration is missing or invalid."""


class RuntimeTestError(BrowserCheckError):
    """A step of the connectivity run failed."""

    def __init__(
        self,
        message: str,
        step: Optional[str] = None,
        cause: ErrorCause = ErrorCause.UNKNOWN,
        stack: str = ""
    ):
        super().__init__(message)
        self.message = message
        self.step = step
        self.cause = cause
        self.stack = stack

    @classmethod
    def from_exception(
        cls,
        error: BaseException,
        step: Optional[str] = None,
        classifier: Optional[ErrorClassifier] = None
    ) -> "RuntimeTestError":
        """Wrap an exception raised by the browser client."""
        classifier = classifier or ErrorClassifier()
        message = str(error) or type(error).__name__
        stack = ''.join(traceback.format_exception(type(error), error, error.__traceback__))

        wrapped = cls(message, step=step, cause=classifier.classify(error), stack=stack)
        wrapped.__cause__ = error
        return wrapped
