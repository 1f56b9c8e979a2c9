"""
Error Classification - Map browser test failures to a known cause and hints
"""

import asyncio
from enum import Enum
from typing import Dict, List

from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class ErrorCause(Enum):
    """Known causes of a failed connectivity run"""
    CONNECTION_REFUSED = "connection_refused"
    TIMEOUT = "timeout"
    WEBSOCKET = "websocket"
    UNKNOWN = "unknown"


class ErrorClassifier:
    """Classify exceptions raised while driving the remote browser"""

    TIMEOUT_TYPES = (PlaywrightTimeoutError, asyncio.TimeoutError, TimeoutError)

    # Message fallbacks, checked in order
    MESSAGE_PATTERNS = [
        (ErrorCause.CONNECTION_REFUSED, ('econnrefused', 'connection refused')),
        (ErrorCause.TIMEOUT, ('timeout',)),
        (ErrorCause.WEBSOCKET, ('websocket',)),
    ]

    TROUBLESHOOTING: Dict[ErrorCause, List[str]] = {
        ErrorCause.CONNECTION_REFUSED: [
            "Check that the browser service is running",
            "Verify both services are in the same project",
            "Ensure private networking is enabled between the services",
            "Check the browser service logs for errors",
        ],
        ErrorCause.TIMEOUT: [
            "Browser service might be overloaded",
            "Increase timeout value",
            "Check browser service memory allocation (2GB minimum)",
            "Check browser service logs for errors",
        ],
        ErrorCause.WEBSOCKET: [
            "Verify the WebSocket endpoint URL is correct",
            "Check if the token is included in the URL",
            "Ensure the browser service is exposing the correct port",
        ],
    }

    def classify(self, error: BaseException) -> ErrorCause:
        """
        Determine the cause of an error.

        Exception types are checked first; the lower-cased message is only
        sniffed when the type says nothing.

        Args:
            error: Exception raised during the run

        Returns:
            ErrorCause for the error
        """
        if isinstance(error, ConnectionRefusedError):
            return ErrorCause.CONNECTION_REFUSED
        if isinstance(error, self.TIMEOUT_TYPES):
            return ErrorCause.TIMEOUT

        message = str(error).lower()
        for cause, patterns in self.MESSAGE_PATTERNS:
            if any(pattern in message for pattern in patterns):
                return cause

        return ErrorCause.UNKNOWN

    def troubleshooting(self, cause: ErrorCause) -> List[str]:
        """Troubleshooting hints for a cause (empty for unknown causes)."""
        return list(self.TROUBLESHOOTING.get(cause, []))
