"""Result models for the browser check."""

from .test_result import ResultStatus, ResultStore, TestResult

__all__ = [
    'ResultStatus',
    'ResultStore',
    'TestResult'
]
