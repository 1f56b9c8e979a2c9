"""
Failure classification for connectivity runs
"""

from .error_classifier import ErrorCause, ErrorClassifier

__all__ = ['ErrorCause', 'ErrorClassifier']
