"""
Browser connectivity testers
"""

from .connection_tester import ConnectionTester, RunContext

__all__ = ['ConnectionTester', 'RunContext']
