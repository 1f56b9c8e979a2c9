"""
Browser Check - smoke-test a remote headless-browser service
"""

__version__ = "1.0.0"
