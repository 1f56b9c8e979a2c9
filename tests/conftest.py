"""Shared fixtures: a recording stand-in for Playwright's async API."""

from typing import Dict, List, Optional

import pytest
from loguru import logger

from browser_check.config import ServiceConfig
from browser_check.models.test_result import ResultStore


STUB_VERSION = "HeadlessChrome/120.0.6099.28"
STUB_TITLE = "Example Domain"
STUB_CONTENT = "<html><head><title>Example Domain</title></head><body><h1>Example Domain</h1></body></html>"


class StubBackend:
    """Records calls made against the fake browser and raises where told to.

    ``failures`` maps an operation name (connect, new_page, goto, title,
    content, page_close, browser_close) to the exception it should raise.
    """

    def __init__(self, failures: Optional[Dict[str, Exception]] = None):
        self.failures = failures or {}
        self.calls: List[str] = []
        self.connect_args: Optional[dict] = None
        self.goto_args: Optional[dict] = None
        self.browser_closed = False
        self.stopped = False

    def record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failures:
            raise self.failures[name]

    def factory(self):
        return StubPlaywrightManager(self)


class StubPage:
    def __init__(self, backend: StubBackend):
        self.backend = backend

    async def goto(self, url, wait_until=None, timeout=None):
        self.backend.goto_args = {"url": url, "wait_until": wait_until, "timeout": timeout}
        self.backend.record("goto")

    async def title(self):
        self.backend.record("title")
        return STUB_TITLE

    async def content(self):
        self.backend.record("content")
        return STUB_CONTENT

    async def close(self):
        self.backend.record("page_close")


class StubBrowser:
    def __init__(self, backend: StubBackend):
        self.backend = backend

    @property
    def version(self):
        return STUB_VERSION

    async def new_page(self):
        self.backend.record("new_page")
        return StubPage(self.backend)

    async def close(self):
        self.backend.browser_closed = True
        self.backend.record("browser_close")


class StubChromium:
    def __init__(self, backend: StubBackend):
        self.backend = backend

    async def connect_over_cdp(self, endpoint, timeout=None):
        self.backend.connect_args = {"endpoint": endpoint, "timeout": timeout}
        self.backend.record("connect")
        return StubBrowser(self.backend)


class StubPlaywright:
    def __init__(self, backend: StubBackend):
        self.backend = backend
        self.chromium = StubChromium(backend)

    async def stop(self):
        self.backend.stopped = True


class StubPlaywrightManager:
    def __init__(self, backend: StubBackend):
        self.backend = backend

    async def start(self):
        return StubPlaywright(self.backend)


@pytest.fixture
def backend() -> StubBackend:
    """Stub backend that succeeds at every step."""
    return StubBackend()


@pytest.fixture
def config() -> ServiceConfig:
    """Config pointing at a fake endpoint, without the startup run."""
    return ServiceConfig(
        ws_endpoint="ws://browserless.internal:3000?token=secret",
        run_on_startup=False
    )


@pytest.fixture
def store() -> ResultStore:
    return ResultStore()


@pytest.fixture
def log_messages():
    """Capture loguru output as a list of ``LEVEL message`` lines."""
    messages: List[str] = []
    handler_id = logger.add(
        lambda m: messages.append(m.rstrip("\n")),
        format="{level} {message}",
        level="DEBUG"
    )
    yield messages
    logger.remove(handler_id)
