"""
Status server - report and trigger browser connectivity runs.

Serve with ``browser-check`` or ``uvicorn browser_check.web.app:create_app --factory``.
"""

import asyncio
from typing import Any, Callable, Optional, Set

from fastapi import FastAPI, Request
from loguru import logger

from .. import __version__
from ..config import ServiceConfig, load_config
from ..models.test_result import ResultStore
from ..testers.connection_tester import ConnectionTester


ENDPOINTS = {
    "/": "This page",
    "/health": "Health check and test results",
    "/test": "Run test manually"
}


def create_app(
    config: Optional[ServiceConfig] = None,
    playwright_factory: Optional[Callable[[], Any]] = None
) -> FastAPI:
    """
    Build the status server.

    Args:
        config: Service configuration (loaded from file/environment if omitted)
        playwright_factory: Override for the Playwright entry point

    Returns:
        FastAPI application
    """
    if config is None:
        config = load_config()

    app = FastAPI(
        title="Browser Test Service",
        description="Tests connection to browserless service",
        version=__version__
    )

    store = ResultStore()
    tester_options = {}
    if playwright_factory is not None:
        tester_options['playwright_factory'] = playwright_factory

    app.state.config = config
    app.state.store = store
    app.state.tester = ConnectionTester(config, store, **tester_options)
    app.state.background_runs = set()

    @app.on_event("startup")
    async def startup():
        """Run the connectivity test once the server comes up."""
        logger.info(f"Browser Test Service running on port {config.port}")
        logger.info(f"Health check: http://localhost:{config.port}/health")
        logger.info(f"Manual test: http://localhost:{config.port}/test")

        if config.run_on_startup:
            logger.info("Running automatic browser connection test...")
            start_background_run(app, "Startup test error")

    @app.get("/")
    async def index(request: Request):
        """Service description and latest results."""
        return {
            "service": "Browser Test Service",
            "description": "Tests connection to browserless service",
            "testResults": request.app.state.store.current.to_response(),
            "endpoints": ENDPOINTS
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        return {
            "service": "browser-test-service",
            "status": "running",
            "testResults": request.app.state.store.current.to_response()
        }

    @app.get("/test")
    async def trigger_test(request: Request):
        """Start a run in the background and return the results as they stand."""
        current = request.app.state.store.current.to_response()
        start_background_run(request.app, "Test error")
        return {
            "message": "Test started, check logs for results",
            "currentResults": current
        }

    return app


def start_background_run(app: FastAPI, error_label: str) -> asyncio.Task:
    """
    Schedule a connectivity run without waiting for it.

    The task is kept on ``app.state.background_runs`` until it finishes.
    """
    runs: Set[asyncio.Task] = app.state.background_runs
    task = asyncio.create_task(app.state.tester.run())
    runs.add(task)

    def _done(finished: asyncio.Task) -> None:
        runs.discard(finished)
        if finished.cancelled():
            return
        exc = finished.exception()
        if exc is not None:
            logger.opt(exception=exc).error(f"{error_label}: {exc}")

    task.add_done_callback(_done)
    return task
