"""
Connection Tester - Exercise a remote browser service over its WebSocket endpoint
"""

import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from loguru import logger
from playwright.async_api import Browser, Page, async_playwright

from ..config import ENDPOINT_ENV_VAR, ServiceConfig, check_endpoint, redact_endpoint
from ..detectors.error_classifier import ErrorClassifier
from ..errors import ConfigurationError, RuntimeTestError
from ..models.test_result import ResultStore, TestResult


BANNER_WIDTH = 60


@dataclass
class RunContext:
    """State carried through the steps of one run."""
    run_id: int
    details: Dict[str, Any] = field(default_factory=dict)
    step: Optional[str] = None
    playwright: Any = None
    browser: Optional[Browser] = None
    page: Optional[Page] = None


class ConnectionTester:
    """Run the seven-step connectivity check and publish the outcome."""

    def __init__(
        self,
        config: ServiceConfig,
        store: ResultStore,
        playwright_factory: Callable[[], Any] = async_playwright,
        classifier: Optional[ErrorClassifier] = None
    ):
        """
        Initialize connection tester.

        Args:
            config: Service configuration
            store: Result store the outcome is published to
            playwright_factory: Returns an object whose ``start()`` yields a Playwright instance
            classifier: Error classifier used for troubleshooting hints
        """
        self.config = config
        self.store = store
        self.playwright_factory = playwright_factory
        self.classifier = classifier or ErrorClassifier()

    def _steps(self) -> List[Tuple[str, str, Callable[[RunContext], Awaitable[None]]]]:
        return [
            ("connection", "Connecting to browser service...", self._connect),
            ("version", "Getting browser version...", self._query_version),
            ("pageCreation", "Creating new page...", self._open_page),
            ("navigation", f"Navigating to {self.config.target_url}...", self._navigate),
            ("pageTitle", "Getting page title...", self._read_title),
            ("contentLength", "Getting page content...", self._read_content),
            ("pageClose", "Closing page...", self._close_page),
        ]

    async def run(self) -> TestResult:
        """
        Run the connectivity check.

        Returns:
            The TestResult published to the store
        """
        run_id = self.store.begin_run()
        endpoint = self.config.ws_endpoint

        logger.info("=" * BANNER_WIDTH)
        logger.info(f"BROWSER CONNECTION TEST (run #{run_id})")
        logger.info("=" * BANNER_WIDTH)
        logger.info("Configuration:")
        logger.info(f"  WebSocket Endpoint: {redact_endpoint(endpoint) or 'NOT SET'}")

        if not endpoint:
            error = ConfigurationError(f"{ENDPOINT_ENV_VAR} environment variable is not set")
            return self._publish_configuration_error(run_id, error, "Missing environment variable")

        try:
            check_endpoint(endpoint)
        except ConfigurationError as e:
            return self._publish_configuration_error(run_id, e, "Invalid endpoint URL")

        ctx = RunContext(run_id=run_id)
        start_time = time.monotonic()

        try:
            steps = self._steps()
            for index, (name, description, step) in enumerate(steps, start=1):
                ctx.step = name
                logger.info(f"[{index}/{len(steps)}] {description}")
                await step(ctx)

            duration_ms = self._elapsed_ms(start_time)
            self._log_success(duration_ms)
            result = TestResult.success(run_id, duration_ms, ctx.details)

        except Exception as e:
            duration_ms = self._elapsed_ms(start_time)
            error = RuntimeTestError.from_exception(e, step=ctx.step, classifier=self.classifier)
            self._log_failure(error)
            result = TestResult.failed(
                run_id,
                message=error.message,
                duration_ms=duration_ms,
                details={
                    **ctx.details,
                    "error": error.message,
                    "stack": error.stack,
                    "failedStep": error.step,
                    "errorCause": error.cause.value
                }
            )

        finally:
            await self._release(ctx)

        return self.store.publish(result)

    def _publish_configuration_error(
        self,
        run_id: int,
        error: ConfigurationError,
        detail: str
    ) -> TestResult:
        logger.error(f"ERROR: {error}")
        logger.error(f"Set {ENDPOINT_ENV_VAR} to the WebSocket URL of the browser service")
        return self.store.publish(TestResult.failed(
            run_id,
            message=str(error),
            details={"error": detail}
        ))

    async def _connect(self, ctx: RunContext) -> None:
        ctx.playwright = await self.playwright_factory().start()
        ctx.browser = await ctx.playwright.chromium.connect_over_cdp(
            self.config.ws_endpoint,
            timeout=self.config.connect_timeout_ms
        )
        logger.success("Connected successfully!")
        ctx.details["connection"] = "success"

    async def _query_version(self, ctx: RunContext) -> None:
        version = ctx.browser.version
        logger.success(f"Browser version: {version}")
        ctx.details["version"] = version

    async def _open_page(self, ctx: RunContext) -> None:
        ctx.page = await ctx.browser.new_page()
        logger.success("Page created successfully!")
        ctx.details["pageCreation"] = "success"

    async def _navigate(self, ctx: RunContext) -> None:
        await ctx.page.goto(
            self.config.target_url,
            wait_until=self.config.wait_until,
            timeout=self.config.navigation_timeout_ms
        )
        logger.success("Navigation successful!")
        ctx.details["navigation"] = "success"

    async def _read_title(self, ctx: RunContext) -> None:
        title = await ctx.page.title()
        logger.success(f"Page title: {title}")
        ctx.details["pageTitle"] = title

    async def _read_content(self, ctx: RunContext) -> None:
        content = await ctx.page.content()
        logger.success(f"Page content length: {len(content)} characters")
        ctx.details["contentLength"] = len(content)

    async def _close_page(self, ctx: RunContext) -> None:
        await ctx.page.close()
        ctx.page = None
        logger.success("Page closed successfully!")

    async def _release(self, ctx: RunContext) -> None:
        """Close the browser connection and stop the driver, whatever happened."""
        if ctx.browser is not None:
            try:
                await ctx.browser.close()
                logger.info("Browser connection closed.")
            except Exception as e:
                logger.warning(f"Error closing browser connection: {e}")
            ctx.browser = None

        if ctx.playwright is not None:
            try:
                await ctx.playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright driver: {e}")
            ctx.playwright = None

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)

    def _log_success(self, duration_ms: int) -> None:
        logger.info("=" * BANNER_WIDTH)
        logger.success("ALL TESTS PASSED!")
        logger.info("=" * BANNER_WIDTH)
        logger.info(f"Total duration: {duration_ms}ms")
        logger.info("Browser service is working correctly.")

    def _log_failure(self, error: RuntimeTestError) -> None:
        logger.error("=" * BANNER_WIDTH)
        logger.error(f"TEST FAILED at step '{error.step}'")
        logger.error("=" * BANNER_WIDTH)
        logger.error(f"Error: {error.message}")
        logger.error(f"Stack trace:\n{error.stack}")

        hints = self.classifier.troubleshooting(error.cause)
        if hints:
            logger.error("Troubleshooting:")
            for hint in hints:
                logger.error(f"  - {hint}")
