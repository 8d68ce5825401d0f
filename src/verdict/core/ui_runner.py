"""UI test runner - drives a browser session with a test script."""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

if TYPE_CHECKING:
    from playwright.async_api import Page

from verdict.config.schema import VerdictConfig
from verdict.core.assertions import AssertionResolver, UITestAssertions
from verdict.core.models import (
    BrowserKind,
    ScreenshotPolicy,
    TestStatus,
    UITestCase,
    UITestExecutionResult,
    UITestSuite,
    Viewport,
    skipped_result,
)
from verdict.core.runner import elapsed_ms, error_text
from verdict.core.script import ScriptConsole, run_script
from verdict.core.session import BrowserLauncher, BrowserSession, PlaywrightLauncher
from verdict.core.utils import UITestUtils
from verdict.errors import HookError, ScriptTimeoutError

logger = logging.getLogger(__name__)

# Time a cancelled script gets to unwind before its session is torn down anyway.
CANCEL_GRACE_SECONDS = 1.0


async def run_with_timeout(awaitable: Awaitable[Any], timeout_ms: int) -> Any:
    """Await ``awaitable`` for at most ``timeout_ms`` milliseconds.

    On timeout the underlying task is cancelled at its next suspension point
    and ``ScriptTimeoutError`` is raised.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    task.cancel()
    await asyncio.wait({task}, timeout=CANCEL_GRACE_SECONDS)
    if not task.done():
        logger.warning("Timed out script did not stop after cancellation")
    elif not task.cancelled() and task.exception() is not None:
        logger.debug(f"Timed out script raised while unwinding: {task.exception()}")
    raise ScriptTimeoutError("Test timeout")


def should_capture(policy: ScreenshotPolicy, has_failures: bool, errored: bool) -> bool:
    """Decide whether to keep a screenshot of the final page."""
    policy = ScreenshotPolicy(policy)
    if policy == ScreenshotPolicy.ALWAYS:
        return True
    if policy == ScreenshotPolicy.ON_FAILURE:
        return has_failures or errored
    return False


class UITestRunner:
    """Executes UI test cases, each in its own browser session.

    Stateless apart from configuration; sessions, recorders and scopes are
    created per call and never shared between cases.
    """
    __test__ = False

    def __init__(
        self,
        config: Optional[VerdictConfig] = None,
        launcher_factory: Optional[Callable[[], BrowserLauncher]] = None,
    ):
        self.config = config or VerdictConfig.get_default()
        self.launcher_factory = launcher_factory or (
            lambda: PlaywrightLauncher(self.config.browser.launch_args)
        )
        self.resolver = AssertionResolver()

    def _console(self) -> ScriptConsole:
        return ScriptConsole(self.config.script.ui_console_prefix)

    async def run(
        self,
        test_case: UITestCase,
        before_each: Optional[str] = None,
        after_each: Optional[str] = None,
    ) -> UITestExecutionResult:
        """Run a single UI test case.

        Args:
            test_case: Test case to execute
            before_each: Hook script run in the case's session before its script
            after_each: Hook script run in the case's session after its script

        Returns:
            UITestExecutionResult
        """
        if not test_case.enabled:
            logger.info(f"Skipping disabled UI test case {test_case.id}")
            return skipped_result(test_case, ui=True)

        logger.info(f"Running UI test case {test_case.id}: {test_case.name}")

        started = time.perf_counter()
        result = UITestExecutionResult(
            test_case_id=test_case.id,
            test_name=test_case.name,
            status=TestStatus.PASS,
        )
        session = BrowserSession(
            kind=test_case.browser,
            headless=test_case.headless,
            viewport=test_case.viewport,
            launcher=self.launcher_factory(),
        )

        try:
            async with session:
                await self._run_in_session(test_case, session, result, before_each, after_each)
        except Exception as e:
            logger.error(f"UI test case {test_case.id} could not run: {e}")
            result.status = TestStatus.ERROR
            result.error_message = error_text(e)
            result.assertions = []

        result.browser_logs = list(session.console_logs)
        result.execution_time = elapsed_ms(started)
        return result

    async def _run_in_session(
        self,
        test_case: UITestCase,
        session: BrowserSession,
        result: UITestExecutionResult,
        before_each: Optional[str],
        after_each: Optional[str],
    ) -> None:
        asserts = UITestAssertions()
        bindings = {
            **session.bindings(),
            "asserts": asserts,
            "console": self._console(),
            "utils": UITestUtils,
        }

        has_failures = False
        errored = False

        try:
            await run_with_timeout(
                self._execute(test_case, bindings, before_each, after_each),
                test_case.timeout,
            )
            result.assertions = await self.resolver.resolve(asserts.get_assertions(), session.page)
            has_failures = any(not a.passed for a in result.assertions)
            result.status = TestStatus.FAIL if has_failures else TestStatus.PASS

        except Exception as e:
            logger.info(f"UI test case {test_case.id} errored: {e}")
            errored = True
            result.status = TestStatus.ERROR
            result.error_message = error_text(e)

        if should_capture(test_case.capture_screenshot, has_failures, errored):
            result.screenshot = await self.capture_screenshot(session.page)

    async def _execute(
        self,
        test_case: UITestCase,
        bindings: dict,
        before_each: Optional[str],
        after_each: Optional[str],
    ) -> None:
        if before_each:
            try:
                await run_script(before_each, bindings, f"<beforeEach {test_case.id}>")
            except Exception as e:
                raise HookError(f"beforeEach hook failed: {error_text(e)}") from e

        await run_script(test_case.script, bindings, f"<ui test {test_case.id}>")

        if after_each:
            try:
                await run_script(after_each, bindings, f"<afterEach {test_case.id}>")
            except Exception as e:
                logger.warning(f"afterEach hook failed for {test_case.id}: {e}")

    async def capture_screenshot(self, page: Optional["Page"]) -> Optional[str]:
        """Take a base64 PNG screenshot, or None if it cannot be taken."""
        if page is None:
            return None
        try:
            return base64.b64encode(await page.screenshot()).decode("ascii")
        except Exception as e:
            logger.warning(f"Failed to capture screenshot: {e}")
            return None

    async def run_suite(self, suite: UITestSuite) -> list[UITestExecutionResult]:
        """Run every UI test case of a suite, strictly in order.

        Returns:
            One result per test case, in the suite's declared order
        """
        logger.info(f"Running UI suite {suite.id} ({len(suite.test_cases)} cases)")

        if suite.before_all:
            logger.info("Running beforeAll hook")
            failure = await self._run_suite_hook(suite.before_all, f"<beforeAll {suite.id}>")
            if failure is not None:
                logger.error(f"beforeAll hook failed for suite {suite.id}: {failure}")
                return [self._hook_failed_result(tc, f"beforeAll hook failed: {failure}") for tc in suite.test_cases]

        results = []
        try:
            for test_case in suite.test_cases:
                if not test_case.enabled:
                    results.append(skipped_result(test_case, ui=True))
                    continue
                results.append(await self.run(test_case, suite.before_each, suite.after_each))
        finally:
            if suite.after_all:
                logger.info("Running afterAll hook")
                failure = await self._run_suite_hook(suite.after_all, f"<afterAll {suite.id}>")
                if failure is not None:
                    logger.warning(f"afterAll hook failed for suite {suite.id}: {failure}")

        return results

    async def _run_suite_hook(self, script: str, filename: str) -> Optional[str]:
        """Run a suite-level hook in its own session; return the error text if it failed."""
        browser_config = self.config.browser
        session = BrowserSession(
            kind=BrowserKind(browser_config.kind),
            headless=browser_config.headless,
            viewport=Viewport(browser_config.viewport.width, browser_config.viewport.height),
            launcher=self.launcher_factory(),
        )
        try:
            async with session:
                bindings = {**session.bindings(), "console": self._console(), "utils": UITestUtils}
                await run_with_timeout(run_script(script, bindings, filename), self.config.ui.timeout)
        except Exception as e:
            return error_text(e)
        return None

    def _hook_failed_result(self, test_case: UITestCase, message: str) -> UITestExecutionResult:
        if not test_case.enabled:
            return skipped_result(test_case, ui=True)
        return UITestExecutionResult(
            test_case_id=test_case.id,
            test_name=test_case.name,
            status=TestStatus.ERROR,
            error_message=message,
        )


async def run_ui_test_suite(
    suite: UITestSuite,
    config: Optional[VerdictConfig] = None,
    launcher_factory: Optional[Callable[[], BrowserLauncher]] = None,
) -> list[UITestExecutionResult]:
    """Run a UI test suite with a fresh runner."""
    runner = UITestRunner(config, launcher_factory)
    return await runner.run_suite(suite)
