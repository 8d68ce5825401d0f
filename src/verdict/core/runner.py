"""API test runner - executes test scripts against a captured response."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional

from verdict.config.schema import VerdictConfig
from verdict.core.assertions import TestAssertions
from verdict.core.models import (
    ApiResponse,
    TestCase,
    TestExecutionResult,
    TestStatus,
    TestSuite,
    skipped_result,
)
from verdict.core.script import ScriptConsole, run_script
from verdict.errors import HookError

logger = logging.getLogger(__name__)


def error_text(error: BaseException) -> str:
    """Message reported for an error verdict."""
    return str(error) or type(error).__name__


def elapsed_ms(started: float) -> int:
    return max(0, int((time.perf_counter() - started) * 1000))


class TestRunner:
    """Executes API test cases.

    Stateless apart from configuration: every call builds its own recorder,
    console and script scope.
    """
    __test__ = False

    def __init__(self, config: Optional[VerdictConfig] = None):
        self.config = config or VerdictConfig.get_default()

    async def run(
        self,
        test_case: TestCase,
        response: ApiResponse,
        request: Any = None,
        before_each: Optional[str] = None,
        after_each: Optional[str] = None,
    ) -> TestExecutionResult:
        """Run a single test case against a completed exchange.

        Args:
            test_case: Test case to execute
            response: Response produced by the transport layer
            request: Request that produced the response
            before_each: Hook script run before the case script
            after_each: Hook script run after the case script

        Returns:
            TestExecutionResult
        """
        if not test_case.enabled:
            logger.info(f"Skipping disabled test case {test_case.id}")
            return skipped_result(test_case)

        started = time.perf_counter()
        result = TestExecutionResult(
            test_case_id=test_case.id,
            test_name=test_case.name,
            status=TestStatus.PASS,
            actual_response=getattr(response, "data", None),
        )

        asserts = TestAssertions()
        bindings = {
            "response": response,
            "request": request,
            "asserts": asserts,
            "console": ScriptConsole(self.config.script.api_console_prefix),
        }

        logger.info(f"Running test case {test_case.id}: {test_case.name}")

        try:
            if before_each:
                try:
                    await run_script(before_each, bindings, f"<beforeEach {test_case.id}>")
                except Exception as e:
                    raise HookError(f"beforeEach hook failed: {error_text(e)}") from e

            await run_script(test_case.script, bindings, f"<test {test_case.id}>")

            if after_each:
                await self._run_after_each(after_each, bindings, test_case)

            result.assertions = asserts.get_assertions()
            result.status = (
                TestStatus.PASS if all(a.passed for a in result.assertions) else TestStatus.FAIL
            )

        except Exception as e:
            logger.info(f"Test case {test_case.id} errored: {e}")
            result.status = TestStatus.ERROR
            result.error_message = error_text(e)

        result.execution_time = elapsed_ms(started)
        return result

    async def _run_after_each(self, script: str, bindings: dict, test_case: TestCase) -> None:
        try:
            await run_script(script, bindings, f"<afterEach {test_case.id}>")
        except Exception as e:
            logger.warning(f"afterEach hook failed for {test_case.id}: {e}")

    async def run_with_retry(
        self,
        test_case: TestCase,
        response: ApiResponse,
        request: Any = None,
        retry_count: int = 0,
        before_each: Optional[str] = None,
        after_each: Optional[str] = None,
    ) -> TestExecutionResult:
        """Run a test case until it passes or ``retry_count + 1`` attempts are spent.

        Returns:
            The last attempt's result
        """
        result = None
        for attempt in range(retry_count + 1):
            if attempt:
                logger.info(f"Retrying {test_case.id} (attempt {attempt + 1}/{retry_count + 1})")
            result = await self.run(test_case, response, request, before_each, after_each)
            if result.status == TestStatus.PASS:
                break
        return result

    async def run_suite(
        self,
        suite: TestSuite,
        response: ApiResponse,
        request: Any = None,
        retry_count: Optional[int] = None,
        parallel: Optional[bool] = None,
    ) -> list[TestExecutionResult]:
        """Run every test case of a suite.

        Args:
            suite: Suite to execute
            response: Response produced by the transport layer
            request: Request that produced the response
            retry_count: Extra attempts per case (config default if None)
            parallel: Interleave cases on the event loop (config default if None)

        Returns:
            One result per test case, in the suite's declared order
        """
        if retry_count is None:
            retry_count = self.config.runner.retry_count
        if parallel is None:
            parallel = self.config.runner.parallel

        logger.info(
            f"Running suite {suite.id} ({len(suite.test_cases)} cases, "
            f"retries={retry_count}, parallel={parallel})"
        )

        def run_one(test_case: TestCase):
            return self.run_with_retry(
                test_case,
                response,
                request,
                retry_count=retry_count,
                before_each=suite.before_each,
                after_each=suite.after_each,
            )

        if parallel:
            return list(await asyncio.gather(*(run_one(tc) for tc in suite.test_cases)))

        results = []
        for test_case in suite.test_cases:
            results.append(await run_one(test_case))
        return results


async def run_test_suite(
    suite: TestSuite,
    response: ApiResponse,
    request: Any = None,
    retry_count: Optional[int] = None,
    parallel: Optional[bool] = None,
    config: Optional[VerdictConfig] = None,
) -> list[TestExecutionResult]:
    """Run an API test suite with a fresh runner."""
    runner = TestRunner(config)
    return await runner.run_suite(suite, response, request, retry_count=retry_count, parallel=parallel)
