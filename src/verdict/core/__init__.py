"""Test execution core for Verdict."""

from verdict.core.assertions import AssertionResolver, TestAssertions, UITestAssertions
from verdict.core.comparison import UNDEFINED, Containment, contains, deep_equals, get_json_path_value
from verdict.core.models import (
    ApiResponse,
    AssertionType,
    BrowserKind,
    ScreenshotPolicy,
    TestAssertion,
    TestCase,
    TestExecutionResult,
    TestStatus,
    TestSuite,
    UITestCase,
    UITestExecutionResult,
    UITestSuite,
    Viewport,
)
from verdict.core.runner import TestRunner, run_test_suite
from verdict.core.session import BrowserSession, PlaywrightLauncher
from verdict.core.ui_runner import UITestRunner, run_ui_test_suite
from verdict.core.utils import UITestUtils

__all__ = [
    # Models
    "ApiResponse",
    "AssertionType",
    "BrowserKind",
    "ScreenshotPolicy",
    "TestAssertion",
    "TestCase",
    "TestExecutionResult",
    "TestStatus",
    "TestSuite",
    "UITestCase",
    "UITestExecutionResult",
    "UITestSuite",
    "Viewport",
    # Assertions
    "AssertionResolver",
    "TestAssertions",
    "UITestAssertions",
    "UNDEFINED",
    "Containment",
    "contains",
    "deep_equals",
    "get_json_path_value",
    # Execution
    "BrowserSession",
    "PlaywrightLauncher",
    "TestRunner",
    "UITestRunner",
    "UITestUtils",
    "run_test_suite",
    "run_ui_test_suite",
]
