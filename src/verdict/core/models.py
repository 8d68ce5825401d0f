"""Data models for test execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from verdict.core.comparison import UNDEFINED


class TestStatus(str, Enum):
    """Verdict of a single test case execution."""
    __test__ = False

    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"
    ERROR = "error"


class AssertionType(str, Enum):
    """Kind of checked fact."""
    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    STATUS_CODE = "statusCode"
    RESPONSE_TIME = "responseTime"
    JSON_PATH = "jsonPath"
    ELEMENT_EXISTS = "elementExists"
    ELEMENT_TEXT = "elementText"
    ELEMENT_VISIBLE = "elementVisible"
    URL = "url"
    TITLE = "title"
    JWT_CLAIM = "jwtClaim"
    JWT_VALID = "jwtValid"
    COOKIE_EXISTS = "cookieExists"
    COOKIE_VALUE = "cookieValue"
    COOKIE_SECURE = "cookieSecure"
    COOKIE_HTTP_ONLY = "cookieHttpOnly"


class BrowserKind(str, Enum):
    """Browser engines a UI test can target."""
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


class ScreenshotPolicy(str, Enum):
    """When a UI test captures a screenshot of the final page."""
    ALWAYS = "always"
    ON_FAILURE = "on-failure"
    NEVER = "never"


def _now_iso() -> str:
    return datetime.now().isoformat()


@dataclass
class TestAssertion:
    """One checked fact.

    Deferred assertions start with ``passed=False`` and get ``actual`` and
    ``passed`` filled in once the live session has been queried.
    """
    __test__ = False

    type: AssertionType
    expected: Any
    actual: Any = None
    path: Optional[str] = None
    message: Optional[str] = None
    passed: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type.value,
            "expected": self.expected,
            "actual": None if self.actual is UNDEFINED else self.actual,
            "path": self.path,
            "message": self.message,
            "passed": self.passed,
        }


@dataclass
class Viewport:
    """Browser viewport size."""
    width: int = 1280
    height: int = 720

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height}


@dataclass
class TestCase:
    """A named, independently enable-able API test script."""
    __test__ = False

    id: str
    name: str
    script: str
    description: Optional[str] = None
    enabled: bool = True
    timeout: int = 5000
    tags: list[str] = field(default_factory=list)


@dataclass
class TestSuite:
    """Ordered test cases for one request, with optional per-case hooks."""
    __test__ = False

    id: str
    name: str
    test_cases: list[TestCase] = field(default_factory=list)
    request_id: Optional[int] = None
    before_each: Optional[str] = None
    after_each: Optional[str] = None


@dataclass
class UITestCase:
    """A browser-driven test script plus its session settings."""
    __test__ = False

    id: str
    name: str
    script: str
    description: Optional[str] = None
    enabled: bool = True
    timeout: int = 30000
    tags: list[str] = field(default_factory=list)
    browser: BrowserKind = BrowserKind.CHROMIUM
    headless: bool = True
    viewport: Viewport = field(default_factory=Viewport)
    capture_screenshot: ScreenshotPolicy = ScreenshotPolicy.ON_FAILURE


@dataclass
class UITestSuite:
    """Ordered UI test cases with suite and per-case hooks."""
    __test__ = False

    id: str
    name: str
    test_cases: list[UITestCase] = field(default_factory=list)
    project_id: Optional[int] = None
    before_all: Optional[str] = None
    after_all: Optional[str] = None
    before_each: Optional[str] = None
    after_each: Optional[str] = None


@dataclass
class ApiResponse:
    """Response captured by the transport layer."""
    status: int
    status_text: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    data: Any = None
    response_time: float = 0
    size: int = 0


@dataclass
class TestExecutionResult:
    """Verdict for one test case."""
    __test__ = False

    test_case_id: str
    test_name: str
    status: TestStatus
    execution_time: int = 0
    assertions: list[TestAssertion] = field(default_factory=list)
    error_message: Optional[str] = None
    actual_response: Any = None
    run_at: str = field(default_factory=_now_iso)

    @property
    def passed_count(self) -> int:
        return sum(1 for a in self.assertions if a.passed)

    @property
    def failed_count(self) -> int:
        return sum(1 for a in self.assertions if not a.passed)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            "testCaseId": self.test_case_id,
            "testName": self.test_name,
            "status": self.status.value,
            "executionTime": self.execution_time,
            "assertions": [a.to_dict() for a in self.assertions],
            "runAt": self.run_at,
        }
        if self.error_message is not None:
            data["errorMessage"] = self.error_message
        if self.actual_response is not None:
            data["actualResponse"] = self.actual_response
        return data


@dataclass
class UITestExecutionResult(TestExecutionResult):
    """Verdict for one UI test case, with session diagnostics."""
    __test__ = False

    screenshot: Optional[str] = None
    browser_logs: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = super().to_dict()
        if self.screenshot is not None:
            data["screenshot"] = self.screenshot
        data["browserLogs"] = list(self.browser_logs)
        return data


def skipped_result(test_case: TestCase | UITestCase, ui: bool = False) -> TestExecutionResult:
    """Build the result reported for a disabled test case."""
    result_cls = UITestExecutionResult if ui else TestExecutionResult
    return result_cls(
        test_case_id=test_case.id,
        test_name=test_case.name,
        status=TestStatus.SKIP,
        execution_time=0,
        assertions=[],
    )
