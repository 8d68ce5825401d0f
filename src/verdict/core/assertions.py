"""Assertion recorders exposed to test scripts as ``asserts``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from playwright.async_api import Page

from verdict.core.comparison import (
    Containment,
    contains,
    deep_equals,
    format_value,
    get_json_path_value,
)
from verdict.core.models import AssertionType, TestAssertion
from verdict.core.utils import UITestUtils
from verdict.errors import AssertionFailure

logger = logging.getLogger(__name__)


class TestAssertions:
    """Synchronous checks for API test scripts.

    Every check evaluates immediately, records its outcome, and raises
    ``AssertionFailure`` when it did not hold, which aborts the script.
    """
    __test__ = False

    def __init__(self):
        self._assertions: list[TestAssertion] = []

    def _record(
        self,
        type: AssertionType,
        expected: Any,
        actual: Any,
        passed: bool,
        message: str,
        path: Optional[str] = None,
    ) -> None:
        self._assertions.append(TestAssertion(
            type=type,
            expected=expected,
            actual=actual,
            path=path,
            message=message,
            passed=passed,
        ))
        if not passed:
            raise AssertionFailure(message)

    def assert_equals(self, expected: Any, actual: Any, message: Optional[str] = None) -> None:
        """Assert two values are structurally equal."""
        self._record(
            AssertionType.EQUALS,
            expected,
            actual,
            deep_equals(expected, actual),
            message or f"Expected {format_value(expected)}, but got {format_value(actual)}",
        )

    def assert_not_equals(self, expected: Any, actual: Any, message: Optional[str] = None) -> None:
        """Assert two values differ structurally."""
        self._record(
            AssertionType.NOT_EQUALS,
            expected,
            actual,
            not deep_equals(expected, actual),
            message or f"Expected not to equal {format_value(expected)}",
        )

    def assert_contains(
        self,
        container: Any,
        item: Any,
        message: Optional[str] = None,
        mode: Optional[Containment | str] = None,
    ) -> None:
        """Assert a string, sequence or mapping contains ``item``.

        Args:
            container: Value searched
            item: Substring, element, subset mapping or mapping value
            message: Custom failure message
            mode: Explicit containment variant (picked from the types if omitted)
        """
        self._record(
            AssertionType.CONTAINS,
            item,
            container,
            contains(container, item, mode),
            message or f"Expected container to contain {format_value(item)}",
        )

    def assert_not_contains(
        self,
        container: Any,
        item: Any,
        message: Optional[str] = None,
        mode: Optional[Containment | str] = None,
    ) -> None:
        """Assert a container does not contain ``item``."""
        self._record(
            AssertionType.NOT_CONTAINS,
            item,
            container,
            not contains(container, item, mode),
            message or f"Expected container not to contain {format_value(item)}",
        )

    def assert_status_code(
        self, expected_status: int, actual_status: int, message: Optional[str] = None
    ) -> None:
        """Assert the HTTP status code."""
        self._record(
            AssertionType.STATUS_CODE,
            expected_status,
            actual_status,
            deep_equals(expected_status, actual_status),
            message or f"Expected status code {expected_status}, but got {actual_status}",
        )

    def assert_response_time(
        self, max_time: float, actual_time: float, message: Optional[str] = None
    ) -> None:
        """Assert the response arrived within ``max_time`` milliseconds."""
        self._record(
            AssertionType.RESPONSE_TIME,
            max_time,
            actual_time,
            actual_time <= max_time,
            message or f"Expected response time <= {max_time}ms, but got {actual_time}ms",
        )

    def assert_json_path(
        self, data: Any, path: str, expected_value: Any, message: Optional[str] = None
    ) -> None:
        """Assert the value at a dotted JSON path."""
        actual_value = get_json_path_value(data, path)
        self._record(
            AssertionType.JSON_PATH,
            expected_value,
            actual_value,
            deep_equals(expected_value, actual_value),
            message or (
                f"Expected JSON path '{path}' to equal {format_value(expected_value)}, "
                f"but got {format_value(actual_value)}"
            ),
            path=path,
        )

    def get_assertions(self) -> list[TestAssertion]:
        """Return a copy of the recorded assertions."""
        return list(self._assertions)

    def clear(self) -> None:
        self._assertions = []


class UITestAssertions:
    """Deferred checks for UI test scripts.

    Checks only record what to verify; ``AssertionResolver`` evaluates them
    against the page once the script has finished. Nothing here raises.
    """
    __test__ = False

    def __init__(self):
        self._assertions: list[TestAssertion] = []

    def _defer(self, type: AssertionType, expected: Any, path: str, message: str) -> None:
        self._assertions.append(TestAssertion(
            type=type,
            expected=expected,
            path=path,
            message=message,
            passed=False,
        ))

    def assert_element_exists(self, selector: str, message: Optional[str] = None) -> None:
        self._defer(
            AssertionType.ELEMENT_EXISTS,
            True,
            f"element:{selector}",
            message or f"Element '{selector}' should exist",
        )

    def assert_element_text(
        self, selector: str, expected_text: str, message: Optional[str] = None
    ) -> None:
        self._defer(
            AssertionType.ELEMENT_TEXT,
            expected_text,
            f"element:{selector}:text",
            message or f"Element '{selector}' should have text '{expected_text}'",
        )

    def assert_element_visible(self, selector: str, message: Optional[str] = None) -> None:
        self._defer(
            AssertionType.ELEMENT_VISIBLE,
            True,
            f"element:{selector}:visible",
            message or f"Element '{selector}' should be visible",
        )

    def assert_url_contains(self, expected_url: str, message: Optional[str] = None) -> None:
        self._defer(
            AssertionType.URL,
            expected_url,
            "url",
            message or f"URL should contain '{expected_url}'",
        )

    def assert_page_title(self, expected_title: str, message: Optional[str] = None) -> None:
        self._defer(
            AssertionType.TITLE,
            expected_title,
            "title",
            message or f"Page title should be '{expected_title}'",
        )

    def assert_jwt_claim(
        self, token: str, claim_name: str, expected_value: Any, message: Optional[str] = None
    ) -> None:
        self._defer(
            AssertionType.JWT_CLAIM,
            expected_value,
            f"jwt:{token}:{claim_name}",
            message or f"JWT claim '{claim_name}' should be '{expected_value}'",
        )

    def assert_jwt_valid(self, token: str, message: Optional[str] = None) -> None:
        self._defer(
            AssertionType.JWT_VALID,
            True,
            f"jwt:{token}:valid",
            message or "JWT token should be valid and not expired",
        )

    def assert_cookie_exists(self, cookie_name: str, message: Optional[str] = None) -> None:
        self._defer(
            AssertionType.COOKIE_EXISTS,
            True,
            f"cookie:{cookie_name}:exists",
            message or f"Cookie '{cookie_name}' should exist",
        )

    def assert_cookie_value(
        self, cookie_name: str, expected_value: str, message: Optional[str] = None
    ) -> None:
        self._defer(
            AssertionType.COOKIE_VALUE,
            expected_value,
            f"cookie:{cookie_name}:value",
            message or f"Cookie '{cookie_name}' should have value '{expected_value}'",
        )

    def assert_cookie_secure(self, cookie_name: str, message: Optional[str] = None) -> None:
        self._defer(
            AssertionType.COOKIE_SECURE,
            True,
            f"cookie:{cookie_name}:secure",
            message or f"Cookie '{cookie_name}' should be secure",
        )

    def assert_cookie_http_only(self, cookie_name: str, message: Optional[str] = None) -> None:
        self._defer(
            AssertionType.COOKIE_HTTP_ONLY,
            True,
            f"cookie:{cookie_name}:httpOnly",
            message or f"Cookie '{cookie_name}' should be httpOnly",
        )

    def get_assertions(self) -> list[TestAssertion]:
        """Return a copy of the recorded assertions."""
        return list(self._assertions)

    def clear(self) -> None:
        self._assertions = []


_ELEMENT_SUFFIXES = {
    AssertionType.ELEMENT_TEXT: ":text",
    AssertionType.ELEMENT_VISIBLE: ":visible",
}


class AssertionResolver:
    """Evaluate deferred assertions against live page state."""

    async def resolve(self, assertions: list[TestAssertion], page: "Page") -> list[TestAssertion]:
        """Fill in ``actual`` and ``passed`` for every deferred assertion.

        Args:
            assertions: Assertions recorded by ``UITestAssertions``
            page: Playwright page the script drove

        Returns:
            The same assertions, resolved in place
        """
        for assertion in assertions:
            try:
                await self._resolve_single(assertion, page)
            except Exception as e:
                logger.warning(f"Could not resolve assertion {assertion.path}: {e}")
                assertion.passed = False
                if not assertion.message:
                    assertion.message = str(e) or "Assertion failed"
        return assertions

    async def _resolve_single(self, assertion: TestAssertion, page: "Page") -> None:
        path = assertion.path or ""

        if path.startswith("element:"):
            await self.element(assertion, page)
        elif path == "url":
            await self.url(assertion, page)
        elif path == "title":
            await self.title(assertion, page)
        elif path.startswith("jwt:"):
            self.jwt(assertion)
        elif path.startswith("cookie:"):
            await self.cookie(assertion, page)
        else:
            assertion.passed = False
            assertion.message = assertion.message or f"Unknown assertion path: {path}"

    async def element(self, assertion: TestAssertion, page: "Page") -> None:
        """Resolve element existence, text or visibility."""
        selector = assertion.path[len("element:"):]
        suffix = _ELEMENT_SUFFIXES.get(assertion.type)
        if suffix and selector.endswith(suffix):
            selector = selector[: -len(suffix)]

        locator = page.locator(selector)

        if assertion.type == AssertionType.ELEMENT_TEXT:
            assertion.actual = await locator.text_content()
        elif assertion.type == AssertionType.ELEMENT_VISIBLE:
            assertion.actual = await locator.is_visible()
        else:
            assertion.actual = await locator.count() > 0

        assertion.passed = assertion.actual == assertion.expected

    async def url(self, assertion: TestAssertion, page: "Page") -> None:
        """Resolve URL containment."""
        assertion.actual = page.url
        assertion.passed = str(assertion.expected) in assertion.actual

    async def title(self, assertion: TestAssertion, page: "Page") -> None:
        """Resolve exact page title."""
        assertion.actual = await page.title()
        assertion.passed = assertion.actual == assertion.expected

    def jwt(self, assertion: TestAssertion) -> None:
        """Resolve a JWT claim or validity check."""
        token, _, claim = assertion.path[len("jwt:"):].partition(":")

        if assertion.type == AssertionType.JWT_VALID:
            assertion.actual = UITestUtils.is_jwt_valid(token)
            assertion.passed = assertion.actual == assertion.expected
            return

        claims = UITestUtils.decode_jwt(token)
        if claims is None:
            assertion.actual = None
            assertion.passed = False
            assertion.message = "Failed to decode JWT token"
            return

        assertion.actual = claims.get(claim)
        assertion.passed = assertion.actual == assertion.expected

    async def cookie(self, assertion: TestAssertion, page: "Page") -> None:
        """Resolve cookie existence, value or flags."""
        name, _, prop = assertion.path[len("cookie:"):].rpartition(":")
        cookie = await UITestUtils.get_cookie(page, name)

        if prop == "exists":
            assertion.actual = cookie is not None
        elif prop == "value":
            assertion.actual = cookie.value if cookie else None
        elif prop == "secure":
            assertion.actual = cookie.secure if cookie else False
        elif prop == "httpOnly":
            assertion.actual = cookie.http_only if cookie else False
        else:
            assertion.actual = None
            assertion.passed = False
            assertion.message = f"Unknown cookie property: {prop}"
            return

        assertion.passed = assertion.actual == assertion.expected
