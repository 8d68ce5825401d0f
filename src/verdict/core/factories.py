"""Default test cases with runnable sample scripts."""

from __future__ import annotations

import time
from typing import Optional

from verdict.core.models import (
    BrowserKind,
    ScreenshotPolicy,
    TestCase,
    UITestCase,
    Viewport,
)

SAMPLE_TEST_SCRIPT = """\
# Check the response status
asserts.assert_status_code(200, response.status, "Should return OK status")

# Check the response time
asserts.assert_response_time(1000, response.response_time, "Should respond within 1 second")

# Check JSON content
asserts.assert_json_path(response.data, "status", "success", "Status should be success")
asserts.assert_json_path(response.data, "data.id", 1, "ID should be 1")

# Check the response contains expected data
asserts.assert_contains(response.data, {"status": "success"}, "Response should contain success status")

# Check string contents
if response.data.get("message"):
    asserts.assert_contains(response.data["message"], "Hello", "Message should contain greeting")

# Custom validation
users = response.data.get("users")
if isinstance(users, list):
    asserts.assert_equals(True, len(users) > 0, "Should have users in response")

console.log("Test completed successfully")
"""

SAMPLE_UI_TEST_SCRIPT = """\
# Navigate to the page under test
await page.goto("https://example.com")

# Checks are evaluated against the page after the script finishes
asserts.assert_page_title("Example Domain")
asserts.assert_element_exists("h1")
asserts.assert_element_text("h1", "Example Domain")
asserts.assert_element_visible("a")
asserts.assert_url_contains("example.com")

console.log("UI test completed")
"""


def generate_sample_test_script() -> str:
    """Return a sample API test script."""
    return SAMPLE_TEST_SCRIPT


def generate_sample_ui_test_script() -> str:
    """Return a sample UI test script."""
    return SAMPLE_UI_TEST_SCRIPT


def _millis() -> int:
    return int(time.time() * 1000)


def create_default_test_case(request_id: int, request_name: str) -> TestCase:
    """Create a default API test case for a request."""
    return TestCase(
        id=f"test_{request_id}_{_millis()}",
        name=f"Test {request_name}",
        description=f"Automated test for {request_name}",
        enabled=True,
        script=generate_sample_test_script(),
        timeout=5000,
    )


def create_default_ui_test_case(
    name: str = "UI Test",
    browser: BrowserKind = BrowserKind.CHROMIUM,
    viewport: Optional[Viewport] = None,
) -> UITestCase:
    """Create a default UI test case."""
    return UITestCase(
        id=f"ui_test_{_millis()}",
        name=name,
        description=f"Browser test {name}",
        enabled=True,
        script=generate_sample_ui_test_script(),
        timeout=30000,
        browser=BrowserKind(browser),
        headless=True,
        viewport=viewport or Viewport(),
        capture_screenshot=ScreenshotPolicy.ON_FAILURE,
    )
