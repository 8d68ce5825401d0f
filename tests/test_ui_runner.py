"""Tests for the UI test runner using an in-memory browser."""

import asyncio

import pytest

from conftest import FakeElement, FakePage
from verdict.config.schema import VerdictConfig
from verdict.core.models import (
    BrowserKind,
    ScreenshotPolicy,
    TestStatus,
    UITestCase,
    UITestSuite,
    Viewport,
)
from verdict.core.ui_runner import UITestRunner, run_ui_test_suite, run_with_timeout, should_capture
from verdict.errors import ScriptTimeoutError


def make_case(script: str, case_id: str = "ui-1", **kwargs) -> UITestCase:
    return UITestCase(id=case_id, name=f"UI case {case_id}", script=script, **kwargs)


def run_case(browser_env, test_case, **kwargs):
    runner = UITestRunner(launcher_factory=browser_env.launcher)
    return asyncio.run(runner.run(test_case, **kwargs))


@pytest.fixture
def dashboard_env(browser_env):
    browser_env.page_factory = lambda: FakePage(
        title="Dashboard",
        elements={"h1": FakeElement("Welcome back"), ".spinner": FakeElement("", visible=False)},
    )
    return browser_env


def test_all_checks_pass(dashboard_env):
    script = (
        'await page.goto("https://app.test/dashboard")\n'
        'asserts.assert_element_exists("h1")\n'
        'asserts.assert_element_text("h1", "Welcome")\n'
        'asserts.assert_page_title("Dashboard")\n'
        'asserts.assert_url_contains("/dashboard")\n'
    )

    result = run_case(dashboard_env, make_case(script))

    assert result.status == TestStatus.PASS
    assert [a.passed for a in result.assertions] == [True, True, True, True]
    assert result.screenshot is None
    assert result.error_message is None


def test_missing_element_fails_and_captures_screenshot(dashboard_env):
    """Failed checks are reported with a screenshot under the default policy."""
    script = (
        'await page.goto("https://app.test/dashboard")\n'
        'asserts.assert_element_exists("#missing")\n'
        'asserts.assert_url_contains("dashboard")\n'
    )

    result = run_case(dashboard_env, make_case(script))

    assert result.status == TestStatus.FAIL
    assert [a.passed for a in result.assertions] == [False, True]
    assert result.assertions[0].actual is False
    assert result.screenshot == "ZmFrZS1wbmc="


def test_never_policy_skips_screenshot(dashboard_env):
    test_case = make_case('asserts.assert_element_exists("#missing")', capture_screenshot=ScreenshotPolicy.NEVER)

    result = run_case(dashboard_env, test_case)

    assert result.status == TestStatus.FAIL
    assert result.screenshot is None
    assert dashboard_env.pages[0].screenshots_taken == 0


def test_always_policy_captures_on_pass(dashboard_env):
    test_case = make_case('asserts.assert_element_exists("h1")', capture_screenshot=ScreenshotPolicy.ALWAYS)

    result = run_case(dashboard_env, test_case)

    assert result.status == TestStatus.PASS
    assert result.screenshot == "ZmFrZS1wbmc="


def test_hidden_element_is_not_visible(dashboard_env):
    result = run_case(dashboard_env, make_case('asserts.assert_element_visible(".spinner")'))

    assert result.status == TestStatus.FAIL
    assert result.assertions[0].actual is False


def test_script_error_keeps_no_verdict_from_checks(dashboard_env):
    script = 'asserts.assert_element_exists("h1")\nraise RuntimeError("boom")'

    result = run_case(dashboard_env, make_case(script))

    assert result.status == TestStatus.ERROR
    assert result.error_message == "boom"
    assert result.assertions == []
    assert result.screenshot == "ZmFrZS1wbmc="


def test_timeout_is_error_and_session_is_released(browser_env):
    result = run_case(browser_env, make_case("await page.wait_for_timeout(5000)", timeout=50))

    assert result.status == TestStatus.ERROR
    assert result.error_message == "Test timeout"
    assert result.execution_time < 5000
    assert browser_env.browsers[0].closed is True
    assert browser_env.pages[0].closed is True
    assert browser_env.launchers[0].stopped is True


def test_launch_failure_is_error(browser_env):
    browser_env.launch_error = RuntimeError("Executable doesn't exist")

    result = run_case(browser_env, make_case('asserts.assert_element_exists("h1")'))

    assert result.status == TestStatus.ERROR
    assert result.error_message == "Executable doesn't exist"
    assert result.assertions == []
    assert result.screenshot is None
    assert browser_env.launchers[0].stopped is True


def test_close_failure_does_not_change_verdict(dashboard_env):
    dashboard_env.close_error = RuntimeError("Target closed")

    result = run_case(dashboard_env, make_case('asserts.assert_element_exists("h1")'))

    assert result.status == TestStatus.PASS
    assert dashboard_env.launchers[0].stopped is True


def test_screenshot_failure_is_ignored(dashboard_env):
    dashboard_env.page_factory = lambda: _broken_camera_page()

    result = run_case(dashboard_env, make_case('asserts.assert_element_exists("#missing")'))

    assert result.status == TestStatus.FAIL
    assert result.screenshot is None


def test_console_messages_are_collected_in_order(browser_env):
    script = (
        'page.emit_console("log", "first")\n'
        'page.emit_console("error", "second")\n'
        'console.log("not a page message")\n'
    )

    result = run_case(browser_env, make_case(script))

    assert result.browser_logs == ["log: first", "error: second"]


def test_session_settings_reach_the_browser(browser_env):
    test_case = make_case("pass", browser=BrowserKind.FIREFOX, headless=False, viewport=Viewport(800, 600))

    run_case(browser_env, test_case)

    [browser] = browser_env.browsers
    assert browser.kind == "firefox"
    assert browser.headless is False
    assert browser.contexts[0].viewport == {"width": 800, "height": 600}


def test_disabled_case_opens_no_session(browser_env):
    result = run_case(browser_env, make_case("pass", enabled=False))

    assert result.status == TestStatus.SKIP
    assert browser_env.browsers == []


def test_hooks_share_the_case_page(browser_env):
    result = run_case(
        browser_env,
        make_case('asserts.assert_url_contains("/login")'),
        before_each='await page.goto("https://app.test/login")',
        after_each='await page.goto("https://app.test/logout")',
    )

    assert result.status == TestStatus.PASS
    assert browser_env.pages[0].url == "https://app.test/logout"


def test_utils_binding_reads_cookies(browser_env):
    browser_env.cookies = [{"name": "sid", "value": "abc", "secure": True, "httpOnly": True}]
    script = (
        'cookie = await utils.get_cookie(page, "sid")\n'
        'if cookie is None or cookie.value != "abc":\n'
        '    raise RuntimeError("cookie not found")\n'
        'asserts.assert_cookie_http_only("sid")\n'
    )

    result = run_case(browser_env, make_case(script))

    assert result.status == TestStatus.PASS


def _broken_camera_page() -> FakePage:
    page = FakePage()
    page.screenshot_error = RuntimeError("screenshot failed")
    return page


def test_cases_run_in_order_with_fresh_sessions(browser_env):
    suite = UITestSuite(
        id="s",
        name="Suite",
        test_cases=[
            make_case('await page.goto("https://app.test/a")', "a"),
            make_case("pass", "b", enabled=False),
            make_case('asserts.assert_url_contains("about:blank")', "c"),
        ],
    )

    results = asyncio.run(run_ui_test_suite(suite, launcher_factory=browser_env.launcher))

    assert [r.test_case_id for r in results] == ["a", "b", "c"]
    assert [r.status for r in results] == [TestStatus.PASS, TestStatus.SKIP, TestStatus.PASS]
    assert len(browser_env.browsers) == 2
    assert all(b.closed for b in browser_env.browsers)


def test_before_all_failure_errors_every_enabled_case(browser_env):
    suite = UITestSuite(
        id="s",
        name="Suite",
        test_cases=[make_case("pass", "a"), make_case("pass", "b", enabled=False)],
        before_all='raise RuntimeError("seed failed")',
        after_all='await page.goto("https://app.test/cleanup")',
    )

    results = asyncio.run(run_ui_test_suite(suite, launcher_factory=browser_env.launcher))

    assert results[0].status == TestStatus.ERROR
    assert results[0].error_message == "beforeAll hook failed: seed failed"
    assert results[1].status == TestStatus.SKIP
    assert len(browser_env.browsers) == 1


def test_suite_hooks_use_their_own_sessions(browser_env):
    suite = UITestSuite(
        id="s",
        name="Suite",
        test_cases=[make_case('asserts.assert_url_contains("about:blank")', "a")],
        before_all='await page.goto("https://app.test/seed")',
        after_all='await page.goto("https://app.test/cleanup")',
    )
    config = VerdictConfig(browser={"kind": "webkit"})

    results = asyncio.run(run_ui_test_suite(suite, config, browser_env.launcher))

    assert results[0].status == TestStatus.PASS
    assert [p.url for p in browser_env.pages] == [
        "https://app.test/seed",
        "about:blank",
        "https://app.test/cleanup",
    ]
    assert browser_env.browsers[0].kind == "webkit"


def test_after_all_failure_keeps_results(browser_env):
    suite = UITestSuite(
        id="s",
        name="Suite",
        test_cases=[make_case("pass", "a")],
        after_all='raise RuntimeError("cleanup failed")',
    )

    results = asyncio.run(run_ui_test_suite(suite, launcher_factory=browser_env.launcher))

    assert [r.status for r in results] == [TestStatus.PASS]


def test_run_with_timeout_returns_result():
    async def quick():
        return 42

    assert asyncio.run(run_with_timeout(quick(), 1000)) == 42


def test_run_with_timeout_cancels_slow_work():
    state = {"cancelled": False}

    async def slow():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            state["cancelled"] = True
            raise

    with pytest.raises(ScriptTimeoutError, match="Test timeout"):
        asyncio.run(run_with_timeout(slow(), 20))
    assert state["cancelled"] is True


@pytest.mark.parametrize(
    "policy,has_failures,errored,expected",
    [
        (ScreenshotPolicy.ALWAYS, False, False, True),
        (ScreenshotPolicy.ON_FAILURE, False, False, False),
        (ScreenshotPolicy.ON_FAILURE, True, False, True),
        (ScreenshotPolicy.ON_FAILURE, False, True, True),
        (ScreenshotPolicy.NEVER, True, True, False),
        ("on-failure", True, False, True),
    ],
)
def test_should_capture(policy, has_failures, errored, expected):
    assert should_capture(policy, has_failures, errored) is expected
