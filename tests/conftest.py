"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import pytest

from verdict.core.models import ApiResponse


@dataclass
class FakeElement:
    text: str = ""
    visible: bool = True


@dataclass
class FakeConsoleMessage:
    type: str
    text: str


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    async def count(self) -> int:
        return 1 if self.selector in self.page.elements else 0

    async def text_content(self) -> Optional[str]:
        element = self.page.elements.get(self.selector)
        if element is None:
            raise LookupError(f"No element matches {self.selector}")
        return element.text

    async def is_visible(self) -> bool:
        element = self.page.elements.get(self.selector)
        return bool(element and element.visible)


class FakePage:
    """In-memory stand-in for a Playwright page."""

    def __init__(self, url: str = "about:blank", title: str = "", elements: Optional[dict] = None):
        self.url = url
        self._title = title
        self.elements: dict[str, FakeElement] = dict(elements or {})
        self.storage: dict[str, str] = {}
        self.context: Optional["FakeContext"] = None
        self.handlers: dict[str, list[Callable]] = {}
        self.screenshot_error: Optional[Exception] = None
        self.screenshots_taken = 0
        self.closed = False

    def on(self, event: str, handler: Callable) -> None:
        self.handlers.setdefault(event, []).append(handler)

    def emit_console(self, kind: str, text: str) -> None:
        for handler in self.handlers.get("console", []):
            handler(FakeConsoleMessage(kind, text))

    async def goto(self, url: str) -> None:
        await asyncio.sleep(0)
        self.url = url

    async def set_title(self, title: str) -> None:
        self._title = title

    async def title(self) -> str:
        return self._title

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    async def wait_for_timeout(self, ms: float) -> None:
        await asyncio.sleep(ms / 1000)

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        return self.storage.get(arg)

    async def screenshot(self) -> bytes:
        if self.screenshot_error:
            raise self.screenshot_error
        self.screenshots_taken += 1
        return b"fake-png"

    async def close(self) -> None:
        self.closed = True


class FakeContext:
    def __init__(self, browser: "FakeBrowser", viewport: Optional[dict], page: FakePage):
        self.browser = browser
        self.viewport = viewport
        self.page = page
        self.cookie_jar: list[dict] = []
        self.closed = False

    async def new_page(self) -> FakePage:
        self.page.context = self
        return self.page

    async def cookies(self) -> list[dict]:
        return list(self.cookie_jar)

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self, env: "FakeBrowserEnv", kind: str, headless: bool):
        self.env = env
        self.kind = kind
        self.headless = headless
        self.contexts: list[FakeContext] = []
        self.closed = False

    async def new_context(self, viewport: Optional[dict] = None) -> FakeContext:
        context = FakeContext(self, viewport, self.env.page_factory())
        context.cookie_jar = list(self.env.cookies)
        self.contexts.append(context)
        self.env.pages.append(context.page)
        return context

    async def close(self) -> None:
        if self.env.close_error:
            raise self.env.close_error
        self.closed = True


class FakeLauncher:
    def __init__(self, env: "FakeBrowserEnv"):
        self.env = env
        self.stopped = False

    async def launch(self, kind, headless: bool) -> FakeBrowser:
        if self.env.launch_error:
            raise self.env.launch_error
        browser = FakeBrowser(self.env, getattr(kind, "value", kind), headless)
        self.env.browsers.append(browser)
        return browser

    async def stop(self) -> None:
        self.stopped = True


@dataclass
class FakeBrowserEnv:
    """Records every browser, page and launcher created by a runner."""

    page_factory: Callable[[], FakePage] = FakePage
    cookies: list[dict] = field(default_factory=list)
    launch_error: Optional[Exception] = None
    close_error: Optional[Exception] = None
    browsers: list[FakeBrowser] = field(default_factory=list)
    pages: list[FakePage] = field(default_factory=list)
    launchers: list[FakeLauncher] = field(default_factory=list)

    def launcher(self) -> FakeLauncher:
        launcher = FakeLauncher(self)
        self.launchers.append(launcher)
        return launcher


@pytest.fixture
def browser_env():
    """Fake browser collaborator; pass ``browser_env.launcher`` as launcher factory."""
    return FakeBrowserEnv()


@pytest.fixture
def ok_response():
    """Return a successful API response."""
    return ApiResponse(
        status=200,
        status_text="OK",
        headers={"content-type": "application/json"},
        data={
            "status": "success",
            "message": "Hello, Ann",
            "data": {"id": 1},
            "users": [{"name": "Ann", "roles": ["admin", "dev"]}],
        },
        response_time=120,
        size=256,
    )


@pytest.fixture
def sample_config():
    """Return sample configuration dict."""
    return {
        "version": 1,
        "runner": {
            "retry_count": 2,
            "parallel": True,
        },
        "browser": {
            "kind": "firefox",
            "viewport": {"width": 1024, "height": 768},
        },
    }
