"""Browser session lifecycle for UI tests."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any, Optional, Protocol

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, ConsoleMessage, Page, Playwright

from verdict.core.models import BrowserKind, Viewport

logger = logging.getLogger(__name__)


class BrowserLauncher(Protocol):
    """Source of browsers for a session."""

    async def launch(self, kind: BrowserKind, headless: bool) -> "Browser":
        ...

    async def stop(self) -> None:
        ...


class PlaywrightLauncher:
    """Launch local browsers through Playwright."""

    def __init__(self, launch_args: Optional[list[str]] = None):
        self.launch_args = launch_args
        self._playwright: Optional["Playwright"] = None

    async def launch(self, kind: BrowserKind, headless: bool) -> "Browser":
        from playwright.async_api import async_playwright

        if self._playwright is None:
            self._playwright = await async_playwright().start()

        kind = BrowserKind(kind)
        browser_type = getattr(self._playwright, kind.value)

        options: dict[str, Any] = {"headless": headless}
        if headless and kind == BrowserKind.CHROMIUM and self.launch_args:
            options["args"] = list(self.launch_args)

        logger.info(f"Launching {kind.value} (headless={headless})")
        return await browser_type.launch(**options)

    async def stop(self) -> None:
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None


class BrowserSession:
    """One browser, one context and one page owned by a single execution.

    Use as an async context manager; the page, context, browser and launcher
    are released on every exit path and close errors are only logged.
    """

    def __init__(
        self,
        kind: BrowserKind = BrowserKind.CHROMIUM,
        headless: bool = True,
        viewport: Optional[Viewport] = None,
        launcher: Optional[BrowserLauncher] = None,
    ):
        self.kind = BrowserKind(kind)
        self.headless = headless
        self.viewport = viewport or Viewport()
        self.launcher = launcher if launcher is not None else PlaywrightLauncher()

        self.session_id = str(uuid.uuid4())[:8]
        self.browser: Optional["Browser"] = None
        self.context: Optional["BrowserContext"] = None
        self.page: Optional["Page"] = None
        self.console_logs: list[str] = []

    async def setup(self) -> None:
        """Launch the browser and open the context and page."""
        logger.info(f"Setting up session {self.session_id}")

        self.browser = await self.launcher.launch(self.kind, self.headless)
        self.context = await self.browser.new_context(viewport=self.viewport.to_dict())
        self.page = await self.context.new_page()
        self.page.on("console", self._on_console)

    def _on_console(self, message: "ConsoleMessage") -> None:
        self.console_logs.append(f"{message.type}: {message.text}")

    async def teardown(self) -> None:
        """Close page, context, browser and launcher, logging any errors."""
        logger.info(f"Tearing down session {self.session_id}")

        for name, resource in (("page", self.page), ("context", self.context), ("browser", self.browser)):
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                logger.warning(f"Failed to close {name}: {e}")

        self.page = None
        self.context = None
        self.browser = None

        try:
            await self.launcher.stop()
        except Exception as e:
            logger.warning(f"Failed to stop browser launcher: {e}")

    def bindings(self) -> dict[str, Any]:
        """Script bindings for the session's resources."""
        return {"page": self.page, "browser": self.browser, "context": self.context}

    async def __aenter__(self) -> "BrowserSession":
        try:
            await self.setup()
        except BaseException:
            await self.teardown()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.teardown()
