"""Configuration schema for Verdict using Pydantic."""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field


BrowserType = Literal["chromium", "firefox", "webkit"]
ScreenshotType = Literal["always", "on-failure", "never"]


class ViewportConfig(BaseModel):
    """Viewport configuration."""

    width: int = 1280
    height: int = 720


class RunnerConfig(BaseModel):
    """API suite execution defaults."""

    retry_count: int = Field(default=0, ge=0)
    parallel: bool = False


class BrowserConfig(BaseModel):
    """Browser launch defaults."""

    kind: BrowserType = "chromium"
    headless: bool = True
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)
    launch_args: List[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"]
    )  # Applied to headless chromium only


class UITestConfig(BaseModel):
    """UI test defaults."""

    timeout: int = Field(default=30000, gt=0)  # ms
    capture_screenshot: ScreenshotType = "on-failure"


class ScriptConfig(BaseModel):
    """Script console settings."""

    api_console_prefix: str = "[TEST]"
    ui_console_prefix: str = "[UI Test]"


class VerdictConfig(BaseModel):
    """Root configuration model for Verdict."""

    version: int = 1
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    ui: UITestConfig = Field(default_factory=UITestConfig)
    script: ScriptConfig = Field(default_factory=ScriptConfig)

    @classmethod
    def get_default(cls) -> "VerdictConfig":
        """Return default configuration."""
        return cls()
