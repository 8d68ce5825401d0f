"""YAML suite parser."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from verdict.config.schema import VerdictConfig
from verdict.core.models import (
    ApiResponse,
    BrowserKind,
    ScreenshotPolicy,
    TestCase,
    TestSuite,
    UITestCase,
    UITestSuite,
    Viewport,
)
from verdict.errors import SuiteFileError

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR} patterns in data with environment variables.

    Args:
        data: Data structure (dict, list, or str)

    Returns:
        Data with environment variables expanded
    """
    if isinstance(data, str):
        pattern = re.compile(r'\$\{([^}]+)\}')
        return pattern.sub(lambda match: os.environ.get(match.group(1), ''), data)
    elif isinstance(data, dict):
        return {k: expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    else:
        return data


def normalize_keys(data: Any) -> Any:
    """Convert camelCase mapping keys (``testCases``) to snake_case."""
    if isinstance(data, dict):
        return {
            _CAMEL_BOUNDARY.sub("_", k).lower() if isinstance(k, str) else k: normalize_keys(v)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [normalize_keys(item) for item in data]
    return data


class SuiteParser:
    """Parse API and UI test suites from YAML.

    Fields a UI test case leaves out fall back to the configured browser and
    UI defaults.
    """

    def __init__(self, config: Optional[VerdictConfig] = None):
        self.config = config or VerdictConfig.get_default()

    def load(self, path: Path) -> dict:
        """Read a suite file into a normalized dictionary.

        Raises:
            SuiteFileError: If the file is missing, empty or not a mapping
        """
        if not path.exists():
            raise SuiteFileError(f"Suite file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SuiteFileError(f"Invalid YAML in {path}: {e}") from e

        if not data:
            raise SuiteFileError(f"Empty suite file: {path}")
        if not isinstance(data, dict):
            raise SuiteFileError(f"Suite file must contain a mapping: {path}")

        return normalize_keys(expand_env_vars(data))

    def is_ui_suite(self, data: dict) -> bool:
        """Guess whether a loaded suite is a UI suite."""
        if data.get("type") in ("ui", "api"):
            return data["type"] == "ui"
        ui_keys = {"before_all", "after_all", "project_id"}
        case_keys = {"browser", "headless", "viewport", "capture_screenshot"}
        if ui_keys & data.keys():
            return True
        return any(case_keys & case.keys() for case in data.get("test_cases", []) if isinstance(case, dict))

    def parse_api(self, path: Path) -> TestSuite:
        """Parse an API test suite from a YAML file."""
        return self.parse_api_dict(self.load(path))

    def parse_ui(self, path: Path) -> UITestSuite:
        """Parse a UI test suite from a YAML file."""
        return self.parse_ui_dict(self.load(path))

    def parse_api_dict(self, data: dict) -> TestSuite:
        """Build a TestSuite from a normalized dictionary."""
        return TestSuite(
            id=str(data.get("id", "suite")),
            name=data.get("name", "Untitled suite"),
            test_cases=[self._parse_test_case(c, i) for i, c in enumerate(data.get("test_cases", []))],
            request_id=data.get("request_id"),
            before_each=data.get("before_each"),
            after_each=data.get("after_each"),
        )

    def parse_ui_dict(self, data: dict) -> UITestSuite:
        """Build a UITestSuite from a normalized dictionary."""
        return UITestSuite(
            id=str(data.get("id", "ui-suite")),
            name=data.get("name", "Untitled UI suite"),
            test_cases=[self._parse_ui_test_case(c, i) for i, c in enumerate(data.get("test_cases", []))],
            project_id=data.get("project_id"),
            before_all=data.get("before_all"),
            after_all=data.get("after_all"),
            before_each=data.get("before_each"),
            after_each=data.get("after_each"),
        )

    def _parse_test_case(self, data: dict, index: int) -> TestCase:
        return TestCase(
            id=str(data.get("id", f"case-{index + 1}")),
            name=data.get("name", f"Test case {index + 1}"),
            script=data.get("script", ""),
            description=data.get("description"),
            enabled=bool(data.get("enabled", True)),
            timeout=int(data.get("timeout", 5000)),
            tags=list(data.get("tags") or []),
        )

    def _parse_ui_test_case(self, data: dict, index: int) -> UITestCase:
        browser_config = self.config.browser
        viewport_data = data.get("viewport") or {}
        try:
            browser = BrowserKind(data.get("browser", browser_config.kind))
            capture = ScreenshotPolicy(data.get("capture_screenshot", self.config.ui.capture_screenshot))
        except ValueError as e:
            raise SuiteFileError(f"Test case {index + 1}: {e}") from e

        return UITestCase(
            id=str(data.get("id", f"ui-case-{index + 1}")),
            name=data.get("name", f"UI test case {index + 1}"),
            script=data.get("script", ""),
            description=data.get("description"),
            enabled=bool(data.get("enabled", True)),
            timeout=int(data.get("timeout", self.config.ui.timeout)),
            tags=list(data.get("tags") or []),
            browser=browser,
            headless=bool(data.get("headless", browser_config.headless)),
            viewport=Viewport(
                width=int(viewport_data.get("width", browser_config.viewport.width)),
                height=int(viewport_data.get("height", browser_config.viewport.height)),
            ),
            capture_screenshot=capture,
        )

    def validate(self, suite: TestSuite | UITestSuite) -> tuple[bool, list[str], list[str]]:
        """Validate a parsed suite.

        Args:
            suite: Parsed suite

        Returns:
            Tuple of (is_valid, errors, warnings)
        """
        errors = []
        warnings = []

        if not suite.test_cases:
            warnings.append("No test cases defined")

        case_ids = set()
        for test_case in suite.test_cases:
            if test_case.id in case_ids:
                errors.append(f"Duplicate test case ID: {test_case.id}")
            case_ids.add(test_case.id)

            if not test_case.script or not test_case.script.strip():
                errors.append(f"Test case {test_case.id} has an empty script")

            if test_case.timeout <= 0:
                errors.append(f"Test case {test_case.id} has a non-positive timeout")

            if not test_case.enabled:
                warnings.append(f"Test case {test_case.id} is disabled")

        is_valid = len(errors) == 0
        return is_valid, errors, warnings


def load_json_or_yaml(path: Path) -> Any:
    """Load a response/request fixture file (JSON is valid YAML)."""
    if not path.exists():
        raise SuiteFileError(f"File not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SuiteFileError(f"Invalid JSON/YAML in {path}: {e}") from e


def parse_response(data: Optional[dict]) -> ApiResponse:
    """Build an ApiResponse from a captured-response mapping."""
    if not isinstance(data, dict) or "status" not in data:
        raise SuiteFileError("Response file must be a mapping with a 'status' field")

    return ApiResponse(
        status=int(data["status"]),
        status_text=data.get("statusText", data.get("status_text", "")),
        headers=dict(data.get("headers") or {}),
        data=data.get("data"),
        response_time=data.get("responseTime", data.get("response_time", 0)),
        size=int(data.get("size", 0)),
    )
