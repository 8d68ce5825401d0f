"""Verdict - script-driven test execution for API responses and browser sessions."""

__version__ = "0.1.0"

from verdict.core.factories import create_default_test_case, create_default_ui_test_case
from verdict.core.runner import TestRunner, run_test_suite
from verdict.core.ui_runner import UITestRunner, run_ui_test_suite

__all__ = [
    "__version__",
    "TestRunner",
    "UITestRunner",
    "run_test_suite",
    "run_ui_test_suite",
    "create_default_test_case",
    "create_default_ui_test_case",
]
