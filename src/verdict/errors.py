"""Exception types raised by Verdict."""

from __future__ import annotations


class VerdictError(Exception):
    """Base class for Verdict errors."""


class ScriptError(VerdictError):
    """A user script could not be prepared for execution."""


class ScriptValidationError(ScriptError):
    """A user script is malformed or reaches outside its bindings."""


class AssertionFailure(AssertionError):
    """Raised by a synchronous check whose assertion did not hold."""


class ConfigError(VerdictError):
    """A configuration file could not be read or does not validate."""


class SuiteFileError(VerdictError, ValueError):
    """A suite file could not be read or parsed."""


class HookError(VerdictError):
    """A lifecycle hook script raised."""


class ScriptTimeoutError(VerdictError):
    """A script did not finish within its timeout."""
