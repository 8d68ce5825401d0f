"""Execution of user-authored test scripts against explicit bindings."""

from __future__ import annotations

import ast
import builtins
import inspect
import logging
from types import CodeType
from typing import Any

from verdict.errors import ScriptValidationError

logger = logging.getLogger(__name__)
script_logger = logging.getLogger("verdict.script")

# Builtins resolvable from a script; everything else must come from bindings.
SAFE_BUILTIN_NAMES = [
    "abs", "all", "any", "bool", "callable", "dict", "divmod", "enumerate",
    "filter", "float", "format", "frozenset", "hasattr", "int", "isinstance",
    "issubclass", "len", "list", "map", "max", "min", "next", "range", "repr",
    "reversed", "round", "set", "slice", "sorted", "str", "sum", "tuple", "zip",
    "Exception", "AssertionError", "AttributeError", "IndexError", "KeyError",
    "LookupError", "RuntimeError", "StopIteration", "TypeError", "ValueError",
    "ZeroDivisionError",
]
SAFE_BUILTINS = {name: getattr(builtins, name) for name in SAFE_BUILTIN_NAMES}


class ScriptConsole:
    """``console`` binding that forwards script output to logging."""

    def __init__(self, prefix: str = "[TEST]", target: logging.Logger = script_logger):
        self.prefix = prefix
        self._logger = target

    def _emit(self, level: int, args: tuple) -> None:
        text = " ".join(str(a) for a in args)
        self._logger.log(level, f"{self.prefix} {text}")

    def log(self, *args: Any) -> None:
        self._emit(logging.INFO, args)

    def info(self, *args: Any) -> None:
        self._emit(logging.INFO, args)

    def debug(self, *args: Any) -> None:
        self._emit(logging.DEBUG, args)

    def warn(self, *args: Any) -> None:
        self._emit(logging.WARNING, args)

    warning = warn

    def error(self, *args: Any) -> None:
        self._emit(logging.ERROR, args)


# Attributes that lead from ordinary objects to frames, code objects, module
# globals or the class hierarchy. Private names are rejected separately.
INTROSPECTION_ATTRIBUTES = frozenset({
    "f_back", "f_builtins", "f_code", "f_globals", "f_locals", "f_trace",
    "mro", "func_globals", "func_code",
})
INTROSPECTION_PREFIXES = ("co_", "gi_", "cr_", "ag_", "tb_")


class _CapabilityCheck(ast.NodeVisitor):
    """Reject constructs that reach outside the injected bindings."""

    def __init__(self, filename: str):
        self.filename = filename

    def _reject(self, node: ast.AST, reason: str) -> None:
        raise ScriptValidationError(
            f"{reason} is not allowed in test scripts ({self.filename}, line {getattr(node, 'lineno', '?')})"
        )

    def visit_Import(self, node: ast.Import) -> None:
        self._reject(node, "import")

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        self._reject(node, "import")

    def visit_Global(self, node: ast.Global) -> None:
        self._reject(node, "global")

    def visit_Nonlocal(self, node: ast.Nonlocal) -> None:
        self._reject(node, "nonlocal")

    def visit_Name(self, node: ast.Name) -> None:
        if node.id.startswith("__"):
            self._reject(node, f"name '{node.id}'")
        self.generic_visit(node)

    def _check_attribute(self, node: ast.AST, attr: str) -> None:
        if attr.startswith("_") or attr in INTROSPECTION_ATTRIBUTES or attr.startswith(INTROSPECTION_PREFIXES):
            self._reject(node, f"attribute '{attr}'")

    def visit_Attribute(self, node: ast.Attribute) -> None:
        # innermost first, so `a.b.c` reports `b` before `c`
        self.generic_visit(node)
        self._check_attribute(node, node.attr)

    def visit_MatchClass(self, node: ast.MatchClass) -> None:
        # `case C(attr=x)` reads attributes too
        for attr in node.kwd_attrs:
            self._check_attribute(node, attr)
        self.generic_visit(node)


def compile_script(source: str, filename: str = "<test script>") -> CodeType:
    """Validate and compile a test script.

    Top-level ``await`` is allowed so browser scripts can drive the page
    directly.

    Raises:
        ScriptValidationError: On syntax errors or disallowed constructs
    """
    try:
        tree = ast.parse(source or "", filename=filename, mode="exec")
    except SyntaxError as e:
        raise ScriptValidationError(f"Syntax error in {filename}, line {e.lineno}: {e.msg}") from e

    _CapabilityCheck(filename).visit(tree)

    return compile(tree, filename, "exec", flags=ast.PyCF_ALLOW_TOP_LEVEL_AWAIT)


async def run_script(source: str, bindings: dict[str, Any], filename: str = "<test script>") -> None:
    """Run a test script with exactly ``bindings`` in scope.

    Each call evaluates in a new globals dict, so scripts never share state.
    Exceptions raised by the script propagate to the caller.
    """
    code = compile_script(source, filename)
    scope = {"__builtins__": SAFE_BUILTINS, **bindings}

    logger.debug(f"Running {filename} with bindings {sorted(bindings)}")
    result = eval(code, scope)

    if inspect.iscoroutine(result):
        await result
