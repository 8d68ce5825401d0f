"""Suite file CLI commands."""

from __future__ import annotations

from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.syntax import Syntax

from verdict.cli.config import get_config

console = Console()
app = typer.Typer(no_args_is_help=True)


@app.command("validate")
def validate_suite(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Path to suite YAML file", exists=True),
):
    """Parse and validate a suite file."""
    from verdict.core.parser import SuiteParser
    from verdict.core.script import compile_script
    from verdict.errors import ScriptValidationError, SuiteFileError

    parser = SuiteParser(get_config(ctx))

    try:
        data = parser.load(file)
        suite = parser.parse_ui_dict(data) if parser.is_ui_suite(data) else parser.parse_api_dict(data)
    except SuiteFileError as e:
        console.print(f"[red]Error parsing suite:[/red] {e}")
        raise typer.Exit(1)

    is_valid, errors, warnings = parser.validate(suite)

    hooks = {
        name: getattr(suite, name, None)
        for name in ("before_all", "after_all", "before_each", "after_each")
    }
    scripts = [(f"test case {tc.id}", tc.script) for tc in suite.test_cases if tc.script]
    scripts += [(f"{name} hook", script) for name, script in hooks.items() if script]
    for label, script in scripts:
        try:
            compile_script(script, f"<{label}>")
        except ScriptValidationError as e:
            errors.append(f"{label}: {e}")
            is_valid = False

    if errors:
        console.print("[red]Validation Errors:[/red]")
        for error in errors:
            console.print(f"  [red]✗[/red] {error}")

    if warnings:
        console.print("[yellow]Warnings:[/yellow]")
        for warning in warnings:
            console.print(f"  [yellow]![/yellow] {warning}")

    if is_valid:
        console.print(f"[green]✓ Suite is valid[/green] ({len(suite.test_cases)} test cases)")
    else:
        raise typer.Exit(1)


@app.command("sample")
def sample_suite(
    kind: str = typer.Argument("api", help="Suite kind: api or ui"),
    name: str = typer.Option("Sample", "--name", "-n", help="Request or test name"),
):
    """Print a sample suite file with a runnable default test case."""
    from verdict.core.factories import create_default_test_case, create_default_ui_test_case

    if kind == "api":
        test_case = create_default_test_case(1, name)
        data = {
            "id": "sample-suite",
            "name": f"{name} suite",
            "type": "api",
            "testCases": [{
                "id": test_case.id,
                "name": test_case.name,
                "description": test_case.description,
                "timeout": test_case.timeout,
                "script": test_case.script,
            }],
        }
    elif kind == "ui":
        test_case = create_default_ui_test_case(name)
        data = {
            "id": "sample-ui-suite",
            "name": f"{name} suite",
            "type": "ui",
            "testCases": [{
                "id": test_case.id,
                "name": test_case.name,
                "description": test_case.description,
                "timeout": test_case.timeout,
                "browser": test_case.browser.value,
                "headless": test_case.headless,
                "viewport": test_case.viewport.to_dict(),
                "captureScreenshot": test_case.capture_screenshot.value,
                "script": test_case.script,
            }],
        }
    else:
        console.print(f"[red]Unknown suite kind:[/red] {kind} (expected api or ui)")
        raise typer.Exit(1)

    content = yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    console.print(Syntax(content, "yaml"))
