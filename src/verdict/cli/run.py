"""Run CLI commands."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional, Sequence

import typer
from rich.console import Console
from rich.table import Table

from verdict.cli.config import get_config
from verdict.core.models import TestExecutionResult, TestStatus

console = Console()
app = typer.Typer(no_args_is_help=True)

STATUS_STYLES = {
    TestStatus.PASS: ("✓", "green"),
    TestStatus.FAIL: ("✗", "red"),
    TestStatus.ERROR: ("!", "red"),
    TestStatus.SKIP: ("-", "yellow"),
}


def print_results(results: Sequence[TestExecutionResult], title: str) -> None:
    """Print a results table followed by failing assertion details."""
    table = Table(title=title)
    table.add_column("Test case")
    table.add_column("Status")
    table.add_column("Assertions", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Error", overflow="fold")

    for result in results:
        icon, color = STATUS_STYLES[result.status]
        table.add_row(
            result.test_name,
            f"[{color}]{icon} {result.status.value.upper()}[/{color}]",
            f"{result.passed_count}/{len(result.assertions)}",
            f"{result.execution_time}ms",
            result.error_message or "",
        )

    console.print()
    console.print(table)

    for result in results:
        failed = [a for a in result.assertions if not a.passed]
        if failed:
            console.print(f"\n[bold]{result.test_name}[/bold]")
            for assertion in failed:
                console.print(f"  [red]✗[/red] {assertion.message} [dim](actual: {assertion.actual!r})[/dim]")


def _finish(results: Sequence[TestExecutionResult], title: str, output_json: bool) -> None:
    if output_json:
        console.print_json(json.dumps([r.to_dict() for r in results], ensure_ascii=False, default=str))
    else:
        print_results(results, title)

    if any(r.status in (TestStatus.FAIL, TestStatus.ERROR) for r in results):
        raise typer.Exit(1)


@app.command("api")
def run_api_cmd(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Path to API suite YAML file", exists=True),
    response_file: Path = typer.Option(
        ..., "--response", "-r", help="Captured response (JSON or YAML)", exists=True
    ),
    request_file: Optional[Path] = typer.Option(
        None, "--request", "-q", help="Request that produced the response (JSON or YAML)", exists=True
    ),
    retries: Optional[int] = typer.Option(
        None, "--retries", help="Extra attempts for cases that do not pass"
    ),
    parallel: Optional[bool] = typer.Option(
        None, "--parallel/--sequential", help="Interleave test cases"
    ),
    output_json: bool = typer.Option(
        False, "--json", "-j", help="Output results as JSON"
    ),
):
    """Run an API test suite against a captured response."""
    from verdict.core.parser import SuiteParser, load_json_or_yaml, parse_response
    from verdict.core.runner import run_test_suite
    from verdict.errors import SuiteFileError

    config = get_config(ctx)

    try:
        suite = SuiteParser(config).parse_api(file)
        response = parse_response(load_json_or_yaml(response_file))
        request = load_json_or_yaml(request_file) if request_file else None
    except SuiteFileError as e:
        console.print(f"[red]Error loading suite:[/red] {e}")
        raise typer.Exit(1)

    if not output_json:
        console.print(f"\n[bold blue]Running API suite:[/bold blue] {suite.name}")

    results = asyncio.run(run_test_suite(
        suite,
        response,
        request,
        retry_count=retries,
        parallel=parallel,
        config=config,
    ))

    _finish(results, suite.name, output_json)


@app.command("ui")
def run_ui_cmd(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Path to UI suite YAML file", exists=True),
    output_json: bool = typer.Option(
        False, "--json", "-j", help="Output results as JSON"
    ),
):
    """Run a UI test suite in fresh browser sessions."""
    from verdict.core.parser import SuiteParser
    from verdict.core.ui_runner import run_ui_test_suite
    from verdict.errors import SuiteFileError

    config = get_config(ctx)

    try:
        suite = SuiteParser(config).parse_ui(file)
    except SuiteFileError as e:
        console.print(f"[red]Error loading suite:[/red] {e}")
        raise typer.Exit(1)

    if not output_json:
        console.print(f"\n[bold blue]Running UI suite:[/bold blue] {suite.name}")

    results = asyncio.run(run_ui_test_suite(suite, config=config))

    _finish(results, suite.name, output_json)
