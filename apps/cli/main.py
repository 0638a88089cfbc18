"""Typer CLI entrypoint for uploading Parasoft findings to Bitbucket."""
from __future__ import annotations

import logging
import os
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from packages.config.settings import BitbucketSettings, RunOptions
from packages.errors import ConfigurationError, ParasoftBitbucketError
from packages.messages.catalog import format_message
from packages.quality_gate.gates import parse_quality_gates
from packages.runner.pipeline import StaticAnalysisRunner
from packages.schema.models import RunResult

__version__ = "1.0.0"

app = typer.Typer(add_completion=False)
console = Console()

_LOG = logging.getLogger(__name__)

_QUALITY_GATE_HELP = (
    "Quality gate in the format 'BITBUCKET_SECURITY_LEVEL=THRESHOLD' (e.g. CRITICAL=1). "
    "The build fails when the number of vulnerabilities is greater than or equal to the threshold. "
    "Available security levels: ALL, CRITICAL, HIGH, MEDIUM, LOW. Repeatable."
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def _configure_logging(debug: bool) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    if any(isinstance(handler, RichHandler) for handler in root.handlers):
        return
    handler = RichHandler(
        console=console,
        show_time=False,
        show_level=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    root.addHandler(handler)


@app.command()
def run(
    report: Optional[str] = typer.Option(
        None,
        "--report",
        help="Path or glob pattern to locate Parasoft static analysis report files. (required)",
        show_default=False,
    ),
    tool_or_java_root_path: Optional[str] = typer.Option(
        None,
        "--parasoftToolOrJavaRootPath",
        help="Path to a Java installation or Parasoft tool (required if JAVA_HOME is not set).",
        show_default=False,
    ),
    quality_gate: List[str] = typer.Option([], "--qualityGate", help=_QUALITY_GATE_HELP, show_default=False),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print version number and exit.",
    ),
) -> None:
    """Upload Parasoft static analysis findings to Bitbucket Code Insights."""

    _configure_logging(debug)

    try:
        gates = parse_quality_gates(quality_gate)
        if not report:
            raise ConfigurationError(
                format_message("missing_required_parameter", "--report"), missing=["--report"]
            )
        if not tool_or_java_root_path and not os.environ.get("JAVA_HOME"):
            raise ConfigurationError(
                format_message("missing_java_parameter", "--parasoftToolOrJavaRootPath"),
                missing=["--parasoftToolOrJavaRootPath"],
            )

        settings = BitbucketSettings.from_env(os.environ)
        options = RunOptions(
            report=report,
            tool_or_java_root_path=tool_or_java_root_path,
            quality_gates=gates,
        )
        result = StaticAnalysisRunner(options, settings).run()
    except ParasoftBitbucketError as exc:
        _LOG.error(str(exc))
        raise typer.Exit(code=1) from exc
    except Exception as exc:  # pragma: no cover - unexpected failure
        _LOG.error(format_message("run_failed", exc), exc_info=True)
        raise typer.Exit(code=1) from exc

    _render_quality_gates(result)
    _LOG.info(format_message("complete"))

    if result.exit_code:
        console.print("[red]Build marked as failed by Parasoft findings[/]")
    else:
        console.print("[green]No failing condition identified[/]")
    raise typer.Exit(code=result.exit_code)


def _render_quality_gates(result: RunResult) -> None:
    if not result.evaluations:
        return
    table = Table(title="Parasoft quality gates")
    table.add_column("Report")
    table.add_column("Gate")
    table.add_column("Observed", justify="right")
    table.add_column("Threshold", justify="right")
    table.add_column("Result")
    for report_path, evaluation in result.evaluations.items():
        for outcome in evaluation.outcomes:
            table.add_row(
                escape(report_path),
                outcome.name,
                str(outcome.observed),
                str(outcome.threshold),
                "[green]PASSED[/]" if outcome.passed else "[red]FAILED[/]",
            )
    console.print(table)


if __name__ == "__main__":  # pragma: no cover - manual execution
    app()
