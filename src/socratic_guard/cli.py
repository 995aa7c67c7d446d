"""
socratic-guard CLI - Check AI responses against the Socratic interaction policy.

Commands:
    socratic-guard check [PATH]      Classify a response file (or stdin)
    socratic-guard exchange PATH     Classify the assistant turns of a JSON transcript
    socratic-guard rules             List the registered detection patterns
    socratic-guard serve             Run the HTTP API
    socratic-guard version           Show version

Exit codes (check, exchange):
    0 = compliant, 1 = non_compliant, 2 = error
"""

import json
import logging
import os
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import EngineConfig
from .enforcement import (
    ComplianceEngine,
    ComplianceReport,
    Verdict,
    dump_ruleset,
    load_ruleset,
)
from .errors import ComplianceError

app = typer.Typer(help="Check that AI coding assistants guide with questions")
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

EXIT_COMPLIANT = 0
EXIT_NON_COMPLIANT = 1
EXIT_ERROR = 2

SEVERITY_STYLES = {"low": "cyan", "medium": "yellow", "high": "red"}


def _configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else os.environ.get("SOCRATIC_GUARD_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    return typer.Exit(EXIT_ERROR)


def _build_engine(ruleset: Path | None, **overrides) -> ComplianceEngine:
    config = EngineConfig.from_env().with_overrides(
        **{k: v for k, v in overrides.items() if v is not None}
    )
    if ruleset is None:
        return ComplianceEngine(config)
    loaded = load_ruleset(ruleset, config)
    return ComplianceEngine(config, loaded.library, loaded.question_bank)


def _read_input(path: str | None) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _print_report(report: ComplianceReport, title: str = "Compliance Report") -> None:
    for match in report.matches:
        style = SEVERITY_STYLES.get(match.severity.value, "white")
        console.print(
            f"[{style}]\\[{match.severity.value}][/{style}] "
            f"{match.category.value} {match.pattern_id} "
            f"segment #{match.segment_index}: {escape(match.explanation)}"
        )

    table = Table(title=title)
    table.add_column("Category", style="bold")
    table.add_column("Matches", justify="right")
    for category, count in report.category_counts.items():
        table.add_row(category.value, f"[red]{count}[/red]" if count else "0")
    console.print(table)

    if report.is_compliant:
        console.print("[bold green]compliant[/bold green]")
    else:
        console.print(
            f"[bold red]non_compliant[/bold red] "
            f"({len(report.matches)} match(es), max severity {report.max_severity.value})"
        )
        console.print("\n[bold]Ask instead:[/bold]")
        for question in report.suggested_questions:
            console.print(f"  - {escape(question)}")


# =============================================================================
# CHECK
# =============================================================================


@app.command()
def check(
    path: str = typer.Argument(None, help="Response file to classify ('-' or omitted for stdin)"),
    output_format: str = typer.Option("text", "--format", "-f", help="Output format: text or json"),
    ruleset: Path = typer.Option(None, "--ruleset", "-r", help="JSON ruleset file"),
    code_block_lines: int = typer.Option(None, "--code-block-lines", help="Code block line threshold"),
    prose_sentences: int = typer.Option(None, "--prose-sentences", help="Prose sentence threshold"),
    max_input_length: int = typer.Option(None, "--max-input-length", help="Maximum input characters"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging to stderr"),
):
    """Classify one AI response."""
    _configure_logging(verbose)
    if output_format not in ("text", "json"):
        raise _fail(f"Unknown format '{output_format}' (use text or json)")

    try:
        engine = _build_engine(
            ruleset,
            code_block_line_threshold=code_block_lines,
            prose_sentence_threshold=prose_sentences,
            max_input_length=max_input_length,
        )
        report = engine.classify(_read_input(path))
    except ComplianceError as e:
        raise _fail(str(e))
    except (OSError, UnicodeDecodeError) as e:
        raise _fail(f"Cannot read input: {e}")

    if output_format == "json":
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _print_report(report)

    raise typer.Exit(EXIT_COMPLIANT if report.is_compliant else EXIT_NON_COMPLIANT)


# =============================================================================
# EXCHANGE
# =============================================================================


@app.command()
def exchange(
    path: str = typer.Argument(..., help="JSON transcript: list of {role, content} ('-' for stdin)"),
    output_format: str = typer.Option("text", "--format", "-f", help="Output format: text or json"),
    ruleset: Path = typer.Option(None, "--ruleset", "-r", help="JSON ruleset file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging to stderr"),
):
    """Classify every assistant turn of an AI/developer exchange."""
    _configure_logging(verbose)

    try:
        data = json.loads(_read_input(path))
    except (OSError, UnicodeDecodeError) as e:
        raise _fail(f"Cannot read input: {e}")
    except json.JSONDecodeError as e:
        raise _fail(f"Transcript is not valid JSON: {e}")

    turns = data.get("turns") if isinstance(data, dict) else data
    if not isinstance(turns, list) or not all(isinstance(t, dict) for t in turns):
        raise _fail("Transcript must be a list of {role, content} objects")

    try:
        result = _build_engine(ruleset).classify_exchange(turns)
    except ComplianceError as e:
        raise _fail(str(e))

    if output_format == "json":
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        for index, report in result.turn_reports:
            _print_report(report, title=f"Turn {index}")
        console.print(f"\nExchange verdict: [bold]{result.verdict.value}[/bold]")

    raise typer.Exit(EXIT_COMPLIANT if result.verdict is Verdict.COMPLIANT else EXIT_NON_COMPLIANT)


# =============================================================================
# RULES
# =============================================================================


@app.command()
def rules(
    ruleset: Path = typer.Option(None, "--ruleset", "-r", help="JSON ruleset file"),
    export: bool = typer.Option(False, "--export", help="Print the ruleset as JSON"),
):
    """List the registered detection patterns in evaluation order."""
    try:
        engine = _build_engine(ruleset)
    except ComplianceError as e:
        raise _fail(str(e))

    if export:
        typer.echo(json.dumps(dump_ruleset(engine.library, engine.question_bank), indent=2))
        return

    table = Table(title="Detection Patterns")
    table.add_column("#", justify="right")
    table.add_column("Pattern", style="bold", no_wrap=True)
    table.add_column("Category")
    table.add_column("Severity")
    table.add_column("Thresholds")
    for position, pattern in enumerate(engine.library, 1):
        style = SEVERITY_STYLES.get(pattern.severity.value, "white")
        thresholds = ", ".join(f"{k}={v}" for k, v in pattern.params.items()) or "-"
        table.add_row(
            str(position),
            pattern.id,
            pattern.category.value,
            f"[{style}]{pattern.severity.value}[/{style}]",
            thresholds,
        )
    console.print(table)


# =============================================================================
# SERVE
# =============================================================================


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from .api.gateway import create_app

    _configure_logging(False)
    try:
        application = create_app()
    except ComplianceError as e:
        raise _fail(str(e))
    uvicorn.run(application, host=host, port=port)


# =============================================================================
# VERSION
# =============================================================================


@app.command()
def version():
    """Show socratic-guard version."""
    from . import __version__
    console.print(f"socratic-guard v{__version__}")


if __name__ == "__main__":
    app()
