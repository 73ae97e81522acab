"""
article-guard CLI - Score and fix supplement ingredient articles.

Commands:
    article-guard check PATHS...      Validate JSON articles (files or directories)
    article-guard fix PATH            Rewrite regulated terms in one article
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .enforcement import (
    ArticleValidator,
    InputError,
    ParseError,
    Severity,
    ValidatorConfig,
)
from .orchestration import JsonFileSource, expand_paths, run_batch
from .schemas import BatchSummaryResponse, RemediationResponse

app = typer.Typer(help="Compliance and quality scoring for supplement articles")
console = Console()

STATUS_STYLE = {"pass": "green", "warn": "yellow", "fail": "red"}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Compliance and quality scoring for supplement articles."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# =============================================================================
# CHECK
# =============================================================================


@app.command()
def check(
    paths: list[Path] = typer.Argument(..., help="Article JSON files or directories"),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON"),
    lenient: bool = typer.Option(False, "--lenient", help="Report critical compliance terms only"),
    concurrency: int = typer.Option(1, "--concurrency", "-c", min=1, help="Documents validated in parallel"),
    laws: Optional[list[str]] = typer.Option(None, "--law", help="Only check rules under this law (repeatable)"),
    ignore: Optional[list[str]] = typer.Option(None, "--ignore-category", help="Skip a rule category (repeatable)"),
):
    """Validate articles and print grade, score and status per file."""
    config = ValidatorConfig.from_env()
    if lenient:
        config.min_severity = Severity.CRITICAL
    if laws:
        config.compliance_laws = tuple(laws)
    if ignore:
        config.ignore_categories = tuple(ignore)

    try:
        validator = ArticleValidator(config=config)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    sources = expand_paths(paths)
    if not sources:
        console.print("[bold red]Error:[/bold red] no article files found")
        raise typer.Exit(1)

    summary = asyncio.run(run_batch(sources, validator, concurrency))
    failed = bool(summary.failures) or any(r.status == "fail" for r in summary.per_document)

    if as_json:
        typer.echo(BatchSummaryResponse.from_summary(summary).model_dump_json(indent=2))
        if failed:
            raise typer.Exit(1)
        return

    names = [s.name for s in sources]
    failures = {f.name for f in summary.failures}
    reports = iter(summary.per_document)

    table = Table(title="Article Report")
    table.add_column("File", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Grade")
    table.add_column("Status")
    table.add_column("Failed checks")

    for name in names:
        if name in failures:
            table.add_row(name, "-", "-", "[red]ERROR[/red]", "")
            continue
        report = next(reports)
        style = STATUS_STYLE.get(report.status, "white")
        failing = [n for n, r in report.results.items() if not r.passed]
        table.add_row(
            name,
            f"{report.total_score:g}",
            report.grade,
            f"[{style}]{report.status.upper()}[/{style}]",
            ", ".join(failing),
        )

    console.print(table)

    for failure in summary.failures:
        console.print(f"[red]{failure.name}: {failure.error_type}: {failure.message}[/red]")

    histogram = "  ".join(f"{g}:{n}" for g, n in summary.grade_histogram.items())
    console.print(
        f"\nGrades {histogram}  |  pass rate {summary.pass_rate:.0%}  |  "
        f"average {summary.average_score:g}  |  critical terms {summary.critical_issue_count}"
    )

    if failed:
        raise typer.Exit(1)
    console.print("\n[bold green]All articles passed![/bold green]")


# =============================================================================
# FIX
# =============================================================================


@app.command()
def fix(
    path: Path = typer.Argument(..., help="Article JSON file"),
    threshold: str = typer.Option("low", "--threshold", "-t", help="Lowest severity to rewrite"),
    in_place: bool = typer.Option(False, "--in-place", help="Write the fixed article back to PATH"),
    as_json: bool = typer.Option(False, "--json", help="Print changes and fixed article as JSON"),
):
    """Rewrite regulated terms into approved phrasing."""
    try:
        severity = Severity.parse(threshold)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    try:
        document = asyncio.run(JsonFileSource(path).load())
        result = ArticleValidator(config=ValidatorConfig.from_env()).remediate(document, severity)
    except (ParseError, InputError, OSError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if in_place and result.change_count:
        path.write_text(
            json.dumps(result.fixed_document, ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )

    if as_json:
        typer.echo(RemediationResponse.from_result(result).model_dump_json(indent=2))
        return

    if not result.change_count:
        console.print("[bold green]No regulated terms found.[/bold green]")
        return

    table = Table(title=f"Changes ({result.change_count})")
    table.add_column("Field", style="bold")
    table.add_column("Severity")
    table.add_column("Original", style="red")
    table.add_column("Replacement", style="green")

    for change in result.changes:
        table.add_row(change.field_path, change.severity.value, change.original, change.replacement)

    console.print(table)
    if in_place:
        console.print(f"\n[green]Wrote {path}[/green]")
    else:
        console.print("\n[yellow]Dry run. Use --in-place to write the changes.[/yellow]")


# =============================================================================
# VERSION
# =============================================================================


@app.command()
def version():
    """Show article-guard version."""
    from . import __version__
    console.print(f"article-guard v{__version__}")


if __name__ == "__main__":
    app()
