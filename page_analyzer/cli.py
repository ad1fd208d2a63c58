"""
CLI Interface
=============
Command-line interface for the page analyzer.

Usage:
    python -m page_analyzer analyze <file> [<file> ...] [options]
    python -m page_analyzer position <file>
    python -m page_analyzer inspect <json_path>
"""

from __future__ import annotations

import json
import os
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .engine import AnalyzerConfig, AnalyzerEngine
from .fragment_loader import DocumentParseError, load_pages
from .models import AnalysisResult, SequenceReport
from .page_extractor import DEFAULT_TOLERANCE
from .position_detector import (
    DEFAULT_MARGIN,
    DEFAULT_PAGE_HEIGHT,
    detect_page_number_position,
)
from .validator import SequenceInspector

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="page-analyzer")
def cli():
    """Page Analyzer — printed page numbers and question ranges per page."""
    pass


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True))
@click.option(
    "--output", "-o",
    default=None,
    help="Directory to write <name>_analysis.json files to",
)
@click.option(
    "--workers", "-j",
    default=4,
    type=int,
    help="Number of documents analyzed in parallel",
)
@click.option(
    "--page-height",
    default=DEFAULT_PAGE_HEIGHT,
    type=float,
    help="Page height used to split top from bottom",
)
@click.option("--margin", default=DEFAULT_MARGIN, type=float, help="Page margin")
@click.option(
    "--tolerance",
    default=DEFAULT_TOLERANCE,
    type=float,
    help="Horizontal tolerance of the fallback page number search",
)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.option("--log-file", default=None, help="Path to log file")
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output only JSON results to stdout (for programmatic use)",
)
def analyze(
    files: tuple[str, ...],
    output: str,
    workers: int,
    page_height: float,
    margin: float,
    tolerance: float,
    log_level: str,
    log_file: str,
    json_output: bool,
):
    """Analyze one or more PDFs (or JSON fragment dumps)."""

    if json_output:
        # Keep stdout clean for JSON mode
        log_level = "ERROR"

    config = AnalyzerConfig(
        page_height=page_height,
        margin=margin,
        tolerance=tolerance,
        max_workers=workers,
        output_dir=output,
        log_level=log_level,
        log_file=log_file,
    )
    engine = AnalyzerEngine(config)
    entries = engine.analyze_batch(list(files))
    failed = [e for e in entries if not e.ok]

    if json_output:
        print(json.dumps(
            {
                "success": not failed,
                "results": [
                    e.result.to_dict() if e.ok
                    else {"fileName": e.file_name, "error": e.error}
                    for e in entries
                ],
            },
            indent=2,
            ensure_ascii=False,
        ))
    else:
        console.print()
        console.print(
            Panel.fit(
                f"[bold cyan]Page Analyzer v{__version__}[/]\n"
                f"[dim]Analyzed {len(entries)} document(s)[/]",
                border_style="cyan",
            )
        )
        console.print()

        inspector = SequenceInspector()
        for entry in entries:
            if entry.ok:
                _display_result(entry.result)
                _display_report(inspector.inspect(entry.result))
            else:
                console.print(f"[red]Error:[/] {entry.file_name}: {entry.error}")
                console.print()

    if failed:
        sys.exit(1)


@cli.command()
@click.argument("path", type=click.Path(exists=True))
@click.option(
    "--page-height",
    default=DEFAULT_PAGE_HEIGHT,
    type=float,
    help="Page height used to split top from bottom",
)
def position(path: str, page_height: float):
    """Show the detected printed page number position of a document."""

    try:
        pages = load_pages(path)
    except (FileNotFoundError, DocumentParseError) as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    descriptor = detect_page_number_position(pages, page_height=page_height)

    console.print()
    if descriptor is None:
        console.print(
            f"[yellow]No page number position found in "
            f"{os.path.basename(path)}[/]"
        )
        console.print()
        return

    table = Table(title="Page Number Position", border_style="cyan")
    table.add_column("Property", style="bold")
    table.add_column("Value")
    table.add_row("File", os.path.basename(path))
    table.add_row("Pages", str(len(pages)))
    table.add_row("Vertical", descriptor.vertical.value)
    table.add_row("Horizontal", descriptor.horizontal.value)
    table.add_row("Mean X", f"{descriptor.x:.2f}")
    table.add_row("Mean Y", f"{descriptor.y:.2f}")
    console.print(table)
    console.print()


@cli.command()
@click.argument("json_path", type=click.Path(exists=True))
def inspect(json_path: str):
    """Show the sequence report of a previously saved analysis JSON."""

    try:
        with open(json_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        result = AnalysisResult.model_validate(data)
    except ValueError as e:
        # JSONDecodeError, UnicodeDecodeError and ValidationError
        console.print(
            f"[red]Error:[/] {json_path}: not an analysis result "
            f"({escape(str(e))})"
        )
        sys.exit(1)

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Sequence Report[/]\n"
            f"[dim]File: {json_path}[/]",
            border_style="cyan",
        )
    )
    _display_report(SequenceInspector().inspect(result))


# ─── Display Helpers ──────────────────────────────────────────────────────────


def _display_result(result: AnalysisResult):
    """Display the per-page summary as a table."""
    table = Table(
        title=f"{result.file_name} ({result.total_pages} pages)",
        border_style="cyan",
    )
    table.add_column("Page", justify="right", style="bold")
    table.add_column("Printed", justify="right")
    table.add_column("Questions")
    table.add_column("Range", justify="right")

    for page_index, summary in enumerate(result.page_summary, start=1):
        printed = (
            str(summary.printed_page)
            if summary.printed_page is not None
            else "[dim]—[/]"
        )
        questions = ", ".join(str(q) for q in summary.question_starts)
        table.add_row(
            str(page_index),
            printed,
            questions or "[dim]No question at all[/]",
            summary.range or "[dim]—[/]",
        )

    console.print(table)
    console.print()


def _display_report(report: SequenceReport):
    """Display a sequence report as a rich table."""
    table = Table(title="Sequence Report", border_style="green")
    table.add_column("Observation", style="bold")
    table.add_column("Count", justify="right")
    table.add_column("Detail")

    def pages_cell(indices):
        return ", ".join(str(i) for i in indices) or "-"

    table.add_row(
        "Printed Numbers Found",
        "yes" if report.printed_numbers_found else "no",
        "",
    )
    table.add_row(
        "Pages Without Printed Number",
        str(len(report.pages_without_printed_number)),
        pages_cell(report.pages_without_printed_number),
    )
    table.add_row(
        "Printed Page Breaks",
        str(len(report.printed_page_breaks)),
        ", ".join(
            f"{b.page_index} ({b.previous}→{b.current})"
            for b in report.printed_page_breaks
        ) or "-",
    )
    table.add_row(
        "Duplicate Printed Pages",
        str(len(report.duplicate_printed_pages)),
        pages_cell(report.duplicate_printed_pages),
    )
    table.add_row(
        "Pages Without Questions",
        str(len(report.pages_without_questions)),
        pages_cell(report.pages_without_questions),
    )
    table.add_row(
        "Question Jumps",
        str(len(report.question_jumps)),
        ", ".join(
            f"{b.page_index} (Q{b.previous}→Q{b.current})"
            for b in report.question_jumps
        ) or "-",
    )

    console.print(table)
    console.print()


# ─── Entry point (for python -m page_analyzer.cli) ────────────────────────────


if __name__ == "__main__":
    cli()
