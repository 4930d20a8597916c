#!/usr/bin/env python3
"""gclog - first pass diagnostic of a JDK8 GC log.

Reads a -XX:+PrintGCDetails log (G1, CMS, Parallel, Serial) and prints:
- JDK banner, physical memory and inferred collector configuration
- The single longest pause
- Per GC type pause counts, totals and P50/P99 percentiles
- Tuning recommendations
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.theme import Theme

from .errors import GCLogError
from .report import analyze_file

__version__ = "1.0.0"

GCLOG_THEME = Theme(
    {
        "critical": "bold red",
        "success": "bold green",
        "info": "cyan",
    }
)

console = Console(theme=GCLOG_THEME)
err_console = Console(theme=GCLOG_THEME, stderr=True)


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose)],
        force=True,
    )


# ============================================================
# TYPER CLI INTERFACE
# ============================================================

app = typer.Typer(
    name="gclog",
    help="gclog analyzes a jdk8 gc log for a first pass diagnostic",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.command()
def analyze(
    log_file: Annotated[
        Path,
        typer.Argument(
            help="Path to GC log file to analyze",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Also write the report to this file (e.g., report.txt)",
            file_okay=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with detailed parsing information",
        ),
    ] = False,
) -> None:
    """Analyze a JDK8 GC log file.

    It will not find all things, but it will help with the obvious things.
    """
    configure_logging(verbose)

    try:
        report = analyze_file(log_file)
    except (OSError, ValueError, GCLogError) as e:
        err_console.print(f"[critical]ERROR: {escape(str(e))}[/critical]", highlight=False)
        sys.exit(1)
    except Exception as e:
        err_console.print(f"[critical]ERROR: {escape(str(e))}[/critical]", highlight=False)
        if verbose:
            err_console.print_exception()
        sys.exit(1)

    console.print(report, markup=False, highlight=False, soft_wrap=True)

    if output:
        output.write_text(report + "\n", encoding="utf-8")
        console.print(f"\n[success]Report written to {output}[/success]")


@app.command()
def version() -> None:
    """Display version."""
    console.print(f"gclog {__version__}")


if __name__ == "__main__":
    app()
