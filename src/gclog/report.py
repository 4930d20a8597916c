"""Assembly of the plain-text diagnostic report."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from io import StringIO
from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .aggregate import build_pause_rows, find_max_pause
from .convert import human_duration, human_time
from .models import GCFlags, MemoryStats, PauseEvent, PauseTableRow
from .reassembler import RecordReassembler
from .recommendations import generate_recommendations

SECTION_UNDERLINE = "--------"
NO_PAUSES = "No Pauses"
REPORT_WIDTH = 240

PAUSE_TABLE_COLUMNS = (
    "GC",
    "Total Pauses",
    "Total Pause Time",
    "Min Pause",
    "P50 Pause",
    "P99 Pause",
    "Max Pause",
)


def format_float(value: float) -> str:
    return f"{value:.2f}"


def build_pause_table_cells(rows: Sequence[PauseTableRow]) -> list[tuple[str, ...]]:
    """Format summary rows into display strings, durations in seconds."""
    return [
        (
            row.gc_name,
            str(row.total_pauses),
            format_float(row.total_seconds_paused),
            format_float(row.shortest_pause_seconds),
            format_float(row.p50),
            format_float(row.p99),
            format_float(row.longest_pause_seconds),
        )
        for row in rows
    ]


def create_pause_table(rows: Sequence[PauseTableRow]) -> Table:
    """Create the GC Summary table, one row per GC name."""
    table = Table(box=box.ASCII, show_header=True, header_style=None, show_lines=True)
    for index, column in enumerate(PAUSE_TABLE_COLUMNS):
        table.add_column(column, justify="left" if index == 0 else "center")
    for cells in build_pause_table_cells(rows):
        # Text keeps rich from reading GC names as markup.
        table.add_row(*(Text(cell) for cell in cells))
    return table


def render_table_text(table: Table) -> str:
    buffer = StringIO()
    console = Console(
        file=buffer, width=REPORT_WIDTH, color_system=None, force_terminal=False, highlight=False
    )
    console.print(table)
    return "\n".join(line.rstrip() for line in buffer.getvalue().splitlines())


def show_max_pause_time(pauses: Iterable[PauseEvent]) -> str:
    max_pause = find_max_pause(pauses)
    if max_pause is None:
        return NO_PAUSES
    return "\n".join(
        [
            f"Timestamp: {human_time(max_pause.epoch_seconds * 1000)}",
            f"Pause Time {human_duration(int(max_pause.pause_seconds * 1000))}",
            f"Pause Type {max_pause.gc_type}",
        ]
    )


def generate_pause_table(pauses: Sequence[PauseEvent]) -> str:
    return render_table_text(create_pause_table(build_pause_rows(pauses)))


def build_report(
    jdk_banner: str,
    memory: MemoryStats,
    flags: GCFlags,
    pauses: Sequence[PauseEvent],
) -> str:
    """Join the report sections; the recommendations block is left out when empty."""
    sections = [
        "GC Summary:",
        SECTION_UNDERLINE,
        jdk_banner,
        memory.physical_memory_str,
        flags.describe(),
        "Max Pause:",
        SECTION_UNDERLINE,
        show_max_pause_time(pauses),
        generate_pause_table(pauses),
    ]
    if recommendations := generate_recommendations(flags, pauses):
        sections.append(recommendations)
    return "\n".join(sections)


def analyze_lines(lines: Iterable[str]) -> str:
    reassembler = RecordReassembler()
    pauses = reassembler.feed_all(lines)
    return build_report(reassembler.jdk_banner, reassembler.memory, reassembler.flags, pauses)


def analyze_file(log_file: Path) -> str:
    """Analyze a GC log file and return the report text.

    Raises:
        OSError: the file cannot be opened
        UnicodeDecodeError: the file is not valid UTF-8
    """
    with log_file.open(encoding="utf-8") as f:
        return analyze_lines(f)
