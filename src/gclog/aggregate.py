"""Per-GC-type aggregation of pause events."""

from __future__ import annotations

from collections.abc import Iterable

from .models import GroupSummary, PauseEvent, PauseTableRow


def generate_gc_name(pause: PauseEvent) -> str:
    """Group name like "G1 Humongous Allocation - (to-space exhausted)(young)".

    Attributes are sorted so the name does not depend on log order.
    """
    attrs = sorted(f"({attr})" for attr in pause.attributes)
    if not attrs:
        return pause.gc_type
    return f"{pause.gc_type} - {''.join(attrs)}"


def aggregate_pauses(pauses: Iterable[PauseEvent]) -> list[GroupSummary]:
    """Fold pauses into one GroupSummary per GC name, sorted by name."""
    summaries: dict[str, GroupSummary] = {}
    for pause in pauses:
        gc_name = generate_gc_name(pause)
        if gc_name not in summaries:
            summaries[gc_name] = GroupSummary(gc_name=gc_name)
        summaries[gc_name].add(pause)
    return [summaries[name] for name in sorted(summaries)]


def build_pause_rows(pauses: Iterable[PauseEvent]) -> list[PauseTableRow]:
    return [
        PauseTableRow(
            gc_name=summary.gc_name,
            total_pauses=summary.total_pauses,
            total_seconds_paused=summary.total_seconds_paused,
            shortest_pause_seconds=summary.shortest_pause_seconds,
            p50=summary.p50,
            p99=summary.p99,
            longest_pause_seconds=summary.longest_pause_seconds,
        )
        for summary in aggregate_pauses(pauses)
    ]


def find_max_pause(pauses: Iterable[PauseEvent]) -> PauseEvent | None:
    """Return the longest pause; zero-length pauses never qualify."""
    max_pause: PauseEvent | None = None
    max_pause_seconds = 0.0
    for pause in pauses:
        if pause.pause_seconds > max_pause_seconds:
            max_pause_seconds = pause.pause_seconds
            max_pause = pause
    return max_pause
