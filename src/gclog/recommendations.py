"""Rule-based tuning advice derived from pause statistics and JVM flags."""

from __future__ import annotations

from collections.abc import Sequence

from .models import GCFlags, PauseEvent, PauseStats, RecommendationThresholds

TO_SPACE_EXHAUSTED = "to-space exhausted"
HUMONGOUS_ALLOCATION = "G1 Humongous Allocation"
RECOMMENDATIONS_HEADER = "recommendations\n---------------"

COLLECTOR_ADVISORIES = {
    "SerialGC": (
        "* Serial GC collector detected. This is an older collector and is only intended "
        "for single core machines. Use G1GC instead."
    ),
    "CMS": (
        "* CMS GC collector detected. This is an older collector and is removed in java 14. "
        "This can actually be a very performant collector, and if the machine is well tuned, "
        "it is best to leave it as it was. However, if you intend to raise the heap size "
        "consider the G1GC collector."
    ),
    "Parallel": (
        "* Parallel GC collector detected. This is an older collector and it will lead to "
        "long pauses. Use G1GC instead."
    ),
    "ZGC": (
        "* ZGC GC collector detected. This is a newer collector optimized for shorter gc "
        "pauses, however it is not available as a production collector on JDK8. "
        "Consider using G1GC or CMS instead."
    ),
    "Shenandoah": (
        "* Shenandoah GC collector detected. This is a newer collector that is only "
        "backported to some JDK8 builds and there may be some unexpected behavior, "
        "consider using the G1GC collector."
    ),
    "Unknown": (
        "* Unknown GC collector detected. Review the JVM flags, the collector could not be "
        "identified from the CommandLine flags line."
    ),
}


def collect_pause_stats(pauses: Sequence[PauseEvent]) -> PauseStats:
    """Tally the counters every rule needs in a single pass."""
    stats = PauseStats(total_pauses=len(pauses))
    for pause in pauses:
        if pause.heap_sizing == "Expansion":
            stats.resizes_up += 1
        elif pause.heap_sizing == "Shrinking":
            stats.resizes_down += 1

        if TO_SPACE_EXHAUSTED in pause.attributes:
            stats.to_space_exhausted += 1
            stats.to_space_exhausted_total_seconds += pause.pause_seconds
            stats.to_space_exhausted_max_seconds = max(
                stats.to_space_exhausted_max_seconds, pause.pause_seconds
            )

        if pause.gc_type == HUMONGOUS_ALLOCATION:
            stats.humongous_collections += 1
            stats.humongous_total_seconds += pause.pause_seconds
        elif pause.is_full_gc:
            stats.full_gcs += 1
            stats.full_gc_total_seconds += pause.pause_seconds
            stats.full_gc_max_seconds = max(stats.full_gc_max_seconds, pause.pause_seconds)
    return stats


def next_power_of_two(value: int) -> int:
    if value <= 1:
        return 1
    return 1 << (value - 1).bit_length()


def recommend_region_size(region_size_mb: float, thresholds: RecommendationThresholds) -> str:
    if abs(region_size_mb - thresholds.max_region_size_mb) < thresholds.region_size_tolerance_mb:
        return (
            f"Region size is already maxed out at {thresholds.max_region_size_mb:.1f} mb. "
            "Therefore one either needs to change the gc collector from G1GC or begin "
            "looking for expensive queries or system bugs"
        )
    suggested = min(next_power_of_two(int(region_size_mb) + 1), int(thresholds.max_region_size_mb))
    return f"Region size is {region_size_mb:.1f} mb. Consider raising it up to {suggested:.1f} mb"


def build_g1_recommendations(
    flags: GCFlags, stats: PauseStats, thresholds: RecommendationThresholds
) -> list[str]:
    recs: list[str] = []
    if stats.to_space_exhausted > 0:
        pct = stats.percentage_of_pauses(stats.to_space_exhausted)
        recs.append(
            f"* {pct:.2f}% of GCs were to-space exhausted adding "
            f"{stats.to_space_exhausted_total_seconds:.2f} total seconds pause time with a max "
            f"pause time of {stats.to_space_exhausted_max_seconds:.2f} seconds, this means the "
            "max heap size was too small for use case during that time. Raising the heap size "
            "will help minimize the chance of this occuring again."
        )
    if stats.humongous_collections > 0:
        pct = stats.percentage_of_pauses(stats.humongous_collections)
        recs.append(
            f"* {pct:.2f}% of GCs were humongous allocations adding "
            f"{stats.humongous_total_seconds:.2f} total seconds pause time, this indicates there "
            "are objects to big for your GC configuration. "
            f"{recommend_region_size(flags.region_size_mb, thresholds)}"
        )
    return recs


def generate_recommendations(
    flags: GCFlags,
    pauses: Sequence[PauseEvent],
    thresholds: RecommendationThresholds | None = None,
) -> str:
    """Build the recommendations section, or "" when no rule fired."""
    thresholds = thresholds or RecommendationThresholds()
    stats = collect_pause_stats(pauses)
    recs: list[str] = []

    if flags.collector == "G1GC":
        recs.extend(build_g1_recommendations(flags, stats, thresholds))
    elif flags.collector != "Unknown" or flags.all_flags:
        # Without a CommandLine flags line there is nothing to review.
        recs.append(COLLECTOR_ADVISORIES[flags.collector])

    if stats.full_gcs > 0 and flags.collector != "Parallel":
        recs.append(
            f"* {stats.percentage_of_pauses(stats.full_gcs):.2f}% of GCs were Full GCs adding "
            f"{stats.full_gc_total_seconds:.2f} total seconds pause time with a max pause time of "
            f"{stats.full_gc_max_seconds:.2f} seconds, this means the max heap size was too small "
            "for use case during that time. Raising the heap size will help minimize the chance "
            "of this occuring."
        )

    heap_delta = abs(flags.max_heap_size_gb - flags.min_heap_size_gb)
    if stats.resize_attempts > 0 and heap_delta > thresholds.heap_size_tolerance_gb:
        recs.append(
            f"* {stats.percentage_of_pauses(stats.resize_attempts):.2f}% of GCs attempted to "
            f"resize the JVM heap, {stats.resizes_up} pauses sized up the heap, "
            f"{stats.resizes_down} pauses sized down the heap. This adds additional time to the "
            "GC and makes pause times more variable, to resolve this set Xms and Xmx to be the "
            "same."
        )

    if not recs:
        return ""
    return "\n".join([RECOMMENDATIONS_HEADER, *recs])
