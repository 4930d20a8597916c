"""Pydantic models shared by the gclog parsing, aggregation and reporting stages."""

from __future__ import annotations

import math
from typing import Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

# ============================================================
# TYPE ALIASES
# ============================================================

Collector: TypeAlias = Literal["SerialGC", "G1GC", "CMS", "Parallel", "ZGC", "Shenandoah", "Unknown"]
HeapSizing: TypeAlias = Literal["None", "Expansion", "Shrinking"]
SecondsValue: TypeAlias = float
MillisValue: TypeAlias = int

# ============================================================
# PYDANTIC MODELS
# ============================================================


class GCFlags(BaseModel):
    """JVM collector configuration inferred from the CommandLine flags line."""

    model_config = ConfigDict(frozen=True)

    collector: Collector = "Unknown"
    max_heap_size_gb: float = 0.0
    min_heap_size_gb: float = 0.0
    region_size_mb: float = 0.0  # G1GC only
    target_pause_millis: int = 0  # G1GC only
    max_direct_memory_gb: float = 0.0
    all_flags: list[str] = Field(default_factory=list)

    def describe(self) -> str:
        """Render the flags block shown in the report header."""
        lines = [f"collector:           {self.collector}"]
        if self.collector == "G1GC":
            lines.append(f"target pause millis: {self.target_pause_millis}")
            lines.append(f"region size:         {self.region_size_mb:.2f} mb")
        lines.extend(
            [
                f"max heap:            {self.max_heap_size_gb:.2f} gb",
                f"initial heap:        {self.min_heap_size_gb:.2f} gb",
                f"max direct memory:   {self.max_direct_memory_gb:.2f} gb",
                "flags:",
            ]
        )
        return "\n".join(lines) + "\n" + "\n".join(self.all_flags)


class MemoryStats(BaseModel):
    """Physical memory reported by the JVM on its Memory: line."""

    model_config = ConfigDict(frozen=True)

    physical_memory_bytes: int = 0
    physical_memory_str: str = ""


class PauseEvent(BaseModel):
    """One stop-the-world pause extracted from a reassembled log record."""

    model_config = ConfigDict(frozen=True)

    is_full_gc: bool = False
    gc_type: str = ""
    attributes: list[str] = Field(default_factory=list)
    pause_seconds: SecondsValue = Field(default=0.0, ge=0.0)
    epoch_seconds: int = 0
    heap_sizing: HeapSizing = "None"


class DurationHistogram(BaseModel):
    """Millisecond-resolution frequency table answering nearest-rank percentiles."""

    buckets: dict[MillisValue, int] = Field(default_factory=dict)
    count: int = 0

    def increment(self, millis: MillisValue) -> None:
        self.buckets[millis] = self.buckets.get(millis, 0) + 1
        self.count += 1

    def percentile(self, pct: float) -> MillisValue:
        """Return the nearest-rank percentile in milliseconds (0 when empty)."""
        if self.count == 0:
            return 0
        rank = max(1, math.ceil(pct * self.count / 100))
        seen = 0
        for millis in sorted(self.buckets):
            seen += self.buckets[millis]
            if seen >= rank:
                return millis
        return max(self.buckets)


class GroupSummary(BaseModel):
    """Running statistics for every pause sharing one synthesized GC name."""

    gc_name: str
    total_pauses: int = 0
    total_seconds_paused: SecondsValue = 0.0
    shortest_pause_seconds: SecondsValue = 0.0
    longest_pause_seconds: SecondsValue = 0.0
    histogram: DurationHistogram = Field(default_factory=DurationHistogram)

    def add(self, event: PauseEvent) -> None:
        seconds = event.pause_seconds
        if self.total_pauses == 0:
            self.shortest_pause_seconds = seconds
            self.longest_pause_seconds = seconds
        else:
            self.shortest_pause_seconds = min(self.shortest_pause_seconds, seconds)
            self.longest_pause_seconds = max(self.longest_pause_seconds, seconds)
        self.total_pauses += 1
        self.total_seconds_paused += seconds
        self.histogram.increment(round(seconds * 1000))

    def percentile_seconds(self, pct: float) -> SecondsValue:
        return self.histogram.percentile(pct) / 1000.0

    @property
    def p50(self) -> SecondsValue:
        return self.percentile_seconds(50.0)

    @property
    def p99(self) -> SecondsValue:
        return self.percentile_seconds(99.0)


class PauseTableRow(BaseModel):
    """One display row of the GC Summary table."""

    model_config = ConfigDict(frozen=True)

    gc_name: str
    total_pauses: int
    total_seconds_paused: SecondsValue
    shortest_pause_seconds: SecondsValue
    p50: SecondsValue
    p99: SecondsValue
    longest_pause_seconds: SecondsValue


class RecommendationThresholds(BaseModel):
    """Tunables for the recommendation rules."""

    heap_size_tolerance_gb: float = 0.01
    max_region_size_mb: float = 32.0
    region_size_tolerance_mb: float = 0.02


class PauseStats(BaseModel):
    """Single-pass tallies feeding the recommendation rules."""

    total_pauses: int = 0

    to_space_exhausted: int = 0
    to_space_exhausted_total_seconds: SecondsValue = 0.0
    to_space_exhausted_max_seconds: SecondsValue = 0.0

    full_gcs: int = 0
    full_gc_total_seconds: SecondsValue = 0.0
    full_gc_max_seconds: SecondsValue = 0.0

    humongous_collections: int = 0
    humongous_total_seconds: SecondsValue = 0.0

    resizes_up: int = 0
    resizes_down: int = 0

    @property
    def resize_attempts(self) -> int:
        return self.resizes_up + self.resizes_down

    def percentage_of_pauses(self, count: int) -> float:
        if self.total_pauses == 0:
            return 0.0
        return count / self.total_pauses * 100
