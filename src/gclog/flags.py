"""Collector configuration inference from the JDK8 log header lines."""

from __future__ import annotations

from .convert import (
    BYTES_PER_GB,
    BYTES_PER_MB,
    convert_bytes_to_gb,
    convert_bytes_to_mb,
    human_bytes_base_1k,
)
from .models import Collector, GCFlags, MemoryStats

FLAGS_LINE_PREFIX = "CommandLine flags: "
MEMORY_LINE_PREFIX = "Memory: "
JDK_BANNER_PREFIXES = ("OpenJDK ", "Java")

COLLECTOR_FLAGS: dict[str, Collector] = {
    "-XX:+UseZGC": "ZGC",
    "-XX:+UseG1GC": "G1GC",
    "-XX:+UseShenandoahGC": "Shenandoah",
    "-XX:+UseParallelGC": "Parallel",
    "-XX:+UseParNewGC": "CMS",
    "-XX:+UseSerialGC": "SerialGC",
}

INITIAL_HEAP_SIZE_FLAG = "-XX:InitialHeapSize="
MAX_HEAP_SIZE_FLAG = "-XX:MaxHeapSize="
MAX_DIRECT_MEMORY_FLAG = "-XX:MaxDirectMemorySize="
G1_REGION_SIZE_FLAG = "-XX:G1HeapRegionSize="
MAX_GC_PAUSE_MILLIS_FLAG = "-XX:MaxGCPauseMillis="

MIN_INITIAL_HEAP_BYTES = 8 * BYTES_PER_MB
DEFAULT_G1_TARGET_PAUSE_MILLIS = 200
G1_TARGET_REGION_COUNT = 2048


def find_flag_value(all_flags: list[str], prefix: str) -> str | None:
    """Return the value of the first flag starting with prefix, if any."""
    for flag in all_flags:
        if flag.startswith(prefix):
            return flag.removeprefix(prefix)
    return None


def get_collector(all_flags: list[str]) -> Collector:
    for flag in all_flags:
        if flag in COLLECTOR_FLAGS:
            return COLLECTOR_FLAGS[flag]
    return "Unknown"


def get_min_heap_size_gb(all_flags: list[str], physical_memory_bytes: int) -> float:
    """Initial heap from -XX:InitialHeapSize, else 1/64 of RAM but at least 8 MiB."""
    if (value := find_flag_value(all_flags, INITIAL_HEAP_SIZE_FLAG)) is not None:
        return convert_bytes_to_gb(int(value))
    expected_min_heap_bytes = physical_memory_bytes / 64
    if expected_min_heap_bytes < MIN_INITIAL_HEAP_BYTES:
        return MIN_INITIAL_HEAP_BYTES / BYTES_PER_GB
    return expected_min_heap_bytes / BYTES_PER_GB


def get_max_heap_size_gb(all_flags: list[str], physical_memory_bytes: int) -> float:
    """Max heap from -XX:MaxHeapSize, else 1/4 of RAM but at least 1 GiB.

    The JDK8 ergonomics give smaller hosts half their memory up to 192 MB;
    servers below that size are not considered.
    """
    if (value := find_flag_value(all_flags, MAX_HEAP_SIZE_FLAG)) is not None:
        return convert_bytes_to_gb(int(value))
    expected_max_heap_bytes = physical_memory_bytes / 4
    if expected_max_heap_bytes < BYTES_PER_GB:
        return 1.0
    return expected_max_heap_bytes / BYTES_PER_GB


def get_max_direct_memory_gb(all_flags: list[str], max_heap_size_gb: float) -> float:
    """Direct memory limit; JDK8 falls back to Runtime.maxMemory() (the max heap)."""
    if (value := find_flag_value(all_flags, MAX_DIRECT_MEMORY_FLAG)) is not None:
        return convert_bytes_to_gb(int(value))
    return max_heap_size_gb


def get_g1_target_millis(all_flags: list[str]) -> int:
    if (value := find_flag_value(all_flags, MAX_GC_PAUSE_MILLIS_FLAG)) is not None:
        return int(value)
    return DEFAULT_G1_TARGET_PAUSE_MILLIS


def get_region_for_heap(heap_size_gb: float) -> float:
    """JDK8 G1 region size: heap / 2048 rounded down to a power of two in [1, 32] MB.

    Heaps sitting exactly on a bucket edge (4, 8, 16, 32, 64 GiB) land in the
    lower bucket.
    """
    region_size_mb = heap_size_gb * 1024 / G1_TARGET_REGION_COUNT
    if region_size_mb <= 2.0:
        return 1.0
    elif region_size_mb <= 4.0:
        return 2.0
    elif region_size_mb <= 8.0:
        return 4.0
    elif region_size_mb <= 16.0:
        return 8.0
    elif region_size_mb <= 32.0:
        return 16.0
    return 32.0


def get_g1_region_size_mb(all_flags: list[str], heap_size_gb: float) -> float:
    # An explicit value is reported as-is, even when G1 would reject it.
    if (value := find_flag_value(all_flags, G1_REGION_SIZE_FLAG)) is not None:
        return convert_bytes_to_mb(int(value))
    return get_region_for_heap(heap_size_gb)


def parse_gc_flags(line: str, physical_memory_bytes: int = 0) -> GCFlags:
    """Build GCFlags from a "CommandLine flags: ..." line.

    Args:
        line: The raw header line
        physical_memory_bytes: RAM from the Memory: line, 0 when unknown

    Returns:
        GCFlags with JDK8 defaults filled in for absent flags

    Raises:
        ValueError: a recognized numeric flag carries a non-integer value
    """
    all_flags = line.split()[2:]
    collector = get_collector(all_flags)
    max_heap_size_gb = get_max_heap_size_gb(all_flags, physical_memory_bytes)
    min_heap_size_gb = get_min_heap_size_gb(all_flags, physical_memory_bytes)
    max_direct_memory_gb = get_max_direct_memory_gb(all_flags, max_heap_size_gb)

    region_size_mb = 0.0
    target_pause_millis = 0
    if collector == "G1GC":
        region_size_mb = get_g1_region_size_mb(all_flags, max_heap_size_gb)
        target_pause_millis = get_g1_target_millis(all_flags)

    return GCFlags(
        collector=collector,
        max_heap_size_gb=max_heap_size_gb,
        min_heap_size_gb=min_heap_size_gb,
        region_size_mb=region_size_mb,
        target_pause_millis=target_pause_millis,
        max_direct_memory_gb=max_direct_memory_gb,
        all_flags=all_flags,
    )


def parse_memory(line: str) -> MemoryStats:
    """Parse "Memory: 4k page, physical 128000000k(127996468k free), swap 0k(0k free)"."""
    physical_raw = line.split(" ")[4]
    total_ram_kb = int(physical_raw.split("(")[0].rstrip("k"))
    total_ram_bytes = total_ram_kb * 1000
    return MemoryStats(
        physical_memory_bytes=total_ram_bytes,
        physical_memory_str=f"Total System RAM:    {human_bytes_base_1k(total_ram_bytes)}",
    )


def parse_jdk_banner(line: str) -> str:
    return line.strip()
