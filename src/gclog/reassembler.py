"""Reassembly of physical log lines into logical GC records."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .flags import (
    FLAGS_LINE_PREFIX,
    JDK_BANNER_PREFIXES,
    MEMORY_LINE_PREFIX,
    parse_gc_flags,
    parse_jdk_banner,
    parse_memory,
)
from .models import GCFlags, MemoryStats, PauseEvent
from .pauses import (
    AFTER_FULL_GC_SENTINEL,
    HistogramPredicate,
    bracket_counted_lines,
    has_gc,
    is_inside_histogram_block,
    parse_full_gc_pause,
    parse_gc_pause,
)

logger = logging.getLogger(__name__)


def is_log_finished(
    multiline_log: str, inside_histogram: HistogramPredicate = is_inside_histogram_block
) -> bool:
    """Return True once every bracket opened in the record has been closed."""
    start = 0
    end = 0
    for line in bracket_counted_lines(multiline_log.split("\n"), inside_histogram):
        start += line.count("[")
        end += line.count("]")
    return start == end


class RecordReassembler:
    """Feeds physical lines one at a time and emits completed pause events.

    Header lines (JDK banner, Memory:, CommandLine flags:) are captured the
    first time they appear. A line with unbalanced brackets opens a
    multi-line record which stays open until the whole buffer balances,
    ignoring brackets inside class histogram blocks.
    """

    def __init__(self, inside_histogram: HistogramPredicate = is_inside_histogram_block) -> None:
        self.inside_histogram = inside_histogram
        self.reading_multiline = False
        self.buffer: list[str] = []
        self.jdk_banner = ""
        self.memory = MemoryStats()
        self.flags = GCFlags()
        self.parsed_flags = False
        self.parsed_memory = False
        self.parsed_banner = False
        self.records_completed = 0

    def feed(self, line: str) -> PauseEvent | None:
        line = line.rstrip("\r\n")

        if not self.parsed_flags and line.startswith(FLAGS_LINE_PREFIX):
            self.parsed_flags = True
            self.flags = parse_gc_flags(line, self.memory.physical_memory_bytes)
        elif not self.parsed_memory and line.startswith(MEMORY_LINE_PREFIX):
            self.parsed_memory = True
            self.memory = parse_memory(line)
        elif not self.parsed_banner and line.startswith(JDK_BANNER_PREFIXES):
            self.parsed_banner = True
            self.jdk_banner = parse_jdk_banner(line)
        elif self.reading_multiline:
            self.buffer.append(line)
            if "]" in line:
                return self._complete_record()
        elif line.count("[") != line.count("]"):
            self.reading_multiline = True
            self.buffer = [line]
        elif has_gc(line):
            self.records_completed += 1
            return parse_gc_pause(line)
        return None

    def _complete_record(self) -> PauseEvent | None:
        record = "\n".join(self.buffer)
        if not is_log_finished(record, self.inside_histogram):
            return None
        self.reading_multiline = False
        self.buffer = []
        self.records_completed += 1
        pause = parse_full_gc_pause(record, self.inside_histogram)
        if pause.gc_type == AFTER_FULL_GC_SENTINEL:
            return None
        return pause

    def feed_all(self, lines: Iterable[str]) -> list[PauseEvent]:
        pauses: list[PauseEvent] = []
        for line in lines:
            if (pause := self.feed(line)) is not None:
                pauses.append(pause)
        self.finish()
        logger.debug("reassembled %d records into %d pauses", self.records_completed, len(pauses))
        return pauses

    def finish(self) -> None:
        """Drop a record left open at end of input."""
        if self.reading_multiline:
            logger.warning(
                "log ended inside an unterminated record of %d lines, ignoring it",
                len(self.buffer),
            )
            self.reading_multiline = False
            self.buffer = []
