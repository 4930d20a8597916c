"""Pause record parsing for JDK8 -XX:+PrintGCDetails output.

A pause record looks like::

    [<ISO8601-datetime>: ]<uptime>: [<kind> (<attr>)* [, <seconds> secs]]

with arbitrary nested ``[...]`` blocks (G1Ergonomics, reference processing)
that carry no pause information of their own. Full GC records additionally
embed class histograms whose free-text lines contain stray brackets.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Iterator
from datetime import datetime
from typing import Literal, TypeAlias

from .errors import RecordParseError, TimestampParseError
from .models import HeapSizing, PauseEvent

logger = logging.getLogger(__name__)

EPOCH_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"
FULL_GC_TYPE = "Full GC"
BEFORE_FULL_GC_ATTRIBUTE = "before full gc"
AFTER_FULL_GC_SENTINEL = "after full gc"
HISTOGRAM_MARKER = "Histogram"
HISTOGRAM_END_PREFIX = "Total"

HistogramPredicate: TypeAlias = Callable[[str, bool], bool]
ScanState: TypeAlias = Literal[
    "ScanningPrefix", "ScanningType", "ScanningBody", "ScanningAttribute", "ScanningSeconds", "SkippingNested"
]


def has_gc(line: str) -> bool:
    return "GC pause" in line or "GC (" in line or "Full GC " in line


def get_gc_resizing(text: str) -> HeapSizing:
    """Classify the G1Ergonomics heap sizing decision mentioned in a record."""
    if "calculated expansion amount: 0 bytes" in text or "(Heap Sizing) did not expand the heap" in text:
        return "None"
    elif "(Heap Sizing) expand the heap" in text or "(Heap Sizing) attempt heap expansion" in text:
        return "Expansion"
    elif "(Heap Sizing) shrink the heap" in text:
        return "Shrinking"
    return "None"


def parse_epoch(datetime_str: str) -> int:
    """Parse a -XX:+PrintGCDateStamps prefix such as 2021-02-22T01:01:02.120+0000."""
    try:
        return int(datetime.strptime(datetime_str.strip(), EPOCH_FORMAT).timestamp())
    except ValueError as e:
        raise TimestampParseError(datetime_str) from e


def is_inside_histogram_block(line: str, inside: bool) -> bool:
    """Return whether a class histogram block is still open after this line.

    Histogram rows (``[B``, ``[Ljava.lang.Object;``) break bracket counting,
    so a block opened by a "Histogram" line stays suspended until a line
    starting with "Total".
    """
    if inside:
        return not line.strip().startswith(HISTOGRAM_END_PREFIX)
    return HISTOGRAM_MARKER in line


def bracket_counted_lines(
    lines: Iterable[str], inside_histogram: HistogramPredicate = is_inside_histogram_block
) -> Iterator[str]:
    """Yield the lines whose brackets take part in record balancing.

    Histogram marker and "Total" lines are yielded, the rows between them are not.
    """
    inside = False
    for line in lines:
        was_inside = inside
        inside = inside_histogram(line, inside)
        if was_inside and inside:
            continue
        yield line


def is_attribute_kept(attribute: str) -> bool:
    # Sizes and counts like (270720K) are noise; (G1 Humongous Allocation) is not.
    if not attribute:
        return False
    return not any(c.isnumeric() for c in attribute) or "G1" in attribute


def parse_seconds(seconds_str: str, record: str) -> float:
    try:
        seconds = float(seconds_str)
    except ValueError:
        seconds = math.nan
    if not math.isfinite(seconds):
        logger.warning("unable to parse seconds string of %r with line of %r", seconds_str, record)
        return 0.0
    if seconds < 0:
        return 0.0
    return seconds


class PauseScanner:
    """Character-level state machine over the text following the timestamp.

    Text before the first ``[`` is ignored, as is everything outside
    depth 1 of that first bracket group. What remains holds the kind
    token, the parenthesized attributes and the ", <seconds> secs" suffix.
    Nested groups are skipped and the scan ends when the first group closes.
    """

    def __init__(self) -> None:
        self.state: ScanState = "ScanningPrefix"
        self.resume_state: ScanState = "ScanningBody"
        self.attribute_return: ScanState = "ScanningBody"
        self.open_brackets = 0
        self.closed_brackets = 0
        self.kind = ""
        self.is_full_gc = False
        self.attribute = ""
        self.attributes: list[str] = []
        self.seconds_str = ""
        self.done = False

    @property
    def depth(self) -> int:
        return self.open_brackets - self.closed_brackets

    def scan(self, text: str) -> PauseScanner:
        for c in text:
            self.feed(c)
            if self.done:
                break
        return self

    def feed(self, c: str) -> None:
        if c == "[":
            self._open_bracket()
        elif c == "]":
            self._close_bracket()
        elif self.state in ("ScanningPrefix", "SkippingNested"):
            return
        elif self.state == "ScanningType":
            self._scan_type(c)
        elif self.state == "ScanningAttribute":
            self._scan_attribute(c)
        elif self.state == "ScanningSeconds":
            self._scan_seconds(c)
        else:
            self._scan_body(c)

    def _open_bracket(self) -> None:
        self.open_brackets += 1
        if self.depth > 1:
            if self.state != "SkippingNested":
                self.resume_state = self.state
                self.state = "SkippingNested"
        elif not self.kind:
            self.state = "ScanningType"

    def _close_bracket(self) -> None:
        if self.depth == 0:
            return
        self.closed_brackets += 1
        if self.depth == 0:
            self.done = True
        elif self.depth == 1 and self.state == "SkippingNested":
            self.state = self.resume_state

    def _scan_type(self, c: str) -> None:
        if c == " " and self.kind:
            self.is_full_gc = self.kind == "Full"
            self.state = "ScanningBody"
            return
        self.kind += c

    def _scan_body(self, c: str) -> None:
        if c == ",":
            self.state = "ScanningSeconds"
        elif c == "(":
            self._start_attribute()

    def _start_attribute(self) -> None:
        self.attribute_return = self.state
        self.attribute = ""
        self.state = "ScanningAttribute"

    def _scan_attribute(self, c: str) -> None:
        if c == ")":
            if is_attribute_kept(self.attribute):
                self.attributes.append(self.attribute)
            self.attribute = ""
            self.state = self.attribute_return
            return
        self.attribute += c

    def _scan_seconds(self, c: str) -> None:
        if c == " ":
            if self.seconds_str:
                self.done = True
        elif c == "(":
            self._start_attribute()
        elif c != ",":
            self.seconds_str += c


def parse_gc_pause(line: str) -> PauseEvent:
    """Parse a single pause record.

    Examples:
        2021-02-22T01:01:02.120+0000: 22000.498: [GC pause (G1 Humongous Allocation) (young), 0.0911111 secs]
        16142.766: [GC (Allocation Failure)  24639447K->13665474K(26456064K), 0.0911111 secs]
    """
    head, _, gc_pause = line.partition(": ")
    try:
        epoch_seconds = parse_epoch(head)
    except TimestampParseError as e:
        logger.debug("%s, using epoch 0", e)
        epoch_seconds = 0

    scanner = PauseScanner().scan(gc_pause)
    attributes = scanner.attributes
    if scanner.is_full_gc:
        gc_type = FULL_GC_TYPE
    elif attributes:
        gc_type, attributes = attributes[0], attributes[1:]
    else:
        gc_type = scanner.kind

    pause_seconds = 0.0
    if scanner.seconds_str:
        pause_seconds = parse_seconds(scanner.seconds_str, line)

    return PauseEvent(
        is_full_gc=scanner.is_full_gc,
        gc_type=gc_type,
        attributes=attributes,
        pause_seconds=pause_seconds,
        epoch_seconds=epoch_seconds,
        heap_sizing=get_gc_resizing(gc_pause),
    )


def extract_trailing_seconds(line: str) -> str:
    """Return the seconds token of "..., 4.3449655 secs]" style lines."""
    segments = [segment for segment in line.split(" secs]") if segment]
    if not segments:
        return ""
    return segments[-1].split(", ")[-1].strip()


def parse_full_gc_pause(
    record: str, inside_histogram: HistogramPredicate = is_inside_histogram_block
) -> PauseEvent:
    """Parse a reassembled multi-line record, typically a Full GC with class histograms.

    The pause header is the first GC line and decides the type, including
    whether this is a Full GC. The duration is taken from the first line that
    closes every bracket opened so far, and is 0.0 when no such line exists.
    The header's own duration, when present, is the time spent printing the
    histogram and is never used.

    Raises:
        RecordParseError: the record is blank. RecordReassembler never hands
            over a blank record, so only direct callers see this.
    """
    lines = record.split("\n")
    if not any(line.strip() for line in lines):
        raise RecordParseError("empty multi-line record")

    header = next((line for line in lines if has_gc(line)), lines[0])
    base = parse_gc_pause(header)
    attributes = [attr for attr in base.attributes if attr != BEFORE_FULL_GC_ATTRIBUTE]

    pause_seconds = 0.0
    total_open = 0
    total_closed = 0
    for line in bracket_counted_lines(lines, inside_histogram):
        total_open += line.count("[")
        total_closed += line.count("]")
        if total_open != total_closed:
            continue
        if line.endswith(" secs]"):
            pause_seconds = parse_seconds(extract_trailing_seconds(line), line)
            break

    return PauseEvent(
        is_full_gc=base.is_full_gc,
        gc_type=base.gc_type,
        attributes=attributes,
        pause_seconds=pause_seconds,
        epoch_seconds=base.epoch_seconds,
        heap_sizing=get_gc_resizing(record),
    )
