"""Exceptions raised while reading a GC log."""


class GCLogError(Exception):
    """Base class for gclog failures."""


class RecordParseError(GCLogError):
    """A reassembled record did not contain anything parseable."""


class TimestampParseError(GCLogError, ValueError):
    """A wall-clock prefix did not match the JDK8 -XX:+PrintGCDateStamps format."""

    def __init__(self, datetime_str: str) -> None:
        super().__init__(f"unable to parse date time string of {datetime_str!r}")
        self.datetime_str = datetime_str
