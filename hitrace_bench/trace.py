"""Parsed hitrace entries and helpers for comparing their timestamps."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum


@dataclass(frozen=True)
class TimeStamp:
    """A trace timestamp as whole seconds plus the fractional part in microseconds."""

    seconds: int
    micro: int

    def __str__(self) -> str:
        return f"{self.seconds}.{self.micro:6}"


class TraceMarker(Enum):
    """The kind of a tracing_mark_write entry."""

    START_SYNC = "B"
    END_SYNC = "E"
    START_ASYNC = "S"
    END_ASYNC = "F"
    DOT = "C"


def parse_trace_marker(value: str) -> TraceMarker:
    """Turn a marker letter into a TraceMarker, raising ValueError for unknown ones."""
    try:
        return TraceMarker(value)
    except ValueError:
        raise ValueError("Could not parse Trace Marker") from None


@dataclass(frozen=True)
class Trace:
    """A single parsed trace line."""

    name: str
    pid: int
    cpu: int
    timestamp: TimeStamp
    trace_marker: TraceMarker
    number: str
    shorthand: str
    function: str


def difference_of_traces(trace1: Trace, trace2: Trace) -> timedelta:
    """Return the time between the two traces, trace1 minus trace2."""
    return timedelta(
        seconds=trace1.timestamp.seconds - trace2.timestamp.seconds,
        microseconds=trace1.timestamp.micro - trace2.timestamp.micro,
    )