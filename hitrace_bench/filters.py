"""Filters that pick a start and an end trace and measure the time between them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Iterable, Sequence

from hitrace_bench.trace import Trace, difference_of_traces


class FilterError(ValueError):
    """Raised when a filter does not select exactly one start and one end trace."""


@dataclass(frozen=True)
class Filter:
    """A named pair of predicates selecting the first and last trace of a timing."""

    name: str
    first: Callable[[Trace], bool]
    last: Callable[[Trace], bool]


def filter_to_duration(traces: Sequence[Trace], flt: Filter) -> timedelta:
    """Return the time between the trace matched by flt.first and the one matched by flt.last."""
    first = [t for t in traces if flt.first(t)]
    last = [t for t in traces if flt.last(t)]
    if len(first) != 1 or len(last) != 1:
        raise FilterError(
            "Your filter functions are not specific or over specific, we got the "
            f"following number of results: name: {flt.name}, first: {len(first)}, "
            f"last: {len(last)}"
        )
    return difference_of_traces(last[0], first[0])


def find_notable_differences(
    traces: Sequence[Trace], filters: Iterable[Filter]
) -> dict[str, timedelta | FilterError]:
    """Apply every filter; each name maps to its duration or the error it produced."""
    results: dict[str, timedelta | FilterError] = {}
    for flt in filters:
        try:
            results[flt.name] = filter_to_duration(traces, flt)
        except FilterError as exc:
            results[flt.name] = exc
    return results