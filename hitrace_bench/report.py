"""Summaries of the measured durations in human, computer and Bencher formats."""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping, Sequence

_MICRO = timedelta(microseconds=1)
_COLORS = {"yellow": "33", "green": "32", "red": "31"}
_UNITS = [
    ("d", 86_400 * 10**9),
    ("h", 3_600 * 10**9),
    ("m", 60 * 10**9),
    ("s", 10**9),
    ("ms", 10**6),
    ("µs", 10**3),
    ("ns", 1),
]


@dataclass(frozen=True)
class AvgMinMax:
    """Average, minimum and maximum of a set of durations."""

    avg: timedelta
    min: timedelta
    max: timedelta
    number: int


def avg_min_max(durations: Sequence[timedelta]) -> AvgMinMax | None:
    """Summarise the durations, or return None when there are none."""
    if not durations:
        return None
    return AvgMinMax(
        avg=sum(durations, timedelta(0)) / len(durations),
        min=min(durations),
        max=max(durations),
        number=len(durations),
    )


def _nanoseconds(duration: timedelta) -> int:
    return (duration // _MICRO) * 1000


def _whole_seconds_and_micros(duration: timedelta) -> tuple[int, int]:
    micros = duration // _MICRO
    seconds = micros // 10**6 if micros >= 0 else -((-micros) // 10**6)
    return seconds, micros


def _format_duration(duration: timedelta) -> str:
    nanos = _nanoseconds(duration)
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)
    suffix, size = next((u for u in _UNITS if nanos >= u[1]), _UNITS[-1])
    value = repr(nanos / size)
    if value.endswith(".0"):
        value = value[:-2]
    return f"{sign}{value}{suffix}"


def _use_color() -> bool:
    return sys.stdout.isatty() and "NO_COLOR" not in os.environ


def _paint(text: str, color: str) -> str:
    if not _use_color():
        return text
    return f"\x1b[{_COLORS[color]}m{text}\x1b[0m"


def print_differences(
    args: Any, results: Mapping[str, Sequence[timedelta]], errors: Mapping[str, int]
) -> None:
    """Print the errors and an avg/min/max line per measured filter."""
    print("The following things broke with errors")
    for key, count in errors.items():
        print(f"{key}: {count} errors")

    print(
        f"----name {_paint('avg', 'yellow')} {_paint('min', 'green')} "
        f"{_paint('max', 'red')}------({args.tries}) runs (hp:{args.homepage})"
        "------------------------"
    )
    for key, durations in results.items():
        summary = avg_min_max(durations)
        if summary is None:
            print(f"{key}: _ _ _  (0 runs)")
            continue
        print(
            f"{key}: {_paint(_format_duration(summary.avg), 'yellow')} "
            f"{_paint(_format_duration(summary.min), 'green')} "
            f"{_paint(_format_duration(summary.max), 'red')}  ({summary.number} runs)"
        )


def print_computer(results: Mapping[str, Sequence[timedelta]]) -> None:
    """Print each filter's durations as whole seconds and total microseconds."""
    for key, durations in results.items():
        parts = []
        for duration in durations:
            seconds, micros = _whole_seconds_and_micros(duration)
            parts.append(f"{seconds}.{micros}, ")
        print(f"{key}: {''.join(parts)}")


def difference_to_bencher_decimal(duration: timedelta) -> Decimal:
    """Express a duration as a Decimal count of microseconds."""
    return Decimal(_nanoseconds(duration)).scaleb(-3)


def bencher_json(results: Mapping[str, Sequence[timedelta]]) -> dict[str, dict[str, dict]]:
    """Build the Bencher metric document for the results."""
    document: dict[str, dict[str, dict]] = {}
    for key, durations in results.items():
        entry: dict[str, dict] = {}
        summary = avg_min_max(durations)
        if summary is not None:
            entry["latency"] = {
                "value": float(difference_to_bencher_decimal(summary.avg)),
                "lower_value": float(difference_to_bencher_decimal(summary.min)),
                "upper_value": float(difference_to_bencher_decimal(summary.max)),
            }
        document[key] = entry
    return document


def write_bencher(
    results: Mapping[str, Sequence[timedelta]], path: str | Path = "bench.json"
) -> None:
    """Write the Bencher document as pretty JSON and echo it to stdout."""
    document = bencher_json(results)
    print(document, end="")
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(document, handle, indent=2)