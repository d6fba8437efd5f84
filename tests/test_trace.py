from datetime import timedelta

import pytest

from hitrace_bench.trace import (
    TimeStamp,
    Trace,
    TraceMarker,
    difference_of_traces,
    parse_trace_marker,
)


def make_trace(seconds, micro):
    return Trace(
        name="org.servo.servo",
        pid=1,
        cpu=2,
        timestamp=TimeStamp(seconds, micro),
        trace_marker=TraceMarker.START_SYNC,
        number="1",
        shorthand="H",
        function="fn",
    )


@pytest.mark.parametrize(
    "letter, marker",
    [
        ("B", TraceMarker.START_SYNC),
        ("E", TraceMarker.END_SYNC),
        ("S", TraceMarker.START_ASYNC),
        ("F", TraceMarker.END_ASYNC),
        ("C", TraceMarker.DOT),
    ],
)
def test_parse_trace_marker(letter, marker):
    assert parse_trace_marker(letter) is marker


@pytest.mark.parametrize("letter", ["X", "", "b", "BB"])
def test_parse_trace_marker_rejects_unknown(letter):
    with pytest.raises(ValueError, match="Could not parse Trace Marker"):
        parse_trace_marker(letter)


def test_timestamp_str_full_width():
    assert str(TimeStamp(17864, 716645)) == "17864.716645"


def test_timestamp_str_pads_micro():
    assert str(TimeStamp(1, 5)) == "1.     5"


def test_difference_of_same_trace_is_zero():
    t = make_trace(17864, 716645)
    assert difference_of_traces(t, t) == timedelta(0)


def test_difference_whole_seconds():
    assert difference_of_traces(make_trace(5, 0), make_trace(3, 0)) == timedelta(seconds=2)


@pytest.mark.parametrize(
    "a, b",
    [((10, 500000), (12, 250000)), ((1, 0), (0, 999999)), ((7, 7), (7, 7))],
)
def test_difference_is_antisymmetric(a, b):
    t1, t2 = make_trace(*a), make_trace(*b)
    assert difference_of_traces(t1, t2) == -difference_of_traces(t2, t1)


def test_difference_is_additive():
    t1, t2, t3 = make_trace(10, 100), make_trace(11, 900000), make_trace(15, 42)
    assert difference_of_traces(t3, t1) == difference_of_traces(
        t3, t2
    ) + difference_of_traces(t2, t1)