"""Command line entry point: run the app several times and report the timings."""

from __future__ import annotations

import argparse
import signal
import sys
from dataclasses import dataclass
from datetime import timedelta
from typing import Sequence

from hitrace_bench import device, report
from hitrace_bench.filters import Filter, find_notable_differences

_VERSION = "0.2.2"


@dataclass(frozen=True)
class Args:
    """Options of one benchmark session."""

    all_traces: bool = False
    tries: int = 1
    homepage: str = "https://servo.org"
    trace_buffer: int = 524288
    sleep: int = 10
    computer_output: bool = False
    bundle_name: str = "org.servo.servo"
    bencher: bool = False


def _non_negative(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"{text} is not a non-negative number")
    return value


def parse_args(argv: Sequence[str] | None = None) -> Args:
    """Parse the command line into Args."""
    defaults = Args()
    parser = argparse.ArgumentParser(
        prog="hitrace-bench",
        description="Run servo on an open harmony device and collect timing information",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_VERSION}")
    parser.add_argument(
        "-a", "--all-traces", action="store_true", help="Show all traces for servo"
    )
    parser.add_argument(
        "-n", "--tries", type=_non_negative, default=defaults.tries,
        help="The number of tries we should have to average",
    )
    parser.add_argument(
        "-p", "--homepage", default=defaults.homepage, help="The homepage we try to load"
    )
    parser.add_argument(
        "-t", "--trace-buffer", type=_non_negative, default=defaults.trace_buffer,
        help="Trace Buffer size in KB",
    )
    parser.add_argument(
        "-s", "--sleep", type=_non_negative, default=defaults.sleep,
        help="Number of sleep seconds",
    )
    parser.add_argument(
        "-c", "--computer-output", action="store_true",
        help="Stay silent and only return the miliseconds in a list",
    )
    parser.add_argument(
        "-b", "--bundle-name", default=defaults.bundle_name,
        help="Name of the app bundle to start",
    )
    parser.add_argument("--bencher", action="store_true", help="Use Bencher output format")
    ns = parser.parse_args(argv)
    return Args(**vars(ns))


def default_filters() -> list[Filter]:
    """The timings measured on every run."""
    return [
        Filter(
            name="Surface->LoadStart",
            first=lambda t: t.shorthand == "H" and "on_surface_created_cb" in t.function,
            last=lambda t: t.shorthand == "H" and "load status changed Started" in t.function,
        ),
        Filter(
            name="Load->Compl",
            first=lambda t: t.shorthand == "H" and "load status changed Started" in t.function,
            last=lambda t: t.shorthand == "H" and "PageLoadEndedPrompt" in t.function,
        ),
    ]


def _run(args: Args) -> None:
    filters = default_filters()
    results: dict[str, list[timedelta]] = {}
    errors: dict[str, int] = {}

    for attempt in range(1, args.tries + 1):
        if not args.bencher:
            print(f"Running test {attempt}")
        log_path = device.exec_hdc_commands(args)
        traces = device.read_file(args, log_path)
        for name, outcome in find_notable_differences(traces, filters).items():
            if isinstance(outcome, timedelta):
                results.setdefault(name, []).append(outcome)
            else:
                errors[name] = errors.get(name, 0) + 1

        if args.tries == 1 and args.all_traces:
            print(f"Printing {len(traces)} traces")
            for trace in traces:
                print(repr(trace))
            print("----------------------------------------------------------\n\n")

    if args.computer_output:
        report.print_computer(results)
    elif args.bencher:
        report.write_bencher(results)
    else:
        report.print_differences(args, results, errors)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the benchmark; returns the process exit status."""
    args = parse_args(argv)
    try:
        if not device.is_device_reachable():
            raise device.DeviceError("No phone seems to be reachable")
    except device.DeviceError as exc:
        print(f"Error: Testing reachability of device: {exc}", file=sys.stderr)
        return 1

    def on_interrupt(signum, frame):
        device.stop_tracing(args.trace_buffer)

    previous = signal.signal(signal.SIGINT, on_interrupt)
    try:
        _run(args)
    except (device.DeviceError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        signal.signal(signal.SIGINT, previous)
    return 0


if __name__ == "__main__":
    sys.exit(main())