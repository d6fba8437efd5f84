"""Talking to the device through hdc and reading the collected trace file."""

from __future__ import annotations

import re
import shutil
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Any

from hitrace_bench.trace import TimeStamp, Trace, parse_trace_marker

_REMOTE_TRACE = "/data/local/tmp/ohtrace.txt"


class DeviceError(RuntimeError):
    """Raised when the device cannot be driven or its output cannot be read."""


def _hdc() -> str:
    hdc = shutil.which("hdc")
    if hdc is None:
        raise DeviceError("Is hdc in the path?")
    return hdc


def _run(hdc: str, *args: str, error: str | None = None) -> subprocess.CompletedProcess:
    try:
        return subprocess.run([hdc, *args], capture_output=True, check=False)
    except OSError as exc:
        raise DeviceError(error or f"Could not run hdc {' '.join(args)}") from exc


def _finish_trace(hdc: str, buffer: int, error: str | None = None) -> None:
    _run(
        hdc,
        "shell",
        "hitrace",
        "-b",
        str(buffer),
        "--trace_finish",
        "-o",
        _REMOTE_TRACE,
        error=error,
    )


def is_device_reachable() -> bool:
    """Return whether hdc lists any target; another connected IDE can hide the device."""
    hdc = _hdc()
    return bool(_run(hdc, "list", "targets").stdout)


def stop_tracing(buffer: int) -> None:
    """Stop a running trace on the device."""
    _finish_trace(_hdc(), buffer, error="Could not stop trace")


def exec_hdc_commands(args: Any) -> Path:
    """Run the app under tracing on the device and fetch the trace to a local file."""
    verbose = not args.computer_output and not args.bencher
    if verbose:
        print("Executing hdc commands")
    hdc = _hdc()
    _run(hdc, "shell", "aa", "force-stop", args.bundle_name)
    _run(
        hdc,
        "shell",
        "hitrace",
        "-b",
        str(args.trace_buffer),
        "app",
        "graphic",
        "ohos",
        "freq",
        "idle",
        "memory",
        "--trace_begin",
    )
    _run(
        hdc,
        "shell",
        "aa",
        "start",
        "-a",
        "EntryAbility",
        "-b",
        args.bundle_name,
        "-U",
        args.homepage,
        "--ps=--pref",
        "js_disable_jit=true",
    )

    if verbose:
        print(f"Sleeping for {args.sleep}")
    time.sleep(args.sleep)

    # A missing pid means the app crashed or never started.
    pidof = _run(
        hdc, "shell", "pidof", args.bundle_name, error=f"Is `{args.bundle_name}` installed?"
    )
    if not pidof.stdout:
        _finish_trace(hdc, args.trace_buffer)
        raise DeviceError(
            f"{args.bundle_name} did not start or crashed. Please check the application logs."
        )
    stop_tracing(args.trace_buffer)

    tmp_path = Path(tempfile.gettempdir()) / "app.ftrace"
    if verbose:
        print(f"Writing ftrace to {tmp_path}")
    _run(hdc, "file", "recv", _REMOTE_TRACE, str(tmp_path))
    return tmp_path


def build_trace_regex(bundle_name: str) -> re.Pattern[str]:
    """Build the pattern matching tracing_mark_write lines of the given bundle."""
    # hitrace sometimes cuts the bundle name, so only its last component is matched.
    bundle_short = bundle_name.rsplit(".", 1)[-1]
    return re.compile(
        r"^.(.*?" + re.escape(bundle_short) + r".*?)\-(\d+)\s*\(\s*(\d+)\).*?(\d+)\.(\d+): "
        r"tracing_mark_write: (.)\|(\d+?)\|(.*?):(.*?)\s*$"
    )


def line_to_trace(regex: re.Pattern[str], line: str) -> Trace | None:
    """Parse one line; None if it is not a trace, ValueError if it is malformed."""
    match = regex.search(line)
    if match is None:
        return None
    name, pid, cpu, seconds, micro, marker, number, shorthand, message = match.groups()
    return Trace(
        name=name,
        pid=int(pid),
        cpu=int(cpu),
        timestamp=TimeStamp(int(seconds), int(micro)),
        trace_marker=parse_trace_marker(marker),
        number=number,
        shorthand=shorthand,
        function=message,
    )


def read_file(args: Any, path: str | Path) -> list[Trace]:
    """Read every trace of args.bundle_name from a trace file."""
    regex = build_trace_regex(args.bundle_name)
    lines: list[str] = []
    invalid: list[int] = []
    with open(path, "rb") as handle:
        for index, raw in enumerate(handle):
            try:
                text = raw.decode("utf-8")
            except UnicodeDecodeError:
                invalid.append(index)
                continue
            if text.endswith("\n"):
                text = text[:-1]
                if text.endswith("\r"):
                    text = text[:-1]
            lines.append(text)

    if invalid:
        print(f"Could not read lines {invalid}")

    traces: list[Trace] = []
    try:
        for line in lines:
            trace = line_to_trace(regex, line)
            if trace is not None:
                traces.append(trace)
    except ValueError as exc:
        raise DeviceError("Could not parse one thing") from exc
    return traces