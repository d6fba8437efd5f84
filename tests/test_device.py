import subprocess
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from hitrace_bench.device import (
    DeviceError,
    build_trace_regex,
    exec_hdc_commands,
    is_device_reachable,
    line_to_trace,
    read_file,
    stop_tracing,
)
from hitrace_bench.trace import TraceMarker

EXAMPLE = (
    " org.servo.servo-44962   (  44682) [010] .... 17864.716645: "
    "tracing_mark_write: B|44682|ML: do_single_part3_compilation"
)


def completed(stdout=b""):
    return subprocess.CompletedProcess(args=[], returncode=0, stdout=stdout, stderr=b"")


def make_args(**overrides):
    values = dict(
        bundle_name="org.servo.servo",
        homepage="https://servo.org",
        trace_buffer=524288,
        sleep=10,
        computer_output=True,
        bencher=False,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_line_to_trace_parses_example():
    trace = line_to_trace(build_trace_regex("org.servo.servo"), EXAMPLE)
    assert trace.name == "org.servo.servo"
    assert trace.pid == 44962
    assert trace.cpu == 44682
    assert trace.timestamp.seconds == 17864
    assert trace.timestamp.micro == 716645
    assert trace.trace_marker is TraceMarker.START_SYNC
    assert trace.number == "44682"
    assert trace.shorthand == "ML"
    assert trace.function == " do_single_part3_compilation"


def test_line_to_trace_other_bundle_is_ignored():
    assert line_to_trace(build_trace_regex("org.example.other"), EXAMPLE) is None


def test_line_to_trace_non_trace_line():
    assert line_to_trace(build_trace_regex("org.servo.servo"), "# tracer: nop") is None


def test_line_to_trace_bad_marker():
    line = EXAMPLE.replace("B|44682", "X|44682")
    with pytest.raises(ValueError):
        line_to_trace(build_trace_regex("org.servo.servo"), line)


def test_read_file_collects_traces(tmp_path):
    path = tmp_path / "trace.txt"
    path.write_text("# header\n" + EXAMPLE + "\n" + EXAMPLE.replace("ML", "H") + "\r\n")
    traces = read_file(make_args(), path)
    assert [t.shorthand for t in traces] == ["ML", "H"]


def test_read_file_reports_unreadable_lines(tmp_path, capsys):
    path = tmp_path / "trace.txt"
    path.write_bytes(b"\xff\xfe\n" + EXAMPLE.encode() + b"\n")
    traces = read_file(make_args(), path)
    assert len(traces) == 1
    assert "Could not read lines [0]" in capsys.readouterr().out


def test_read_file_parse_error(tmp_path):
    path = tmp_path / "trace.txt"
    path.write_text(EXAMPLE.replace("B|44682", "Q|44682") + "\n")
    with pytest.raises(DeviceError, match="Could not parse one thing"):
        read_file(make_args(), path)


def test_read_file_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_file(make_args(), tmp_path / "absent.txt")


@patch("shutil.which", return_value=None)
def test_missing_hdc(_which):
    with pytest.raises(DeviceError, match="hdc"):
        is_device_reachable()


@pytest.mark.parametrize("stdout, expected", [(b"127.0.0.1:5555\n", True), (b"", False)])
def test_is_device_reachable(stdout, expected):
    with patch("shutil.which", return_value="/bin/hdc"), patch(
        "subprocess.run", return_value=completed(stdout)
    ) as run:
        assert is_device_reachable() is expected
    assert run.call_args.args[0] == ["/bin/hdc", "list", "targets"]


def test_stop_tracing_failure():
    with patch("shutil.which", return_value="/bin/hdc"), patch(
        "subprocess.run", side_effect=OSError("boom")
    ):
        with pytest.raises(DeviceError, match="Could not stop trace"):
            stop_tracing(1024)


def test_stop_tracing_command():
    with patch("shutil.which", return_value="/bin/hdc"), patch(
        "subprocess.run", return_value=completed()
    ) as run:
        result = stop_tracing(1024)
    assert result is None
    assert run.call_count == 1
    assert run.call_args.args[0] == [
        "/bin/hdc",
        "shell",
        "hitrace",
        "-b",
        "1024",
        "--trace_finish",
        "-o",
        "/data/local/tmp/ohtrace.txt",
    ]


def test_exec_hdc_commands_crashed_app():
    def fake_run(cmd, **kwargs):
        return completed(b"" if "pidof" in cmd else b"ok")

    with patch("shutil.which", return_value="/bin/hdc"), patch(
        "subprocess.run", side_effect=fake_run
    ) as run, patch("time.sleep"):
        with pytest.raises(DeviceError, match="org.servo.servo did not start"):
            exec_hdc_commands(make_args())
    assert "--trace_finish" in run.call_args.args[0]


def test_exec_hdc_commands_returns_local_path(tmp_path):
    with patch("shutil.which", return_value="/bin/hdc"), patch(
        "subprocess.run", return_value=completed(b"123")
    ) as run, patch("time.sleep") as sleep, patch(
        "tempfile.gettempdir", return_value=str(tmp_path)
    ):
        result = exec_hdc_commands(make_args(sleep=3))
    assert result == Path(tmp_path) / "app.ftrace"
    sleep.assert_called_once_with(3)
    assert run.call_args.args[0][1:3] == ["file", "recv"]