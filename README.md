# hitrace-bench

hitrace-bench starts an app on an OpenHarmony device and records a hitrace
capture while the app runs. It fetches the capture and then measures the time
between chosen trace markers. The default target is the Servo browser
(`org.servo.servo`). Each run measures two timings:

- `Surface->LoadStart`: from the `on_surface_created_cb` marker to the
  `load status changed Started` marker
- `Load->Compl`: from the `load status changed Started` marker to the
  `PageLoadEndedPrompt` marker

Both timings use only traces whose shorthand is `H`.

## Requirements

- Python 3.10 or newer
- The `hdc` tool must be on your `PATH`.
- A device must be connected, and `hdc list targets` must list it. If another
  IDE holds the connection, the list is empty and the program stops with
  an error.

## Installation

```
pip install .
```

## Usage

```
hitrace-bench [options]
```

Options:

| Option | Default | Meaning |
| --- | --- | --- |
| `-a`, `--all-traces` | off | Print every parsed trace. This only takes effect when `--tries` is 1. |
| `-n`, `--tries N` | `1` | Number of runs |
| `-p`, `--homepage URL` | `https://servo.org` | Page the app is started with |
| `-t`, `--trace-buffer KB` | `524288` | Trace buffer size in KB |
| `-s`, `--sleep SECONDS` | `10` | Time to wait after starting the app before tracing stops |
| `-c`, `--computer-output` | off | Print only the raw durations for each measurement |
| `-b`, `--bundle-name NAME` | `org.servo.servo` | Bundle of the app to start |
| `--bencher` | off | Write results in Bencher JSON format to `bench.json` |
| `--version` | | Print the version and exit |

Numeric options must be non-negative integers.

Example: run five times against a local page and show the average, minimum
and maximum.

```
hitrace-bench -n 5 -p http://localhost:8000/
```

Each run does the following:

1. It force-stops the app.
2. It starts hitrace with the `app graphic ohos freq idle memory` categories.
3. It starts the app's `EntryAbility` with the homepage and with JIT disabled.
4. It sleeps for the given time.
5. It checks that the app is still running. If it is not, tracing is stopped
   and the program fails.
6. It stops tracing and copies the capture to `app.ftrace` in the system
   temporary directory.

Unless `--bencher` is given, a `Running test N` line is printed before each
run. While the program runs, pressing Ctrl-C stops tracing on the device.
If an error occurs, it is printed to stderr and the exit status is 1.

## Output

The default output lists first, for each measurement, how many runs failed to
match it. A measurement fails in a run when its start or end marker is found
zero times or more than once. Then each measurement follows with its
average, minimum and maximum and the number of successful runs. The colours
are shown only on a terminal and only when `NO_COLOR` is unset.

`--computer-output` prints one line for each measurement. Each duration on
that line is written as `<whole seconds>.<total microseconds>, `.

`--bencher` prints the result document. It also writes the document to
`bench.json` in the current directory. For each measurement the document
holds a `latency` entry with `value` (average), `lower_value` (minimum) and
`upper_value` (maximum). All three are given in microseconds.

## Library use

The modules can also be used on their own.

- `hitrace_bench.device.read_file(args, path)` parses a saved trace file into
  `Trace` objects. `args` only needs a `bundle_name` attribute.
  `build_trace_regex` and `line_to_trace` parse single lines.
- `hitrace_bench.filters.find_notable_differences(traces, filters)` applies
  `Filter` definitions to those traces. It maps each filter name to a
  `timedelta`, or to the `FilterError` that the filter produced.
- `hitrace_bench.report.avg_min_max` summarises the durations collected over
  several runs. `bencher_json` builds the Bencher document without writing it.
- `hitrace_bench.cli.default_filters()` returns the two filters listed above.

## Limitations

The measured timings are fixed in `default_filters()`. The command line
cannot add or change them. To use other markers, call the library functions
with your own `Filter` objects.