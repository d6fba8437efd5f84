[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hitrace-bench"
version = "0.2.2"
description = "Benchmark app startup and page loads on OpenHarmony devices from hitrace output."
requires-python = ">=3.10"
dependencies = []
keywords = ["benchmark", "hitrace", "openharmony", "hdc", "tracing"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Benchmark",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
hitrace-bench = "hitrace_bench.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["hitrace_bench"]

[tool.pytest.ini_options]
addopts = "-ra"
