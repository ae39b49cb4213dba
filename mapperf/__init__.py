"""
mapperf - list and dict access benchmarks

This package contains:

- data.py: Random dataset generation and the indirect accessors
- bench.py: The timed access benchmarks and background runner
- config.py: Run configuration from defaults, environment and flags
- fmt.py: Output formatting
- cli.py: The `mapperf` command

Usage:
    from mapperf import run

    result = run(12)
    for phase, seconds in result.durations():
        print(phase, seconds)
"""

from mapperf.bench import (
    PHASE_LABELS,
    PHASES,
    Benchmark,
    BenchmarkResult,
    RunState,
    run,
    run_async,
)
from mapperf.data import (
    WORDS,
    Dataset,
    InvalidSizeError,
    generate,
    get_from_list,
    get_from_map,
)

__version__ = "0.1.0"

__all__ = [
    # Data
    "Dataset",
    "generate",
    "get_from_list",
    "get_from_map",
    "InvalidSizeError",
    "WORDS",
    # Benchmark
    "run",
    "run_async",
    "Benchmark",
    "BenchmarkResult",
    "RunState",
    "PHASES",
    "PHASE_LABELS",
]
