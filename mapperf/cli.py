"""
mapperf.cli - mapperf Command Line Interface

Subcommands:

- mapperf run      Generate a dataset and time the access benchmarks

Running `mapperf` with only flags is the same as `mapperf run`.
"""

import argparse
import json
import statistics
import sys
from typing import Optional

from mapperf.bench import PHASE_LABELS, PHASES, Benchmark, BenchmarkResult
from mapperf.config import (
    MAX_LOG_SIZE,
    MIN_LOG_SIZE,
    BenchmarkConfig,
    make_rng,
)
from mapperf.fmt import Colors, colorize, render_duration
from mapperf.log import setup_logging

LABEL_WIDTH = max(len(label) for label in PHASE_LABELS.values()) + 2


class RowPrinter:
    """
    Benchmark on_change callback that prints each phase once it completes.

    Phases are filled strictly in order, so rows are printed as soon as the
    next unprinted phase has a duration.
    """

    def __init__(self, color: bool = True):
        self.color = color
        self.printed = 0

    def __call__(self, bench: Benchmark):
        rows = bench.rows()
        while self.printed < len(rows):
            phase, seconds = rows[self.printed]
            if seconds is None:
                break
            print(format_row(phase, seconds, color=self.color), flush=True)
            self.printed += 1


def format_row(
    phase: str,
    seconds: Optional[float],
    loading: bool = False,
    color: bool = True,
) -> str:
    label = PHASE_LABELS[phase]
    value = render_duration(seconds, loading)
    if seconds is not None:
        value = colorize(value, Colors.GREEN, color)
    return f"  {label:<{LABEL_WIDTH}} {value:>12}"


def median_durations(results: list[BenchmarkResult]) -> dict[str, float]:
    return {
        phase: statistics.median(getattr(r, phase) for r in results)
        for phase in PHASES
    }


def config_from_args(args: argparse.Namespace) -> BenchmarkConfig:
    """Environment settings first, then any flags given on the command line."""
    config = BenchmarkConfig.from_env()
    if args.log_size is not None:
        config.log_size = args.log_size
    if args.seed is not None:
        config.seed = args.seed
    config.repeat = args.repeat
    config.json_output = args.json
    config.color = not args.no_color and sys.stdout.isatty()
    config.verbose = args.verbose
    return config


def cmd_run(args: argparse.Namespace) -> int:
    """Run the benchmark and print the timings."""
    try:
        config = config_from_args(args)
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.verbose)
    rng = make_rng(config.seed)
    color = config.color and not config.json_output

    if not config.json_output:
        print(colorize("mapperf collection access benchmark", Colors.BOLD, color))
        print(f"log2(collection size): {config.log_size}")
        print("-" * (LABEL_WIDTH + 15))

    results = []
    for i in range(config.repeat):
        if not config.json_output and config.repeat > 1:
            print(colorize(f"Run {i + 1}/{config.repeat}", Colors.BLUE, color))

        on_change = None if config.json_output else RowPrinter(color=color)
        bench = Benchmark(config.log_size, on_change=on_change)
        try:
            results.append(bench.start(rng).result())
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    medians = median_durations(results)

    if config.json_output:
        document = {
            "log_size": config.log_size,
            "seed": config.seed,
            "runs": [r.as_dict() for r in results],
            "median": medians,
        }
        print(json.dumps(document, indent=2))
        return 0

    last = results[-1]
    print(
        colorize(
            f"list entries: {last.list_size}, map entries: {last.map_size}",
            Colors.GRAY,
            color,
        )
    )
    if config.repeat > 1:
        print()
        print(colorize(f"Median of {config.repeat} runs", Colors.BOLD, color))
        for phase in PHASES:
            print(format_row(phase, medians[phase], color=color))
    return 0


SUBCOMMANDS = {"run"}


def _add_run_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        "-n",
        "--log-size",
        type=int,
        default=None,
        metavar="N",
        help=(
            f"log2 of the collection size, {MIN_LOG_SIZE}-{MAX_LOG_SIZE} "
            "(default: $MAPPERF_LOG_SIZE or 20)"
        ),
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed the data generator for reproducible datasets",
    )
    parser.add_argument(
        "-r",
        "--repeat",
        type=int,
        default=1,
        help="Number of runs, each with a fresh dataset (default: 1)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="mapperf",
        description="mapperf - list and dict access benchmarks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  mapperf                       Run with the default size (2^20)
  mapperf run -n 12             Run against 4096-entry collections
  mapperf run -n 16 -r 5        Five runs, then the median of each timing
  mapperf run --seed 1 --json   Reproducible dataset, JSON output
        """,
    )

    subparsers = parser.add_subparsers(dest="subcommand")

    run_parser = subparsers.add_parser(
        "run",
        help="Run the access benchmarks",
        description="Generate a dataset and time the list and dict access benchmarks",
    )
    _add_run_arguments(run_parser)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the mapperf CLI. Calls sys.exit with return code."""
    sys.exit(_main(argv))


def _main(argv: Optional[list[str]] = None) -> int:
    """Internal main that returns exit code."""
    if argv is None:
        argv = sys.argv[1:]

    # Bare flags go to the default `run` subcommand
    if not argv or (argv[0] not in SUBCOMMANDS and argv[0] not in ("-h", "--help")):
        argv = ["run"] + list(argv)

    parser = create_parser()
    args = parser.parse_args(argv)

    return cmd_run(args)


if __name__ == "__main__":
    main()
