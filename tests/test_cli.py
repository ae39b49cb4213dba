"""
Test suite for the mapperf command line tool and its supporting modules.

This module tests:
- Configuration defaults, environment parsing and validation
- Duration formatting and row rendering
- Logging setup
- The `mapperf` command: table output, JSON output, errors and exit codes
"""

import io
import json
import logging
import os
import random
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

from mapperf.bench import PHASE_LABELS, PHASES
from mapperf.cli import _main, create_parser, format_row, median_durations
from mapperf.config import (
    DEFAULT_LOG_SIZE,
    ENV_LOG_SIZE,
    ENV_SEED,
    BenchmarkConfig,
    make_rng,
)
from mapperf.data import InvalidSizeError
from mapperf.fmt import colorize, format_time, render_duration
from mapperf.log import LOGGER_NAME, PackageHandler, setup_logging


def run_cli(argv, environ=None):
    """Run the CLI with a clean environment, returning (code, stdout, stderr)."""
    out = io.StringIO()
    err = io.StringIO()
    with mock.patch.dict(os.environ, environ or {}, clear=True):
        with redirect_stdout(out), redirect_stderr(err):
            code = _main(argv)
    return code, out.getvalue(), err.getvalue()


class TestConfig(unittest.TestCase):
    """Test BenchmarkConfig."""

    def test_defaults(self):
        config = BenchmarkConfig.from_env({})
        self.assertEqual(config.log_size, DEFAULT_LOG_SIZE)
        self.assertIsNone(config.seed)
        self.assertEqual(config.repeat, 1)
        config.validate()

    def test_from_env(self):
        config = BenchmarkConfig.from_env({ENV_LOG_SIZE: "14", ENV_SEED: "99"})
        self.assertEqual(config.log_size, 14)
        self.assertEqual(config.seed, 99)

    def test_blank_env_ignored(self):
        config = BenchmarkConfig.from_env({ENV_LOG_SIZE: " ", ENV_SEED: ""})
        self.assertEqual(config.log_size, DEFAULT_LOG_SIZE)
        self.assertIsNone(config.seed)

    def test_bad_env_value(self):
        with self.assertRaises(ValueError) as ctx:
            BenchmarkConfig.from_env({ENV_LOG_SIZE: "big"})
        self.assertIn(ENV_LOG_SIZE, str(ctx.exception))

    def test_validate_range(self):
        for log_size in (11, 21, 30):
            with self.assertRaises(ValueError):
                BenchmarkConfig(log_size=log_size).validate()
        for log_size in (12, 16, 20):
            BenchmarkConfig(log_size=log_size).validate()

    def test_validate_negative_is_invalid_size(self):
        with self.assertRaises(InvalidSizeError):
            BenchmarkConfig(log_size=-1).validate()

    def test_validate_repeat(self):
        with self.assertRaises(ValueError):
            BenchmarkConfig(log_size=12, repeat=0).validate()

    def test_make_rng(self):
        self.assertIsNone(make_rng(None))
        a = make_rng(3)
        self.assertIsInstance(a, random.Random)
        self.assertEqual(a.random(), random.Random(3).random())


class TestFormatting(unittest.TestCase):
    """Test duration formatting."""

    def test_format_time_units(self):
        self.assertEqual(format_time(0.0), "0 ns")
        self.assertEqual(format_time(0.000000250), "250 ns")
        self.assertEqual(format_time(0.0000125), "12.50 µs")
        self.assertEqual(format_time(0.0125), "12.50 ms")
        self.assertEqual(format_time(2.5), "2.5000 s")

    def test_render_duration_states(self):
        self.assertEqual(render_duration(None), "-")
        self.assertEqual(render_duration(None, loading=True), "...")
        self.assertEqual(render_duration(0.5, loading=True), "500.00 ms")

    def test_colorize(self):
        self.assertEqual(colorize("x", "\033[1m", enabled=False), "x")
        self.assertTrue(colorize("x", "\033[1m").startswith("\033[1m"))

    def test_format_row(self):
        row = format_row("create", 0.002, color=False)
        self.assertIn(PHASE_LABELS["create"], row)
        self.assertIn("2.00 ms", row)
        self.assertIn("...", format_row("map_once_access", None, loading=True))

    def test_median_durations(self):
        class Fake:
            pass

        results = []
        for base in (1.0, 3.0, 2.0):
            r = Fake()
            for phase in PHASES:
                setattr(r, phase, base)
            results.append(r)
        self.assertEqual(median_durations(results), dict.fromkeys(PHASES, 2.0))


class TestLogging(unittest.TestCase):
    def tearDown(self):
        setup_logging(verbose=False)

    def test_levels(self):
        logger = setup_logging(verbose=True, stream=io.StringIO())
        self.assertEqual(logger.level, logging.DEBUG)
        logger = setup_logging(verbose=False, stream=io.StringIO())
        self.assertEqual(logger.level, logging.WARNING)

    def test_no_duplicate_handlers(self):
        setup_logging(stream=io.StringIO())
        setup_logging(stream=io.StringIO())
        logger = logging.getLogger(LOGGER_NAME)
        ours = [h for h in logger.handlers if isinstance(h, PackageHandler)]
        self.assertEqual(len(ours), 1)

    def test_foreign_handlers_kept(self):
        logger = logging.getLogger(LOGGER_NAME)
        foreign = logging.StreamHandler(io.StringIO())
        logger.addHandler(foreign)
        try:
            setup_logging(stream=io.StringIO())
            setup_logging(stream=io.StringIO())
            self.assertIn(foreign, logger.handlers)
            ours = [h for h in logger.handlers if isinstance(h, PackageHandler)]
            self.assertEqual(len(ours), 1)
        finally:
            logger.removeHandler(foreign)

    def test_format(self):
        stream = io.StringIO()
        setup_logging(verbose=True, stream=stream)
        logging.getLogger("mapperf.bench").debug("create: %s", 1)
        line = stream.getvalue().strip()
        self.assertRegex(line, r"^\d\d:\d\d:\d\d \[DEBU\] create: 1$")


class TestCli(unittest.TestCase):
    """Test the mapperf command."""

    def test_parser_subcommands(self):
        parser = create_parser()
        args = parser.parse_args(["run", "-n", "12", "--seed", "1"])
        self.assertEqual(args.subcommand, "run")
        self.assertEqual(args.log_size, 12)
        self.assertEqual(args.seed, 1)

    def test_table_output(self):
        code, out, err = run_cli(["run", "-n", "12", "--seed", "4", "--no-color"])
        self.assertEqual(code, 0, err)
        labels = [PHASE_LABELS[phase] for phase in PHASES]
        positions = [out.index(label) for label in labels]
        self.assertEqual(positions, sorted(positions))
        self.assertIn("list entries: 4096", out)

    def test_default_subcommand(self):
        code, out, _ = run_cli(["-n", "12", "--no-color"])
        self.assertEqual(code, 0)
        self.assertIn(PHASE_LABELS["create"], out)

    def test_json_output(self):
        code, out, _ = run_cli(["run", "-n", "12", "--seed", "1", "--json", "-r", "2"])
        self.assertEqual(code, 0)
        document = json.loads(out)
        self.assertEqual(document["log_size"], 12)
        self.assertEqual(document["seed"], 1)
        self.assertEqual(len(document["runs"]), 2)
        for entry in document["runs"]:
            self.assertEqual(entry["list_size"], 4096)
            self.assertLessEqual(entry["map_size"], 4096)
            for phase in PHASES:
                self.assertGreaterEqual(entry[phase], 0.0)
        self.assertEqual(list(document["median"]), list(PHASES))

    def test_repeat_prints_median(self):
        code, out, _ = run_cli(["run", "-n", "12", "-r", "3", "--no-color"])
        self.assertEqual(code, 0)
        self.assertIn("Run 3/3", out)
        self.assertIn("Median of 3 runs", out)

    def test_env_log_size(self):
        code, out, _ = run_cli(["run", "--json"], environ={ENV_LOG_SIZE: "12"})
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["log_size"], 12)

    def test_out_of_range_log_size(self):
        code, out, err = run_cli(["run", "-n", "25"])
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("Error:", err)

    def test_negative_log_size(self):
        code, out, err = run_cli(["run", "-n", "-1"])
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("non-negative", err)

    def test_bad_env(self):
        code, _, err = run_cli(["run"], environ={ENV_SEED: "abc"})
        self.assertEqual(code, 1)
        self.assertIn(ENV_SEED, err)


if __name__ == "__main__":
    unittest.main()
