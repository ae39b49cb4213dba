"""
mapperf.config - Benchmark run configuration

Settings come from, in increasing priority:

- built-in defaults (log size 20, the top of the supported range)
- environment variables MAPPERF_LOG_SIZE and MAPPERF_SEED
- command line flags (applied by mapperf.cli)
"""

import os
import random
from dataclasses import dataclass
from typing import Mapping, Optional

from mapperf.data import check_log_size

MIN_LOG_SIZE = 12
MAX_LOG_SIZE = 20
DEFAULT_LOG_SIZE = 20

ENV_LOG_SIZE = "MAPPERF_LOG_SIZE"
ENV_SEED = "MAPPERF_SEED"


def _env_int(environ: Mapping[str, str], name: str) -> Optional[int]:
    value = environ.get(name)
    if value is None or value.strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass
class BenchmarkConfig:
    """
    Options for one invocation of the benchmark.

    Fields:
        log_size: Collection size exponent, within [MIN_LOG_SIZE, MAX_LOG_SIZE]
        seed: Seed for a private random.Random; None uses the global source
        repeat: Number of runs, each with a fresh dataset
        json_output: Emit JSON instead of a table
        color: Use ANSI colors in table output
        verbose: Enable debug logging
    """

    log_size: int = DEFAULT_LOG_SIZE
    seed: Optional[int] = None
    repeat: int = 1
    json_output: bool = False
    color: bool = True
    verbose: bool = False

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "BenchmarkConfig":
        """
        Build a config from environment variables, falling back to defaults.

        Raises:
            ValueError: If a variable is set but is not an integer.
        """
        if environ is None:
            environ = os.environ

        config = cls()
        log_size = _env_int(environ, ENV_LOG_SIZE)
        if log_size is not None:
            config.log_size = log_size
        config.seed = _env_int(environ, ENV_SEED)
        return config

    def validate(self) -> None:
        """
        Raises:
            InvalidSizeError: If log_size is negative or not an integer.
            ValueError: If log_size is outside the supported range, or
                        repeat is less than 1.
        """
        check_log_size(self.log_size)
        if not MIN_LOG_SIZE <= self.log_size <= MAX_LOG_SIZE:
            raise ValueError(
                f"log size must be between {MIN_LOG_SIZE} and {MAX_LOG_SIZE}, "
                f"got {self.log_size}"
            )
        if self.repeat < 1:
            raise ValueError(f"repeat must be at least 1, got {self.repeat}")


def make_rng(seed: Optional[int]) -> Optional[random.Random]:
    if seed is None:
        return None
    return random.Random(seed)
