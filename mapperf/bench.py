"""
mapperf.bench - Collection access benchmark harness

Times dataset creation followed by six access micro-benchmarks:

- list_every_access:    read dataset.list inside the loop
- list_once_access:     bind dataset.list to a local before the loop
- list_indirect_access: go through get_from_list()
- map_every_access / map_once_access / map_indirect_access: same for the map

Each step is timed on its own, strictly one after another. Results are
reported in PHASES order, both as a final BenchmarkResult and progressively
through an optional on_phase(phase, seconds) callback.

Usage:
    from mapperf.bench import run, run_async

    result = run(12)
    for phase, seconds in result.durations():
        print(phase, seconds)

    future = run_async(16, on_phase=print)
    future.result()
"""

import logging
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Optional

from mapperf.data import (
    WORDS,
    Dataset,
    check_log_size,
    generate,
    get_from_list,
    get_from_map,
)

logger = logging.getLogger(__name__)

PHASES = (
    "create",
    "list_every_access",
    "list_once_access",
    "list_indirect_access",
    "map_every_access",
    "map_once_access",
    "map_indirect_access",
)

PHASE_LABELS = {
    "create": "Create data",
    "list_every_access": "Access list, getting every time",
    "list_once_access": "Access list, getting once",
    "list_indirect_access": "Access list, getting indirectly",
    "map_every_access": "Access map, getting every time",
    "map_once_access": "Access map, getting once",
    "map_indirect_access": "Access map, getting indirectly",
}

LIST_INDICES = range(1, 6)
LOOKUP_KEYS = WORDS

PhaseCallback = Callable[[str, float], None]


# --- Timing ---


def measure_timed_value(func: Callable[[], Any]) -> tuple[Any, float]:
    """Call func and return (its result, elapsed seconds)."""
    start = time.perf_counter()
    value = func()
    end = time.perf_counter()
    return value, end - start


def measure_time(func: Callable[[], Any]) -> float:
    _, elapsed = measure_timed_value(func)
    return elapsed


# --- Access benchmarks ---
#
# Each returns the summed length of the strings it found. The total is not
# reported; it keeps the lookups from being dead code.


def list_every_access(dataset: Dataset) -> int:
    total_length = 0
    for i in LIST_INDICES:
        if 0 <= i < len(dataset.list):
            total_length += len(dataset.list[i])
    return total_length


def list_once_access(dataset: Dataset) -> int:
    items = dataset.list
    total_length = 0
    for i in LIST_INDICES:
        if 0 <= i < len(items):
            total_length += len(items[i])
    return total_length


def list_indirect_access(dataset: Dataset) -> int:
    total_length = 0
    for i in LIST_INDICES:
        value = get_from_list(dataset, i)
        total_length += len(value) if value is not None else 0
    return total_length


def map_every_access(dataset: Dataset) -> int:
    total_length = 0
    for key in LOOKUP_KEYS:
        value = dataset.map.get(key)
        total_length += len(value) if value is not None else 0
    return total_length


def map_once_access(dataset: Dataset) -> int:
    mapping = dataset.map
    total_length = 0
    for key in LOOKUP_KEYS:
        value = mapping.get(key)
        total_length += len(value) if value is not None else 0
    return total_length


def map_indirect_access(dataset: Dataset) -> int:
    total_length = 0
    for key in LOOKUP_KEYS:
        value = get_from_map(dataset, key)
        total_length += len(value) if value is not None else 0
    return total_length


ACCESS_BENCHMARKS = (
    ("list_every_access", list_every_access),
    ("list_once_access", list_once_access),
    ("list_indirect_access", list_indirect_access),
    ("map_every_access", map_every_access),
    ("map_once_access", map_once_access),
    ("map_indirect_access", map_indirect_access),
)


# --- Results ---


@dataclass(frozen=True)
class BenchmarkResult:
    """Durations in seconds for one run, plus the sizes they were taken at."""

    log_size: int
    list_size: int
    map_size: int
    create: float
    list_every_access: float
    list_once_access: float
    list_indirect_access: float
    map_every_access: float
    map_once_access: float
    map_indirect_access: float

    def durations(self) -> list[tuple[str, float]]:
        """Return (phase, seconds) pairs in PHASES order."""
        return [(phase, getattr(self, phase)) for phase in PHASES]

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def run(
    log_size: int,
    rng=None,
    on_phase: Optional[PhaseCallback] = None,
) -> BenchmarkResult:
    """
    Generate a dataset and time every access benchmark against it.

    Args:
        log_size: Dataset size exponent, passed to generate().
        rng: Optional random.Random for deterministic datasets.
        on_phase: Called as on_phase(phase, seconds) after each step,
                  in PHASES order.

    Returns:
        The BenchmarkResult for this run.

    Raises:
        InvalidSizeError: Before anything is timed, if log_size is invalid.
    """
    check_log_size(log_size)

    def record(phase: str, seconds: float):
        logger.debug("%s: %.9fs", phase, seconds)
        durations[phase] = seconds
        if on_phase is not None:
            on_phase(phase, seconds)

    durations: dict[str, float] = {}

    dataset, elapsed = measure_timed_value(lambda: generate(log_size, rng))
    record("create", elapsed)

    for phase, bench in ACCESS_BENCHMARKS:
        record(phase, measure_time(lambda: bench(dataset)))

    result = BenchmarkResult(
        log_size=log_size,
        list_size=len(dataset.list),
        map_size=len(dataset.map),
        **durations,
    )
    logger.info(
        "benchmark complete: log_size=%d list=%d map=%d",
        log_size,
        result.list_size,
        result.map_size,
    )
    return result


def run_async(
    log_size: int,
    rng=None,
    on_phase: Optional[PhaseCallback] = None,
    executor: Optional[Executor] = None,
) -> Future:
    """
    Run the benchmark on a worker thread.

    If no executor is given, a single-worker pool is created for this run and
    shut down once the run is submitted. Errors, including InvalidSizeError,
    are delivered through the returned future.
    """
    return _submit(executor, run, log_size, rng, on_phase)


def _submit(executor: Optional[Executor], func: Callable, *args) -> Future:
    if executor is not None:
        return executor.submit(func, *args)

    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mapperf")
    try:
        return pool.submit(func, *args)
    finally:
        pool.shutdown(wait=False)


# --- Display state ---


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


class Benchmark:
    """
    Observable state for a front end showing benchmark progress.

    Holds one optional duration per phase. start() clears them, then fills
    them in phase order from a background run. The object can be started
    again after a run finishes; every start uses a fresh dataset.
    """

    def __init__(
        self,
        log_size: int,
        on_change: Optional[Callable[["Benchmark"], None]] = None,
    ):
        self.log_size = log_size
        self.on_change = on_change
        self.state = RunState.IDLE
        self.result: Optional[BenchmarkResult] = None
        self.error: Optional[BaseException] = None
        self._durations: dict[str, Optional[float]] = dict.fromkeys(PHASES)
        self._lock = threading.Lock()

    @property
    def loading(self) -> bool:
        return self.state is RunState.RUNNING

    def duration(self, phase: str) -> Optional[float]:
        with self._lock:
            return self._durations[phase]

    def rows(self) -> list[tuple[str, Optional[float]]]:
        """Return (phase, seconds or None) for every phase, in PHASES order."""
        with self._lock:
            return [(phase, self._durations[phase]) for phase in PHASES]

    def _notify(self):
        if self.on_change is not None:
            self.on_change(self)

    def _on_phase(self, phase: str, seconds: float):
        with self._lock:
            self._durations[phase] = seconds
        self._notify()

    def _reset(self):
        with self._lock:
            self._durations = dict.fromkeys(PHASES)
        self.result = None
        self.error = None

    def start(self, rng=None, executor: Optional[Executor] = None) -> Future:
        """
        Start a background run and return a future for its result.

        Raises:
            RuntimeError: If a run is already in progress, or the executor
                          rejects the run. The latter leaves the state FAILED.
        """
        with self._lock:
            if self.state is RunState.RUNNING:
                raise RuntimeError("benchmark is already running")
            self.state = RunState.RUNNING

        try:
            self._reset()
            self._notify()
            return _submit(executor, self._execute, rng)
        except BaseException as e:
            self.error = e
            self.state = RunState.FAILED
            raise

    def _execute(self, rng) -> BenchmarkResult:
        # State is final before the future resolves.
        try:
            result = run(self.log_size, rng, self._on_phase)
        except Exception as e:
            logger.error("benchmark failed: %s", e)
            self._reset()
            self.error = e
            self.state = RunState.FAILED
            self._notify()
            raise

        self.result = result
        self.state = RunState.COMPLETE
        self._notify()
        return result
