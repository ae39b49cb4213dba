"""
mapperf.data - Benchmark dataset generation

This module builds the random dataset the access benchmarks run against:

- Dataset.list: 2**log_size random strings, in generation order
- Dataset.map: 2**log_size random string -> string insertions

Strings are 1-8 words drawn from a fixed five word vocabulary. Map keys come
from the same small space, so the map usually ends up far smaller than the
list; duplicate keys simply overwrite the earlier value.

Usage:
    from mapperf.data import generate, get_from_list

    dataset = generate(12)
    get_from_list(dataset, 3)      # str
    get_from_list(dataset, 4096)   # None
"""

import random
from dataclasses import dataclass
from typing import Optional

WORDS = ("lorem", "ipsum", "dolor", "sit", "amet")
MIN_WORDS = 1
MAX_WORDS = 8


class InvalidSizeError(ValueError):
    """Raised when a log size cannot produce a non-negative element count."""

    def __init__(self, log_size):
        self.log_size = log_size
        super().__init__(
            f"log size must be a non-negative integer, got {log_size!r}"
        )


def check_log_size(log_size) -> int:
    """
    Validate a log size and return the element count it produces.

    Raises:
        InvalidSizeError: If log_size is not an int or is negative.
    """
    # bool is an int subclass, but True/False are not sizes
    if isinstance(log_size, bool) or not isinstance(log_size, int):
        raise InvalidSizeError(log_size)
    if log_size < 0:
        raise InvalidSizeError(log_size)
    return round(2**log_size)


def generate_string(rng=None) -> str:
    """Build one space-separated string of 1-8 random vocabulary words."""
    rng = rng or random
    count = rng.randint(MIN_WORDS, MAX_WORDS)
    return " ".join(rng.choice(WORDS) for _ in range(count))


@dataclass(frozen=True)
class Dataset:
    """
    A generated list and map, owned by a single benchmark run.

    The attribute names are part of what gets measured: the "every access"
    benchmarks read ``dataset.list`` and ``dataset.map`` inside their loops.
    """

    list: list[str]
    map: dict[str, str]

    def get_from_list(self, index: int) -> Optional[str]:
        return get_from_list(self, index)

    def get_from_map(self, key: str) -> Optional[str]:
        return get_from_map(self, key)


def generate(log_size: int, rng=None) -> Dataset:
    """
    Generate a dataset with 2**log_size list entries and map insertions.

    Args:
        log_size: Non-negative exponent for the collection size.
        rng: Optional random.Random. Defaults to the process-wide source.

    Returns:
        A new Dataset. len(dataset.list) == 2**log_size and
        len(dataset.map) <= 2**log_size.

    Raises:
        InvalidSizeError: If log_size is negative or not an integer.
    """
    n = check_log_size(log_size)
    rng = rng or random

    items = [generate_string(rng) for _ in range(n)]
    mapping = {}
    for _ in range(n):
        key = generate_string(rng)
        mapping[key] = generate_string(rng)

    return Dataset(list=items, map=mapping)


def get_from_list(dataset: Dataset, index: int) -> Optional[str]:
    """Return dataset.list[index], or None when index is out of range."""
    if 0 <= index < len(dataset.list):
        return dataset.list[index]
    return None


def get_from_map(dataset: Dataset, key: str) -> Optional[str]:
    return dataset.map.get(key)
