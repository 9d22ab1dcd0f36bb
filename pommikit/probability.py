"""Weighted value sets ordered by cumulative weight."""

from __future__ import annotations

import time
from typing import Generic, Sequence, TypeVar

__all__ = ["Generator", "new", "new_with_seed"]

T = TypeVar("T")

_TOLERANCE = 1e-4


class Generator(Generic[T]):
    """Values paired with their cumulative weights, sorted by that weight."""

    def __init__(self, values: Sequence[T], weights: Sequence[float], seed: int) -> None:
        if len(values) != len(weights):
            raise ValueError("generator: Weights and Values must have same len")
        cumulative: list[float] = []
        total = 0.0
        for weight in weights:
            total += weight
            cumulative.append(total)
        if total - 1 >= _TOLERANCE:
            raise ValueError("generator: Sum of weights must be 1.0")

        pairs = sorted(zip(cumulative, values), key=lambda pair: pair[0])
        self.weights: tuple[float, ...] = tuple(w for w, _ in pairs)
        self.values: tuple[T, ...] = tuple(v for _, v in pairs)
        self.seed = seed

    def __len__(self) -> int:
        return len(self.values)


def new_with_seed(values: Sequence[T], weights: Sequence[float], seed: int) -> Generator[T]:
    """Build a generator with an explicit seed."""
    return Generator(values, weights, seed)


def new(values: Sequence[T], weights: Sequence[float]) -> Generator[T]:
    """Build a generator seeded from the current time in nanoseconds."""
    return new_with_seed(values, weights, time.time_ns())