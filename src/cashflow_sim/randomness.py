"""Injectable random source and the draw helpers built on top of it.

Every generator takes a ``RandomSource`` instead of reaching for the global
``random`` module, so tests can script exact draws while production runs use
an entropy-seeded ``random.Random``.
"""

from __future__ import annotations

import math
import random
from collections.abc import Sequence
from typing import Protocol, TypeVar

from cashflow_sim.config.industries import CategoryWeight

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything producing uniform floats in [0, 1)."""

    def next(self) -> float: ...


class PythonRandomSource:
    """RandomSource backed by ``random.Random``."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def next(self) -> float:
        return self._rng.random()


def uniform(rng: RandomSource, low: float, high: float) -> float:
    """Draw a float in [low, high)."""
    return low + rng.next() * (high - low)


def randint(rng: RandomSource, low: int, high: int) -> int:
    """Draw an integer in [low, high], both ends inclusive."""
    if high <= low:
        return low
    value = low + math.floor(rng.next() * (high - low + 1))
    return min(value, high)


def chance(rng: RandomSource, probability: float) -> bool:
    return rng.next() < probability


def choice(rng: RandomSource, items: Sequence[T]) -> T | None:
    """Pick one item uniformly; ``None`` for an empty sequence."""
    if not items:
        return None
    index = min(math.floor(rng.next() * len(items)), len(items) - 1)
    return items[index]


def weighted_choice(
    rng: RandomSource,
    options: Sequence[CategoryWeight],
    default: str,
) -> str:
    """Pick a category name with probability proportional to ``abs(weight)``.

    Weights are relative and need not sum to one. Negative weights mark
    refund-like categories and are drawn by magnitude. Returns ``default``
    when there is nothing to draw from.
    """
    total = sum(abs(option.weight) for option in options)
    if total <= 0:
        return options[0].name if options else default

    target = rng.next() * total
    cumulative = 0.0
    for option in options:
        cumulative += abs(option.weight)
        if target < cumulative:
            return option.name
    return options[-1].name
