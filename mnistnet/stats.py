"""Mean, variance and standard deviation of a sequence of numbers."""

from __future__ import annotations

import math
from typing import Iterable, Sequence, Union

Number = Union[int, float]


def _as_list(values: Iterable[Number]) -> Sequence[Number]:
    items = list(values)
    if not items:
        raise ValueError("statistics need at least one value")
    return items


def mean(values: Iterable[Number]) -> float:
    """Arithmetic mean of the values."""
    items = _as_list(values)
    return float(sum(items)) / len(items)


def variance(values: Iterable[Number], sample: bool = False) -> float:
    """Population variance, or sample variance when ``sample`` is true.

    The sample correction divides by ``n - 1`` only when there is more than
    one value.
    """
    items = _as_list(values)
    centre = mean(items)
    total = sum((value - centre) ** 2 for value in items)
    n = len(items)
    if sample and n > 1:
        n -= 1
    return total / n


def stdev(values: Iterable[Number], sample: bool = False) -> float:
    """Square root of :func:`variance`."""
    return math.sqrt(variance(values, sample))