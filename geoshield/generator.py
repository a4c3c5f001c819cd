"""
Deterministic generator (Lehmer / Park–Miller, "MINSTD" multiplier 48271).

One instance is created per step invocation and thrown away afterwards, so
the sequence a step sees depends only on its seed. The state update is exact
integer arithmetic and ``next()`` is a single correctly-rounded division, so the
draws match the browser build bit for bit.
"""
from __future__ import annotations

from typing import Iterator, List

MULTIPLIER = 48271
MODULUS = 2147483647  # 2**31 - 1


class LehmerGenerator(Iterator[float]):
    """Sequential draws in [0, 1). Not thread-safe; not meant to be shared."""

    __slots__ = ("state",)

    def __init__(self, seed: int) -> None:
        self.state = int(seed)

    def next(self) -> float:
        self.state = (self.state * MULTIPLIER) % MODULUS
        return self.state / MODULUS

    __next__ = next

    def __iter__(self) -> "LehmerGenerator":
        return self

    def draw(self, n: int) -> List[float]:
        """Return the next ``n`` values."""
        return [self.next() for _ in range(n)]

    def __repr__(self) -> str:
        return f"LehmerGenerator(state={self.state})"
