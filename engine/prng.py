"""Deterministic pseudo-random source for presentation variation.

A proposal's presentation must be stable across fetches, so every
"random" choice is drawn from one ``SeededRandom`` instance whose seed is
derived from the proposal id and a summary of the analysis.

  seed   = fnv1a32(seed text)          (FNV-1a over UTF-16 code units)
  state  = xorshift32(state)           (13 / 17 / 5 shifts)
  rand() = state / 2**32               (always in [0, 1))

The generator is injected into the variation functions rather than
held globally, so tests can substitute a scripted source.
"""
from __future__ import annotations

from typing import Callable, Sequence, TypeVar

_MASK32 = 0xFFFFFFFF
_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193

# xorshift32 has a fixed point at zero; substitute a non-zero state.
_ZERO_SEED_REPLACEMENT = 123456789

T = TypeVar("T")


def fnv1a32(text: str) -> int:
    """32-bit FNV-1a hash over the UTF-16 code units of *text*."""
    h = _FNV_OFFSET
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * _FNV_PRIME) & _MASK32
    return h


class SeededRandom:
    """xorshift32 generator.  Same seed ⇒ same sequence, bit for bit."""

    def __init__(self, seed: int):
        self._state = (seed & _MASK32) or _ZERO_SEED_REPLACEMENT

    @classmethod
    def from_text(cls, text: str) -> "SeededRandom":
        return cls(fnv1a32(text))

    def next_u32(self) -> int:
        x = self._state
        x ^= (x << 13) & _MASK32
        x ^= x >> 17
        x ^= (x << 5) & _MASK32
        self._state = x
        return x

    def random(self) -> float:
        return self.next_u32() / 4294967296.0

    __call__ = random


RandomSource = Callable[[], float]


def shuffle_in_place(items: list[T], rand: RandomSource) -> list[T]:
    """Fisher–Yates shuffle driven by *rand*; returns *items*."""
    for i in range(len(items) - 1, 0, -1):
        j = min(int(rand() * (i + 1)), i)
        items[i], items[j] = items[j], items[i]
    return items


def pick_weighted(weights: dict[str, float], rand: RandomSource) -> str:
    """Cumulative-weight sampling over *weights* in insertion order.

    Keys with a weight ≤ 0 are never picked unless every weight is ≤ 0,
    in which case the first key is returned and callers must clamp the
    result to their allowed set.
    """
    entries: Sequence[tuple[str, float]] = [(k, w) for k, w in weights.items() if w > 0]
    if not entries:
        return next(iter(weights))
    total = sum(w for _, w in entries)
    r = rand() * total
    for key, w in entries:
        r -= w
        if r <= 0:
            return key
    # float residue
    return entries[-1][0]


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))
