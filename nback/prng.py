"""Seeded random streams for reproducible sequences.

Challenge links and daily races replay a session from its seed, so the
seeded stream must match the web game bit for bit: mulberry32 over a
32-bit state, yielding floats in [0, 1).
"""

import random
from collections.abc import Callable

RandomSource = Callable[[], float]

_MASK = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    """Low 32 bits of a 32-bit integer product (JS Math.imul, unsigned)."""
    return (a * b) & _MASK


def mulberry32(seed: int) -> RandomSource:
    """Return a mulberry32 stream seeded with `seed` (taken modulo 2**32)."""
    state = seed & _MASK

    def next_float() -> float:
        nonlocal state
        state = (state + 0x6D2B79F5) & _MASK
        t = _imul(state ^ (state >> 15), state | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK
        return ((t ^ (t >> 14)) & _MASK) / 4294967296

    return next_float


def random_source(seed: int | None = None) -> RandomSource:
    """Seeded mulberry32 stream, or a fresh OS-seeded stream when no seed is given."""
    if seed is None:
        return random.Random().random
    return mulberry32(seed)


def pick(rand: RandomSource, values):
    """Uniformly pick one element of `values` using a single draw."""
    return values[int(rand() * len(values))]
