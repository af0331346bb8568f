"""StampSeed

Deterministic per-stamp seeding.

- fnv1a_32(): stable 32-bit FNV-1a over UTF-8 bytes (same value in every
  process and on every platform, unlike hash()).
- stamp_seed(): seed for one record under one run seed.
- StampRandom: the explicit random stream a single stamp render draws from.

Every random decision of a stamp (trace paths, border style) is taken from
one StampRandom in a fixed order, so a stamp is a pure function of
(run_seed, record id).
"""

from __future__ import annotations

import numpy as np


FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
_MASK32 = 0xFFFFFFFF


def fnv1a_32(text: str) -> int:
    h = FNV_OFFSET_BASIS
    for b in text.encode("utf-8"):
        h ^= b
        h = (h * FNV_PRIME) & _MASK32
    return h


def stamp_seed(run_seed: int, key: str) -> int:
    return fnv1a_32(f"{run_seed}::{key}")


class StampRandom:
    """Random stream owned by one stamp render."""

    def __init__(self, seed: int):
        self.seed = int(seed) & _MASK32
        self._rng = np.random.default_rng(self.seed)

    @classmethod
    def for_record(cls, run_seed: int, key: str) -> "StampRandom":
        return cls(stamp_seed(run_seed, key))

    def random(self) -> float:
        return float(self._rng.random())

    def uniform(self, lo: float, hi: float) -> float:
        # lo + u * (hi - lo), u in [0, 1)
        return lo + self.random() * (hi - lo)

    def pick_index(self, n: int) -> int:
        if n <= 0:
            raise ValueError("pick_index requiere n >= 1")
        return min(int(self.random() * n), n - 1)

    def choice(self, items):
        return items[self.pick_index(len(items))]
