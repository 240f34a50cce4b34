# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# sampling.py
# -----------------------------------------------------------------------------
# Purpose:
#   Random variates used by the model: uniform reals (per-item scan times),
#   uniform integers (basket sizes, random routing) and exponential gaps
#   (inter-arrival times).
#
# Design notes:
#   - Each run owns a private random.Random seeded from the config, so
#     replications with the same seed are identical (common random numbers).
#
# Usage:
#   rng = Sampler(seed=3); rng.exponential(5.0)
# -----------------------------------------------------------------------------

from __future__ import annotations
import random
from typing import Optional

class Sampler:
    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def uniform_real(self, lo: float, hi: float) -> float:
        return self._rng.uniform(lo, hi)

    def uniform_int(self, lo: int, hi: int) -> int:
        """Inclusive on both ends, like randint."""
        return self._rng.randint(lo, hi)

    def exponential(self, mean: float) -> float:
        """Exponential variate with the given MEAN (not rate)."""
        if mean <= 0:
            raise ValueError("mean must be > 0")
        return self._rng.expovariate(1.0 / mean)
