"""
Normal sampler for monthly returns: Box-Muller transform over uniform draws.

For two independent U1, U2 ~ Uniform(0, 1):
    Z0 = sqrt(-2 ln U1) * cos(2 pi U2)
    Z1 = sqrt(-2 ln U1) * sin(2 pi U2)
are independent standard normals. U = 0 is rejected and redrawn
(ln 0 is -inf).

The scalar path (`normal`) serves the single-trial executor; `standard_normals`
fills whole blocks of trials at once and uses both outputs of each pair.

Reproducibility: the runner spawns one child SeedSequence per chunk of trials
from a single root sequence and builds each chunk its own sampler,
so a given seed gives the same result however the chunks are scheduled.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np


class BoxMullerSampler:
    """
    Independent normal draws via Box-Muller.

    Usage:
        sampler = BoxMullerSampler(seed=42)
        r = sampler.normal(mean=0.0067, std=0.046)   # one monthly return
        z = sampler.standard_normals(10_000)          # one month for a block of trials
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        *,
        seed: Optional[int] = None,
        cache_sibling: bool = False,
    ):
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.cache_sibling = cache_sibling
        self._spare: Optional[float] = None

    def _nonzero_uniform(self) -> float:
        u = 0.0
        while u == 0.0:
            u = self.rng.random()
        return u

    def standard_normal(self) -> float:
        if self._spare is not None:
            z, self._spare = self._spare, None
            return z
        u1 = self._nonzero_uniform()
        u2 = self._nonzero_uniform()
        radius = math.sqrt(-2.0 * math.log(u1))
        theta = 2.0 * math.pi * u2
        if self.cache_sibling:
            self._spare = radius * math.sin(theta)
        return radius * math.cos(theta)

    def normal(self, mean: float, std: float) -> float:
        return mean + self.standard_normal() * std

    def _nonzero_uniforms(self, size: int) -> np.ndarray:
        u = self.rng.random(size)
        zeros = u == 0.0
        while zeros.any():
            u[zeros] = self.rng.random(int(zeros.sum()))
            zeros = u == 0.0
        return u

    def standard_normals(self, size: int) -> np.ndarray:
        """`size` independent N(0, 1) draws, two per uniform pair."""
        n_pairs = (size + 1) // 2
        u1 = self._nonzero_uniforms(n_pairs)
        u2 = self._nonzero_uniforms(n_pairs)
        radius = np.sqrt(-2.0 * np.log(u1))
        theta = 2.0 * np.pi * u2
        z = np.concatenate([radius * np.cos(theta), radius * np.sin(theta)])
        return z[:size]

    def normals(self, mean, std, size: int) -> np.ndarray:
        return mean + self.standard_normals(size) * std


def root_seed_sequence(seed: Optional[int]) -> np.random.SeedSequence:
    """SeedSequence for a run; seed=None draws fresh entropy."""
    return np.random.SeedSequence(seed)


def sampler_for_stream(seed_seq: np.random.SeedSequence) -> BoxMullerSampler:
    return BoxMullerSampler(np.random.default_rng(seed_seq))
