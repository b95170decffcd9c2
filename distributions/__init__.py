"""
Distributions package: random return generation for Monte Carlo trials.
"""

from .sampler import BoxMullerSampler, root_seed_sequence, sampler_for_stream

__all__ = [
    "BoxMullerSampler",
    "root_seed_sequence",
    "sampler_for_stream",
]
