"""
Reproducible with-replacement resampling.

Every replicate b draws from its own generator seeded by
SeedSequence(seed, spawn_key=stream + (b,)). The index set for b is a
pure function of (seed, stream, b, n), so replicates can be generated in
any order, on any number of workers, and still be bit-identical.

Streams separate the independent uses of one seed:
    OUTER_STREAM     outer bootstrap replicates
    INNER_STREAM     nested resamples of outer replicate b: (INNER, b)
    ORIGINAL_STREAM  nested resamples of the original sample (t0 variance)
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pybootci.core.exceptions import InvalidArgumentError
from pybootci.core.validation import check_int

OUTER_STREAM = 0
INNER_STREAM = 1
ORIGINAL_STREAM = 2


def resolve_seed(seed: int | None) -> int:
    """
    Validate a seed, or draw a fresh one from OS entropy.

    The returned value is what gets recorded on the ReplicateSet, so a
    run with seed=None can still be reproduced afterwards.
    """
    if seed is None:
        return int(np.random.SeedSequence().entropy)
    return check_int(seed, 0, "seed")


class Resampler:
    """
    Draws index multisets of size n uniformly with replacement.

    Args:
        n: Sample size. Must be >= 1.
        seed: Non-negative integer seed.
        stream: Spawn-key prefix identifying this family of draws.
    """

    def __init__(self, n: int, seed: int, stream: tuple[int, ...] = (OUTER_STREAM,)):
        if n < 1:
            raise InvalidArgumentError(
                f"cannot resample an empty sample (n={n})"
            )
        self.n = n
        self.seed = seed
        self.stream = tuple(stream)

    def rng(self, b: int) -> np.random.Generator:
        """Generator dedicated to replicate b."""
        ss = np.random.SeedSequence(self.seed, spawn_key=self.stream + (b,))
        return np.random.default_rng(ss)

    def indices(self, b: int) -> NDArray[np.intp]:
        """Index multiset for replicate b, shape (n,)."""
        return self.rng(b).integers(0, self.n, size=self.n, dtype=np.intp)

    def draw(self, B: int) -> NDArray[np.intp]:
        """All B index multisets, shape (B, n)."""
        B = check_int(B, 1, "B")
        out = np.empty((B, self.n), dtype=np.intp)
        for b in range(B):
            out[b] = self.indices(b)
        return out

    def __repr__(self) -> str:
        return f"Resampler(n={self.n}, seed={self.seed}, stream={self.stream})"
