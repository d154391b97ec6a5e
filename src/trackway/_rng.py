"""Random number generator handling.

All stochastic functions take an ``rng`` argument instead of touching a
global stream. Batched simulations derive one child generator per iteration
so each iteration draws from an independent, reproducible sub-stream.
"""

from __future__ import annotations

import numpy as np


def _ensure_rng(
    rng: np.random.Generator | int | None,
) -> np.random.Generator:
    """Convert rng parameter to a Generator instance.

    Parameters
    ----------
    rng : np.random.Generator | int | None
        Random number generator, seed, or None.

    Returns
    -------
    np.random.Generator
        A random number generator instance.
    """
    if rng is None:
        return np.random.default_rng()
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def _spawn_rngs(
    rng: np.random.Generator | int | None,
    n: int,
) -> list[np.random.Generator]:
    """Derive `n` independent child generators from `rng`.

    Parameters
    ----------
    rng : np.random.Generator | int | None
        Parent generator or seed.
    n : int
        Number of children.

    Returns
    -------
    list of np.random.Generator
        Children are statistically independent of each other and of the
        parent's subsequent draws.
    """
    return _ensure_rng(rng).spawn(n)
