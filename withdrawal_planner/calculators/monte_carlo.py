"""Sampling primitives for multi-asset Monte Carlo runs.

Annual asset returns are modelled as log-normal: ``ln(1 + r)`` is normal with
mean ``ln(1 + geometric_mean)`` and standard deviation ``log_volatility``.  The
standard-normal shock is clamped to +/-5 so a single draw can never produce an
absurd tail event, and the simple return is always above -100%.

Randomness comes from an injectable :class:`numpy.random.Generator`; pass a
seeded generator (or an explicit shock) for repeatable results.

Example
-------

>>> round(generate_return(0.07, 0.18, z=0.0), 6)
0.07
>>> percentile(list(range(1, 101)), 0.9)
91
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, TypeVar

import numpy as np

SHOCK_LIMIT = 5.0

T = TypeVar("T")


def standard_normal(rng: Optional[np.random.Generator] = None) -> float:
    """One N(0, 1) draw via the Box–Muller transform."""
    rng = rng if rng is not None else np.random.default_rng()
    u1 = 1.0 - rng.random()  # (0, 1] keeps the log finite
    u2 = rng.random()
    return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)


def generate_return(
    geometric_mean: float,
    log_volatility: float,
    z: Optional[float] = None,
    rng: Optional[np.random.Generator] = None,
) -> float:
    """Draw one simple annual return.

    Parameters
    ----------
    geometric_mean : float
        Long-run geometric mean return, e.g. ``0.07``.
    log_volatility : float
        Standard deviation of the log return.
    z : float, optional
        Standard-normal shock.  Drawn from ``rng`` when omitted; supply it
        when shocks are correlated across assets.
    rng : numpy.random.Generator, optional
        Source of randomness for the default shock.

    Returns
    -------
    float
        ``exp(ln(1 + geometric_mean) + log_volatility * z) - 1``.
    """
    if z is None:
        z = standard_normal(rng)
    z = max(-SHOCK_LIMIT, min(SHOCK_LIMIT, z))
    return math.exp(math.log1p(geometric_mean) + log_volatility * z) - 1.0


def correlated_shocks(
    factor: np.ndarray, rng: Optional[np.random.Generator] = None
) -> np.ndarray:
    """Turn independent normals into correlated ones using a Cholesky factor.

    ``factor`` is the lower-triangular factor of a repaired correlation matrix
    (see :mod:`.correlation`); the result has one shock per asset.
    """
    rng = rng if rng is not None else np.random.default_rng()
    factor = np.asarray(factor, dtype=float)
    independent = np.array([standard_normal(rng) for _ in range(factor.shape[0])])
    return factor @ independent


def percentile(sorted_values: Sequence[T], fraction: float) -> Optional[T]:
    """Order statistic at ``fraction`` of an ascending sequence (no interpolation).

    Returns ``None`` for an empty sequence.
    """
    if len(sorted_values) == 0:
        return None
    index = min(int(math.floor(len(sorted_values) * fraction)), len(sorted_values) - 1)
    return sorted_values[index]


__all__ = [
    "SHOCK_LIMIT",
    "standard_normal",
    "generate_return",
    "correlated_shocks",
    "percentile",
]
