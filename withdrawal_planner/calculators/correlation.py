"""Correlation matrix repair for correlated asset-return draws.

Correlated normal shocks are produced by multiplying independent draws by the
Cholesky factor of the asset correlation matrix.  Hand-entered correlation
assumptions are not always positive definite, in which case no real factor
exists.  :func:`ensure_positive_definite` returns the input unchanged when it
factors, and otherwise repairs it:

1. Diagonalise with cyclic Jacobi rotations (at most 1000 rotations, stopping
   once every off-diagonal entry is below 1e-12).
2. Clamp every eigenvalue to at least 1e-6.
3. Rebuild the matrix and rescale it back to a unit diagonal.

The result is always symmetric, has a unit diagonal and passes
:func:`cholesky`.

Example
-------

>>> fixed = ensure_positive_definite([[1.0, 2.0], [2.0, 1.0]])
>>> cholesky(fixed) is not None
True
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

MAX_JACOBI_ROTATIONS = 1000
OFF_DIAGONAL_TOLERANCE = 1e-12
MIN_EIGENVALUE = 1e-6

MatrixLike = Union[np.ndarray, Sequence[Sequence[float]]]


def _as_square(matrix: MatrixLike) -> np.ndarray:
    a = np.array(matrix, dtype=float)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError(f"expected a square matrix, got shape {a.shape}")
    return a


def cholesky(matrix: MatrixLike) -> Optional[np.ndarray]:
    """Lower-triangular ``L`` with ``L @ L.T == matrix``.

    Returns ``None`` as soon as a pivot to be square-rooted is not strictly
    positive, i.e. when ``matrix`` is not positive definite.
    """
    a = _as_square(matrix)
    n = a.shape[0]
    lower = np.zeros((n, n))
    for i in range(n):
        for j in range(i + 1):
            correction = float(np.dot(lower[i, :j], lower[j, :j]))
            if i == j:
                pivot = a[i, i] - correction
                if pivot <= 0:
                    return None
                lower[i, j] = math.sqrt(pivot)
            else:
                lower[i, j] = (a[i, j] - correction) / lower[j, j]
    return lower


def _largest_off_diagonal(a: np.ndarray) -> Tuple[float, int, int]:
    n = a.shape[0]
    if n < 2:
        return 0.0, 0, 0
    upper = np.abs(np.triu(a, k=1))
    p, q = divmod(int(np.argmax(upper)), n)
    return float(upper[p, q]), p, q


def _jacobi_rotation(
    a: np.ndarray, v: np.ndarray, p: int, q: int
) -> Tuple[np.ndarray, np.ndarray]:
    """Rotate in the (p, q) plane so that ``a[p, q]`` becomes zero.

    Returns the rotated working matrix and the updated eigenvector matrix as
    new arrays; the inputs are left untouched.
    """
    app, aqq, apq = a[p, p], a[q, q], a[p, q]
    theta = (aqq - app) / (2.0 * apq)
    if theta == 0:
        t = 1.0
    else:
        t = math.copysign(1.0, theta) / (abs(theta) + math.sqrt(theta * theta + 1.0))
    c = 1.0 / math.sqrt(t * t + 1.0)
    s = t * c

    rotated = a.copy()
    col_p = c * a[:, p] - s * a[:, q]
    col_q = s * a[:, p] + c * a[:, q]
    rotated[:, p] = col_p
    rotated[p, :] = col_p
    rotated[:, q] = col_q
    rotated[q, :] = col_q
    rotated[p, p] = c * c * app - 2.0 * s * c * apq + s * s * aqq
    rotated[q, q] = s * s * app + 2.0 * s * c * apq + c * c * aqq
    rotated[p, q] = rotated[q, p] = 0.0

    vectors = v.copy()
    vectors[:, p] = c * v[:, p] - s * v[:, q]
    vectors[:, q] = s * v[:, p] + c * v[:, q]
    return rotated, vectors


def jacobi_eigen(matrix: MatrixLike) -> Tuple[np.ndarray, np.ndarray]:
    """Eigenvalues and eigenvectors (as columns) of a symmetric matrix."""
    a = _as_square(matrix)
    v = np.eye(a.shape[0])
    rotations = 0
    while rotations < MAX_JACOBI_ROTATIONS:
        largest, p, q = _largest_off_diagonal(a)
        if largest < OFF_DIAGONAL_TOLERANCE:
            break
        a, v = _jacobi_rotation(a, v, p, q)
        rotations += 1
    logger.debug("jacobi diagonalisation finished after %d rotations", rotations)
    return np.diag(a).copy(), v


def ensure_positive_definite(matrix: MatrixLike) -> np.ndarray:
    """Return a valid (positive-definite, unit-diagonal) correlation matrix.

    Parameters
    ----------
    matrix : array-like
        Square matrix of pairwise correlations.  It is symmetrised first.

    Returns
    -------
    numpy.ndarray
        The symmetrised input if it already admits a Cholesky factor,
        otherwise the eigenvalue-clamped repair.
    """
    a = _as_square(matrix)
    sym = (a + a.T) / 2.0
    if cholesky(sym) is not None:
        return sym

    logger.debug("correlation matrix is not positive definite, repairing")
    eigenvalues, vectors = jacobi_eigen(sym)
    clamped = np.maximum(eigenvalues, MIN_EIGENVALUE)
    rebuilt = (vectors * clamped) @ vectors.T
    rebuilt = (rebuilt + rebuilt.T) / 2.0
    scale = np.sqrt(np.diag(rebuilt))
    return rebuilt / np.outer(scale, scale)


__all__ = [
    "cholesky",
    "jacobi_eigen",
    "ensure_positive_definite",
]
