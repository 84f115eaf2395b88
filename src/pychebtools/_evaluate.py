"""Batched evaluation of Chebyshev expansions on canonical abscissae."""

from __future__ import annotations

import numpy as np


def recurrence_batch(coeffs: np.ndarray, xscaled: np.ndarray) -> np.ndarray:
    """Evaluate at many points by building the basis matrix T_k(x_i).

    The recurrence is run column-wise over all points at once and the
    result is a single matrix-vector product with the coefficients.
    """
    xscaled = np.asarray(xscaled, dtype=float).ravel()
    n = len(coeffs)
    basis = np.empty((xscaled.size, n))
    basis[:, 0] = 1.0
    if n > 1:
        basis[:, 1] = xscaled
        for k in range(1, n - 1):
            basis[:, k + 1] = 2.0 * xscaled * basis[:, k] - basis[:, k - 1]
    return basis @ coeffs


def clenshaw_batch(coeffs: np.ndarray, xscaled: np.ndarray) -> np.ndarray:
    """Vectorized Clenshaw summation over an array of points."""
    xscaled = np.asarray(xscaled, dtype=float)
    order = len(coeffs) - 1
    if order == 0:
        return np.full(xscaled.shape, coeffs[0], dtype=float)
    u_kp1 = np.full(xscaled.shape, coeffs[order], dtype=float)
    u_kp2 = np.zeros(xscaled.shape)
    for k in range(order - 1, 0, -1):
        u_k = 2.0 * xscaled * u_kp1 - u_kp2 + coeffs[k]
        u_kp2 = u_kp1
        u_kp1 = u_k
    return coeffs[0] + xscaled * u_kp1 - u_kp2
