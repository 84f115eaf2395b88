"""Numba JIT-compiled scalar kernels for evaluating Chebyshev expansions.

Both kernels take the abscissa already mapped onto ``[-1, 1]``.
"""

import numpy as np
from numba import njit


@njit(cache=True)
def recurrence_jit(coeffs: np.ndarray, xscaled: float, buffer: np.ndarray) -> float:
    """Evaluate via the three-term recurrence, storing T_k(x) in *buffer*.

    Parameters
    ----------
    coeffs : ndarray
        Chebyshev coefficients c_0, ..., c_N.
    xscaled : float
        Evaluation point in [-1, 1].
    buffer : ndarray
        Scratch array with at least ``len(coeffs)`` entries.

    Returns
    -------
    float
        sum_k c_k T_k(x).
    """
    n = coeffs.shape[0]
    buffer[0] = 1.0
    if n == 1:
        return coeffs[0]
    buffer[1] = xscaled
    for k in range(1, n - 1):
        buffer[k + 1] = 2.0 * xscaled * buffer[k] - buffer[k - 1]
    total = 0.0
    for k in range(n):
        total += coeffs[k] * buffer[k]
    return total


@njit(cache=True)
def clenshaw_jit(coeffs: np.ndarray, xscaled: float) -> float:
    """Evaluate via Clenshaw's backward recurrence (no basis storage)."""
    order = coeffs.shape[0] - 1
    if order == 0:
        return coeffs[0]
    u_kp1 = coeffs[order]
    u_kp2 = 0.0
    for k in range(order - 1, 0, -1):
        u_k = 2.0 * xscaled * u_kp1 - u_kp2 + coeffs[k]
        u_kp2 = u_kp1
        u_kp1 = u_k
    return coeffs[0] + xscaled * u_kp1 - u_kp2
