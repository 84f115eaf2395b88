"""Coefficient transforms from values at Chebyshev-Lobatto nodes.

A *fitter* is any callable ``fitter(order, func, xmin, xmax) -> ndarray``
that returns ``order + 1`` Chebyshev coefficients approximating ``func`` on
``[xmin, xmax]``.  ``func`` is called once with the array of real-world
node positions.  :func:`dct_fitter` and :func:`fft_fitter` are the two
realizations shipped here; the expansion code only relies on the signature.

References
----------
- Boyd (2013), SIAM Review 55(2):375-396, Appendix A.
- Trefethen (2013), "Approximation Theory and Approximation Practice",
  SIAM, Chapter 3.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from pychebtools.nodes import NodeCache, default_node_cache, to_realworld

Fitter = Callable[[int, Callable, float, float], np.ndarray]


def coefficients_dct(values: np.ndarray) -> np.ndarray:
    """Chebyshev coefficients from values at the Lobatto nodes via DCT-I.

    Parameters
    ----------
    values : ndarray of shape (N + 1,)
        Function values at ``cos(pi * k / N)``, ``k = 0..N`` (descending
        node order).

    Returns
    -------
    ndarray of shape (N + 1,)
        Coefficients c_0, ..., c_N.
    """
    from scipy.fft import dct

    values = np.asarray(values, dtype=float)
    if values.ndim != 1 or len(values) < 2:
        raise ValueError(
            f"need at least 2 node values (order >= 1), got shape {values.shape}"
        )
    n = len(values) - 1
    coeffs = dct(values, type=1) / n
    coeffs[0] /= 2
    coeffs[n] /= 2
    return coeffs


def coefficients_fft(values: np.ndarray) -> np.ndarray:
    """Chebyshev coefficients from values at the Lobatto nodes via a real FFT.

    The node values are mirrored onto the unit circle (length ``2N``) and
    transformed; the real part of the first ``N + 1`` Fourier modes are the
    Chebyshev coefficients up to the end-point halving.  Agrees with
    :func:`coefficients_dct` to rounding.
    """
    values = np.asarray(values, dtype=float)
    if values.ndim != 1 or len(values) < 2:
        raise ValueError(
            f"need at least 2 node values (order >= 1), got shape {values.shape}"
        )
    n = len(values) - 1
    unit_circle = np.concatenate([values, values[-2:0:-1]])
    coeffs = np.fft.rfft(unit_circle).real / n
    coeffs[0] /= 2
    coeffs[n] /= 2
    return coeffs


def sample_at_nodes(order: int, func: Callable, xmin: float, xmax: float,
                    node_cache: NodeCache | None = None) -> np.ndarray:
    """Evaluate *func* once on the real-world Lobatto nodes of *order*."""
    cache = default_node_cache if node_cache is None else node_cache
    x = to_realworld(cache.get(order), xmin, xmax)
    values = np.asarray(func(x), dtype=float)
    if values.shape != x.shape:
        raise ValueError(
            f"func returned shape {values.shape} for {x.shape[0]} nodes; "
            f"it must map an array of abscissae to an array of values"
        )
    return values


def dct_fitter(order: int, func: Callable, xmin: float, xmax: float,
               node_cache: NodeCache | None = None) -> np.ndarray:
    """Fit *func* at *order* on ``[xmin, xmax]`` with the DCT-I transform."""
    return coefficients_dct(sample_at_nodes(order, func, xmin, xmax, node_cache))


def fft_fitter(order: int, func: Callable, xmin: float, xmax: float,
               node_cache: NodeCache | None = None) -> np.ndarray:
    """Fit *func* at *order* on ``[xmin, xmax]`` with the FFT transform."""
    return coefficients_fft(sample_at_nodes(order, func, xmin, xmax, node_cache))


def vectorize_scalar(func: Callable) -> Callable:
    """Wrap a scalar callable so it maps an array of abscissae to values."""
    def sampled(x):
        return np.array([func(float(xk)) for xk in x], dtype=float)
    return sampled
