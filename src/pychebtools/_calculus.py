"""Shared helpers for Chebyshev calculus operations (derivatives, integrals, roots).

References
----------
- Mason & Handscomb (2003), "Chebyshev Polynomials", Chapman & Hall/CRC,
  eq. 2.52 (derivative) and Section 2.4.4 (integral).
- Good (1961), "The colleague matrix, a Chebyshev analogue of the companion
  matrix", Quarterly J. Mech. 14:195-196.
- Boyd (2013), "Finding the Zeros of a Univariate Equation: Proxy
  Rootfinders, Chebyshev Interpolation, and the Companion Matrix",
  SIAM Review 55(2):375-396, Appendix A.2.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

from pychebtools._evaluate import clenshaw_batch
from pychebtools.nodes import NodeCache, default_node_cache, to_realworld

# Eigenvalues with a larger imaginary part are treated as complex roots
IMAG_TOL = 10 * np.finfo(float).eps

# Canonical roots this close outside [-1, 1] are snapped onto the boundary
BOUNDARY_TOL = 1e-12

# Relative tolerance (times span + 1) for merging roots across intervals
MERGE_TOL = 1e-12


def _deriv_coefficients(c: np.ndarray, xmin: float, xmax: float) -> np.ndarray:
    """Coefficients of the first derivative on ``[xmin, xmax]``.

    Backward form of Mason & Handscomb eq. 2.52:
    ``d_{r-1} = d_{r+1} + 2 r c_r``, with ``d_0`` halved and every entry
    scaled by ``2 / (xmax - xmin)``.
    """
    order = len(c) - 1
    if order == 0:
        return np.zeros(1)
    d = np.zeros(order + 2)
    for r in range(order, 0, -1):
        d[r - 1] = d[r + 1] + 2.0 * r * c[r]
    d = d[:order]
    d[0] /= 2.0
    return d / ((xmax - xmin) / 2.0)


def _integral_coefficients(c: np.ndarray, xmin: float, xmax: float) -> np.ndarray:
    """Coefficients of an antiderivative on ``[xmin, xmax]``.

    ``C_k = (c_{k-1} - c_{k+1}) / (2k)`` for ``k >= 1`` with ``c_0`` counted
    twice in ``C_1``; the constant of integration ``C_0`` is left at zero.
    """
    n = len(c)
    padded = np.concatenate([c, [0.0, 0.0]])
    out = np.zeros(n + 1)
    out[1] = (2.0 * padded[0] - padded[2]) / 2.0
    for k in range(2, n + 1):
        out[k] = (padded[k - 1] - padded[k + 1]) / (2.0 * k)
    return out * ((xmax - xmin) / 2.0)


def _trim_trailing_zeros(c: np.ndarray) -> np.ndarray:
    """Drop exact zeros from the high-order end (keeps at least one entry)."""
    nonzero = np.flatnonzero(c)
    if nonzero.size == 0:
        return c[:1]
    return c[:nonzero[-1] + 1]


def _companion_matrix(c: np.ndarray) -> np.ndarray:
    """Chebyshev companion (colleague) matrix of a series with ``c[-1] != 0``.

    Row ``j`` encodes ``x T_j`` in terms of ``T_{j-1}`` and ``T_{j+1}``;
    the last row closes the system by substituting
    ``T_N = -sum_{k<N} c_k T_k / c_N``.  Row 0 uses ``x T_0 = T_1`` (factor
    one), every other row ``x T_j = (T_{j+1} + T_{j-1}) / 2``.
    """
    order = len(c) - 1
    A = np.zeros((order, order))
    if order == 0:
        return A
    if order > 1:
        A[0, 1] = 1.0
        for j in range(1, order - 1):
            A[j, j - 1] = 0.5
            A[j, j + 1] = 0.5
        A[order - 1, order - 2] = 0.5
    closure = 1.0 if order == 1 else 0.5
    A[order - 1, :] -= closure * c[:order] / c[order]
    return A


def _real_roots(c: np.ndarray, xmin: float, xmax: float,
                only_in_domain: bool = True) -> np.ndarray:
    """Real roots of a Chebyshev series from its companion matrix eigenvalues.

    Parameters
    ----------
    c : ndarray
        Chebyshev coefficients; exact trailing zeros are ignored.
    xmin, xmax : float
        Domain of the series.
    only_in_domain : bool
        If True, keep only roots in ``[xmin, xmax]``.

    Returns
    -------
    ndarray
        Sorted real roots in real-world coordinates.
    """
    c = _trim_trailing_zeros(np.asarray(c, dtype=float))
    if len(c) < 2:
        return np.array([], dtype=float)

    eigvals = np.linalg.eigvals(_companion_matrix(c))
    t = eigvals.real[np.abs(eigvals.imag) < IMAG_TOL]
    if only_in_domain:
        t = t[(t >= -1.0 - BOUNDARY_TOL) & (t <= 1.0 + BOUNDARY_TOL)]
        t = np.clip(t, -1.0, 1.0)

    x = np.sort(to_realworld(t, xmin, xmax))
    if only_in_domain:
        x = np.clip(x, xmin, xmax)
    return x


def _real_roots_approx(c: np.ndarray, xmin: float, xmax: float,
                       npoints: int, node_cache: NodeCache | None = None) -> np.ndarray:
    """Approximate real roots by sign-change bracketing and local quadratics.

    Samples the series at ``npoints + 1`` Lobatto points, and for every
    sign change fits a quadratic through three neighbouring samples, keeping
    its root inside the bracket.  Falls back to linear interpolation when the
    quadratic has no root in the bracket.
    """
    if npoints < 2:
        raise ValueError(f"npoints must be >= 2, got {npoints}")
    cache = default_node_cache if node_cache is None else node_cache
    xs = cache.get(npoints)
    ys = clenshaw_batch(np.asarray(c, dtype=float), xs)

    roots = []
    for i in range(npoints):
        y1, y2 = ys[i], ys[i + 1]
        if np.signbit(y1) == np.signbit(y2):
            continue
        lo, hi = min(xs[i], xs[i + 1]), max(xs[i], xs[i + 1])

        # Three samples around the bracket: i-1, i, i+1 (or i, i+1, i+2 at the edge)
        i0 = min(max(i - 1, 0), npoints - 2)
        x3, y3 = xs[i0:i0 + 3], ys[i0:i0 + 3]
        abc = np.linalg.solve(np.vander(x3, 3), y3)
        candidates = [
            r.real for r in np.atleast_1d(np.roots(abc))
            if abs(r.imag) <= IMAG_TOL and lo <= r.real <= hi
        ]
        if len(candidates) == 1:
            t = candidates[0]
        elif y2 != y1:
            t = xs[i] - y1 * (xs[i + 1] - xs[i]) / (y2 - y1)
        else:
            t = xs[i]
        roots.append(t)

    return np.sort(to_realworld(np.array(roots, dtype=float), xmin, xmax))


def _merge_roots(root_sets: Iterable[np.ndarray], span: float) -> np.ndarray:
    """Concatenate, sort and de-duplicate roots from adjacent intervals.

    Roots closer than ``MERGE_TOL * (span + 1)`` are considered the same
    (typically a root on a shared interval boundary found twice).
    """
    root_sets = [np.asarray(r, dtype=float) for r in root_sets]
    if not root_sets:
        return np.array([], dtype=float)
    combined = np.sort(np.concatenate(root_sets))
    if len(combined) > 1:
        mask = np.concatenate([[True], np.diff(combined) > MERGE_TOL * (abs(span) + 1)])
        combined = combined[mask]
    return combined
