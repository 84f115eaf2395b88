"""Shared helpers for Chebyshev expansion arithmetic.

All coefficient routines work on plain float arrays in the canonical
basis; domain bookkeeping stays in :class:`~pychebtools.ChebyshevExpansion`.

References
----------
- Mason & Handscomb (2003), "Chebyshev Polynomials", Chapman & Hall/CRC,
  Section 2.3.
"""

from __future__ import annotations

from math import comb

import numpy as np


def _is_scalar(value) -> bool:
    """Return True if *value* is a numeric scalar (int, float, or numpy scalar)."""
    return isinstance(value, (int, float, np.integer, np.floating))


def _check_compatible(a, b) -> None:
    """Validate that two expansions can be combined arithmetically.

    Both operands must be the same type and live on the same domain.
    Differing coefficient lengths are fine; they are reconciled by
    zero-padding.
    """
    if type(a) is not type(b):
        raise TypeError(
            f"Cannot combine {type(a).__name__} with {type(b).__name__}; "
            f"operands must be the same type."
        )
    if a.xmin() != b.xmin() or a.xmax() != b.xmax():
        raise ValueError(
            f"Domain mismatch: [{a.xmin()}, {a.xmax()}] vs "
            f"[{b.xmin()}, {b.xmax()}]"
        )


def add_coefficients(c1: np.ndarray, c2: np.ndarray, sign: float = 1.0) -> np.ndarray:
    """Return ``c1 + sign * c2``, treating the shorter array as zero-padded."""
    n1, n2 = len(c1), len(c2)
    nmin = min(n1, n2)
    out = np.empty(max(n1, n2))
    out[:nmin] = c1[:nmin] + sign * c2[:nmin]
    if n1 > nmin:
        out[nmin:] = c1[nmin:]
    elif n2 > nmin:
        out[nmin:] = sign * c2[nmin:]
    return out


def multiply_coefficients(c1: np.ndarray, c2: np.ndarray) -> np.ndarray:
    """Product of two Chebyshev series.

    Uses ``T_m T_n = (T_{m+n} + T_{|m-n|}) / 2``: every pair ``(i, j)``
    adds ``c1[i] * c2[j] / 2`` to entries ``i + j`` and ``|i - j|``.

    Contributions to each output entry are summed in sorted order, so the
    result is bit-for-bit independent of the operand order.
    """
    n1, n2 = len(c1), len(c2)
    half = (np.outer(c1, c2) / 2.0).ravel()
    i, j = np.indices((n1, n2))
    index = np.concatenate([(i + j).ravel(), np.abs(i - j).ravel()])
    values = np.concatenate([half, half])
    order = np.lexsort((values, index))
    return np.bincount(index[order], weights=values[order], minlength=n1 + n2 - 1)


def times_x_coefficients(c: np.ndarray, xmin: float, xmax: float) -> np.ndarray:
    """Coefficients of ``x * f(x)`` on ``[xmin, xmax]``.

    In the canonical variable, ``x T_0 = T_1`` and
    ``x T_n = (T_{n+1} + T_{n-1}) / 2``.  The real-world variable is
    ``a * xs + b`` with ``a = (xmax - xmin) / 2`` and ``b = (xmax + xmin) / 2``.
    """
    n = len(c)
    xs_times = np.zeros(n + 1)
    xs_times[1] = c[0]
    if n > 1:
        xs_times[2:] += c[1:] / 2.0
        xs_times[:n - 1] += c[1:] / 2.0
    a = (xmax - xmin) / 2.0
    b = (xmax + xmin) / 2.0
    if a == 1.0 and b == 0.0:
        return xs_times
    out = a * xs_times
    out[:n] += b * c
    return out


def powxn_canonical(n: int) -> np.ndarray:
    """Chebyshev coefficients of ``x^n`` on ``[-1, 1]``.

    .. math::

        x^n = 2^{1-n} {\\sum_{k=0}^{\\lfloor n/2 \\rfloor}}' \\binom{n}{k} T_{n-2k}(x)

    where the prime halves the ``T_0`` term (Mason & Handscomb, eq. 2.14).
    """
    if n < 0:
        raise ValueError(f"power must be >= 0, got {n}")
    c = np.zeros(n + 1)
    scale = 2.0 ** (1 - n)
    for k in range(n // 2 + 1):
        term = comb(n, k) * scale
        if n - 2 * k == 0:
            term /= 2.0
        c[n - 2 * k] = term
    return c


def powxn_coefficients(n: int, xmin: float, xmax: float) -> np.ndarray:
    """Chebyshev coefficients of ``x^n`` on ``[xmin, xmax]``.

    Expands ``(a * xs + b)^n`` binomially and sums the canonical monomials.
    """
    if xmin == -1.0 and xmax == 1.0:
        return powxn_canonical(n)
    a = (xmax - xmin) / 2.0
    b = (xmax + xmin) / 2.0
    c = np.zeros(n + 1)
    for j in range(n + 1):
        weight = comb(n, j) * a ** j * b ** (n - j)
        if weight != 0.0:
            c[:j + 1] += weight * powxn_canonical(j)
    return c
