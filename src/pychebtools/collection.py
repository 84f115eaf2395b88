"""Piecewise Chebyshev approximation over contiguous intervals.

A :class:`ChebyshevCollection` holds an ordered list of expansions whose
domains tile an interval, such as the partition returned by
:func:`~pychebtools.splitting.dyadic_splitting`, and evaluates, integrates
and solves across the pieces.
"""

from __future__ import annotations

import os
import pickle
import warnings
from typing import List, Sequence

import numpy as np

from pychebtools._calculus import _merge_roots
from pychebtools.expansion import ChebyshevExpansion

# Relative gap (times span + 1) tolerated between adjacent pieces
CONTIGUITY_TOL = 1e-12


class ChebyshevCollection:
    """Ordered, contiguous set of :class:`ChebyshevExpansion` pieces.

    Parameters
    ----------
    expansions : sequence of ChebyshevExpansion
        Pieces in ascending order; each piece must start where the previous
        one ends.

    Examples
    --------
    >>> import math
    >>> from pychebtools import dyadic_splitting
    >>> cc = ChebyshevCollection(dyadic_splitting(10, math.exp, 0, 4, 3, 1e-13))
    >>> abs(cc(1.0) - math.e) < 1e-12
    True
    """

    def __init__(self, expansions: Sequence[ChebyshevExpansion]):
        expansions = list(expansions)
        if not expansions:
            raise ValueError("A ChebyshevCollection needs at least one expansion")
        for i, exp in enumerate(expansions):
            if not isinstance(exp, ChebyshevExpansion):
                raise TypeError(
                    f"Piece {i} is a {type(exp).__name__}, "
                    f"expected ChebyshevExpansion"
                )
        span = expansions[-1].xmax() - expansions[0].xmin()
        for i in range(len(expansions) - 1):
            gap = expansions[i + 1].xmin() - expansions[i].xmax()
            if abs(gap) > CONTIGUITY_TOL * (abs(span) + 1):
                raise ValueError(
                    f"Pieces {i} and {i + 1} are not contiguous: "
                    f"[{expansions[i].xmin()}, {expansions[i].xmax()}] then "
                    f"[{expansions[i + 1].xmin()}, {expansions[i + 1].xmax()}]"
                )

        self._exps = expansions
        # _edges[i], _edges[i + 1] bound piece i
        self._edges = np.array(
            [e.xmin() for e in expansions] + [expansions[-1].xmax()]
        )
    # ------------------------------------------------------------------
    # Lookup and evaluation
    # ------------------------------------------------------------------

    def xmin(self) -> float:
        return float(self._edges[0])

    def xmax(self) -> float:
        return float(self._edges[-1])

    def get_exps(self) -> List[ChebyshevExpansion]:
        """The pieces, in ascending order."""
        return list(self._exps)

    def __len__(self) -> int:
        return len(self._exps)

    def _check_in_domain(self, x) -> None:
        x = np.asarray(x)
        if np.any(x < self._edges[0]) or np.any(x > self._edges[-1]):
            raise ValueError(
                f"x outside the domain [{self._edges[0]}, {self._edges[-1]}]"
            )

    def get_hinted_index(self, x: float, hint: int) -> int:
        """Index of the piece containing *x*, checking piece *hint* first.

        Neighbours of the hinted piece are tried next; any other position
        falls back to a binary search.  Useful when evaluating a sequence
        of nearby points.
        """
        self._check_in_domain(x)
        n = len(self._exps)
        for i in (hint, hint + 1, hint - 1):
            if 0 <= i < n and self._edges[i] <= x <= self._edges[i + 1]:
                return i
        return int(self._index(x))

    def _index(self, x):
        """Piece index for each point (right-closed at the last edge)."""
        idx = np.searchsorted(self._edges, x, side="right") - 1
        return np.clip(idx, 0, len(self._exps) - 1)

    def __call__(self, x):
        """Evaluate at a scalar or an array of points inside the domain."""
        self._check_in_domain(x)
        if np.ndim(x) == 0:
            return self._exps[int(self._index(float(x)))].y_Clenshaw(float(x))

        x = np.asarray(x, dtype=float)
        idx = self._index(x)
        out = np.empty(x.shape)
        for i in np.unique(idx):
            mask = idx == i
            out[mask] = self._exps[i].y(x[mask])
        return out

    # ------------------------------------------------------------------
    # Calculus
    # ------------------------------------------------------------------

    def integrate(self, a: float, b: float) -> float:
        """Definite integral of the piecewise function from *a* to *b*.

        Returns the negated integral when ``a > b``.
        """
        self._check_in_domain([a, b])
        if a > b:
            return -self.integrate(b, a)
        total = 0.0
        for i, piece in enumerate(self._exps):
            lo = max(a, self._edges[i])
            hi = min(b, self._edges[i + 1])
            if hi > lo:
                F = piece.integrate(1)
                total += F.y_Clenshaw(hi) - F.y_Clenshaw(lo)
        return total

    def get_extrema(self) -> np.ndarray:
        """Locations of interior local extrema (real roots of the derivative)."""
        roots = [e.deriv(1).real_roots(True) for e in self._exps]
        return _merge_roots(roots, self.xmax() - self.xmin())

    def real_roots(self) -> np.ndarray:
        """Sorted real roots across all pieces."""
        return ChebyshevExpansion.real_roots_intervals(self._exps, True)

    # ------------------------------------------------------------------
    # Inversion
    # ------------------------------------------------------------------

    def solve_for_x(self, y: float, a: float, b: float,
                    xtol: float = 1e-12, max_iter: int = 100) -> float:
        """Solve ``f(x) = y`` for *x* in ``[a, b]`` with Brent's method.

        Parameters
        ----------
        y : float
            Target value.
        a, b : float
            Bracket inside the domain; ``f(a) - y`` and ``f(b) - y`` must
            differ in sign (or one of them be zero).
        xtol : float, optional
            Absolute tolerance on *x*.  Default 1e-12.
        max_iter : int, optional
            Maximum number of iterations.  Default 100.

        Raises
        ------
        ValueError
            If the bracket is outside the domain or does not bracket *y*.
        """
        from scipy.optimize import brentq

        self._check_in_domain([a, b])
        fa = self(a) - y
        fb = self(b) - y
        if fa == 0.0:
            return float(a)
        if fb == 0.0:
            return float(b)
        if np.sign(fa) == np.sign(fb):
            raise ValueError(
                f"y={y} is not bracketed on [{a}, {b}] "
                f"(f(a) - y = {fa:.3e}, f(b) - y = {fb:.3e})"
            )
        return float(
            brentq(lambda x: self(x) - y, a, b, xtol=xtol, maxiter=max_iter)
        )

    def make_inverse(self, N: int, xmin: float, xmax: float, M: int,
                     tol: float, max_refine_passes: int = 8,
                     verbose: bool = False) -> "ChebyshevCollection":
        """Build a collection approximating the inverse ``x(y)``.

        The function must be monotonic over the whole collection.  The
        inverse is sampled with :meth:`solve_for_x` and partitioned with
        :func:`~pychebtools.splitting.dyadic_splitting`.

        Parameters
        ----------
        N : int
            Order of each piece of the inverse.
        xmin, xmax : float
            Range of *y* covered by the inverse; must lie within the range
            of the function.
        M, tol, max_refine_passes
            Passed to :func:`~pychebtools.splitting.dyadic_splitting`.
        verbose : bool, optional
            If True, print splitting progress.

        Returns
        -------
        ChebyshevCollection
            Collection on ``[xmin, xmax]`` in *y*.
        """
        from pychebtools.splitting import dyadic_splitting

        if len(self.get_extrema()) > 0:
            raise ValueError(
                "Cannot invert: the function has local extrema in its domain"
            )
        a, b = self.xmin(), self.xmax()
        expansions = dyadic_splitting(
            N,
            lambda y: self.solve_for_x(y, a, b),
            xmin, xmax, M, tol,
            max_refine_passes=max_refine_passes,
            verbose=verbose,
        )
        return ChebyshevCollection(expansions)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def __getstate__(self) -> dict:
        """Return picklable state."""
        from pychebtools._version import __version__

        return {
            "exps": self._exps,
            "_pychebtools_version": __version__,
        }

    def __setstate__(self, state: dict) -> None:
        from pychebtools._version import __version__

        saved_version = state.get("_pychebtools_version")
        if saved_version is not None and saved_version != __version__:
            warnings.warn(
                f"This object was saved with pychebtools {saved_version}, "
                f"but you are loading it with {__version__}.",
                UserWarning,
                stacklevel=2,
            )
        self.__init__(state["exps"])

    def save(self, path: str | os.PathLike) -> None:
        """Save the collection to a file."""
        with open(os.fspath(path), "wb") as f:
            pickle.dump(self, f, protocol=pickle.HIGHEST_PROTOCOL)

    @classmethod
    def load(cls, path: str | os.PathLike) -> "ChebyshevCollection":
        """Load a collection saved with :meth:`save`.

        .. warning::

            This method uses :mod:`pickle` internally. Only load files you
            trust.
        """
        with open(os.fspath(path), "rb") as f:
            obj = pickle.load(f)  # noqa: S301
        if not isinstance(obj, cls):
            raise TypeError(
                f"Expected a {cls.__name__} instance, got {type(obj).__name__}"
            )
        return obj

    # ------------------------------------------------------------------
    # Printing
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"ChebyshevCollection("
            f"pieces={len(self._exps)}, "
            f"domain=[{self.xmin()}, {self.xmax()}])"
        )

    def __str__(self) -> str:
        orders = sorted({e.order for e in self._exps})
        lines = [
            f"ChebyshevCollection ({len(self._exps)} pieces)",
            f"  Domain:  [{self.xmin()}, {self.xmax()}]",
            f"  Orders:  {orders}",
        ]
        return "\n".join(lines)
