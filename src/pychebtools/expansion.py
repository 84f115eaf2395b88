"""Truncated Chebyshev expansions of real functions of one variable.

A :class:`ChebyshevExpansion` is a coefficient vector ``c[0..N]`` together
with the interval ``[xmin, xmax]`` it lives on:

.. math::

    f(x) \\approx \\sum_{k=0}^{N} c_k T_k(\\hat{x}), \\qquad
    \\hat{x} = \\frac{2x - (x_{max} + x_{min})}{x_{max} - x_{min}}

All evaluation and root finding is done in the canonical variable
:math:`\\hat{x} \\in [-1, 1]` and mapped back to real-world coordinates.

References
----------
- Boyd (2013), "Finding the Zeros of a Univariate Equation: Proxy
  Rootfinders, Chebyshev Interpolation, and the Companion Matrix",
  SIAM Review 55(2):375-396
- Mason & Handscomb (2003), "Chebyshev Polynomials", Chapman & Hall/CRC
"""

from __future__ import annotations

import os
import pickle
import warnings
from typing import Callable, List, Sequence

import numpy as np

from pychebtools._algebra import (
    _check_compatible,
    _is_scalar,
    add_coefficients,
    multiply_coefficients,
    powxn_coefficients,
    times_x_coefficients,
)
from pychebtools._calculus import (
    _companion_matrix,
    _deriv_coefficients,
    _integral_coefficients,
    _merge_roots,
    _real_roots,
    _real_roots_approx,
    _trim_trailing_zeros,
)
from pychebtools._evaluate import clenshaw_batch, recurrence_batch
from pychebtools._fit import (
    Fitter,
    coefficients_dct,
    coefficients_fft,
    dct_fitter,
    vectorize_scalar,
)
from pychebtools._jit import clenshaw_jit, recurrence_jit
from pychebtools.nodes import NodeCache, default_node_cache, to_realworld, to_scaled


def _fit(order: int, func: Callable, xmin: float, xmax: float,
         fitter: Fitter | None, node_cache: NodeCache) -> np.ndarray:
    """Run *fitter* (or the default DCT fitter bound to *node_cache*)."""
    if fitter is None:
        return dct_fitter(order, func, xmin, xmax, node_cache=node_cache)
    return np.asarray(fitter(order, func, xmin, xmax), dtype=float)


class ChebyshevExpansion:
    """Chebyshev series on a finite interval.

    Binary operators return new expansions.  ``+=``, ``-=``, ``*=`` and
    :meth:`times_x_inplace` mutate the coefficients of this instance and are
    not safe to call concurrently on a shared instance.

    Parameters
    ----------
    c : sequence of float
        Chebyshev coefficients ``c[0..N]``; index is the polynomial degree.
        Must be non-empty.
    xmin, xmax : float, optional
        Domain bounds with ``xmin < xmax``.  Default is ``[-1, 1]``.
    node_cache : NodeCache, optional
        Cache used for node positions.  Defaults to the process-wide
        :data:`~pychebtools.nodes.default_node_cache`.

    Examples
    --------
    >>> ce = ChebyshevExpansion([1, 2, 3, 4], -1, 1)
    >>> ce.deriv(1).coef()
    array([14., 12., 24.])
    >>> float(ChebyshevExpansion.from_powxn(4, -1, 1).y(3.0))
    81.0
    """

    def __init__(
        self,
        c: Sequence[float],
        xmin: float = -1.0,
        xmax: float = 1.0,
        node_cache: NodeCache | None = None,
    ):
        c = np.array(c, dtype=float).ravel()
        if c.size == 0:
            raise ValueError("Coefficient sequence must contain at least one entry")
        if not xmin < xmax:
            raise ValueError(
                f"Domain bounds must satisfy xmin < xmax, got [{xmin}, {xmax}]"
            )
        self._c = c
        self._xmin = float(xmin)
        self._xmax = float(xmax)
        self._node_cache = default_node_cache if node_cache is None else node_cache
        self._recurrence_buffer = np.empty(len(c))

    def _set_coefficients(self, c: np.ndarray) -> None:
        """Replace coefficients in place, resizing the recurrence buffer."""
        self._c = c
        if len(self._recurrence_buffer) != len(c):
            self._recurrence_buffer = np.empty(len(c))

    def _new(self, c: np.ndarray) -> "ChebyshevExpansion":
        """Expansion with coefficients *c* on this expansion's domain."""
        return ChebyshevExpansion(c, self._xmin, self._xmax, node_cache=self._node_cache)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def factory(
        cls,
        N: int,
        func: Callable,
        xmin: float,
        xmax: float,
        vectorized: bool = False,
        fitter: Fitter | None = None,
        node_cache: NodeCache | None = None,
    ) -> "ChebyshevExpansion":
        """Construct the order-*N* expansion of *func* on ``[xmin, xmax]``.

        *func* is sampled at the N+1 Chebyshev-Lobatto nodes mapped onto the
        domain, and the samples are converted into coefficients by *fitter*.

        Parameters
        ----------
        N : int
            Order of the expansion (N+1 coefficients); must be >= 1.
        func : callable
            ``func(x) -> float`` for a scalar ``x``, or, with
            ``vectorized=True``, ``func(x_array) -> array``.
        xmin, xmax : float
            Domain bounds.
        vectorized : bool, optional
            Whether *func* accepts an array of abscissae.  Default False.
        fitter : callable, optional
            ``fitter(N, func, xmin, xmax) -> coefficients``.  Defaults to the
            DCT-I fitter.
        node_cache : NodeCache, optional
            Node cache for the default fitter and the resulting expansion.

        Returns
        -------
        ChebyshevExpansion
        """
        if not xmin < xmax:
            raise ValueError(
                f"Domain bounds must satisfy xmin < xmax, got [{xmin}, {xmax}]"
            )
        cache = default_node_cache if node_cache is None else node_cache
        sampled = func if vectorized else vectorize_scalar(func)
        c = _fit(N, sampled, xmin, xmax, fitter, cache)
        return cls(c, xmin, xmax, node_cache=cache)

    @classmethod
    def factoryf(
        cls,
        N: int,
        values: Sequence[float],
        xmin: float,
        xmax: float,
        method: str = "dct",
        node_cache: NodeCache | None = None,
    ) -> "ChebyshevExpansion":
        """Construct an expansion from values already sampled at the nodes.

        Parameters
        ----------
        N : int
            Order of the expansion.
        values : sequence of float
            ``N + 1`` function values at the nodes returned by
            :meth:`get_nodes_realworld` for this order and domain
            (descending canonical order).
        xmin, xmax : float
            Domain bounds.
        method : {'dct', 'fft'}
            Transform used to obtain the coefficients.
        node_cache : NodeCache, optional
            Node cache for the resulting expansion.

        Returns
        -------
        ChebyshevExpansion
        """
        values = np.asarray(values, dtype=float)
        if values.shape != (N + 1,):
            raise ValueError(
                f"Expected {N + 1} node values for order {N}, got shape {values.shape}"
            )
        if method == "dct":
            c = coefficients_dct(values)
        elif method == "fft":
            c = coefficients_fft(values)
        else:
            raise ValueError(f"method must be 'dct' or 'fft', got {method!r}")
        return cls(c, xmin, xmax, node_cache=node_cache)

    @classmethod
    def from_powxn(cls, n: int, xmin: float, xmax: float) -> "ChebyshevExpansion":
        """Chebyshev expansion of the monomial ``x^n`` on ``[xmin, xmax]``.

        Uses the closed form of Mason & Handscomb (p. 23) on ``[-1, 1]`` and
        the binomial expansion of the affine map elsewhere.
        """
        if not xmin < xmax:
            raise ValueError(
                f"Domain bounds must satisfy xmin < xmax, got [{xmin}, {xmax}]"
            )
        return cls(powxn_coefficients(int(n), float(xmin), float(xmax)), xmin, xmax)

    @classmethod
    def from_polynomial(cls, c: Sequence[float], xmin: float, xmax: float) -> "ChebyshevExpansion":
        """Convert power-basis coefficients ``c[0] + c[1] x + ...`` to Chebyshev form."""
        c = np.asarray(c, dtype=float).ravel()
        s = cls([0.0], xmin, xmax)
        for i, ci in enumerate(c):
            s += cls.from_powxn(i, xmin, xmax) * float(ci)
        return s

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def coef(self) -> np.ndarray:
        """Read-only view of the coefficients."""
        view = self._c.view()
        view.setflags(write=False)
        return view

    def xmin(self) -> float:
        return self._xmin

    def xmax(self) -> float:
        return self._xmax

    @property
    def order(self) -> int:
        """Degree of the highest term (``len(coef()) - 1``)."""
        return len(self._c) - 1

    def get_nodes_n11(self) -> np.ndarray:
        """Chebyshev-Lobatto nodes of this order in ``[-1, 1]`` (descending)."""
        if self.order == 0:
            return np.zeros(1)
        return self._node_cache.get(self.order)

    def get_nodes_realworld(self) -> np.ndarray:
        """Chebyshev-Lobatto nodes of this order mapped onto ``[xmin, xmax]``."""
        return to_realworld(self.get_nodes_n11(), self._xmin, self._xmax)

    def get_node_function_values(self) -> np.ndarray:
        """Values of the expansion at its Chebyshev-Lobatto nodes."""
        return self.y_Clenshaw_xscaled(self.get_nodes_n11())

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def y_recurrence(self, x: float) -> float:
        """Evaluate at scalar *x* with the three-term recurrence."""
        xs = (2.0 * x - (self._xmax + self._xmin)) / (self._xmax - self._xmin)
        return recurrence_jit(self._c, float(xs), self._recurrence_buffer)

    def y_Clenshaw(self, x: float) -> float:
        """Evaluate at scalar *x* with Clenshaw's backward recurrence."""
        xs = (2.0 * x - (self._xmax + self._xmin)) / (self._xmax - self._xmin)
        return clenshaw_jit(self._c, float(xs))

    def y_recurrence_xscaled(self, xscaled) -> np.ndarray:
        """Batched recurrence evaluation at canonical abscissae in ``[-1, 1]``."""
        xscaled = np.asarray(xscaled, dtype=float)
        return recurrence_batch(self._c, xscaled).reshape(xscaled.shape)

    def y_Clenshaw_xscaled(self, xscaled) -> np.ndarray:
        """Batched Clenshaw evaluation at canonical abscissae in ``[-1, 1]``."""
        return clenshaw_batch(self._c, xscaled)

    def y(self, x):
        """Evaluate at a scalar or an array of real-world abscissae.

        Scalars return a float; arrays return an array of the same shape.
        Both paths use Clenshaw summation.
        """
        if np.ndim(x) == 0:
            return self.y_Clenshaw(float(x))
        return self.y_Clenshaw_xscaled(to_scaled(x, self._xmin, self._xmax))

    __call__ = y

    # ------------------------------------------------------------------
    # Arithmetic operators
    # ------------------------------------------------------------------

    def __add__(self, other):
        if _is_scalar(other):
            c = self._c.copy()
            c[0] += float(other)
            return self._new(c)
        if type(self) is not type(other):
            return NotImplemented
        _check_compatible(self, other)
        return self._new(add_coefficients(self._c, other._c))

    def __radd__(self, other):
        if not _is_scalar(other):
            return NotImplemented
        return self.__add__(other)

    def __sub__(self, other):
        if _is_scalar(other):
            return self.__add__(-float(other))
        if type(self) is not type(other):
            return NotImplemented
        _check_compatible(self, other)
        return self._new(add_coefficients(self._c, other._c, sign=-1.0))

    def __rsub__(self, other):
        if not _is_scalar(other):
            return NotImplemented
        return (-self).__add__(other)

    def __mul__(self, other):
        if _is_scalar(other):
            return self._new(self._c * float(other))
        if type(self) is not type(other):
            return NotImplemented
        _check_compatible(self, other)
        return self._new(multiply_coefficients(self._c, other._c))

    def __rmul__(self, scalar):
        if not _is_scalar(scalar):
            return NotImplemented
        return self.__mul__(scalar)

    def __truediv__(self, scalar):
        if not _is_scalar(scalar):
            return NotImplemented
        return self._new(self._c / float(scalar))

    def __rtruediv__(self, scalar):
        if not _is_scalar(scalar):
            return NotImplemented
        return self.reciprocal() * float(scalar)

    def __neg__(self):
        return self._new(-self._c)

    def __iadd__(self, other):
        if _is_scalar(other):
            c = self._c.copy()
            c[0] += float(other)
            self._set_coefficients(c)
            return self
        _check_compatible(self, other)
        self._set_coefficients(add_coefficients(self._c, other._c))
        return self

    def __isub__(self, other):
        if _is_scalar(other):
            return self.__iadd__(-float(other))
        _check_compatible(self, other)
        self._set_coefficients(add_coefficients(self._c, other._c, sign=-1.0))
        return self

    def __imul__(self, scalar):
        if not _is_scalar(scalar):
            return NotImplemented
        self._set_coefficients(self._c * float(scalar))
        return self

    def times_x(self) -> "ChebyshevExpansion":
        """Return the expansion of ``x * f(x)`` (one order higher)."""
        return self._new(times_x_coefficients(self._c, self._xmin, self._xmax))

    def times_x_inplace(self) -> "ChebyshevExpansion":
        """Multiply by ``x`` in place; returns ``self``."""
        self._set_coefficients(times_x_coefficients(self._c, self._xmin, self._xmax))
        return self

    # ------------------------------------------------------------------
    # Calculus and composition
    # ------------------------------------------------------------------

    def deriv(self, Nderiv: int) -> "ChebyshevExpansion":
        """Return the *Nderiv*-th derivative (``Nderiv >= 1``).

        Each differentiation lowers the order by one and carries the chain
        rule factor ``2 / (xmax - xmin)``.  Differentiating past the order
        gives the zero constant.
        """
        if Nderiv < 1:
            raise ValueError(f"Nderiv must be >= 1, got {Nderiv}")
        c = self._c
        for _ in range(Nderiv):
            c = _deriv_coefficients(c, self._xmin, self._xmax)
        return self._new(c)

    def integrate(self, Nintegral: int = 1) -> "ChebyshevExpansion":
        """Return an antiderivative (repeated *Nintegral* times).

        The constant of integration is arbitrary: only differences such as
        ``F.y(b) - F.y(a)`` are meaningful.
        """
        if Nintegral < 1:
            raise ValueError(f"Nintegral must be >= 1, got {Nintegral}")
        c = self._c
        for _ in range(Nintegral):
            c = _integral_coefficients(c, self._xmin, self._xmax)
        return self._new(c)

    def apply(self, func: Callable, vectorized: bool = True,
              fitter: Fitter | None = None) -> "ChebyshevExpansion":
        """Approximate ``func(f(x))`` at the same order and domain.

        The expansion is evaluated at its Chebyshev-Lobatto nodes, *func* is
        applied to those values and the result is refit.  The accuracy is
        limited by the order of this expansion.

        Parameters
        ----------
        func : callable
            Array-to-array transform, or scalar-to-scalar with
            ``vectorized=False``.
        vectorized : bool, optional
            Whether *func* accepts arrays.  Default True.
        fitter : callable, optional
            Fitter used for the resampled values (default DCT-I).
        """
        if self.order == 0:
            value = func(np.array([self._c[0]])) if vectorized else func(float(self._c[0]))
            return self._new(np.atleast_1d(np.asarray(value, dtype=float))[:1])

        if vectorized:
            def composed(x):
                return func(self.y_Clenshaw_xscaled(to_scaled(x, self._xmin, self._xmax)))
        else:
            composed = vectorize_scalar(lambda x: func(self.y_Clenshaw(x)))

        c = _fit(self.order, composed, self._xmin, self._xmax, fitter, self._node_cache)
        return self._new(c)

    def reciprocal(self) -> "ChebyshevExpansion":
        """Approximate ``1 / f(x)`` via :meth:`apply`.

        Inherits the limits of :meth:`apply`; it is inaccurate when ``f`` has
        zeros or near-zeros in the domain.
        """
        return self.apply(lambda y: 1.0 / y)

    # ------------------------------------------------------------------
    # Roots
    # ------------------------------------------------------------------

    def companion_matrix(self) -> np.ndarray:
        """Companion matrix whose eigenvalues are the canonical roots.

        Exact trailing zero coefficients are dropped first, so the matrix is
        ``N x N`` with N the effective degree.  See Boyd (2013), Appendix A.2.
        """
        return _companion_matrix(_trim_trailing_zeros(self._c))

    def real_roots(self, only_in_domain: bool = True) -> np.ndarray:
        """Real roots from the eigenvalues of the companion matrix.

        This is an O(N^3) eigenvalue solve and loses accuracy as the order
        grows; prefer :meth:`subdivide` or :func:`dyadic_splitting` with
        :meth:`real_roots_intervals` for long or difficult domains.

        Parameters
        ----------
        only_in_domain : bool, optional
            If True (default), only roots in ``[xmin, xmax]`` are returned;
            otherwise every real eigenvalue is mapped to real-world
            coordinates.

        Returns
        -------
        ndarray
            Sorted real roots.  Empty for constant or all-zero expansions.
        """
        return _real_roots(self._c, self._xmin, self._xmax, only_in_domain)

    def real_roots_approx(self, Npoints: int) -> np.ndarray:
        """Approximate roots by sign-change bracketing on ``Npoints + 1`` nodes.

        Cheaper than :meth:`real_roots` but misses roots that do not change
        sign between samples, and its root positions are only as good as a
        local quadratic fit.
        """
        return _real_roots_approx(self._c, self._xmin, self._xmax, int(Npoints),
                                  node_cache=self._node_cache)

    @staticmethod
    def real_roots_intervals(segments: List["ChebyshevExpansion"],
                             only_in_domain: bool = True) -> np.ndarray:
        """Roots of a piecewise expansion given as contiguous segments.

        Each segment is solved independently on its own interval; roots on
        shared boundaries are reported once.
        """
        if not segments:
            return np.array([], dtype=float)
        roots = [seg.real_roots(only_in_domain) for seg in segments]
        span = segments[-1].xmax() - segments[0].xmin()
        return _merge_roots(roots, span)

    def subdivide(self, Nintervals: int, Norder: int) -> List["ChebyshevExpansion"]:
        """Refit this expansion on *Nintervals* equal sub-intervals at order *Norder*."""
        if Nintervals < 1:
            raise ValueError(f"Nintervals must be >= 1, got {Nintervals}")
        if Nintervals == 1 and Norder == self.order:
            return [self._new(self._c.copy())]
        edges = np.linspace(self._xmin, self._xmax, Nintervals + 1)
        return [
            ChebyshevExpansion.factory(
                Norder, self.y, edges[i], edges[i + 1],
                vectorized=True, node_cache=self._node_cache,
            )
            for i in range(Nintervals)
        ]

    def is_monotonic(self) -> bool:
        """True if the values at the nodes are strictly increasing or decreasing."""
        if self.order == 0:
            return False
        diff = np.diff(self.get_node_function_values())
        return bool(np.all(diff < 0) or np.all(diff > 0))

    def monotonic_solvex(self, y: float) -> float:
        """Solve ``f(x) = y`` on the domain of a monotonic expansion.

        Raises
        ------
        ValueError
            If the expansion is not monotonic or *y* is outside its range.
        """
        from scipy.optimize import brentq

        if not self.is_monotonic():
            raise ValueError("Expansion is not monotonic")
        ya, yb = self.y_Clenshaw(self._xmin), self.y_Clenshaw(self._xmax)
        if not min(ya, yb) <= y <= max(ya, yb):
            raise ValueError(
                f"y={y} is outside the range [{min(ya, yb)}, {max(ya, yb)}]"
            )
        return float(brentq(lambda x: self.y_Clenshaw(x) - y, self._xmin, self._xmax))

    @staticmethod
    def dyadic_splitting(N: int, func: Callable, xmin: float, xmax: float,
                         M: int, tol: float, max_refine_passes: int = 8,
                         **kwargs) -> List["ChebyshevExpansion"]:
        """See :func:`pychebtools.splitting.dyadic_splitting`."""
        from pychebtools.splitting import dyadic_splitting

        return dyadic_splitting(N, func, xmin, xmax, M, tol,
                                max_refine_passes=max_refine_passes, **kwargs)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def __getstate__(self) -> dict:
        """Return picklable state: coefficients and bounds only."""
        from pychebtools._version import __version__

        return {
            "c": self._c.copy(),
            "xmin": self._xmin,
            "xmax": self._xmax,
            "_pychebtools_version": __version__,
        }

    def __setstate__(self, state: dict) -> None:
        """Restore state; node cache and scratch buffer are rebuilt."""
        from pychebtools._version import __version__

        saved_version = state.get("_pychebtools_version")
        if saved_version is not None and saved_version != __version__:
            warnings.warn(
                f"This object was saved with pychebtools {saved_version}, "
                f"but you are loading it with {__version__}.",
                UserWarning,
                stacklevel=2,
            )
        self._c = np.asarray(state["c"], dtype=float)
        self._xmin = float(state["xmin"])
        self._xmax = float(state["xmax"])
        self._node_cache = default_node_cache
        self._recurrence_buffer = np.empty(len(self._c))

    def save(self, path: str | os.PathLike) -> None:
        """Save the expansion (coefficients and bounds) to a file."""
        with open(os.fspath(path), "wb") as f:
            pickle.dump(self, f, protocol=pickle.HIGHEST_PROTOCOL)

    @classmethod
    def load(cls, path: str | os.PathLike) -> "ChebyshevExpansion":
        """Load an expansion saved with :meth:`save`.

        .. warning::

            This method uses :mod:`pickle` internally. Pickle can execute
            arbitrary code during deserialization. **Only load files you
            trust.**
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
            f"ChebyshevExpansion("
            f"order={self.order}, "
            f"domain=[{self._xmin}, {self._xmax}])"
        )

    def __str__(self) -> str:
        max_display = 6
        shown = ", ".join(f"{v:.6g}" for v in self._c[:max_display])
        if len(self._c) > max_display:
            shown += ", ..."
        lines = [
            f"ChebyshevExpansion (order {self.order})",
            f"  Domain:       [{self._xmin}, {self._xmax}]",
            f"  Coefficients: [{shown}]",
            f"  Tail |c_N|:   {abs(self._c[-1]):.2e}",
        ]
        return "\n".join(lines)
