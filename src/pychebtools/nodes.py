"""Chebyshev-Lobatto node cache and domain rescaling helpers.

The nodes used throughout this package are the N+1 extrema of the
degree-N Chebyshev polynomial on ``[-1, 1]``:

.. math::

    x_k = \\cos\\left(\\frac{\\pi k}{N}\\right), \\qquad k = 0, \\ldots, N

in **descending** order (``x_0 = 1``, ``x_N = -1``).  Every fitter and
every evaluation of an expansion at its nodes uses this ordering.

References
----------
- Boyd (2013), "Finding the Zeros of a Univariate Equation: Proxy
  Rootfinders, Chebyshev Interpolation, and the Companion Matrix",
  SIAM Review 55(2):375-396, Appendix A.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable

import numpy as np


def to_scaled(x, xmin: float, xmax: float):
    """Map real-world abscissae in ``[xmin, xmax]`` onto ``[-1, 1]``."""
    return (2.0 * np.asarray(x, dtype=float) - (xmax + xmin)) / (xmax - xmin)


def to_realworld(xscaled, xmin: float, xmax: float):
    """Map canonical abscissae in ``[-1, 1]`` back onto ``[xmin, xmax]``."""
    return ((xmax - xmin) * np.asarray(xscaled, dtype=float) + (xmax + xmin)) / 2.0


def lobatto_nodes(order: int) -> np.ndarray:
    """Compute the ``order + 1`` Chebyshev-Lobatto nodes on ``[-1, 1]``.

    Parameters
    ----------
    order : int
        Polynomial order N (must be >= 1).

    Returns
    -------
    ndarray of shape (order + 1,)
        ``cos(pi * k / order)`` for ``k = 0..order``, descending.
    """
    if order < 1:
        raise ValueError(f"order must be >= 1, got {order}")
    k = np.arange(order + 1)
    nodes = np.cos(np.pi * k / order)
    # Exact symmetry; cos(pi/2) is 6e-17, not 0
    if order % 2 == 0:
        nodes[order // 2] = 0.0
    return nodes


class NodeCache:
    """Compute-once store of Chebyshev-Lobatto nodes, keyed by order.

    Populated lazily on the first request for a given order.  Creation of a
    missing entry is serialized by a lock, so concurrent first requests for
    the same order compute it exactly once; lookups of entries that already
    exist take no lock.  Cached arrays are marked read-only.

    Examples
    --------
    >>> cache = NodeCache()
    >>> cache.get(2)
    array([ 1.,  0., -1.])
    >>> 2 in cache
    True
    >>> cache.clear()
    >>> len(cache)
    0
    """

    def __init__(self):
        self._nodes: Dict[int, np.ndarray] = {}
        self._lock = threading.Lock()

    def get(self, order: int) -> np.ndarray:
        """Return the (read-only) nodes for *order*, computing them if needed."""
        nodes = self._nodes.get(order)
        if nodes is not None:
            return nodes
        with self._lock:
            nodes = self._nodes.get(order)
            if nodes is None:
                nodes = lobatto_nodes(order)
                nodes.setflags(write=False)
                self._nodes[order] = nodes
        return nodes

    def prepopulate(self, orders: Iterable[int]) -> None:
        """Populate the cache for every order in *orders*."""
        for order in orders:
            self.get(int(order))

    def clear(self) -> None:
        """Drop all cached entries."""
        with self._lock:
            self._nodes = {}

    def __contains__(self, order) -> bool:
        return order in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"NodeCache(orders={sorted(self._nodes)})"


default_node_cache = NodeCache()
