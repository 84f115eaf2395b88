"""pychebtools: Chebyshev expansions of one-dimensional functions.

Provides the :class:`ChebyshevExpansion` class for building, combining,
differentiating, integrating and root finding truncated Chebyshev series
on a finite interval, :func:`dyadic_splitting` for adaptive piecewise
fits over long domains, and the :class:`ChebyshevCollection` class for
working with the resulting piecewise approximation.

Example
-------
>>> import math
>>> from pychebtools import ChebyshevExpansion
>>> ce = ChebyshevExpansion.factory(40, math.sin, -1, 30)
>>> len(ce.real_roots())
10
>>> round(ChebyshevExpansion.factory(12, math.cos, -1, 1).y(0.5), 10)
0.8775825619
"""

from pychebtools._version import __version__
from pychebtools.collection import ChebyshevCollection
from pychebtools.expansion import ChebyshevExpansion
from pychebtools.nodes import NodeCache, default_node_cache
from pychebtools.splitting import dyadic_splitting

__all__ = [
    "ChebyshevCollection",
    "ChebyshevExpansion",
    "NodeCache",
    "default_node_cache",
    "dyadic_splitting",
    "__version__",
]
