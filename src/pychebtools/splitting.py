"""Adaptive dyadic subdivision of a domain into fixed-order expansions.

The domain is fitted at order N; any piece whose trailing coefficients are
too large relative to its leading ones is replaced by fits on its two halves.
Splitting proceeds in passes until every piece converges or the pass limit
is hit.
"""

from __future__ import annotations

import time
import warnings
from typing import Callable, List

import numpy as np

from pychebtools._fit import Fitter
from pychebtools.expansion import ChebyshevExpansion
from pychebtools.nodes import NodeCache


def split_error(expansion: ChebyshevExpansion, M: int) -> float:
    """Tail-to-head norm ratio ``||c[-M:]|| / ||c[:M]||`` of the coefficients.

    Returns ``inf`` when the leading block is identically zero and the tail
    is not, and 0 for the zero expansion.
    """
    c = expansion.coef()
    head = np.linalg.norm(c[:M])
    tail = np.linalg.norm(c[-M:])
    if head == 0.0:
        return 0.0 if tail == 0.0 else np.inf
    return float(tail / head)


def dyadic_splitting(
    N: int,
    func: Callable,
    xmin: float,
    xmax: float,
    M: int,
    tol: float,
    max_refine_passes: int = 8,
    callback: Callable[[int, List[ChebyshevExpansion]], None] | None = None,
    fitter: Fitter | None = None,
    vectorized: bool = False,
    verbose: bool = False,
    node_cache: NodeCache | None = None,
) -> List[ChebyshevExpansion]:
    """Partition ``[xmin, xmax]`` dyadically until every order-N fit converges.

    Parameters
    ----------
    N : int
        Order of every piece.
    func : callable
        Function to approximate, ``func(x) -> float`` (or array-to-array with
        ``vectorized=True``).
    xmin, xmax : float
        Domain bounds.
    M : int
        Number of leading and trailing coefficients compared by the
        convergence check; ``1 <= M <= N + 1``.
    tol : float
        A piece is converged when ``||c[-M:]|| / ||c[:M]|| <= tol``.
    max_refine_passes : int, optional
        Maximum number of splitting passes.  Default is 8.
    callback : callable, optional
        ``callback(pass_index, expansions)`` invoked after every pass with
        the current partition.
    fitter : callable, optional
        Fitter used for every piece (default DCT-I).
    vectorized : bool, optional
        Whether *func* accepts arrays.  Default False.
    verbose : bool, optional
        If True, print per-pass progress.  Default is False.
    node_cache : NodeCache, optional
        Node cache shared by every piece.

    Returns
    -------
    list of ChebyshevExpansion
        Pieces in ascending order of domain, contiguous, covering
        ``[xmin, xmax]``.

    Examples
    --------
    >>> import math
    >>> pieces = dyadic_splitting(8, math.exp, -1, 1, 3, 1e-13)
    >>> pieces[0].xmin(), pieces[-1].xmax()
    (-1.0, 1.0)
    """
    if not 1 <= M <= N + 1:
        raise ValueError(f"M must satisfy 1 <= M <= N + 1 = {N + 1}, got {M}")
    if max_refine_passes < 0:
        raise ValueError(
            f"max_refine_passes must be >= 0, got {max_refine_passes}"
        )

    def build(lo: float, hi: float) -> ChebyshevExpansion:
        return ChebyshevExpansion.factory(
            N, func, lo, hi, vectorized=vectorized,
            fitter=fitter, node_cache=node_cache,
        )

    start = time.time()
    expansions = [build(float(xmin), float(xmax))]

    if verbose:
        print(
            f"Dyadic splitting of [{xmin}, {xmax}] at order {N} "
            f"(M={M}, tol={tol:.1e}, up to {max_refine_passes} passes)..."
        )

    converged = False
    for refine_pass in range(max_refine_passes):
        all_converged = True
        # Right to left, so inserted halves do not shift pending indices
        for i in range(len(expansions) - 1, -1, -1):
            piece = expansions[i]
            if split_error(piece, M) > tol:
                all_converged = False
                middle = (piece.xmin() + piece.xmax()) / 2.0
                expansions[i:i + 1] = [
                    build(piece.xmin(), middle),
                    build(middle, piece.xmax()),
                ]
        if callback is not None:
            callback(refine_pass, expansions)
        if verbose:
            print(f"  Pass {refine_pass + 1}: {len(expansions)} pieces")
        if all_converged:
            converged = True
            break

    if not converged and not all(split_error(e, M) <= tol for e in expansions):
        warnings.warn(
            f"dyadic_splitting reached max_refine_passes={max_refine_passes} "
            f"with pieces above tol={tol:.1e}; the partition is returned "
            f"as is.",
            UserWarning,
            stacklevel=2,
        )

    if verbose:
        print(
            f"Splitting complete in {time.time() - start:.3f}s "
            f"({len(expansions)} pieces)"
        )
    return expansions
