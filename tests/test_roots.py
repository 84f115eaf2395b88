"""Tests for companion-matrix and approximate root finding."""

from __future__ import annotations

import math

import numpy as np
import pytest

from pychebtools import ChebyshevExpansion


class TestCornerCases:
    """Linear, padded and degenerate expansions."""

    def test_linear(self):
        roots = ChebyshevExpansion([0, 1], -1, 1).real_roots(True)
        assert len(roots) == 1
        assert abs(roots[0]) < 1e-14

    def test_linear_root_on_boundary(self):
        roots = ChebyshevExpansion([-1, 1, 0], -1, 1).real_roots(True)
        assert len(roots) == 1
        assert abs(1 - roots[0]) < 1e-14

    def test_linear_with_trailing_zero(self):
        roots = ChebyshevExpansion([0, 1, 0], -1, 1).real_roots(True)
        assert len(roots) == 1
        assert abs(roots[0]) < 1e-14

    def test_all_zero(self):
        ce = ChebyshevExpansion([0, 0, 0], -1, 1)
        assert len(ce.real_roots(True)) == 0
        assert len(ce.coef()) == 3

    def test_constant(self):
        assert len(ChebyshevExpansion([2.5], 0, 1).real_roots(True)) == 0
        assert len(ChebyshevExpansion([2.5], 0, 1).real_roots(False)) == 0

    def test_companion_matrix_trims_trailing_zeros(self):
        A = ChebyshevExpansion([0.2, 0.5, -1.0, 0.0, 0.0]).companion_matrix()
        assert A.shape == (2, 2)

    def test_companion_matrix_rows(self):
        A = ChebyshevExpansion([1.0, 2.0, 3.0, 4.0]).companion_matrix()
        np.testing.assert_allclose(A[0], [0.0, 1.0, 0.0])
        np.testing.assert_allclose(A[1], [0.5, 0.0, 0.5])
        np.testing.assert_allclose(A[2], [-1 / 8, 0.5 - 2 / 8, -3 / 8])


class TestRealRoots:
    """real_roots on fitted functions."""

    def test_quadratic(self):
        ce = ChebyshevExpansion.from_polynomial([-0.25, 0, 1], -1, 1)
        roots = ce.real_roots()
        np.testing.assert_allclose(roots, [-0.5, 0.5], rtol=0, atol=1e-14)

    def test_other_domain(self):
        ce = ChebyshevExpansion.factory(3, lambda x: (x - 2) * (x - 3) * (x - 5.5), 1, 6)
        roots = ce.real_roots()
        np.testing.assert_allclose(roots, [2, 3, 5.5], rtol=0, atol=1e-12)

    def test_out_of_domain_roots(self):
        ce = ChebyshevExpansion.from_polynomial([-4, 0, 1], -1, 1)
        assert len(ce.real_roots(True)) == 0
        np.testing.assert_allclose(ce.real_roots(False), [-2, 2], rtol=0, atol=1e-12)

    def test_complex_roots_rejected(self):
        ce = ChebyshevExpansion.from_polynomial([1, 0, 1], -1, 1)
        assert len(ce.real_roots(False)) == 0

    def test_sorted_and_in_domain(self):
        ce = ChebyshevExpansion.factory(40, math.sin, -1, 30)
        roots = ce.real_roots()
        expected = np.pi * np.arange(10)
        assert len(roots) == 10
        assert np.all(np.diff(roots) > 0)
        assert np.max(np.abs(roots - expected)) < 1e-9

    def test_subdivide_then_intervals(self):
        ce = ChebyshevExpansion.factory(40, math.sin, -1, 30)
        pieces = ce.subdivide(8, 16)
        assert len(pieces) == 8
        assert pieces[0].xmin() == -1 and pieces[-1].xmax() == 30
        roots = ChebyshevExpansion.real_roots_intervals(pieces)
        assert len(roots) == 10
        assert np.max(np.abs(roots - np.pi * np.arange(10))) < 1e-9

    def test_intervals_shared_boundary_root(self):
        left = ChebyshevExpansion.factory(1, lambda x: x - 1, 0, 1)
        right = ChebyshevExpansion.factory(1, lambda x: x - 1, 1, 2)
        roots = ChebyshevExpansion.real_roots_intervals([left, right])
        assert len(roots) == 1
        assert abs(roots[0] - 1) < 1e-14

    def test_intervals_empty(self):
        assert len(ChebyshevExpansion.real_roots_intervals([])) == 0


class TestApproxRoots:
    """real_roots_approx by sign-change bracketing."""

    def test_sin(self):
        ce = ChebyshevExpansion.factory(40, math.sin, -1, 30)
        roots = ce.real_roots_approx(400)
        assert len(roots) == 10
        assert np.max(np.abs(roots - np.pi * np.arange(10))) < 1e-3

    def test_quadratic_exact(self):
        ce = ChebyshevExpansion.from_polynomial([-0.25, 0, 1], -1, 1)
        np.testing.assert_allclose(ce.real_roots_approx(11), [-0.5, 0.5], atol=1e-12)

    def test_no_sign_change(self):
        ce = ChebyshevExpansion.from_polynomial([1, 0, 1], -1, 1)
        assert len(ce.real_roots_approx(20)) == 0

    def test_too_few_points(self):
        with pytest.raises(ValueError, match="npoints"):
            ChebyshevExpansion([0, 1]).real_roots_approx(1)


class TestSubdivide:
    """subdivide() refits on equal sub-intervals."""

    def test_pieces_reproduce_function(self):
        ce = ChebyshevExpansion.factory(20, math.exp, 0, 3)
        pieces = ce.subdivide(3, 12)
        for piece, (lo, hi) in zip(pieces, [(0, 1), (1, 2), (2, 3)]):
            assert abs(piece.xmin() - lo) < 1e-15 and abs(piece.xmax() - hi) < 1e-15
            mid = (lo + hi) / 2
            assert abs(piece.y(mid) - math.exp(mid)) < 1e-12

    def test_invalid_count(self):
        with pytest.raises(ValueError, match="Nintervals"):
            ChebyshevExpansion([0, 1]).subdivide(0, 4)
