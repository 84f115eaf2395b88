"""Tests for differentiation, integration and monotonicity."""

from __future__ import annotations

import math

import numpy as np
import pytest

from pychebtools import ChebyshevExpansion


class TestDerivative:
    """deriv() against numpy.polynomial.chebyshev results."""

    def test_third_order_series(self, ce_1234):
        np.testing.assert_array_equal(ce_1234.deriv(1).coef(), [14, 12, 24])
        np.testing.assert_array_equal(ce_1234.deriv(2).coef(), [12, 96])
        np.testing.assert_array_equal(ce_1234.deriv(3).coef(), [96])

    def test_fourth_order_series(self, ce_12345):
        np.testing.assert_array_equal(ce_12345.deriv(1).coef(), [14, 52, 24, 40])
        np.testing.assert_array_equal(ce_12345.deriv(2).coef(), [172, 96, 240])
        np.testing.assert_array_equal(ce_12345.deriv(3).coef(), [96, 960])
        np.testing.assert_array_equal(ce_12345.deriv(4).coef(), [960])

    def test_matches_numpy_chebder(self):
        c = np.array([0.3, -1.2, 2.5, 0.7, -0.4, 1.1, 0.05])
        ce = ChebyshevExpansion(c)
        for n in range(1, 4):
            expected = np.polynomial.chebyshev.chebder(c, n)
            assert np.max(np.abs(ce.deriv(n).coef() - expected)) < 1e-12

    def test_past_degree_is_zero(self, ce_1234):
        np.testing.assert_array_equal(ce_1234.deriv(4).coef(), [0.0])
        np.testing.assert_array_equal(ce_1234.deriv(7).coef(), [0.0])

    def test_chain_rule_scaling(self):
        ce = ChebyshevExpansion.factory(30, math.sin, 2, 9)
        d1 = ce.deriv(1)
        d2 = ce.deriv(2)
        for x in [2.5, 5.0, 8.7]:
            assert abs(d1.y(x) - math.cos(x)) < 1e-10, f"sin' mismatch at {x}"
            assert abs(d2.y(x) + math.sin(x)) < 1e-8, f"sin'' mismatch at {x}"
        assert d1.xmin() == 2 and d1.xmax() == 9

    def test_invalid_order(self, ce_1234):
        with pytest.raises(ValueError, match="Nderiv"):
            ce_1234.deriv(0)


class TestIntegral:
    """integrate() checked through differences of the antiderivative."""

    def test_exp_default_range(self):
        F = ChebyshevExpansion.factory(100, math.exp, -1, 1).integrate()
        expected = math.exp(0.7) - math.exp(-1)
        y = F.y(0.7) - F.y(-1)
        assert abs((expected - y) / y) < 1e-15, f"relative error {abs((expected - y) / y):.2e}"

    def test_cos_other_range(self):
        C = ChebyshevExpansion.factory(60, math.cos, -4, 13)
        F = C.integrate()
        expected = math.sin(0.7) - math.sin(-1)
        y = F.y(0.7) - F.y(-1)
        assert abs((expected - y) / y) < 1e-13

    def test_order_increases(self, ce_1234):
        assert len(ce_1234.integrate().coef()) == 5
        assert len(ce_1234.integrate(3).coef()) == 7

    def test_derivative_of_integral(self):
        c = [0.5, 1.0, -2.0, 0.25]
        ce = ChebyshevExpansion(c, -3, 2)
        back = ce.integrate().deriv(1)
        assert np.max(np.abs(back.coef()[:4] - c)) < 1e-13

    def test_double_integral(self):
        C = ChebyshevExpansion([1.0], 0, 2)
        F2 = C.integrate(2)
        # x^2 / 2 up to an affine term
        g = lambda x: F2.y(x) - F2.y(0) - (F2.y(2) - F2.y(0)) * x / 2
        for x in [0.5, 1.0, 1.5]:
            assert abs(g(x) - (x * x / 2 - x)) < 1e-14

    def test_invalid_order(self, ce_1234):
        with pytest.raises(ValueError, match="Nintegral"):
            ce_1234.integrate(0)


class TestMonotonic:
    """is_monotonic and monotonic_solvex."""

    def test_monotonicity(self):
        assert not ChebyshevExpansion.from_powxn(2, -1, 1).is_monotonic()
        assert ChebyshevExpansion.from_powxn(3, -1, 1).is_monotonic()

    def test_constant_is_not_monotonic(self):
        assert not ChebyshevExpansion([2.0], 0, 1).is_monotonic()

    def test_solvex(self):
        ce = ChebyshevExpansion.factory(20, math.exp, 0, 2)
        x = ce.monotonic_solvex(math.exp(1.3))
        assert abs(x - 1.3) < 1e-10

    def test_solvex_decreasing(self):
        ce = ChebyshevExpansion.factory(20, lambda x: -x ** 3, -1, 1)
        assert abs(ce.monotonic_solvex(-0.125) - 0.5) < 1e-10

    def test_solvex_out_of_range(self):
        ce = ChebyshevExpansion.factory(20, math.exp, 0, 2)
        with pytest.raises(ValueError, match="outside the range"):
            ce.monotonic_solvex(100.0)

    def test_solvex_not_monotonic(self):
        with pytest.raises(ValueError, match="not monotonic"):
            ChebyshevExpansion.from_powxn(2, -1, 1).monotonic_solvex(0.5)
