"""Shared test fixtures for pychebtools tests."""

import math

import numpy as np
import pytest

from pychebtools import ChebyshevCollection, ChebyshevExpansion, NodeCache, dyadic_splitting


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def node_cache():
    """Fresh, empty node cache."""
    return NodeCache()


@pytest.fixture
def ce_1234():
    """Expansion [1, 2, 3, 4] on [-1, 1]."""
    return ChebyshevExpansion([1, 2, 3, 4], -1, 1)


@pytest.fixture
def ce_12345():
    """Expansion [1, 2, 3, 4, 5] on [-1, 1]."""
    return ChebyshevExpansion([1, 2, 3, 4, 5], -1, 1)


@pytest.fixture
def ce_exp():
    """exp(x) on [-1, 1] at order 20."""
    return ChebyshevExpansion.factory(20, math.exp, -1, 1)


@pytest.fixture(scope="module")
def exp_pieces():
    """Dyadic partition of exp(x) on [0, 4]."""
    return dyadic_splitting(10, math.exp, 0, 4, 3, 1e-13)


@pytest.fixture(scope="module")
def cc_exp(exp_pieces):
    """ChebyshevCollection of exp(x) on [0, 4]."""
    return ChebyshevCollection(exp_pieces)


@pytest.fixture(scope="module")
def cc_sin():
    """ChebyshevCollection of sin(x) on [0.5, 20.5]."""
    return ChebyshevCollection(dyadic_splitting(16, np.sin, 0.5, 20.5, 3, 1e-13, vectorized=True))
