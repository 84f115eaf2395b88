"""Tests for pickle persistence and printing."""

from __future__ import annotations

import math
import os
import pickle
import tempfile

import numpy as np
import pytest

from pychebtools import ChebyshevCollection, ChebyshevExpansion


class TestSaveLoad:
    """save() / load() round trips and error paths."""

    def test_expansion(self, ce_exp):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "exp.pkl")
            ce_exp.save(path)
            loaded = ChebyshevExpansion.load(path)
        np.testing.assert_array_equal(loaded.coef(), ce_exp.coef())
        assert loaded.xmin() == ce_exp.xmin() and loaded.xmax() == ce_exp.xmax()
        assert loaded.y_recurrence(0.3) == ce_exp.y_recurrence(0.3)
        assert abs(loaded.y(0.3) - math.exp(0.3)) < 1e-14

    def test_state_excludes_scratch(self, ce_exp):
        state = ce_exp.__getstate__()
        assert set(state) == {"c", "xmin", "xmax", "_pychebtools_version"}

    def test_collection(self, cc_exp):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "cc.pkl")
            cc_exp.save(path)
            loaded = ChebyshevCollection.load(path)
        assert len(loaded) == len(cc_exp)
        assert loaded(2.5) == cc_exp(2.5)
        assert abs(loaded.integrate(0, 4) - (math.exp(4) - 1)) < 1e-11

    def test_load_wrong_type(self, ce_exp):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "exp.pkl")
            ce_exp.save(path)
            with pytest.raises(TypeError, match="ChebyshevCollection"):
                ChebyshevCollection.load(path)

    def test_version_mismatch_warns(self, ce_exp):
        state = ce_exp.__getstate__()
        state["_pychebtools_version"] = "0.0.0-old"
        obj = ChebyshevExpansion.__new__(ChebyshevExpansion)
        with pytest.warns(UserWarning, match="0.0.0-old"):
            obj.__setstate__(state)
        np.testing.assert_array_equal(obj.coef(), ce_exp.coef())

    def test_pickle_dumps(self):
        ce = ChebyshevExpansion([1.0, 2.0, 3.0], -2, 5)
        back = pickle.loads(pickle.dumps(ce))
        assert back.y_recurrence(1.0) == ce.y_recurrence(1.0)


class TestPrinting:
    """__repr__ and __str__."""

    def test_repr(self):
        ce = ChebyshevExpansion([1.0, 2.0, 3.0], -2, 5)
        assert repr(ce) == "ChebyshevExpansion(order=2, domain=[-2.0, 5.0])"

    def test_str(self):
        ce = ChebyshevExpansion(np.arange(1.0, 10.0), 0, 1)
        s = str(ce)
        assert "order 8" in s
        assert "..." in s
        assert "Domain" in s

    def test_collection_repr_and_str(self, cc_exp):
        assert repr(cc_exp).startswith(f"ChebyshevCollection(pieces={len(cc_exp)}")
        assert "Orders:  [10]" in str(cc_exp)
