"""Tests for external stopping criteria."""

import numpy as np
import pytest

from optimkit.core.errors import ConfigurationError
from optimkit.core.state import State
from optimkit.core.stopping import (
    CompoundStoppingCriterion,
    FDistToMinTest,
    GradNormTest,
    MaxNumIterTest,
    XDistToMinTest,
)


def _state(x, f):
    return State(f=f, x=np.atleast_1d(np.asarray(x, dtype=float)))


class TestGradNorm:
    def test_uses_objective_gradient(self, square_objective):
        crit = GradNormTest(1e-3)
        assert not crit.should_stop(_state([1.0], 1.0), 1, square_objective)
        assert crit.test_value(_state([1.0], 1.0), 1, square_objective) == pytest.approx(2.0)
        assert crit.should_stop(_state([1e-4], 1e-8), 1, square_objective)

    def test_gradient_evaluation_is_counted(self, square_objective):
        GradNormTest().should_stop(_state([3.0], 9.0), 1, square_objective)
        assert square_objective.grad_evals == 1

    def test_requires_objective(self):
        with pytest.raises(ConfigurationError):
            GradNormTest().should_stop(_state([1.0], 1.0), 1)

    def test_describe(self):
        assert GradNormTest(1e-6).describe() == "‖∇f‖ < 1e-06"


class TestDistanceCriteria:
    def test_absolute_f_distance(self):
        crit = FDistToMinTest(f_min=-1.0, eps=1e-3)
        assert crit.should_stop(_state([0.0], -1.0005), 3)
        assert not crit.should_stop(_state([0.0], -0.9), 3)

    def test_relative_f_distance(self):
        crit = FDistToMinTest(f_min=-100.0, eps=1e-2, relative=True)
        assert crit.test_value(_state([0.0], -99.5), 1) == pytest.approx(0.005)
        assert crit.should_stop(_state([0.0], -99.5), 1)

    def test_relative_f_distance_with_zero_minimum_is_absolute(self):
        crit = FDistToMinTest(f_min=0.0, eps=1e-2, relative=True)
        assert crit.test_value(_state([0.0], 0.5), 1) == pytest.approx(0.5)

    def test_x_distance(self):
        crit = XDistToMinTest([1.0, 1.0], eps=1e-3)
        assert crit.should_stop(_state([1.0, 1.0005], 0.0), 1)
        assert not crit.should_stop(_state([0.0, 0.0], 0.0), 1)

    def test_relative_x_distance(self):
        crit = XDistToMinTest([3.0, 4.0], eps=0.1, relative=True)
        assert crit.test_value(_state([3.0, 4.5], 0.0), 1) == pytest.approx(0.1)

    def test_x_distance_shape_mismatch(self):
        with pytest.raises(ConfigurationError):
            XDistToMinTest([1.0, 1.0]).should_stop(_state([1.0], 0.0), 1)

    @pytest.mark.parametrize("eps", [0.0, -1.0, float("nan")])
    def test_threshold_must_be_positive(self, eps):
        with pytest.raises(ConfigurationError):
            FDistToMinTest(0.0, eps=eps)


class TestMaxNumIter:
    def test_stops_at_limit(self):
        crit = MaxNumIterTest(3)
        state = _state([0.0], 0.0)
        assert not crit.should_stop(state, 2)
        assert crit.should_stop(state, 3)
        assert crit.test_value(state, 2) == 2.0

    def test_rejects_non_positive(self):
        with pytest.raises(ConfigurationError):
            MaxNumIterTest(0)

    def test_describe(self):
        assert MaxNumIterTest(500).describe() == "k ≥ 500"


class TestCompound:
    def test_any(self):
        crit = FDistToMinTest(0.0, 1e-6) | MaxNumIterTest(10)
        far = _state([1.0], 1.0)
        assert not crit.should_stop(far, 5)
        assert crit.should_stop(far, 10)
        assert crit.test_value(far, 10) == 10.0
        assert crit.describe() == "|f - f*| < 1e-06 (абс.) або k ≥ 10"

    def test_all(self):
        crit = FDistToMinTest(0.0, 1e-6) & XDistToMinTest([0.0], 1e-3)
        assert not crit.should_stop(_state([0.01], 1e-7), 1)
        assert crit.should_stop(_state([1e-4], 1e-8), 1)
        assert " і " in crit.describe()

    def test_flattens_same_mode(self):
        crit = MaxNumIterTest(1) | MaxNumIterTest(2) | MaxNumIterTest(3)
        assert isinstance(crit, CompoundStoppingCriterion)
        assert len(crit.criteria) == 3

    def test_mixed_modes_are_nested(self):
        inner = MaxNumIterTest(1) & MaxNumIterTest(2)
        crit = inner | MaxNumIterTest(3)
        assert len(crit.criteria) == 2
        assert crit.criteria[0] is inner

    def test_rejects_empty_and_bad_mode(self):
        with pytest.raises(ConfigurationError):
            CompoundStoppingCriterion([])
        with pytest.raises(ConfigurationError):
            CompoundStoppingCriterion([MaxNumIterTest(1)], mode="some")
