"""Tests for ObjectiveFunction counters, numerical derivatives and test problems."""

import numpy as np
import pytest

from optimkit.core.errors import ConfigurationError
from optimkit.core.functions import (
    PROBLEMS,
    ObjectiveFunction,
    make_quadratic,
    make_sphere,
    numerical_gradient,
    numerical_hessian,
)


class TestCounters:
    """Each real evaluation is counted once, cache hits are free."""

    def test_counts_and_cache(self, square_objective):
        obj = square_objective
        assert obj.evaluate([3.0]) == 9.0
        assert obj.evaluate([3.0]) == 9.0
        assert obj.func_evals == 1

        obj.evaluate([2.0])
        assert obj.func_evals == 2

        np.testing.assert_array_equal(obj.gradient([2.0]), [4.0])
        obj.gradient([2.0])
        assert obj.grad_evals == 1

        obj.hessian([2.0])
        obj.hessian([2.0])
        obj.hessian([1.0])
        assert obj.hess_evals == 2

    def test_call_is_evaluate(self, square_objective):
        assert square_objective(np.array([4.0])) == 16.0
        assert square_objective.func_evals == 1

    def test_reset_counters_clears_cache(self, square_objective):
        obj = square_objective
        obj.evaluate([1.0])
        obj.gradient([1.0])
        obj.reset_counters()
        assert (obj.func_evals, obj.grad_evals, obj.hess_evals) == (0, 0, 0)

        obj.evaluate([1.0])
        assert obj.func_evals == 1

    def test_cached_gradient_is_a_copy(self, square_objective):
        g = square_objective.gradient([1.0])
        g[0] = 100.0
        np.testing.assert_array_equal(square_objective.gradient([1.0]), [2.0])

    def test_wrong_dimension(self, square_objective):
        with pytest.raises(ConfigurationError):
            square_objective.evaluate([1.0, 2.0])

    def test_non_positive_dimension(self):
        with pytest.raises(ConfigurationError):
            ObjectiveFunction(func=lambda x: 0.0, n=0)


class TestNumericalDerivatives:
    def test_numerical_gradient_of_rosenbrock(self):
        x = np.array([-1.2, 1.0])
        expected = PROBLEMS["f7"].grad(x)
        np.testing.assert_allclose(
            numerical_gradient(PROBLEMS["f7"].func, x), expected, rtol=1e-5
        )

    def test_numerical_hessian_of_quadratic(self):
        problem = PROBLEMS["f2"]
        H = numerical_hessian(problem.func, np.array([1.0, 2.0]))
        np.testing.assert_allclose(H, problem.hess(None), atol=1e-4)

    def test_objective_without_derivatives_falls_back(self):
        problem = PROBLEMS["f2"]
        obj = ObjectiveFunction(func=problem.func, n=2)
        assert not obj.has_analytic_gradient
        assert not obj.has_analytic_hessian

        x = np.array([1.0, 2.0])
        np.testing.assert_allclose(obj.gradient(x), problem.grad(x), rtol=1e-6)
        assert obj.grad_evals == 1
        assert obj.func_evals == 0


class TestProblems:
    @pytest.mark.parametrize("key", ["f2", "f3", "f4", "f5", "f7", "f8"])
    def test_known_minimum(self, key):
        problem = PROBLEMS[key]
        assert problem.func(problem.x_min) == pytest.approx(problem.f_min, abs=1e-12)
        np.testing.assert_allclose(problem.grad(problem.x_min), 0.0, atol=1e-12)

    @pytest.mark.parametrize("key", ["f3", "f5", "f7"])
    def test_analytic_gradient_matches_numerical(self, key):
        problem = PROBLEMS[key]
        x = np.array([0.3, -0.7])
        np.testing.assert_allclose(
            problem.grad(x), numerical_gradient(problem.func, x), rtol=1e-5, atol=1e-6
        )

    def test_f1_pole_is_infinite(self):
        assert PROBLEMS["f1"].func(np.array([0.0, 1.0])) == np.inf
        assert PROBLEMS["f1"].func(np.array([1.0, 0.0])) == np.inf
        assert np.isfinite(PROBLEMS["f1"].func(PROBLEMS["f1"].x0))

    def test_objective_has_fresh_counters(self):
        problem = PROBLEMS["f8"]
        first = problem.objective()
        first.evaluate(problem.x0)
        second = problem.objective()
        assert second.func_evals == 0
        assert second.name == "f8"


class TestQuadraticFactory:
    def test_minimum(self, quadratic_problem):
        np.testing.assert_allclose(quadratic_problem.x_min, [0.2, 0.4])
        assert quadratic_problem.f_min == pytest.approx(-0.3)
        np.testing.assert_array_equal(quadratic_problem.x0, [1.0, 1.0])

    def test_rejects_non_symmetric(self):
        with pytest.raises(ConfigurationError):
            make_quadratic([[1.0, 2.0], [0.0, 1.0]])

    def test_rejects_indefinite(self):
        with pytest.raises(ConfigurationError):
            make_quadratic([[1.0, 0.0], [0.0, -1.0]])

    def test_sphere(self):
        problem = make_sphere(4)
        assert problem.key == "sphere4"
        np.testing.assert_array_equal(problem.x0, [1.0, 2.0, 3.0, 4.0])
        assert problem.func(problem.x0) == pytest.approx(30.0)
        np.testing.assert_allclose(problem.x_min, np.zeros(4))
