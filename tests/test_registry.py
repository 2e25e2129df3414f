"""Tests for the method registry and run helpers."""

import numpy as np
import pytest

from optimkit.core.conjugate_gradient import ConjugateGradient
from optimkit.core.errors import ConfigurationError
from optimkit.core.functions import PROBLEMS
from optimkit.core.registry import (
    ALL_METHOD_KEYS,
    LINE_SEARCH_CHOICES,
    SOLVERS,
    STOPPING_CHOICES,
    build_setup,
    build_stopping_criterion,
    create_solver,
    normalize_line_search_key,
    run_method,
    uses_line_search,
)
from optimkit.core.state import IterationStatus


class TestCreateSolver:
    def test_every_key_builds_a_solver(self):
        for key, (label, _) in SOLVERS.items():
            solver = create_solver(key)
            assert solver.name == label

    def test_custom_name(self):
        assert create_solver("bfgs", name="BFGS (golden)").name == "BFGS (golden)"

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="simulated_annealing"):
            create_solver("simulated_annealing")

    def test_presets(self):
        fr = create_solver("fletcher_reeves")
        assert isinstance(fr, ConjugateGradient)
        assert fr.default_options["beta_formula"] == "fletcher_reeves"

    def test_run_all_keys_are_registered(self):
        assert set(ALL_METHOD_KEYS) <= set(SOLVERS)
        assert "conjugate_gradient" not in ALL_METHOD_KEYS

    def test_uses_line_search(self):
        assert [k for k in ALL_METHOD_KEYS if uses_line_search(k)] == [
            "steepest_descent",
            "fletcher_reeves",
            "polak_ribiere",
            "newton",
            "bfgs",
        ]


class TestLineSearchKeys:
    @pytest.mark.parametrize(
        "key, expected",
        [
            (None, None),
            ("", None),
            ("default", None),
            ("cubic4", "cubic_4point"),
            (" Golden_Section ", "golden_section"),
            ("dichotomy", "dichotomy"),
        ],
    )
    def test_normalize(self, key, expected):
        assert normalize_line_search_key(key) == expected

    def test_unknown(self):
        with pytest.raises(ConfigurationError):
            normalize_line_search_key("fibonacci")

    def test_every_choice_is_valid(self):
        for key, _ in LINE_SEARCH_CHOICES:
            normalize_line_search_key(key)


class TestBuildSetup:
    def test_builtin_methods_take_eps(self):
        assert build_setup("gradient_descent", 1e-4).as_dict() == {"grad_tol": 1e-4}
        assert build_setup("hooke_jeeves", 1e-5).get("min_step") == 1e-5

    def test_nelder_mead(self):
        assert build_setup("nelder_mead", 1e-6).get("initial_simplex_scale") == 0.1

    def test_line_search_option(self):
        assert build_setup("bfgs", 1e-6, "cubic4").as_dict() == {"line_search": "cubic_4point"}
        assert len(build_setup("bfgs", 1e-6, "default")) == 0

    def test_errors(self):
        with pytest.raises(ConfigurationError):
            build_setup("bfgs", 0.0)
        with pytest.raises(ConfigurationError):
            build_setup("unknown", 1e-6)


class TestBuildStoppingCriterion:
    def test_grad_norm(self):
        crit = build_stopping_criterion("grad_norm", 1e-6, 500)
        assert crit.describe() == "‖∇f‖ < 1e-06 або k ≥ 500"

    def test_distances_use_known_minimum(self):
        problem = PROBLEMS["f8"]
        f_crit = build_stopping_criterion("f_dist", 1e-3, 10, problem)
        assert f_crit.criteria[0].f_min == 0.0
        x_crit = build_stopping_criterion("x_dist", 1e-3, 10, problem)
        np.testing.assert_array_equal(x_crit.criteria[0].x_min, [4.0, 4.0])

    def test_unknown_minimum(self):
        with pytest.raises(ConfigurationError):
            build_stopping_criterion("f_dist", 1e-3, 10, PROBLEMS["f6"])
        with pytest.raises(ConfigurationError):
            build_stopping_criterion("x_dist", 1e-3, 10)

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError):
            build_stopping_criterion("energy", 1e-3, 10)

    def test_choices_are_buildable(self):
        for kind, _ in STOPPING_CHOICES:
            build_stopping_criterion(kind, 1e-3, 10, PROBLEMS["f8"])


class TestRunMethod:
    @pytest.mark.parametrize("key", ALL_METHOD_KEYS)
    def test_every_method_solves_f8(self, key):
        results = run_method(key, PROBLEMS["f8"], eps=1e-10, stop_kind="f_dist")
        assert results.status is IterationStatus.SUCCESS
        assert results.f_min < 1e-8

    def test_max_iter_limits_builtin_method(self):
        results = run_method("gradient_descent", PROBLEMS["quadratic_1d"], max_iter=10)
        assert results.status is IterationStatus.NO_PROGRESS
        assert results.num_iter == 10

    def test_external_iteration_limit(self):
        results = run_method("steepest_descent", PROBLEMS["f7"], max_iter=3)
        assert results.num_iter == 3
        assert results.status is IterationStatus.SUCCESS
        assert results.stopped_by == "‖∇f‖ < 1e-06 або k ≥ 3"
        assert results.term_val == 3.0

    def test_custom_start_point_and_callback(self):
        seen = []
        results = run_method(
            "newton",
            PROBLEMS["f8"],
            x0=[1.0, 1.0],
            callback=lambda state, k: seen.append(k),
        )
        assert seen == list(range(1, results.num_iter + 1))
        np.testing.assert_allclose(results.x_min, [4.0, 4.0])

    def test_line_search_key_is_applied(self):
        results = run_method("steepest_descent", PROBLEMS["f8"], line_search_key="golden_section")
        assert results.converged
        assert results.states[0].alpha == pytest.approx(0.5, abs=1e-5)

    def test_time_test(self):
        assert run_method("hooke_jeeves", PROBLEMS["f8"], time_test=True).time is not None

    def test_fresh_counters_each_run(self):
        first = run_method("bfgs", PROBLEMS["f2"])
        second = run_method("bfgs", PROBLEMS["f2"])
        assert first.func_evals == second.func_evals
