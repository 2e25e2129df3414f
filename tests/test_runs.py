"""Tests for run configuration parsing and batch runs."""

import numpy as np
import pytest

import optimkit.core.runs as runs
from optimkit.core.errors import ConfigurationError
from optimkit.core.runs import (
    OptimizationConfig,
    format_point,
    parse_point,
    run_all_methods,
    run_single,
    validate_config,
)
from optimkit.core.state import IterationStatus


def make_config(**overrides):
    params = dict(function_key="f8", method_key="bfgs", x0=None, eps=1e-6, max_iter=500)
    params.update(overrides)
    return OptimizationConfig(**params)


class TestParsePoint:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1, 2.5", [1.0, 2.5]),
            ("1;2", [1.0, 2.0]),
            ("  -1e-3   4 ", [-0.001, 4.0]),
            ("(1, 1)", [1.0, 1.0]),
            ("[0.5; -2]", [0.5, -2.0]),
        ],
    )
    def test_formats(self, text, expected):
        np.testing.assert_array_equal(parse_point(text), expected)

    @pytest.mark.parametrize("text", [None, "", "   ", "default", "За замовчуванням", "()"])
    def test_default_point(self, text):
        assert parse_point(text) is None

    @pytest.mark.parametrize("text", ["1, x", "inf, 1", "1, nan"])
    def test_invalid(self, text):
        with pytest.raises(ConfigurationError):
            parse_point(text)

    def test_dimension(self):
        assert parse_point("1, 2", n=2).shape == (2,)
        with pytest.raises(ConfigurationError):
            parse_point("1, 2, 3", n=2)

    def test_format_point(self):
        assert format_point(np.array([1.0, 2.5])) == "1, 2.5"
        assert format_point([1e-7]) == "1e-07"


class TestValidateConfig:
    def test_returns_problem(self):
        assert validate_config(make_config()).key == "f8"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"function_key": "f99"},
            {"method_key": "unknown"},
            {"eps": 0.0},
            {"max_iter": 0},
            {"stop_kind": "energy"},
            {"function_key": "f6", "stop_kind": "f_dist"},
            {"function_key": "f1", "stop_kind": "x_dist"},
            {"x0": np.array([1.0, 2.0, 3.0])},
            {"function_key": "f1", "x0": np.array([0.0, 1.0])},
            {"function_key": "f1", "x0": np.array([1.0, 0.0])},
        ],
    )
    def test_errors(self, overrides):
        with pytest.raises(ConfigurationError):
            validate_config(make_config(**overrides))

    def test_unknown_method_is_allowed_for_run_all(self):
        cfg = make_config(method_key="", run_all_methods=True)
        assert validate_config(cfg).key == "f8"


class TestRunSingle:
    def test_runs_selected_method(self):
        problem, results = run_single(make_config(x0=np.array([1.0, 1.0])))
        assert problem.key == "f8"
        assert results.solver_name == "Метод BFGS"
        assert results.converged
        np.testing.assert_allclose(results.x_min, [4.0, 4.0], atol=1e-6)

    def test_callback_and_time(self):
        seen = []
        _, results = run_single(
            make_config(method_key="nelder_mead", time_test=True),
            callback=lambda state, k: seen.append(k),
        )
        assert len(seen) == results.num_iter
        assert results.time is not None

    def test_invalid_config_raises_before_running(self):
        with pytest.raises(ConfigurationError):
            run_single(make_config(function_key="f1", x0=np.array([0.0, 0.0])))


class TestRunAllMethods:
    def test_sweeps_line_searches(self):
        summary = run_all_methods(make_config(run_all_methods=True, stop_kind="f_dist", eps=1e-8))
        assert len(summary) == 8 + 5 * len(runs.SWEEP_LINE_SEARCH_KEYS)

        names = [run.solver_name for run in summary.runs]
        assert names[0] == "Градієнтний спуск (фіксований крок)"
        assert "Метод BFGS (золотий переріз)" in names
        assert "Метод Ньютона (кубічна інтерполяція (4 точки))" in names

        best = summary.best_by_f()
        assert best.status is IterationStatus.SUCCESS
        assert best.f_min < 1e-8

    def test_failed_method_is_skipped(self, monkeypatch, log_stream):
        real_run_method = runs.run_method

        def flaky_run_method(method_key, *args, **kwargs):
            if method_key == "newton":
                raise FloatingPointError("overflow in Hessian")
            return real_run_method(method_key, *args, **kwargs)

        monkeypatch.setattr(runs, "run_method", flaky_run_method)
        summary = run_all_methods(make_config(run_all_methods=True))

        assert len(summary) == 28 - 5
        assert all("Ньютона" not in run.solver_name for run in summary.runs)
        assert "overflow in Hessian" in log_stream.getvalue()
