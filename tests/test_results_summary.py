"""Tests for the multi-run summary table."""

import numpy as np
import pytest

from optimkit.core.results_summary import ResultsSummary
from optimkit.core.solver import Results
from optimkit.core.state import IterationStatus


def make_results(name, f_min, status=IterationStatus.SUCCESS, time=None):
    return Results(
        solver_name=name,
        status=status,
        x_min=np.array([1.0, 2.0]),
        f_min=f_min,
        num_iter=3,
        func_evals=4,
        grad_evals=4,
        hess_evals=0,
        converged=status is IterationStatus.SUCCESS,
        stopped_by="method:success",
        time=time,
    )


def test_rows():
    summary = ResultsSummary()
    summary.add_run(make_results("BFGS", 0.5, time=0.01))
    rows = summary.as_rows()

    assert len(summary) == 1
    assert rows == [
        {
            "method": "BFGS",
            "status": "SUCCESS",
            "x_star": [1.0, 2.0],
            "f_star": 0.5,
            "n_iter": 3,
            "func_evals": 4,
            "grad_evals": 4,
            "hess_evals": 0,
            "stopped_by": "method:success",
            "time": 0.01,
        }
    ]


def test_best_prefers_successful_runs():
    summary = ResultsSummary(
        [
            make_results("diverged", -1e9, IterationStatus.OUT_OF_CONTROL),
            make_results("newton", 1e-3),
            make_results("bfgs", 1e-6),
        ]
    )
    assert summary.best_by_f().solver_name == "bfgs"


def test_best_falls_back_to_any_finite_run():
    summary = ResultsSummary(
        [
            make_results("a", 2.0, IterationStatus.NO_PROGRESS),
            make_results("b", 1.0, IterationStatus.OUT_OF_CONTROL),
            make_results("c", float("nan"), IterationStatus.SUCCESS),
        ]
    )
    assert summary.best_by_f().solver_name == "b"


def test_best_without_finite_runs():
    assert ResultsSummary().best_by_f() is None
    summary = ResultsSummary([make_results("nan", float("inf"))])
    assert summary.best_by_f() is None


def test_to_dataframe():
    pd = pytest.importorskip("pandas")
    summary = ResultsSummary([make_results("a", 1.0), make_results("b", 2.0)])
    frame = summary.to_dataframe()
    assert isinstance(frame, pd.DataFrame)
    assert list(frame["method"]) == ["a", "b"]
    assert frame.shape == (2, 10)
