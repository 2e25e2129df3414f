"""Tests for one-dimensional step searches."""

import pytest

from optimkit.core.errors import ConfigurationError
from optimkit.core.line_search import (
    LINE_SEARCH_ARMIJO,
    LINE_SEARCH_CUBIC_4POINT,
    LINE_SEARCH_DICHOTOMY,
    LINE_SEARCH_GOLDEN_SECTION,
    LINE_SEARCH_INTERVAL_HALVING,
    LINE_SEARCH_METHODS,
    LINE_SEARCH_STEP_ADAPTATION,
    line_search_1d,
)


def parabola(alpha):
    return (alpha - 0.3) ** 2


ARMIJO_OPTIONS = {"f0": 0.09, "directional_derivative": -0.6}


class TestArmijo:
    def test_halves_until_sufficient_decrease(self):
        result = line_search_1d(parabola, 0.0, 1.0, method=LINE_SEARCH_ARMIJO, options=ARMIJO_OPTIONS)
        assert result.alpha == 0.5
        assert result.phi_value == pytest.approx(0.04)
        assert result.iterations == 2
        assert result.func_evals == 2
        assert result.meta["accepted"]
        assert result.meta["stopped_by"] == "armijo"

    def test_default_method_is_armijo(self):
        result = line_search_1d(parabola, 0.0, 1.0, options=ARMIJO_OPTIONS)
        assert result.meta["method"] == LINE_SEARCH_ARMIJO

    def test_interval_is_not_required(self):
        result = line_search_1d(parabola, 0.0, 0.0, method=LINE_SEARCH_ARMIJO, options=ARMIJO_OPTIONS)
        assert result.alpha == 0.5

    def test_gives_up_on_ascent_direction(self):
        result = line_search_1d(
            lambda a: 1.0 + a,
            0.0,
            1.0,
            method=LINE_SEARCH_ARMIJO,
            max_iter=10,
            options={"f0": 1.0, "directional_derivative": -1.0},
        )
        assert not result.meta["accepted"]
        assert result.iterations == 10

    def test_requires_f0(self):
        with pytest.raises(ConfigurationError, match="f0"):
            line_search_1d(parabola, 0.0, 1.0, method=LINE_SEARCH_ARMIJO, options={})

    def test_rejects_bad_tau(self):
        with pytest.raises(ConfigurationError):
            line_search_1d(
                parabola, 0.0, 1.0, method=LINE_SEARCH_ARMIJO, options=dict(ARMIJO_OPTIONS, tau=1.5)
            )


@pytest.mark.parametrize(
    "method",
    [
        LINE_SEARCH_DICHOTOMY,
        LINE_SEARCH_INTERVAL_HALVING,
        LINE_SEARCH_GOLDEN_SECTION,
        LINE_SEARCH_STEP_ADAPTATION,
        LINE_SEARCH_CUBIC_4POINT,
    ],
)
def test_interval_methods_find_minimum(method):
    result = line_search_1d(parabola, 0.0, 1.0, method=method, tol=1e-6)
    assert result.alpha == pytest.approx(0.3, abs=1e-5)
    assert result.phi_value == pytest.approx(0.0, abs=1e-9)
    assert result.func_evals > 0
    assert result.meta["method"] == method


def test_minimum_at_interval_edge():
    result = line_search_1d(lambda a: a, 0.0, 1.0, method=LINE_SEARCH_GOLDEN_SECTION, tol=1e-6)
    assert result.alpha == pytest.approx(0.0, abs=1e-5)


def test_interval_halving_respects_iteration_limit():
    result = line_search_1d(parabola, 0.0, 1.0, method=LINE_SEARCH_INTERVAL_HALVING, tol=1e-12, max_iter=3)
    assert result.iterations == 3
    assert result.meta["stopped_by"] == "max_iter"


def test_unknown_method():
    with pytest.raises(ConfigurationError):
        line_search_1d(parabola, 0.0, 1.0, method="newton_1d")


def test_interval_must_be_ordered():
    with pytest.raises(ConfigurationError):
        line_search_1d(parabola, 1.0, 0.0, method=LINE_SEARCH_GOLDEN_SECTION)


def test_all_methods_are_listed():
    assert set(LINE_SEARCH_METHODS) == {
        LINE_SEARCH_ARMIJO,
        LINE_SEARCH_DICHOTOMY,
        LINE_SEARCH_INTERVAL_HALVING,
        LINE_SEARCH_GOLDEN_SECTION,
        LINE_SEARCH_STEP_ADAPTATION,
        LINE_SEARCH_CUBIC_4POINT,
    }
