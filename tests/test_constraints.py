"""Tests for feasible-region constraints."""

import numpy as np
import pytest

from optimkit.core.constraints import BoundConstraints, NoConstraints
from optimkit.core.errors import ConfigurationError


def test_no_constraints_is_identity():
    c = NoConstraints()
    x = np.array([1e9, -3.0])
    np.testing.assert_array_equal(c.project(x), x)
    assert c.is_feasible(x)
    assert c.n is None


def test_bounds_clip_each_coordinate():
    c = BoundConstraints([0.0, -1.0], [2.0, 1.0])
    np.testing.assert_array_equal(c.project([3.0, -5.0]), [2.0, -1.0])
    np.testing.assert_array_equal(c.project([1.0, 0.5]), [1.0, 0.5])
    assert c.n == 2


def test_feasibility():
    c = BoundConstraints([0.0, 0.0], [1.0, 1.0])
    assert c.is_feasible([0.0, 1.0])
    assert not c.is_feasible([1.5, 0.5])


def test_infinite_bounds_are_allowed():
    c = BoundConstraints([0.0, -np.inf], [np.inf, 1.0])
    np.testing.assert_array_equal(c.project([-1.0, -1e6]), [0.0, -1e6])


@pytest.mark.parametrize(
    "lower, upper",
    [
        ([0.0, 0.0], [1.0]),
        ([2.0], [1.0]),
        ([np.nan], [1.0]),
    ],
)
def test_invalid_bounds(lower, upper):
    with pytest.raises(ConfigurationError):
        BoundConstraints(lower, upper)
