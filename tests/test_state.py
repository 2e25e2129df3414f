"""Tests for State snapshots and IterationStatus."""

from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from optimkit.core.descent import DescentState
from optimkit.core.nelder_mead import SimplexState
from optimkit.core.state import IterationStatus, State


def test_only_continue_is_not_terminal():
    assert not IterationStatus.CONTINUE.is_terminal
    for status in (
        IterationStatus.SUCCESS,
        IterationStatus.NO_PROGRESS,
        IterationStatus.OUT_OF_CONTROL,
    ):
        assert status.is_terminal


def test_single_point_state_defaults_x_array_to_x():
    state = State(f=3, x=[1.0, 2.0])
    assert state.f == 3.0
    assert isinstance(state.f, float)
    assert state.X.shape == (2, 1)
    np.testing.assert_array_equal(state.X[:, 0], state.x)
    assert state.n == 2
    assert state.k == 1


def test_state_copies_and_freezes_arrays():
    x = np.array([1.0, 2.0])
    state = State(f=0.0, x=x)
    x[0] = 100.0
    assert state.x[0] == 1.0

    assert not state.x.flags.writeable
    assert not state.X.flags.writeable
    with pytest.raises(ValueError):
        state.x[0] = 5.0


def test_state_fields_cannot_be_reassigned():
    state = State(f=1.0, x=[0.0])
    with pytest.raises(dataclasses.FrozenInstanceError):
        state.f = 2.0


def test_first_column_must_match_x():
    with pytest.raises(ValueError, match="перший стовпець"):
        State(f=0.0, x=[1.0, 2.0], X=[[0.0, 1.0], [2.0, 2.0]])


def test_x_array_shape_is_checked():
    with pytest.raises(ValueError):
        State(f=0.0, x=[1.0, 2.0], X=np.ones((3, 2)))


def test_multi_point_state():
    X = np.array([[1.0, 0.0, 2.0], [2.0, 0.0, 1.0]])
    state = State(f=0.5, x=[1.0, 2.0], X=X)
    assert state.k == 3
    np.testing.assert_array_equal(state.X, X)


def test_nan_state_is_allowed_but_not_finite():
    state = State(f=float("nan"), x=[np.nan, 1.0])
    assert not state.is_finite()
    assert State(f=1.0, x=[1.0]).is_finite()
    assert not State(f=np.inf, x=[1.0]).is_finite()


def test_clone_keeps_subclass_and_copies_arrays():
    state = DescentState(f=1.0, x=[1.0, 1.0], g=np.array([2.0, 2.0]), alpha=0.5, step=0.1)
    copy = state.clone()

    assert type(copy) is DescentState
    assert copy is not state
    assert copy.x is not state.x
    assert copy.g is not state.g
    np.testing.assert_array_equal(copy.g, state.g)
    assert copy.alpha == 0.5
    assert copy.grad_norm == pytest.approx(np.sqrt(8.0))


def test_subclass_arrays_are_frozen():
    state = SimplexState(
        f=0.0,
        x=[0.0, 0.0],
        X=[[0.0, 1.0, 0.0], [0.0, 0.0, 1.0]],
        f_values=np.array([0.0, 1.0, 1.0]),
    )
    assert not state.f_values.flags.writeable
    with pytest.raises(ValueError):
        state.f_values[0] = -1.0


def test_grad_norm_without_gradient_is_nan():
    assert np.isnan(DescentState(f=0.0, x=[0.0]).grad_norm)
