"""
gradient_descent.py

Градієнтний спуск з фіксованим кроком:
    x_{k+1} = P(x_k - h ∇f(x_k)).

Метод має вбудований критерій зупинки (‖∇f‖ < grad_tol), тому зовнішній
критерій розв'язувач ігнорує.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

import numpy as np

from .descent import DescentState
from .errors import ConfigurationError
from .solver import NativeSolver
from .state import IterationStatus, State


class GradientDescent(NativeSolver):
    """
    Градієнтний спуск з фіксованим кроком.

    Налаштування (SolverSetup):
        step_size : крок h (default: 0.1)
        grad_tol  : SUCCESS, коли ‖∇f(x_{k+1})‖ < grad_tol (default: 1e-6)
        max_iter  : після стількох ітерацій без успіху — NO_PROGRESS
                    (default: 100000)

    Невідомі ключі відхиляються (ConfigurationError).

    Пороги:
        NO_PROGRESS    - f(x_{k+1}) >= f(x_k) (крок завеликий для цієї
                         області) або вичерпано max_iter;
        OUT_OF_CONTROL - спільні межі max_x_norm / max_abs_f, inf/NaN.
    """

    requires_gradient: bool = True

    default_options: Dict[str, Any] = {
        "step_size": 0.1,
        "grad_tol": 1e-6,
        "max_iter": 100000,
    }

    def __init__(self, name=None) -> None:
        super().__init__(name=name or "Gradient descent (fixed step)")

    def has_builtin_stopping_criterion(self) -> bool:
        return True

    def _validate_options(self, options: Dict[str, Any]) -> None:
        if not float(options["step_size"]) > 0.0:
            raise ConfigurationError(f"{self.name}: step_size повинен бути додатним.")
        if not float(options["grad_tol"]) > 0.0:
            raise ConfigurationError(f"{self.name}: grad_tol повинен бути додатним.")
        if int(options["max_iter"]) <= 0:
            raise ConfigurationError(f"{self.name}: max_iter повинен бути додатним.")

    def _setup_impl(self, x0: np.ndarray) -> State:
        return DescentState(
            f=self._objective.evaluate(x0),
            x=x0,
            g=self._objective.gradient(x0),
        )

    def _iterate_impl(self) -> Tuple[State, IterationStatus]:
        state: DescentState = self._state
        h = float(self._options["step_size"])

        x_new = self._constraints.project(state.x - h * state.g)
        f_new = self._objective.evaluate(x_new)
        g_new = self._objective.gradient(x_new)

        new_state = DescentState(
            f=f_new,
            x=x_new,
            g=g_new,
            alpha=h,
            step=float(np.linalg.norm(x_new - state.x)),
        )

        if new_state.grad_norm < float(self._options["grad_tol"]):
            return new_state, IterationStatus.SUCCESS
        if not f_new < state.f and np.isfinite(f_new):
            return new_state, IterationStatus.NO_PROGRESS
        if self._n_iter + 1 >= int(self._options["max_iter"]):
            return new_state, IterationStatus.NO_PROGRESS
        return new_state, IterationStatus.CONTINUE


__all__ = [
    "GradientDescent",
]
