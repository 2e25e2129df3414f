"""
hooke_jeeves.py

Метод Хука–Дживса (пошук за зразком).

Одна ітерація:
    - досліджувальний пошук навколо бази x_B (по кожній координаті ±h);
    - якщо знайдено кращу точку x_E — хід за зразком x_P = x_E + (x_E - x_B),
      нова база — краща з x_P та x_E;
    - інакше крок h зменшується у reduction_factor разів.

Метод має вбудований критерій зупинки: SUCCESS, коли h < min_step.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

import numpy as np

from .errors import ConfigurationError
from .solver import NativeSolver
from .state import IterationStatus, State


@dataclass(frozen=True, eq=False)
class PatternState(State):
    """
    Додаткові поля:
        step_size - поточний крок h досліджувального пошуку
        step_type - "pattern", "exploratory", "reduce_step"
    """
    step_size: float = 1.0
    step_type: str = "initial"


class HookeJeevesMethod(NativeSolver):
    """
    Метод Хука–Дживса.

    Налаштування (SolverSetup):
        initial_step     : початковий крок h (default: 1.0)
        reduction_factor : множник зменшення кроку, 0 < r < 1 (default: 0.5)
        min_step         : SUCCESS, коли h < min_step (default: 1e-6)
        max_iter         : після стількох ітерацій без успіху — NO_PROGRESS
                           (default: 100000)
    """

    default_options: Dict[str, Any] = {
        "initial_step": 1.0,
        "reduction_factor": 0.5,
        "min_step": 1e-6,
        "max_iter": 100000,
    }

    def __init__(self, name=None) -> None:
        super().__init__(name=name or "Hooke–Jeeves (pattern search)")

    def has_builtin_stopping_criterion(self) -> bool:
        return True

    def _validate_options(self, options: Dict[str, Any]) -> None:
        if not float(options["initial_step"]) > 0.0:
            raise ConfigurationError(f"{self.name}: initial_step повинен бути додатним.")
        if not 0.0 < float(options["reduction_factor"]) < 1.0:
            raise ConfigurationError(f"{self.name}: потрібно 0 < reduction_factor < 1.")
        if not float(options["min_step"]) > 0.0:
            raise ConfigurationError(f"{self.name}: min_step повинен бути додатним.")
        if int(options["max_iter"]) <= 0:
            raise ConfigurationError(f"{self.name}: max_iter повинен бути додатним.")

    def _setup_impl(self, x0: np.ndarray) -> State:
        return PatternState(
            f=self._objective.evaluate(x0),
            x=x0,
            step_size=float(self._options["initial_step"]),
        )

    def _explore(self, x: np.ndarray, f_x: float, h: float) -> Tuple[np.ndarray, float]:
        """Досліджувальний пошук: покоординатні кроки ±h."""
        project = self._constraints.project
        x = np.array(x)
        for i in range(x.size):
            for sign in (1.0, -1.0):
                trial = x.copy()
                trial[i] += sign * h
                trial = project(trial)
                f_trial = self._objective.evaluate(trial)
                if f_trial < f_x:
                    x, f_x = trial, f_trial
                    break
        return x, f_x

    def _iterate_impl(self) -> Tuple[State, IterationStatus]:
        state: PatternState = self._state
        h = state.step_size

        x_e, f_e = self._explore(state.x, state.f, h)

        if f_e < state.f:
            x_p = self._constraints.project(x_e + (x_e - state.x))
            f_p = self._objective.evaluate(x_p)
            if f_p < f_e:
                new_state = PatternState(f=f_p, x=x_p, step_size=h, step_type="pattern")
            else:
                new_state = PatternState(f=f_e, x=x_e, step_size=h, step_type="exploratory")
        else:
            h *= float(self._options["reduction_factor"])
            new_state = PatternState(f=state.f, x=state.x, step_size=h, step_type="reduce_step")

        if new_state.step_size < float(self._options["min_step"]):
            return new_state, IterationStatus.SUCCESS
        if self._n_iter + 1 >= int(self._options["max_iter"]):
            return new_state, IterationStatus.NO_PROGRESS
        return new_state, IterationStatus.CONTINUE


__all__ = [
    "PatternState",
    "HookeJeevesMethod",
]
