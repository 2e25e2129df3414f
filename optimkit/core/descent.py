"""
descent.py

Спільна основа градієнтних методів з одномірним пошуком:
    x_{k+1} = P(x_k + α_k p_k),
де p_k — напрямок спуску конкретного методу, α_k — результат line search,
P — проєкція на допустиму область (Constraints.project).

Конкретні методи (Коші, спряжені градієнти, Ньютон, BFGS) визначають
лише напрямок p_k та оновлення власних полів стану.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .errors import ConfigurationError
from .line_search import (
    LINE_SEARCH_ARMIJO,
    LINE_SEARCH_DEFAULT,
    LINE_SEARCH_METHODS,
    LineSearchResult,
    line_search_1d,
)
from .solver import NativeSolver
from .state import IterationStatus, State


@dataclass(frozen=True, eq=False)
class DescentState(State):
    """
    Стан градієнтного методу.

    Додаткові поля:
        g     - ∇f(x)
        alpha - крок line search, що привів у x (0 для x0)
        step  - ‖x_k - x_{k-1}‖
    """
    g: Optional[np.ndarray] = None
    alpha: float = 0.0
    step: float = 0.0

    @property
    def grad_norm(self) -> float:
        return float(np.linalg.norm(self.g)) if self.g is not None else float("nan")


@dataclass
class LineStep:
    """Прийнятий крок уздовж напрямку."""
    alpha: float
    x_new: np.ndarray
    f_new: float
    failed: bool
    result: Optional[LineSearchResult] = None


class LineSearchSolver(NativeSolver):
    """
    База для методів з line search. Вбудованого критерію зупинки немає:
    розв'язувач звертається до зовнішнього критерію.

    Опції line search:
        line_search          : метод 1D-пошуку (default: "armijo_backtracking")
        alpha0, tau, c1      : Armijo — початковий крок, множник, константа
                               (1.0, 0.5, 1e-4)
        max_backtracking     : ліміт кроків дроблення (30)
        min_alpha            : мінімальний крок Armijo (1e-12)
        line_search_tol      : точність за α для інтервальних методів (1e-6)
        line_search_max_iter : ліміт ітерацій інтервальних методів (100)
        line_search_max_step : права межа [0, b] для інтервальних методів (1.0)
        fallback_alpha       : крок, якщо 1D-пошук повернув inf/NaN (1e-3)

    Пороги стагнації (NO_PROGRESS):
        - крок не зменшив f;
        - або ‖Δx‖ <= step_tol·max(1, ‖x‖) і |Δf| <= f_tol·max(1, |f|)
          (step_tol = 1e-12, f_tol = 1e-14).
    """

    requires_gradient: bool = True

    line_search_options: Dict[str, Any] = {
        "line_search": LINE_SEARCH_ARMIJO,
        "alpha0": 1.0,
        "tau": 0.5,
        "c1": 1e-4,
        "max_backtracking": 30,
        "min_alpha": 1e-12,
        "line_search_tol": 1e-6,
        "line_search_max_iter": 100,
        "line_search_max_step": 1.0,
        "fallback_alpha": 1e-3,
        "step_tol": 1e-12,
        "f_tol": 1e-14,
    }

    def has_builtin_stopping_criterion(self) -> bool:
        return False

    def all_default_options(self) -> Dict[str, Any]:
        """Усі розпізнавані опції методу з їх значеннями за замовчуванням."""
        merged = dict(self.common_options)
        merged.update(self.line_search_options)
        merged.update(self.default_options)
        return merged

    def _validate_options(self, options: Dict[str, Any]) -> None:
        method = options["line_search"]
        if method != LINE_SEARCH_DEFAULT and method not in LINE_SEARCH_METHODS:
            raise ConfigurationError(
                f"{self.name}: невідомий метод одномірного пошуку {method!r}."
            )
        for key in ("alpha0", "line_search_max_step", "fallback_alpha", "line_search_tol"):
            if not float(options[key]) > 0.0:
                raise ConfigurationError(f"{self.name}: {key} повинен бути додатним.")
        if not 0.0 < float(options["tau"]) < 1.0:
            raise ConfigurationError(f"{self.name}: потрібно 0 < tau < 1.")

    # ------------------------------------------------------------------

    def _initial_descent_state(self, x0: np.ndarray) -> DescentState:
        f0 = self._objective.evaluate(x0)
        g0 = self._objective.gradient(x0)
        return DescentState(f=f0, x=x0, g=g0)

    def _line_step(self, x: np.ndarray, f: float, g: np.ndarray, p: np.ndarray) -> LineStep:
        """Крок уздовж p з точки x: 1D-пошук за α та проєкція."""
        opts = self._options
        objective = self._objective
        project = self._constraints.project

        def phi(alpha: float) -> float:
            return objective.evaluate(project(x + alpha * p))

        method = opts["line_search"]
        if method in (LINE_SEARCH_ARMIJO, LINE_SEARCH_DEFAULT):
            ls_options = {
                "f0": f,
                "directional_derivative": float(np.dot(g, p)),
                "alpha0": opts["alpha0"],
                "tau": opts["tau"],
                "c1": opts["c1"],
                "max_backtracking": opts["max_backtracking"],
                "min_alpha": opts["min_alpha"],
            }
            max_iter = int(opts["max_backtracking"])
        else:
            ls_options = {"alpha0": 0.0}
            max_iter = int(opts["line_search_max_iter"])

        result = line_search_1d(
            phi=phi,
            a=0.0,
            b=float(opts["line_search_max_step"]),
            method=method,
            tol=float(opts["line_search_tol"]),
            max_iter=max_iter,
            options=ls_options,
        )

        failed = not (np.isfinite(result.alpha) and np.isfinite(result.phi_value))
        alpha = float(opts["fallback_alpha"]) if failed else float(result.alpha)
        x_new = project(x + alpha * p)
        f_new = objective.evaluate(x_new)
        return LineStep(alpha=alpha, x_new=x_new, f_new=f_new, failed=failed, result=result)

    def _progress_status(
        self, x: np.ndarray, f: float, x_new: np.ndarray, f_new: float
    ) -> IterationStatus:
        if not np.isfinite(f_new):
            return IterationStatus.OUT_OF_CONTROL
        if not f_new < f:
            return IterationStatus.NO_PROGRESS
        step = float(np.linalg.norm(x_new - x))
        small_step = step <= float(self._options["step_tol"]) * max(1.0, float(np.linalg.norm(x)))
        small_df = abs(f - f_new) <= float(self._options["f_tol"]) * max(1.0, abs(f))
        if small_step and small_df:
            return IterationStatus.NO_PROGRESS
        return IterationStatus.CONTINUE

    def _descend(
        self, p: np.ndarray
    ) -> Tuple[Optional[LineStep], np.ndarray, IterationStatus]:
        """
        Спільна частина кроку: line search уздовж p, статус прогресу, ∇f у
        новій точці. Якщо f не зменшилась або стала inf/NaN, крок
        відкидається (LineStep=None, градієнт — у старій точці).
        """
        state = self._state
        line = self._line_step(state.x, state.f, state.g, p)
        status = self._progress_status(state.x, state.f, line.x_new, line.f_new)
        if not (np.isfinite(line.f_new) and line.f_new < state.f):
            return None, state.g, status
        g_new = self._objective.gradient(line.x_new)
        return line, g_new, status

    def _setup_impl(self, x0: np.ndarray) -> State:
        return self._initial_descent_state(x0)


__all__ = [
    "DescentState",
    "LineStep",
    "LineSearchSolver",
]
