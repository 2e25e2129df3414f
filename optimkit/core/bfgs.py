"""
bfgs.py

Квазіньютонівський метод BFGS з оновленням оберненої матриці.

    p_k = -B_k g_k
    s = x_{k+1} - x_k,  y = g_{k+1} - g_k,  ρ = 1 / (yᵀs)
    B_{k+1} = (I - ρ s yᵀ) B_k (I - ρ y sᵀ) + ρ s sᵀ

Оновлення пропускається, якщо yᵀs <= curvature_eps·‖s‖‖y‖ (умова
кривизни не виконана). Перед першим оновленням B_0 = I масштабується
на yᵀs / yᵀy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .descent import DescentState, LineSearchSolver
from .errors import ConfigurationError
from .state import IterationStatus, State


@dataclass(frozen=True, eq=False)
class BFGSState(DescentState):
    """
    Додаткові поля:
        H_inv   - поточне наближення оберненого Гессіана
        updated - чи виконано оновлення на цьому кроці
    """
    H_inv: Optional[np.ndarray] = None
    updated: bool = False


class BFGSMethod(LineSearchSolver):
    """
    BFGS.

    Налаштування (SolverSetup), крім опцій line search:
        curvature_eps : поріг умови кривизни (default: 1e-10)
    """

    default_options: Dict[str, Any] = {
        "curvature_eps": 1e-10,
    }

    def __init__(self, name=None) -> None:
        super().__init__(name=name or "BFGS")

    def _validate_options(self, options: Dict[str, Any]) -> None:
        super()._validate_options(options)
        if float(options["curvature_eps"]) < 0.0:
            raise ConfigurationError(f"{self.name}: curvature_eps не може бути від'ємним.")

    def _setup_impl(self, x0: np.ndarray) -> State:
        base = self._initial_descent_state(x0)
        return BFGSState(f=base.f, x=base.x, g=base.g, H_inv=np.eye(x0.size))

    def _iterate_impl(self) -> Tuple[State, IterationStatus]:
        state: BFGSState = self._state
        g = np.array(state.g)
        B = np.array(state.H_inv)

        p = -B @ g
        if float(np.dot(g, p)) >= 0.0:
            # B втратила додатну визначеність
            B = np.eye(g.size)
            p = -g

        line, g_new, status = self._descend(p)
        if line is None:
            return state, status

        s = line.x_new - state.x
        y = g_new - g
        sy = float(np.dot(s, y))
        updated = sy > float(self._options["curvature_eps"]) * np.linalg.norm(s) * np.linalg.norm(y)
        if updated:
            if self._n_iter == 0:
                B = B * (sy / float(np.dot(y, y)))
            rho = 1.0 / sy
            eye = np.eye(g.size)
            B = (eye - rho * np.outer(s, y)) @ B @ (eye - rho * np.outer(y, s)) + rho * np.outer(s, s)

        return (
            BFGSState(
                f=line.f_new,
                x=line.x_new,
                g=g_new,
                alpha=line.alpha,
                step=float(np.linalg.norm(s)),
                H_inv=B,
                updated=bool(updated),
            ),
            status,
        )


__all__ = [
    "BFGSState",
    "BFGSMethod",
]
