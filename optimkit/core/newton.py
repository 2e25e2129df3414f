"""
newton.py

Метод Ньютона з регуляризацією Гессіана та line search.

    (H_k + λ I) p_k = -g_k,   x_{k+1} = P(x_k + α_k p_k)

λ = 0, якщо H_k додатно визначений; інакше λ = reg_lambda·10^j, поки
розклад Холецького не вдасться (λ <= reg_lambda·max_reg_scale). Якщо
регуляризація не допомогла або p_k не є напрямком спуску, p_k = -g_k.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .descent import DescentState, LineSearchSolver
from .errors import ConfigurationError
from .state import IterationStatus, State


@dataclass(frozen=True, eq=False)
class NewtonState(DescentState):
    """
    Додаткові поля:
        reg_lambda       - λ, використане на кроці
        fallback_to_grad - крок зроблено вздовж -g
    """
    reg_lambda: float = 0.0
    fallback_to_grad: bool = False


class NewtonMethod(LineSearchSolver):
    """
    Метод Ньютона.

    Налаштування (SolverSetup), крім опцій line search:
        reg_lambda    : початкове λ для регуляризації (default: 1e-6)
        max_reg_scale : максимальне λ = reg_lambda·max_reg_scale (default: 1e10)
    """

    requires_hessian: bool = True

    default_options: Dict[str, Any] = {
        "reg_lambda": 1e-6,
        "max_reg_scale": 1e10,
    }

    def __init__(self, name=None) -> None:
        super().__init__(name=name or "Newton method")

    def _validate_options(self, options: Dict[str, Any]) -> None:
        super()._validate_options(options)
        if not float(options["reg_lambda"]) > 0.0:
            raise ConfigurationError(f"{self.name}: reg_lambda повинен бути додатним.")
        if float(options["max_reg_scale"]) < 1.0:
            raise ConfigurationError(f"{self.name}: max_reg_scale повинен бути >= 1.")

    def _newton_direction(
        self, g: np.ndarray, H: np.ndarray
    ) -> Tuple[Optional[np.ndarray], float]:
        """Напрямок з (H + λI) p = -g або (None, λ), якщо розклад не вдався."""
        H_sym = 0.5 * (H + H.T)
        eye = np.eye(g.size)
        lam_start = float(self._options["reg_lambda"])
        lam_max = lam_start * float(self._options["max_reg_scale"])

        lam = 0.0
        while lam <= lam_max:
            try:
                L = np.linalg.cholesky(H_sym + lam * eye)
            except np.linalg.LinAlgError:
                lam = lam_start if lam == 0.0 else lam * 10.0
                continue
            y = np.linalg.solve(L, -g)
            return np.linalg.solve(L.T, y), lam
        return None, lam

    def _iterate_impl(self) -> Tuple[State, IterationStatus]:
        state: DescentState = self._state
        g = np.array(state.g)
        H = self._objective.hessian(state.x)

        p, lam = self._newton_direction(g, H)
        fallback = p is None or not np.all(np.isfinite(p)) or float(np.dot(g, p)) >= 0.0
        if fallback:
            p = -g

        line, g_new, status = self._descend(p)
        if line is None:
            return state, status

        return (
            NewtonState(
                f=line.f_new,
                x=line.x_new,
                g=g_new,
                alpha=line.alpha,
                step=float(np.linalg.norm(line.x_new - state.x)),
                reg_lambda=lam,
                fallback_to_grad=fallback,
            ),
            status,
        )


__all__ = [
    "NewtonState",
    "NewtonMethod",
]
