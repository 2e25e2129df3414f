"""
conjugate_gradient.py

Метод спряжених градієнтів (Флетчера–Рівза та Полака–Ріб'єра).

    x_{k+1} = P(x_k + α_k d_k)
    d_{k+1} = -g_{k+1} + β_k d_k

    β (Флетчер–Рівз)   = (g_{k+1}ᵀ g_{k+1}) / (g_kᵀ g_k)
    β (Полак–Ріб'єр+)  = max(0, g_{k+1}ᵀ (g_{k+1} - g_k) / (g_kᵀ g_k))

Перезапуск (d = -g): кожні restart_every ітерацій, а також коли d не є
напрямком спуску.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .descent import DescentState, LineSearchSolver
from .errors import ConfigurationError
from .state import IterationStatus, State

BETA_FLETCHER_REEVES = "fletcher_reeves"
BETA_POLAK_RIBIERE = "polak_ribiere"


@dataclass(frozen=True, eq=False)
class ConjugateGradientState(DescentState):
    """
    Додаткові поля:
        d         - напрямок для НАСТУПНОГО кроку
        beta      - β, з яким побудовано d
        restarted - d = -g (перезапуск)
    """
    d: Optional[np.ndarray] = None
    beta: float = 0.0
    restarted: bool = True


class ConjugateGradient(LineSearchSolver):
    """
    Метод спряжених градієнтів.

    Налаштування (SolverSetup), крім опцій line search:
        beta_formula  : "fletcher_reeves" або "polak_ribiere" (default: PR+)
        restart_every : перезапуск кожні стільки ітерацій; 0 — кожні n
                        (default: 0)
    """

    default_options: Dict[str, Any] = {
        "beta_formula": BETA_POLAK_RIBIERE,
        "restart_every": 0,
    }

    def __init__(self, name=None, beta_formula: Optional[str] = None) -> None:
        if beta_formula is not None:
            self.default_options = dict(type(self).default_options, beta_formula=beta_formula)
        if name is None:
            name = (
                "Fletcher–Reeves"
                if beta_formula == BETA_FLETCHER_REEVES
                else "Polak–Ribière"
            )
        super().__init__(name=name)

    def _validate_options(self, options: Dict[str, Any]) -> None:
        super()._validate_options(options)
        if options["beta_formula"] not in (BETA_FLETCHER_REEVES, BETA_POLAK_RIBIERE):
            raise ConfigurationError(
                f"{self.name}: beta_formula повинна бути "
                f"'{BETA_FLETCHER_REEVES}' або '{BETA_POLAK_RIBIERE}'."
            )
        if int(options["restart_every"]) < 0:
            raise ConfigurationError(f"{self.name}: restart_every не може бути від'ємним.")

    def _setup_impl(self, x0: np.ndarray) -> State:
        base = self._initial_descent_state(x0)
        return ConjugateGradientState(f=base.f, x=base.x, g=base.g, d=-base.g)

    def _beta(self, g_new: np.ndarray, g_old: np.ndarray) -> float:
        den = float(np.dot(g_old, g_old))
        if den <= 1e-300:
            return 0.0
        if self._options["beta_formula"] == BETA_FLETCHER_REEVES:
            return float(np.dot(g_new, g_new)) / den
        return max(0.0, float(np.dot(g_new, g_new - g_old)) / den)

    def _iterate_impl(self) -> Tuple[State, IterationStatus]:
        state: ConjugateGradientState = self._state

        d = np.array(state.d)
        if float(np.dot(d, state.g)) >= 0.0:
            d = -state.g

        line, g_new, status = self._descend(d)
        if line is None:
            return state, status

        period = int(self._options["restart_every"]) or state.n
        if (self._n_iter + 1) % period == 0:
            beta, restarted = 0.0, True
        else:
            beta, restarted = self._beta(g_new, state.g), False

        return (
            ConjugateGradientState(
                f=line.f_new,
                x=line.x_new,
                g=g_new,
                alpha=line.alpha,
                step=float(np.linalg.norm(line.x_new - state.x)),
                d=-g_new + beta * d,
                beta=beta,
                restarted=restarted,
            ),
            status,
        )


__all__ = [
    "BETA_FLETCHER_REEVES",
    "BETA_POLAK_RIBIERE",
    "ConjugateGradientState",
    "ConjugateGradient",
]
