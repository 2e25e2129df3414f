"""
cauchy.py

Метод Коші (найшвидший спуск):
    x_{k+1} = P(x_k + α_k p_k),  p_k = -∇f(x_k),
α_k — результат line search (за замовчуванням Armijo backtracking).
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .descent import DescentState, LineSearchSolver
from .state import IterationStatus, State


class SteepestDescent(LineSearchSolver):
    """
    Метод Коші.

    Використовує лише f та ∇f. Власних опцій немає, лише опції line search
    та пороги стагнації LineSearchSolver.
    """

    def __init__(self, name=None) -> None:
        super().__init__(name=name or "Cauchy (steepest descent)")

    def _iterate_impl(self) -> Tuple[State, IterationStatus]:
        state: DescentState = self._state
        line, g_new, status = self._descend(-state.g)
        if line is None:
            return state, status

        return (
            DescentState(
                f=line.f_new,
                x=line.x_new,
                g=g_new,
                alpha=line.alpha,
                step=float(np.linalg.norm(line.x_new - state.x)),
            ),
            status,
        )


__all__ = [
    "SteepestDescent",
]
