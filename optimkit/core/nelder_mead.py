"""
nelder_mead.py

Симплекс-метод Нелдера–Міда.

Працює лише зі значеннями f. Стан тримає всі n+1 вершини симплекса як
стовпці X (відсортовані за f, перша — найкраща, тож X[:, 0] == x).

Одна ітерація:
    1. центроїд усіх вершин, крім найгіршої;
    2. відбиття; за потреби розширення;
    3. інакше зовнішнє / внутрішнє стискання;
    4. якщо й воно не допомогло — стиснення всього симплекса до найкращої.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .errors import ConfigurationError
from .solver import NativeSolver
from .state import IterationStatus, State


@dataclass(frozen=True, eq=False)
class SimplexState(State):
    """
    Додаткові поля:
        f_values  - f у вершинах (у порядку стовпців X)
        step_type - "reflection", "expansion", "contraction", "shrink"
        diameter  - max відстань від найкращої вершини
    """
    f_values: Optional[np.ndarray] = None
    step_type: str = "initial"
    diameter: float = 0.0


def _simplex_diameter(vertices: np.ndarray) -> float:
    """vertices — рядки; max відстань від першої (найкращої) вершини."""
    return float(np.max(np.linalg.norm(vertices - vertices[0], axis=1)))


class NelderMeadMethod(NativeSolver):
    """
    Метод Нелдера–Міда.

    Налаштування (SolverSetup):
        alpha                 : коефіцієнт відбиття (default: 1.0)
        gamma                 : коефіцієнт розширення (default: 2.0)
        rho                   : коефіцієнт стискання (default: 0.5)
        sigma                 : коефіцієнт стиснення симплекса (default: 0.5)
        initial_simplex_scale : відносний зсув вершин початкового симплекса
                                (default: 0.05; для нульової координати — абсолютний)
        min_simplex_diameter  : NO_PROGRESS, коли діаметр симплекса менший
                                (default: 1e-10)

    Вбудованого критерію немає; f тут не зменшується на кожному кроці,
    тож "стагнація" визначається лише розміром симплекса.
    """

    default_options: Dict[str, Any] = {
        "alpha": 1.0,
        "gamma": 2.0,
        "rho": 0.5,
        "sigma": 0.5,
        "initial_simplex_scale": 0.05,
        "min_simplex_diameter": 1e-10,
    }

    def __init__(self, name=None) -> None:
        super().__init__(name=name or "Nelder–Mead simplex")

    def has_builtin_stopping_criterion(self) -> bool:
        return False

    def _validate_options(self, options: Dict[str, Any]) -> None:
        if not float(options["alpha"]) > 0.0:
            raise ConfigurationError(f"{self.name}: alpha повинен бути додатним.")
        if not float(options["gamma"]) > 1.0:
            raise ConfigurationError(f"{self.name}: gamma повинен бути > 1.")
        for key in ("rho", "sigma"):
            if not 0.0 < float(options[key]) < 1.0:
                raise ConfigurationError(f"{self.name}: потрібно 0 < {key} < 1.")
        if not float(options["initial_simplex_scale"]) > 0.0:
            raise ConfigurationError(f"{self.name}: initial_simplex_scale повинен бути додатним.")

    # ------------------------------------------------------------------

    def _make_state(self, vertices: np.ndarray, f_values: np.ndarray, step_type: str) -> SimplexState:
        order = np.argsort(f_values, kind="stable")
        vertices = vertices[order]
        f_values = f_values[order]
        return SimplexState(
            f=f_values[0],
            x=vertices[0],
            X=vertices.T,
            f_values=f_values,
            step_type=step_type,
            diameter=_simplex_diameter(vertices),
        )

    def _setup_impl(self, x0: np.ndarray) -> State:
        scale = float(self._options["initial_simplex_scale"])
        project = self._constraints.project
        n = x0.size

        vertices = np.tile(x0, (n + 1, 1))
        for i in range(n):
            vertices[i + 1, i] = (1.0 + scale) * x0[i] if x0[i] != 0.0 else scale
            vertices[i + 1] = project(vertices[i + 1])

        f_values = np.array([self._objective.evaluate(v) for v in vertices])
        return self._make_state(vertices, f_values, "initial")

    def _iterate_impl(self) -> Tuple[State, IterationStatus]:
        state: SimplexState = self._state
        opts = self._options
        f = self._objective.evaluate
        project = self._constraints.project

        vertices = np.array(state.X.T)
        f_values = np.array(state.f_values)

        best, worst = vertices[0], vertices[-1]
        f_best, f_second, f_worst = f_values[0], f_values[-2], f_values[-1]
        centroid = vertices[:-1].mean(axis=0)

        x_r = project(centroid + opts["alpha"] * (centroid - worst))
        f_r = f(x_r)

        if f_best <= f_r < f_second:
            vertices[-1], f_values[-1] = x_r, f_r
            step_type = "reflection"
        elif f_r < f_best:
            x_e = project(centroid + opts["gamma"] * (x_r - centroid))
            f_e = f(x_e)
            if f_e < f_r:
                vertices[-1], f_values[-1] = x_e, f_e
                step_type = "expansion"
            else:
                vertices[-1], f_values[-1] = x_r, f_r
                step_type = "reflection"
        else:
            if f_r < f_worst:
                x_c = project(centroid + opts["rho"] * (x_r - centroid))
            else:
                x_c = project(centroid - opts["rho"] * (centroid - worst))
            f_c = f(x_c)
            if f_c < min(f_r, f_worst):
                vertices[-1], f_values[-1] = x_c, f_c
                step_type = "contraction"
            else:
                for i in range(1, vertices.shape[0]):
                    vertices[i] = project(best + opts["sigma"] * (vertices[i] - best))
                    f_values[i] = f(vertices[i])
                step_type = "shrink"

        new_state = self._make_state(vertices, f_values, step_type)
        if new_state.diameter < float(opts["min_simplex_diameter"]):
            return new_state, IterationStatus.NO_PROGRESS
        return new_state, IterationStatus.CONTINUE


__all__ = [
    "SimplexState",
    "NelderMeadMethod",
]
