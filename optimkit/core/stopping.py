"""
stopping.py

Зовнішні критерії зупинки.

Критерій — це предикат над станом розв'язувача:
    should_stop(state, n_iter, objective=None) -> bool

Розв'язувач звертається до критерію лише для методів без вбудованого
критерію (has_builtin_stopping_criterion() == False).

Критерії комбінуються:
    GradNormTest(1e-6) | MaxNumIterTest(500)   # будь-який
    FDistToMinTest(0.0, 1e-8) & XDistToMinTest([1, 1], 1e-4)   # усі
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

import numpy as np

from .errors import ConfigurationError
from .functions import ArrayLike, ObjectiveFunction
from .state import State


class StoppingCriterion(ABC):
    """Базовий клас критерію зупинки."""

    threshold: float = 0.0

    @abstractmethod
    def test_value(
        self,
        state: State,
        n_iter: int,
        objective: Optional[ObjectiveFunction] = None,
    ) -> float:
        """Величина, яку критерій порівнює з порогом (term_val у результатах)."""
        raise NotImplementedError

    def should_stop(
        self,
        state: State,
        n_iter: int,
        objective: Optional[ObjectiveFunction] = None,
    ) -> bool:
        return bool(self.test_value(state, n_iter, objective) < self.threshold)

    def describe(self) -> str:
        return type(self).__name__

    def __or__(self, other: "StoppingCriterion") -> "CompoundStoppingCriterion":
        return CompoundStoppingCriterion([self, other], mode="any")

    def __and__(self, other: "StoppingCriterion") -> "CompoundStoppingCriterion":
        return CompoundStoppingCriterion([self, other], mode="all")

    def __repr__(self) -> str:
        return self.describe()


def _positive(value: float, what: str) -> float:
    value = float(value)
    if not value > 0.0:
        raise ConfigurationError(f"{what}: поріг повинен бути додатним, отримано {value}.")
    return value


# ---------------------------------------------------------------------------
# Конкретні критерії
# ---------------------------------------------------------------------------

class GradNormTest(StoppingCriterion):
    """‖∇f(x)‖ < eps. Градієнт береться з objective (рахується в grad_evals)."""

    def __init__(self, eps: float = 1e-6) -> None:
        self.threshold = _positive(eps, "GradNormTest")

    def test_value(self, state, n_iter, objective=None) -> float:
        if objective is None:
            raise ConfigurationError(
                "GradNormTest: для обчислення ‖∇f‖ потрібна цільова функція."
            )
        return float(np.linalg.norm(objective.gradient(state.x)))

    def describe(self) -> str:
        return f"‖∇f‖ < {self.threshold:g}"


class FDistToMinTest(StoppingCriterion):
    """
    |f - f_min| < eps, або |f - f_min| / |f_min| < eps при relative=True
    (для f_min = 0 відносна форма вироджується в абсолютну).
    """

    def __init__(self, f_min: float, eps: float = 1e-6, relative: bool = False) -> None:
        self.f_min = float(f_min)
        self.threshold = _positive(eps, "FDistToMinTest")
        self.relative = bool(relative)

    def test_value(self, state, n_iter, objective=None) -> float:
        dist = abs(state.f - self.f_min)
        if self.relative and self.f_min != 0.0:
            dist /= abs(self.f_min)
        return float(dist)

    def describe(self) -> str:
        kind = "відн." if self.relative else "абс."
        return f"|f - f*| < {self.threshold:g} ({kind})"


class XDistToMinTest(StoppingCriterion):
    """‖x - x_min‖ < eps (або відносно ‖x_min‖)."""

    def __init__(self, x_min: ArrayLike, eps: float = 1e-6, relative: bool = False) -> None:
        self.x_min = np.asarray(x_min, dtype=float).reshape(-1)
        self.threshold = _positive(eps, "XDistToMinTest")
        self.relative = bool(relative)

    def test_value(self, state, n_iter, objective=None) -> float:
        if state.x.shape != self.x_min.shape:
            raise ConfigurationError(
                f"XDistToMinTest: x_min має форму {self.x_min.shape}, "
                f"а поточна точка — {state.x.shape}."
            )
        dist = float(np.linalg.norm(state.x - self.x_min))
        norm_min = float(np.linalg.norm(self.x_min))
        if self.relative and norm_min > 0.0:
            dist /= norm_min
        return dist

    def describe(self) -> str:
        kind = "відн." if self.relative else "абс."
        return f"‖x - x*‖ < {self.threshold:g} ({kind})"


class MaxNumIterTest(StoppingCriterion):
    """Зупинка після max_iter ітерацій."""

    def __init__(self, max_iter: int) -> None:
        if int(max_iter) <= 0:
            raise ConfigurationError(
                f"MaxNumIterTest: max_iter повинен бути додатним, отримано {max_iter}."
            )
        self.max_iter = int(max_iter)
        self.threshold = float(self.max_iter)

    def test_value(self, state, n_iter, objective=None) -> float:
        return float(n_iter)

    def should_stop(self, state, n_iter, objective=None) -> bool:
        return n_iter >= self.max_iter

    def describe(self) -> str:
        return f"k ≥ {self.max_iter}"


class CompoundStoppingCriterion(StoppingCriterion):
    """
    Композиція критеріїв: mode="any" — зупинка, якщо спрацював хоча б один,
    mode="all" — лише коли спрацювали всі.

    test_value() повертає значення першого критерію, що спрацював
    (або першого в списку, якщо жоден не спрацював).
    """

    def __init__(self, criteria: Iterable[StoppingCriterion], mode: str = "any") -> None:
        flat: List[StoppingCriterion] = []
        for crit in criteria:
            # (a | b) | c -> один рівень
            if isinstance(crit, CompoundStoppingCriterion) and crit.mode == mode:
                flat.extend(crit.criteria)
            else:
                flat.append(crit)

        if not flat:
            raise ConfigurationError("CompoundStoppingCriterion: порожній список критеріїв.")
        if mode not in ("any", "all"):
            raise ConfigurationError(
                f"CompoundStoppingCriterion: mode повинен бути 'any' або 'all', отримано {mode!r}."
            )
        self.criteria = flat
        self.mode = mode

    def _fired(self, state, n_iter, objective) -> List[StoppingCriterion]:
        return [c for c in self.criteria if c.should_stop(state, n_iter, objective)]

    def should_stop(self, state, n_iter, objective=None) -> bool:
        fired = self._fired(state, n_iter, objective)
        if self.mode == "any":
            return bool(fired)
        return len(fired) == len(self.criteria)

    def test_value(self, state, n_iter, objective=None) -> float:
        fired = self._fired(state, n_iter, objective)
        crit = fired[0] if fired else self.criteria[0]
        return crit.test_value(state, n_iter, objective)

    def describe(self) -> str:
        joiner = " або " if self.mode == "any" else " і "
        return joiner.join(c.describe() for c in self.criteria)


__all__ = [
    "StoppingCriterion",
    "GradNormTest",
    "FDistToMinTest",
    "XDistToMinTest",
    "MaxNumIterTest",
    "CompoundStoppingCriterion",
]
