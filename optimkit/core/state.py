"""
state.py

Стан ітераційного процесу та статус ітерації.

Ідея:
    - State — незмінний знімок однієї ітерації: f, x та матриця точок X
      (по стовпцю на точку; для одноточкових методів X = x як один стовпець);
    - конкретні методи наслідуються від State і додають власні поля
      (градієнт, напрямок, крок, симплекс, ...);
    - розв'язувач тримає "живий" стан, а в історію кладе клони (clone()).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np


# ---------------------------------------------------------------------------
# Статус ітерації
# ---------------------------------------------------------------------------

class IterationStatus(Enum):
    """Статус, який повертає iterate()."""

    CONTINUE = "continue"              # прогрес є, продовжуємо
    SUCCESS = "success"                # критерій зупинки виконано
    NO_PROGRESS = "no_progress"        # стагнація
    OUT_OF_CONTROL = "out_of_control"  # розбіжність / inf / NaN

    @property
    def is_terminal(self) -> bool:
        return self is not IterationStatus.CONTINUE


# ---------------------------------------------------------------------------
# Базовий знімок стану
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class State:
    """
    Знімок однієї ітерації.

    Атрибути:
        f  - значення цільової функції в x
        x  - представницька точка (для багатоточкових методів — найкраща)
        X  - усі точки методу, матриця n×k; перший стовпець дорівнює x

    Усі масиви копіюються при створенні і стають read-only, тож знімок
    неможливо змінити після створення.
    """
    f: float
    x: np.ndarray
    X: Optional[np.ndarray] = field(default=None)

    def __post_init__(self) -> None:
        object.__setattr__(self, "f", float(self.f))

        x = np.array(self.x, dtype=float).reshape(-1)
        x.setflags(write=False)
        object.__setattr__(self, "x", x)

        if self.X is None:
            X = x.reshape(-1, 1).copy()
        else:
            X = np.array(self.X, dtype=float)
            if X.ndim == 1:
                X = X.reshape(-1, 1)
        if X.ndim != 2 or X.shape[0] != x.size or X.shape[1] < 1:
            raise ValueError(
                f"{type(self).__name__}: X повинна мати форму ({x.size}, k), "
                f"отримано {X.shape}."
            )
        if not np.array_equal(X[:, 0], x, equal_nan=True):
            raise ValueError(
                f"{type(self).__name__}: перший стовпець X повинен дорівнювати x."
            )
        X.setflags(write=False)
        object.__setattr__(self, "X", X)

        # Додаткові масиви підкласів (градієнт, напрямок, ...) теж заморожуємо
        for f_ in dataclasses.fields(self):
            if f_.name in ("f", "x", "X"):
                continue
            value = getattr(self, f_.name)
            if isinstance(value, np.ndarray):
                arr = np.array(value, dtype=float)
                arr.setflags(write=False)
                object.__setattr__(self, f_.name, arr)

    # ------------------------------------------------------------------

    @property
    def n(self) -> int:
        """Розмірність простору."""
        return int(self.x.size)

    @property
    def k(self) -> int:
        """Кількість точок, які тримає метод."""
        return int(self.X.shape[1])

    def clone(self) -> "State":
        """Глибока копія (нові масиви) будь-якого підкласу State."""
        return dataclasses.replace(self)

    def is_finite(self) -> bool:
        return bool(
            np.isfinite(self.f)
            and np.all(np.isfinite(self.x))
            and np.all(np.isfinite(self.X))
        )


__all__ = [
    "IterationStatus",
    "State",
]
