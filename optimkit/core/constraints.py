"""
constraints.py

Обмеження допустимої області.

Обмеження застосовують самі методи під час обчислення кроку
(x_new = constraints.project(x + α p)); розв'язувач лише передає їх методу
і перевіряє розмірність на setup().
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .errors import ConfigurationError
from .functions import ArrayLike


class Constraints:
    """Базовий клас: project(x) -> x', is_feasible(x)."""

    # None: обмеження не прив'язані до розмірності
    n: Optional[int] = None

    def project(self, x: ArrayLike) -> np.ndarray:
        raise NotImplementedError

    def is_feasible(self, x: ArrayLike) -> bool:
        raise NotImplementedError


class NoConstraints(Constraints):
    """Без обмежень: project — тотожне відображення."""

    def project(self, x: ArrayLike) -> np.ndarray:
        return np.asarray(x, dtype=float)

    def is_feasible(self, x: ArrayLike) -> bool:
        return True

    def __repr__(self) -> str:
        return "NoConstraints()"


class BoundConstraints(Constraints):
    """
    Прямокутні обмеження lower <= x <= upper (покоординатно).

    Нескінченні межі дозволені: BoundConstraints([0, -np.inf], [np.inf, 1]).
    """

    def __init__(self, lower: ArrayLike, upper: ArrayLike) -> None:
        lower = np.asarray(lower, dtype=float).reshape(-1)
        upper = np.asarray(upper, dtype=float).reshape(-1)

        if lower.shape != upper.shape:
            raise ConfigurationError(
                f"BoundConstraints: lower {lower.shape} і upper {upper.shape} "
                "повинні мати однакову форму."
            )
        if np.any(np.isnan(lower)) or np.any(np.isnan(upper)):
            raise ConfigurationError("BoundConstraints: межі не можуть бути NaN.")
        if np.any(lower > upper):
            raise ConfigurationError("BoundConstraints: потрібно lower <= upper.")

        self.lower = lower
        self.upper = upper
        self.n = int(lower.size)

    def project(self, x: ArrayLike) -> np.ndarray:
        return np.clip(np.asarray(x, dtype=float), self.lower, self.upper)

    def is_feasible(self, x: ArrayLike) -> bool:
        x = np.asarray(x, dtype=float)
        return bool(np.all(x >= self.lower) and np.all(x <= self.upper))

    def __repr__(self) -> str:
        return f"BoundConstraints(lower={self.lower.tolist()}, upper={self.upper.tolist()})"


__all__ = [
    "Constraints",
    "NoConstraints",
    "BoundConstraints",
]
