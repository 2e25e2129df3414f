"""
errors.py

Ієрархія винятків ядра оптимізації.

    OptimkitError
        ├── ConfigurationError  – некоректна конфігурація запуску
        │                         (розмірність x0, невідомий ключ options, ...)
        └── SolverStateError    – порушення передумов життєвого циклу
                                  (iterate() до setup(), iterate() після
                                  термінального статусу, ...)

Числові проблеми (розбіжність, стагнація) НЕ є винятками — це статуси
IterationStatus.OUT_OF_CONTROL / NO_PROGRESS.
"""

from __future__ import annotations


class OptimkitError(Exception):
    """Базовий виняток optimkit."""


class ConfigurationError(OptimkitError, ValueError):
    """Конфігурація запуску некоректна; піднімається до першої ітерації."""


class SolverStateError(OptimkitError, RuntimeError):
    """Операцію викликано у недопустимому стані розв'язувача."""


__all__ = [
    "OptimkitError",
    "ConfigurationError",
    "SolverStateError",
]
