"""
runs.py

Конфігурація запуску з GUI та пакетні запуски без залежності від Qt.

    OptimizationConfig      – що обрав користувач у панелі керування
    parse_point(text, n)    – x0 з рядка "1, 2.5, -3" (або None = x0 задачі)
    validate_config(cfg)    – перевірка та пошук тестової задачі
    run_single(cfg)         – один метод
    run_all_methods(cfg)    – усі методи + перебір методів line search
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from ..log import get_logger
from .errors import ConfigurationError
from .functions import PROBLEMS, TestProblem
from .registry import (
    ALL_METHOD_KEYS,
    LINE_SEARCH_CHOICES,
    SOLVERS,
    STOPPING_CHOICES,
    run_method,
    uses_line_search,
)
from .results_summary import ResultsSummary
from .solver import IterationCallback, Results

logger = get_logger(__name__)

# Методи 1D-пошуку, які перебираються в "Запустити всі методи"
SWEEP_LINE_SEARCH_KEYS: List[str] = [
    "dichotomy",
    "interval_halving",
    "golden_section",
    "cubic4",
]

_DEFAULT_POINT_WORDS = ("", "default", "за замовчуванням")


@dataclass
class OptimizationConfig:
    function_key: str
    method_key: str
    x0: Optional[np.ndarray]  # None -> x0 задачі
    eps: float
    max_iter: int
    stop_kind: str = "grad_norm"
    line_search_key: str = "default"
    run_all_methods: bool = False
    time_test: bool = False


def parse_point(text: Optional[str], n: Optional[int] = None) -> Optional[np.ndarray]:
    """
    Точка з рядка: компоненти через кому, крапку з комою або пробіл.

    Порожній рядок або "default" -> None. Якщо задано n, кількість
    компонент повинна дорівнювати n.
    """
    if text is None or text.strip().lower() in _DEFAULT_POINT_WORDS:
        return None

    parts = [p for p in re.split(r"[,;\s]+", text.strip().strip("()[]")) if p]
    try:
        point = np.array([float(p) for p in parts], dtype=float)
    except ValueError:
        raise ConfigurationError(f"Не вдалося розібрати точку {text!r}.") from None

    if point.size == 0:
        return None
    if not np.all(np.isfinite(point)):
        raise ConfigurationError("Точка не повинна містити inf або NaN.")
    if n is not None and point.size != n:
        raise ConfigurationError(
            f"Точка повинна мати {n} компонент(и), отримано {point.size}."
        )
    return point


def format_point(x) -> str:
    return ", ".join(f"{float(v):g}" for v in np.asarray(x).reshape(-1))


def validate_config(cfg: OptimizationConfig) -> TestProblem:
    """
    Перевірити конфігурацію до запуску; повертає тестову задачу.

    ConfigurationError з повідомленням для користувача, якщо щось не так.
    """
    problem = PROBLEMS.get(cfg.function_key)
    if problem is None:
        raise ConfigurationError(f"Функція з ключем {cfg.function_key!r} не знайдена.")
    if not cfg.run_all_methods and cfg.method_key not in SOLVERS:
        raise ConfigurationError(f"Невідомий метод оптимізації {cfg.method_key!r}.")
    if not cfg.eps > 0.0:
        raise ConfigurationError("Точність eps повинна бути додатною.")
    if cfg.max_iter <= 0:
        raise ConfigurationError("Максимальна кількість ітерацій повинна бути додатною.")
    if cfg.stop_kind not in dict(STOPPING_CHOICES):
        raise ConfigurationError(f"Невідомий тип критерію зупинки {cfg.stop_kind!r}.")
    if cfg.stop_kind == "f_dist" and problem.f_min is None:
        raise ConfigurationError(f"Для {problem.key} мінімум f* невідомий; оберіть інший критерій.")
    if cfg.stop_kind == "x_dist" and problem.x_min is None:
        raise ConfigurationError(f"Для {problem.key} точка мінімуму x* невідома; оберіть інший критерій.")

    x0 = problem.x0 if cfg.x0 is None else np.asarray(cfg.x0, dtype=float)
    if x0.shape != (problem.n,):
        raise ConfigurationError(
            f"Початкова точка повинна мати {problem.n} компонент(и) для {problem.key}."
        )

    # f1 ділить на x1^2 та (x1*x2)^4
    if problem.key == "f1" and (abs(x0[0]) < 1e-12 or abs(x0[0] * x0[1]) < 1e-12):
        raise ConfigurationError(
            "Функція f1 містить ділення на x1² та (x1·x2)⁴, тому x1 = 0 "
            "або x1·x2 = 0 не допускаються. Оберіть, наприклад, x₀ = (1, 1)."
        )
    return problem


def run_single(
    cfg: OptimizationConfig,
    callback: Optional[IterationCallback] = None,
) -> Tuple[TestProblem, Results]:
    problem = validate_config(cfg)
    results = run_method(
        cfg.method_key,
        problem,
        x0=cfg.x0,
        eps=cfg.eps,
        max_iter=cfg.max_iter,
        stop_kind=cfg.stop_kind,
        line_search_key=cfg.line_search_key,
        time_test=cfg.time_test,
        callback=callback,
    )
    return problem, results


def _line_search_label(key: str) -> str:
    return dict(LINE_SEARCH_CHOICES).get(key, key)


def run_all_methods(cfg: OptimizationConfig) -> ResultsSummary:
    """
    Усі методи на одній задачі з однаковими стартовими умовами, потім
    кожен метод з line search окремо з кожним SWEEP_LINE_SEARCH_KEYS.

    Метод, що впав з помилкою (наприклад, вийшов з області визначення
    функції), пропускається з попередженням у журналі.
    """
    problem = validate_config(cfg)
    summary = ResultsSummary()

    def _run(method_key: str, line_search_key: str, name: Optional[str]) -> None:
        try:
            results = run_method(
                method_key,
                problem,
                x0=cfg.x0,
                eps=cfg.eps,
                max_iter=cfg.max_iter,
                stop_kind=cfg.stop_kind,
                line_search_key=line_search_key,
                time_test=cfg.time_test,
                name=name,
            )
        except (ValueError, ArithmeticError) as exc:
            logger.warning(
                "Метод %s (line_search=%s) для %s завершився помилкою: %s",
                method_key, line_search_key, problem.key, exc,
            )
            return
        summary.add_run(results)

    for method_key in ALL_METHOD_KEYS:
        _run(method_key, cfg.line_search_key, None)

    for method_key in ALL_METHOD_KEYS:
        if not uses_line_search(method_key):
            continue
        label = SOLVERS[method_key][0]
        for ls_key in SWEEP_LINE_SEARCH_KEYS:
            _run(method_key, ls_key, f"{label} ({_line_search_label(ls_key)})")

    return summary


__all__ = [
    "SWEEP_LINE_SEARCH_KEYS",
    "OptimizationConfig",
    "parse_point",
    "format_point",
    "validate_config",
    "run_single",
    "run_all_methods",
]
