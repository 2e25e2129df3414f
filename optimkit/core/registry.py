"""
registry.py

Реєстр методів та фабрики для GUI / скриптів.

    SOLVERS                   – ключ методу -> (назва, фабрика)
    create_solver(key)        – новий екземпляр NativeSolver
    build_setup(...)          – SolverSetup з "загальної" точності eps
    build_stopping_criterion  – зовнішній критерій за типом
    run_method(...)           – повний запуск методу на тестовій задачі

Модуль не залежить від Qt, тож усе, що GUI робить поза віджетами,
перевіряється тестами.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from .bfgs import BFGSMethod
from .cauchy import SteepestDescent
from .conjugate_gradient import BETA_FLETCHER_REEVES, BETA_POLAK_RIBIERE, ConjugateGradient
from .descent import LineSearchSolver
from .errors import ConfigurationError
from .functions import ArrayLike, TestProblem
from .gradient_descent import GradientDescent
from .hooke_jeeves import HookeJeevesMethod
from .line_search import LINE_SEARCH_CUBIC_4POINT, LINE_SEARCH_METHODS
from .nelder_mead import NelderMeadMethod
from .newton import NewtonMethod
from .solver import IterationCallback, NativeSolver, Results
from .solver_setup import SolverSetup
from .stopping import (
    FDistToMinTest,
    GradNormTest,
    MaxNumIterTest,
    StoppingCriterion,
    XDistToMinTest,
)

SolverFactory = Callable[[], NativeSolver]


# ---------------------------------------------------------------------------
# Методи
# ---------------------------------------------------------------------------

SOLVERS: Dict[str, Tuple[str, SolverFactory]] = {
    "gradient_descent": ("Градієнтний спуск (фіксований крок)", GradientDescent),
    "steepest_descent": ("Метод Коші", SteepestDescent),
    "conjugate_gradient": ("Спряжені градієнти", ConjugateGradient),
    "fletcher_reeves": (
        "Метод Флетчера–Рівза",
        lambda: ConjugateGradient(beta_formula=BETA_FLETCHER_REEVES),
    ),
    "polak_ribiere": (
        "Метод Полака–Ріб'єра",
        lambda: ConjugateGradient(beta_formula=BETA_POLAK_RIBIERE),
    ),
    "newton": ("Метод Ньютона", NewtonMethod),
    "bfgs": ("Метод BFGS", BFGSMethod),
    "nelder_mead": ("Метод Нелдера–Міда", NelderMeadMethod),
    "hooke_jeeves": ("Метод Хука–Дживса", HookeJeevesMethod),
}

# Порядок у "Запустити всі методи"
ALL_METHOD_KEYS: List[str] = [
    "gradient_descent",
    "steepest_descent",
    "fletcher_reeves",
    "polak_ribiere",
    "newton",
    "bfgs",
    "nelder_mead",
    "hooke_jeeves",
]


def create_solver(key: str, name: Optional[str] = None) -> NativeSolver:
    """Новий розв'язувач за ключем SOLVERS."""
    try:
        label, factory = SOLVERS[key]
    except KeyError:
        raise ConfigurationError(
            f"Невідомий метод оптимізації {key!r}. Доступні: {sorted(SOLVERS)}."
        ) from None
    solver = factory()
    solver.name = name or label
    return solver


# ---------------------------------------------------------------------------
# Лінійний пошук
# ---------------------------------------------------------------------------

# (ключ GUI, назва)
LINE_SEARCH_CHOICES: List[Tuple[str, str]] = [
    ("default", "за замовчуванням (Armijo)"),
    ("dichotomy", "дихотомія"),
    ("interval_halving", "розподіл інтервалу навпіл"),
    ("golden_section", "золотий переріз"),
    ("step_adaptation", "адаптація кроку"),
    ("cubic4", "кубічна інтерполяція (4 точки)"),
]


def normalize_line_search_key(key: Optional[str]) -> Optional[str]:
    """
    Ключ GUI -> ключ line_search_1d; None означає "не задавати явно".
    """
    if not key:
        return None
    key = key.lower().strip()
    if key == "default":
        return None
    if key == "cubic4":
        return LINE_SEARCH_CUBIC_4POINT
    if key in LINE_SEARCH_METHODS:
        return key
    raise ConfigurationError(f"Невідомий метод одномірного пошуку {key!r}.")


def build_setup(
    method_key: str,
    eps: float,
    line_search_key: Optional[str] = None,
) -> SolverSetup:
    """
    SolverSetup для методу з однієї "загальної" точності eps.

    eps мапиться на вбудований критерій (grad_tol / min_step); для методів
    без вбудованого критерію eps використовує зовнішній критерій.
    """
    if not eps > 0.0:
        raise ConfigurationError("Точність eps повинна бути додатною.")
    if method_key not in SOLVERS:
        raise ConfigurationError(f"Невідомий метод оптимізації {method_key!r}.")

    if method_key == "gradient_descent":
        return SolverSetup(grad_tol=eps)
    if method_key == "hooke_jeeves":
        return SolverSetup(initial_step=1.0, min_step=eps)
    if method_key == "nelder_mead":
        return SolverSetup(initial_simplex_scale=0.1)

    options = {}
    ls_method = normalize_line_search_key(line_search_key)
    if ls_method is not None:
        options["line_search"] = ls_method
    return SolverSetup(**options)


# ---------------------------------------------------------------------------
# Критерії зупинки
# ---------------------------------------------------------------------------

STOPPING_CHOICES: List[Tuple[str, str]] = [
    ("grad_norm", "‖∇f(x)‖ < eps"),
    ("f_dist", "|f(x) - f*| < eps"),
    ("x_dist", "‖x - x*‖ < eps"),
]


def build_stopping_criterion(
    kind: str,
    eps: float,
    max_iter: int,
    problem: Optional[TestProblem] = None,
) -> StoppingCriterion:
    """
    Зовнішній критерій "kind або k >= max_iter".

    f_dist / x_dist потребують відомого мінімуму задачі.
    """
    if kind == "grad_norm":
        primary: StoppingCriterion = GradNormTest(eps)
    elif kind == "f_dist":
        if problem is None or problem.f_min is None:
            raise ConfigurationError("Критерій |f - f*| потребує відомого мінімуму f*.")
        primary = FDistToMinTest(problem.f_min, eps)
    elif kind == "x_dist":
        if problem is None or problem.x_min is None:
            raise ConfigurationError("Критерій ‖x - x*‖ потребує відомої точки мінімуму x*.")
        primary = XDistToMinTest(problem.x_min, eps)
    else:
        raise ConfigurationError(f"Невідомий тип критерію зупинки {kind!r}.")

    return primary | MaxNumIterTest(max_iter)


# ---------------------------------------------------------------------------
# Запуск
# ---------------------------------------------------------------------------

def run_method(
    method_key: str,
    problem: TestProblem,
    x0: Optional[ArrayLike] = None,
    eps: float = 1e-6,
    max_iter: int = 500,
    stop_kind: str = "grad_norm",
    line_search_key: Optional[str] = None,
    time_test: bool = False,
    callback: Optional[IterationCallback] = None,
    name: Optional[str] = None,
) -> Results:
    """
    Один запуск методу на тестовій задачі (нова ObjectiveFunction щоразу).

    Для методів із вбудованим критерієм max_iter обмежує їх власний ліміт.
    """
    solver = create_solver(method_key, name=name)
    solver_setup = build_setup(method_key, eps, line_search_key)
    if solver.has_builtin_stopping_criterion():
        solver_setup = SolverSetup(max_iter=max_iter, **solver_setup.as_dict())
        stop_crit = None
    else:
        stop_crit = build_stopping_criterion(stop_kind, eps, max_iter, problem)

    start = problem.x0 if x0 is None else np.asarray(x0, dtype=float)
    return solver.solve(
        problem.objective(),
        start,
        stop_crit=stop_crit,
        solver_setup=solver_setup,
        time_test=time_test,
        callback=callback,
    )


def uses_line_search(method_key: str) -> bool:
    """Чи має сенс для методу вибір одномірного пошуку."""
    return isinstance(create_solver(method_key), LineSearchSolver)


__all__ = [
    "SolverFactory",
    "SOLVERS",
    "ALL_METHOD_KEYS",
    "create_solver",
    "LINE_SEARCH_CHOICES",
    "normalize_line_search_key",
    "build_setup",
    "STOPPING_CHOICES",
    "build_stopping_criterion",
    "run_method",
    "uses_line_search",
]
