"""
solver.py

Ітераційний рушій локальних методів оптимізації.

Ідея:
    - NativeSolver — абстрактний клас, від якого наслідуються всі методи;
      конкретний метод реалізує лише два кроки:
        * _setup_impl(x0)   -> State                   (початковий стан)
        * _iterate_impl()   -> (State, IterationStatus) (один крок методу)
      та повідомляє, чи має він вбудований критерій зупинки;
    - рушій відповідає за все інше: перевірку конфігурації, лічильники,
      класифікацію розбіжності, історію станів і збирання Results.

Життєвий цикл:
    solver.setup(objective, x0, setup, constraints)
    while not solver.status.is_terminal:
        solver.iterate()

    або одним викликом:
    results = solver.solve(objective, x0, stop_crit=GradNormTest(1e-6))
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from ..log import get_logger
from .constraints import Constraints, NoConstraints
from .errors import ConfigurationError, SolverStateError
from .functions import ArrayLike, ObjectiveFunction
from .solver_setup import DefaultSetup, SolverSetup
from .state import IterationStatus, State
from .stopping import StoppingCriterion

logger = get_logger(__name__)

# Числові винятки всередині кроку -> OUT_OF_CONTROL
_NUMERICAL_ERRORS = (
    OverflowError,
    FloatingPointError,
    ZeroDivisionError,
    np.linalg.LinAlgError,
)

IterationCallback = Callable[[State, int], None]


# ---------------------------------------------------------------------------
# Результати запуску
# ---------------------------------------------------------------------------

@dataclass
class SolverResults:
    """
    Загальний підсумок запуску.

    Атрибути:
        solver_name - назва методу
        status      - фінальний IterationStatus
        x_min, f_min - знайдена точка та значення в ній
        num_iter    - кількість виконаних ітерацій
        func_evals, grad_evals, hess_evals - лічильники викликів
        converged   - status == SUCCESS
        stopped_by  - причина зупинки ("method:success", опис критерію, ...)
        term_val    - значення зовнішнього критерію в момент зупинки
        time        - час циклу ітерацій, с (лише при time_test=True)
    """
    solver_name: str
    status: IterationStatus
    x_min: np.ndarray
    f_min: float
    num_iter: int
    func_evals: int
    grad_evals: int
    hess_evals: int
    converged: bool
    stopped_by: str
    term_val: Optional[float] = None
    time: Optional[float] = None


@dataclass
class Results(SolverResults):
    """SolverResults + фінальний стан та хронологічна історія станів."""
    final_state: Optional[State] = None
    states: List[State] = field(default_factory=list)

    @property
    def x_history(self) -> np.ndarray:
        """Точки x_1..x_N рядками, форма (N, n)."""
        if not self.states:
            return np.empty((0, self.x_min.size))
        return np.vstack([s.x for s in self.states])

    @property
    def f_history(self) -> np.ndarray:
        return np.array([s.f for s in self.states], dtype=float)


# ---------------------------------------------------------------------------
# Базовий розв'язувач
# ---------------------------------------------------------------------------

class NativeSolver(ABC):
    """
    Абстрактний локальний розв'язувач.

    Атрибути класу (перевизначаються в методах):
        default_options        - розпізнавані опції та їх значення за замовчуванням
        reject_unknown_options - True: невідомий ключ у SolverSetup -> ConfigurationError
        requires_gradient      - методу потрібен ∇f
        requires_hessian       - методу потрібен H

    Спільні опції всіх методів (межі розбіжності):
        max_x_norm : ‖x‖ понад цю межу -> OUT_OF_CONTROL (default: 1e12)
        max_abs_f  : |f| понад цю межу -> OUT_OF_CONTROL (default: 1e100)
    """

    default_options: Dict[str, Any] = {}
    reject_unknown_options: bool = True
    requires_gradient: bool = False
    requires_hessian: bool = False

    common_options: Dict[str, Any] = {
        "max_x_norm": 1e12,
        "max_abs_f": 1e100,
    }

    def __init__(self, name: Optional[str] = None) -> None:
        self.name: str = name or self.__class__.__name__

        self._objective: Optional[ObjectiveFunction] = None
        self._constraints: Constraints = NoConstraints()
        self._options: Dict[str, Any] = {}
        self._state: Optional[State] = None
        self._status: Optional[IterationStatus] = None
        self._n_iter: int = 0

    # ------------------------------------------------------------------
    # Контракт конкретного методу
    # ------------------------------------------------------------------

    @abstractmethod
    def has_builtin_stopping_criterion(self) -> bool:
        """True — метод сам повертає SUCCESS, зовнішній критерій ігнорується."""
        raise NotImplementedError

    @abstractmethod
    def _setup_impl(self, x0: np.ndarray) -> State:
        """Обчислити початковий стан у x0 (f та похідні, які потрібні методу)."""
        raise NotImplementedError

    @abstractmethod
    def _iterate_impl(self) -> Tuple[State, IterationStatus]:
        """
        Один крок методу з поточного стану self._state.

        Повертає новий стан і статус (CONTINUE / SUCCESS / NO_PROGRESS /
        OUT_OF_CONTROL). Метод не змінює попередній стан.
        """
        raise NotImplementedError

    def _validate_options(self, options: Dict[str, Any]) -> None:
        """Перевірка значень опцій після злиття (за замовчуванням — нічого)."""

    def all_default_options(self) -> Dict[str, Any]:
        """Усі розпізнавані опції методу з їх значеннями за замовчуванням."""
        merged = dict(self.common_options)
        merged.update(self.default_options)
        return merged

    # ------------------------------------------------------------------
    # setup / iterate / solve
    # ------------------------------------------------------------------

    def setup(
        self,
        objective: ObjectiveFunction,
        x0: ArrayLike,
        solver_setup: Optional[SolverSetup] = None,
        constraints: Optional[Constraints] = None,
    ) -> State:
        """
        Підготувати запуск: перевірити x0 та опції, скинути лічильники,
        побудувати початковий стан.

        Помилки конфігурації (ConfigurationError) виникають тут, до першої
        ітерації.
        """
        x0_arr = np.asarray(x0, dtype=float)
        if x0_arr.ndim != 1:
            raise ConfigurationError(
                f"{self.name}: x0 повинен бути вектором, отримано масив форми {x0_arr.shape}."
            )
        if x0_arr.size != objective.n:
            raise ConfigurationError(
                f"{self.name}: розмірність x0 ({x0_arr.size}) не збігається "
                f"з розмірністю функції ({objective.n})."
            )
        if not np.all(np.isfinite(x0_arr)):
            raise ConfigurationError(f"{self.name}: x0 містить inf або NaN.")

        constraints = constraints if constraints is not None else NoConstraints()
        if constraints.n is not None and constraints.n != objective.n:
            raise ConfigurationError(
                f"{self.name}: розмірність обмежень ({constraints.n}) не збігається "
                f"з розмірністю функції ({objective.n})."
            )

        solver_setup = solver_setup if solver_setup is not None else DefaultSetup()
        options = solver_setup.resolve(
            self.all_default_options(),
            owner=self.name,
            strict=self.reject_unknown_options,
        )
        for key in ("max_x_norm", "max_abs_f"):
            if not float(options[key]) > 0.0:
                raise ConfigurationError(f"{self.name}: {key} повинен бути додатним.")
        self._validate_options(options)

        self._objective = objective
        self._constraints = constraints
        self._options = options

        objective.reset_counters()
        self._n_iter = 0
        self._status = IterationStatus.CONTINUE

        with np.errstate(all="ignore"):
            state = self._setup_impl(constraints.project(x0_arr))
        if not isinstance(state, State):
            raise TypeError(
                f"{self.__class__.__name__}._setup_impl() повинен повертати State, "
                f"отримано: {type(state)}"
            )
        self._state = state

        if not state.is_finite():
            logger.warning("%s: f(x0) не скінченне, запуск неможливий.", self.name)
            self._status = IterationStatus.OUT_OF_CONTROL

        logger.debug("%s: setup x0=%s f0=%.6g", self.name, x0_arr, state.f)
        return state

    def iterate(self) -> IterationStatus:
        """
        Виконати одну ітерацію і повернути її статус.

        SolverStateError — якщо setup() не викликано або запуск уже завершено.
        """
        self._require_setup()
        if self._status.is_terminal:
            raise SolverStateError(
                f"{self.name}: iterate() після завершення запуску "
                f"(статус {self._status.name}); викличте setup()."
            )

        try:
            with np.errstate(all="ignore"):
                new_state, status = self._iterate_impl()
        except _NUMERICAL_ERRORS as exc:
            logger.debug("%s: числова помилка на кроці %d: %r", self.name, self._n_iter + 1, exc)
            new_state, status = self._state, IterationStatus.OUT_OF_CONTROL

        if not isinstance(new_state, State):
            raise TypeError(
                f"{self.__class__.__name__}._iterate_impl() повинен повертати State, "
                f"отримано: {type(new_state)}"
            )

        status = self._classify(new_state, status)

        self._n_iter += 1
        self._state = new_state
        self._status = status

        logger.debug(
            "%s: k=%d f=%.6g ‖x‖=%.3g status=%s",
            self.name,
            self._n_iter,
            new_state.f,
            float(np.linalg.norm(new_state.x)),
            status.name,
        )
        return status

    def _classify(self, state: State, status: IterationStatus) -> IterationStatus:
        """Перевірка розбіжності поверх статусу, який повернув метод."""
        if not state.is_finite():
            return IterationStatus.OUT_OF_CONTROL
        if status is IterationStatus.CONTINUE:
            if float(np.linalg.norm(state.x)) > float(self._options["max_x_norm"]):
                return IterationStatus.OUT_OF_CONTROL
            if abs(state.f) > float(self._options["max_abs_f"]):
                return IterationStatus.OUT_OF_CONTROL
        return status

    def solve(
        self,
        objective: ObjectiveFunction,
        x0: ArrayLike,
        stop_crit: Optional[StoppingCriterion] = None,
        solver_setup: Optional[SolverSetup] = None,
        constraints: Optional[Constraints] = None,
        time_test: bool = False,
        callback: Optional[IterationCallback] = None,
    ) -> Results:
        """
        Повний запуск: setup() + цикл iterate() до термінального статусу.

        Для методів без вбудованого критерію після кожного кроку зі статусом
        CONTINUE перевіряється stop_crit; його спрацювання завершує запуск
        зі статусом SUCCESS. Для методів із вбудованим критерієм stop_crit
        ігнорується (може бути None).

        callback(state, n_iter) викликається після кожної ітерації з копією
        стану, яка потрапила в історію.
        """
        builtin = self.has_builtin_stopping_criterion()
        if not builtin and stop_crit is None:
            raise ConfigurationError(
                f"{self.name}: метод не має вбудованого критерію зупинки, "
                "потрібно передати stop_crit."
            )

        self.setup(objective, x0, solver_setup, constraints)

        states: List[State] = []
        stopped_by = f"method:{self._status.value}"
        term_val: Optional[float] = None
        status = self._status

        t_start = time.perf_counter()
        while not status.is_terminal:
            status = self.iterate()

            snapshot = self._state.clone()
            states.append(snapshot)
            if callback is not None:
                callback(snapshot, self._n_iter)

            if status.is_terminal:
                stopped_by = f"method:{status.value}"
                break

            if not builtin and stop_crit.should_stop(self._state, self._n_iter, objective):
                term_val = float(stop_crit.test_value(self._state, self._n_iter, objective))
                stopped_by = stop_crit.describe()
                status = IterationStatus.SUCCESS
                self._status = status
        elapsed = time.perf_counter() - t_start

        final_state = self._state.clone()
        results = Results(
            solver_name=self.name,
            status=status,
            x_min=np.array(final_state.x),
            f_min=final_state.f,
            num_iter=self._n_iter,
            func_evals=objective.func_evals,
            grad_evals=objective.grad_evals,
            hess_evals=objective.hess_evals,
            converged=status is IterationStatus.SUCCESS,
            stopped_by=stopped_by,
            term_val=term_val,
            time=elapsed if time_test else None,
            final_state=final_state,
            states=states,
        )

        if status is IterationStatus.SUCCESS:
            logger.info(
                "%s: %s за %d ітер. (f=%d, ∇f=%d, H=%d), f*=%.6g",
                self.name, stopped_by, results.num_iter,
                results.func_evals, results.grad_evals, results.hess_evals,
                results.f_min,
            )
        else:
            logger.warning(
                "%s: запуск завершився зі статусом %s після %d ітер., f=%.6g",
                self.name, status.name, results.num_iter, results.f_min,
            )
        return results

    # ------------------------------------------------------------------
    # Доступ до поточного стану (лише читання)
    # ------------------------------------------------------------------

    def _require_setup(self) -> None:
        if self._state is None or self._objective is None:
            raise SolverStateError(f"{self.name}: спочатку потрібно викликати setup().")

    @property
    def state(self) -> State:
        self._require_setup()
        return self._state

    @property
    def x(self) -> np.ndarray:
        """Представницька точка поточного стану (read-only)."""
        return self.state.x

    @property
    def x_array(self) -> np.ndarray:
        """Матриця точок n×k поточного стану (read-only)."""
        return self.state.X

    @property
    def f(self) -> float:
        return self.state.f

    def gradient(self) -> np.ndarray:
        """
        ∇f у поточній точці; виклик рахується в grad_evals, n_iter не змінюється.
        Повторний виклик у тій самій точці береться з кешу і не рахується.
        """
        self._require_setup()
        return self._objective.gradient(self._state.x)

    def hessian(self) -> np.ndarray:
        """H у поточній точці; виклик рахується в hess_evals (крім влучання в кеш)."""
        self._require_setup()
        return self._objective.hessian(self._state.x)

    @property
    def objective(self) -> ObjectiveFunction:
        self._require_setup()
        return self._objective

    @property
    def constraints(self) -> Constraints:
        self._require_setup()
        return self._constraints

    @property
    def options(self) -> Dict[str, Any]:
        self._require_setup()
        return dict(self._options)

    @property
    def status(self) -> IterationStatus:
        self._require_setup()
        return self._status

    @property
    def n_iter(self) -> int:
        self._require_setup()
        return self._n_iter

    # Лічильники належать ObjectiveFunction, рушій їх лише читає

    @property
    def func_evals(self) -> int:
        return self.objective.func_evals

    @property
    def grad_evals(self) -> int:
        return self.objective.grad_evals

    @property
    def hess_evals(self) -> int:
        return self.objective.hess_evals

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


__all__ = [
    "IterationCallback",
    "SolverResults",
    "Results",
    "NativeSolver",
]
