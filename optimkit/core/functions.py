"""
functions.py

Цільова функція з лічильниками викликів та реєстр тестових задач.

Формат:
    - ObjectiveFunction обгортає f(x), а також (опційно) аналітичні ∇f(x) та
      H(x); якщо похідні не задані, вони обчислюються чисельно (центральні
      різниці);
    - кожен "справжній" виклик f / ∇f / H збільшує відповідний лічильник,
      повторний запит у тій самій точці віддається з кешу і не рахується;
    - реєстр PROBLEMS містить навчальні функції f1–f8 двох змінних та
      кілька одновимірних задач; make_sphere / make_quadratic будують
      опуклі квадратичні задачі довільної розмірності.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from .errors import ConfigurationError

ArrayLike = np.ndarray
ScalarFunction = Callable[[ArrayLike], float]
VectorFunction = Callable[[ArrayLike], ArrayLike]
MatrixFunction = Callable[[ArrayLike], ArrayLike]


# ---------------------------------------------------------------------------
# Чисельні похідні (центральні різниці)
# ---------------------------------------------------------------------------

def numerical_gradient(
    func: ScalarFunction,
    x: ArrayLike,
    h: float = 1e-6,
) -> ArrayLike:
    """
    Чисельний градієнт за центральною різницею.

    ∂f/∂x_i ≈ (f(x + h e_i) - f(x - h e_i)) / (2h)
    """
    x = np.asarray(x, dtype=float)
    grad = np.zeros_like(x, dtype=float)

    for i in range(x.size):
        e_i = np.zeros_like(x)
        e_i[i] = h
        grad[i] = (func(x + e_i) - func(x - e_i)) / (2.0 * h)

    return grad


def numerical_hessian(
    func: ScalarFunction,
    x: ArrayLike,
    h: float = 1e-4,
) -> ArrayLike:
    """
    Чисельний Гессіан за центральною різницею.

    Діагональ:
        ∂²f/∂x_i² ≈ (f(x+h e_i) - 2f(x) + f(x-h e_i)) / h²
    Позадіагональні елементи:
        ∂²f/∂x_i∂x_j ≈ (f(++) - f(+-) - f(-+) + f(--)) / (4 h²)
    """
    x = np.asarray(x, dtype=float)
    n = x.size
    H = np.zeros((n, n), dtype=float)
    f_x = func(x)
    steps = np.eye(n) * h

    for i in range(n):
        H[i, i] = (func(x + steps[i]) - 2.0 * f_x + func(x - steps[i])) / h ** 2

    for i in range(n):
        for j in range(i + 1, n):
            value = (
                func(x + steps[i] + steps[j])
                - func(x + steps[i] - steps[j])
                - func(x - steps[i] + steps[j])
                + func(x - steps[i] - steps[j])
            ) / (4.0 * h ** 2)
            H[i, j] = H[j, i] = value

    return H


# ---------------------------------------------------------------------------
# Цільова функція з лічильниками та кешем
# ---------------------------------------------------------------------------

class ObjectiveFunction:
    """
    Цільова функція f: R^n -> R для розв'язувачів.

    Використання:
        obj = ObjectiveFunction(func=f, n=2, grad=grad_f)
        obj.evaluate(x), obj.gradient(x), obj.hessian(x)
        obj.func_evals, obj.grad_evals, obj.hess_evals

    Розв'язувач лише читає лічильники; скидає їх reset_counters()
    (викликається з NativeSolver.setup()).
    """

    def __init__(
        self,
        func: ScalarFunction,
        n: int,
        grad: Optional[VectorFunction] = None,
        hess: Optional[MatrixFunction] = None,
        name: Optional[str] = None,
    ) -> None:
        if int(n) <= 0:
            raise ConfigurationError(
                f"ObjectiveFunction: розмірність n повинна бути додатною, отримано {n}."
            )
        self.func = func
        self.n = int(n)
        self._grad = grad
        self._hess = hess
        self.name: str = name or getattr(func, "__name__", "f")

        self.func_evals: int = 0
        self.grad_evals: int = 0
        self.hess_evals: int = 0

        self._f_cache: Optional[Tuple[np.ndarray, float]] = None
        self._g_cache: Optional[Tuple[np.ndarray, np.ndarray]] = None
        self._h_cache: Optional[Tuple[np.ndarray, np.ndarray]] = None

    # ------------------------------------------------------------------

    @property
    def has_analytic_gradient(self) -> bool:
        return self._grad is not None

    @property
    def has_analytic_hessian(self) -> bool:
        return self._hess is not None

    def reset_counters(self) -> None:
        """Обнулити лічильники та очистити кеш."""
        self.func_evals = 0
        self.grad_evals = 0
        self.hess_evals = 0
        self._f_cache = None
        self._g_cache = None
        self._h_cache = None

    def _as_point(self, x: ArrayLike) -> np.ndarray:
        x_arr = np.asarray(x, dtype=float)
        if x_arr.shape != (self.n,):
            raise ConfigurationError(
                f"{self.name}: очікується точка розмірності ({self.n},), "
                f"отримано {x_arr.shape}."
            )
        return x_arr

    @staticmethod
    def _cached(cache, x: np.ndarray):
        if cache is not None and np.array_equal(cache[0], x):
            return cache[1]
        return None

    # ------------------------------------------------------------------
    # f, ∇f, H
    # ------------------------------------------------------------------

    def evaluate(self, x: ArrayLike) -> float:
        """Обчислити f(x)."""
        x_arr = self._as_point(x)
        hit = self._cached(self._f_cache, x_arr)
        if hit is not None:
            return hit

        self.func_evals += 1
        value = float(self.func(x_arr))
        self._f_cache = (x_arr.copy(), value)
        return value

    __call__ = evaluate

    def gradient(self, x: ArrayLike) -> np.ndarray:
        """
        Обчислити ∇f(x):
            - аналітично, якщо передано grad;
            - інакше чисельно (виклики f всередині різниць не рахуються).
        """
        x_arr = self._as_point(x)
        hit = self._cached(self._g_cache, x_arr)
        if hit is not None:
            return hit.copy()

        self.grad_evals += 1
        if self._grad is not None:
            g = np.asarray(self._grad(x_arr), dtype=float).reshape(-1)
        else:
            g = numerical_gradient(self.func, x_arr)
        self._g_cache = (x_arr.copy(), g.copy())
        return g

    def hessian(self, x: ArrayLike) -> np.ndarray:
        """Обчислити H(x) (аналітично або чисельно)."""
        x_arr = self._as_point(x)
        hit = self._cached(self._h_cache, x_arr)
        if hit is not None:
            return hit.copy()

        self.hess_evals += 1
        if self._hess is not None:
            H = np.asarray(self._hess(x_arr), dtype=float).reshape(self.n, self.n)
        else:
            H = numerical_hessian(self.func, x_arr)
        self._h_cache = (x_arr.copy(), H.copy())
        return H

    def __repr__(self) -> str:
        return f"ObjectiveFunction(name={self.name!r}, n={self.n})"


# ---------------------------------------------------------------------------
# Навчальні функції f1–f8, x = [x1, x2]
# ---------------------------------------------------------------------------

def f1(x: ArrayLike) -> float:
    """f1 = (12 + x1^2 + (1 + x2^2)/x1^2 + ((x1*x2)^2 + 100)/(x1*x2)^4) / 10"""
    x1, x2 = np.asarray(x, dtype=float)
    x1x2 = x1 * x2

    # полюс при x1 = 0 або x1*x2 = 0
    if x1 == 0.0 or x1x2 == 0.0:
        return float("inf")

    return (
        12.0
        + x1 ** 2
        + (1.0 + x2 ** 2) / x1 ** 2
        + (x1x2 ** 2 + 100.0) / x1x2 ** 4
    ) / 10.0


def f2(x: ArrayLike) -> float:
    """f2 = (x1 - x2)^2 + (x1 + x2 - 10)^2 / 9"""
    x1, x2 = np.asarray(x, dtype=float)
    return (x1 - x2) ** 2 + (x1 + x2 - 10.0) ** 2 / 9.0


def grad_f2(x: ArrayLike) -> ArrayLike:
    x1, x2 = np.asarray(x, dtype=float)
    d = 2.0 * (x1 - x2)
    s = 2.0 * (x1 + x2 - 10.0) / 9.0
    return np.array([d + s, -d + s])


def hess_f2(x: ArrayLike) -> ArrayLike:
    a = 2.0 + 2.0 / 9.0
    b = -2.0 + 2.0 / 9.0
    return np.array([[a, b], [b, a]])


def _cubic_valley(shift: float) -> Tuple[ScalarFunction, VectorFunction, MatrixFunction]:
    """
    Сімейство 5*(x2 - 4x1^3 + 3x1)^2 + (x1 + shift)^2 (функції f3, f4).
    """

    def func(x: ArrayLike) -> float:
        x1, x2 = np.asarray(x, dtype=float)
        u = x2 - 4.0 * x1 ** 3 + 3.0 * x1
        return 5.0 * u ** 2 + (x1 + shift) ** 2

    def grad(x: ArrayLike) -> ArrayLike:
        x1, x2 = np.asarray(x, dtype=float)
        u = x2 - 4.0 * x1 ** 3 + 3.0 * x1
        du = -12.0 * x1 ** 2 + 3.0
        return np.array([10.0 * u * du + 2.0 * (x1 + shift), 10.0 * u])

    def hess(x: ArrayLike) -> ArrayLike:
        x1, x2 = np.asarray(x, dtype=float)
        u = x2 - 4.0 * x1 ** 3 + 3.0 * x1
        du = -12.0 * x1 ** 2 + 3.0
        h11 = 10.0 * (du ** 2 - 24.0 * x1 * u) + 2.0
        h12 = 10.0 * du
        return np.array([[h11, h12], [h12, 10.0]])

    return func, grad, hess


f3, grad_f3, hess_f3 = _cubic_valley(1.0)
f4, grad_f4, hess_f4 = _cubic_valley(-1.0)


def f5(x: ArrayLike) -> float:
    """f5 = 100 * (x2 - x1^3 + x1)^2 + (x1 - 1)^2"""
    x1, x2 = np.asarray(x, dtype=float)
    v = x2 - x1 ** 3 + x1
    return 100.0 * v ** 2 + (x1 - 1.0) ** 2


def grad_f5(x: ArrayLike) -> ArrayLike:
    x1, x2 = np.asarray(x, dtype=float)
    v = x2 - x1 ** 3 + x1
    dv = -3.0 * x1 ** 2 + 1.0
    return np.array([200.0 * v * dv + 2.0 * (x1 - 1.0), 200.0 * v])


def hess_f5(x: ArrayLike) -> ArrayLike:
    x1, x2 = np.asarray(x, dtype=float)
    v = x2 - x1 ** 3 + x1
    dv = -3.0 * x1 ** 2 + 1.0
    h11 = 200.0 * (dv ** 2 - 6.0 * x1 * v) + 2.0
    h12 = 200.0 * dv
    return np.array([[h11, h12], [h12, 200.0]])


def f6(x: ArrayLike) -> float:
    """f6 = (0.01 * (x1 - 3))^2 - (x2 - x1) + exp(20 * (x2 - x1))"""
    x1, x2 = np.asarray(x, dtype=float)
    return (0.01 * (x1 - 3.0)) ** 2 - (x2 - x1) + np.exp(20.0 * (x2 - x1))


def f7(x: ArrayLike) -> float:
    """f7 = 100 * (x2 - x1^2)^2 + (1 - x1)^2 (функція Розенброка)"""
    x1, x2 = np.asarray(x, dtype=float)
    return 100.0 * (x2 - x1 ** 2) ** 2 + (1.0 - x1) ** 2


def grad_f7(x: ArrayLike) -> ArrayLike:
    x1, x2 = np.asarray(x, dtype=float)
    return np.array([
        -400.0 * x1 * (x2 - x1 ** 2) - 2.0 * (1.0 - x1),
        200.0 * (x2 - x1 ** 2),
    ])


def hess_f7(x: ArrayLike) -> ArrayLike:
    x1, x2 = np.asarray(x, dtype=float)
    return np.array([
        [1200.0 * x1 ** 2 - 400.0 * x2 + 2.0, -400.0 * x1],
        [-400.0 * x1, 200.0],
    ])


def f8(x: ArrayLike) -> float:
    """f8 = (x1 - 4)^2 + (x2 - 4)^2"""
    x1, x2 = np.asarray(x, dtype=float)
    return (x1 - 4.0) ** 2 + (x2 - 4.0) ** 2


def grad_f8(x: ArrayLike) -> ArrayLike:
    return 2.0 * (np.asarray(x, dtype=float) - 4.0)


def hess_f8(x: ArrayLike) -> ArrayLike:
    return 2.0 * np.eye(2)


# ---------------------------------------------------------------------------
# Реєстр тестових задач
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class TestProblem:
    """
    Тестова задача: функція, похідні, розмірність, стартова точка та
    (якщо відомий) мінімум.
    """
    __test__ = False  # не плутати з тест-класом pytest

    key: str
    name: str
    func: ScalarFunction
    n: int
    x0: np.ndarray
    grad: Optional[VectorFunction] = None
    hess: Optional[MatrixFunction] = None
    x_min: Optional[np.ndarray] = None
    f_min: Optional[float] = None

    def objective(self) -> ObjectiveFunction:
        """Нова ObjectiveFunction з обнуленими лічильниками."""
        return ObjectiveFunction(
            func=self.func,
            n=self.n,
            grad=self.grad,
            hess=self.hess,
            name=self.key,
        )


def make_quadratic(
    A: ArrayLike,
    b: Optional[ArrayLike] = None,
    x0: Optional[ArrayLike] = None,
    key: str = "quadratic",
) -> TestProblem:
    """
    Опукла квадратична задача f(x) = 1/2 x^T A x - b^T x.

    A повинна бути симетричною додатно визначеною; мінімум x* = A^{-1} b.
    """
    A = np.asarray(A, dtype=float)
    n = A.shape[0]
    if A.shape != (n, n) or not np.allclose(A, A.T):
        raise ConfigurationError("make_quadratic: A повинна бути симетричною матрицею n×n.")
    if np.min(np.linalg.eigvalsh(A)) <= 0.0:
        raise ConfigurationError("make_quadratic: A повинна бути додатно визначеною.")

    b = np.zeros(n) if b is None else np.asarray(b, dtype=float)
    x0 = np.ones(n) if x0 is None else np.asarray(x0, dtype=float)
    x_min = np.linalg.solve(A, b)

    def func(x: ArrayLike) -> float:
        return float(0.5 * x @ A @ x - b @ x)

    def grad(x: ArrayLike) -> ArrayLike:
        return A @ x - b

    def hess(x: ArrayLike) -> ArrayLike:
        return A.copy()

    return TestProblem(
        key=key,
        name=f"f(x) = 1/2 xᵀAx - bᵀx, n={n}",
        func=func,
        n=n,
        x0=x0,
        grad=grad,
        hess=hess,
        x_min=x_min,
        f_min=func(x_min),
    )


def make_sphere(n: int) -> TestProblem:
    """f(x) = sum x_i^2 у R^n, старт x0 = (1, 2, ..., n)."""
    return make_quadratic(
        2.0 * np.eye(n),
        x0=np.arange(1.0, n + 1.0),
        key=f"sphere{n}",
    )


PROBLEMS: Dict[str, TestProblem] = {
    "f1": TestProblem(
        key="f1",
        name="f1(x1, x2) = (12 + x1^2 + (1 + x2^2)/x1^2 + ((x1*x2)^2 + 100)/(x1*x2)^4) / 10",
        func=f1,
        n=2,
        x0=np.array([1.0, 1.0]),
    ),
    "f2": TestProblem(
        key="f2",
        name="f2(x1, x2) = (x1 - x2)^2 + (x1 + x2 - 10)^2 / 9",
        func=f2,
        n=2,
        x0=np.array([0.0, 0.0]),
        grad=grad_f2,
        hess=hess_f2,
        x_min=np.array([5.0, 5.0]),
        f_min=0.0,
    ),
    "f3": TestProblem(
        key="f3",
        name="f3(x1, x2) = 5 * (x2 - 4*x1^3 + 3*x1)^2 + (x1 + 1)^2",
        func=f3,
        n=2,
        x0=np.array([0.0, 0.0]),
        grad=grad_f3,
        hess=hess_f3,
        x_min=np.array([-1.0, -1.0]),
        f_min=0.0,
    ),
    "f4": TestProblem(
        key="f4",
        name="f4(x1, x2) = 5 * (x2 - 4*x1^3 + 3*x1)^2 + (x1 - 1)^2",
        func=f4,
        n=2,
        x0=np.array([0.0, 0.0]),
        grad=grad_f4,
        hess=hess_f4,
        x_min=np.array([1.0, 1.0]),
        f_min=0.0,
    ),
    "f5": TestProblem(
        key="f5",
        name="f5(x1, x2) = 100 * (x2 - x1^3 + x1)^2 + (x1 - 1)^2",
        func=f5,
        n=2,
        x0=np.array([0.0, 0.0]),
        grad=grad_f5,
        hess=hess_f5,
        x_min=np.array([1.0, 0.0]),
        f_min=0.0,
    ),
    "f6": TestProblem(
        key="f6",
        name="f6(x1, x2) = (0.01*(x1-3))^2 - (x2 - x1) + exp(20*(x2 - x1))",
        func=f6,
        n=2,
        x0=np.array([0.0, 0.0]),
    ),
    "f7": TestProblem(
        key="f7",
        name="f7(x1, x2) = 100 * (x2 - x1^2)^2 + (1 - x1)^2",
        func=f7,
        n=2,
        x0=np.array([-1.2, 1.0]),
        grad=grad_f7,
        hess=hess_f7,
        x_min=np.array([1.0, 1.0]),
        f_min=0.0,
    ),
    "f8": TestProblem(
        key="f8",
        name="f8(x1, x2) = (x1 - 4)^2 + (x2 - 4)^2",
        func=f8,
        n=2,
        x0=np.array([0.0, 0.0]),
        grad=grad_f8,
        hess=hess_f8,
        x_min=np.array([4.0, 4.0]),
        f_min=0.0,
    ),
    "quadratic_1d": TestProblem(
        key="quadratic_1d",
        name="f(x) = x^2",
        func=lambda x: float(x[0] ** 2),
        n=1,
        x0=np.array([10.0]),
        grad=lambda x: np.array([2.0 * x[0]]),
        hess=lambda x: np.array([[2.0]]),
        x_min=np.array([0.0]),
        f_min=0.0,
    ),
    "concave_1d": TestProblem(
        key="concave_1d",
        name="f(x) = -x^2 (необмежена знизу)",
        func=lambda x: float(-x[0] ** 2),
        n=1,
        x0=np.array([1.0]),
        grad=lambda x: np.array([-2.0 * x[0]]),
        hess=lambda x: np.array([[-2.0]]),
    ),
}


__all__ = [
    "ArrayLike",
    "ScalarFunction",
    "VectorFunction",
    "MatrixFunction",
    "numerical_gradient",
    "numerical_hessian",
    "ObjectiveFunction",
    "f1", "f2", "f3", "f4", "f5", "f6", "f7", "f8",
    "grad_f2", "grad_f3", "grad_f4", "grad_f5", "grad_f7", "grad_f8",
    "hess_f2", "hess_f3", "hess_f4", "hess_f5", "hess_f7", "hess_f8",
    "TestProblem",
    "make_quadratic",
    "make_sphere",
    "PROBLEMS",
]
