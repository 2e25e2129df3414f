"""
line_search.py

Одномірний пошук кроку α вздовж напрямку p.

Методи працюють з довільною скалярною функцією φ: float -> float;
методи оптимізації будують φ(α) = f(P(x + α p)) самі (P — проєкція на
допустиму область), тож виклики f рахуються в ObjectiveFunction.

Підтримувані методи (ключі LINE_SEARCH_*):
    armijo_backtracking – дроблення кроку з умовою Арміхо (за замовчуванням);
    dichotomy           – дихотомія;
    interval_halving    – розподіл інтервалу навпіл;
    golden_section      – золотий переріз;
    step_adaptation     – розширення кроку + уточнення золотим перерізом;
    cubic_4point        – кубічна інтерполяція за чотирма точками.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from math import sqrt
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from .errors import ConfigurationError

Scalar1DFunction = Callable[[float], float]
LineSearchMethod = str

LINE_SEARCH_DEFAULT = "default"
LINE_SEARCH_ARMIJO = "armijo_backtracking"
LINE_SEARCH_DICHOTOMY = "dichotomy"
LINE_SEARCH_INTERVAL_HALVING = "interval_halving"
LINE_SEARCH_GOLDEN_SECTION = "golden_section"
LINE_SEARCH_STEP_ADAPTATION = "step_adaptation"
LINE_SEARCH_CUBIC_4POINT = "cubic_4point"

_INV_GOLDEN = (sqrt(5.0) - 1.0) / 2.0      # 1/φ ≈ 0.618
_INV_GOLDEN_SQ = (3.0 - sqrt(5.0)) / 2.0   # 1/φ² ≈ 0.382


@dataclass
class LineSearchResult:
    """
    Результат 1D-пошуку.

    Атрибути:
        alpha      - знайдений крок α*
        phi_value  - φ(α*)
        iterations - ітерації 1D-алгоритму
        func_evals - виклики φ
        meta       - службова інформація (інтервал, причина зупинки, ...)
    """
    alpha: float
    phi_value: float
    iterations: int
    func_evals: int
    meta: Dict[str, Any] = field(default_factory=dict)


class _CountingPhi:
    """φ з лічильником викликів."""

    def __init__(self, phi: Scalar1DFunction) -> None:
        self._phi = phi
        self.calls = 0

    def __call__(self, alpha: float) -> float:
        self.calls += 1
        return float(self._phi(float(alpha)))


# ---------------------------------------------------------------------------
# Інтервальні методи
# ---------------------------------------------------------------------------

def _finish_on_interval(
    phi: _CountingPhi,
    method: str,
    left: float,
    right: float,
    tol: float,
    iterations: int,
    extra: Optional[Dict[str, Any]] = None,
) -> LineSearchResult:
    alpha = 0.5 * (left + right)
    value = phi(alpha)
    meta = {
        "method": method,
        "interval": (left, right),
        "stopped_by": "tol" if (right - left) <= tol else "max_iter",
    }
    if extra:
        meta.update(extra)
    return LineSearchResult(alpha, value, iterations, phi.calls, meta)


def _dichotomy(phi, a, b, tol, max_iter, options) -> LineSearchResult:
    """
    Дихотомія: дві точки mid ± δ, відкидаємо половину з більшим φ.

    options:
        delta - зсув від середини (default: tol / 4)
    """
    left, right = float(a), float(b)
    delta = float(options.get("delta", 0.25 * tol))
    if delta <= 0.0:
        delta = 1e-8

    iterations = 0
    while (right - left) > tol and iterations < max_iter:
        iterations += 1
        mid = 0.5 * (left + right)
        d = min(delta, 0.25 * (right - left))
        if phi(mid - d) < phi(mid + d):
            right = mid + d
        else:
            left = mid - d

    return _finish_on_interval(
        phi, LINE_SEARCH_DICHOTOMY, left, right, tol, iterations, {"delta": delta}
    )


def _interval_halving(phi, a, b, tol, max_iter, options) -> LineSearchResult:
    """
    Розподіл навпіл: точки на 1/4, 1/2, 3/4 інтервалу; за одну ітерацію
    інтервал скорочується рівно вдвічі.
    """
    left, right = float(a), float(b)

    iterations = 0
    while (right - left) > tol and iterations < max_iter:
        iterations += 1
        quarter = 0.25 * (right - left)
        x1, mid, x2 = left + quarter, left + 2.0 * quarter, left + 3.0 * quarter
        f1, fm, f2 = phi(x1), phi(mid), phi(x2)

        if f1 < fm:
            right = mid
        elif f2 < fm:
            left = mid
        else:
            left, right = x1, x2

    return _finish_on_interval(phi, LINE_SEARCH_INTERVAL_HALVING, left, right, tol, iterations)


def _golden_section(phi, a, b, tol, max_iter, options) -> LineSearchResult:
    """Золотий переріз: одна нова точка φ на ітерацію."""
    left, right = float(a), float(b)
    width = right - left

    c = left + _INV_GOLDEN_SQ * width
    d = left + _INV_GOLDEN * width
    fc, fd = phi(c), phi(d)

    iterations = 0
    while width > tol and iterations < max_iter:
        iterations += 1
        if fc < fd:
            right, d, fd = d, c, fc
            width = right - left
            c = left + _INV_GOLDEN_SQ * width
            fc = phi(c)
        else:
            left, c, fc = c, d, fd
            width = right - left
            d = left + _INV_GOLDEN * width
            fd = phi(d)

    return _finish_on_interval(phi, LINE_SEARCH_GOLDEN_SECTION, left, right, tol, iterations)


# ---------------------------------------------------------------------------
# Armijo backtracking
# ---------------------------------------------------------------------------

def _armijo_backtracking(phi, a, b, tol, max_iter, options) -> LineSearchResult:
    """
    Дроблення кроку: α <- τ α, поки не виконано
        φ(α) <= φ(0) + c1 α φ'(0).

    options (обов'язкові):
        f0, directional_derivative - φ(0) та φ'(0) = ∇f(x)ᵀp < 0
    options (необов'язкові):
        alpha0 (1.0), tau (0.5), c1 (1e-4), max_backtracking (max_iter),
        min_alpha (1e-12)

    Інтервал [a, b] на алгоритм не впливає.
    """
    try:
        f0 = float(options["f0"])
        dphi0 = float(options["directional_derivative"])
    except KeyError as exc:
        raise ConfigurationError(
            f"armijo_backtracking: у options бракує {exc.args[0]!r} "
            "(потрібні 'f0' та 'directional_derivative')."
        ) from None

    alpha = float(options.get("alpha0", 1.0))
    tau = float(options.get("tau", 0.5))
    c1 = float(options.get("c1", 1e-4))
    min_alpha = float(options.get("min_alpha", 1e-12))
    limit = int(options.get("max_backtracking", max_iter))
    if not 0.0 < tau < 1.0:
        raise ConfigurationError(f"armijo_backtracking: потрібно 0 < tau < 1, отримано {tau}.")
    limit = max(1, min(max_iter, limit) if max_iter > 0 else limit)

    iterations = 0
    value = f0
    accepted = False
    reason = "max_backtracking"

    while iterations < limit:
        iterations += 1
        value = phi(alpha)
        if value <= f0 + c1 * alpha * dphi0:
            accepted = True
            reason = "armijo"
            break
        if alpha * tau < min_alpha:
            reason = "min_alpha"
            break
        alpha *= tau

    meta = {
        "method": LINE_SEARCH_ARMIJO,
        "interval": (a, b),
        "stopped_by": reason,
        "accepted": accepted,
        "f0": f0,
        "directional_derivative": dphi0,
    }
    return LineSearchResult(alpha, value, iterations, phi.calls, meta)


# ---------------------------------------------------------------------------
# Складені методи
# ---------------------------------------------------------------------------

def _step_adaptation(phi, a, b, tol, max_iter, options) -> LineSearchResult:
    """
    Адаптація кроку.

    1) з α0 робимо пробний крок h0 вправо (або вліво, якщо вправо φ не
       зменшується);
    2) поки φ спадає, йдемо далі, подвоюючи крок (expand_factor);
    3) отриману дужку уточнюємо золотим перерізом.

    options:
        alpha0        - стартова точка (default: a)
        initial_step  - h0 (default: (b - a) / 2)
        expand_factor - множник кроку > 1 (default: 2)
    """
    left, right = float(a), float(b)
    alpha0 = min(max(float(options.get("alpha0", left)), left), right)
    h = float(options.get("initial_step", 0.5 * (right - left)))
    if h <= 0.0:
        h = 0.5 * (right - left)
    expand = float(options.get("expand_factor", 2.0))
    if expand <= 1.0:
        expand = 2.0

    phi0 = phi(alpha0)
    bracket: Optional[Tuple[float, float]] = None
    direction = 0.0
    iterations = 0

    for sign in (+1.0, -1.0):
        trial = min(max(alpha0 + sign * h, left), right)
        if trial != alpha0 and phi(trial) < phi0:
            direction = sign
            break

    if direction != 0.0:
        prev = alpha0
        curr = min(max(alpha0 + direction * h, left), right)
        f_curr = phi(curr)
        bracket = tuple(sorted((prev, curr)))
        while iterations < max_iter:
            iterations += 1
            h *= expand
            nxt = curr + direction * h
            if nxt < left or nxt > right:
                bracket = (min(prev, curr), right) if direction > 0 else (left, max(prev, curr))
                break
            f_next = phi(nxt)
            if f_next >= f_curr:
                bracket = tuple(sorted((prev, nxt)))
                break
            prev, curr, f_curr = curr, nxt, f_next

    fallback = bracket is None
    lo, hi = (left, right) if fallback else bracket
    inner = _golden_section(phi, lo, hi, tol, max_iter, options)

    meta = dict(inner.meta)
    meta.update({
        "method": LINE_SEARCH_STEP_ADAPTATION,
        "inner_method": LINE_SEARCH_GOLDEN_SECTION,
        "fallback_to_golden": fallback,
        "bracket": (lo, hi),
    })
    return LineSearchResult(
        inner.alpha, inner.phi_value, iterations + inner.iterations, phi.calls, meta
    )


def _cubic_stationary_point(xs: np.ndarray, ys: np.ndarray) -> Optional[float]:
    """
    Мінімум кубічного інтерполянта через 4 точки всередині (xs[0], xs[-1]),
    або None, якщо його немає.
    """
    coeffs = np.linalg.solve(np.vander(xs, 4), ys)  # a3, a2, a1, a0
    a3, a2, a1, _ = coeffs
    roots = np.roots([3.0 * a3, 2.0 * a2, a1])
    candidates = [
        r.real for r in roots
        if abs(r.imag) < 1e-12 and xs[0] < r.real < xs[-1]
        and 6.0 * a3 * r.real + 2.0 * a2 > 0.0
    ]
    if not candidates:
        return None
    best = xs[int(np.argmin(ys))]
    return float(min(candidates, key=lambda r: abs(r - best)))


def _cubic_4point(phi, a, b, tol, max_iter, options) -> LineSearchResult:
    """
    Кубічна інтерполяція: тримаємо 4 точки, будуємо кубічний поліном,
    додаємо його мінімум і залишаємо 4 точки навколо найкращої.

    Вироджена система інтерполяції -> дорахування золотим перерізом.
    """
    left, right = float(a), float(b)
    xs = list(np.linspace(left, right, 4))
    ys = [phi(x) for x in xs]
    iterations = 0

    while (xs[-1] - xs[0]) > tol and iterations < max_iter:
        iterations += 1
        try:
            candidate = _cubic_stationary_point(np.array(xs), np.array(ys))
        except np.linalg.LinAlgError:
            inner = _golden_section(phi, xs[0], xs[-1], tol, max_iter - iterations, options)
            meta = dict(inner.meta)
            meta.update({
                "method": LINE_SEARCH_CUBIC_4POINT,
                "inner_method": LINE_SEARCH_GOLDEN_SECTION,
                "fallback_to_golden": True,
            })
            return LineSearchResult(
                inner.alpha, inner.phi_value, iterations + inner.iterations, phi.calls, meta
            )

        if candidate is None or any(abs(candidate - x) < 1e-14 for x in xs):
            candidate = 0.5 * (xs[0] + xs[-1])
            if any(abs(candidate - x) < 1e-14 for x in xs):
                break

        points: List[Tuple[float, float]] = sorted(zip(xs + [candidate], ys + [phi(candidate)]))
        i_best = min(range(5), key=lambda i: points[i][1])
        # вікно з 4 сусідніх точок, що містить найкращу
        if i_best < 2:
            start = 0
        elif i_best > 2:
            start = 1
        else:
            start = 0 if points[0][1] < points[4][1] else 1
        window = points[start:start + 4]
        xs = [p[0] for p in window]
        ys = [p[1] for p in window]

    i_best = int(np.argmin(ys))
    meta = {
        "method": LINE_SEARCH_CUBIC_4POINT,
        "interval": (xs[0], xs[-1]),
        "stopped_by": "tol" if (xs[-1] - xs[0]) <= tol else "max_iter",
    }
    return LineSearchResult(float(xs[i_best]), float(ys[i_best]), iterations, phi.calls, meta)


# ---------------------------------------------------------------------------
# Публічний інтерфейс
# ---------------------------------------------------------------------------

_METHODS: Dict[str, Callable[..., LineSearchResult]] = {
    LINE_SEARCH_ARMIJO: _armijo_backtracking,
    LINE_SEARCH_DICHOTOMY: _dichotomy,
    LINE_SEARCH_INTERVAL_HALVING: _interval_halving,
    LINE_SEARCH_GOLDEN_SECTION: _golden_section,
    LINE_SEARCH_STEP_ADAPTATION: _step_adaptation,
    LINE_SEARCH_CUBIC_4POINT: _cubic_4point,
}

LINE_SEARCH_METHODS: Tuple[str, ...] = tuple(_METHODS)


def line_search_1d(
    phi: Scalar1DFunction,
    a: float,
    b: float,
    method: LineSearchMethod = LINE_SEARCH_DEFAULT,
    tol: float = 1e-6,
    max_iter: int = 100,
    options: Optional[Dict[str, Any]] = None,
) -> LineSearchResult:
    """
    Знайти крок α, що (наближено) мінімізує φ на [a, b].

    Parameters
    ----------
    phi : Callable[[float], float]
        φ(α), зазвичай f(x + α p).
    a, b : float
        Інтервал пошуку, a < b (для Armijo — лише інформаційно).
    method : str
        Один з LINE_SEARCH_METHODS; "default" означає Armijo backtracking.
    tol : float
        Точність за α для інтервальних методів.
    max_iter : int
        Ліміт ітерацій 1D-алгоритму.
    options : dict
        Параметри конкретного методу (див. docstring відповідної функції).
    """
    if method == LINE_SEARCH_DEFAULT:
        method = LINE_SEARCH_ARMIJO

    impl = _METHODS.get(method)
    if impl is None:
        raise ConfigurationError(
            f"Невідомий метод одномірного пошуку {method!r}. "
            f"Доступні: {list(LINE_SEARCH_METHODS)}."
        )
    if method != LINE_SEARCH_ARMIJO and not a < b:
        raise ConfigurationError(
            f"line_search_1d: потрібно a < b, отримано [{a}, {b}]."
        )

    return impl(_CountingPhi(phi), float(a), float(b), float(tol), int(max_iter), options or {})


__all__ = [
    "Scalar1DFunction",
    "LineSearchMethod",
    "LineSearchResult",
    "LINE_SEARCH_DEFAULT",
    "LINE_SEARCH_ARMIJO",
    "LINE_SEARCH_DICHOTOMY",
    "LINE_SEARCH_INTERVAL_HALVING",
    "LINE_SEARCH_GOLDEN_SECTION",
    "LINE_SEARCH_STEP_ADAPTATION",
    "LINE_SEARCH_CUBIC_4POINT",
    "LINE_SEARCH_METHODS",
    "line_search_1d",
]
