"""
app.py

Контролер GUI-застосунку optimkit.

Зв'язує:
    - ui.MainWindow (PyQt6);
    - core.runs: перевірка конфігурації, один метод, усі методи;
    - core.registry: розв'язувач, SolverSetup та критерій зупинки за ключами.

Схема:
    MainWindow --[OptimizationConfig]--> OptimizationController
    Controller -- run_single(cfg, callback) -- NativeSolver.solve()
    solve -- callback(state, k) --> MainWindow.add_state(...)
    після завершення: графіки, статус, лічильники;
    у режимі "Запустити всі методи" — зведена таблиця ResultsSummary.

Рівень журналу задається змінною середовища OPTIMKIT_LOG_LEVEL
(DEBUG / INFO / WARNING, за замовчуванням WARNING).
"""

from __future__ import annotations

import os
import sys
from typing import Optional

import numpy as np
from PyQt6.QtWidgets import QApplication

from .core.errors import ConfigurationError
from .core.functions import TestProblem
from .core.runs import OptimizationConfig, run_all_methods, run_single, validate_config
from .log import configure_logging, get_logger
from .ui.dialogs import show_summary
from .ui.main_window import MainWindow
from .ui.styles import apply_app_style

logger = get_logger(__name__)


def _initial_value(problem: TestProblem, x0: np.ndarray) -> Optional[float]:
    try:
        return float(problem.func(x0))
    except (ValueError, ArithmeticError):
        return None


class OptimizationController:
    def __init__(self, window: MainWindow) -> None:
        self.window = window
        self.window.optimizationRequested.connect(self.on_optimization_requested)

    def on_optimization_requested(self, cfg: OptimizationConfig) -> None:
        try:
            problem = validate_config(cfg)
        except ConfigurationError as exc:
            self.window.report_error(str(exc))
            return

        if cfg.run_all_methods:
            self._run_all_methods(cfg, problem)
        else:
            self._run_single_method(cfg, problem)

    # ------------------------------------------------------------------

    def _start_point(self, cfg: OptimizationConfig, problem: TestProblem) -> np.ndarray:
        return problem.x0 if cfg.x0 is None else np.asarray(cfg.x0, dtype=float)

    def _run_single_method(self, cfg: OptimizationConfig, problem: TestProblem) -> None:
        x0 = self._start_point(cfg, problem)
        self.window.begin_run(x0)

        try:
            problem, results = run_single(cfg, callback=self.window.add_state)
        except ConfigurationError as exc:
            self.window.report_error(str(exc))
            return
        except (ValueError, ArithmeticError) as exc:
            logger.warning("Метод %s для %s: %s", cfg.method_key, problem.key, exc)
            self.window.report_error(
                f"Під час виконання методу '{cfg.method_key}' виникла помилка:\n\n{exc}",
                title="Помилка під час оптимізації",
            )
            return

        self.window.show_results(results, problem.func, x0=x0, f0=_initial_value(problem, x0))

    def _run_all_methods(self, cfg: OptimizationConfig, problem: TestProblem) -> None:
        """
        Усі методи + перебір line search. У головному вікні показується
        найкращий за f* запуск, окремим діалогом — зведена таблиця.
        """
        x0 = self._start_point(cfg, problem)
        summary = run_all_methods(cfg)

        if len(summary) == 0:
            self.window.report_error(
                "Жоден із методів не завершився коректно. "
                "Перевірте початкову точку, eps та інші параметри.",
                title="Немає даних для зведеної таблиці",
            )
            return

        best = summary.best_by_f()
        if best is not None:
            self.window.show_results(
                best,
                problem.func,
                x0=x0,
                f0=_initial_value(problem, x0),
                refill_table=True,
            )

        show_summary(self.window, summary)

        if best is not None:
            self.window.statusBar().showMessage(
                f"Найкращий метод за f*: {best.solver_name}, f* = {best.f_min:.6e}"
            )
        else:
            self.window.statusBar().showMessage(
                "Не вдалося визначити найкращий метод (немає скінченних результатів)."
            )


# ---------------------------------------------------------------------------
# Точка входу
# ---------------------------------------------------------------------------

def main() -> None:
    configure_logging(os.environ.get("OPTIMKIT_LOG_LEVEL", "WARNING"))

    app = QApplication(sys.argv)
    apply_app_style(app)

    window = MainWindow()
    _controller = OptimizationController(window)

    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
