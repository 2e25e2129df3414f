"""
main_window.py

Головне вікно:
    - зліва: панель керування;
    - справа: карусель графіків над таблицею історії станів;
    - під таблицею: лічильники (ітерації, виклики f / ∇f / H, час, статус).
"""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np
from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QSplitter,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from ..core.runs import OptimizationConfig, format_point
from ..core.solver import Results
from ..core.state import State
from .control_panel import ControlPanelWidget
from .dialogs import show_about, show_error
from .plot_view import PlotView
from .styles import MARGIN, SPACING, apply_label_muted, status_color
from .table_view import IterationsTableWidget


class MainWindow(QMainWindow):
    optimizationRequested = pyqtSignal(OptimizationConfig)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        self.setWindowTitle("optimkit — мінімізація функцій")
        self.resize(1400, 880)

        self._create_actions()
        self._create_menu()
        self._create_status_bar()
        self._create_content()
        self._connect_signals()

    # ------------------------------------------------------------------
    # Меню
    # ------------------------------------------------------------------

    def _create_actions(self) -> None:
        self.action_exit = QAction("Вихід", self, shortcut="Ctrl+Q")
        self.action_about = QAction("Про програму", self)

    def _create_menu(self) -> None:
        menu = self.menuBar()
        menu.addMenu("Файл").addAction(self.action_exit)
        menu.addMenu("Довідка").addAction(self.action_about)

    def _create_status_bar(self) -> None:
        self.setStatusBar(QStatusBar(self))
        self.statusBar().showMessage("Готово")

    # ------------------------------------------------------------------
    # Компоновка
    # ------------------------------------------------------------------

    def _create_content(self) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)

        root = QHBoxLayout(central)
        root.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        root.setSpacing(SPACING)

        self.control_panel = ControlPanelWidget(central)
        self.control_panel.setMinimumWidth(380)
        root.addWidget(self.control_panel, stretch=2)
        root.addWidget(self._build_right_panel(), stretch=5)

        self.update_run_stats(None)

    def _build_right_panel(self) -> QWidget:
        widget = QWidget(self)
        widget.setMinimumWidth(760)
        layout = QVBoxLayout(widget)
        layout.setContentsMargins(0, 0, 0, 0)

        splitter = QSplitter(Qt.Orientation.Vertical, widget)
        splitter.setHandleWidth(6)

        self.plot_view = PlotView(widget)
        splitter.addWidget(self.plot_view)

        bottom = QWidget(widget)
        bottom_layout = QVBoxLayout(bottom)
        bottom_layout.setContentsMargins(0, 0, 0, 0)
        bottom_layout.setSpacing(SPACING)
        self.iterations_table = IterationsTableWidget(bottom)
        bottom_layout.addWidget(self.iterations_table)
        bottom_layout.addLayout(self._build_stats_row())

        splitter.addWidget(bottom)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 2)
        layout.addWidget(splitter)
        return widget

    def _build_stats_row(self) -> QHBoxLayout:
        row = QHBoxLayout()
        row.setSpacing(SPACING * 2)

        self.label_iters = QLabel(self)
        self.label_func_evals = QLabel(self)
        self.label_grad_evals = QLabel(self)
        self.label_hess_evals = QLabel(self)
        self.label_time = QLabel(self)
        self.label_status = QLabel(self)

        for lbl in (
            self.label_iters,
            self.label_func_evals,
            self.label_grad_evals,
            self.label_hess_evals,
            self.label_time,
        ):
            apply_label_muted(lbl)
            row.addWidget(lbl)
        row.addStretch(1)
        row.addWidget(self.label_status)
        return row

    def _connect_signals(self) -> None:
        self.action_exit.triggered.connect(self.close)
        self.action_about.triggered.connect(lambda: show_about(self))

        self.control_panel.exitRequested.connect(self.close)
        self.control_panel.clearRequested.connect(self._on_clear_requested)
        self.control_panel.runRequested.connect(self._on_run_requested)
        self.control_panel.inputError.connect(self.report_error)

    # ------------------------------------------------------------------
    # Обробники
    # ------------------------------------------------------------------

    def _on_run_requested(self, cfg: OptimizationConfig) -> None:
        self.clear_results()
        x0_text = "x₀ задачі" if cfg.x0 is None else f"x₀=({format_point(cfg.x0)})"
        target = "усі методи" if cfg.run_all_methods else cfg.method_key
        self.statusBar().showMessage(f"Запуск: {cfg.function_key}, {target}, {x0_text}")
        self.optimizationRequested.emit(cfg)

    def _on_clear_requested(self) -> None:
        self.clear_results()
        self.statusBar().showMessage("Очищено")

    # ------------------------------------------------------------------
    # Публічне API для контролера
    # ------------------------------------------------------------------

    def report_error(self, message: str, title: str = "Помилка конфігурації") -> None:
        show_error(self, message, title=title)
        self.statusBar().showMessage(f"Помилка: {message}")

    def clear_results(self) -> None:
        self.iterations_table.clear_table()
        self.plot_view.show_placeholder()
        self.update_run_stats(None)

    def begin_run(self, x0: np.ndarray) -> None:
        """Підготувати таблицю до нового запуску зі старту x0."""
        self.iterations_table.clear_table(x0)

    def add_state(self, state: State, k: int) -> None:
        """Рядок таблиці для стану після ітерації k (callback розв'язувача)."""
        self.iterations_table.add_state(state, k)

    def show_results(
        self,
        results: Results,
        func: Callable[[np.ndarray], float],
        x0: Optional[np.ndarray] = None,
        f0: Optional[float] = None,
        refill_table: bool = False,
    ) -> None:
        """Графіки, статус останнього рядка та лічильники після запуску."""
        if refill_table:
            self.iterations_table.populate(results, x0)
        else:
            self.iterations_table.mark_last_status(results.status)
        self.plot_view.plot_fk(results, f0=f0)
        self.plot_view.plot_contour_trajectory(func, results, x0=x0)
        self.update_run_stats(results)

        self.statusBar().showMessage(
            f"{results.solver_name}: {results.status.name} ({results.stopped_by}), "
            f"ітерацій: {results.num_iter}, f* = {results.f_min:.6e}, "
            f"x* = ({format_point(results.x_min)})"
        )

    def update_run_stats(self, results: Optional[Results]) -> None:
        if results is None:
            self.label_iters.setText("ітерацій: –")
            self.label_func_evals.setText("f: –")
            self.label_grad_evals.setText("∇f: –")
            self.label_hess_evals.setText("H: –")
            self.label_time.setText("час: –")
            self.label_status.setText("")
            return

        self.label_iters.setText(f"ітерацій: {results.num_iter}")
        self.label_func_evals.setText(f"f: {results.func_evals}")
        self.label_grad_evals.setText(f"∇f: {results.grad_evals}")
        self.label_hess_evals.setText(f"H: {results.hess_evals}")
        self.label_time.setText(
            "час: –" if results.time is None else f"час: {results.time * 1e3:.2f} мс"
        )
        self.label_status.setText(results.status.name)
        self.label_status.setStyleSheet(f"color: {status_color(results.status)}; font-weight: 600;")


__all__ = [
    "MainWindow",
]
