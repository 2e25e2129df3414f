"""
control_panel.py

Панель керування:
    - тестова задача та x0 (через кому, будь-якої розмірності);
    - метод, метод лінійного пошуку, критерій зупинки;
    - eps, max_iter;
    - "Запустити всі методи", "Вимірювати час";
    - кнопки: Запустити, Очистити, Вихід.

Сигнали:
    runRequested(OptimizationConfig)
    inputError(str)      – x0 не вдалося розібрати
    clearRequested()
    exitRequested()
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDoubleSpinBox,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from ..core.errors import ConfigurationError
from ..core.functions import PROBLEMS
from ..core.registry import (
    LINE_SEARCH_CHOICES,
    SOLVERS,
    STOPPING_CHOICES,
    create_solver,
    uses_line_search,
)
from ..core.runs import OptimizationConfig, format_point, parse_point
from .styles import (
    MARGIN,
    SPACING,
    apply_button_secondary,
    apply_groupbox_flat_style,
    apply_label_muted,
)


class ControlPanelWidget(QWidget):
    """Ліва панель керування оптимізацією."""

    runRequested = pyqtSignal(OptimizationConfig)
    inputError = pyqtSignal(str)
    clearRequested = pyqtSignal()
    exitRequested = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._build_ui()
        self._connect_signals()
        self._on_function_changed()
        self._on_method_changed()

    # ------------------------------------------------------------------
    # Побудова UI
    # ------------------------------------------------------------------

    def _group(self, title: str) -> QGroupBox:
        group = QGroupBox(title, self)
        apply_groupbox_flat_style(group)
        layout = QVBoxLayout(group)
        layout.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        layout.setSpacing(SPACING)
        return group

    def _build_ui(self) -> None:
        self.setObjectName("controlPanel")

        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        main_layout.setSpacing(SPACING)

        # --- задача ---
        self.problem_group = self._group("Цільова функція та старт")
        problem_layout = self.problem_group.layout()

        self.combo_function = QComboBox(self.problem_group)
        for key, problem in PROBLEMS.items():
            self.combo_function.addItem(f"{key}: {problem.name}", key)

        self.label_problem = QLabel(self.problem_group)
        self.label_problem.setObjectName("functionPreview")
        self.label_problem.setWordWrap(True)
        apply_label_muted(self.label_problem)

        x_row = QHBoxLayout()
        x_row.setSpacing(SPACING)
        self.input_x0 = QLineEdit(self.problem_group)
        self.input_x0.setPlaceholderText("default")
        self.input_x0.setToolTip("Компоненти через кому; порожньо або 'default' — x₀ задачі")
        self.button_default_x0 = QPushButton("x₀ задачі", self.problem_group)
        apply_button_secondary(self.button_default_x0)
        x_row.addWidget(QLabel("x₀:", self.problem_group))
        x_row.addWidget(self.input_x0, stretch=1)
        x_row.addWidget(self.button_default_x0)

        problem_layout.addWidget(QLabel("Функція:", self.problem_group))
        problem_layout.addWidget(self.combo_function)
        problem_layout.addWidget(self.label_problem)
        problem_layout.addLayout(x_row)
        main_layout.addWidget(self.problem_group)

        # --- метод ---
        self.method_group = self._group("Метод оптимізації")
        method_layout = self.method_group.layout()

        self.combo_method = QComboBox(self.method_group)
        for key, (label, _factory) in SOLVERS.items():
            self.combo_method.addItem(label, key)

        self.combo_line_search = QComboBox(self.method_group)
        for key, label in LINE_SEARCH_CHOICES:
            self.combo_line_search.addItem(label, key)

        self.combo_stop = QComboBox(self.method_group)
        for key, label in STOPPING_CHOICES:
            self.combo_stop.addItem(label, key)

        self.label_builtin = QLabel(self.method_group)
        apply_label_muted(self.label_builtin)

        self.check_run_all = QCheckBox("Запустити всі методи для обраної функції", self.method_group)
        self.check_time = QCheckBox("Вимірювати час", self.method_group)

        method_layout.addWidget(QLabel("Метод:", self.method_group))
        method_layout.addWidget(self.combo_method)
        method_layout.addWidget(QLabel("Line search:", self.method_group))
        method_layout.addWidget(self.combo_line_search)
        method_layout.addWidget(QLabel("Критерій зупинки:", self.method_group))
        method_layout.addWidget(self.combo_stop)
        method_layout.addWidget(self.label_builtin)
        method_layout.addWidget(self.check_run_all)
        method_layout.addWidget(self.check_time)
        main_layout.addWidget(self.method_group)

        # --- точність ---
        self.params_group = self._group("Точність та ітерації")
        params_row = QHBoxLayout()
        params_row.setSpacing(SPACING)

        self.input_eps = QDoubleSpinBox(self.params_group)
        self.input_eps.setRange(1e-15, 1e3)
        self.input_eps.setDecimals(10)
        self.input_eps.setValue(1e-6)

        self.input_max_iter = QSpinBox(self.params_group)
        self.input_max_iter.setRange(1, 100000)
        self.input_max_iter.setValue(500)

        params_row.addWidget(QLabel("eps:", self.params_group))
        params_row.addWidget(self.input_eps)
        params_row.addSpacing(SPACING * 2)
        params_row.addWidget(QLabel("max_iter:", self.params_group))
        params_row.addWidget(self.input_max_iter)
        params_row.addStretch(1)
        self.params_group.layout().addLayout(params_row)
        main_layout.addWidget(self.params_group)

        # --- кнопки ---
        buttons_row = QHBoxLayout()
        buttons_row.setContentsMargins(0, SPACING, 0, 0)
        buttons_row.setSpacing(SPACING)

        self.button_run = QPushButton("Запустити", self)
        self.button_clear = QPushButton("Очистити", self)
        self.button_exit = QPushButton("Вихід", self)
        apply_button_secondary(self.button_clear)
        apply_button_secondary(self.button_exit)

        buttons_row.addWidget(self.button_run)
        buttons_row.addWidget(self.button_clear)
        buttons_row.addStretch(1)
        buttons_row.addWidget(self.button_exit)

        main_layout.addLayout(buttons_row)
        main_layout.addStretch(1)

    def _connect_signals(self) -> None:
        self.combo_function.currentIndexChanged.connect(self._on_function_changed)
        self.combo_method.currentIndexChanged.connect(self._on_method_changed)
        self.check_run_all.toggled.connect(self._on_method_changed)
        self.button_default_x0.clicked.connect(self._fill_default_x0)

        self.button_run.clicked.connect(self._on_run_clicked)
        self.button_clear.clicked.connect(self.clearRequested.emit)
        self.button_exit.clicked.connect(self.exitRequested.emit)

    # ------------------------------------------------------------------
    # Реакція на вибір
    # ------------------------------------------------------------------

    def _current_problem(self):
        return PROBLEMS[self.combo_function.currentData()]

    def _fill_default_x0(self) -> None:
        self.input_x0.setText(format_point(self._current_problem().x0))

    def _on_function_changed(self) -> None:
        problem = self._current_problem()
        self.label_problem.setText(f"n = {problem.n}")
        self._fill_default_x0()

    def _on_method_changed(self) -> None:
        """Line search і зовнішній критерій активні лише там, де мають сенс."""
        run_all = self.check_run_all.isChecked()
        method_key = self.combo_method.currentData()
        builtin = create_solver(method_key).has_builtin_stopping_criterion()

        self.combo_method.setEnabled(not run_all)
        self.combo_line_search.setEnabled(run_all or uses_line_search(method_key))
        self.combo_stop.setEnabled(run_all or not builtin)
        self.label_builtin.setText(
            "Метод має власний критерій зупинки (eps)." if builtin and not run_all else ""
        )

    # ------------------------------------------------------------------
    # Конфігурація
    # ------------------------------------------------------------------

    def build_config(self) -> OptimizationConfig:
        """OptimizationConfig з поточного стану контролів; ConfigurationError для x0."""
        problem = self._current_problem()
        return OptimizationConfig(
            function_key=problem.key,
            method_key=self.combo_method.currentData(),
            x0=parse_point(self.input_x0.text(), problem.n),
            eps=float(self.input_eps.value()),
            max_iter=int(self.input_max_iter.value()),
            stop_kind=self.combo_stop.currentData(),
            line_search_key=self.combo_line_search.currentData(),
            run_all_methods=self.check_run_all.isChecked(),
            time_test=self.check_time.isChecked(),
        )

    def _on_run_clicked(self) -> None:
        try:
            cfg = self.build_config()
        except ConfigurationError as exc:
            self.inputError.emit(str(exc))
            return
        self.runRequested.emit(cfg)


__all__ = [
    "ControlPanelWidget",
]
