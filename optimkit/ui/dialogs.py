"""
dialogs.py

Діалоги GUI:

    - show_error    – повідомлення про помилку
    - show_about    – "Про програму"
    - show_summary  – зведена таблиця ResultsSummary
"""

from __future__ import annotations

from typing import Any, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFrame,
    QHeaderView,
    QLabel,
    QMessageBox,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ..core.registry import SOLVERS
from ..core.results_summary import ResultsSummary
from ..core.state import IterationStatus
from .styles import MARGIN, SPACING, apply_label_muted, apply_table_style, status_color


def show_error(parent: Optional[QWidget], message: str, title: str = "Помилка") -> None:
    dlg = QMessageBox(parent)
    dlg.setIcon(QMessageBox.Icon.Critical)
    dlg.setWindowTitle(title)
    dlg.setText(message)
    dlg.setStandardButtons(QMessageBox.StandardButton.Ok)
    dlg.exec()


def show_about(parent: Optional[QWidget]) -> None:
    AboutDialog(parent).exec()


_METHOD_STOP_REASONS = {
    f"method:{IterationStatus.SUCCESS.value}": "Вбудований критерій методу виконано",
    f"method:{IterationStatus.NO_PROGRESS.value}": "Метод не може зменшити f (стагнація)",
    f"method:{IterationStatus.OUT_OF_CONTROL.value}": "Розбіжність (inf / NaN або вихід за межі)",
}


def humanize_stop_reason(code: Optional[str]) -> str:
    """stopped_by з Results -> текст для користувача."""
    if not code:
        return "Невідомо"
    if code in _METHOD_STOP_REASONS:
        return _METHOD_STOP_REASONS[code]
    return f"Зовнішній критерій: {code}"


# ---------------------------------------------------------------------------
# Зведена таблиця
# ---------------------------------------------------------------------------

class SummaryDialog(QDialog):
    _HEADERS = [
        "Метод",
        "Статус",
        "f*",
        "x*",
        "Ітерацій",
        "Виклики f",
        "Виклики ∇f",
        "Виклики H",
        "Час, с",
        "Причина зупинки",
    ]

    def __init__(self, parent: Optional[QWidget], summary: ResultsSummary) -> None:
        super().__init__(parent)
        self.summary = summary

        self.setWindowTitle("Зведена таблиця результатів")
        self.setModal(True)
        self.resize(980, 460)

        self._build_ui()
        self._populate()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        layout.setSpacing(SPACING)

        title = QLabel(
            "Результати мінімізації для всіх методів (однакова задача та старт)",
            self,
        )
        title.setWordWrap(True)

        self.label_best = QLabel(self)
        apply_label_muted(self.label_best)

        self.table = QTableWidget(self)
        self.table.setColumnCount(len(self._HEADERS))
        self.table.setHorizontalHeaderLabels(self._HEADERS)
        apply_table_style(self.table)
        header = self.table.horizontalHeader()
        header.setSectionResizeMode(QHeaderView.ResizeMode.Interactive)
        header.setStretchLastSection(True)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok, parent=self)
        buttons.accepted.connect(self.accept)

        layout.addWidget(title)
        layout.addWidget(self.label_best)
        layout.addWidget(self.table)
        layout.addWidget(buttons)

    @staticmethod
    def _item(val: Any) -> QTableWidgetItem:
        it = QTableWidgetItem("" if val is None else str(val))
        it.setFlags(it.flags() & ~Qt.ItemFlag.ItemIsEditable)
        return it

    def _populate(self) -> None:
        rows = self.summary.as_rows()
        self.table.setRowCount(len(rows))

        for r, row in enumerate(rows):
            x_star = "[" + ", ".join(f"{v:.4f}" for v in row["x_star"]) + "]"
            time_text = None if row["time"] is None else f"{row['time']:.4f}"
            values = [
                row["method"],
                row["status"],
                f"{row['f_star']:.6e}",
                x_star,
                row["n_iter"],
                row["func_evals"],
                row["grad_evals"],
                row["hess_evals"],
                time_text,
                humanize_stop_reason(row["stopped_by"]),
            ]
            for c, value in enumerate(values):
                self.table.setItem(r, c, self._item(value))

            status_item = self.table.item(r, 1)
            status_item.setForeground(QColor(status_color(IterationStatus[row["status"]])))

        self.table.resizeColumnsToContents()

        best = self.summary.best_by_f()
        self.label_best.setText(
            "Найкращий за f*: —" if best is None
            else f"Найкращий за f*: {best.solver_name}, f* = {best.f_min:.6e}"
        )


def show_summary(parent: Optional[QWidget], summary: ResultsSummary) -> None:
    SummaryDialog(parent, summary).exec()


# ---------------------------------------------------------------------------
# Про програму
# ---------------------------------------------------------------------------

class AboutDialog(QDialog):
    def __init__(self, parent: Optional[QWidget]) -> None:
        super().__init__(parent)
        self.setWindowTitle("Про програму")
        self.setModal(True)
        self.resize(560, 520)
        self._build_ui()

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)

        column = QFrame(self)
        column.setObjectName("aboutColumn")
        column_layout = QVBoxLayout(column)
        column_layout.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        column_layout.setSpacing(SPACING)

        title = QLabel("<b>optimkit — локальна мінімізація функцій</b>", column)
        title.setWordWrap(True)

        subtitle = QLabel(
            "Ітераційний рушій з підключуваними методами, критеріями зупинки "
            "та лічильниками викликів f, ∇f, H.",
            column,
        )
        subtitle.setWordWrap(True)
        apply_label_muted(subtitle)

        separator = QFrame(column)
        separator.setFrameShape(QFrame.Shape.HLine)

        items = "".join(f"<li>{label}</li>" for label, _factory in SOLVERS.values())
        methods = QLabel(f"<p><b>Методи:</b></p><ul>{items}</ul>", column)
        methods.setWordWrap(True)

        statuses = QLabel(
            "<p><b>Статуси:</b> CONTINUE, SUCCESS, NO_PROGRESS (стагнація), "
            "OUT_OF_CONTROL (розбіжність).</p>",
            column,
        )
        statuses.setWordWrap(True)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok, parent=self)
        buttons.accepted.connect(self.accept)

        column_layout.addWidget(title)
        column_layout.addWidget(subtitle)
        column_layout.addWidget(separator)
        column_layout.addWidget(methods)
        column_layout.addWidget(statuses)
        column_layout.addStretch(1)

        root.addWidget(column, stretch=1)
        root.addWidget(buttons, alignment=Qt.AlignmentFlag.AlignRight)


__all__ = [
    "show_error",
    "show_about",
    "humanize_stop_reason",
    "SummaryDialog",
    "show_summary",
    "AboutDialog",
]
