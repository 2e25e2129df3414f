"""
table_view.py

Таблиця історії станів.

Колонки:
    k, статус, x₁, x₂, f(x), ‖Δx‖, крок методу

Статус показується лише в останньому рядку (проміжні — CONTINUE).
"Крок методу" залежить від стану: α line search, h Хука–Дживса або
діаметр симплекса.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ..core.solver import Results
from ..core.state import IterationStatus, State
from .styles import MARGIN, SPACING, apply_label_muted, apply_table_style, status_color

_COLUMNS = ["k", "статус", "x₁", "x₂", "f(x)", "‖Δx‖", "крок"]
_COL_STATUS = 1


def _method_step(state: State) -> Optional[float]:
    for attr in ("alpha", "step_size", "diameter"):
        value = getattr(state, attr, None)
        if value is not None:
            return float(value)
    return None


class IterationsTableWidget(QWidget):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._last_x: Optional[np.ndarray] = None
        self._build_ui()

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        root.setSpacing(SPACING)

        header_row = QHBoxLayout()
        header_row.setContentsMargins(0, 0, 0, 0)
        title = QLabel("Історія станів", self)
        subtitle = QLabel("k, статус, x, f(x), ‖Δx‖ та крок методу", self)
        subtitle.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        apply_label_muted(subtitle)
        header_row.addWidget(title)
        header_row.addStretch(1)
        header_row.addWidget(subtitle)
        root.addLayout(header_row)

        self.table = QTableWidget(self)
        self.table.setColumnCount(len(_COLUMNS))
        self.table.setHorizontalHeaderLabels(_COLUMNS)
        apply_table_style(self.table)

        header = self.table.horizontalHeader()
        for col in (0, _COL_STATUS, 6):
            header.setSectionResizeMode(col, QHeaderView.ResizeMode.ResizeToContents)

        self.table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)

        root.addWidget(self.table)

    # ------------------------------------------------------------------

    @staticmethod
    def _item(text: Any, align: Qt.AlignmentFlag = Qt.AlignmentFlag.AlignRight) -> QTableWidgetItem:
        it = QTableWidgetItem(str(text))
        it.setFlags(it.flags() & ~Qt.ItemFlag.ItemIsEditable)
        it.setTextAlignment(align | Qt.AlignmentFlag.AlignVCenter)
        return it

    def clear_table(self, x0: Optional[np.ndarray] = None) -> None:
        """Очистити таблицю; x0 — точка, від якої рахується ‖Δx‖ першого рядка."""
        self.table.setRowCount(0)
        self._last_x = None if x0 is None else np.asarray(x0, dtype=float)

    def add_state(self, state: State, k: int) -> None:
        """Додати рядок для стану, отриманого на ітерації k."""
        row = self.table.rowCount()
        self.table.insertRow(row)

        x = state.x
        step = (
            float(np.linalg.norm(x - self._last_x))
            if self._last_x is not None and self._last_x.shape == x.shape
            else None
        )
        self._last_x = np.array(x)
        method_step = _method_step(state)
        center = Qt.AlignmentFlag.AlignHCenter

        self.table.setItem(row, 0, self._item(k, center))
        self.table.setItem(row, _COL_STATUS, self._item("", center))
        for col, i in ((2, 0), (3, 1)):
            text = f"{x[i]:.6f}" if x.size > i else "—"
            self.table.setItem(row, col, self._item(text))
        self.table.setItem(row, 4, self._item(f"{state.f:.6e}"))
        self.table.setItem(row, 5, self._item("—" if step is None else f"{step:.3e}", center))
        self.table.setItem(
            row, 6, self._item("—" if method_step is None else f"{method_step:.3e}", center)
        )

        if x.size > 2:
            tooltip = "x = [" + ", ".join(f"{v:.6g}" for v in x) + "]"
            for col in (2, 3):
                self.table.item(row, col).setToolTip(tooltip)

    def mark_last_status(self, status: IterationStatus) -> None:
        row = self.table.rowCount() - 1
        if row < 0:
            return
        item = self._item(status.name, Qt.AlignmentFlag.AlignHCenter)
        item.setForeground(QColor(status_color(status)))
        self.table.setItem(row, _COL_STATUS, item)

    def populate(self, results: Results, x0: Optional[np.ndarray] = None) -> None:
        """Повністю перезаповнити таблицю історією запуску."""
        self.clear_table(x0)
        for k, state in enumerate(results.states, start=1):
            self.add_state(state, k)
        self.mark_last_status(results.status)


__all__ = [
    "IterationsTableWidget",
]
