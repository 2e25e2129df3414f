"""
styles.py

Темна тема GUI optimkit.

    - один акцентний колір для дій;
    - окремі кольори для статусів ітерації (успіх / стагнація / розбіжність);
    - хелпери для таблиць, кнопок, підписів і "карток" з графіками.
"""

from __future__ import annotations

from dataclasses import dataclass

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor, QFont, QPalette
from PyQt6.QtWidgets import (
    QApplication,
    QGroupBox,
    QHeaderView,
    QLabel,
    QPushButton,
    QTableWidget,
    QWidget,
)

from ..core.state import IterationStatus

MARGIN = 10
SPACING = 8
RADIUS = 5

FONT_FAMILY = "Montserrat"
FONT_SIZE = 10


@dataclass(frozen=True)
class AppPalette:
    background: str = "#111318"
    surface: str = "#181b22"
    surface_alt: str = "#20252e"

    text_main: str = "#e4e8ef"
    text_muted: str = "#8d97a8"
    text_inverse: str = "#111318"

    accent: str = "#6cb8f0"
    accent_alt: str = "#9ad2ff"

    border: str = "#2b313c"

    # статуси ітерацій
    ok: str = "#7ccf8a"
    warn: str = "#e8c26a"
    error: str = "#ef7a7a"


PALETTE = AppPalette()

_STATUS_COLORS = {
    IterationStatus.CONTINUE: PALETTE.text_main,
    IterationStatus.SUCCESS: PALETTE.ok,
    IterationStatus.NO_PROGRESS: PALETTE.warn,
    IterationStatus.OUT_OF_CONTROL: PALETTE.error,
}


def status_color(status: IterationStatus) -> str:
    """Колір тексту для статусу ітерації."""
    return _STATUS_COLORS.get(status, PALETTE.text_main)


# ---------------------------------------------------------------------------
# Глобальний stylesheet
# ---------------------------------------------------------------------------

def build_app_stylesheet() -> str:
    p = PALETTE

    return f"""
    QWidget {{
        background-color: {p.background};
        color: {p.text_main};
        font-family: "{FONT_FAMILY}";
        font-size: {FONT_SIZE}pt;
    }}

    QGroupBox {{
        background-color: {p.surface};
        border: 1px solid {p.border};
        border-radius: {RADIUS}px;
        margin-top: 14px;
    }}
    QGroupBox::title {{
        subcontrol-origin: margin;
        left: 8px;
        padding: 0 4px;
        color: {p.accent};
        font-weight: 600;
    }}

    QMenuBar, QStatusBar {{
        background-color: {p.surface};
        color: {p.text_muted};
    }}
    QMenu::item:selected, QMenuBar::item:selected {{
        background-color: {p.accent};
        color: {p.text_inverse};
    }}

    QPushButton {{
        background-color: {p.accent};
        color: {p.text_inverse};
        border: 1px solid {p.accent};
        border-radius: {RADIUS}px;
        padding: 6px 12px;
        font-weight: 600;
    }}
    QPushButton:hover {{
        background-color: {p.accent_alt};
        border-color: {p.accent_alt};
    }}
    QPushButton:disabled {{
        background-color: {p.surface_alt};
        color: {p.text_muted};
        border-color: {p.border};
    }}

    QLineEdit, QSpinBox, QDoubleSpinBox, QComboBox {{
        background-color: {p.surface_alt};
        border: 1px solid {p.border};
        border-radius: {RADIUS}px;
        padding: 5px 7px;
    }}
    QLineEdit:focus, QSpinBox:focus, QDoubleSpinBox:focus, QComboBox:focus {{
        border: 1px solid {p.accent};
    }}

    QCheckBox::indicator {{
        width: 15px;
        height: 15px;
        border-radius: 3px;
        border: 1px solid {p.border};
        background: {p.surface_alt};
    }}
    QCheckBox::indicator:checked {{
        background: {p.accent};
        border-color: {p.accent};
    }}

    QTableWidget {{
        background-color: {p.surface};
        alternate-background-color: {p.surface_alt};
        border: 1px solid {p.border};
        border-radius: {RADIUS}px;
        gridline-color: {p.border};
        selection-background-color: {p.accent};
        selection-color: {p.text_inverse};
    }}
    QHeaderView::section {{
        background-color: {p.surface_alt};
        padding: 5px;
        border: none;
        border-right: 1px solid {p.border};
        font-weight: 600;
    }}

    QFrame#aboutColumn {{
        background-color: {p.surface};
        border: 1px solid {p.border};
        border-radius: {RADIUS}px;
    }}

    QToolTip {{
        background-color: {p.surface_alt};
        color: {p.text_main};
        border: 1px solid {p.border};
        padding: 5px;
    }}
    """


def apply_app_style(app: QApplication) -> None:
    palette = app.palette()
    palette.setColor(QPalette.ColorRole.Window, QColor(PALETTE.background))
    palette.setColor(QPalette.ColorRole.Base, QColor(PALETTE.surface))
    palette.setColor(QPalette.ColorRole.Text, QColor(PALETTE.text_main))
    palette.setColor(QPalette.ColorRole.Button, QColor(PALETTE.accent))

    app.setPalette(palette)
    app.setFont(QFont(FONT_FAMILY, FONT_SIZE))
    app.setStyleSheet(build_app_stylesheet())


# ---------------------------------------------------------------------------
# Хелпери
# ---------------------------------------------------------------------------

def apply_groupbox_flat_style(group: QGroupBox) -> None:
    group.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
    group.setFlat(False)


def apply_table_style(table: QTableWidget) -> None:
    table.verticalHeader().setVisible(False)
    table.verticalHeader().setDefaultSectionSize(22)
    table.setAlternatingRowColors(True)
    header = table.horizontalHeader()
    header.setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
    header.setHighlightSections(False)
    header.setDefaultAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter)


def apply_button_secondary(btn: QPushButton) -> None:
    p = PALETTE
    btn.setStyleSheet(f"""
        QPushButton {{
            background-color: {p.surface_alt};
            color: {p.text_main};
            border: 1px solid {p.border};
        }}
        QPushButton:hover {{
            border-color: {p.accent};
        }}
    """)


def apply_label_muted(lbl: QLabel) -> None:
    lbl.setStyleSheet(f"color: {PALETTE.text_muted};")


def apply_card_style(widget: QWidget) -> None:
    """Рамка навколо віджета; потрібен objectName."""
    widget.setStyleSheet(f"""
        QWidget#{widget.objectName()} {{
            background-color: {PALETTE.surface};
            border: 1px solid {PALETTE.border};
            border-radius: {RADIUS}px;
        }}
    """)


__all__ = [
    "MARGIN",
    "SPACING",
    "RADIUS",
    "FONT_FAMILY",
    "FONT_SIZE",
    "AppPalette",
    "PALETTE",
    "status_color",
    "build_app_stylesheet",
    "apply_app_style",
    "apply_groupbox_flat_style",
    "apply_table_style",
    "apply_button_secondary",
    "apply_label_muted",
    "apply_card_style",
]
