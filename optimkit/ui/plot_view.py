"""
plot_view.py

Графіки запуску у вигляді каруселі:
    - поверхня f(x₁, x₂) + траєкторія;
    - f(k) (логарифмічна шкала, якщо всі f > 0);
    - рівні та траєкторія; для багатоточкових станів (симплекс) поверх
      малюються симплекси історії, поточний — яскравіше.

Для n = 1 замість рівнів будується графік f(x) з точками траєкторії;
для n > 2 доступний лише f(k).
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

import numpy as np
from PyQt6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure

from ..core.solver import Results
from .styles import MARGIN, PALETTE, SPACING, apply_card_style

_CANVAS_BG = PALETTE.surface_alt
_ACCENT = PALETTE.accent
_TEXT = PALETTE.text_main
_MUTED = PALETTE.text_muted

_PAGES = [
    ("surface", "Поверхня f(x₁, x₂)"),
    ("fk", "Графік f(k)"),
    ("contour", "Рівні та траєкторія"),
]


def _safe_eval(func: Callable[[np.ndarray], float], x: np.ndarray) -> float:
    """f(x) або NaN поза областю визначення."""
    try:
        value = float(func(x))
    except (ValueError, ArithmeticError):
        return float("nan")
    return value if np.isfinite(value) else float("nan")


class PlotPage:
    def __init__(self, figure: Figure, canvas: FigureCanvas, axes):
        self.figure = figure
        self.canvas = canvas
        self.axes = axes


class PlotView(QWidget):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("plotView")
        self.pages: Dict[str, PlotPage] = {}
        self._build_ui()

    # ------------------------------------------------------------------
    # UI
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        layout.setSpacing(SPACING)
        apply_card_style(self)

        nav = QHBoxLayout()
        nav.setSpacing(SPACING)
        nav.addWidget(QLabel("Графік:", self))

        self.combo_mode = QComboBox(self)
        self.combo_mode.addItems([title for _key, title in _PAGES])
        self.combo_mode.currentIndexChanged.connect(self._set_index)
        nav.addWidget(self.combo_mode, stretch=1)

        self.btn_prev = QPushButton("◀", self)
        self.btn_next = QPushButton("▶", self)
        for btn, shift in ((self.btn_prev, -1), (self.btn_next, 1)):
            btn.setFixedWidth(34)
            btn.clicked.connect(lambda _checked=False, s=shift: self._shift(s))
            nav.addWidget(btn)
        layout.addLayout(nav)

        self.stacked = QStackedWidget(self)
        layout.addWidget(self.stacked, stretch=1)

        for key, _title in _PAGES:
            self.pages[key] = self._create_page(projection="3d" if key == "surface" else None)
            self.stacked.addWidget(self.pages[key].canvas)

        self.show_placeholder()

    def _create_page(self, projection: Optional[str] = None) -> PlotPage:
        figure = Figure(facecolor=_CANVAS_BG)
        ax = figure.add_subplot(111, projection=projection)
        canvas = FigureCanvas(figure)
        canvas.setStyleSheet("background-color: transparent;")
        return PlotPage(figure, canvas, ax)

    def _set_index(self, index: int) -> None:
        self.stacked.setCurrentIndex(index)
        if self.combo_mode.currentIndex() != index:
            self.combo_mode.setCurrentIndex(index)

    def _shift(self, delta: int) -> None:
        self._set_index((self.stacked.currentIndex() + delta) % len(_PAGES))

    def _set_page(self, key: str) -> None:
        self._set_index([k for k, _t in _PAGES].index(key))

    # ------------------------------------------------------------------
    # Стилізація
    # ------------------------------------------------------------------

    def _style_axes(self, ax) -> None:
        ax.set_facecolor(_CANVAS_BG)
        ax.tick_params(colors=_MUTED, labelsize=8)
        ax.title.set_color(_TEXT)
        ax.xaxis.label.set_color(_TEXT)
        ax.yaxis.label.set_color(_TEXT)
        if hasattr(ax, "zaxis"):
            ax.zaxis.label.set_color(_TEXT)
            return
        for spine in ax.spines.values():
            spine.set_color(PALETTE.border)
        ax.grid(True, color=PALETTE.border, linestyle="--", linewidth=0.5, alpha=0.6)

    def _message(self, key: str, text: str) -> None:
        ax = self.pages[key].axes
        ax.clear()
        self._style_axes(ax)
        if key == "surface":
            ax.text(0.5, 0.5, 0.5, text, ha="center", va="center", color=_MUTED)
        else:
            ax.text(0.5, 0.5, text, ha="center", va="center", transform=ax.transAxes, color=_MUTED)
        self.pages[key].canvas.draw_idle()

    def _redraw(self, key: str) -> None:
        page = self.pages[key]
        page.figure.tight_layout()
        page.canvas.draw_idle()

    # ------------------------------------------------------------------
    # Публічні методи
    # ------------------------------------------------------------------

    def show_placeholder(self) -> None:
        self._message("surface", "Поверхня з'явиться після запуску")
        self._message("fk", "Графік f(k) з'явиться після запуску")
        self._message("contour", "Рівні функції з'являться після запуску")

    def plot_fk(self, results: Results, f0: Optional[float] = None) -> None:
        if not results.states:
            self._message("fk", "Немає жодної ітерації")
            return

        ax = self.pages["fk"].axes
        ax.clear()
        self._style_axes(ax)

        fs = list(results.f_history)
        ks = list(range(1, len(fs) + 1))
        if f0 is not None:
            fs.insert(0, f0)
            ks.insert(0, 0)
        fs_arr = np.array(fs, dtype=float)

        ax.plot(ks, fs_arr, marker="o", linewidth=1.4, markersize=3, color=_ACCENT)
        if np.all(np.isfinite(fs_arr)) and np.all(fs_arr > 0.0):
            ax.set_yscale("log")
        ax.set_xlabel("k")
        ax.set_ylabel("f(xₖ)")
        ax.set_title(f"{results.solver_name}: {results.status.name}")

        self._redraw("fk")
        self._set_page("fk")

    def plot_contour_trajectory(
        self,
        func: Callable[[np.ndarray], float],
        results: Results,
        x0: Optional[np.ndarray] = None,
        levels: int = 18,
        padding: float = 0.5,
        grid_size: int = 100,
    ) -> None:
        """Рівні / поверхня з траєкторією x0, x1, ..., xN."""
        xs = results.x_history
        if x0 is not None:
            xs = np.vstack([np.asarray(x0, dtype=float).reshape(1, -1), xs])
        if xs.shape[0] == 0:
            self.show_placeholder()
            return

        n = xs.shape[1]
        if n == 1:
            self._plot_1d(func, xs[:, 0], padding)
            self._message("surface", "Поверхню можна показати лише для R²")
            self._set_page("contour")
            return
        if n != 2:
            self._message("contour", "Рівні доступні лише для задач в R¹ та R²")
            self._message("surface", "Поверхню можна показати лише для R²")
            return

        lo = xs.min(axis=0)
        hi = xs.max(axis=0)
        for i in range(2):
            if hi[i] - lo[i] < 1e-9:
                lo[i] -= 1.0
                hi[i] += 1.0

        X1, X2 = np.meshgrid(
            np.linspace(lo[0] - padding, hi[0] + padding, grid_size),
            np.linspace(lo[1] - padding, hi[1] + padding, grid_size),
        )
        Z = np.array(
            [_safe_eval(func, np.array([a, b])) for a, b in zip(X1.ravel(), X2.ravel())]
        ).reshape(X1.shape)
        Z = np.ma.masked_invalid(Z)

        # рівні
        ax = self.pages["contour"].axes
        ax.clear()
        self._style_axes(ax)
        ax.contour(X1, X2, Z, levels=levels, colors=_MUTED, linewidths=0.7)
        ax.contourf(X1, X2, Z, levels=levels, cmap="magma", alpha=0.45)
        self._draw_simplices(ax, results)
        ax.plot(xs[:, 0], xs[:, 1], marker="o", linewidth=1.2, markersize=3, color=_ACCENT)
        ax.scatter(xs[0, 0], xs[0, 1], color=PALETTE.accent_alt, marker="s", s=45, zorder=5)
        ax.scatter(xs[-1, 0], xs[-1, 1], color=PALETTE.ok, marker="*", s=120, zorder=6)
        ax.set_xlabel("x₁")
        ax.set_ylabel("x₂")
        ax.set_title("Рівні функції та траєкторія")
        self._redraw("contour")

        # поверхня
        ax3 = self.pages["surface"].axes
        ax3.clear()
        self._style_axes(ax3)
        ax3.plot_surface(X1, X2, Z, rstride=2, cstride=2, cmap="magma", linewidth=0.2, alpha=0.85)
        z_traj = np.array([_safe_eval(func, x) for x in xs])
        ax3.plot(xs[:, 0], xs[:, 1], z_traj, color=_ACCENT, marker="o", linewidth=2, markersize=4)
        ax3.set_xlabel("x₁")
        ax3.set_ylabel("x₂")
        ax3.set_zlabel("f")
        ax3.set_title("Поверхня f(x₁, x₂) + траєкторія")
        self._redraw("surface")

        self._set_page("contour")

    def _draw_simplices(self, ax, results: Results) -> None:
        """Симплекси багатоточкових станів (X з кількома стовпцями)."""
        multi = [s for s in results.states if s.k > 1]
        if not multi:
            return
        for state in multi[:-1]:
            pts = np.hstack([state.X, state.X[:, :1]])
            ax.plot(pts[0], pts[1], color=PALETTE.warn, linewidth=0.6, alpha=0.25)
        last = multi[-1]
        pts = np.hstack([last.X, last.X[:, :1]])
        ax.plot(pts[0], pts[1], color=PALETTE.warn, linewidth=1.6)

    def _plot_1d(self, func: Callable[[np.ndarray], float], xs: np.ndarray, padding: float) -> None:
        lo, hi = float(xs.min()), float(xs.max())
        span = max(hi - lo, 1.0)
        grid = np.linspace(lo - padding * span, hi + padding * span, 400)
        values = np.array([_safe_eval(func, np.array([v])) for v in grid])
        f_traj = np.array([_safe_eval(func, np.array([v])) for v in xs])

        ax = self.pages["contour"].axes
        ax.clear()
        self._style_axes(ax)
        ax.plot(grid, values, color=_MUTED, linewidth=1.0)
        ax.plot(xs, f_traj, marker="o", linewidth=1.0, markersize=3, color=_ACCENT)
        ax.scatter(xs[-1], f_traj[-1], color=PALETTE.ok, marker="*", s=120, zorder=6)
        ax.set_xlabel("x")
        ax.set_ylabel("f(x)")
        ax.set_title("f(x) та траєкторія")
        self._redraw("contour")


__all__ = [
    "PlotPage",
    "PlotView",
]
