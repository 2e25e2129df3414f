"""
results_summary.py

Зведена таблиця запусків кількох методів на одній тестовій задачі.

Працює з Results (optimkit.core.solver): назва методу, статус, x*, f*,
лічильники, причина зупинки, час.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from .solver import Results
from .state import IterationStatus


@dataclass
class ResultsSummary:
    """
    Зведення результатів.

        summary = ResultsSummary()
        summary.add_run(results_newton)
        summary.add_run(results_bfgs)
        rows = summary.as_rows()
    """
    runs: List[Results] = field(default_factory=list)

    def add_run(self, run: Results) -> None:
        self.runs.append(run)

    def __len__(self) -> int:
        return len(self.runs)

    def as_rows(self) -> List[Dict[str, Any]]:
        """
        Рядки-словники для GUI-таблиці / pandas / CSV.

        Поля: method, status, x_star, f_star, n_iter, func_evals,
        grad_evals, hess_evals, stopped_by, time.
        """
        rows: List[Dict[str, Any]] = []
        for run in self.runs:
            rows.append(
                {
                    "method": run.solver_name,
                    "status": run.status.name,
                    "x_star": np.asarray(run.x_min).tolist(),
                    "f_star": float(run.f_min),
                    "n_iter": int(run.num_iter),
                    "func_evals": int(run.func_evals),
                    "grad_evals": int(run.grad_evals),
                    "hess_evals": int(run.hess_evals),
                    "stopped_by": run.stopped_by,
                    "time": run.time,
                }
            )
        return rows

    def best_by_f(self) -> Optional[Results]:
        """
        Запуск з найменшим f*.

        Успішні (SUCCESS) запуски зі скінченним f* мають пріоритет; якщо
        таких немає — найкращий серед усіх скінченних; None, якщо й таких
        немає.
        """
        finite = [r for r in self.runs if np.isfinite(r.f_min)]
        if not finite:
            return None
        successful = [r for r in finite if r.status is IterationStatus.SUCCESS]
        pool = successful or finite
        return min(pool, key=lambda r: r.f_min)

    def to_dataframe(self):
        """
        pandas.DataFrame зі зведеною таблицею.

        Потрібен пакет pandas (extra "dataframe").
        """
        try:
            import pandas as pd
        except ImportError as exc:
            raise RuntimeError(
                "Для ResultsSummary.to_dataframe() потрібно встановити пакет 'pandas'."
            ) from exc

        return pd.DataFrame(self.as_rows())


__all__ = ["ResultsSummary"]
