"""
solver_setup.py

Набір іменованих параметрів для розв'язувача.

    setup = SolverSetup(step_size=0.05, grad_tol=1e-8)
    options = setup.resolve(GradientDescent.default_options, owner="GradientDescent")

Кожен метод сам визначає, які ключі він розпізнає (default_options), та
політику щодо невідомих ключів (reject_unknown_options).
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping

from .errors import ConfigurationError


class SolverSetup:
    """Незмінний "мішок" опцій."""

    def __init__(self, **options: Any) -> None:
        self._options: Dict[str, Any] = dict(options)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SolverSetup":
        return cls(**dict(mapping))

    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        return self._options.get(key, default)

    def keys(self):
        return self._options.keys()

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._options)

    def __contains__(self, key: object) -> bool:
        return key in self._options

    def __iter__(self) -> Iterator[str]:
        return iter(self._options)

    def __len__(self) -> int:
        return len(self._options)

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self._options.items())
        return f"{type(self).__name__}({args})"

    # ------------------------------------------------------------------

    def resolve(
        self,
        defaults: Mapping[str, Any],
        owner: str = "solver",
        strict: bool = True,
    ) -> Dict[str, Any]:
        """
        Злити опції з defaults.

        strict=True  — невідомий ключ -> ConfigurationError;
        strict=False — невідомі ключі ігноруються.
        """
        unknown = sorted(k for k in self._options if k not in defaults)
        if unknown and strict:
            raise ConfigurationError(
                f"{owner}: непідтримувані параметри {unknown}. "
                f"Допустимі: {sorted(defaults)}."
            )

        resolved = dict(defaults)
        for key, value in self._options.items():
            if key in defaults:
                resolved[key] = value
        return resolved


class DefaultSetup(SolverSetup):
    """Порожній набір: усі параметри за замовчуванням."""

    def __init__(self) -> None:
        super().__init__()


__all__ = [
    "SolverSetup",
    "DefaultSetup",
]
