"""
log.py

Налаштування журналювання для optimkit.

Усі модулі отримують логер через get_logger(__name__); логери кешуються,
кожен має один обробник у stderr і не передає записи в root-логер.

Формат:
    [LEVEL] optimkit.core.solver: повідомлення
"""

from __future__ import annotations

import logging
import sys
from typing import Dict, Optional, Union

_DEFAULT_LEVEL = logging.WARNING
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_loggers: Dict[str, logging.Logger] = {}


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return int(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Повернути (і за потреби створити) логер з простору імен optimkit.

    Parameters
    ----------
    name : Optional[str]
        Зазвичай __name__ модуля. Якщо None — кореневий логер "optimkit".
    """
    if name is None:
        name = "optimkit"

    logger_name = name if name.startswith("optimkit") else f"optimkit.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)

    # Обробник додаємо лише один раз
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: Union[int, str]) -> None:
    """Змінити рівень для всіх логерів optimkit (і для майбутніх)."""
    global _DEFAULT_LEVEL

    level = _coerce_level(level)
    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    _DEFAULT_LEVEL = level


def configure_logging(
    level: Union[int, str] = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[object] = None,
) -> None:
    """
    Переналаштувати всі логери: рівень, формат і потік виводу.

    Викликається один раз на старті застосунку (див. app.main()).
    """
    global _DEFAULT_LEVEL

    level = _coerce_level(level)
    formatter = logging.Formatter(format_string or _DEFAULT_FORMAT)
    stream = stream if stream is not None else sys.stderr

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    _DEFAULT_LEVEL = level


__all__ = [
    "get_logger",
    "set_log_level",
    "configure_logging",
]
