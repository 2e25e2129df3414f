"""Pytest configuration and shared fixtures for optimkit tests.

This module provides:
- Small convex problems with known minima
- A log-capture fixture that redirects optimkit loggers into a buffer
"""

import logging
import sys
from io import StringIO

import numpy as np
import pytest

from optimkit.core.functions import ObjectiveFunction, make_quadratic
from optimkit.log import configure_logging


@pytest.fixture
def quadratic_problem():
    """f(x) = 1/2 xᵀAx - bᵀx with A = [[3, 1], [1, 2]], b = [1, 1], x0 = [1, 1].

    Minimum x* = [0.2, 0.4], f* = -0.3.
    """
    return make_quadratic([[3.0, 1.0], [1.0, 2.0]], b=[1.0, 1.0])


@pytest.fixture
def ill_conditioned_problem():
    """Diagonal quadratic with condition number 100 in R^3."""
    return make_quadratic(np.diag([1.0, 10.0, 100.0]), x0=[1.0, 1.0, 1.0])


@pytest.fixture
def square_objective():
    """f(x) = x² in R^1 with analytic gradient and Hessian."""
    return ObjectiveFunction(
        func=lambda x: float(x[0] ** 2),
        n=1,
        grad=lambda x: np.array([2.0 * x[0]]),
        hess=lambda x: np.array([[2.0]]),
        name="square",
    )


@pytest.fixture
def log_stream():
    """Capture optimkit log records at DEBUG level into a StringIO."""
    stream = StringIO()
    configure_logging(level=logging.DEBUG, stream=stream)
    try:
        yield stream
    finally:
        configure_logging(level=logging.WARNING, stream=sys.__stderr__)
