"""Tests for SolverSetup option bags."""

import pytest

from optimkit.core.errors import ConfigurationError
from optimkit.core.solver_setup import DefaultSetup, SolverSetup


DEFAULTS = {"step_size": 0.1, "max_iter": 100}


def test_resolve_merges_with_defaults():
    setup = SolverSetup(step_size=0.5)
    resolved = setup.resolve(DEFAULTS)
    assert resolved == {"step_size": 0.5, "max_iter": 100}


def test_resolve_does_not_mutate_defaults():
    SolverSetup(max_iter=5).resolve(DEFAULTS)
    assert DEFAULTS["max_iter"] == 100


def test_unknown_key_is_rejected_in_strict_mode():
    with pytest.raises(ConfigurationError, match="bogus"):
        SolverSetup(bogus=1).resolve(DEFAULTS, owner="GradientDescent")


def test_unknown_key_is_ignored_when_not_strict():
    resolved = SolverSetup(bogus=1, step_size=0.2).resolve(DEFAULTS, strict=False)
    assert "bogus" not in resolved
    assert resolved["step_size"] == 0.2


def test_mapping_interface():
    setup = SolverSetup.from_mapping({"a": 1, "b": 2})
    assert "a" in setup
    assert len(setup) == 2
    assert sorted(setup) == ["a", "b"]
    assert setup.get("c", 3) == 3
    assert setup.as_dict() == {"a": 1, "b": 2}
    assert repr(setup) == "SolverSetup(a=1, b=2)"


def test_default_setup_is_empty():
    assert len(DefaultSetup()) == 0
    assert DefaultSetup().resolve(DEFAULTS) == DEFAULTS
