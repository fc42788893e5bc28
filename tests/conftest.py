# tests/conftest.py
from __future__ import annotations

import pytest

from pisanotower.runtime import reset as _rt_reset
from pisanotower.tower import TowerSolver


@pytest.fixture(autouse=True)
def _isolated_runtime(monkeypatch, tmp_path):
    """Fresh runtime and a throwaway workspace for every test."""
    monkeypatch.setenv("PISANO_TOWER_HOME", str(tmp_path / "workspace"))
    _rt_reset()
    yield
    _rt_reset()


@pytest.fixture
def solver():
    return TowerSolver()
