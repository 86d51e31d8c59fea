"""Shared fixtures for dsnprobe tests."""

from __future__ import annotations

import os
from typing import Any, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest


class FakeCursor:
    """Lightweight stand-in for a DB-API 2.0 cursor.

    Supply ``rows`` as the result of the next ``execute()`` call.
    """

    def __init__(self, rows: Optional[List[Tuple[Any, ...]]] = None) -> None:
        self._rows = list(rows or [])
        self.executed: List[str] = []

    def execute(self, sql: str, params: Any = None) -> None:
        self.executed.append(sql)

    def fetchone(self) -> Optional[Tuple[Any, ...]]:
        return self._rows[0] if self._rows else None


@pytest.fixture()
def fake_cursor():
    """Return the ``FakeCursor`` *class* so tests can instantiate with custom data."""
    return FakeCursor


@pytest.fixture()
def mock_conn():
    """Return a ``MagicMock`` that looks like a DB-API 2.0 connection."""
    conn = MagicMock()
    return conn


@pytest.fixture()
def clean_env(monkeypatch):
    """Remove every ``DB_*`` variable so defaults apply."""
    for name in list(os.environ):
        if name.startswith("DB_"):
            monkeypatch.delenv(name, raising=False)
