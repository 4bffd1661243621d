"""Pytest configuration: import paths and per-test isolation.

The workspace keeps the application under ``packages/`` and the shared DB
library under ``libs/db/src``; both go on ``sys.path`` so the suite runs from
a plain checkout as well as from an editable install.

Every test starts without ``EXPENSE_ASSISTANT_*``/``DATABASE_URL`` variables
from the developer's shell, and cached SQLAlchemy engines are disposed after
each test so per-test SQLite files never leak between cases.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
sys.path[:0] = [
    p
    for p in [str(_ROOT / "packages"), str(_ROOT / "libs" / "db" / "src"), str(_ROOT)]
    if p not in sys.path
]


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for key in list(os.environ):
        if key.startswith("EXPENSE_ASSISTANT_") or key == "DATABASE_URL":
            monkeypatch.delenv(key, raising=False)
    yield
    from db.client import dispose_engines

    dispose_engines()
