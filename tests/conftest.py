"""Pytest configuration shared by all tests.

Packages live under ``packages/`` and ``libs/db/src`` rather than at the repo
root, so both are put on ``sys.path`` here for runs without an editable
install.

The DB client keeps one engine per process and refuses to switch URLs, so
every test that bootstraps a database gets a fresh file and the engine is
disposed afterwards.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
sys.path[:0] = [
    p
    for p in [str(_ROOT / "packages"), str(_ROOT / "libs/db/src"), str(_ROOT)]
    if p not in sys.path
]

import pytest  # noqa: E402
from db.client import dispose_engine  # noqa: E402
from ledger_import import logging_setup  # noqa: E402

from tests.helpers.db import bootstrap_sqlite_db  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep host configuration out of tests and drop any shared engine.

    Logging state is restored too: the CLI callback binds a handler to the
    runner's (short-lived) stderr.
    """

    for name in (
        "DATABASE_URL",
        "LEDGER_IMPORT_USER_ID",
        "LEDGER_IMPORT_SEED_DEFAULTS",
        "LEDGER_IMPORT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    pkg = logging.getLogger(logging_setup.PACKAGE_LOGGER)
    saved = (list(pkg.handlers), pkg.level, pkg.propagate)
    monkeypatch.setattr(logging_setup, "_handler", logging_setup._handler)
    yield
    pkg.handlers[:] = saved[0]
    pkg.setLevel(saved[1])
    pkg.propagate = saved[2]
    dispose_engine()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return bootstrap_sqlite_db(tmp_path / "ledger.db")
