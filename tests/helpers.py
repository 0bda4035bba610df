"""
tests/helpers.py -- Assertion helpers shared by the test modules.
"""

from __future__ import annotations

from sqlalchemy import text

from auth.store import AccountStore

_COUNTABLE = {"users", "customers", "histories"}


def count_rows(store: AccountStore, table: str) -> int:
    """Return the number of rows in one of the store's tables."""
    if table not in _COUNTABLE:
        raise ValueError(f"unknown table {table!r}")
    with store.engine.connect() as conn:
        return conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar() or 0  # noqa: S608
