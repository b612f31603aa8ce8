# This project was developed with assistance from AI tools.
"""Mock database utilities for functional tests.

``FakeSession`` stands in for an ``AsyncSession`` over a small in-memory
table store so that multi-step flows (submit, approve, approve...) run
through the real services. It understands the statement shapes the
service layer issues:

  1. ``select(func.count(...))`` -- ``.scalar()``
  2. ``select(Model)`` / ``select(Model.column)`` -- ``.scalars().all()``
     and ``.scalar_one_or_none()``
  3. ``update(LoanWorkflow)`` -- ``.rowcount``, honoring the stage/version guard

WHERE clauses are honored for simple ``column == value`` comparisons only.
"""

from datetime import UTC, datetime
from itertools import count
from unittest.mock import AsyncMock, MagicMock

from db import DatabaseService, get_db, get_db_service
from fastapi import Request
from sqlalchemy import Update

from src.middleware.auth import get_current_user
from src.schemas.auth import UserContext

_NOW = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


class FakeSession:
    """Async session double backed by per-table row lists."""

    def __init__(self, *rows):
        self.tables: dict[str, list] = {}
        self._ids = count(1000)
        self.commits = 0
        self.rollbacks = 0
        self.fail_commits = False
        for row in rows:
            self._store(row)

    # -- table store --------------------------------------------------------

    def _store(self, row):
        if getattr(row, "id", None) is None:
            row.id = next(self._ids)
        for attr in ("created_at", "updated_at"):
            if hasattr(type(row), attr) and getattr(row, attr, None) is None:
                setattr(row, attr, _NOW)
        if hasattr(type(row), "is_read") and row.is_read is None:
            row.is_read = False
        table = self.tables.setdefault(row.__tablename__, [])
        if row not in table:
            table.append(row)

    def rows(self, model) -> list:
        return self.tables.get(model.__tablename__, [])

    # -- AsyncSession surface -----------------------------------------------

    def add(self, row):
        self._store(row)

    async def flush(self):
        return None

    async def commit(self):
        if self.fail_commits:
            raise RuntimeError("commit failed")
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1

    async def refresh(self, _row):
        return None

    async def close(self):
        return None

    async def execute(self, stmt):
        params = stmt.compile().params
        if isinstance(stmt, Update):
            return self._update(stmt, params)

        table = stmt.get_final_froms()[0]
        candidates = [
            row for row in self.tables.get(table.name, []) if _matches(row, table, params)
        ]

        result = MagicMock()
        columns = list(stmt.selected_columns)
        if len(columns) == 1 and columns[0].name == "count":
            result.scalar.return_value = len(candidates)
            return result
        if len(columns) == 1:
            values = [getattr(row, columns[0].name) for row in candidates]
        else:
            values = candidates
        result.scalars.return_value.all.return_value = values
        result.scalar_one_or_none.return_value = values[0] if values else None
        return result

    def _update(self, stmt, params):
        table = stmt.table
        result = MagicMock()
        result.rowcount = 0
        for row in self.tables.get(table.name, []):
            if not _matches(row, table, params):
                continue
            for key, value in params.items():
                if key in table.c:
                    setattr(row, key, value)
            result.rowcount += 1
        return result


def _matches(row, table, params) -> bool:
    """Apply ``column == value`` binds (named ``<column>_1``) to a row."""
    for key, value in params.items():
        column, _, suffix = key.rpartition("_")
        if suffix == "1" and column in table.c and getattr(row, column) != value:
            return False
    return True


def make_db_service(healthy: bool = True) -> MagicMock:
    service = MagicMock(spec=DatabaseService)
    service.health_check = AsyncMock(return_value=healthy)
    return service


def configure_app_for_persona(app, user: UserContext, session) -> None:
    """Override get_current_user and get_db on the real app."""

    async def fake_user(request: Request):
        return user

    async def fake_db():
        yield session

    app.dependency_overrides[get_current_user] = fake_user
    app.dependency_overrides[get_db] = fake_db
    app.dependency_overrides[get_db_service] = lambda: make_db_service()
