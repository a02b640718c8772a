# This project was developed with assistance from AI tools.
"""Mock database utilities for functional tests.

Provides an AsyncMock session that handles the result patterns used by the
service layer:
  1. ``.scalars().all()`` -- list queries (board, directory, notifications)
  2. ``.unique().scalar_one_or_none()`` -- job detail queries
  3. ``.scalar_one_or_none()`` -- single-row lookups (duplicates, counters, users)
  4. ``.rowcount`` -- bulk updates
"""

from unittest.mock import AsyncMock, MagicMock

from fastapi import Request
from portal_db import get_db

from portal_api.middleware.auth import get_current_user
from portal_api.schemas.auth import UserContext


def make_mock_session(
    items: list | None = None,
    single: object | None = None,
    lookup: object | None = None,
    rowcount: int = 0,
) -> AsyncMock:
    """Build an AsyncMock session that returns predictable query results.

    Args:
        items: ORM objects for ``.scalars().all()``.
        single: Job returned by ``.unique().scalar_one_or_none()``.
        lookup: Row returned by plain ``.scalar_one_or_none()``.
        rowcount: Rows affected by bulk updates.
    """
    session = AsyncMock()

    mock_result = MagicMock()
    mock_result.scalars.return_value.all.return_value = items or []
    mock_result.unique.return_value.scalars.return_value.all.return_value = items or []
    mock_result.unique.return_value.scalar_one_or_none.return_value = single
    mock_result.scalar_one_or_none.return_value = lookup
    mock_result.rowcount = rowcount

    session.execute = AsyncMock(return_value=mock_result)

    # session.add() is synchronous in SQLAlchemy -- use MagicMock to avoid
    # RuntimeWarning about unawaited coroutines from AsyncMock.
    session.add = MagicMock()
    session.add_all = MagicMock()
    return session


def assign_ids_on_commit(session: AsyncMock, job) -> None:
    """Give new child rows the ids a real flush would."""

    def _flush_children():
        next_id = 900
        for collection in (job.comments, job.attachments, job.move_requests):
            for row in collection:
                if getattr(row, "id", None) is None:
                    next_id += 1
                    row.id = next_id

    session.commit = AsyncMock(side_effect=_flush_children)


def configure_app_for_persona(app, user: UserContext, session: AsyncMock) -> None:
    """Override get_current_user and get_db on the real app."""

    async def fake_user(request: Request):
        return user

    async def fake_db():
        yield session

    app.dependency_overrides[get_current_user] = fake_user
    app.dependency_overrides[get_db] = fake_db
