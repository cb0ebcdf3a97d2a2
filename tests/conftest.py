"""Shared test fixtures."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from turfbook.core.database import get_db
from turfbook.main import app


class FakeSession:
    """Stands in for AsyncSession in route tests.

    Store functions are patched per test; execute() results can be set via
    result_of() for the few queries routes run inline.
    """

    def __init__(self):
        self.added = []
        self.deleted = []
        self.execute = AsyncMock(return_value=result_of([]))

    def add(self, obj):
        self.added.append(obj)

    async def flush(self):
        for i, obj in enumerate(self.added, start=1):
            if getattr(obj, "id", None) is None:
                obj.id = i

    async def refresh(self, obj):
        # server_default columns
        if getattr(obj, "created_at", None) is None:
            obj.created_at = datetime.now(UTC)

    async def delete(self, obj):
        self.deleted.append(obj)


def result_of(rows: list) -> MagicMock:
    """A fake query result exposing scalars().all() and scalar_one_or_none()."""
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    result.scalar_one_or_none.return_value = rows[0] if rows else None
    return result


@pytest.fixture
def db():
    return FakeSession()


@pytest.fixture
async def client(db):
    async def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
