"""Tests for default user seeding."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.security import verify_password
from app.core.seed import seed_users


def _seed_session(existing):
    result = MagicMock()
    result.scalars.return_value.first.return_value = existing
    session = AsyncMock()
    session.execute = AsyncMock(return_value=result)
    session.add = MagicMock()
    session.commit = AsyncMock()
    return session


@pytest.mark.asyncio
async def test_seed_creates_default_users_with_hashed_passwords():
    session = _seed_session(existing=None)

    await seed_users(session)

    added = {call.args[0].username: call.args[0] for call in session.add.call_args_list}
    assert set(added) == {"admin", "backend", "field"}
    admin = added["admin"]
    assert admin.role == "ADMIN"
    assert admin.is_active is True
    assert admin.password_hash != "admin123"
    assert verify_password("admin123", admin.password_hash)
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_seed_skips_existing_users():
    session = _seed_session(existing=object())

    await seed_users(session)

    session.add.assert_not_called()
    session.commit.assert_awaited_once()
