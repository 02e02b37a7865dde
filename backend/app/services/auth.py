"""Credential store lookups and password verification."""
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.core import security
from app.core.errors import InvalidCredentials
from app.models.user import User

logger = logging.getLogger(__name__)


def _active_users():
    return select(User).where(User.is_active.is_(True), User.deleted_at.is_(None))


async def get_active_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(_active_users().where(User.username == username))
    return result.scalar_one_or_none()


async def get_active_user_by_id(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    result = await db.execute(_active_users().where(User.id == user_id))
    return result.scalar_one_or_none()


async def authenticate_user(db: AsyncSession, username: str, password: str) -> User:
    """Return the active user matching the credentials or raise InvalidCredentials.

    Unknown, disabled and wrong-password cases are indistinguishable to the
    caller, including in the amount of bcrypt work performed.
    """
    user = await get_active_user_by_username(db, username)
    if user is None:
        await run_in_threadpool(security.verify_against_dummy, password)
        raise InvalidCredentials()
    if not await run_in_threadpool(security.verify_password, password, user.password_hash):
        raise InvalidCredentials()
    return user
