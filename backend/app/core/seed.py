"""Seed default users into the database."""
import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import hash_password
from app.db.session import Database
from app.models.user import Role, User

logger = logging.getLogger(__name__)

# Default users: (username, password, name, email, role, employee_id, designation, department)
DEFAULT_USERS = [
    ("admin", "admin123", "System Administrator", "admin@caseflow.local", Role.ADMIN, "EMP001", "Administrator", "IT"),
    ("backend", "backend123", "Backend Operator", "backend@caseflow.local", Role.BACKEND, "EMP002", "Operations Executive", "Operations"),
    ("field", "field123", "Field Agent", "field@caseflow.local", Role.FIELD, "EMP003", "Field Verifier", "Field Operations"),
]


async def seed_users(db: AsyncSession) -> None:
    """Insert default users that do not exist yet (matched by username)."""
    for username, password, name, email, role, employee_id, designation, department in DEFAULT_USERS:
        existing = await db.execute(select(User).where(User.username == username))
        if existing.scalars().first() is None:
            db.add(
                User(
                    username=username,
                    name=name,
                    email=email,
                    password_hash=hash_password(password),
                    role=role.value,
                    employee_id=employee_id,
                    designation=designation,
                    department=department,
                    is_active=True,
                )
            )
            logger.info("Seeded user: %s (%s)", username, role.value)
        else:
            logger.info("User already exists: %s, skipping", username)

    await db.commit()


async def run_seed() -> None:
    database = Database(settings)
    database.connect()
    try:
        async with database.session() as db:
            await seed_users(db)
    finally:
        await database.dispose()
    logger.info("Seeding complete.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(run_seed())
