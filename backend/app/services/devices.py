"""Device registry: atomic upsert keyed on the client-generated device id."""
import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.device import Device, Platform

logger = logging.getLogger(__name__)


def build_device_upsert(
    *,
    device_id: str,
    platform: Platform,
    model: str,
    os_version: str,
    app_version: str,
    user_id: uuid.UUID | None = None,
):
    """INSERT ... ON CONFLICT (device_id) DO UPDATE ... RETURNING devices.*

    Mutable fields are overwritten (last writer wins). The owner is replaced
    only when the caller is authenticated; an anonymous re-registration keeps
    the existing owner.
    """
    stmt = insert(Device).values(
        device_id=device_id,
        platform=Platform(platform).value,
        model=model,
        os_version=os_version,
        app_version=app_version,
        user_id=user_id,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Device.device_id],
        set_={
            "platform": stmt.excluded.platform,
            "model": stmt.excluded.model,
            "os_version": stmt.excluded.os_version,
            "app_version": stmt.excluded.app_version,
            "user_id": func.coalesce(stmt.excluded.user_id, Device.user_id),
            "updated_at": func.now(),
        },
    )
    return stmt.returning(Device)


async def register_device(
    db: AsyncSession,
    *,
    device_id: str,
    platform: Platform,
    model: str,
    os_version: str,
    app_version: str,
    user_id: uuid.UUID | None = None,
) -> Device:
    stmt = build_device_upsert(
        device_id=device_id,
        platform=platform,
        model=model,
        os_version=os_version,
        app_version=app_version,
        user_id=user_id,
    )
    result = await db.execute(stmt, execution_options={"populate_existing": True})
    device = result.scalar_one()
    await db.commit()
    logger.info("Device %s registered/updated", device_id)
    return device


async def list_devices_for_user(db: AsyncSession, user_id: uuid.UUID) -> list[Device]:
    result = await db.execute(
        select(Device).where(Device.user_id == user_id).order_by(Device.updated_at.desc())
    )
    return list(result.scalars().all())
