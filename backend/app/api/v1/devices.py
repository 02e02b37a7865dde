"""Device administration endpoints."""
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import Identity, require_role
from app.db.session import get_session
from app.models.user import Role
from app.schemas.common import ApiResponse
from app.schemas.device import DeviceOut
from app.services import devices as device_svc

router = APIRouter()


@router.get(
    "/user/{user_id}",
    response_model=ApiResponse[list[DeviceOut]],
    summary="List devices registered to a user (ADMIN, BACKEND)",
)
async def list_user_devices(
    user_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    _: Annotated[Identity, Depends(require_role(Role.ADMIN, Role.BACKEND))],
):
    devices = await device_svc.list_devices_for_user(db, user_id)
    return ApiResponse(data=[DeviceOut.model_validate(d) for d in devices])
