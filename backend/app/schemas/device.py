import uuid
from datetime import datetime
from typing import Annotated

from pydantic import StringConstraints

from app.models.device import Platform
from app.schemas.common import CamelModel

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class DeviceRegisterRequest(CamelModel):
    device_id: NonEmptyStr
    platform: Platform
    model: NonEmptyStr
    os_version: NonEmptyStr
    app_version: NonEmptyStr


class DeviceRegistered(CamelModel):
    device_id: str
    registered_at: datetime


class DeviceOut(CamelModel):
    id: uuid.UUID
    device_id: str
    platform: Platform
    model: str
    os_version: str
    app_version: str
    user_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime
