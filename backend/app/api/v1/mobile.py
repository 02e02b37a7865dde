"""Mobile app endpoints: version checks, app configuration and the field agent's devices."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.deps import Identity, require_role
from app.core.limiter import limiter
from app.db.session import get_session
from app.models.user import Role
from app.schemas.common import ApiResponse
from app.schemas.device import DeviceOut
from app.schemas.mobile import (
    AppConfigOut,
    AppEndpoints,
    AppLimits,
    FeatureFlags,
    VersionCheckOut,
    VersionCheckRequest,
)
from app.services import app_version
from app.services import devices as device_svc

router = APIRouter()


# ─── POST /mobile/version-check ───

@router.post(
    "/version-check",
    response_model=ApiResponse[VersionCheckOut],
    summary="Tell the app whether it must or should update",
)
@limiter.limit(settings.MOBILE_RATE_LIMIT)
async def version_check(request: Request, body: VersionCheckRequest):
    return ApiResponse(
        data=VersionCheckOut(
            update_required=app_version.should_update(body.current_version, settings),
            force_update=app_version.should_force_update(body.current_version, settings),
            latest_version=settings.MOBILE_API_VERSION,
            min_supported_version=settings.MOBILE_MIN_SUPPORTED_VERSION,
            download_url=app_version.download_url(body.platform, settings),
        )
    )


# ─── GET /mobile/config ───

@router.get(
    "/config",
    response_model=ApiResponse[AppConfigOut],
    summary="Feature flags, limits and endpoints for the mobile app",
)
@limiter.limit(settings.MOBILE_RATE_LIMIT)
async def app_config(request: Request):
    return ApiResponse(
        data=AppConfigOut(
            api_version=settings.MOBILE_API_VERSION,
            min_supported_version=settings.MOBILE_MIN_SUPPORTED_VERSION,
            force_update_version=settings.MOBILE_FORCE_UPDATE_VERSION,
            features=FeatureFlags(
                offline_mode=settings.MOBILE_ENABLE_OFFLINE_MODE,
                background_sync=settings.MOBILE_ENABLE_BACKGROUND_SYNC,
                biometric_auth=settings.MOBILE_ENABLE_BIOMETRIC_AUTH,
                dark_mode=settings.MOBILE_ENABLE_DARK_MODE,
                analytics=settings.MOBILE_ENABLE_ANALYTICS,
            ),
            limits=AppLimits(
                max_file_size=settings.MOBILE_MAX_FILE_SIZE,
                max_files_per_case=settings.MOBILE_MAX_FILES_PER_CASE,
                location_accuracy_threshold=settings.MOBILE_LOCATION_ACCURACY_THRESHOLD,
                sync_batch_size=settings.MOBILE_SYNC_BATCH_SIZE,
            ),
            endpoints=AppEndpoints(
                api_base_url=f"{str(request.base_url).rstrip('/')}/api/v1",
                ws_url=settings.WS_URL,
            ),
        )
    )


# ─── GET /mobile/devices ───

@router.get(
    "/devices",
    response_model=ApiResponse[list[DeviceOut]],
    summary="Devices registered to the calling field agent (FIELD only)",
)
@limiter.limit(settings.MOBILE_RATE_LIMIT)
async def my_devices(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_session)],
    identity: Annotated[Identity, Depends(require_role(Role.FIELD))],
):
    devices = await device_svc.list_devices_for_user(db, identity.id)
    return ApiResponse(data=[DeviceOut.model_validate(d) for d in devices])
