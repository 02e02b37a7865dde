"""Authentication endpoints: login, logout, token refresh and device registration.

Sessions are stateless: login signs an access/refresh token pair and logout is
recorded for audit only. There is no server-side revocation; a token stays
valid until it expires.
"""
import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.deps import Identity, get_current_identity, get_optional_identity
from app.core.errors import InvalidCredentials, InvalidToken, NotFound
from app.core.limiter import limiter
from app.core.security import create_access_token, decode_refresh_token, issue_session
from app.db.session import get_session
from app.models.audit import AuditAction
from app.schemas.auth import AccessTokenOut, LoginData, LoginRequest, RefreshRequest, TokenPair, UserOut
from app.schemas.common import ApiResponse
from app.schemas.device import DeviceRegistered, DeviceRegisterRequest
from app.services import auth as auth_svc
from app.services import devices as device_svc
from app.services.audit import AuditRecorder, get_audit_recorder, request_details

logger = logging.getLogger(__name__)

router = APIRouter()


# ─── POST /auth/login ───

@router.post(
    "/login",
    response_model=ApiResponse[LoginData],
    response_model_exclude_none=True,
    summary="Exchange username/password for an access + refresh token pair",
)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_session)],
    audit: Annotated[AuditRecorder, Depends(get_audit_recorder)],
):
    try:
        user = await auth_svc.authenticate_user(db, body.username, body.password)
    except InvalidCredentials:
        await audit.record(
            None,
            AuditAction.LOGIN_FAILED,
            request_details(request, username=body.username, deviceId=body.device_id),
        )
        raise

    tokens = issue_session(user, body.device_id)

    await audit.record(user.id, AuditAction.LOGIN, request_details(request, deviceId=body.device_id))
    logger.info("User %s logged in", user.username)

    return ApiResponse(
        message="Login successful",
        data=LoginData(
            user=UserOut.model_validate(user),
            tokens=TokenPair(access_token=tokens.access_token, refresh_token=tokens.refresh_token),
        ),
    )


# ─── POST /auth/logout ───

@router.post(
    "/logout",
    response_model=ApiResponse,
    response_model_exclude_none=True,
    summary="Record a logout (tokens are not revoked server-side)",
)
async def logout(
    request: Request,
    identity: Annotated[Identity, Depends(get_current_identity)],
    audit: Annotated[AuditRecorder, Depends(get_audit_recorder)],
):
    await audit.record(identity.id, AuditAction.LOGOUT, request_details(request, deviceId=identity.device_id))
    logger.info("User %s logged out", identity.username)
    return ApiResponse(message="Logout successful")


# ─── POST /auth/refresh ───

@router.post(
    "/refresh",
    response_model=ApiResponse[AccessTokenOut],
    response_model_exclude_none=True,
    summary="Issue a new access token from a refresh token",
)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def refresh(
    request: Request,
    body: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_session)],
    audit: Annotated[AuditRecorder, Depends(get_audit_recorder)],
):
    claims = decode_refresh_token(body.refresh_token)
    try:
        user_id = uuid.UUID(claims.user_id)
    except ValueError:
        raise InvalidToken()

    # Role and username come from the current record, not the old token
    user = await auth_svc.get_active_user_by_id(db, user_id)
    if user is None:
        raise InvalidToken()

    access_token = create_access_token(str(user.id), user.username, user.role, claims.device_id)
    await audit.record(user.id, AuditAction.TOKEN_REFRESHED, request_details(request, deviceId=claims.device_id))

    return ApiResponse(
        message="Token refreshed successfully",
        data=AccessTokenOut(access_token=access_token),
    )


# ─── GET /auth/me ───

@router.get(
    "/me",
    response_model=ApiResponse[UserOut],
    response_model_exclude_none=True,
    summary="Current user profile",
)
async def me(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_session)],
):
    user = await auth_svc.get_active_user_by_id(db, identity.id)
    if user is None:
        raise NotFound("User not found")
    return ApiResponse(data=UserOut.model_validate(user))


# ─── POST /auth/device/register ───

@router.post(
    "/device/register",
    response_model=ApiResponse[DeviceRegistered],
    response_model_exclude_none=True,
    summary="Register or update a mobile device (login not required)",
)
async def register_device(
    request: Request,
    body: DeviceRegisterRequest,
    db: Annotated[AsyncSession, Depends(get_session)],
    audit: Annotated[AuditRecorder, Depends(get_audit_recorder)],
    identity: Annotated[Identity | None, Depends(get_optional_identity)],
):
    actor_id = identity.id if identity else None
    device = await device_svc.register_device(
        db,
        device_id=body.device_id,
        platform=body.platform,
        model=body.model,
        os_version=body.os_version,
        app_version=body.app_version,
        user_id=actor_id,
    )

    await audit.record(
        actor_id,
        AuditAction.DEVICE_REGISTERED,
        request_details(
            request,
            deviceId=device.device_id,
            platform=body.platform.value,
            appVersion=body.app_version,
        ),
    )

    return ApiResponse(
        message="Device registration successful",
        data=DeviceRegistered(device_id=device.device_id, registered_at=device.updated_at),
    )
