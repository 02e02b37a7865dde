import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings
from app.core.errors import InvalidToken, TokenExpired
from app.models.user import Role

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


# ─── Password ─────────────────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # unrecognised or malformed stored hash
        logger.warning("Stored password hash could not be verified")
        return False


_DUMMY_HASH = hash_password("dummy-password-for-timing")


def verify_against_dummy(plain: str) -> bool:
    """Spend the same bcrypt work as a real check when no user matched."""
    pwd_context.verify(plain, _DUMMY_HASH)
    return False


# ─── JWT ──────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AccessClaims:
    user_id: str
    username: str
    role: Role
    device_id: str | None = None


@dataclass(frozen=True)
class RefreshClaims:
    user_id: str
    device_id: str | None = None


@dataclass(frozen=True)
class SessionTokens:
    access_token: str
    refresh_token: str


def _encode(claims: dict[str, Any], lifetime: timedelta, secret: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + lifetime}
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def _decode(token: str, secret: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require_exp": True, "require_iat": True},
        )
    except ExpiredSignatureError:
        raise TokenExpired()
    except JWTError:
        raise InvalidToken()


def create_access_token(user_id: str, username: str, role: Role | str, device_id: str | None = None) -> str:
    claims: dict[str, Any] = {"userId": user_id, "username": username, "role": Role(role).value}
    if device_id:
        claims["deviceId"] = device_id
    return _encode(
        claims,
        timedelta(hours=settings.JWT_ACCESS_TOKEN_EXPIRE_HOURS),
        settings.JWT_SECRET,
    )


def create_refresh_token(user_id: str, device_id: str | None = None) -> str:
    claims: dict[str, Any] = {"userId": user_id}
    if device_id:
        claims["deviceId"] = device_id
    return _encode(
        claims,
        timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS),
        settings.JWT_REFRESH_SECRET,
    )


def issue_session(user, device_id: str | None = None) -> SessionTokens:
    """Sign an access/refresh pair for ``user``. Nothing is persisted."""
    user_id = str(user.id)
    return SessionTokens(
        access_token=create_access_token(user_id, user.username, user.role, device_id),
        refresh_token=create_refresh_token(user_id, device_id),
    )


def decode_access_token(token: str) -> AccessClaims:
    """Raises TokenExpired / InvalidToken."""
    payload = _decode(token, settings.JWT_SECRET)
    user_id = payload.get("userId")
    username = payload.get("username")
    if not user_id or not username:
        raise InvalidToken()
    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise InvalidToken()
    return AccessClaims(
        user_id=str(user_id),
        username=username,
        role=role,
        device_id=payload.get("deviceId"),
    )


def decode_refresh_token(token: str) -> RefreshClaims:
    """Raises TokenExpired / InvalidToken."""
    payload = _decode(token, settings.JWT_REFRESH_SECRET)
    user_id = payload.get("userId")
    if not user_id:
        raise InvalidToken()
    return RefreshClaims(user_id=str(user_id), device_id=payload.get("deviceId"))
