import uuid
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from app.core.errors import Forbidden, InvalidToken, Unauthorized
from app.core.security import decode_access_token
from app.models.user import Role

# auto_error=False so a missing header surfaces as our UNAUTHORIZED envelope
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Caller identity taken from a verified access token."""

    id: uuid.UUID
    username: str
    role: Role
    device_id: str | None = None


def _identity_from_token(token: str) -> Identity:
    claims = decode_access_token(token)
    try:
        user_id = uuid.UUID(claims.user_id)
    except ValueError:
        raise InvalidToken()
    return Identity(id=user_id, username=claims.username, role=claims.role, device_id=claims.device_id)


async def get_current_identity(
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> Identity:
    """Validate the bearer token. Never touches the database."""
    if not token:
        raise Unauthorized()
    return _identity_from_token(token)


async def get_optional_identity(
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> Identity | None:
    """Like get_current_identity, but anonymous callers get None.

    A token that is present but invalid or expired is still rejected.
    """
    if not token:
        return None
    return _identity_from_token(token)


def require_role(*roles: Role):
    """Dependency factory: raises 403 if the token's role is not in the allowed set."""
    allowed = frozenset(roles)

    async def check(identity: Annotated[Identity, Depends(get_current_identity)]) -> Identity:
        if identity.role not in allowed:
            raise Forbidden(
                details={
                    "requiredRoles": sorted(r.value for r in allowed),
                    "userRole": identity.role.value,
                },
            )
        return identity

    return check
