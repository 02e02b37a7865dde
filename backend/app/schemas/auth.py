import uuid

from pydantic import Field

from app.models.user import Role
from app.schemas.common import CamelModel


class LoginRequest(CamelModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6)
    device_id: str | None = None


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class AccessTokenOut(CamelModel):
    access_token: str


class UserOut(CamelModel):
    id: uuid.UUID
    name: str
    username: str
    email: str
    role: Role
    employee_id: str | None = None
    designation: str | None = None
    department: str | None = None
    profile_photo_url: str | None = None


class LoginData(CamelModel):
    user: UserOut
    tokens: TokenPair
