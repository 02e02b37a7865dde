import enum
import uuid
from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, CreatedAtMixin, UUIDMixin


class AuditAction(str, enum.Enum):
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    DEVICE_REGISTERED = "DEVICE_REGISTERED"


class AuditLog(Base, UUIDMixin, CreatedAtMixin):
    """Immutable audit trail for security-relevant actions."""

    __tablename__ = "audit_logs"

    # No FK: audit history must outlive the user and must not block its removal
    actor_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)  # ip, userAgent, deviceId
