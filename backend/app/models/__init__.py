from app.models.user import Role, User
from app.models.device import Device, Platform
from app.models.audit import AuditAction, AuditLog

__all__ = [
    "Role", "User",
    "Device", "Platform",
    "AuditAction", "AuditLog",
]
