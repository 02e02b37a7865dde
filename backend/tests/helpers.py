"""Shared fakes for endpoint tests: users, sessions and an in-memory audit recorder."""
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from app.core.security import hash_password
from app.main import app
from app.db.session import get_session
from app.services.audit import get_audit_recorder


class FakeUser:
    """Minimal user stub returned by DB mock."""

    def __init__(
        self,
        username: str = "admin",
        password: str = "admin123",
        role: str = "ADMIN",
        user_id: uuid.UUID | None = None,
    ):
        self.id = user_id or uuid.UUID("f96955d0-752f-4e0c-b1dc-d26d8dd1460e")
        self.username = username
        self.name = "Admin User"
        self.email = f"{username}@example.com"
        self.password_hash = hash_password(password)
        self.role = role
        self.employee_id = "EMP001"
        self.designation = "Administrator"
        self.department = "IT"
        self.profile_photo_url = None
        self.is_active = True
        self.deleted_at = None


class FakeDevice:
    def __init__(self, device_id: str = "device-1", model: str = "Pixel 8", user_id: uuid.UUID | None = None):
        now = datetime.now(timezone.utc)
        self.id = uuid.uuid4()
        self.device_id = device_id
        self.platform = "ANDROID"
        self.model = model
        self.os_version = "14"
        self.app_version = "1.2.0"
        self.user_id = user_id
        self.created_at = now
        self.updated_at = now


class FakeAuditRecorder:
    """Collects (actor_id, action, details) instead of writing rows."""

    def __init__(self):
        self.entries: list[tuple] = []

    async def record(self, actor_id, action, details=None):
        self.entries.append((actor_id, action, details))

    def actions(self) -> list[str]:
        return [action.value for _, action, _ in self.entries]


def make_mock_session(scalar=None, scalars: list | None = None):
    """AsyncMock session whose execute() returns ``scalar`` / ``scalars``."""
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = scalar
    mock_result.scalar_one.return_value = scalar
    mock_result.scalars.return_value.all.return_value = scalars or []

    mock_session = AsyncMock()
    mock_session.execute = AsyncMock(return_value=mock_result)
    mock_session.commit = AsyncMock()
    return mock_session


def override_dependencies(mock_session, recorder: FakeAuditRecorder | None = None) -> FakeAuditRecorder:
    recorder = recorder or FakeAuditRecorder()

    async def _session_override():
        yield mock_session

    app.dependency_overrides[get_session] = _session_override
    app.dependency_overrides[get_audit_recorder] = lambda: recorder
    return recorder
