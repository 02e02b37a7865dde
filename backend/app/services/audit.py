"""Audit recorder: best-effort, append-only writes to the audit_logs table."""
import asyncio
import logging
import uuid
from typing import Any

from fastapi import Request

from app.db.session import Database
from app.models.audit import AuditAction, AuditLog

logger = logging.getLogger(__name__)


def request_details(request: Request, **extra: Any) -> dict[str, Any]:
    """Collect client ip / user agent plus any extra fields for an audit entry."""
    details: dict[str, Any] = {
        "ip": request.client.host if request.client else None,
        "userAgent": request.headers.get("user-agent"),
    }
    details.update(extra)
    return details


class AuditRecorder:
    """Writes one immutable row per call, in its own short transaction.

    A failed or slow write is logged and dropped: it must never abort or
    indefinitely delay the request that triggered it.
    """

    def __init__(self, database: Database, timeout: float):
        self._database = database
        self._timeout = timeout

    async def record(
        self,
        actor_id: uuid.UUID | str | None,
        action: AuditAction,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Append a single audit entry.

        Args:
            actor_id: User who performed the action (None for anonymous callers).
            action: One of the AuditAction vocabulary.
            details: JSON-serialisable context, e.g. ip, userAgent, deviceId.
        """
        try:
            await asyncio.wait_for(self._write(actor_id, action, details), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Audit write timed out after %.1fs: %s actor=%s", self._timeout, action.value, actor_id)
        except Exception:
            logger.exception("Audit write failed: %s actor=%s", action.value, actor_id)

    async def _write(
        self,
        actor_id: uuid.UUID | str | None,
        action: AuditAction,
        details: dict[str, Any] | None,
    ) -> None:
        entry = AuditLog(
            actor_id=uuid.UUID(str(actor_id)) if actor_id else None,
            action=action.value,
            details=details,
        )
        async with self._database.session() as session:
            session.add(entry)
            await session.commit()
        logger.debug("Audit: %s actor=%s", action.value, actor_id)


def get_audit_recorder(request: Request) -> AuditRecorder:
    return request.app.state.audit
