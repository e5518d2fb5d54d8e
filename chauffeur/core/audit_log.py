"""Audit trail for admin changes to rate tables, locations and vehicles"""
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from chauffeur.models.audit import Audit
from chauffeur.core.enums import AuditAction
from chauffeur.core.metrics import audit_logs_created
from chauffeur.utils.hashing import payload_hash

logger = logging.getLogger(__name__)


async def log_audit(
    db: AsyncSession,
    user_id: int,
    action: AuditAction,
    payload=None,
    resource_id: Optional[int] = None,
) -> None:

    try:
        if hasattr(payload, "model_dump"):
            payload_dict = payload.model_dump(mode="json", exclude_unset=True)
        elif isinstance(payload, dict):
            payload_dict = payload
        else:
            payload_dict = {}

        audit_record = Audit(
            user_id=int(user_id),
            action=str(action),
            resource_id=resource_id,
            payload_hash=payload_hash(payload_dict),
        )

        db.add(audit_record)
        await db.flush()
        audit_logs_created.labels(action=str(action)).inc()

    except Exception as e:
        logger.error(f"Audit logging failed for action {action}: {e}", exc_info=True)
