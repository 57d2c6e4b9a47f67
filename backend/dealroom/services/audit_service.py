"""
Audit sink: records state-changing deal operations.

Recording is fire-and-forget. It runs after the operation has committed
and a failure is logged, never raised, so it cannot undo or block the
operation it describes.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.core.events import event_bus
from dealroom.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


async def record(
    db: AsyncSession,
    deal_id: Optional[str],
    actor_id: Optional[str],
    action: str,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Write an audit entry and broadcast it to event stream subscribers.

    Args:
        db: Database session (the primary operation has already committed)
        deal_id: Deal the action applies to
        actor_id: User who performed it
        action: Action name, e.g. "COMPROMISE_GENERATED"
        details: JSON-serializable payload
    """
    details = details or {}
    try:
        # Own session so a failed write cannot expire the caller's objects
        async with AsyncSession(bind=db.bind, expire_on_commit=False) as audit_db:
            audit_db.add(AuditLog(deal_id=deal_id, actor_id=actor_id, action=action, details=details))
            await audit_db.commit()
    except Exception as e:
        logger.warning(f"Failed to record audit event {action} for deal {deal_id}: {e}")

    try:
        await event_bus.publish(action, {"deal_id": deal_id, "actor_id": actor_id, **details})
    except Exception as e:
        logger.warning(f"Failed to publish event {action}: {e}")


async def list_for_deal(db: AsyncSession, deal_id: str) -> List[AuditLog]:
    result = await db.execute(
        select(AuditLog)
        .where(AuditLog.deal_id == deal_id)
        .order_by(AuditLog.created_at, AuditLog.id)
    )
    return list(result.scalars().all())
