"""Events API router for SSE and the deal audit trail."""

import json
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sse_starlette.sse import EventSourceResponse

from dealroom.api.deps import get_db, get_current_user
from dealroom.core.events import event_bus
from dealroom.models.user import User
from dealroom.services import audit_service, deal_service

router = APIRouter()


@router.get("/deals/{deal_id}/events")
async def event_stream(
    deal_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Server-Sent Events (SSE) stream of one deal room's activity.

    Only parties to the deal may subscribe.

    Usage:
        const eventSource = new EventSource('/api/deals/{deal_id}/events');
        eventSource.addEventListener('COMPROMISE_GENERATED', (e) => {
            console.log(JSON.parse(e.data));
        });
    """
    await deal_service.get_deal(db, deal_id, current_user)

    async def generate():
        async for event in event_bus.subscribe(deal_id):
            # Check if client disconnected
            if await request.is_disconnected():
                break

            yield {
                "event": event["type"],
                "data": json.dumps(event["data"])
            }

    return EventSourceResponse(generate())


@router.get("/deals/{deal_id}/audit")
async def get_audit_trail(
    deal_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> List[Dict[str, Any]]:
    """Audit entries for a deal, oldest first."""
    await deal_service.get_deal(db, deal_id, current_user)
    entries = await audit_service.list_for_deal(db, deal_id)
    return [
        {
            "action": entry.action,
            "actor_id": entry.actor_id,
            "details": entry.details,
            "created_at": entry.created_at.isoformat(),
        }
        for entry in entries
    ]
