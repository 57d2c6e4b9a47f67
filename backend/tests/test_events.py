"""Tests for the deal room event stream."""

import asyncio

import pytest
from httpx import AsyncClient

from dealroom.core.events import EventBus


@pytest.mark.asyncio
async def test_subscription_only_sees_its_deal():
    bus = EventBus()
    stream = bus.subscribe("deal-1")
    next_event = asyncio.create_task(stream.__anext__())
    await asyncio.sleep(0)
    assert bus.subscriber_count == 1

    await bus.publish("DEAL_ROOM_CREATED", {"deal_id": "deal-2"})
    await bus.publish("DEAL_ROOM_CANCELLED", {"deal_id": "deal-1"})

    event = await asyncio.wait_for(next_event, timeout=1)
    assert event["type"] == "DEAL_ROOM_CANCELLED"
    assert event["data"] == {"deal_id": "deal-1"}

    await stream.aclose()
    assert bus.subscriber_count == 0


@pytest.mark.asyncio
async def test_event_stream_is_party_only(client: AsyncClient, respondent, draft_deal):
    _, outsider_key = respondent

    response = await client.get(
        f"/api/deals/{draft_deal['id']}/events",
        headers={"X-User-Key": outsider_key}
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_event_stream_requires_valid_key(client: AsyncClient, draft_deal):
    response = await client.get(
        f"/api/deals/{draft_deal['id']}/events",
        headers={"X-User-Key": "not-a-real-key"}
    )

    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "INVALID_API_KEY"


@pytest.mark.asyncio
async def test_event_stream_unknown_deal(client: AsyncClient, initiator):
    _, key = initiator

    response = await client.get("/api/deals/no-such-deal/events", headers={"X-User-Key": key})

    assert response.status_code == 404
