"""Tests for deal reconciliation, optimistic concurrency and the audit sink."""

import pytest
from httpx import AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.core.exceptions import ConflictError
from dealroom.models.deal import Deal
from dealroom.services import audit_service
from dealroom.services import lifecycle_service as lifecycle


@pytest.mark.asyncio
async def test_stale_deal_write_is_a_conflict(client: AsyncClient, db: AsyncSession, deal):
    loaded = await lifecycle.load_deal(db, deal["deal_id"])

    # Another writer bumps the version behind this session's back
    await db.execute(
        update(Deal)
        .where(Deal.id == loaded.id)
        .values(version=Deal.version + 1)
        .execution_options(synchronize_session=False)
    )

    loaded.name = "Renamed from a stale copy"
    lifecycle.touch(loaded)
    with pytest.raises(ConflictError):
        await lifecycle.commit(db, loaded)

    fresh = await lifecycle.load_deal(db, deal["deal_id"])
    assert fresh.name == "Acme / Globex NDA"


@pytest.mark.asyncio
async def test_reconcile_waits_for_every_clause(db: AsyncSession, negotiating_deal):
    loaded = await lifecycle.load_deal(db, negotiating_deal["deal_id"])

    assert lifecycle.reconcile_deal(loaded) is False
    assert loaded.status.value == "NEGOTIATING"
    assert lifecycle.agreed_count(loaded) == 0


@pytest.mark.asyncio
async def test_audit_failure_does_not_fail_the_operation(client: AsyncClient, initiator, nda_template, monkeypatch):
    def broken_audit_log(**kwargs):
        raise RuntimeError("audit store unavailable")

    monkeypatch.setattr(audit_service, "AuditLog", broken_audit_log)
    _, key = initiator

    response = await client.post(
        "/api/deals",
        headers={"X-User-Key": key},
        json={"name": "Audit outage", "contract_type": "nda", "governing_law": "SPAIN"}
    )

    assert response.status_code == 201
    assert response.json()["status"] == "DRAFT"


@pytest.mark.asyncio
async def test_audit_trail_is_party_only(client: AsyncClient, initiator, respondent, draft_deal):
    _, key = initiator
    _, outsider_key = respondent

    response = await client.get(f"/api/deals/{draft_deal['id']}/audit", headers={"X-User-Key": key})
    assert response.status_code == 200
    entry = response.json()[0]
    assert entry["action"] == "DEAL_ROOM_CREATED"
    assert entry["details"] == {"contract_type": "nda", "governing_law": "CALIFORNIA"}

    response = await client.get(f"/api/deals/{draft_deal['id']}/audit", headers={"X-User-Key": outsider_key})
    assert response.status_code == 403
