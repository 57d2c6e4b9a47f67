"""Tests for the signing gate."""

import pytest
from httpx import AsyncClient


async def agree_everything(client: AsyncClient, deal: dict) -> None:
    """Generate a round and have both parties accept every open suggestion."""
    response = await client.post(
        f"/api/deals/{deal['deal_id']}/compromise/generate",
        headers={"X-User-Key": deal["a_key"]}
    )
    assert response.status_code == 200

    for clause in deal["clauses"][1:]:
        for key in (deal["a_key"], deal["b_key"]):
            response = await client.post(
                f"/api/clauses/{clause['id']}/compromise/respond",
                headers={"X-User-Key": key},
                json={"accept": True}
            )
            assert response.status_code == 200


@pytest.mark.asyncio
async def test_signing_requires_all_clauses_agreed(client: AsyncClient, negotiating_deal):
    response = await client.post(
        f"/api/deals/{negotiating_deal['deal_id']}/signing",
        headers={"X-User-Key": negotiating_deal["a_key"]}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "All clauses must be agreed upon before signing"


@pytest.mark.asyncio
async def test_both_signatures_complete_the_deal(client: AsyncClient, negotiating_deal):
    deal = negotiating_deal
    a_headers = {"X-User-Key": deal["a_key"]}
    b_headers = {"X-User-Key": deal["b_key"]}
    await agree_everything(client, deal)

    response = await client.get(f"/api/deals/{deal['deal_id']}", headers=a_headers)
    assert response.json()["status"] == "AGREED"

    response = await client.post(f"/api/deals/{deal['deal_id']}/signing", headers=a_headers)
    assert response.status_code == 201
    signing_request = response.json()
    assert signing_request["status"] == "PENDING"
    assert signing_request["provider"] == "type-to-sign"

    response = await client.post(f"/api/deals/{deal['deal_id']}/signing", headers=b_headers)
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "A signing request is already in progress"

    signatures_url = f"/api/signing/{signing_request['id']}/signatures"

    response = await client.post(signatures_url, headers=a_headers, json={"role": "INITIATOR", "signature": "Alice"})
    assert response.status_code == 200
    assert response.json()["status"] == "PARTIALLY_SIGNED"
    assert response.json()["party_a_signature"] == "Alice"

    response = await client.post(signatures_url, headers=a_headers, json={"role": "INITIATOR", "signature": "Alice"})
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Party A has already signed"

    # Only the respondent may sign for the respondent
    response = await client.post(signatures_url, headers=a_headers, json={"role": "RESPONDENT", "signature": "Bob"})
    assert response.status_code == 403

    response = await client.post(signatures_url, headers=b_headers, json={"role": "RESPONDENT", "signature": "Bob"})
    assert response.status_code == 200
    assert response.json()["status"] == "COMPLETED"
    assert response.json()["completed_at"] is not None

    response = await client.get(f"/api/deals/{deal['deal_id']}", headers=b_headers)
    assert response.json()["status"] == "COMPLETED"

    response = await client.get(f"/api/deals/{deal['deal_id']}/signing", headers=b_headers)
    assert response.json()["id"] == signing_request["id"]

    # Completed deals are frozen
    response = await client.post(f"/api/deals/{deal['deal_id']}/cancel", headers=a_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_signing_status_before_initiation(client: AsyncClient, negotiating_deal):
    response = await client.get(
        f"/api/deals/{negotiating_deal['deal_id']}/signing",
        headers={"X-User-Key": negotiating_deal["a_key"]}
    )

    assert response.status_code == 200
    assert response.json() is None
