"""Tests for compromise rounds, responses and counter-proposals."""

import pytest
from httpx import AsyncClient


async def generate(client: AsyncClient, deal: dict, key: str = None) -> dict:
    response = await client.post(
        f"/api/deals/{deal['deal_id']}/compromise/generate",
        headers={"X-User-Key": key or deal["a_key"]}
    )
    assert response.status_code == 200
    return response.json()


async def agreed_count(client: AsyncClient, deal: dict) -> int:
    response = await client.get(
        f"/api/deals/{deal['deal_id']}/progress",
        headers={"X-User-Key": deal["a_key"]}
    )
    assert response.status_code == 200
    return response.json()["agreed_clauses"]


async def current_suggestions(client: AsyncClient, deal: dict) -> dict:
    response = await client.get(
        f"/api/deals/{deal['deal_id']}/compromise",
        headers={"X-User-Key": deal["a_key"]}
    )
    assert response.status_code == 200
    return {view["clause_id"]: view for view in response.json()}


@pytest.mark.asyncio
async def test_generate_first_round(client: AsyncClient, negotiating_deal):
    """Same choice is agreed outright; the rest get engine suggestions."""
    deal = negotiating_deal
    term, liability, non_solicit = deal["clauses"]

    data = await generate(client, deal)

    assert data["round_number"] == 1
    suggestions = {s["deal_clause_id"]: s for s in data["suggestions"]}
    assert len(suggestions) == 3

    same = suggestions[term["id"]]
    assert same["suggested_option_id"] == term["options"][2]
    assert same["satisfaction_party_a"] == 100
    assert same["satisfaction_party_b"] == 100
    assert same["party_a_accepted"] is True
    assert same["party_b_accepted"] is True

    middle = suggestions[liability["id"]]
    assert middle["suggested_option_id"] == liability["options"][3]
    assert middle["satisfaction_party_a"] == 50
    assert middle["satisfaction_party_b"] == 50
    assert middle["party_a_accepted"] is None
    assert middle["party_b_accepted"] is None

    leaning = suggestions[non_solicit["id"]]
    assert leaning["suggested_option_id"] == non_solicit["options"][1]
    assert leaning["satisfaction_party_a"] == 100
    assert leaning["satisfaction_party_b"] == 38

    response = await client.get(f"/api/deals/{deal['deal_id']}", headers={"X-User-Key": deal["b_key"]})
    body = response.json()
    assert body["status"] == "NEGOTIATING"
    assert body["current_round"] == 1
    assert [c["status"] for c in body["clauses"]] == ["AGREED", "SUGGESTED", "SUGGESTED"]
    assert body["clauses"][0]["agreed_option_id"] == term["options"][2]
    assert {p["status"] for p in body["parties"]} == {"REVIEWING"}


@pytest.mark.asyncio
async def test_generate_requires_both_submissions(client: AsyncClient, deal):
    response = await client.post(
        f"/api/deals/{deal['deal_id']}/compromise/generate",
        headers={"X-User-Key": deal["a_key"]}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Both parties must submit their selections first"


@pytest.mark.asyncio
async def test_respond_and_counter_propose_to_agreement(client: AsyncClient, negotiating_deal):
    """Agreement only ever grows, and the last clause closes the deal."""
    deal = negotiating_deal
    _, liability, non_solicit = deal["clauses"]
    a_headers = {"X-User-Key": deal["a_key"]}
    b_headers = {"X-User-Key": deal["b_key"]}
    counts = []

    await generate(client, deal)
    counts.append(await agreed_count(client, deal))

    # Party A accepts: only their slot is written
    response = await client.post(
        f"/api/clauses/{liability['id']}/compromise/respond",
        headers=a_headers,
        json={"accept": True, "round_number": 1}
    )
    assert response.status_code == 200
    assert response.json()["party_a_accepted"] is True
    assert response.json()["party_b_accepted"] is None
    counts.append(await agreed_count(client, deal))

    response = await client.post(
        f"/api/clauses/{non_solicit['id']}/compromise/respond",
        headers=b_headers,
        json={"accept": False}
    )
    assert response.status_code == 200
    assert response.json()["party_b_accepted"] is False
    counts.append(await agreed_count(client, deal))

    response = await client.post(
        f"/api/clauses/{liability['id']}/compromise/respond",
        headers=b_headers,
        json={"accept": True}
    )
    assert response.status_code == 200
    counts.append(await agreed_count(client, deal))

    # Answering an agreed clause is rejected
    response = await client.post(
        f"/api/clauses/{liability['id']}/compromise/respond",
        headers=a_headers,
        json={"accept": False}
    )
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "This clause has already been agreed"

    # Party B counters with the option between both choices
    response = await client.post(
        f"/api/clauses/{non_solicit['id']}/counter-proposals",
        headers=b_headers,
        json={"option_id": non_solicit["options"][2], "rationale": "Six months is standard"}
    )
    assert response.status_code == 201
    proposal = response.json()
    assert proposal["status"] == "PENDING"

    response = await client.post(
        f"/api/counter-proposals/{proposal['id']}/respond",
        headers=b_headers,
        json={"accept": True}
    )
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "You cannot respond to your own counter-proposal"

    response = await client.get(f"/api/deals/{deal['deal_id']}/counter-proposals", headers=a_headers)
    listing = response.json()
    assert [p["id"] for p in listing["pending_for_me"]] == [proposal["id"]]
    assert listing["from_me"] == []

    response = await client.post(
        f"/api/counter-proposals/{proposal['id']}/respond",
        headers=a_headers,
        json={"accept": True}
    )
    assert response.status_code == 200
    assert response.json() == {"accepted": True, "all_agreed": True}
    counts.append(await agreed_count(client, deal))

    assert counts == [1, 1, 1, 2, 3]
    assert counts == sorted(counts)

    response = await client.get(f"/api/deals/{deal['deal_id']}", headers=a_headers)
    body = response.json()
    assert body["status"] == "AGREED"
    assert body["clauses"][2]["agreed_option_id"] == non_solicit["options"][2]
    assert {p["status"] for p in body["parties"]} == {"ACCEPTED"}

    # A resolved proposal cannot be answered again
    response = await client.post(
        f"/api/counter-proposals/{proposal['id']}/respond",
        headers=a_headers,
        json={"accept": False}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_respond_without_suggestion(client: AsyncClient, negotiating_deal):
    clause = negotiating_deal["clauses"][1]

    response = await client.post(
        f"/api/clauses/{clause['id']}/compromise/respond",
        headers={"X-User-Key": negotiating_deal["a_key"]},
        json={"accept": True}
    )

    assert response.status_code == 404
    assert response.json()["detail"]["message"] == "No compromise suggestion found"


@pytest.mark.asyncio
async def test_respond_to_superseded_round_is_rejected(client: AsyncClient, negotiating_deal):
    deal = negotiating_deal
    liability = deal["clauses"][1]
    await generate(client, deal)

    response = await client.post(
        f"/api/deals/{deal['deal_id']}/compromise/regenerate",
        headers={"X-User-Key": deal["b_key"]}
    )
    assert response.status_code == 200
    assert response.json() == {"round_number": 2, "suggestion_count": 2}

    response = await client.post(
        f"/api/clauses/{liability['id']}/compromise/respond",
        headers={"X-User-Key": deal["a_key"]},
        json={"accept": True, "round_number": 1}
    )
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Round 1 has been superseded by round 2"

    response = await client.post(
        f"/api/clauses/{liability['id']}/compromise/respond",
        headers={"X-User-Key": deal["a_key"]},
        json={"accept": True, "round_number": 2}
    )
    assert response.status_code == 200
    assert response.json()["round_number"] == 2


@pytest.mark.asyncio
async def test_regenerate_adopts_counter_proposal_inside_span(client: AsyncClient, negotiating_deal):
    deal = negotiating_deal
    non_solicit = deal["clauses"][2]
    await generate(client, deal)

    response = await client.post(
        f"/api/clauses/{non_solicit['id']}/counter-proposals",
        headers={"X-User-Key": deal["b_key"]},
        json={"option_id": non_solicit["options"][2]}
    )
    assert response.status_code == 201

    response = await client.post(
        f"/api/deals/{deal['deal_id']}/compromise/regenerate",
        headers={"X-User-Key": deal["a_key"]}
    )
    assert response.status_code == 200
    assert response.json()["round_number"] == 2

    suggestion = (await current_suggestions(client, deal))[non_solicit["id"]]["suggestion"]
    assert suggestion["round_number"] == 2
    assert suggestion["suggested_option_id"] == non_solicit["options"][2]
    assert suggestion["satisfaction_party_a"] == 75
    assert suggestion["satisfaction_party_b"] == 75
    assert "incorporates the counter-proposal" in suggestion["reasoning"]
    assert suggestion["party_a_accepted"] is None
    assert suggestion["party_b_accepted"] is None

    response = await client.get(
        f"/api/deals/{deal['deal_id']}/counter-proposals",
        headers={"X-User-Key": deal["b_key"]}
    )
    assert [p["status"] for p in response.json()["from_me"]] == ["SUPERSEDED"]


@pytest.mark.asyncio
async def test_regenerate_ignores_counter_proposal_outside_span(client: AsyncClient, negotiating_deal):
    deal = negotiating_deal
    non_solicit = deal["clauses"][2]
    await generate(client, deal)

    # Party A chose order 1 and party B order 3; order 5 is outside both
    response = await client.post(
        f"/api/clauses/{non_solicit['id']}/counter-proposals",
        headers={"X-User-Key": deal["b_key"]},
        json={"option_id": non_solicit["options"][5]}
    )
    assert response.status_code == 201

    response = await client.post(
        f"/api/deals/{deal['deal_id']}/compromise/regenerate",
        headers={"X-User-Key": deal["a_key"]}
    )
    assert response.status_code == 200

    suggestion = (await current_suggestions(client, deal))[non_solicit["id"]]["suggestion"]
    assert suggestion["round_number"] == 2
    assert suggestion["suggested_option_id"] == non_solicit["options"][1]
    assert suggestion["satisfaction_party_a"] == 100
    assert suggestion["satisfaction_party_b"] == 38
    assert "counter-proposal" not in suggestion["reasoning"]


@pytest.mark.asyncio
async def test_regenerate_before_first_round(client: AsyncClient, negotiating_deal):
    response = await client.post(
        f"/api/deals/{negotiating_deal['deal_id']}/compromise/regenerate",
        headers={"X-User-Key": negotiating_deal["a_key"]}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "No active negotiation round"


@pytest.mark.asyncio
async def test_counter_proposal_preconditions(client: AsyncClient, negotiating_deal):
    deal = negotiating_deal
    term, liability, _ = deal["clauses"]
    b_headers = {"X-User-Key": deal["b_key"]}

    response = await client.post(
        f"/api/clauses/{liability['id']}/counter-proposals",
        headers=b_headers,
        json={"option_id": liability["options"][2]}
    )
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "No active negotiation round"

    await generate(client, deal)

    response = await client.post(
        f"/api/clauses/{liability['id']}/counter-proposals",
        headers=b_headers,
        json={"option_id": term["options"][1]}
    )
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Invalid option for this clause"

    response = await client.post(
        f"/api/clauses/{term['id']}/counter-proposals",
        headers=b_headers,
        json={"option_id": term["options"][1]}
    )
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "This clause has already been agreed"


@pytest.mark.asyncio
async def test_satisfaction_scores_are_priority_weighted(client: AsyncClient, negotiating_deal):
    deal = negotiating_deal
    non_solicit = deal["clauses"][2]
    await generate(client, deal)

    response = await client.get(
        f"/api/deals/{deal['deal_id']}/compromise/satisfaction",
        headers={"X-User-Key": deal["a_key"]}
    )
    assert response.status_code == 200
    assert response.json() == {
        "party_a": {"name": "Alice", "satisfaction": 82},
        "party_b": {"name": "Bob", "satisfaction": 64},
    }

    # Raising B's priority on their worst clause drags their average down
    response = await client.post(
        f"/api/clauses/{non_solicit['id']}/counter-proposals",
        headers={"X-User-Key": deal["b_key"]},
        json={"option_id": non_solicit["options"][2], "new_priority": 5}
    )
    assert response.status_code == 201

    response = await client.get(
        f"/api/deals/{deal['deal_id']}/compromise/satisfaction",
        headers={"X-User-Key": deal["b_key"]}
    )
    assert response.json()["party_b"]["satisfaction"] == 58


@pytest.mark.asyncio
async def test_current_view_shows_both_selections(client: AsyncClient, negotiating_deal):
    deal = negotiating_deal
    await generate(client, deal)

    views = await current_suggestions(client, deal)

    assert len(views) == 3
    for view in views.values():
        assert len(view["selections"]) == 2
        assert view["suggestion"] is not None
    liability = views[deal["clauses"][1]["id"]]
    assert liability["clause_title"] == "Liability Cap"
    assert [o["order"] for o in liability["options"]] == [1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_outsider_cannot_see_negotiation(client: AsyncClient, negotiating_deal):
    response = await client.post("/api/users", json={"email": "eve@example.test"})
    outsider_key = response.json()["api_key"]

    response = await client.get(
        f"/api/deals/{negotiating_deal['deal_id']}/compromise",
        headers={"X-User-Key": outsider_key}
    )

    assert response.status_code == 403
    assert response.json()["detail"]["message"] == "You do not have access to this deal room"


@pytest.mark.asyncio
async def test_generate_is_audited(client: AsyncClient, negotiating_deal):
    deal = negotiating_deal
    await generate(client, deal)

    response = await client.get(
        f"/api/deals/{deal['deal_id']}/audit",
        headers={"X-User-Key": deal["a_key"]}
    )
    assert response.status_code == 200
    actions = [entry["action"] for entry in response.json()]
    assert actions[0] == "DEAL_ROOM_CREATED"
    assert actions.count("SELECTIONS_SUBMITTED") == 2
    assert actions[-1] == "COMPROMISE_GENERATED"
    assert response.json()[-1]["details"]["round_number"] == 1


@pytest.mark.asyncio
async def test_rejecting_counter_proposal_keeps_negotiating(client: AsyncClient, negotiating_deal):
    deal = negotiating_deal
    non_solicit = deal["clauses"][2]
    await generate(client, deal)

    response = await client.post(
        f"/api/clauses/{non_solicit['id']}/counter-proposals",
        headers={"X-User-Key": deal["b_key"]},
        json={"option_id": non_solicit["options"][2]}
    )
    proposal = response.json()

    response = await client.post(
        f"/api/counter-proposals/{proposal['id']}/respond",
        headers={"X-User-Key": deal["a_key"]},
        json={"accept": False}
    )
    assert response.status_code == 200
    assert response.json() == {"accepted": False, "all_agreed": False}

    response = await client.get(
        f"/api/deals/{deal['deal_id']}/counter-proposals",
        headers={"X-User-Key": deal["b_key"]}
    )
    assert [p["status"] for p in response.json()["from_me"]] == ["REJECTED"]

    response = await client.get(f"/api/deals/{deal['deal_id']}", headers={"X-User-Key": deal["a_key"]})
    body = response.json()
    assert body["status"] == "NEGOTIATING"
    assert body["clauses"][2]["status"] == "SUGGESTED"
    assert body["clauses"][2]["agreed_option_id"] is None


@pytest.mark.asyncio
async def test_regenerate_leaves_party_statuses(client: AsyncClient, negotiating_deal):
    deal = negotiating_deal
    await generate(client, deal)

    response = await client.post(
        f"/api/deals/{deal['deal_id']}/compromise/regenerate",
        headers={"X-User-Key": deal["a_key"]}
    )
    assert response.status_code == 200

    response = await client.get(f"/api/deals/{deal['deal_id']}", headers={"X-User-Key": deal["b_key"]})
    body = response.json()
    assert body["current_round"] == 2
    assert {p["status"] for p in body["parties"]} == {"REVIEWING"}


@pytest.mark.asyncio
async def test_agreeing_a_clause_supersedes_its_counter_proposals(client: AsyncClient, negotiating_deal):
    deal = negotiating_deal
    liability = deal["clauses"][1]
    a_headers = {"X-User-Key": deal["a_key"]}
    b_headers = {"X-User-Key": deal["b_key"]}
    await generate(client, deal)

    response = await client.post(
        f"/api/clauses/{liability['id']}/counter-proposals",
        headers=b_headers,
        json={"option_id": liability["options"][4]}
    )
    assert response.status_code == 201

    # B changes their mind and both accept the engine's suggestion
    for headers in (b_headers, a_headers):
        response = await client.post(
            f"/api/clauses/{liability['id']}/compromise/respond",
            headers=headers,
            json={"accept": True}
        )
        assert response.status_code == 200

    response = await client.get(f"/api/deals/{deal['deal_id']}/counter-proposals", headers=a_headers)
    listing = response.json()
    assert listing["pending_for_me"] == []
    assert [p["status"] for p in listing["to_me"]] == ["SUPERSEDED"]
    assert listing["to_me"][0]["resolved_at"] is not None
