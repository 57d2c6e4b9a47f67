"""Pytest configuration and fixtures for testing."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from dealroom.main import app
from dealroom.database import Base, get_db


# In-memory SQLite shared across the connections of one test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Bias per option order: positive favors party A, negative party B
BALANCED_BIASES = [0.8, 0.4, 0.0, -0.4, -0.8]
SKEWED_BIASES = [0.8, 0.4, 0.1, -0.4, -0.8]


def _options(prefix: str, biases: list[float]) -> list[dict]:
    return [
        {
            "code": f"{prefix}_{order}",
            "label": f"{prefix.title()} option {order}",
            "order": order,
            "bias_party_a": bias,
            "bias_party_b": bias,
        }
        for order, bias in enumerate(biases, start=1)
    ]


NDA_TEMPLATE = {
    "contract_type": "nda",
    "display_name": "Mutual NDA",
    "description": "Mutual non-disclosure agreement",
    "clauses": [
        {
            "clause_key": "term",
            "title": "Confidentiality Term",
            "category": "duration",
            "order": 1,
            "options": _options("term", [0.0, 0.0, 0.0]),
        },
        {
            "clause_key": "liability",
            "title": "Liability Cap",
            "category": "risk",
            "order": 2,
            "options": _options("liability", BALANCED_BIASES),
        },
        {
            "clause_key": "non_solicit",
            "title": "Non-Solicitation",
            "category": "restrictions",
            "order": 3,
            "options": _options("non_solicit", SKEWED_BIASES),
        },
    ],
}


@pytest.fixture(scope="function")
async def db() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database for each test.
    """
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    TestSessionLocal = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    # Create all tables
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Create session
    async with TestSessionLocal() as session:
        yield session

    # Drop all tables after test
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create test client with database dependency override.
    """
    async def override_get_db():
        try:
            yield db
        except Exception:
            await db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def register(client: AsyncClient, email: str, name: str, entitlements=None) -> tuple[dict, str]:
    response = await client.post(
        "/api/users",
        json={"email": email, "name": name, "company": f"{name} Inc", "entitlements": entitlements or []}
    )
    assert response.status_code == 201
    data = response.json()
    return data, data["api_key"]


@pytest.fixture
async def initiator(client: AsyncClient) -> tuple[dict, str]:
    """
    Register the user who opens deals (party A).

    Returns:
        Tuple of (user_data, api_key)
    """
    return await register(client, "alice@acme.test", "Alice")


@pytest.fixture
async def respondent(client: AsyncClient) -> tuple[dict, str]:
    """
    Register the invited counterparty (party B).

    Returns:
        Tuple of (user_data, api_key)
    """
    return await register(client, "bob@globex.test", "Bob")


@pytest.fixture
async def nda_template(client: AsyncClient, initiator: tuple[dict, str]) -> dict:
    """
    Import the three-clause NDA template.

    Returns:
        Template data with clauses and options
    """
    _, key = initiator
    response = await client.post("/api/templates", headers={"X-User-Key": key}, json=NDA_TEMPLATE)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
async def draft_deal(client: AsyncClient, initiator: tuple[dict, str], nda_template: dict) -> dict:
    """A DRAFT deal with only the initiator present."""
    _, key = initiator
    response = await client.post(
        "/api/deals",
        headers={"X-User-Key": key},
        json={"name": "Acme / Globex NDA", "contract_type": "nda", "governing_law": "CALIFORNIA"}
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
async def deal(
    client: AsyncClient,
    initiator: tuple[dict, str],
    respondent: tuple[dict, str],
    nda_template: dict,
    draft_deal: dict,
) -> dict:
    """
    A deal with both parties joined and nothing selected yet.

    Returns:
        Dict with deal_id, the API keys of both parties and per-position
        clauses mapping option order to option id
    """
    _, initiator_key = initiator
    _, respondent_key = respondent

    invite = await client.post(
        f"/api/deals/{draft_deal['id']}/invitations",
        headers={"X-User-Key": initiator_key},
        json={"email": "bob@globex.test", "name": "Bob", "company": "Globex"}
    )
    assert invite.status_code == 201

    accept = await client.post(
        f"/api/invitations/{invite.json()['token']}/accept",
        headers={"X-User-Key": respondent_key}
    )
    assert accept.status_code == 200

    options_by_template = {
        c["id"]: {o["order"]: o["id"] for o in c["options"]} for c in nda_template["clauses"]
    }
    clauses = [
        {"id": c["id"], "title": c["title"], "options": options_by_template[c["clause_template_id"]]}
        for c in draft_deal["clauses"]
    ]
    return {
        "deal_id": draft_deal["id"],
        "a_key": initiator_key,
        "b_key": respondent_key,
        "clauses": clauses,
    }


async def select_and_submit(client: AsyncClient, key: str, deal_id: str, picks: list[dict]) -> dict:
    """Bulk-save one party's selections and submit them."""
    response = await client.post(
        f"/api/deals/{deal_id}/selections/bulk",
        headers={"X-User-Key": key},
        json={"selections": picks}
    )
    assert response.status_code == 200
    response = await client.post(f"/api/deals/{deal_id}/submit", headers={"X-User-Key": key})
    assert response.status_code == 200
    return response.json()


@pytest.fixture
async def negotiating_deal(client: AsyncClient, deal: dict) -> dict:
    """
    Both parties submitted:
      - clause 1: same option
      - clause 2: opposite ends with equal stakes
      - clause 3: party A invested, party B flexible
    """
    term, liability, non_solicit = deal["clauses"]

    await select_and_submit(client, deal["a_key"], deal["deal_id"], [
        {"clause_id": term["id"], "option_id": term["options"][2]},
        {"clause_id": liability["id"], "option_id": liability["options"][1], "priority": 4, "flexibility": 2},
        {"clause_id": non_solicit["id"], "option_id": non_solicit["options"][1], "priority": 4, "flexibility": 2},
    ])
    await select_and_submit(client, deal["b_key"], deal["deal_id"], [
        {"clause_id": term["id"], "option_id": term["options"][2]},
        {"clause_id": liability["id"], "option_id": liability["options"][5], "priority": 4, "flexibility": 2},
        {"clause_id": non_solicit["id"], "option_id": non_solicit["options"][3], "priority": 2, "flexibility": 5},
    ])
    return deal
