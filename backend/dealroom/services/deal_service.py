"""Deal service for opening, listing and progressing deal rooms."""

import logging
from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.core.exceptions import BadRequestError, ForbiddenError
from dealroom.models.deal import Deal, DealClause, Party
from dealroom.models.enums import DealStatus, PartyRole, PartyStatus
from dealroom.models.user import User
from dealroom.schemas.deal import DealCreate, DealProgress, PartyProgress
from dealroom.services import audit_service, catalog_service, entitlement_service
from dealroom.services import lifecycle_service as lifecycle
from dealroom.services.compromise_engine import round_half_up

logger = logging.getLogger(__name__)


async def create_deal(db: AsyncSession, user: User, data: DealCreate) -> Deal:
    """
    Open a deal room for a catalog contract type.

    The deal starts in DRAFT with the caller as INITIATOR and one PENDING
    clause per template clause.

    Raises:
        NotFoundError: If the contract type is not in the catalog
        ForbiddenError: If the user is not entitled to the template
    """
    template = await catalog_service.get_template(db, data.contract_type)
    entitlement_service.check_entitlement(user, template)

    deal = Deal(
        name=data.name,
        contract_template_id=template.id,
        governing_law=data.governing_law,
        contract_language=data.contract_language,
        status=DealStatus.DRAFT,
        current_round=0,
    )
    deal.parties.append(
        Party(
            role=PartyRole.INITIATOR,
            status=PartyStatus.PENDING,
            user_id=user.id,
            email=user.email,
            name=user.name,
            company=user.company,
        )
    )
    for position, clause_template in enumerate(template.clauses, start=1):
        deal.clauses.append(DealClause(clause_template_id=clause_template.id, position=position))

    db.add(deal)
    await db.commit()

    logger.info(f"Created deal {deal.id} ({template.contract_type}) for user {user.id}")
    await audit_service.record(db, deal.id, user.id, "DEAL_ROOM_CREATED", {
        "contract_type": template.contract_type,
        "governing_law": data.governing_law.value,
    })
    return await lifecycle.load_deal(db, deal.id)


async def list_deals(db: AsyncSession, user: User) -> List[Deal]:
    """Deals the user is a party to, most recently active first. Cancelled deals are hidden."""
    result = await db.execute(
        select(Deal)
        .join(Party, Party.deal_id == Deal.id)
        .where(Party.user_id == user.id, Deal.status != DealStatus.CANCELLED)
        .order_by(Deal.updated_at.desc())
    )
    return list(result.unique().scalars().all())


async def get_deal(db: AsyncSession, deal_id: str, user: User) -> Deal:
    deal = await lifecycle.load_deal(db, deal_id)
    lifecycle.require_party(deal, user)
    return deal


async def rename_deal(db: AsyncSession, deal_id: str, user: User, name: str) -> Deal:
    """
    Raises:
        ForbiddenError: If the caller is not the initiator
    """
    deal = await lifecycle.load_deal(db, deal_id)
    party = lifecycle.require_party(deal, user)
    if party.role != PartyRole.INITIATOR:
        raise ForbiddenError("Only the initiator can update the deal room name")
    lifecycle.assert_open(deal)

    deal.name = name
    lifecycle.touch(deal)
    await lifecycle.commit(db, deal)
    return deal


async def cancel_deal(db: AsyncSession, deal_id: str, user: User) -> Deal:
    """Either party may cancel a deal that has not completed."""
    deal = await lifecycle.load_deal(db, deal_id)
    party = lifecycle.require_party(deal, user)
    lifecycle.assert_open(deal)

    previous = deal.status
    lifecycle.transition_deal(deal, DealStatus.CANCELLED)
    await lifecycle.commit(db, deal)

    await audit_service.record(db, deal.id, user.id, "DEAL_ROOM_CANCELLED", {
        "role": party.role.value,
        "previous_status": previous.value,
    })
    return deal


async def get_progress(db: AsyncSession, deal_id: str, user: User) -> DealProgress:
    """Selection counts per party and the share of agreed clauses."""
    deal = await lifecycle.load_deal(db, deal_id)
    lifecycle.require_party(deal, user)

    total = len(deal.clauses)
    agreed = lifecycle.agreed_count(deal)
    parties = [
        PartyProgress(
            role=party.role,
            status=party.status,
            name=party.display_name,
            selections_made=sum(1 for c in deal.clauses if c.selection_for(party.id)),
        )
        for party in deal.parties
    ]
    return DealProgress(
        deal_id=deal.id,
        status=deal.status,
        current_round=deal.current_round,
        total_clauses=total,
        agreed_clauses=agreed,
        agreed_percentage=round_half_up(agreed / total * 100) if total else 0,
        parties=parties,
    )


async def submit_all(db: AsyncSession, deal_id: str, user: User) -> bool:
    """
    Lock in the caller's selections.

    Returns:
        Whether both parties have now submitted

    Raises:
        BadRequestError: If already submitted or a clause has no selection
    """
    deal = await lifecycle.load_deal(db, deal_id)
    party = lifecycle.require_party(deal, user)
    lifecycle.assert_open(deal)

    if party.status != PartyStatus.PENDING:
        raise BadRequestError("You have already submitted your selections")
    if any(not c.selection_for(party.id) for c in deal.clauses):
        raise BadRequestError("You must make selections for all clauses before submitting")

    lifecycle.transition_party(party, PartyStatus.SUBMITTED)
    party.submitted_at = datetime.utcnow()

    other = next((p for p in deal.parties if p.id != party.id), None)
    both_submitted = other is not None and other.status != PartyStatus.PENDING
    if both_submitted:
        lifecycle.transition_deal(deal, DealStatus.NEGOTIATING)
    else:
        lifecycle.touch(deal)

    await lifecycle.commit(db, deal)

    logger.info(f"Deal {deal.id}: {party.role.value} submitted selections")
    await audit_service.record(db, deal.id, user.id, "SELECTIONS_SUBMITTED", {
        "role": party.role.value,
        "both_submitted": both_submitted,
    })
    return both_submitted
