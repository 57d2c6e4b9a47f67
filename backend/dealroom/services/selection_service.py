"""
Selection store: each party's option, priority and flexibility per clause.

Selections are editable until the owning party submits; after that every
write is rejected.
"""

import logging
from datetime import datetime
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.core.exceptions import BadRequestError
from dealroom.models.deal import Deal, DealClause, Party, Selection
from dealroom.models.enums import PartyStatus
from dealroom.models.user import User
from dealroom.schemas.selection import BulkSelectionItem, SelectionUpsert
from dealroom.services import lifecycle_service as lifecycle

logger = logging.getLogger(__name__)


def _assert_editable(deal: Deal, party: Party) -> None:
    lifecycle.assert_open(deal)
    if party.status != PartyStatus.PENDING:
        raise BadRequestError("You have already submitted your selections")


def _write(clause: DealClause, party: Party, data: SelectionUpsert) -> Selection:
    """Insert or update the party's selection in place."""
    selection = clause.selection_for(party.id)
    if selection is None:
        selection = Selection(deal_clause_id=clause.id, party_id=party.id, option_id=data.option_id)
        clause.selections.append(selection)

    selection.option_id = data.option_id
    selection.priority = data.priority
    selection.flexibility = data.flexibility
    selection.notes = data.notes
    selection.updated_at = datetime.utcnow()
    return selection


def both_submitted(deal: Deal) -> bool:
    return len(deal.parties) == 2 and all(p.status != PartyStatus.PENDING for p in deal.parties)


async def upsert_selection(
    db: AsyncSession,
    clause_id: str,
    user: User,
    data: SelectionUpsert,
) -> Selection:
    """
    Save the caller's choice for one clause.

    Raises:
        BadRequestError: If the caller already submitted or the option is not the clause's
    """
    deal, clause = await lifecycle.load_clause(db, clause_id)
    party = lifecycle.require_party(deal, user)
    _assert_editable(deal, party)

    if not clause.find_option(data.option_id):
        raise BadRequestError("Invalid option for this clause")

    selection = _write(clause, party, data)
    lifecycle.touch(deal)
    await lifecycle.commit(db, deal)
    await db.refresh(selection)
    return selection


async def bulk_save(
    db: AsyncSession,
    deal_id: str,
    user: User,
    items: List[BulkSelectionItem],
) -> int:
    """
    Save many selections in one transaction.

    Every entry is validated before anything is written, so one bad entry
    leaves all of the caller's selections untouched.

    Returns:
        Number of selections saved
    """
    deal = await lifecycle.load_deal(db, deal_id)
    party = lifecycle.require_party(deal, user)
    _assert_editable(deal, party)

    clauses = {c.id: c for c in deal.clauses}
    for item in items:
        clause = clauses.get(item.clause_id)
        if clause is None:
            raise BadRequestError(f"Invalid clause: {item.clause_id}")
        if not clause.find_option(item.option_id):
            raise BadRequestError(f"Invalid option for clause: {item.clause_id}")

    for item in items:
        _write(clauses[item.clause_id], party, item)
    lifecycle.touch(deal)
    await lifecycle.commit(db, deal)

    logger.info(f"Deal {deal.id}: saved {len(items)} selections for {party.role.value}")
    return len(items)


async def list_for_clause(db: AsyncSession, clause_id: str, user: User) -> List[Selection]:
    """The caller's own selection, or both once both parties have submitted."""
    deal, clause = await lifecycle.load_clause(db, clause_id)
    party = lifecycle.require_party(deal, user)
    return visible_selections(deal, clause, party)


def visible_selections(deal: Deal, clause: DealClause, party: Party) -> List[Selection]:
    if both_submitted(deal):
        return list(clause.selections)
    return [s for s in clause.selections if s.party_id == party.id]


async def list_mine(db: AsyncSession, deal_id: str, user: User) -> List[Selection]:
    deal = await lifecycle.load_deal(db, deal_id)
    party = lifecycle.require_party(deal, user)
    return [s for c in deal.clauses for s in c.selections if s.party_id == party.id]
