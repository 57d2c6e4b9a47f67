"""
Deal lifecycle: loading deal aggregates, guarded status transitions and
the reconciliation step that re-derives deal and party status from the
state of the clauses.
"""

import logging
from datetime import datetime
from typing import Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from dealroom.core.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from dealroom.core.state_machine import (
    CLAUSE_STATE_MACHINE,
    DEAL_STATE_MACHINE,
    PARTY_STATE_MACHINE,
)
from dealroom.models.deal import Deal, DealClause, Party
from dealroom.models.enums import ClauseStatus, DealStatus, PartyRole, PartyStatus
from dealroom.models.user import User

logger = logging.getLogger(__name__)


async def load_deal(db: AsyncSession, deal_id: str) -> Deal:
    """
    Load a deal with its parties and clauses, refreshing any cached copy.

    Raises:
        NotFoundError: If the deal does not exist
    """
    result = await db.execute(
        select(Deal)
        .where(Deal.id == deal_id)
        .execution_options(populate_existing=True)
    )
    deal = result.unique().scalar_one_or_none()
    if not deal:
        raise NotFoundError("Deal room not found")
    return deal


async def load_clause(db: AsyncSession, clause_id: str) -> Tuple[Deal, DealClause]:
    """
    Load a clause together with its deal.

    Raises:
        NotFoundError: If the clause does not exist
    """
    result = await db.execute(select(DealClause.deal_id).where(DealClause.id == clause_id))
    deal_id = result.scalar_one_or_none()
    if not deal_id:
        raise NotFoundError("Clause not found")

    deal = await load_deal(db, deal_id)
    clause = next(c for c in deal.clauses if c.id == clause_id)
    return deal, clause


def require_party(deal: Deal, user: User) -> Party:
    """
    Raises:
        ForbiddenError: If the user is not a party to the deal
    """
    party = deal.party_for_user(user.id)
    if not party:
        raise ForbiddenError("You do not have access to this deal room")
    return party


def require_both_parties(deal: Deal) -> Tuple[Party, Party]:
    """
    Raises:
        BadRequestError: If the respondent has not joined yet
    """
    initiator = deal.party_for_role(PartyRole.INITIATOR)
    respondent = deal.party_for_role(PartyRole.RESPONDENT)
    if not initiator or not respondent or not respondent.user_id:
        raise BadRequestError("Both parties must be present")
    return initiator, respondent


def assert_open(deal: Deal) -> None:
    """
    Raises:
        BadRequestError: If the deal is COMPLETED or CANCELLED
    """
    if DEAL_STATE_MACHINE.is_terminal(deal.status):
        raise BadRequestError(f"This deal room is {deal.status.value.lower()} and can no longer be changed")


def touch(deal: Deal) -> None:
    """Mark the deal modified so its version is checked and bumped on flush."""
    deal.updated_at = datetime.utcnow()


async def commit(db: AsyncSession, deal: Deal) -> None:
    """
    Commit a deal mutation.

    Raises:
        ConflictError: If another request changed the deal since it was loaded
    """
    # Rollback expires every instance; read the id while it is still loaded
    deal_id = deal.id
    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        logger.warning(f"Deal {deal_id}: stale version, write rejected")
        raise ConflictError("This deal room was changed by another request. Reload and try again.")


def transition_deal(deal: Deal, target: DealStatus) -> None:
    DEAL_STATE_MACHINE.assert_transition(deal.status, target)
    if deal.status != target:
        logger.info(f"Deal {deal.id}: {deal.status.value} -> {target.value}")
        deal.status = target
    touch(deal)


def transition_party(party: Party, target: PartyStatus) -> None:
    PARTY_STATE_MACHINE.assert_transition(party.status, target)
    party.status = target


def agree_clause(clause: DealClause, option_id: str) -> None:
    """Close a clause on the given option. AGREED is final."""
    CLAUSE_STATE_MACHINE.assert_transition(clause.status, ClauseStatus.AGREED)
    if clause.status == ClauseStatus.AGREED:
        raise BadRequestError("This clause has already been agreed")
    clause.status = ClauseStatus.AGREED
    clause.agreed_option_id = option_id


def suggest_clause(clause: DealClause) -> None:
    CLAUSE_STATE_MACHINE.assert_transition(clause.status, ClauseStatus.SUGGESTED)
    clause.status = ClauseStatus.SUGGESTED


def all_clauses_agreed(deal: Deal) -> bool:
    return bool(deal.clauses) and all(c.status == ClauseStatus.AGREED for c in deal.clauses)


def reconcile_deal(deal: Deal) -> bool:
    """
    Re-derive deal and party status from clause state.

    Once every clause is agreed a negotiating deal becomes AGREED and both
    parties ACCEPTED. Returns whether every clause is agreed.
    """
    if not all_clauses_agreed(deal):
        return False

    if deal.status == DealStatus.NEGOTIATING:
        transition_deal(deal, DealStatus.AGREED)
        for party in deal.parties:
            if party.status in (PartyStatus.SUBMITTED, PartyStatus.REVIEWING):
                transition_party(party, PartyStatus.ACCEPTED)
        logger.info(f"Deal {deal.id}: all {len(deal.clauses)} clauses agreed")
    return True


def agreed_count(deal: Deal) -> int:
    return sum(1 for c in deal.clauses if c.status == ClauseStatus.AGREED)
