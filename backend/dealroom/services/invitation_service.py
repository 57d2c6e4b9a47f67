"""Invitation service: bringing the respondent into a deal."""

import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.config import settings
from dealroom.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from dealroom.core.security import generate_invitation_token
from dealroom.models.deal import Party
from dealroom.models.enums import DealStatus, InvitationStatus, PartyRole, PartyStatus
from dealroom.models.invitation import Invitation
from dealroom.models.user import User
from dealroom.schemas.invitation import InvitationCreate, InvitationView
from dealroom.services import audit_service
from dealroom.services import lifecycle_service as lifecycle

logger = logging.getLogger(__name__)


def _expiry() -> datetime:
    return datetime.utcnow() + timedelta(days=settings.INVITATION_TTL_DAYS)


async def _get_by_token(db: AsyncSession, token: str) -> Invitation:
    result = await db.execute(select(Invitation).where(Invitation.token == token))
    invitation = result.unique().scalar_one_or_none()
    if not invitation:
        raise NotFoundError("Invitation not found")
    return invitation


async def send_invitation(db: AsyncSession, deal_id: str, user: User, data: InvitationCreate) -> Invitation:
    """
    Invite the respondent. Creates the RESPONDENT party (unlinked until
    accepted) and moves the deal to AWAITING_RESPONSE.

    Raises:
        ForbiddenError: If the caller is not the initiator
        BadRequestError: If a respondent already exists
    """
    deal = await lifecycle.load_deal(db, deal_id)
    party = lifecycle.require_party(deal, user)
    if party.role != PartyRole.INITIATOR:
        raise ForbiddenError("Only the initiator can send invitations")
    if deal.party_for_role(PartyRole.RESPONDENT):
        raise BadRequestError("A respondent has already been invited")
    lifecycle.transition_deal(deal, DealStatus.AWAITING_RESPONSE)

    result = await db.execute(
        select(Invitation).where(
            Invitation.deal_id == deal.id,
            Invitation.status == InvitationStatus.PENDING,
        )
    )
    for stale in result.unique().scalars().all():
        stale.status = InvitationStatus.CANCELLED

    email = data.email.strip().lower()
    deal.parties.append(
        Party(
            role=PartyRole.RESPONDENT,
            status=PartyStatus.PENDING,
            email=email,
            name=data.name,
            company=data.company,
        )
    )
    invitation = Invitation(
        deal_id=deal.id,
        sender_id=user.id,
        email=email,
        token=generate_invitation_token(),
        status=InvitationStatus.PENDING,
        expires_at=_expiry(),
    )
    db.add(invitation)
    await lifecycle.commit(db, deal)

    logger.info(f"Deal {deal.id}: invitation {invitation.id} sent")
    await audit_service.record(db, deal.id, user.id, "INVITATION_SENT", {
        "email": email,
        "invitation_id": invitation.id,
    })
    return invitation


async def view_invitation(db: AsyncSession, token: str) -> InvitationView:
    """What the invitee sees. Expiry is reported ahead of any other status."""
    invitation = await _get_by_token(db, token)
    deal = await lifecycle.load_deal(db, invitation.deal_id)
    initiator = deal.party_for_role(PartyRole.INITIATOR)

    if invitation.is_expired:
        status = "EXPIRED"
    else:
        status = invitation.status.value

    return InvitationView(
        id=invitation.id,
        deal_id=deal.id,
        deal_name=deal.name,
        contract_name=deal.contract_template.display_name,
        clause_count=len(deal.clauses),
        invited_by=initiator.display_name if initiator else "",
        email=invitation.email,
        status=status,
        expires_at=invitation.expires_at,
    )


async def accept_invitation(db: AsyncSession, token: str, user: User) -> Invitation:
    """
    Link the respondent party to the accepting user.

    Raises:
        BadRequestError: If the invitation is not pending, has expired or
            was sent by the caller
    """
    invitation = await _get_by_token(db, token)
    if invitation.status != InvitationStatus.PENDING:
        raise BadRequestError("Invitation is no longer valid")
    if invitation.is_expired:
        raise BadRequestError("Invitation has expired")
    if invitation.sender_id == user.id:
        raise BadRequestError("You cannot accept your own invitation")

    deal = await lifecycle.load_deal(db, invitation.deal_id)
    lifecycle.assert_open(deal)
    if deal.party_for_user(user.id):
        raise BadRequestError("You are already a party to this deal room")
    respondent = deal.party_for_role(PartyRole.RESPONDENT)
    if not respondent:
        raise NotFoundError("Respondent party not found")

    respondent.user_id = user.id
    respondent.email = user.email
    if not respondent.name:
        respondent.name = user.name
    if not respondent.company:
        respondent.company = user.company

    invitation.status = InvitationStatus.ACCEPTED
    invitation.accepted_at = datetime.utcnow()
    lifecycle.touch(deal)
    await lifecycle.commit(db, deal)

    logger.info(f"Deal {deal.id}: invitation {invitation.id} accepted by {user.id}")
    await audit_service.record(db, deal.id, user.id, "INVITATION_ACCEPTED", {
        "invitation_id": invitation.id,
    })
    return invitation


async def resend_invitation(db: AsyncSession, invitation_id: str, user: User) -> Invitation:
    """Refresh the send time and push the expiry out again."""
    result = await db.execute(select(Invitation).where(Invitation.id == invitation_id))
    invitation = result.unique().scalar_one_or_none()
    if not invitation:
        raise NotFoundError("Invitation not found")
    if invitation.sender_id != user.id:
        raise ForbiddenError("You can only resend your own invitations")
    if invitation.status != InvitationStatus.PENDING:
        raise BadRequestError("Invitation is no longer pending")

    invitation.sent_at = datetime.utcnow()
    invitation.expires_at = _expiry()
    await db.commit()

    await audit_service.record(db, invitation.deal_id, user.id, "INVITATION_RESENT", {
        "invitation_id": invitation.id,
    })
    return invitation
