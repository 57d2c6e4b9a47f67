"""
Signing service: the signature gate after every clause is agreed.

Signatures are type-to-sign; the typed name stands in for a provider
signature and the external id is a local reference.
"""

import logging
import secrets
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.config import settings
from dealroom.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from dealroom.models.enums import DealStatus, PartyRole, SigningStatus
from dealroom.models.signing import SigningRequest
from dealroom.models.user import User
from dealroom.services import audit_service
from dealroom.services import lifecycle_service as lifecycle

logger = logging.getLogger(__name__)

IN_FLIGHT = (SigningStatus.PENDING, SigningStatus.PARTIALLY_SIGNED)


async def initiate_signing(db: AsyncSession, deal_id: str, user: User) -> SigningRequest:
    """
    Open signature collection and move the deal to SIGNING.

    Raises:
        BadRequestError: If a clause is unagreed or a request is in flight
    """
    deal = await lifecycle.load_deal(db, deal_id)
    lifecycle.require_party(deal, user)

    if not lifecycle.all_clauses_agreed(deal):
        raise BadRequestError("All clauses must be agreed upon before signing")

    result = await db.execute(
        select(SigningRequest).where(
            SigningRequest.deal_id == deal.id,
            SigningRequest.status.in_(IN_FLIGHT),
        )
    )
    if result.scalars().first():
        raise BadRequestError("A signing request is already in progress")

    lifecycle.transition_deal(deal, DealStatus.SIGNING)
    signing_request = SigningRequest(
        deal_id=deal.id,
        provider=settings.SIGNING_PROVIDER,
        external_id=f"sign_{secrets.token_hex(8)}",
        status=SigningStatus.PENDING,
    )
    db.add(signing_request)
    await lifecycle.commit(db, deal)

    logger.info(f"Deal {deal.id}: signing initiated ({signing_request.external_id})")
    await audit_service.record(db, deal.id, user.id, "SIGNING_INITIATED", {
        "signing_request_id": signing_request.id,
        "document_id": signing_request.external_id,
    })
    return signing_request


async def get_signing_request(db: AsyncSession, deal_id: str, user: User) -> Optional[SigningRequest]:
    """Most recent signing request for the deal, if any."""
    deal = await lifecycle.load_deal(db, deal_id)
    lifecycle.require_party(deal, user)

    result = await db.execute(
        select(SigningRequest)
        .where(SigningRequest.deal_id == deal.id)
        .order_by(SigningRequest.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def record_signature(
    db: AsyncSession,
    signing_request_id: str,
    user: User,
    role: PartyRole,
    signature: str,
) -> SigningRequest:
    """
    Record one role's signature. The second signature completes the deal.

    Raises:
        ForbiddenError: If the caller is not the party holding that role
        BadRequestError: If that role has already signed
    """
    result = await db.execute(select(SigningRequest).where(SigningRequest.id == signing_request_id))
    signing_request = result.scalar_one_or_none()
    if not signing_request:
        raise NotFoundError("Signing request not found")

    deal = await lifecycle.load_deal(db, signing_request.deal_id)
    signer = deal.party_for_role(role)
    if not signer or signer.user_id != user.id:
        raise ForbiddenError("You are not authorized to sign as this party")

    if signing_request.status not in IN_FLIGHT:
        raise BadRequestError("This signing request is no longer open")

    now = datetime.utcnow()
    if role == PartyRole.INITIATOR:
        if signing_request.party_a_signed_at:
            raise BadRequestError("Party A has already signed")
        signing_request.party_a_signature = signature
        signing_request.party_a_signed_at = now
    else:
        if signing_request.party_b_signed_at:
            raise BadRequestError("Party B has already signed")
        signing_request.party_b_signature = signature
        signing_request.party_b_signed_at = now

    completed = signing_request.fully_signed
    if completed:
        signing_request.status = SigningStatus.COMPLETED
        signing_request.completed_at = now
        lifecycle.transition_deal(deal, DealStatus.COMPLETED)
    else:
        signing_request.status = SigningStatus.PARTIALLY_SIGNED
        lifecycle.touch(deal)

    await lifecycle.commit(db, deal)

    if completed:
        logger.info(f"Deal {deal.id}: completed")
        await audit_service.record(db, deal.id, user.id, "DEAL_COMPLETED", {
            "completed_at": now.isoformat(),
            "document_id": signing_request.external_id,
        })
    await audit_service.record(db, deal.id, user.id, "SIGNATURE_RECORDED", {
        "role": role.value,
        "signed_at": now.isoformat(),
    })
    return signing_request
