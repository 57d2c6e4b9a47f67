"""Invitation endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.api.deps import get_db, get_current_user
from dealroom.models.user import User
from dealroom.schemas.invitation import InvitationCreate, InvitationResponse, InvitationView
from dealroom.services import invitation_service

router = APIRouter()


@router.post(
    "/deals/{deal_id}/invitations",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED
)
async def send_invitation(
    deal_id: str,
    invitation_data: InvitationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Invite the respondent to your deal. Initiator only."""
    return await invitation_service.send_invitation(db, deal_id, current_user, invitation_data)


@router.get("/invitations/{token}", response_model=InvitationView)
async def view_invitation(token: str, db: AsyncSession = Depends(get_db)):
    """Public view of an invitation; status is EXPIRED once past its expiry."""
    return await invitation_service.view_invitation(db, token)


@router.post("/invitations/{token}/accept", response_model=InvitationResponse)
async def accept_invitation(
    token: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Join the deal as respondent."""
    return await invitation_service.accept_invitation(db, token, current_user)


@router.post("/invitations/{invitation_id}/resend", response_model=InvitationResponse)
async def resend_invitation(
    invitation_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await invitation_service.resend_invitation(db, invitation_id, current_user)
