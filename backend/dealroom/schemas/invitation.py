"""Pydantic schemas for respondent invitations."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from dealroom.models.enums import InvitationStatus


class InvitationCreate(BaseModel):
    """Invite the respondent to a deal."""
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    name: Optional[str] = Field(None, max_length=200)
    company: Optional[str] = Field(None, max_length=200)


class InvitationResponse(BaseModel):
    id: str
    deal_id: str
    email: str
    token: str
    status: InvitationStatus
    sent_at: datetime
    expires_at: datetime
    accepted_at: Optional[datetime]

    model_config = {"from_attributes": True}


class InvitationView(BaseModel):
    """What an invitee sees when opening the link."""
    id: str
    deal_id: str
    deal_name: str
    contract_name: str
    clause_count: int
    invited_by: str
    email: str
    # PENDING, ACCEPTED, CANCELLED or EXPIRED
    status: str
    expires_at: datetime
