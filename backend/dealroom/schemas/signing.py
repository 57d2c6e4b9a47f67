"""Pydantic schemas for signature collection."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from dealroom.models.enums import PartyRole, SigningStatus


class SignatureCreate(BaseModel):
    """Record one party's signature."""
    role: PartyRole
    signature: str = Field(..., min_length=1, max_length=200, description="Typed full name")


class SigningRequestResponse(BaseModel):
    id: str
    deal_id: str
    provider: str
    external_id: Optional[str]
    status: SigningStatus
    party_a_signature: Optional[str]
    party_a_signed_at: Optional[datetime]
    party_b_signature: Optional[str]
    party_b_signed_at: Optional[datetime]
    created_at: datetime
    completed_at: Optional[datetime]

    model_config = {"from_attributes": True}
