"""Pydantic schemas for deals, parties and submission."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from dealroom.models.enums import (
    ClauseStatus,
    DealStatus,
    GoverningLaw,
    PartyRole,
    PartyStatus,
)


class DealCreate(BaseModel):
    """Request to open a new deal room."""
    name: str = Field(..., min_length=1, max_length=200)
    contract_type: str = Field(..., description="Catalog contract type to negotiate")
    governing_law: GoverningLaw
    contract_language: str = Field("en", min_length=2, max_length=5)


class DealRename(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class PartyResponse(BaseModel):
    id: str
    role: PartyRole
    status: PartyStatus
    user_id: Optional[str]
    email: str
    name: Optional[str]
    company: Optional[str]
    submitted_at: Optional[datetime]

    model_config = {"from_attributes": True}


class DealClauseResponse(BaseModel):
    id: str
    clause_template_id: str
    position: int
    title: str
    status: ClauseStatus
    agreed_option_id: Optional[str]

    model_config = {"from_attributes": True}


class DealSummary(BaseModel):
    """Deal listing entry."""
    id: str
    name: str
    contract_template_id: str
    governing_law: GoverningLaw
    contract_language: str
    status: DealStatus
    current_round: int
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DealResponse(DealSummary):
    """Deal with its parties and clauses."""
    parties: List[PartyResponse] = []
    clauses: List[DealClauseResponse] = []


class PartyProgress(BaseModel):
    role: PartyRole
    status: PartyStatus
    name: str
    selections_made: int


class DealProgress(BaseModel):
    """How far along the deal is."""
    deal_id: str
    status: DealStatus
    current_round: int
    total_clauses: int
    agreed_clauses: int
    agreed_percentage: int
    parties: List[PartyProgress]


class SubmitResponse(BaseModel):
    success: bool = True
    both_submitted: bool
