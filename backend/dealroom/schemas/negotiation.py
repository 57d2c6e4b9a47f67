"""
Negotiation schemas for compromise rounds and counter-proposals.
"""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from dealroom.models.enums import ClauseStatus, ProposalStatus
from dealroom.schemas.catalog import ClauseOptionResponse
from dealroom.schemas.selection import SelectionResponse


# Compromise Suggestion Schemas

class SuggestionResponse(BaseModel):
    """One round's suggestion for a clause."""
    id: str
    deal_clause_id: str
    round_number: int
    suggested_option_id: str
    satisfaction_party_a: int
    satisfaction_party_b: int
    reasoning: str
    party_a_accepted: Optional[bool]
    party_b_accepted: Optional[bool]
    created_at: datetime

    model_config = {"from_attributes": True}


class GenerateResponse(BaseModel):
    round_number: int
    suggestions: List[SuggestionResponse]


class RegenerateResponse(BaseModel):
    round_number: int
    suggestion_count: int


class RespondRequest(BaseModel):
    """Accept or reject the latest suggestion for a clause."""
    accept: bool
    round_number: Optional[int] = Field(
        None, ge=1, description="Round the caller is responding to; rejected if no longer current"
    )


class ClauseNegotiationView(BaseModel):
    """A clause with its options, visible selections and current suggestion."""
    clause_id: str
    clause_title: str
    clause_description: str
    category: str
    status: ClauseStatus
    options: List[ClauseOptionResponse]
    selections: List[SelectionResponse]
    suggestion: Optional[SuggestionResponse]


class PartySatisfaction(BaseModel):
    name: str
    satisfaction: int


class SatisfactionScores(BaseModel):
    """Priority-weighted satisfaction across the latest suggestions."""
    party_a: PartySatisfaction
    party_b: PartySatisfaction


# Counter-Proposal Schemas

class CounterProposalCreate(BaseModel):
    """Offer an alternative option instead of accepting a suggestion."""
    option_id: str
    rationale: Optional[str] = None
    new_priority: Optional[int] = Field(None, ge=1, le=5)


class CounterProposalRespondRequest(BaseModel):
    accept: bool


class CounterProposalRespondResponse(BaseModel):
    accepted: bool
    all_agreed: bool


class CounterProposalResponse(BaseModel):
    id: str
    round_id: str
    deal_clause_id: str
    proposing_party_id: str
    proposed_option_id: str
    rationale: Optional[str]
    new_priority: Optional[int]
    status: ProposalStatus
    created_at: datetime
    resolved_at: Optional[datetime]

    model_config = {"from_attributes": True}


class CounterProposalList(BaseModel):
    from_me: List[CounterProposalResponse]
    to_me: List[CounterProposalResponse]
    pending_for_me: List[CounterProposalResponse]
