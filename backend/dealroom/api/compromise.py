"""
Compromise endpoints: rounds, responses and counter-proposals.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.api.deps import get_db, get_current_user
from dealroom.models.user import User
from dealroom.services.negotiation_service import negotiation_manager
from dealroom.schemas.negotiation import (
    ClauseNegotiationView,
    CounterProposalCreate,
    CounterProposalList,
    CounterProposalRespondRequest,
    CounterProposalRespondResponse,
    CounterProposalResponse,
    GenerateResponse,
    RegenerateResponse,
    RespondRequest,
    SatisfactionScores,
    SuggestionResponse,
)

router = APIRouter()


@router.post("/deals/{deal_id}/compromise/generate", response_model=GenerateResponse)
async def generate_compromise(
    deal_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Generate the next round of compromise suggestions.

    Both parties must have submitted. Clauses where both chose the same
    option are agreed immediately; the rest get a suggested option with
    a satisfaction score per party.
    """
    round_number, suggestions = await negotiation_manager.generate(db, deal_id, current_user)
    return GenerateResponse(round_number=round_number, suggestions=suggestions)


@router.get("/deals/{deal_id}/compromise", response_model=List[ClauseNegotiationView])
async def get_current_suggestions(
    deal_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Every clause with its latest suggestion."""
    return await negotiation_manager.get_current(db, deal_id, current_user)


@router.get("/deals/{deal_id}/compromise/satisfaction", response_model=SatisfactionScores)
async def get_satisfaction_scores(
    deal_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await negotiation_manager.satisfaction_scores(db, deal_id, current_user)


@router.post("/deals/{deal_id}/compromise/regenerate", response_model=RegenerateResponse)
async def regenerate_compromise(
    deal_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Start a new round that folds in pending counter-proposals.

    A counter-proposal between both parties' original choices replaces
    the computed suggestion. Pending counter-proposals are superseded.
    """
    round_number, count = await negotiation_manager.regenerate(db, deal_id, current_user)
    return RegenerateResponse(round_number=round_number, suggestion_count=count)


@router.post("/clauses/{clause_id}/compromise/respond", response_model=SuggestionResponse)
async def respond_to_suggestion(
    clause_id: str,
    request: RespondRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Accept or reject the clause's current suggestion.

    Pass `round_number` to make sure you are answering the suggestion you
    saw; a newer round makes the request fail instead.
    """
    return await negotiation_manager.respond(
        db, clause_id, current_user, request.accept, round_number=request.round_number
    )


@router.post(
    "/clauses/{clause_id}/counter-proposals",
    response_model=CounterProposalResponse,
    status_code=status.HTTP_201_CREATED
)
async def counter_propose(
    clause_id: str,
    request: CounterProposalCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Reject the current suggestion and propose another option."""
    return await negotiation_manager.counter_propose(
        db,
        clause_id,
        current_user,
        option_id=request.option_id,
        rationale=request.rationale,
        new_priority=request.new_priority,
    )


@router.get("/deals/{deal_id}/counter-proposals", response_model=CounterProposalList)
async def list_counter_proposals(
    deal_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await negotiation_manager.list_counter_proposals(db, deal_id, current_user)


@router.post("/counter-proposals/{proposal_id}/respond", response_model=CounterProposalRespondResponse)
async def respond_to_counter_proposal(
    proposal_id: str,
    request: CounterProposalRespondRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Accept or reject the other party's counter-proposal."""
    return await negotiation_manager.respond_to_counter_proposal(
        db, proposal_id, current_user, request.accept
    )
