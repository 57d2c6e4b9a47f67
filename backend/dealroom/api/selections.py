"""Selection endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.api.deps import get_db, get_current_user
from dealroom.models.user import User
from dealroom.schemas.selection import (
    BulkSaveResponse,
    BulkSelectionRequest,
    SelectionResponse,
    SelectionUpsert,
)
from dealroom.services import selection_service

router = APIRouter()


@router.put("/clauses/{clause_id}/selection", response_model=SelectionResponse)
async def upsert_selection(
    clause_id: str,
    selection_data: SelectionUpsert,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Choose an option for a clause, with priority and flexibility (1-5).

    Rejected once you have submitted your selections.
    """
    return await selection_service.upsert_selection(db, clause_id, current_user, selection_data)


@router.get("/clauses/{clause_id}/selections", response_model=List[SelectionResponse])
async def list_clause_selections(
    clause_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Your selection, plus the other party's once both have submitted."""
    return await selection_service.list_for_clause(db, clause_id, current_user)


@router.get("/deals/{deal_id}/selections/me", response_model=List[SelectionResponse])
async def list_my_selections(
    deal_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await selection_service.list_mine(db, deal_id, current_user)


@router.post("/deals/{deal_id}/selections/bulk", response_model=BulkSaveResponse)
async def bulk_save_selections(
    deal_id: str,
    request: BulkSelectionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Save several selections at once. Nothing is saved if any entry is invalid."""
    count = await selection_service.bulk_save(db, deal_id, current_user, request.selections)
    return BulkSaveResponse(count=count)
