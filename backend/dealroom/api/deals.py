"""Deal room API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.api.deps import get_db, get_current_user
from dealroom.models.user import User
from dealroom.schemas.deal import (
    DealCreate,
    DealProgress,
    DealRename,
    DealResponse,
    DealSummary,
    SubmitResponse,
)
from dealroom.services import deal_service

router = APIRouter()


@router.post("", response_model=DealResponse, status_code=status.HTTP_201_CREATED)
async def create_deal(
    deal_data: DealCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Open a deal room for a contract type.

    Example:
        ```json
        {
          "name": "Acme / Globex NDA",
          "contract_type": "nda",
          "governing_law": "CALIFORNIA"
        }
        ```
    """
    return await deal_service.create_deal(db, current_user, deal_data)


@router.get("", response_model=List[DealSummary])
async def list_deals(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List the deals you are a party to."""
    return await deal_service.list_deals(db, current_user)


@router.get("/{deal_id}", response_model=DealResponse)
async def get_deal(
    deal_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await deal_service.get_deal(db, deal_id, current_user)


@router.patch("/{deal_id}", response_model=DealResponse)
async def rename_deal(
    deal_id: str,
    rename: DealRename,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Rename a deal. Initiator only."""
    return await deal_service.rename_deal(db, deal_id, current_user, rename.name)


@router.post("/{deal_id}/cancel", response_model=DealResponse)
async def cancel_deal(
    deal_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Cancel a deal that has not completed. Either party may cancel."""
    return await deal_service.cancel_deal(db, deal_id, current_user)


@router.get("/{deal_id}/progress", response_model=DealProgress)
async def get_progress(
    deal_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await deal_service.get_progress(db, deal_id, current_user)


@router.post("/{deal_id}/submit", response_model=SubmitResponse)
async def submit_selections(
    deal_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Lock in your selections. Every clause needs one first.

    Once both parties have submitted the deal moves to NEGOTIATING.
    """
    both_submitted = await deal_service.submit_all(db, deal_id, current_user)
    return SubmitResponse(both_submitted=both_submitted)
