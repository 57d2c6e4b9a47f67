"""Signing endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.api.deps import get_db, get_current_user
from dealroom.models.user import User
from dealroom.schemas.signing import SignatureCreate, SigningRequestResponse
from dealroom.services import signing_service

router = APIRouter()


@router.post(
    "/deals/{deal_id}/signing",
    response_model=SigningRequestResponse,
    status_code=status.HTTP_201_CREATED
)
async def initiate_signing(
    deal_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Start collecting signatures. Every clause must be agreed."""
    return await signing_service.initiate_signing(db, deal_id, current_user)


@router.get("/deals/{deal_id}/signing", response_model=Optional[SigningRequestResponse])
async def get_signing_status(
    deal_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await signing_service.get_signing_request(db, deal_id, current_user)


@router.post("/signing/{signing_request_id}/signatures", response_model=SigningRequestResponse)
async def record_signature(
    signing_request_id: str,
    signature_data: SignatureCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Sign as INITIATOR or RESPONDENT by typing your name."""
    return await signing_service.record_signature(
        db,
        signing_request_id,
        current_user,
        role=signature_data.role,
        signature=signature_data.signature,
    )
