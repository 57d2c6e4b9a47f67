"""Clause catalog endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.api.deps import get_db, get_current_user
from dealroom.models.user import User
from dealroom.schemas.catalog import (
    ContractTemplateCreate,
    ContractTemplateResponse,
    ContractTemplateSummary,
)
from dealroom.services import catalog_service

router = APIRouter()


@router.post("", response_model=ContractTemplateResponse, status_code=status.HTTP_201_CREATED)
async def import_template(
    template_data: ContractTemplateCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Import a contract template with its clauses and options.

    Each clause carries 2-5 options ranked by `order`, with a bias score
    per party between -1 and 1.
    """
    return await catalog_service.import_template(db, template_data)


@router.get("", response_model=List[ContractTemplateSummary])
async def list_templates(db: AsyncSession = Depends(get_db)):
    """List active contract templates."""
    return await catalog_service.list_templates(db)


@router.get("/{contract_type}", response_model=ContractTemplateResponse)
async def get_template(contract_type: str, db: AsyncSession = Depends(get_db)):
    """Get a template's ordered clauses and options."""
    return await catalog_service.get_template(db, contract_type)
