"""Pydantic schemas for clause selections."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class SelectionUpsert(BaseModel):
    """A party's choice for one clause."""
    option_id: str
    priority: int = Field(3, ge=1, le=5, description="How important this clause is (1-5)")
    flexibility: int = Field(3, ge=1, le=5, description="Willingness to accept another option (1-5)")
    notes: Optional[str] = None


class BulkSelectionItem(SelectionUpsert):
    clause_id: str


class BulkSelectionRequest(BaseModel):
    """Save many selections at once; all or nothing."""
    selections: List[BulkSelectionItem] = Field(..., min_length=1)


class BulkSaveResponse(BaseModel):
    success: bool = True
    count: int


class SelectionResponse(BaseModel):
    id: str
    deal_clause_id: str
    party_id: str
    option_id: str
    priority: int
    flexibility: int
    notes: Optional[str]
    updated_at: datetime

    model_config = {"from_attributes": True}
