"""Pydantic schemas for the clause catalog."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ClauseOptionCreate(BaseModel):
    """One offered choice for a clause."""
    code: str = Field(..., min_length=1, max_length=100)
    label: str = Field(..., min_length=1, max_length=200)
    order: int = Field(..., ge=1)
    plain_description: str = ""
    legal_text: str = ""
    bias_party_a: float = Field(0.0, ge=-1, le=1)
    bias_party_b: float = Field(0.0, ge=-1, le=1)


class ClauseTemplateCreate(BaseModel):
    """A clause and its ordered options."""
    clause_key: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=200)
    category: str = "general"
    order: int = Field(..., ge=1)
    plain_description: str = ""
    legal_context: Optional[str] = None
    is_required: bool = True
    options: List[ClauseOptionCreate] = Field(..., min_length=2, max_length=5)

    @field_validator("options")
    @classmethod
    def unique_option_orders(cls, v: List[ClauseOptionCreate]) -> List[ClauseOptionCreate]:
        """Option orders rank the choices, so they must be distinct."""
        orders = [o.order for o in v]
        if len(set(orders)) != len(orders):
            raise ValueError("Option orders must be unique within a clause")
        return v


class ContractTemplateCreate(BaseModel):
    """Request to import a contract template into the catalog."""
    contract_type: str = Field(..., min_length=1, max_length=50)
    display_name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    version: str = "1.0"
    is_licensed: bool = False
    clauses: List[ClauseTemplateCreate] = Field(..., min_length=1)


class ClauseOptionResponse(BaseModel):
    id: str
    code: str
    label: str
    order: int
    plain_description: str
    legal_text: str
    bias_party_a: float
    bias_party_b: float

    model_config = {"from_attributes": True}


class ClauseTemplateResponse(BaseModel):
    id: str
    clause_key: str
    title: str
    category: str
    order: int
    plain_description: str
    legal_context: Optional[str]
    is_required: bool
    options: List[ClauseOptionResponse]

    model_config = {"from_attributes": True}


class ContractTemplateSummary(BaseModel):
    """Template listing entry."""
    id: str
    contract_type: str
    display_name: str
    description: Optional[str]
    version: str
    is_licensed: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ContractTemplateResponse(ContractTemplateSummary):
    """Template with its full clause catalog."""
    clauses: List[ClauseTemplateResponse]
