"""Pydantic schemas for User validation."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    """Schema for registering a new user."""
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    name: Optional[str] = Field(None, max_length=200)
    company: Optional[str] = Field(None, max_length=200)
    entitlements: List[str] = Field(default_factory=list, description="Licensed contract types")


class UserResponse(BaseModel):
    """User profile for the authenticated user."""
    id: str
    email: str
    name: Optional[str]
    company: Optional[str]
    entitlements: List[str]
    created_at: datetime
    last_seen_at: datetime

    model_config = {"from_attributes": True}


class UserRegisterResponse(BaseModel):
    """Response when registering a new user (includes API key)."""
    user_id: str
    email: str
    api_key: str  # ONLY shown once during registration
    created_at: datetime
