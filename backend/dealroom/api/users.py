"""User API endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.api.deps import get_db, get_current_user
from dealroom.models.user import User
from dealroom.schemas.user import UserCreate, UserResponse, UserRegisterResponse
from dealroom.services import user_service

router = APIRouter()


@router.post("", response_model=UserRegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new user.

    Returns the user ID and API key. The API key is only shown once.
    """
    user, api_key = await user_service.create_user(db, user_data)
    return UserRegisterResponse(
        user_id=user.id,
        email=user.email,
        api_key=api_key,
        created_at=user.created_at,
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    current_user: User = Depends(get_current_user)
):
    """Get the authenticated user's profile."""
    return current_user
