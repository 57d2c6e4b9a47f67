"""API dependencies for authentication and database access."""

from fastapi import Depends, HTTPException, status, Header
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.database import get_db
from dealroom.models.user import User
from dealroom.services import user_service


async def get_current_user(
    x_user_key: str = Header(..., description="API key for authentication"),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Dependency that validates the X-User-Key header and returns the authenticated user.

    Raises:
        HTTPException: 401 if API key is invalid
    """
    user = await user_service.authenticate(db, x_user_key)
    if user:
        return user

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "code": "INVALID_API_KEY",
            "message": "Invalid API key provided"
        }
    )
