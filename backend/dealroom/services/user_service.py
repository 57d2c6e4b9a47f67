"""User service for registration and API key lookup."""

import logging
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.core.exceptions import BadRequestError
from dealroom.core.security import generate_api_key, hash_api_key, verify_api_key
from dealroom.models.user import User
from dealroom.schemas.user import UserCreate

logger = logging.getLogger(__name__)


async def create_user(db: AsyncSession, user_data: UserCreate) -> Tuple[User, str]:
    """
    Register a user and issue an API key.

    Returns:
        Tuple of (User, plaintext_api_key)

    Raises:
        BadRequestError: If the email is already registered
    """
    email = user_data.email.strip().lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise BadRequestError("A user with this email already exists", code="DUPLICATE_EMAIL")

    api_key = generate_api_key()
    user = User(
        email=email,
        name=user_data.name,
        company=user_data.company,
        api_key_hash=hash_api_key(api_key),
        entitlements=list(user_data.entitlements),
    )

    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info(f"Registered user {user.id}")
    return user, api_key


async def authenticate(db: AsyncSession, api_key: str) -> Optional[User]:
    """Resolve an API key to its user and record the visit."""
    result = await db.execute(select(User).where(User.api_key_hash == hash_api_key(api_key)))
    user = result.scalar_one_or_none()
    if not user or not verify_api_key(api_key, user.api_key_hash):
        return None

    user.last_seen_at = datetime.utcnow()
    await db.commit()
    return user
