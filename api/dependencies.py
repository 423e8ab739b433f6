import random
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import settings
from core.errors import ServiceError
from db.database import get_async_session
from db.models import User
from services.auth_service import decode_token
from services.visibility import Requester

# Missing credentials are allowed through; routes that need a user use get_current_user
security = HTTPBearer(auto_error=False)

# Rate limiter - uses client IP address for identification
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

# Random source for location blurring; tests override get_rng with a seeded Random
_blur_rng = random.Random()


def get_rng() -> random.Random:
    return _blur_rng


async def _load_user(token: str, db: AsyncSession) -> Optional[User]:
    try:
        payload = decode_token(token)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active or user.deleted_at is not None:
        return None
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_async_session)
) -> Optional[User]:
    """Current user if a bearer token was sent, None for anonymous callers.

    A token that is present but invalid or expired is rejected rather than
    silently downgraded to anonymous access.
    """
    if credentials is None:
        return None

    user = await _load_user(credentials.credentials, db)
    if user is None:
        raise ServiceError("Invalid or expired authentication token", "INVALID_TOKEN", 401)
    return user


async def get_current_user(
    user: Optional[User] = Depends(get_optional_user)
) -> User:
    """Get current authenticated user from JWT token"""
    if user is None:
        raise ServiceError("Authentication required", "UNAUTHORIZED", 401)
    return user


def get_requester(user: Optional[User] = Depends(get_optional_user)) -> Optional[Requester]:
    if user is None:
        return None
    return Requester(id=user.id, role=user.role)
