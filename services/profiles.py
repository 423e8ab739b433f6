"""User profile lookup with photographer-field visibility"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import ServiceError
from db.models import Photo, User
from services.visibility import PHOTO_STATUS_APPROVED, redact_profile

logger = logging.getLogger(__name__)


async def get_user_profile(
    db: AsyncSession,
    user_id: int,
    viewer_id: Optional[int] = None,
) -> Optional[Dict[str, Any]]:
    """
    Profile of `user_id` as seen by `viewer_id` (None for anonymous).

    Returns None when the user does not exist or is soft-deleted.
    """
    try:
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None or user.deleted_at is not None:
            return None

        photo_count = (
            await db.execute(
                select(func.count(Photo.id)).where(
                    Photo.user_id == user_id,
                    Photo.status == PHOTO_STATUS_APPROVED,
                    Photo.deleted_at.is_(None),
                )
            )
        ).scalar_one()
    except SQLAlchemyError as e:
        logger.error(f"Database error during get_user_profile: {type(e).__name__}")
        raise ServiceError(
            "Failed to fetch user profile",
            "DATABASE_ERROR",
            500,
            {"operation": "get_user_profile"},
        )

    profile = {
        "user_id": user.id,
        "display_name": user.display_name,
        "avatar_url": user.avatar_url,
        "bio": user.bio,
        "role": user.role,
        "company_name": user.company_name,
        "website_url": user.website_url,
        "social_links": user.social_links,
        "photo_count": photo_count or 0,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }
    return redact_profile(profile, user.id, user.role, viewer_id)
