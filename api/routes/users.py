from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel
from typing import Optional, Dict

from db.database import get_async_session
from db.models import User
from api.dependencies import get_optional_user
from core.errors import ServiceError
from services.profiles import get_user_profile

router = APIRouter(prefix="/users", tags=["users"])


class ProfileResponse(BaseModel):
    user_id: int
    display_name: str
    avatar_url: Optional[str]
    bio: Optional[str]
    role: str
    # Photographer-only fields (omitted for enthusiasts viewed by others)
    company_name: Optional[str] = None
    website_url: Optional[str] = None
    social_links: Optional[Dict[str, str]] = None
    photo_count: int = 0
    created_at: Optional[str]


@router.get(
    "/{user_id}/profile",
    response_model=ProfileResponse,
    response_model_exclude_unset=True,
)
async def get_profile(
    user_id: int,
    db: AsyncSession = Depends(get_async_session),
    current_user: Optional[User] = Depends(get_optional_user)
):
    """
    Get a user's profile.

    company_name, website_url and social_links are shown:
    - to the profile owner, always
    - to anyone else only when the profile belongs to a photographer
    """
    profile = await get_user_profile(
        db,
        user_id,
        viewer_id=current_user.id if current_user else None,
    )
    if profile is None:
        raise ServiceError("User not found", "USER_NOT_FOUND", 404)
    return profile
