"""
Photo service layer.

Listing for the map view, single photo detail with visibility rules, and
photo creation (location blurred once, at upload).
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.errors import ServiceError
from db.models import Favorite, Photo, PhotoTag, Tag, User
from services.geo_blur import GeoPoint, random_offset_point
from services.photo_query import PhotoFilterSet, build_list_response
from services.uploads import BlurSettings
from services.visibility import (
    PHOTO_STATUS_APPROVED,
    ROLE_PHOTOGRAPHER,
    Requester,
    can_view_photo,
    redact_photo,
)

logger = logging.getLogger(__name__)


@dataclass
class PhotoDraft:
    """Validated photo metadata, ready to persist"""
    title: str
    category: str
    latitude: float
    longitude: float
    file_url: str
    description: Optional[str] = None
    season: Optional[str] = None
    time_of_day: Optional[str] = None
    blur: BlurSettings = field(default_factory=BlurSettings)
    tags: List[str] = field(default_factory=list)
    gear: Optional[dict] = None
    exif: Optional[dict] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None


def _database_error(operation: str, error: Exception) -> ServiceError:
    logger.error(f"Database error during {operation}: {type(error).__name__}")
    return ServiceError(
        "Failed to access the photo store",
        "DATABASE_ERROR",
        500,
        {"operation": operation},
    )


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _public_point(photo: Photo) -> GeoPoint:
    return GeoPoint(lon=photo.public_longitude, lat=photo.public_latitude)


def _exact_point(photo: Photo) -> GeoPoint:
    return GeoPoint(lon=photo.exact_longitude, lat=photo.exact_latitude)


def _tag_names(photo: Photo) -> List[str]:
    return sorted(pt.tag.name for pt in photo.photo_tags if pt.tag is not None)


def _user_info(user: Optional[User], include_role: bool = False) -> Dict[str, Any]:
    info = {
        "id": user.id if user else None,
        "display_name": (user.display_name if user else None) or "Unknown",
        "avatar_url": user.avatar_url if user else None,
    }
    if include_role:
        info["role"] = user.role if user else None
    return info


async def _favorite_counts(db: AsyncSession, photo_ids: List[UUID]) -> Dict[UUID, int]:
    if not photo_ids:
        return {}
    result = await db.execute(
        select(Favorite.photo_id, func.count(Favorite.id))
        .where(Favorite.photo_id.in_(photo_ids))
        .group_by(Favorite.photo_id)
    )
    return {photo_id: count for photo_id, count in result.all()}


def _to_list_item(photo: Photo, favorite_count: int) -> Dict[str, Any]:
    return {
        "id": str(photo.id),
        "title": photo.title,
        "description": photo.description,
        "category": photo.category,
        "season": photo.season,
        "time_of_day": photo.time_of_day,
        "file_url": photo.file_url,
        "thumbnail_url": photo.file_url,
        "location_public": _public_point(photo).to_geojson(),
        "user": _user_info(photo.user, include_role=True),
        "tags": _tag_names(photo),
        "created_at": _isoformat(photo.created_at),
        "favorite_count": favorite_count,
    }


def build_public_photos_query(filters: PhotoFilterSet):
    """Approved, non-deleted photos matching the filters (no ordering or paging)"""
    query = (
        select(Photo)
        .join(User, Photo.user_id == User.id)
        .where(
            Photo.status == PHOTO_STATUS_APPROVED,
            Photo.deleted_at.is_(None),
        )
    )

    # Spatial search only ever looks at the public point
    if filters.bbox:
        query = query.where(
            Photo.public_longitude >= filters.bbox.min_lon,
            Photo.public_longitude <= filters.bbox.max_lon,
            Photo.public_latitude >= filters.bbox.min_lat,
            Photo.public_latitude <= filters.bbox.max_lat,
        )

    if filters.category:
        query = query.where(Photo.category == filters.category)
    if filters.season:
        query = query.where(Photo.season == filters.season)
    if filters.time_of_day:
        query = query.where(Photo.time_of_day == filters.time_of_day)
    if filters.photographer_only:
        query = query.where(User.role == ROLE_PHOTOGRAPHER)

    return query


async def list_public_photos(db: AsyncSession, filters: PhotoFilterSet) -> Dict[str, Any]:
    """
    Map view listing.

    Returns {"data": [...], "meta": {total, limit, offset, has_more}}, newest
    first. `total` is an exact count on every page.
    """
    query = build_public_photos_query(filters)

    try:
        total = (
            await db.execute(select(func.count()).select_from(query.subquery()))
        ).scalar_one()

        result = await db.execute(
            query.options(
                selectinload(Photo.user),
                selectinload(Photo.photo_tags).selectinload(PhotoTag.tag),
            )
            .order_by(Photo.created_at.desc(), Photo.id.desc())
            .limit(filters.limit)
            .offset(filters.offset)
        )
        photos = result.scalars().all()
        counts = await _favorite_counts(db, [p.id for p in photos])
    except SQLAlchemyError as e:
        raise _database_error("list_public_photos", e)

    items = [_to_list_item(p, counts.get(p.id, 0)) for p in photos]
    return build_list_response(items, total, filters)


async def get_photo_detail(
    db: AsyncSession,
    photo_id: UUID,
    requester: Optional[Requester],
) -> Dict[str, Any]:
    """
    Single photo with role-based visibility.

    Missing, deleted and hidden (non-approved, not owner/moderator) photos all
    raise PHOTO_NOT_FOUND so a hidden photo's existence is not revealed.
    """
    try:
        result = await db.execute(
            select(Photo)
            .options(
                selectinload(Photo.user),
                selectinload(Photo.photo_tags).selectinload(PhotoTag.tag),
            )
            .where(Photo.id == photo_id, Photo.deleted_at.is_(None))
        )
        photo = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        raise _database_error("get_photo_detail", e)

    if photo is None or not can_view_photo(photo.status, photo.user_id, requester):
        raise ServiceError("Photo not found", "PHOTO_NOT_FOUND", 404)

    try:
        counts = await _favorite_counts(db, [photo.id])
        is_favorited = False
        if requester is not None:
            favorite = await db.execute(
                select(Favorite.id).where(
                    Favorite.photo_id == photo.id,
                    Favorite.user_id == requester.id,
                )
            )
            is_favorited = favorite.scalar_one_or_none() is not None
    except SQLAlchemyError as e:
        raise _database_error("get_photo_detail", e)

    public = _public_point(photo)
    exact = _exact_point(photo)

    record = {
        "id": str(photo.id),
        "title": photo.title,
        "description": photo.description,
        "category": photo.category,
        "season": photo.season,
        "time_of_day": photo.time_of_day,
        "file_url": photo.file_url,
        "thumbnail_url": photo.file_url,
        "location_public": public.to_geojson(),
        "is_location_blurred": public != exact,
        "gear": photo.gear,
        "exif": photo.exif,
        "location_exact": exact.to_geojson(),
        "status": photo.status,
        "user": _user_info(photo.user, include_role=True),
        "tags": _tag_names(photo),
        "created_at": _isoformat(photo.created_at),
        "favorite_count": counts.get(photo.id, 0),
        "is_favorited": is_favorited,
    }
    return redact_photo(record, photo.user_id, requester)


async def check_upload_quota(db: AsyncSession, user_id: int, daily_limit: int) -> None:
    """Rejects the upload when the user already created `daily_limit` photos in the last 24h"""
    since = datetime.now(timezone.utc) - timedelta(hours=24)
    try:
        recent = (
            await db.execute(
                select(func.count(Photo.id)).where(
                    Photo.user_id == user_id,
                    Photo.created_at >= since,
                )
            )
        ).scalar_one()
    except SQLAlchemyError as e:
        raise _database_error("check_upload_quota", e)

    if recent >= daily_limit:
        logger.info(f"Upload quota reached for user {user_id} ({recent}/{daily_limit})")
        raise ServiceError(
            f"Upload limit reached: maximum {daily_limit} photos per 24 hours",
            "RATE_LIMIT_EXCEEDED",
            429,
        )


async def _resolve_tags(db: AsyncSession, names: List[str]) -> List[Tag]:
    if not names:
        return []
    result = await db.execute(select(Tag).where(Tag.name.in_(names)))
    existing = {tag.name: tag for tag in result.scalars().all()}
    tags = []
    for name in names:
        tag = existing.get(name)
        if tag is None:
            tag = Tag(name=name)
            db.add(tag)
        tags.append(tag)
    return tags


async def create_photo(
    db: AsyncSession,
    owner: User,
    draft: PhotoDraft,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Persist a new photo.

    The public point is computed here, once: the exact point when blur is off,
    otherwise a random point within the blur radius. It is never recomputed.
    """
    exact = GeoPoint(lon=draft.longitude, lat=draft.latitude)
    if draft.blur.enabled:
        public = random_offset_point(exact, draft.blur.radius_meters, rng)
    else:
        public = exact

    try:
        tags = await _resolve_tags(db, draft.tags)
    except SQLAlchemyError as e:
        raise _database_error("create_photo", e)

    photo = Photo(
        user_id=owner.id,
        title=draft.title,
        description=draft.description,
        category=draft.category,
        season=draft.season,
        time_of_day=draft.time_of_day,
        file_url=draft.file_url,
        file_size=draft.file_size,
        mime_type=draft.mime_type,
        exact_latitude=exact.lat,
        exact_longitude=exact.lon,
        public_latitude=public.lat,
        public_longitude=public.lon,
        blur_location=draft.blur.enabled,
        blur_radius=draft.blur.radius_meters if draft.blur.enabled else None,
        exif=draft.exif,
        gear=draft.gear,
        photo_tags=[PhotoTag(tag=tag) for tag in tags],
    )

    try:
        db.add(photo)
        await db.commit()
        await db.refresh(photo)
    except SQLAlchemyError as e:
        await db.rollback()
        raise _database_error("create_photo", e)

    logger.info(
        "Photo created",
        extra={
            "user_id": owner.id,
            "photo_id": str(photo.id),
            "blurred": draft.blur.enabled,
            "tag_count": len(draft.tags),
        }
    )

    return {
        "message": "Photo uploaded successfully",
        "photo": {
            "id": str(photo.id),
            "title": photo.title,
            "status": photo.status,
            "file_url": photo.file_url,
            "created_at": _isoformat(photo.created_at),
        },
    }
