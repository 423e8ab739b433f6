"""Photo map listing, detail and upload endpoints"""

import logging
import random
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile, status
from pydantic import BaseModel, Field, ValidationError, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user, get_requester, get_rng, limiter
from core.config import Settings, get_settings
from core.errors import ServiceError, ValidationFailed
from db.database import get_async_session
from db.models import User
from services.photo_query import (
    PHOTO_CATEGORIES,
    SEASONS,
    TIMES_OF_DAY,
    QueryIssue,
    parse_photo_query,
)
from services.photos import (
    PhotoDraft,
    check_upload_quota,
    create_photo,
    get_photo_detail,
    list_public_photos,
)
from services.uploads import (
    delete_upload,
    parse_blur_settings,
    parse_gear,
    parse_tags,
    save_upload,
    validate_image_upload,
)
from services.visibility import Requester

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/photos", tags=["photos"])

COORDINATE_FIELDS = {"latitude", "longitude"}


# --- Models ---

class GeoJSONPoint(BaseModel):
    type: str = "Point"
    coordinates: List[float]  # [lon, lat]


class UserBasicInfo(BaseModel):
    id: Optional[int]
    display_name: str
    avatar_url: Optional[str] = None
    role: Optional[str] = None


class PhotoListItem(BaseModel):
    id: str
    title: str
    description: Optional[str]
    category: str
    season: Optional[str]
    time_of_day: Optional[str]
    file_url: str
    thumbnail_url: str
    location_public: GeoJSONPoint
    user: UserBasicInfo
    tags: List[str]
    created_at: Optional[str]
    favorite_count: int


class PaginationMeta(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class PhotoListResponse(BaseModel):
    data: List[PhotoListItem]
    meta: PaginationMeta


class PhotoDetailResponse(BaseModel):
    """Owner/moderator-only fields are left unset (and so omitted) for other callers"""
    id: str
    title: str
    description: Optional[str]
    category: str
    season: Optional[str]
    time_of_day: Optional[str]
    file_url: str
    thumbnail_url: str
    location_public: GeoJSONPoint
    is_location_blurred: bool
    gear: Optional[Dict[str, Any]]
    exif: Optional[Dict[str, Any]] = None
    location_exact: Optional[GeoJSONPoint] = None
    status: Optional[str] = None
    user: UserBasicInfo
    tags: List[str]
    created_at: Optional[str]
    favorite_count: int
    is_favorited: bool


class PhotoCreateForm(BaseModel):
    """Metadata fields of the multipart upload"""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    category: str
    season: Optional[str] = None
    time_of_day: Optional[str] = None
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("category")
    @classmethod
    def check_category(cls, v: str) -> str:
        if v not in PHOTO_CATEGORIES:
            raise ValueError("Invalid photo category")
        return v

    @field_validator("season")
    @classmethod
    def check_season(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in SEASONS:
            raise ValueError("Invalid season")
        return v

    @field_validator("time_of_day")
    @classmethod
    def check_time_of_day(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in TIMES_OF_DAY:
            raise ValueError("Invalid time of day")
        return v


class CreatedPhoto(BaseModel):
    id: str
    title: str
    status: str
    file_url: str
    created_at: Optional[str]


class PhotoCreateResponse(BaseModel):
    message: str
    photo: CreatedPhoto


# --- Endpoints ---

@router.get("", response_model=PhotoListResponse)
async def list_photos(
    bbox: Optional[str] = Query(None, description='"minLng,minLat,maxLng,maxLat"'),
    category: Optional[str] = Query(None),
    season: Optional[str] = Query(None),
    time_of_day: Optional[str] = Query(None),
    photographer_only: Optional[str] = Query(None),
    limit: Optional[str] = Query(None, description="1-200, default 200"),
    offset: Optional[str] = Query(None, description=">= 0, default 0"),
    db: AsyncSession = Depends(get_async_session),
    config: Settings = Depends(get_settings),
):
    """
    Approved photos for the map viewport.

    Only public fields are returned: the public (possibly blurred) location,
    no EXIF, no exact location. Parameters are taken as raw strings so that
    malformed limit/offset can fall back to their defaults.
    """
    parsed = parse_photo_query(
        {
            "bbox": bbox,
            "category": category,
            "season": season,
            "time_of_day": time_of_day,
            "photographer_only": photographer_only,
            "limit": limit,
            "offset": offset,
        },
        default_limit=config.MAP_PAGE_DEFAULT_LIMIT,
        max_limit=config.MAP_PAGE_MAX_LIMIT,
    )
    if not parsed.ok:
        raise ValidationFailed(parsed.issues)

    return await list_public_photos(db, parsed.value)


@router.get(
    "/{photo_id}",
    response_model=PhotoDetailResponse,
    response_model_exclude_unset=True,
)
async def get_photo(
    photo_id: UUID,
    response: Response,
    requester: Optional[Requester] = Depends(get_requester),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Photo detail.

    exif, location_exact and status are only present for the owner or a
    moderator. Photos the caller may not see answer 404, same as missing ones.
    """
    photo = await get_photo_detail(db, photo_id, requester)
    response.headers["Cache-Control"] = "private, no-cache" if requester else "public, max-age=60"
    return photo


@router.post("", response_model=PhotoCreateResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/hour")
async def upload_photo(
    request: Request,
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    season: Optional[str] = Form(None),
    time_of_day: Optional[str] = Form(None),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    blur_location: Optional[str] = Form(None),
    blur_radius: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    gear: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    config: Settings = Depends(get_settings),
    rng: random.Random = Depends(get_rng),
):
    """Upload a photo (multipart/form-data); the public location is blurred here when requested"""
    issues: List[QueryIssue] = []

    form = None
    try:
        form = PhotoCreateForm(
            title=title,
            description=description or None,
            category=category,
            season=season or None,
            time_of_day=time_of_day or None,
            latitude=latitude,
            longitude=longitude,
        )
    except ValidationError as e:
        for err in e.errors():
            issues.append(QueryIssue(
                path=".".join(str(part) for part in err["loc"]),
                message=err["msg"],
            ))

    blur = parse_blur_settings(
        blur_location,
        blur_radius,
        min_radius=config.BLUR_MIN_RADIUS_M,
        max_radius=config.BLUR_MAX_RADIUS_M,
        default_radius=config.BLUR_DEFAULT_RADIUS_M,
    )
    parsed_tags = parse_tags(tags)
    parsed_gear = parse_gear(gear)
    for result in (blur, parsed_tags, parsed_gear):
        issues.extend(result.issues)

    if issues:
        if any(issue.path in COORDINATE_FIELDS for issue in issues):
            raise ValidationFailed(issues, message="Invalid coordinates", status_code=422)
        raise ValidationFailed(issues, message="Validation failed")

    contents = await file.read()
    extension = validate_image_upload(file.filename, file.content_type, len(contents), config.MAX_FILE_SIZE)

    await check_upload_quota(db, current_user.id, config.PHOTO_UPLOAD_DAILY_LIMIT)

    file_url = await save_upload(config.UPLOAD_DIR, contents, extension)

    draft = PhotoDraft(
        title=form.title,
        description=form.description or None,
        category=form.category,
        season=form.season,
        time_of_day=form.time_of_day,
        latitude=form.latitude,
        longitude=form.longitude,
        file_url=file_url,
        blur=blur.value,
        tags=parsed_tags.value,
        gear=parsed_gear.value,
        file_size=len(contents),
        mime_type=file.content_type,
    )
    try:
        return await create_photo(db, current_user, draft, rng)
    except ServiceError:
        # No photo row points at the stored image
        await delete_upload(config.UPLOAD_DIR, file_url)
        raise
