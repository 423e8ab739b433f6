"""Upload-time parameters: image file checks, storage, blur settings and tag/gear fields"""

import json
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import aiofiles
import aiofiles.os

from core.errors import ServiceError
from services.photo_query import ParseResult

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {"image/jpeg", "image/png"}
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png"}

TAG_NAME_MAX = 30
MAX_TAGS_PER_PHOTO = 10


@dataclass(frozen=True)
class BlurSettings:
    enabled: bool = False
    radius_meters: Optional[int] = None


def parse_blur_settings(
    blur_location: Any,
    blur_radius: Any,
    min_radius: int = 100,
    max_radius: int = 500,
    default_radius: int = 200,
) -> ParseResult[BlurSettings]:
    """
    blur_radius is only read when blur_location is on; it then must be an
    integer in [min_radius, max_radius] and defaults to default_radius.
    """
    enabled = blur_location is True or blur_location == "true"
    if not enabled:
        return ParseResult.success(BlurSettings(enabled=False))

    if blur_radius is None or blur_radius == "":
        return ParseResult.success(BlurSettings(enabled=True, radius_meters=default_radius))

    try:
        radius = float(blur_radius)
    except (TypeError, ValueError):
        return ParseResult.failure("blur_radius", "Blur radius must be an integer")
    if not radius.is_integer():
        return ParseResult.failure("blur_radius", "Blur radius must be an integer")

    radius = int(radius)
    if radius < min_radius:
        return ParseResult.failure("blur_radius", f"Blur radius must be at least {min_radius} meters")
    if radius > max_radius:
        return ParseResult.failure("blur_radius", f"Blur radius must not exceed {max_radius} meters")
    return ParseResult.success(BlurSettings(enabled=True, radius_meters=radius))


def parse_tags(raw: Optional[str]) -> ParseResult[List[str]]:
    """Tags arrive as a JSON array string or a comma separated list"""
    if not raw:
        return ParseResult.success([])

    try:
        parsed = json.loads(raw)
        if isinstance(parsed, list):
            values = [t for t in parsed if isinstance(t, str)]
        else:
            values = [str(parsed)]
    except ValueError:
        values = raw.split(",")

    tags: List[str] = []
    for value in values:
        tag = value.strip().lower()
        if not tag:
            return ParseResult.failure("tags", "Tag cannot be empty")
        if len(tag) > TAG_NAME_MAX:
            return ParseResult.failure("tags", f"Tag must not exceed {TAG_NAME_MAX} characters")
        if tag not in tags:
            tags.append(tag)

    if len(tags) > MAX_TAGS_PER_PHOTO:
        return ParseResult.failure("tags", f"Maximum {MAX_TAGS_PER_PHOTO} tags allowed")
    return ParseResult.success(tags)


def parse_gear(raw: Optional[str]) -> ParseResult[dict]:
    if not raw:
        return ParseResult.success(None)
    try:
        gear = json.loads(raw)
    except ValueError:
        return ParseResult.failure("gear", "Gear must be a JSON object")
    if not isinstance(gear, dict):
        return ParseResult.failure("gear", "Gear must be a JSON object")
    return ParseResult.success(gear)


def validate_image_upload(
    filename: Optional[str],
    content_type: Optional[str],
    size: int,
    max_size: int,
) -> str:
    """Check type, extension and size; returns the normalized file extension"""
    if size > max_size:
        raise ServiceError(
            f"File size must not exceed {max_size // (1024 * 1024)} MB",
            "PAYLOAD_TOO_LARGE",
            413,
        )
    if size == 0:
        raise ServiceError("Uploaded file is empty", "INVALID_FILE", 400)

    if not content_type or content_type not in ALLOWED_MIME_TYPES:
        raise ServiceError(
            f"File type must be one of: {', '.join(sorted(ALLOWED_MIME_TYPES))}",
            "INVALID_FILE",
            400,
        )

    if not filename:
        raise ServiceError("Filename is required", "INVALID_FILE", 400)

    extension = Path(filename).suffix.lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise ServiceError(
            f"File extension must be one of: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
            "INVALID_FILE",
            400,
        )
    return extension


async def save_upload(upload_dir: str, contents: bytes, extension: str) -> str:
    """Write the image under <upload_dir>/photos and return its public URL"""
    target_dir = Path(upload_dir) / "photos"
    target_dir.mkdir(parents=True, exist_ok=True)

    filename = f"{uuid.uuid4().hex}{extension}"
    async with aiofiles.open(target_dir / filename, "wb") as f:
        await f.write(contents)

    logger.info(f"Stored upload {filename} ({len(contents)} bytes)")
    return f"/files/photos/{filename}"


async def delete_upload(upload_dir: str, file_url: str) -> None:
    """Remove a file stored by save_upload; a file that is already gone is ignored"""
    path = Path(upload_dir) / "photos" / Path(file_url).name
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        return
    logger.info(f"Removed orphaned upload {path.name}")
