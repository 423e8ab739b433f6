"""
Query contract for the photo map listing.

Turns raw query-string values into a validated PhotoFilterSet and shapes the
paginated response. Parsers never raise on bad client input: they return a
ParseResult carrying either a value or the list of issues found, so the route
decides how to report them.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Generic, List, Mapping, Optional, Tuple, TypeVar

T = TypeVar("T")

PHOTO_CATEGORIES = (
    "landscape",
    "portrait",
    "street",
    "architecture",
    "nature",
    "wildlife",
    "macro",
    "aerial",
    "astrophotography",
    "urban",
    "seascape",
    "other",
)

SEASONS = ("spring", "summer", "autumn", "winter")

TIMES_OF_DAY = (
    "golden_hour_morning",
    "morning",
    "midday",
    "afternoon",
    "golden_hour_evening",
    "blue_hour",
    "night",
)

DEFAULT_LIMIT = 200
MAX_LIMIT = 200

# Largest offset the database drivers accept as an INTEGER bind value
MAX_OFFSET = 2 ** 31 - 1

BBOX_FORMAT_MESSAGE = (
    'Invalid bounding box format. Expected: "minLng,minLat,maxLng,maxLat" with valid coordinates'
)

# Leading integer, parseInt-style: "12abc" -> 12, "abc" -> no match
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class QueryIssue:
    path: str
    message: str


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    value: Optional[T] = None
    issues: Tuple[QueryIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.issues

    @classmethod
    def success(cls, value: Optional[T]) -> "ParseResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, path: str, message: str) -> "ParseResult[T]":
        return cls(issues=(QueryIssue(path, message),))


@dataclass(frozen=True)
class BoundingBox:
    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def contains(self, lon: float, lat: float) -> bool:
        """Edges are inclusive"""
        return self.min_lon <= lon <= self.max_lon and self.min_lat <= lat <= self.max_lat

    def as_list(self) -> List[float]:
        return [self.min_lon, self.min_lat, self.max_lon, self.max_lat]


@dataclass(frozen=True)
class PhotoFilterSet:
    limit: int = DEFAULT_LIMIT
    offset: int = 0
    bbox: Optional[BoundingBox] = None
    category: Optional[str] = None
    season: Optional[str] = None
    time_of_day: Optional[str] = None
    photographer_only: Optional[bool] = None


@dataclass(frozen=True)
class PaginationMeta:
    total: int
    limit: int
    offset: int
    has_more: bool = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "has_more", self.offset + self.limit < self.total)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
            "has_more": self.has_more,
        }


def parse_bbox(raw: str) -> ParseResult[BoundingBox]:
    """
    Parse "minLon,minLat,maxLon,maxLat".

    The whole box is rejected if any token is not a finite number, any
    coordinate is out of range, or the min/max ordering is not strict.
    """
    parts = [p.strip() for p in str(raw).split(",")]
    if len(parts) != 4:
        return ParseResult.failure("bbox", BBOX_FORMAT_MESSAGE)

    nums = []
    for part in parts:
        try:
            num = float(part)
        except ValueError:
            return ParseResult.failure("bbox", BBOX_FORMAT_MESSAGE)
        if not math.isfinite(num):
            return ParseResult.failure("bbox", BBOX_FORMAT_MESSAGE)
        nums.append(num)

    min_lon, min_lat, max_lon, max_lat = nums

    if not (-180 <= min_lon <= 180 and -180 <= max_lon <= 180):
        return ParseResult.failure("bbox", BBOX_FORMAT_MESSAGE)
    if not (-90 <= min_lat <= 90 and -90 <= max_lat <= 90):
        return ParseResult.failure("bbox", BBOX_FORMAT_MESSAGE)
    if min_lon >= max_lon or min_lat >= max_lat:
        return ParseResult.failure("bbox", BBOX_FORMAT_MESSAGE)

    return ParseResult.success(BoundingBox(min_lon, min_lat, max_lon, max_lat))


def _coerce_int(raw: Any) -> Optional[Any]:
    """Return an int, the original number, or None when the input has no numeric syntax"""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and math.isnan(raw):
            return None
        return raw
    match = _LEADING_INT.match(str(raw))
    if not match:
        return None
    return int(match.group(1))


def parse_limit(raw: Any, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> ParseResult[int]:
    """Absent or non-numeric -> default; explicit values outside [1, maximum] are rejected"""
    if raw is None:
        return ParseResult.success(default)
    value = _coerce_int(raw)
    if value is None:
        return ParseResult.success(default)
    if isinstance(value, float) and not value.is_integer():
        return ParseResult.failure("limit", "Limit must be an integer")
    value = int(value)
    if value < 1:
        return ParseResult.failure("limit", "Limit must be at least 1")
    if value > maximum:
        return ParseResult.failure("limit", f"Limit must not exceed {maximum}")
    return ParseResult.success(value)


def parse_offset(raw: Any) -> ParseResult[int]:
    """Absent or non-numeric -> 0; negative values and values above MAX_OFFSET are rejected"""
    if raw is None:
        return ParseResult.success(0)
    value = _coerce_int(raw)
    if value is None:
        return ParseResult.success(0)
    if isinstance(value, float) and not value.is_integer():
        return ParseResult.failure("offset", "Offset must be an integer")
    value = int(value)
    if value < 0:
        return ParseResult.failure("offset", "Offset must be non-negative")
    if value > MAX_OFFSET:
        return ParseResult.failure("offset", "Offset is too large")
    return ParseResult.success(value)


def parse_choice(raw: Optional[str], choices: Tuple[str, ...], path: str, message: str) -> ParseResult[str]:
    if raw is None:
        return ParseResult.success(None)
    if raw not in choices:
        return ParseResult.failure(path, message)
    return ParseResult.success(raw)


def parse_photographer_only(raw: Any) -> Optional[bool]:
    """Lenient boolean: native bool, "true" or "false"; anything else means no filter"""
    if isinstance(raw, bool):
        return raw
    if raw == "true":
        return True
    if raw == "false":
        return False
    return None


def parse_photo_query(
    params: Mapping[str, Any],
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> ParseResult[PhotoFilterSet]:
    """Validate every listing parameter and collect all issues, not only the first"""
    issues: List[QueryIssue] = []

    bbox = None
    if params.get("bbox") is not None:
        parsed_bbox = parse_bbox(params["bbox"])
        issues.extend(parsed_bbox.issues)
        bbox = parsed_bbox.value

    category = parse_choice(params.get("category"), PHOTO_CATEGORIES, "category", "Invalid photo category")
    season = parse_choice(params.get("season"), SEASONS, "season", "Invalid season")
    time_of_day = parse_choice(params.get("time_of_day"), TIMES_OF_DAY, "time_of_day", "Invalid time of day")
    limit = parse_limit(params.get("limit"), default_limit, max_limit)
    offset = parse_offset(params.get("offset"))

    for result in (category, season, time_of_day, limit, offset):
        issues.extend(result.issues)

    if issues:
        return ParseResult(issues=tuple(issues))

    return ParseResult.success(
        PhotoFilterSet(
            limit=limit.value,
            offset=offset.value,
            bbox=bbox,
            category=category.value,
            season=season.value,
            time_of_day=time_of_day.value,
            photographer_only=parse_photographer_only(params.get("photographer_only")),
        )
    )


def build_list_response(items: List[dict], total: int, filters: PhotoFilterSet) -> dict:
    """Response envelope: {"data": [...], "meta": {total, limit, offset, has_more}}"""
    meta = PaginationMeta(total=total, limit=filters.limit, offset=filters.offset)
    return {"data": items, "meta": meta.to_dict()}
