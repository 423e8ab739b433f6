"""
Field- and record-level visibility rules.

Photos:
- visible when approved, or when the requester owns it or is a moderator
- exif, location_exact and status are only serialized for owner/moderator;
  for everyone else the keys are removed, not nulled

Profiles:
- company_name, website_url and social_links are shown to the owner, and to
  other viewers only when the profile belongs to a photographer
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

PHOTO_STATUS_APPROVED = "approved"

ROLE_PHOTOGRAPHER = "photographer"
ROLE_ENTHUSIAST = "enthusiast"
ROLE_MODERATOR = "moderator"

SENSITIVE_PHOTO_FIELDS = ("exif", "location_exact", "status")
PHOTOGRAPHER_PROFILE_FIELDS = ("company_name", "website_url", "social_links")


@dataclass(frozen=True)
class Requester:
    """Authenticated caller; anonymous callers are represented by None"""
    id: int
    role: Optional[str] = None

    @property
    def is_moderator(self) -> bool:
        return self.role == ROLE_MODERATOR


def is_privileged(owner_id: Any, requester: Optional[Requester]) -> bool:
    """Owner or moderator"""
    if requester is None:
        return False
    return requester.id == owner_id or requester.is_moderator


def can_view_photo(status: str, owner_id: Any, requester: Optional[Requester]) -> bool:
    return status == PHOTO_STATUS_APPROVED or is_privileged(owner_id, requester)


def redact_photo(record: Dict[str, Any], owner_id: Any, requester: Optional[Requester]) -> Dict[str, Any]:
    """Return a copy of `record` without sensitive keys unless the requester is privileged"""
    if is_privileged(owner_id, requester):
        return dict(record)
    return {k: v for k, v in record.items() if k not in SENSITIVE_PHOTO_FIELDS}


def redact_profile(
    profile: Dict[str, Any],
    owner_id: Any,
    role: Optional[str],
    viewer_id: Optional[Any],
) -> Dict[str, Any]:
    """Photographer-only fields stay for the owner or when the profile is a photographer's"""
    if viewer_id is not None and viewer_id == owner_id:
        return dict(profile)
    if role == ROLE_PHOTOGRAPHER:
        return dict(profile)
    return {k: v for k, v in profile.items() if k not in PHOTOGRAPHER_PROFILE_FIELDS}
