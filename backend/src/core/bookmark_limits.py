"""Structural limits and policy constants for bookmark payloads."""
from dataclasses import dataclass


@dataclass(frozen=True)
class BookmarkLimits:
    """Limits applied when validating and listing bookmarks."""

    max_tags: int
    max_description_chars: int
    max_description_lines: int

    # Tags starting with this prefix are reserved (non-admin writes only)
    blocked_tag_prefix: str

    # Listings
    personal_listing_limit: int
    public_listing_limit: int
    default_recent_days: int


BOOKMARK_LIMITS = BookmarkLimits(
    max_tags=8,
    max_description_chars=1500,
    max_description_lines=100,
    blocked_tag_prefix="awesome",
    personal_listing_limit=100,
    public_listing_limit=100,
    default_recent_days=7,
)
