"""Visibility & uniqueness guard: at most one shared bookmark per location."""
import logging
from enum import StrEnum

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import SHARED_LOCATION_INDEX, Bookmark
from services.exceptions import DuplicatePublicLocationError

logger = logging.getLogger(__name__)


class UniquenessMode(StrEnum):
    """Which records an existing shared bookmark is compared against."""

    CREATE = "create"
    UPDATE = "update"


async def find_conflicting_public_bookmark(
    db: AsyncSession,
    location: str,
    mode: UniquenessMode = UniquenessMode.CREATE,
    owner_id: str | None = None,
    bookmark_id: int | None = None,
) -> Bookmark | None:
    """
    Return a shared bookmark that would collide with `location`, if any.

    In update mode, an owner-scoped update (`owner_id` given) ignores the
    owner's own bookmarks, so a user can re-save their shared bookmark. An admin
    replacement (`owner_id` None) only ignores the record being replaced.
    """
    query = select(Bookmark).where(
        Bookmark.shared.is_(True),
        Bookmark.location == location,
    )
    if mode is UniquenessMode.UPDATE:
        if owner_id is not None:
            query = query.where(Bookmark.user_id != owner_id)
        elif bookmark_id is not None:
            query = query.where(Bookmark.id != bookmark_id)

    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none()


async def ensure_public_location_available(
    db: AsyncSession,
    location: str,
    shared: bool,
    mode: UniquenessMode = UniquenessMode.CREATE,
    owner_id: str | None = None,
    bookmark_id: int | None = None,
) -> None:
    """
    Check the public-location rule before a write. No-op for private bookmarks.

    The check and the following write are not atomic; the partial unique index
    on shared locations settles races (see `is_shared_location_violation`).

    Raises:
        DuplicatePublicLocationError: If another shared bookmark uses the location.
    """
    if not shared:
        return

    existing = await find_conflicting_public_bookmark(
        db, location, mode=mode, owner_id=owner_id, bookmark_id=bookmark_id,
    )
    if existing is not None:
        logger.warning(
            "Public location conflict on %s (existing bookmark %s)", location, existing.id,
        )
        raise DuplicatePublicLocationError(location)


def is_shared_location_violation(error: IntegrityError) -> bool:
    """Whether a storage error is the shared-location unique index rejecting a write."""
    return SHARED_LOCATION_INDEX in str(error)
