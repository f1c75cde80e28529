"""
Service layer for the bookmark record lifecycle.

Orchestrates validation, the public-location guard and authorization for
create/update/delete, and runs the read queries built by `query_builder`.
Errors are raised as classified `BookmarkServiceError`s; the API layer maps
them to HTTP responses.

Order of checks per operation:

- create: validation -> authorization -> uniqueness -> insert
- update: authorization -> validation -> uniqueness -> replace
- delete: authorization -> delete -> reverse-reference cleanup
"""
import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from schemas.bookmark import BookmarkPayload
from schemas.principal import Principal
from services import query_builder
from services.authorization import Operation, authorize
from services.bookmark_validation import validate_bookmark
from services.exceptions import (
    BookmarkNotFoundError,
    DuplicatePublicLocationError,
    UnclassifiedError,
)
from services.markdown_renderer import render_markdown
from services.search_service import SearchDomain, search_bookmarks
from services.uniqueness import (
    UniquenessMode,
    ensure_public_location_available,
    is_shared_location_violation,
)
from services.user_references import remove_bookmark_references, remove_references_to_bookmarks

logger = logging.getLogger(__name__)


def _description_html(payload: BookmarkPayload) -> str | None:
    """Use the submitted HTML, or render it from the description."""
    if payload.description_html:
        return payload.description_html
    if payload.description:
        return render_markdown(payload.description)
    return None


def _apply_payload(bookmark: Bookmark, payload: BookmarkPayload) -> None:
    """Copy the user-editable fields of a validated payload onto a bookmark."""
    if payload.user_id:
        bookmark.user_id = payload.user_id
    bookmark.name = payload.name
    bookmark.location = payload.location
    bookmark.description = payload.description
    bookmark.description_html = _description_html(payload)
    bookmark.tags = list(payload.tags or [])
    bookmark.shared = payload.shared


async def _flush_write(db: AsyncSession, location: str) -> None:
    """
    Flush a pending insert/update, classifying storage-level failures.

    Raises:
        DuplicatePublicLocationError: If the shared-location index rejected the write
            (a concurrent write got there after our pre-check).
        UnclassifiedError: For any other integrity failure.
    """
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        if is_shared_location_violation(e):
            logger.warning("Shared location race lost at write time for %s", location)
            raise DuplicatePublicLocationError(location) from e
        logger.exception("Integrity error while saving bookmark for %s", location)
        raise UnclassifiedError("Unknown server error when saving the bookmark") from e


# =============================================================================
# Writes
# =============================================================================


async def create_bookmark(
    db: AsyncSession,
    principal: Principal,
    payload: BookmarkPayload,
    owner_id: str | None = None,
) -> Bookmark:
    """
    Create a bookmark.

    Args:
        db: Database session.
        principal: The caller.
        payload: Submitted bookmark; userId is required.
        owner_id:
            Owner addressed by a personal route. None for the admin route, which
            requires the admin role and may create on behalf of any userId.

    Returns:
        The created bookmark.

    Raises:
        ForbiddenError: Admin route without the admin role.
        ValidationError: Malformed payload.
        UnauthorizedError: Subject does not match `owner_id`.
        UserIdMismatchError: Payload userId does not match the subject.
        DuplicatePublicLocationError: Shared location already taken.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    if owner_id is None:
        authorize(principal, Operation.ADMIN)

    validate_bookmark(
        payload,
        check_blocked_tags=not principal.is_admin,
        require_user_id=True,
    )

    if owner_id is not None:
        authorize(principal, Operation.CREATE, owner_id, payload.user_id)

    await ensure_public_location_available(
        db, payload.location, payload.shared, mode=UniquenessMode.CREATE,
    )

    bookmark = Bookmark()
    _apply_payload(bookmark, payload)
    db.add(bookmark)
    await _flush_write(db, payload.location)
    await db.refresh(bookmark)

    logger.info("Created bookmark %s for user %s", bookmark.id, bookmark.user_id)
    return bookmark


async def update_bookmark(
    db: AsyncSession,
    principal: Principal,
    bookmark_id: int,
    payload: BookmarkPayload,
    owner_id: str | None = None,
) -> Bookmark:
    """
    Fully replace a bookmark.

    Non-admins may only replace their own bookmarks (`owner_id` must be their
    subject and the payload's userId must match). Admins may replace any
    bookmark and skip the blocked-tag check; on the admin route (`owner_id`
    None) userId is required and reassigns ownership.

    Returns:
        The updated bookmark.

    Raises:
        ForbiddenError, UnauthorizedError, UserIdMismatchError: Authorization failures.
        ValidationError: Malformed payload.
        DuplicatePublicLocationError: Another owner's shared bookmark uses the location.
        BookmarkNotFoundError: No bookmark matches the id (and owner, for non-admins).

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    if owner_id is None:
        authorize(principal, Operation.ADMIN)
    else:
        authorize(principal, Operation.UPDATE, owner_id, payload.user_id)

    validate_bookmark(
        payload,
        check_blocked_tags=not principal.is_admin,
        require_user_id=owner_id is None,
    )

    scope_owner = None if principal.is_admin else owner_id
    await ensure_public_location_available(
        db,
        payload.location,
        payload.shared,
        mode=UniquenessMode.UPDATE,
        owner_id=scope_owner,
        bookmark_id=bookmark_id,
    )

    result = await db.execute(query_builder.by_id(bookmark_id, scope_owner))
    bookmark = result.scalar_one_or_none()
    if bookmark is None:
        raise BookmarkNotFoundError(bookmark_id)

    _apply_payload(bookmark, payload)
    # An identical replace leaves the row, including updated_at, untouched
    if db.is_modified(bookmark):
        bookmark.updated_at = func.clock_timestamp()
    await _flush_write(db, payload.location)
    await db.refresh(bookmark)

    logger.info("Updated bookmark %s", bookmark.id)
    return bookmark


async def delete_bookmark(
    db: AsyncSession,
    principal: Principal,
    bookmark_id: int,
    owner_id: str | None = None,
) -> None:
    """
    Delete a bookmark and remove its id from every user's reference lists.

    The reference cleanup only runs once the delete matched a bookmark.

    Raises:
        ForbiddenError, UnauthorizedError: Authorization failures.
        BookmarkNotFoundError: Nothing matched the id (and owner, for non-admins).

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    if owner_id is None:
        authorize(principal, Operation.ADMIN)
    else:
        authorize(principal, Operation.DELETE, owner_id)

    scope_owner = None if principal.is_admin else owner_id
    result = await db.execute(query_builder.by_id(bookmark_id, scope_owner))
    bookmark = result.scalar_one_or_none()
    if bookmark is None:
        raise BookmarkNotFoundError(bookmark_id)

    bookmark_owner = bookmark.user_id
    await db.delete(bookmark)
    await db.flush()
    logger.info("Deleted bookmark %s of user %s", bookmark_id, bookmark_owner)

    await remove_bookmark_references(db, bookmark_id)


async def bulk_delete_bookmarks(
    db: AsyncSession,
    principal: Principal,
    location: str | None = None,
    user_id: str | None = None,
) -> list[int]:
    """
    Delete all bookmarks matching a location and/or user id (admin only).

    Returns:
        Ids of the deleted bookmarks.

    Raises:
        ForbiddenError: Caller is not an admin.
        MissingBulkDeleteFilterError: Neither location nor user_id given.
    """
    authorize(principal, Operation.ADMIN)
    statement = query_builder.bulk_delete(location=location, user_id=user_id)

    result = await db.execute(statement)
    deleted_ids = list(result.scalars().all())
    logger.info(
        "Bulk deleted %s bookmarks (location=%s, user_id=%s)",
        len(deleted_ids),
        location,
        user_id,
    )

    await remove_references_to_bookmarks(db, deleted_ids)
    return deleted_ids


# =============================================================================
# Personal reads
# =============================================================================


async def get_personal_bookmark(
    db: AsyncSession,
    principal: Principal,
    owner_id: str,
    bookmark_id: int,
) -> Bookmark:
    """
    Get one of the owner's bookmarks by id.

    Raises:
        UnauthorizedError: Subject does not match `owner_id`.
        BookmarkNotFoundError: No such bookmark for this owner.
    """
    authorize(principal, Operation.READ_OWN, owner_id)
    result = await db.execute(query_builder.by_id(bookmark_id, owner_id))
    bookmark = result.scalar_one_or_none()
    if bookmark is None:
        raise BookmarkNotFoundError(bookmark_id)
    return bookmark


async def list_personal_bookmarks(
    db: AsyncSession,
    principal: Principal,
    owner_id: str,
    q: str | None = None,
    limit: int | None = None,
    location: str | None = None,
) -> list[Bookmark]:
    """
    List the owner's bookmarks.

    - with `q`: personal free-text search, bounded by `limit`
    - with `location`: the owner's bookmark at that location (404 if none)
    - otherwise: the 100 most recently accessed bookmarks

    Raises:
        UnauthorizedError: Subject does not match `owner_id`.
        BookmarkNotFoundError: `location` given but not bookmarked by the owner.
    """
    authorize(principal, Operation.READ_OWN, owner_id)

    if q:
        return await search_bookmarks(
            db, q, limit=limit, domain=SearchDomain.PERSONAL, owner_id=owner_id,
        )

    if location:
        result = await db.execute(query_builder.by_location(location, owner_id).limit(1))
        bookmark = result.scalar_one_or_none()
        if bookmark is None:
            raise BookmarkNotFoundError(location=location)
        return [bookmark]

    result = await db.execute(query_builder.personal_listing(owner_id))
    return list(result.scalars().all())


async def list_accessible_tags(
    db: AsyncSession,
    principal: Principal,
    owner_id: str,
) -> list[str]:
    """
    Tags used by the owner's bookmarks or by any shared bookmark, deduplicated.

    Order is not defined.
    """
    authorize(principal, Operation.READ_OWN, owner_id)
    result = await db.execute(query_builder.accessible_tags(owner_id))
    return list(result.scalars().all())


# =============================================================================
# Public reads
# =============================================================================


async def list_public_bookmarks(
    db: AsyncSession,
    q: str | None = None,
    limit: int | None = None,
    location: str | None = None,
    tag: str | None = None,
) -> list[Bookmark]:
    """
    List shared bookmarks.

    - with `q`: public free-text search, bounded by `limit`
    - with `location`: the shared bookmark at that location (404 if none)
    - with `tag`: shared bookmarks carrying the tag, newest first
    - otherwise: newest shared bookmarks

    Raises:
        BookmarkNotFoundError: `location` given but no shared bookmark uses it.
    """
    if q:
        return await search_bookmarks(db, q, limit=limit, domain=SearchDomain.PUBLIC)

    if location:
        result = await db.execute(query_builder.by_location(location))
        bookmark = result.scalar_one_or_none()
        if bookmark is None:
            raise BookmarkNotFoundError(location=location)
        return [bookmark]

    if tag:
        result = await db.execute(query_builder.public_by_tag(tag))
    else:
        result = await db.execute(query_builder.public_latest())
    return list(result.scalars().all())


async def get_recent_public_bookmarks(
    db: AsyncSession,
    since: datetime | None = None,
    to: datetime | None = None,
    days: int | None = None,
) -> list[Bookmark]:
    """
    Shared bookmarks created in an explicit [since, to] window or in the last `days` days.

    Raises:
        InvalidRangeError: If `since` is after `to`.
    """
    window = query_builder.resolve_time_window(since=since, to=to, days=days)
    result = await db.execute(query_builder.recent_public(window))
    return list(result.scalars().all())


# =============================================================================
# Admin reads
# =============================================================================


async def list_admin_bookmarks(
    db: AsyncSession,
    principal: Principal,
    public_only: bool = False,
    location: str | None = None,
    user_id: str | None = None,
) -> list[Bookmark]:
    """All bookmarks, optionally filtered by shared flag, location and owner (admin only)."""
    authorize(principal, Operation.ADMIN)
    result = await db.execute(
        query_builder.admin_listing(public_only=public_only, location=location, user_id=user_id),
    )
    return list(result.scalars().all())


async def get_admin_recent_bookmarks(
    db: AsyncSession,
    principal: Principal,
    since: datetime | None = None,
    to: datetime | None = None,
    days: int | None = None,
) -> list[Bookmark]:
    """Admin view of the recent public entries."""
    authorize(principal, Operation.ADMIN)
    return await get_recent_public_bookmarks(db, since=since, to=to, days=days)


async def get_tag_counts(db: AsyncSession, principal: Principal) -> list[tuple[str, int]]:
    """(tag, count) pairs over shared bookmarks, most used first (admin only)."""
    authorize(principal, Operation.ADMIN)
    result = await db.execute(query_builder.tag_counts())
    return [(tag, count) for tag, count in result.all()]


async def get_bookmark_by_id(
    db: AsyncSession,
    principal: Principal,
    bookmark_id: int,
) -> Bookmark:
    """
    Get any bookmark by id (admin only).

    Raises:
        ForbiddenError: Caller is not an admin.
        BookmarkNotFoundError: No such bookmark.
    """
    authorize(principal, Operation.ADMIN)
    result = await db.execute(query_builder.by_id(bookmark_id))
    bookmark = result.scalar_one_or_none()
    if bookmark is None:
        raise BookmarkNotFoundError(bookmark_id)
    return bookmark
