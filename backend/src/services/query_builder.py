"""
Translate read intents into SQLAlchemy statements against the bookmark store.

Each builder is pure: it returns a statement and never executes it. The
lifecycle service runs the statements with the request's session.
"""
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy import Delete, Select, delete, desc, distinct, func, or_, select

from core.bookmark_limits import BOOKMARK_LIMITS
from models.bookmark import Bookmark
from services.exceptions import InvalidRangeError, MissingBulkDeleteFilterError


@dataclass(frozen=True)
class TimeWindow:
    """Creation-time window; `end` is None for open-ended relative windows."""

    start: datetime
    end: datetime | None = None


def by_id(bookmark_id: int, owner_id: str | None = None) -> Select:
    """Exact match on id, optionally scoped to an owner."""
    query = select(Bookmark).where(Bookmark.id == bookmark_id)
    if owner_id is not None:
        query = query.where(Bookmark.user_id == owner_id)
    return query


def by_location(location: str, owner_id: str | None = None) -> Select:
    """
    Exact match on location.

    Scoped to the owner's bookmarks when `owner_id` is given, otherwise to
    shared bookmarks.
    """
    query = select(Bookmark).where(Bookmark.location == location)
    if owner_id is not None:
        return query.where(Bookmark.user_id == owner_id)
    return query.where(Bookmark.shared.is_(True))


def personal_listing(
    owner_id: str,
    limit: int = BOOKMARK_LIMITS.personal_listing_limit,
) -> Select:
    """All bookmarks of an owner, most recently accessed first."""
    return (
        select(Bookmark)
        .where(Bookmark.user_id == owner_id)
        .order_by(Bookmark.last_accessed_at.desc(), Bookmark.id.desc())
        .limit(limit)
    )


def public_latest(limit: int = BOOKMARK_LIMITS.public_listing_limit) -> Select:
    """Newest shared bookmarks."""
    return (
        select(Bookmark)
        .where(Bookmark.shared.is_(True))
        .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
        .limit(limit)
    )


def public_by_tag(tag: str, limit: int = BOOKMARK_LIMITS.public_listing_limit) -> Select:
    """Shared bookmarks carrying `tag`, newest first."""
    return (
        select(Bookmark)
        .where(Bookmark.shared.is_(True), Bookmark.tags.contains([tag]))
        .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
        .limit(limit)
    )


def tag_counts() -> Select:
    """(tag, count) over shared bookmarks, most used first."""
    shared_tags = (
        select(func.unnest(Bookmark.tags).label("tag"))
        .where(Bookmark.shared.is_(True))
        .subquery()
    )
    count = func.count().label("count")
    return (
        select(shared_tags.c.tag, count)
        .group_by(shared_tags.c.tag)
        .order_by(desc(count), shared_tags.c.tag)
    )


def accessible_tags(owner_id: str) -> Select:
    """
    Distinct tags over the owner's bookmarks and all shared bookmarks.

    Result order is whatever the database returns for DISTINCT; callers must
    not rely on it.
    """
    return select(distinct(func.unnest(Bookmark.tags))).where(
        or_(Bookmark.user_id == owner_id, Bookmark.shared.is_(True)),
    )


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def resolve_time_window(
    since: datetime | None = None,
    to: datetime | None = None,
    days: int | None = None,
    now: datetime | None = None,
) -> TimeWindow:
    """
    Resolve the "recent entries" window.

    An explicit `since` takes priority: the window is [since, to], with `to`
    defaulting to now. Otherwise the window covers the last `days` days
    (default 7) up to now.

    Raises:
        InvalidRangeError: If `since` is after `to`.
    """
    now = _as_utc(now or datetime.now(UTC))
    if since is not None:
        since = _as_utc(since)
        end = _as_utc(to) if to is not None else now
        if since > end:
            raise InvalidRangeError()
        return TimeWindow(start=since, end=end)

    if days is None:
        days = BOOKMARK_LIMITS.default_recent_days
    return TimeWindow(start=now - timedelta(days=days))


def recent_public(window: TimeWindow) -> Select:
    """Shared bookmarks created within the window, newest first."""
    query = select(Bookmark).where(
        Bookmark.shared.is_(True),
        Bookmark.created_at >= window.start,
    )
    if window.end is not None:
        query = query.where(Bookmark.created_at <= window.end)
    return query.order_by(Bookmark.created_at.desc(), Bookmark.id.desc())


def admin_listing(
    public_only: bool = False,
    location: str | None = None,
    user_id: str | None = None,
) -> Select:
    """Unrestricted listing with optional AND-combined filters, newest first."""
    query = select(Bookmark)
    if public_only:
        query = query.where(Bookmark.shared.is_(True))
    if location:
        query = query.where(Bookmark.location == location)
    if user_id:
        query = query.where(Bookmark.user_id == user_id)
    return query.order_by(Bookmark.created_at.desc(), Bookmark.id.desc())


def bulk_delete(location: str | None = None, user_id: str | None = None) -> Delete:
    """
    Delete every bookmark matching location and/or user id, returning deleted ids.

    Raises:
        MissingBulkDeleteFilterError: If neither filter is given.
    """
    if not location and not user_id:
        raise MissingBulkDeleteFilterError()

    statement = delete(Bookmark)
    if location:
        statement = statement.where(Bookmark.location == location)
    if user_id:
        statement = statement.where(Bookmark.user_id == user_id)
    return statement.returning(Bookmark.id)
