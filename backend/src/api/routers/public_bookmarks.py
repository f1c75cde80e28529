"""Read-only endpoints for shared bookmarks. No authentication required."""
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.bookmark import BookmarkResponse
from services import bookmark_service

router = APIRouter(prefix="/public/bookmarks", tags=["public bookmarks"])


@router.get("/", response_model=list[BookmarkResponse])
async def list_public_bookmarks(
    q: str | None = Query(default=None, description="Search text"),
    limit: int | None = Query(default=None, ge=1, description="Maximum number of search results"),  # noqa: E501
    location: str | None = Query(default=None, description="Exact bookmark location"),
    tag: str | None = Query(default=None, description="Only bookmarks carrying this tag"),
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """
    List shared bookmarks.

    Filters are exclusive and applied in this order: **q**, **location**, **tag**.
    Without filters, returns the newest shared bookmarks.
    """
    bookmarks = await bookmark_service.list_public_bookmarks(
        db, q=q, limit=limit, location=location, tag=tag,
    )
    return [BookmarkResponse.model_validate(b) for b in bookmarks]


@router.get("/latest-entries", response_model=list[BookmarkResponse])
async def latest_entries(
    since: datetime | None = Query(default=None, description="Window start (ISO 8601 or epoch)"),  # noqa: E501
    to: datetime | None = Query(default=None, description="Window end, defaults to now"),
    days: int | None = Query(default=None, ge=1, description="Look back this many days (default 7)"),  # noqa: E501
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """
    Shared bookmarks created recently, newest first.

    `since` takes priority over `days`. Returns 400 when `since` is after `to`.
    """
    bookmarks = await bookmark_service.get_recent_public_bookmarks(
        db, since=since, to=to, days=days,
    )
    return [BookmarkResponse.model_validate(b) for b in bookmarks]
