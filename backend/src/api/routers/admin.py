"""Administration endpoints. Every route requires the admin role."""
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_principal, get_settings
from core.config import Settings
from schemas.bookmark import BookmarkPayload, BookmarkResponse, TagCountResponse
from schemas.principal import Principal
from services import bookmark_service

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/bookmarks", response_model=list[BookmarkResponse])
async def list_bookmarks(
    public: bool = Query(default=False, description="Only shared bookmarks"),
    location: str | None = Query(default=None),
    user_id: str | None = Query(default=None, alias="userId"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """All bookmarks, newest first, optionally filtered (filters are AND-combined)."""
    bookmarks = await bookmark_service.list_admin_bookmarks(
        db, principal, public_only=public, location=location, user_id=user_id,
    )
    return [BookmarkResponse.model_validate(b) for b in bookmarks]


@router.get("/bookmarks/latest-entries", response_model=list[BookmarkResponse])
async def latest_entries(
    since: datetime | None = Query(default=None),
    to: datetime | None = Query(default=None),
    days: int | None = Query(default=None, ge=1),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """Shared bookmarks created recently (see /public/bookmarks/latest-entries)."""
    bookmarks = await bookmark_service.get_admin_recent_bookmarks(
        db, principal, since=since, to=to, days=days,
    )
    return [BookmarkResponse.model_validate(b) for b in bookmarks]


@router.get("/tags", response_model=list[TagCountResponse])
async def tag_counts(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> list[TagCountResponse]:
    """Tags of shared bookmarks with their usage count, most used first."""
    counts = await bookmark_service.get_tag_counts(db, principal)
    return [TagCountResponse(tag=tag, count=count) for tag, count in counts]


@router.get("/bookmarks/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get any bookmark by id."""
    bookmark = await bookmark_service.get_bookmark_by_id(db, principal, bookmark_id)
    return BookmarkResponse.model_validate(bookmark)


@router.post("/bookmarks", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    data: BookmarkPayload,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> BookmarkResponse:
    """Create a bookmark on behalf of `userId`. Reserved tags are allowed."""
    bookmark = await bookmark_service.create_bookmark(db, principal, data)
    response.headers["Location"] = (
        f"{settings.api_url.rstrip('/')}/personal/users/{bookmark.user_id}"
        f"/bookmarks/{bookmark.id}"
    )
    return BookmarkResponse.model_validate(bookmark)


@router.put("/bookmarks/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark(
    bookmark_id: int,
    data: BookmarkPayload,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Fully replace any bookmark; `userId` is required and may reassign ownership."""
    bookmark = await bookmark_service.update_bookmark(db, principal, bookmark_id, data)
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/bookmarks/{bookmark_id}", status_code=204)
async def delete_bookmark(
    bookmark_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete any bookmark and drop it from every user's saved lists."""
    await bookmark_service.delete_bookmark(db, principal, bookmark_id)


@router.delete("/bookmarks", status_code=204)
async def bulk_delete_bookmarks(
    location: str | None = Query(default=None),
    user_id: str | None = Query(default=None, alias="userId"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """
    Delete bookmarks by location (e.g. spam cleanup) and/or by owner.

    At least one of `location` and `userId` is required (400 otherwise).
    """
    await bookmark_service.bulk_delete_bookmarks(
        db, principal, location=location, user_id=user_id,
    )
