"""Endpoints for a user's own bookmarks."""
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_principal, get_settings
from core.config import Settings
from schemas.bookmark import BookmarkPayload, BookmarkResponse
from schemas.principal import Principal
from services import bookmark_service

router = APIRouter(prefix="/personal/users/{user_id}/bookmarks", tags=["personal bookmarks"])


@router.post("/", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    user_id: str,
    data: BookmarkPayload,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> BookmarkResponse:
    """
    Create a bookmark for the user.

    The payload's `userId` must match both the path and the token subject.
    Shared bookmarks must have a location no other shared bookmark uses.
    """
    bookmark = await bookmark_service.create_bookmark(db, principal, data, owner_id=user_id)
    response.headers["Location"] = (
        f"{settings.api_url.rstrip('/')}/personal/users/{user_id}/bookmarks/{bookmark.id}"
    )
    return BookmarkResponse.model_validate(bookmark)


@router.get("/", response_model=list[BookmarkResponse])
async def list_bookmarks(
    user_id: str,
    q: str | None = Query(default=None, description="Search text"),
    limit: int | None = Query(default=None, ge=1, description="Maximum number of search results"),  # noqa: E501
    location: str | None = Query(default=None, description="Exact bookmark location"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """
    List the user's bookmarks.

    - **q**: free-text search over the user's bookmarks (bounded by **limit**)
    - **location**: the user's bookmark for this exact location (404 if none)
    - neither: the 100 most recently accessed bookmarks
    """
    bookmarks = await bookmark_service.list_personal_bookmarks(
        db, principal, user_id, q=q, limit=limit, location=location,
    )
    return [BookmarkResponse.model_validate(b) for b in bookmarks]


@router.get("/tags", response_model=list[str])
async def list_tags(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> list[str]:
    """Tags used by the user's bookmarks or by shared bookmarks (unsorted)."""
    return await bookmark_service.list_accessible_tags(db, principal, user_id)


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    user_id: str,
    bookmark_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get one of the user's bookmarks."""
    bookmark = await bookmark_service.get_personal_bookmark(db, principal, user_id, bookmark_id)
    return BookmarkResponse.model_validate(bookmark)


@router.put("/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark(
    user_id: str,
    bookmark_id: int,
    data: BookmarkPayload,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """
    Fully replace a bookmark.

    `descriptionHtml` is rendered from `description` when not supplied.
    Admins may replace any user's bookmark.
    """
    bookmark = await bookmark_service.update_bookmark(
        db, principal, bookmark_id, data, owner_id=user_id,
    )
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", status_code=204)
async def delete_bookmark(
    user_id: str,
    bookmark_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete a bookmark and drop it from every user's saved lists."""
    await bookmark_service.delete_bookmark(db, principal, bookmark_id, owner_id=user_id)
