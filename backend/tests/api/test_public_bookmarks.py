"""Tests for the public (unauthenticated) bookmark endpoints."""
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from schemas.principal import Principal
from tests.conftest import USER_A, USER_B

MakeBookmark = Callable[..., Awaitable[Bookmark]]
ClientAs = Callable[[Principal | None], AbstractAsyncContextManager[AsyncClient]]


@pytest.fixture
async def anonymous(client_as: ClientAs) -> AsyncGenerator[AsyncClient]:
    """Client without credentials."""
    async with client_as(None) as test_client:
        yield test_client


async def _age(db_session: AsyncSession, bookmark: Bookmark, days: int) -> None:
    await db_session.execute(
        update(Bookmark)
        .where(Bookmark.id == bookmark.id)
        .values(created_at=datetime.now(UTC) - timedelta(days=days)),
    )


async def test__list_public__newest_shared_first(
    anonymous: AsyncClient,
    make_bookmark: MakeBookmark,
) -> None:
    older = await make_bookmark(user_id=USER_A, location="https://1.example/", shared=True)
    newer = await make_bookmark(user_id=USER_B, location="https://2.example/", shared=True)
    await make_bookmark(user_id=USER_A, location="https://3.example/")

    response = await anonymous.get("/public/bookmarks/")
    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == [newer.id, older.id]


async def test__list_public__by_tag(anonymous: AsyncClient, make_bookmark: MakeBookmark) -> None:
    tagged = await make_bookmark(location="https://1.example/", tags=["rust"], shared=True)
    await make_bookmark(location="https://2.example/", tags=["go"], shared=True)
    await make_bookmark(location="https://3.example/", tags=["rust"])

    response = await anonymous.get("/public/bookmarks/", params={"tag": "rust"})
    assert [b["id"] for b in response.json()] == [tagged.id]


async def test__list_public__by_location(
    anonymous: AsyncClient,
    make_bookmark: MakeBookmark,
) -> None:
    shared = await make_bookmark(location="https://shared.example/", shared=True)
    await make_bookmark(location="https://private.example/")

    found = await anonymous.get(
        "/public/bookmarks/", params={"location": "https://shared.example/"},
    )
    assert [b["id"] for b in found.json()] == [shared.id]

    hidden = await anonymous.get(
        "/public/bookmarks/", params={"location": "https://private.example/"},
    )
    assert hidden.status_code == 404


async def test__list_public__search_with_limit(
    anonymous: AsyncClient,
    make_bookmark: MakeBookmark,
) -> None:
    for i in range(3):
        await make_bookmark(name=f"Vector db {i}", location=f"https://{i}.example/", shared=True)
    await make_bookmark(name="Vector private", location="https://p.example/")

    everything = await anonymous.get("/public/bookmarks/", params={"q": "vector"})
    assert len(everything.json()) == 3

    limited = await anonymous.get("/public/bookmarks/", params={"q": "vector", "limit": 2})
    assert len(limited.json()) == 2


async def test__list_public__invalid_limit_400(anonymous: AsyncClient) -> None:
    response = await anonymous.get("/public/bookmarks/", params={"q": "x", "limit": 0})
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Malformed request: query.limit")


async def test__latest_entries__non_numeric_days_400(anonymous: AsyncClient) -> None:
    response = await anonymous.get("/public/bookmarks/latest-entries", params={"days": "week"})
    assert response.status_code == 400


async def test__latest_entries__default_window(
    anonymous: AsyncClient,
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    """Without parameters, the last 7 days of shared bookmarks are returned."""
    recent = await make_bookmark(location="https://recent.example/", shared=True)
    old = await make_bookmark(location="https://old.example/", shared=True)
    await make_bookmark(location="https://private.example/")
    await _age(db_session, old, days=8)

    response = await anonymous.get("/public/bookmarks/latest-entries")
    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == [recent.id]

    wider = await anonymous.get("/public/bookmarks/latest-entries", params={"days": 10})
    assert [b["id"] for b in wider.json()] == [recent.id, old.id]


async def test__latest_entries__explicit_window(
    anonymous: AsyncClient,
    db_session: AsyncSession,
    make_bookmark: MakeBookmark,
) -> None:
    await make_bookmark(location="https://recent.example/", shared=True)
    old = await make_bookmark(location="https://old.example/", shared=True)
    await _age(db_session, old, days=20)

    since = (datetime.now(UTC) - timedelta(days=21)).isoformat()
    to = (datetime.now(UTC) - timedelta(days=19)).isoformat()
    response = await anonymous.get(
        "/public/bookmarks/latest-entries", params={"since": since, "to": to, "days": 1},
    )
    assert [b["id"] for b in response.json()] == [old.id]


async def test__latest_entries__since_after_to_400(anonymous: AsyncClient) -> None:
    now = datetime.now(UTC)
    response = await anonymous.get(
        "/public/bookmarks/latest-entries",
        params={"since": now.isoformat(), "to": (now - timedelta(days=1)).isoformat()},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "<since> param value must be before <to> parameter value"


async def test__public_routes__do_not_need_credentials(anonymous: AsyncClient) -> None:
    assert (await anonymous.get("/public/bookmarks/")).status_code == 200
    assert (await anonymous.get("/public/bookmarks/latest-entries")).status_code == 200
