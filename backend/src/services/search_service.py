"""
Free-text search over bookmarks.

Combines PostgreSQL full-text search with a substring match: a bookmark is a hit
when its search_vector matches websearch_to_tsquery (stemmed, every word
required) or when the raw query appears in its name, tags, description or
location (ILIKE). Hits are ranked by ts_rank plus a score for the
highest-priority field the substring matched. Ties fall back to the newest
bookmark first.
"""
from enum import StrEnum

from sqlalchemy import String, case, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from models.bookmark import Bookmark

# Weights align with the tsvector trigger weights (A = 0.8, B = 0.4, C = 0.1).
# The location is ILIKE-only (not in the tsvector).
SEARCH_FIELDS: list[tuple[ColumnElement[str], float]] = [
    (Bookmark.name, 0.8),                                 # weight A
    (func.array_to_string(Bookmark.tags, " "), 0.4),      # weight B
    (func.coalesce(Bookmark.description, ""), 0.1),       # weight C
    (Bookmark.location, 0.05),
]


class SearchDomain(StrEnum):
    """Scope of a search."""

    PUBLIC = "public"
    PERSONAL = "personal"


def escape_ilike(value: str) -> str:
    r"""
    Escape special ILIKE characters for safe use in LIKE/ILIKE patterns.

    PostgreSQL LIKE/ILIKE treats `%`, `_` and `\\` specially; this escapes them
    so they match literally.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def search_bookmarks(
    db: AsyncSession,
    text: str,
    limit: int | None = None,
    domain: SearchDomain = SearchDomain.PUBLIC,
    owner_id: str | None = None,
) -> list[Bookmark]:
    """
    Search bookmarks in a domain.

    Args:
        db: Database session.
        text: Search text; blank or stop-word-only text matches nothing.
        limit: Maximum number of results (None for no limit).
        domain: PUBLIC searches shared bookmarks, PERSONAL the owner's bookmarks.
        owner_id: Owner for PERSONAL searches.

    Returns:
        Matching bookmarks, best match first.

    Raises:
        ValueError: If a PERSONAL search has no owner.
    """
    if domain is SearchDomain.PERSONAL and owner_id is None:
        raise ValueError("Personal search requires an owner id")

    query_text = text.strip()
    if not query_text:
        return []

    # Stop-word-only text ("the", "and or") produces an empty tsquery; without
    # this guard the ILIKE side would match nearly everything.
    tsquery_text = await db.scalar(
        select(cast(func.websearch_to_tsquery("english", query_text), String)),
    )
    if not (tsquery_text and tsquery_text.strip()):
        return []

    tsquery = func.websearch_to_tsquery("english", query_text)
    # ILIKE uses the raw text; websearch operators become literal characters there.
    pattern = f"%{escape_ilike(query_text)}%"

    fts_filter = Bookmark.search_vector.op("@@")(tsquery)
    ilike_filter = or_(*(field.ilike(pattern) for field, _ in SEARCH_FIELDS))

    fts_score = func.coalesce(func.ts_rank(Bookmark.search_vector, tsquery), 0)
    ilike_score = case(
        *((field.ilike(pattern), weight) for field, weight in SEARCH_FIELDS), else_=0,
    )

    query = select(Bookmark).where(or_(fts_filter, ilike_filter))
    if domain is SearchDomain.PERSONAL:
        query = query.where(Bookmark.user_id == owner_id)
    else:
        query = query.where(Bookmark.shared.is_(True))

    query = query.order_by(
        (fts_score + ilike_score).desc(), Bookmark.created_at.desc(), Bookmark.id.desc(),
    )
    if limit is not None:
        query = query.limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all())
