"""Cleanup of users' denormalized references to deleted bookmarks."""
import logging
from collections.abc import Iterable

from sqlalchemy import func, literal_column, or_, select, update
from sqlalchemy.dialects.postgresql import aggregate_order_by
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from models.user import BOOKMARK_REFERENCE_COLUMNS, User

logger = logging.getLogger(__name__)


def _without(column: ColumnElement, bookmark_ids: list[int]) -> ColumnElement:
    """The array in `column` minus `bookmark_ids`, original order kept."""
    element = (
        func.unnest(column)
        .table_valued("value", with_ordinality="ordinality")
        .render_derived()
    )
    kept = (
        select(func.array_agg(aggregate_order_by(element.c.value, element.c.ordinality)))
        .where(element.c.value.not_in(bookmark_ids))
        .scalar_subquery()
    )
    # array_agg over no rows is NULL
    return func.coalesce(kept, literal_column("'{}'"))


async def remove_references_to_bookmarks(db: AsyncSession, bookmark_ids: Iterable[int]) -> int:
    """
    Pull the given bookmark ids from every user's read_later, likes, pinned, history and favorites.

    One UPDATE covers all ids; only users holding at least one of them are touched.

    Returns:
        Number of users whose lists were changed.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    ids = sorted(set(bookmark_ids))
    if not ids:
        return 0

    columns = [getattr(User, name) for name in BOOKMARK_REFERENCE_COLUMNS]
    statement = (
        update(User)
        .where(or_(*(column.overlap(ids) for column in columns)))
        .values({column: _without(column, ids) for column in columns})
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(statement)
    if result.rowcount:
        logger.info(
            "Removed %s bookmark(s) from reference lists of %s users", len(ids), result.rowcount,
        )
    return result.rowcount


async def remove_bookmark_references(db: AsyncSession, bookmark_id: int) -> int:
    """Remove references to a single deleted bookmark. Returns users touched."""
    return await remove_references_to_bookmarks(db, [bookmark_id])
