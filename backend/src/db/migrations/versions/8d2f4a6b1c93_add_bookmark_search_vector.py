"""
Add bookmark search_vector column, trigger and GIN index.

Revision ID: 8d2f4a6b1c93
Revises: 5b1c9e2f7a30
Create Date: 2026-10-18 15:40:07.218664

Order matters:
  1. Add the search_vector column
  2. Backfill existing rows (before the trigger exists, its IS DISTINCT FROM
     guard would skip no-op updates)
  3. Create the trigger function and trigger
  4. Create the GIN index

Weights match the ILIKE scoring in services/search_service.py:
name=A, tags=B, description=C.
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "8d2f4a6b1c93"
down_revision: str | Sequence[str] | None = "5b1c9e2f7a30"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column("bookmarks", sa.Column("search_vector", postgresql.TSVECTOR(), nullable=True))

    op.execute("""
        UPDATE bookmarks SET search_vector =
            setweight(to_tsvector('english', coalesce(name, '')), 'A') ||
            setweight(to_tsvector('english', coalesce(array_to_string(tags, ' '), '')), 'B') ||
            setweight(to_tsvector('english', coalesce(description, '')), 'C')
    """)

    op.execute("""
        CREATE FUNCTION bookmarks_search_vector_update() RETURNS trigger AS $$
        BEGIN
            IF TG_OP = 'INSERT' OR
               OLD.name IS DISTINCT FROM NEW.name OR
               OLD.tags IS DISTINCT FROM NEW.tags OR
               OLD.description IS DISTINCT FROM NEW.description THEN
                NEW.search_vector :=
                    setweight(to_tsvector('english', coalesce(NEW.name, '')), 'A') ||
                    setweight(
                        to_tsvector('english', coalesce(array_to_string(NEW.tags, ' '), '')),
                        'B'
                    ) ||
                    setweight(to_tsvector('english', coalesce(NEW.description, '')), 'C');
            ELSE
                NEW.search_vector := OLD.search_vector;
            END IF;
            RETURN NEW;
        END
        $$ LANGUAGE plpgsql
    """)

    op.execute("""
        CREATE TRIGGER bookmarks_search_vector_trigger
            BEFORE INSERT OR UPDATE ON bookmarks
            FOR EACH ROW EXECUTE FUNCTION bookmarks_search_vector_update()
    """)

    op.create_index(
        "ix_bookmarks_search_vector",
        "bookmarks",
        ["search_vector"],
        unique=False,
        postgresql_using="gin",
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_bookmarks_search_vector", table_name="bookmarks")
    op.execute("DROP TRIGGER IF EXISTS bookmarks_search_vector_trigger ON bookmarks")
    op.execute("DROP FUNCTION IF EXISTS bookmarks_search_vector_update()")
    op.drop_column("bookmarks", "search_vector")
