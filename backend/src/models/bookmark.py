"""Bookmark model for storing user bookmarks."""
from datetime import datetime

from sqlalchemy import DDL, Boolean, DateTime, Index, String, Text, event, func, text
from sqlalchemy.dialects.postgresql import ARRAY, TSVECTOR
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin

SHARED_LOCATION_INDEX = "uq_bookmarks_shared_location"

# Weights: name=A, tags=B, description=C. The location is matched by ILIKE only.
SEARCH_VECTOR_FUNCTION = """
CREATE OR REPLACE FUNCTION bookmarks_search_vector_update() RETURNS trigger AS $$
BEGIN
    IF TG_OP = 'INSERT' OR
       OLD.name IS DISTINCT FROM NEW.name OR
       OLD.tags IS DISTINCT FROM NEW.tags OR
       OLD.description IS DISTINCT FROM NEW.description THEN
        NEW.search_vector :=
            setweight(to_tsvector('english', coalesce(NEW.name, '')), 'A') ||
            setweight(to_tsvector('english', coalesce(array_to_string(NEW.tags, ' '), '')), 'B') ||
            setweight(to_tsvector('english', coalesce(NEW.description, '')), 'C');
    ELSE
        NEW.search_vector := OLD.search_vector;
    END IF;
    RETURN NEW;
END
$$ LANGUAGE plpgsql
"""

SEARCH_VECTOR_TRIGGER = """
CREATE TRIGGER bookmarks_search_vector_trigger
    BEFORE INSERT OR UPDATE ON bookmarks
    FOR EACH ROW EXECUTE FUNCTION bookmarks_search_vector_update()
"""


class Bookmark(Base, TimestampMixin):
    """Bookmark model - a location with name, description and tags, private or shared."""

    __tablename__ = "bookmarks"
    __table_args__ = (
        # Partial unique index: at most one shared bookmark per location.
        # Private bookmarks may repeat a location freely.
        Index(
            SHARED_LOCATION_INDEX,
            "location",
            unique=True,
            postgresql_where=text("shared"),
        ),
        Index("ix_bookmarks_user_id_location", "user_id", "location"),
        Index("ix_bookmarks_search_vector", "search_vector", postgresql_using="gin"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    # Subject id issued by the identity provider; users live outside this service
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    description_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, server_default="{}",
    )
    shared: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"), index=True,
    )
    # Maintained by bookmarks_search_vector_trigger
    search_vector: Mapped[str | None] = mapped_column(TSVECTOR, nullable=True)

    last_accessed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        server_default=func.clock_timestamp(),
    )


# Installs the trigger whenever the table itself is created (metadata.create_all)
event.listen(Bookmark.__table__, "after_create", DDL(SEARCH_VECTOR_FUNCTION))
event.listen(Bookmark.__table__, "after_create", DDL(SEARCH_VECTOR_TRIGGER))
