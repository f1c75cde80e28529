"""User model holding reverse references to bookmarks."""
from sqlalchemy import Integer, String
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin

# Columns holding bookmark ids that must be cleaned up when a bookmark is deleted
BOOKMARK_REFERENCE_COLUMNS = ("read_later", "likes", "pinned", "history", "favorites")


class User(Base, TimestampMixin):
    """
    User record keyed by the identity provider's subject id.

    The lists are denormalized references to bookmark ids. They are owned by the
    user-facing features; the bookmark core only removes ids from them.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="'sub' claim of the access token",
    )
    read_later: Mapped[list[int]] = mapped_column(
        ARRAY(Integer), nullable=False, server_default="{}",
    )
    likes: Mapped[list[int]] = mapped_column(
        ARRAY(Integer), nullable=False, server_default="{}",
    )
    pinned: Mapped[list[int]] = mapped_column(
        ARRAY(Integer), nullable=False, server_default="{}",
    )
    history: Mapped[list[int]] = mapped_column(
        ARRAY(Integer), nullable=False, server_default="{}",
    )
    favorites: Mapped[list[int]] = mapped_column(
        ARRAY(Integer), nullable=False, server_default="{}",
    )
