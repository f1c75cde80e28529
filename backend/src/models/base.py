"""Declarative base and the timestamp columns shared by bookmarks and users."""
from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for the bookmark store tables."""


class TimestampMixin:
    """
    Creation and last-modification times (TIMESTAMP WITH TIME ZONE).

    Both default to the database's clock_timestamp(), so rows written within one
    transaction still get distinct, ordered times. The recent-entries window and
    every "newest first" listing rely on that ordering.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        nullable=False,
    )
