"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON while keeping snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class BookmarkPayload(CamelModel):
    """
    Request body for creating or fully replacing a bookmark.

    Every field is optional at the schema level. Required fields and limits are
    checked by services.bookmark_validation, which reports classified 400 errors
    in a fixed order.

    System-managed fields (id, timestamps) are ignored if sent.
    """

    model_config = ConfigDict(extra="ignore")

    user_id: str | None = None
    name: str | None = None
    location: str | None = None
    description: str | None = None
    description_html: str | None = Field(
        default=None,
        description="Rendered description. Derived from the Markdown description when omitted.",
    )
    tags: list[str] | None = None
    shared: bool = False


class BookmarkResponse(CamelModel):
    """Schema for bookmark responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    name: str
    location: str
    description: str | None
    description_html: str | None
    tags: list[str]
    shared: bool
    created_at: datetime
    updated_at: datetime
    last_accessed_at: datetime


class TagCountResponse(BaseModel):
    """Number of shared bookmarks carrying a tag."""

    tag: str
    count: int
