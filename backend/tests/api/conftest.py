"""Shared helpers for API tests."""
from typing import Any


def personal_url(user_id: str, suffix: str = "") -> str:
    """URL of a user's personal bookmark collection (or a sub-path of it)."""
    return f"/personal/users/{user_id}/bookmarks/{suffix}"


def bookmark_json(user_id: str | None, **overrides: Any) -> dict[str, Any]:
    """A valid camelCase bookmark payload."""
    data = {
        "userId": user_id,
        "name": "PostgreSQL docs",
        "location": "https://www.postgresql.org/docs/",
        "description": "The *manual*",
        "tags": ["database", "docs"],
        "shared": False,
    }
    data.update(overrides)
    return data


# Id no bookmark will ever have in the test database
MISSING_ID = 2_000_000_000
