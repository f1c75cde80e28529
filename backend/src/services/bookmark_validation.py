"""
Structural and policy validation of bookmark payloads.

Checks run in a fixed order and stop at the first failure:

1. required fields (name, location, non-empty tags, and userId where required)
2. tag count
3. blocked tag prefix (non-admin writes only)
4. description length
5. description line count

Validation never touches the store.
"""
from core.bookmark_limits import BOOKMARK_LIMITS, BookmarkLimits
from schemas.bookmark import BookmarkPayload
from services.exceptions import (
    BlockedTagsError,
    DescriptionTooLongError,
    DescriptionTooManyLinesError,
    MissingRequiredFieldsError,
    TooManyTagsError,
)


def find_missing_fields(payload: BookmarkPayload, require_user_id: bool = False) -> list[str]:
    """Return the camelCase names of required fields that are absent or empty."""
    missing = []
    if require_user_id and not payload.user_id:
        missing.append("userId")
    if not payload.name:
        missing.append("name")
    if not payload.location:
        missing.append("location")
    if not payload.tags:
        missing.append("tags")
    return missing


def find_blocked_tags(tags: list[str], prefix: str) -> list[str]:
    """Return every tag starting with the reserved prefix, in submission order."""
    return [tag for tag in tags if tag.startswith(prefix)]


def count_lines(text: str) -> int:
    """Count newline-delimited lines (an empty string is one line)."""
    return len(text.split("\n"))


def validate_bookmark(
    payload: BookmarkPayload,
    *,
    check_blocked_tags: bool = True,
    require_user_id: bool = False,
    limits: BookmarkLimits = BOOKMARK_LIMITS,
) -> None:
    """
    Validate a bookmark payload.

    Args:
        payload: The submitted bookmark.
        check_blocked_tags: Reject tags with the reserved prefix. Admin writes pass False.
        require_user_id: Treat userId as a required field.
        limits: Limits to apply.

    Raises:
        MissingRequiredFieldsError: If a required field is absent.
        TooManyTagsError: If more than `limits.max_tags` tags are submitted.
        BlockedTagsError: If any tag uses the reserved prefix.
        DescriptionTooLongError: If the description has too many characters.
        DescriptionTooManyLinesError: If the description has too many lines.
    """
    missing = find_missing_fields(payload, require_user_id=require_user_id)
    if missing:
        raise MissingRequiredFieldsError(missing)

    tags = payload.tags or []
    if len(tags) > limits.max_tags:
        raise TooManyTagsError(len(tags), limits.max_tags)

    if check_blocked_tags:
        blocked = find_blocked_tags(tags, limits.blocked_tag_prefix)
        if blocked:
            raise BlockedTagsError(blocked)

    description = payload.description
    if description:
        if len(description) > limits.max_description_chars:
            raise DescriptionTooLongError(len(description), limits.max_description_chars)

        lines = count_lines(description)
        if lines > limits.max_description_lines:
            raise DescriptionTooManyLinesError(lines, limits.max_description_lines)
