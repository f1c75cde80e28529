"""
Classified errors raised by the bookmark service layer.

Every error carries the HTTP status code it maps to, so the API layer can
translate it with a single exception handler.
"""
from collections.abc import Sequence


class BookmarkServiceError(Exception):
    """Base class for all classified bookmark errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# =============================================================================
# Validation (400)
# =============================================================================


class ValidationError(BookmarkServiceError):
    """Raised when a payload is missing, oversized, or malformed."""

    status_code = 400


class MissingRequiredFieldsError(ValidationError):
    """Raised when name, location, tags (or userId where required) are absent."""

    def __init__(self, fields: Sequence[str]) -> None:
        self.fields = list(fields)
        super().__init__(f"Missing required attributes: {', '.join(self.fields)}")


class TooManyTagsError(ValidationError):
    """Raised when more tags are submitted than allowed."""

    def __init__(self, count: int, max_tags: int) -> None:
        self.count = count
        self.max_tags = max_tags
        super().__init__(
            f"Too many tags have been submitted ({count}). Only {max_tags} allowed",
        )


class BlockedTagsError(ValidationError):
    """Raised when tags use a reserved prefix."""

    def __init__(self, tags: Sequence[str]) -> None:
        self.tags = list(tags)
        super().__init__(f"The following tags are blocked: {' '.join(self.tags)}")


class DescriptionTooLongError(ValidationError):
    """Raised when the description exceeds the character limit."""

    def __init__(self, length: int, max_chars: int) -> None:
        self.length = length
        self.max_chars = max_chars
        super().__init__(
            f"The description is too long ({length:,} characters). "
            f"Only {max_chars:,} allowed",
        )


class DescriptionTooManyLinesError(ValidationError):
    """Raised when the description exceeds the line limit."""

    def __init__(self, lines: int, max_lines: int) -> None:
        self.lines = lines
        self.max_lines = max_lines
        super().__init__(
            f"The description has too many lines ({lines}). Only {max_lines} allowed",
        )


class UserIdMismatchError(ValidationError):
    """Raised when the payload's userId does not match the acting principal."""

    def __init__(self) -> None:
        super().__init__("The userId of the bookmark does not match the userId parameter")


class MissingBulkDeleteFilterError(ValidationError):
    """Raised when a bulk delete is requested without any filter."""

    def __init__(self) -> None:
        super().__init__(
            "You can either delete bookmarks by location or userId - "
            "at least one of them is mandatory",
        )


class InvalidRangeError(BookmarkServiceError):
    """Raised when a time window starts after it ends."""

    status_code = 400

    def __init__(self) -> None:
        super().__init__("<since> param value must be before <to> parameter value")


# =============================================================================
# Authorization (401 / 403)
# =============================================================================


class AuthorizationError(BookmarkServiceError):
    """Base class for subject/owner mismatches and missing roles."""

    status_code = 401


class UnauthorizedError(AuthorizationError):
    """Raised when the acting subject does not own the addressed resources."""

    def __init__(self) -> None:
        super().__init__("The userId does not match the subject in the access token")


class ForbiddenError(AuthorizationError):
    """Raised when the acting principal lacks the required role."""

    status_code = 403

    def __init__(self, role: str) -> None:
        self.role = role
        super().__init__(f"This operation requires the {role} role")


# =============================================================================
# Conflict (409) / Not found (404) / Unclassified (500)
# =============================================================================


class ConflictError(BookmarkServiceError):
    """Raised when a write would violate a uniqueness rule."""

    status_code = 409


class DuplicatePublicLocationError(ConflictError):
    """Raised when a shared bookmark with the same location already exists."""

    def __init__(self, location: str) -> None:
        self.location = location
        super().__init__(f"A public bookmark with location '{location}' is already present")


class NotFoundError(BookmarkServiceError):
    """Raised when no record matches the given id/owner scope."""

    status_code = 404


class BookmarkNotFoundError(NotFoundError):
    """Raised when a bookmark lookup, update, or delete matches nothing."""

    def __init__(self, bookmark_id: int | None = None, location: str | None = None) -> None:
        self.bookmark_id = bookmark_id
        self.location = location
        if bookmark_id is not None:
            message = f"Bookmark with id {bookmark_id} not found"
        elif location is not None:
            message = f"Bookmark with location '{location}' not found"
        else:
            message = "Bookmark not found"
        super().__init__(message)


class UnclassifiedError(BookmarkServiceError):
    """Raised for unexpected storage or collaborator failures."""

    status_code = 500
