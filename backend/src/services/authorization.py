"""
Authorization guard for bookmark operations.

A pure decision over (principal, operation, target owner). `decide` returns a
tagged outcome; `authorize` raises the outcome's error so callers can fail fast
before any store mutation.
"""
import logging
from dataclasses import dataclass
from enum import StrEnum

from schemas.principal import Principal
from services.exceptions import (
    AuthorizationError,
    ForbiddenError,
    UnauthorizedError,
    UserIdMismatchError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class Operation(StrEnum):
    """Operations subject to authorization."""

    READ_OWN = "read_own"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ADMIN = "admin"  # listing, aggregation, bulk delete and admin CRUD


@dataclass(frozen=True)
class AuthorizationDecision:
    """Outcome of an authorization check; `error` is set when denied."""

    allowed: bool
    error: AuthorizationError | ValidationError | None = None


ALLOWED = AuthorizationDecision(allowed=True)


def _deny(error: AuthorizationError | ValidationError) -> AuthorizationDecision:
    return AuthorizationDecision(allowed=False, error=error)


def decide(
    principal: Principal,
    operation: Operation,
    target_owner_id: str | None = None,
    payload_user_id: str | None = None,
) -> AuthorizationDecision:
    """
    Decide whether `principal` may perform `operation` on resources of `target_owner_id`.

    Args:
        principal: The verified caller.
        operation: The operation being attempted.
        target_owner_id: Owner addressed by the request path (personal routes).
        payload_user_id: userId carried by a create/update payload.

    Returns:
        ALLOWED, or a denial carrying UnauthorizedError (401), ForbiddenError (403),
        or UserIdMismatchError (400).
    """
    if operation is Operation.ADMIN:
        if principal.is_admin:
            return ALLOWED
        return _deny(ForbiddenError(principal.admin_role))

    if operation in (Operation.UPDATE, Operation.DELETE) and principal.is_admin:
        return ALLOWED

    if principal.subject_id != target_owner_id:
        return _deny(UnauthorizedError())

    writes_payload = operation in (Operation.CREATE, Operation.UPDATE)
    if writes_payload and payload_user_id != principal.subject_id:
        return _deny(UserIdMismatchError())

    return ALLOWED


def authorize(
    principal: Principal,
    operation: Operation,
    target_owner_id: str | None = None,
    payload_user_id: str | None = None,
) -> None:
    """
    Raise the denial error if `principal` may not perform `operation`.

    Raises:
        UnauthorizedError: Subject does not match the path owner.
        ForbiddenError: Admin role required.
        UserIdMismatchError: Payload userId does not match the subject.
    """
    decision = decide(principal, operation, target_owner_id, payload_user_id)
    if not decision.allowed:
        logger.warning(
            "Denied %s for subject %s on owner %s: %s",
            operation.value,
            principal.subject_id,
            target_owner_id,
            decision.error,
        )
        raise decision.error
