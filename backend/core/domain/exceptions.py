"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers.
They are deliberately **not** DRF exceptions so that the domain layer stays
framework-agnostic.  ``core.domain.exception_handler`` maps them to HTTP
responses and ``core.domain.results`` maps them to ``OperationResult``
values for non-HTTP callers.

Every class carries an ``error_kind`` so callers can tell *what to do*
about a failure without parsing messages:

┌──────────────────────┬──────────────────────┬──────┬──────────────────────────┐
│ Domain Exception     │ error_kind           │ HTTP │ Caller reaction          │
├──────────────────────┼──────────────────────┼──────┼──────────────────────────┤
│ DomainError          │ invalid_input        │ 400  │ correct the input        │
│ PermissionDenied     │ not_permitted        │ 403  │ give up                  │
│ NotFound             │ not_found            │ 404  │ give up (terminal)       │
│ Conflict             │ conflict             │ 409  │ refresh and re-decide    │
│ AlreadyClaimed       │ already_claimed      │ 409  │ refresh and re-select    │
│ InvalidTransition    │ invalid_transition   │ 409  │ refresh and re-decide    │
│ BackendUnavailable   │ system_error         │ 503  │ retry later              │
└──────────────────────┴──────────────────────┴──────┴──────────────────────────┘

Recommended usage inside a service::

    from core.domain.exceptions import InvalidTransition

    if (case.status, target) not in ALLOWED_TRANSITIONS:
        raise InvalidTransition(current=case.status, target=target)
"""

from __future__ import annotations


class ErrorKind:
    """String constants identifying each failure category."""

    INVALID_INPUT = "invalid_input"
    NOT_PERMITTED = "not_permitted"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    ALREADY_CLAIMED = "already_claimed"
    INVALID_TRANSITION = "invalid_transition"
    SYSTEM_ERROR = "system_error"


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Used directly for validation failures (missing symptoms, blank advice
    before resolve, over-long instructions).  Maps to 400 Bad Request.
    """

    error_kind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class PermissionDenied(DomainError):
    """
    The requesting user may not perform this operation (wrong tier, wrong
    role, or not the responder assigned to the case).

    Maps to HTTP 403.  Messages must stay generic at the tier boundary.
    """

    error_kind = ErrorKind.NOT_PERMITTED

    def __init__(self, message: str = "You are not permitted to perform this action.") -> None:
        super().__init__(message)


class NotFound(DomainError):
    """
    The requested case or profile does not exist (or is not visible to the
    requesting user).

    Maps to HTTP 404.
    """

    error_kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class Conflict(DomainError):
    """
    The operation conflicts with the current state of the resource.

    Typical usage: duplicate registration, failed compare-and-set.
    Maps to HTTP 409.
    """

    error_kind = ErrorKind.CONFLICT

    def __init__(self, message: str = "The operation conflicts with the current state.") -> None:
        super().__init__(message)


class AlreadyClaimed(Conflict):
    """
    Another responder won the race to claim the case.

    Raised when the conditional assignment write matched no row because
    ``assigned_responder`` was no longer empty.  The caller should re-fetch
    the case and pick another one; the engine never retries on its own.
    """

    error_kind = ErrorKind.ALREADY_CLAIMED

    def __init__(self, message: str = "This case has already been claimed by another responder.") -> None:
        super().__init__(message)


class InvalidTransition(Conflict):
    """
    A state-machine transition that is not allowed from the current status.

    Inherits from ``Conflict`` because an invalid transition IS a conflict
    with the resource's current state.  Maps to HTTP 409.

    Example::

        raise InvalidTransition(
            current="pending",
            target="resolved",
            reason="Case must be accepted before it can be resolved.",
        )
    """

    error_kind = ErrorKind.INVALID_TRANSITION

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        target: str | None = None,
        reason: str | None = None,
    ) -> None:
        if message is None:
            parts = ["Invalid state transition"]
            if current and target:
                parts.append(f"from '{current}' to '{target}'")
            if reason:
                parts.append(f"({reason})")
            message = " ".join(parts) + "."
        super().__init__(message)
        self.current = current
        self.target = target
        self.reason = reason


class ImmutableFieldError(DomainError):
    """
    A caller tried to write a field that only the lifecycle engine may
    change (``status``) or that never changes after creation (``severity``).
    """

    def __init__(self, field: str) -> None:
        super().__init__(f"Field '{field}' cannot be modified directly.")
        self.field = field


class BackendUnavailable(DomainError):
    """
    The backing store failed (connection lost, lock timeout, ...).

    The operation was rolled back as a unit; the caller may retry.
    Maps to HTTP 503.
    """

    error_kind = ErrorKind.SYSTEM_ERROR

    def __init__(self, message: str = "The service is temporarily unavailable. Please retry.") -> None:
        super().__init__(message)
