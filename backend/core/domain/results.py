"""
core.domain.results — Result envelope for caller-facing operations.

Service methods raise ``core.domain.exceptions`` on failure.  Callers that
are not DRF views (management commands, background jobs, other apps) want a
plain value instead, so ``run_operation`` executes a service call and folds
the outcome into an ``OperationResult``.

Usage::

    from core.domain.results import run_operation

    result = run_operation(CaseLifecycleService.accept, case_id, responder)
    if not result.success and result.error_kind == ErrorKind.ALREADY_CLAIMED:
        ...  # refresh the feed and pick another case
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from django.db import DatabaseError

from core.domain.exceptions import BackendUnavailable, DomainError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of a single engine operation.

    ``value`` holds whatever the service returned on success (usually a
    ``Case``); ``payload`` holds extra success data such as points earned.
    """

    success: bool
    error: str | None = None
    error_kind: str | None = None
    value: Any = None
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, value: Any = None, **payload: Any) -> OperationResult:
        return cls(success=True, value=value, payload=payload)

    @classmethod
    def from_exception(cls, exc: DomainError) -> OperationResult:
        return cls(success=False, error=exc.message, error_kind=exc.error_kind)

    def as_dict(self) -> dict[str, Any]:
        """Wire shape: ``{"success": bool, "error"?: str, "error_kind"?: str, ...}``."""
        if self.success:
            return {"success": True, **self.payload}
        return {"success": False, "error": self.error, "error_kind": self.error_kind}


def run_operation(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> OperationResult:
    """
    Call ``fn(*args, **kwargs)`` and wrap the outcome.

    Domain errors become failed results carrying their ``error_kind``.
    Database failures become ``system_error`` results; the surrounding
    ``transaction.atomic`` inside the service has already rolled back.
    Anything else is a bug and propagates.

    If ``fn`` returns a ``(value, payload_dict)`` tuple the dict is exposed
    as ``OperationResult.payload``.
    """
    try:
        outcome = fn(*args, **kwargs)
    except DomainError as exc:
        return OperationResult.from_exception(exc)
    except DatabaseError:
        logger.exception("Backend failure in %s", getattr(fn, "__qualname__", fn))
        return OperationResult.from_exception(BackendUnavailable())

    if isinstance(outcome, tuple) and len(outcome) == 2 and isinstance(outcome[1], dict):
        value, payload = outcome
        return OperationResult.ok(value, **payload)
    return OperationResult.ok(outcome)
