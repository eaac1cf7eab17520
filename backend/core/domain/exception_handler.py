"""
core.domain.exception_handler — DRF-compatible global exception handler.

Maps domain exceptions from ``core.domain.exceptions`` to DRF ``Response``
objects carrying the failure envelope::

    {"success": false, "error": "<message>", "error_kind": "<kind>"}

so that views don't need per-endpoint try/except boilerplate.

Registered in ``settings.py``::

    REST_FRAMEWORK = {
        ...
        'EXCEPTION_HANDLER': 'core.domain.exception_handler.domain_exception_handler',
    }
"""

from __future__ import annotations

import logging

from django.db import DatabaseError
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_default_handler

from core.domain.exceptions import (
    AlreadyClaimed,
    BackendUnavailable,
    Conflict,
    DomainError,
    ErrorKind,
    InvalidTransition,
    NotFound,
    PermissionDenied,
)
from core.domain.results import OperationResult

logger = logging.getLogger(__name__)

# Domain exception → HTTP status code
_STATUS_MAP: dict[type, int] = {
    PermissionDenied:   403,
    NotFound:           404,
    AlreadyClaimed:     409,
    InvalidTransition:  409,
    Conflict:           409,
    BackendUnavailable: 503,
    DomainError:        400,  # catch-all base class last
}


def domain_exception_handler(exc: Exception, context: dict) -> Response | None:
    """
    DRF exception handler that also handles ``core.domain.exceptions``.

    The default DRF handler runs first; serializer ``ValidationError``
    responses are tagged with ``invalid_input`` so clients see one error
    vocabulary.  Unrecognised domain exceptions are checked next, and
    ``DatabaseError`` is reported as a retryable ``system_error``.
    """
    response = drf_default_handler(exc, context)
    if response is not None:
        if isinstance(exc, ValidationError):
            response.data = {
                "success": False,
                "error": "Invalid input.",
                "error_kind": ErrorKind.INVALID_INPUT,
                "fields": response.data,
            }
        return response

    if isinstance(exc, DatabaseError):
        logger.exception("Backend failure in %s", context.get("view", "unknown"))
        exc = BackendUnavailable()

    # Order matters — most specific first
    for exc_class, status_code in _STATUS_MAP.items():
        if isinstance(exc, exc_class):
            logger.warning(
                "Domain exception [%s] in %s: %s",
                exc_class.__name__,
                context.get("view", "unknown"),
                exc,
            )
            return Response(
                OperationResult.from_exception(exc).as_dict(),
                status=status_code,
            )

    # Not our exception — let it propagate
    return None
