"""
cases.engine — Result-returning entry point to the case lifecycle.

The service classes raise ``core.domain.exceptions`` on failure, which
suits DRF views.  Other callers (management commands, background jobs,
other apps) use ``CaseEngine`` instead: every method returns an
``OperationResult`` whose ``error_kind`` tells the caller whether to
correct the input, refresh and re-select, or retry later.

Usage::

    from cases.engine import CaseEngine

    result = CaseEngine.accept(case_id, responder)
    if result.error_kind == ErrorKind.ALREADY_CLAIMED:
        ...

    result = CaseEngine.resolve(case_id, responder)
    result.payload["points_earned"]
"""

from __future__ import annotations

from typing import Any

from core.domain.results import OperationResult, run_operation

from .services import (
    CaseCreationService,
    CaseHistoryService,
    CaseLifecycleService,
)


class CaseEngine:

    @staticmethod
    def create_case(owner: Any, symptoms: str, severity: str,
                    latitude: float | None = None, longitude: float | None = None,
                    image_url: str = "") -> OperationResult:
        data = {
            "symptoms": symptoms,
            "severity": severity,
            "latitude": latitude,
            "longitude": longitude,
            "image_url": image_url,
        }
        return run_operation(CaseCreationService.create_case, data, owner)

    @staticmethod
    def accept(case_id: int, responder: Any) -> OperationResult:
        return run_operation(CaseLifecycleService.accept, case_id, responder)

    @staticmethod
    def mark_on_way(case_id: int, responder: Any) -> OperationResult:
        return run_operation(CaseLifecycleService.mark_on_way, case_id, responder)

    @staticmethod
    def update_instructions(case_id: int, responder: Any, text: str) -> OperationResult:
        return run_operation(CaseLifecycleService.update_instructions, case_id, responder, text)

    @staticmethod
    def escalate(case_id: int, responder: Any) -> OperationResult:
        return run_operation(CaseLifecycleService.escalate, case_id, responder)

    @staticmethod
    def take_over(case_id: int, responder: Any) -> OperationResult:
        return run_operation(CaseLifecycleService.take_over, case_id, responder)

    @staticmethod
    def resolve(case_id: int, responder: Any, advice: str = "") -> OperationResult:
        return run_operation(CaseLifecycleService.resolve, case_id, responder, advice)

    @staticmethod
    def update_live_location(case_id: int, responder: Any,
                             latitude: float, longitude: float) -> OperationResult:
        return run_operation(
            CaseLifecycleService.update_live_location, case_id, responder, latitude, longitude,
        )

    @staticmethod
    def archive_toggle(case_id: int, user: Any) -> OperationResult:
        return run_operation(CaseHistoryService.archive_toggle, case_id, user)

    @staticmethod
    def soft_delete(case_id: int, user: Any) -> OperationResult:
        return run_operation(CaseHistoryService.soft_delete, case_id, user)

    @staticmethod
    def restore(case_id: int, user: Any) -> OperationResult:
        return run_operation(CaseHistoryService.restore, case_id, user)

    @staticmethod
    def permanent_delete(case_id: int, user: Any) -> OperationResult:
        return run_operation(CaseHistoryService.permanent_delete, case_id, user)

    @staticmethod
    def empty_trash(user: Any) -> OperationResult:
        result = run_operation(CaseHistoryService.empty_trash, user)
        if result.success:
            return OperationResult.ok(None, **result.value)
        return result
