"""
Tests for history management (archive, trash, restore, permanent delete)
and for the result-returning ``CaseEngine`` entry point.
"""

from __future__ import annotations

from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import OperationalError
from django.test import TestCase

from accounts.models import ResponderProfile, ResponderTier, UserRole
from cases.engine import CaseEngine
from cases.models import Case, CaseStatus, Severity
from cases.services import CaseHistoryService, CaseLifecycleService, CaseQueryService, HistoryView
from cases.store import CaseStore
from core.domain.exceptions import Conflict, DomainError, ErrorKind, NotFound

User = get_user_model()


def _make_user(email: str, role: str, tier: str | None = None) -> User:
    user = User.objects.create_user(
        username=email,
        email=email,
        password="TestPass123!",
        display_name=email.split("@")[0].title(),
        phone_number="+1 555 0142",
        role=role,
    )
    if tier is not None:
        ResponderProfile.objects.create(user=user, tier=tier)
    return user


def _history_ids(user, view: str = HistoryView.ACTIVE) -> list[int]:
    return list(CaseQueryService.history(user, view).values_list("pk", flat=True))


class TestCaseHistory(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.owner = _make_user("hana@example.com", UserRole.OWNER)
        cls.stranger = _make_user("ivan@example.com", UserRole.OWNER)
        cls.expert = _make_user("jade@example.com", UserRole.RESPONDER, ResponderTier.QUALIFIED)

    def _pending(self) -> Case:
        result = CaseEngine.create_case(self.owner, "Kitten sneezing", Severity.LOW)
        return result.value

    def _resolved(self) -> Case:
        case = self._pending()
        CaseLifecycleService.accept(case.pk, self.expert)
        case, _ = CaseLifecycleService.resolve(case.pk, self.expert, "Steam and rest.")
        return case

    def test_trash_and_restore_round_trip(self):
        case = self._resolved()

        trashed = CaseHistoryService.soft_delete(case.pk, self.owner)

        self.assertTrue(trashed.is_deleted)
        self.assertIsNotNone(trashed.deleted_at)
        self.assertEqual(_history_ids(self.owner), [])
        self.assertEqual(_history_ids(self.owner, HistoryView.TRASH), [case.pk])

        restored = CaseHistoryService.restore(case.pk, self.owner)

        self.assertFalse(restored.is_deleted)
        self.assertIsNone(restored.deleted_at)
        self.assertEqual(_history_ids(self.owner), [case.pk])

    def test_trash_is_idempotent(self):
        case = self._pending()
        first = CaseHistoryService.soft_delete(case.pk, self.owner)

        second = CaseHistoryService.soft_delete(case.pk, self.owner)

        self.assertEqual(second.deleted_at, first.deleted_at)

    def test_archive_toggle(self):
        case = self._resolved()

        archived = CaseHistoryService.archive_toggle(case.pk, self.owner)
        self.assertTrue(archived.is_archived)
        self.assertEqual(_history_ids(self.owner, HistoryView.ARCHIVED), [case.pk])
        self.assertEqual(_history_ids(self.owner), [])

        unarchived = CaseHistoryService.archive_toggle(case.pk, self.owner)
        self.assertFalse(unarchived.is_archived)

    def test_cannot_file_away_an_active_case(self):
        case = self._pending()
        CaseLifecycleService.accept(case.pk, self.expert)

        with self.assertRaises(Conflict):
            CaseHistoryService.soft_delete(case.pk, self.owner)
        with self.assertRaises(Conflict):
            CaseHistoryService.archive_toggle(case.pk, self.expert)

    def test_responder_history_includes_assigned_cases(self):
        case = self._resolved()

        self.assertEqual(_history_ids(self.expert), [case.pk])
        CaseHistoryService.soft_delete(case.pk, self.expert)
        self.assertEqual(_history_ids(self.expert, HistoryView.TRASH), [case.pk])

    def test_non_stakeholder_gets_not_found(self):
        case = self._pending()

        with self.assertRaises(NotFound):
            CaseHistoryService.soft_delete(case.pk, self.stranger)

    def test_permanent_delete_requires_trash(self):
        case = self._resolved()

        with self.assertRaises(Conflict):
            CaseHistoryService.permanent_delete(case.pk, self.owner)

        CaseHistoryService.soft_delete(case.pk, self.owner)
        CaseHistoryService.permanent_delete(case.pk, self.owner)

        self.assertFalse(Case.objects.filter(pk=case.pk).exists())

    def test_empty_trash_only_touches_callers_cases(self):
        mine = [self._resolved(), self._pending()]
        kept = self._pending()
        for case in mine:
            CaseHistoryService.soft_delete(case.pk, self.owner)

        result = CaseHistoryService.empty_trash(self.owner)

        self.assertEqual(result, {"deleted_count": 2})
        self.assertEqual(list(Case.objects.values_list("pk", flat=True)), [kept.pk])

    def test_unknown_history_view(self):
        with self.assertRaises(DomainError):
            CaseQueryService.history(self.owner, "everything")


class TestCaseEngine(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.owner = _make_user("kai@example.com", UserRole.OWNER)
        cls.student = _make_user("lee@example.com", UserRole.RESPONDER, ResponderTier.STUDENT)
        cls.other_student = _make_user("max@example.com", UserRole.RESPONDER, ResponderTier.STUDENT)
        cls.expert = _make_user("noor@example.com", UserRole.RESPONDER, ResponderTier.QUALIFIED)

    def test_create_case_success(self):
        result = CaseEngine.create_case(self.owner, "Hamster lethargic", Severity.LOW, 10.0, 20.0)

        self.assertTrue(result.success)
        self.assertEqual(result.value.status, CaseStatus.PENDING)
        self.assertEqual(result.as_dict(), {"success": True})

    def test_validation_failure_kind(self):
        result = CaseEngine.create_case(self.owner, "", Severity.LOW)

        self.assertFalse(result.success)
        self.assertEqual(result.error_kind, ErrorKind.INVALID_INPUT)

    def test_already_claimed_kind(self):
        case = CaseEngine.create_case(self.owner, "Hamster lethargic", Severity.LOW).value
        self.assertTrue(CaseEngine.accept(case.pk, self.student).success)

        result = CaseEngine.accept(case.pk, self.other_student)

        self.assertFalse(result.success)
        self.assertEqual(result.error_kind, ErrorKind.ALREADY_CLAIMED)
        self.assertEqual(
            result.as_dict(),
            {
                "success": False,
                "error": "This case has already been claimed by another responder.",
                "error_kind": ErrorKind.ALREADY_CLAIMED,
            },
        )

    def test_not_permitted_kind(self):
        case = CaseEngine.create_case(self.owner, "Dog bleeding", Severity.MID).value

        result = CaseEngine.accept(case.pk, self.student)

        self.assertEqual(result.error_kind, ErrorKind.NOT_PERMITTED)

    def test_invalid_transition_kind(self):
        case = CaseEngine.create_case(self.owner, "Fish floating", Severity.LOW).value
        CaseEngine.accept(case.pk, self.student)
        CaseEngine.escalate(case.pk, self.student)

        result = CaseEngine.escalate(case.pk, self.student)

        self.assertEqual(result.error_kind, ErrorKind.NOT_PERMITTED)
        result = CaseEngine.accept(case.pk, self.other_student)
        self.assertEqual(result.error_kind, ErrorKind.INVALID_TRANSITION)

    def test_high_escalation_is_a_failed_result(self):
        case = CaseEngine.create_case(self.owner, "Horse colic", Severity.HIGH).value
        self.assertTrue(CaseEngine.accept(case.pk, self.expert).success)
        ResponderProfile.objects.filter(user=self.expert).update(tier=ResponderTier.STUDENT)

        result = CaseEngine.escalate(case.pk, self.expert)

        self.assertFalse(result.success)
        self.assertEqual(result.error_kind, ErrorKind.NOT_PERMITTED)
        self.assertIsNone(result.value)
        case.refresh_from_db()
        self.assertEqual(case.status, CaseStatus.ACCEPTED)

    def test_points_exposed_in_payload(self):
        case = CaseEngine.create_case(self.owner, "Cat vomiting", Severity.LOW).value
        CaseEngine.accept(case.pk, self.student)
        CaseEngine.update_instructions(case.pk, self.student, "Withhold food for 12h.")

        result = CaseEngine.resolve(case.pk, self.student)
        repeat = CaseEngine.resolve(case.pk, self.student)

        self.assertEqual(result.payload, {"points_earned": 10})
        self.assertTrue(repeat.success)
        self.assertEqual(repeat.payload["points_earned"], 0)

    def test_not_found_kind(self):
        result = CaseEngine.soft_delete(424242, self.owner)

        self.assertEqual(result.error_kind, ErrorKind.NOT_FOUND)

    def test_empty_trash_payload(self):
        result = CaseEngine.empty_trash(self.owner)

        self.assertTrue(result.success)
        self.assertEqual(result.payload, {"deleted_count": 0})

    def test_backend_failure_is_system_error(self):
        case = CaseEngine.create_case(self.owner, "Lizard cold", Severity.LOW).value

        with patch.object(CaseStore, "conditional_update", side_effect=OperationalError("db gone")):
            with self.assertLogs("core.domain.results", level="ERROR"):
                result = CaseEngine.accept(case.pk, self.student)

        self.assertFalse(result.success)
        self.assertEqual(result.error_kind, ErrorKind.SYSTEM_ERROR)
        case.refresh_from_db()
        self.assertEqual(case.status, CaseStatus.PENDING)
