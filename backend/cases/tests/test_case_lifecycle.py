"""
Service-level tests for the case lifecycle: creation, claiming,
instructions, on-the-way, resolution and live distance.

Escalation and take-over live in ``test_case_escalation.py``.
"""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import TestCase

from accounts.models import ResponderProfile, ResponderTier, UserRole
from cases.models import Case, CaseStatus, CaseStatusLog, HelpType, Severity
from cases.services import CaseCreationService, CaseLifecycleService
from cases.store import CaseStore
from core.constants import DEFAULT_REVIEWING_ADVICE, INSTRUCTIONS_MAX_LENGTH
from core.domain.exceptions import (
    AlreadyClaimed,
    DomainError,
    ImmutableFieldError,
    InvalidTransition,
    NotFound,
    PermissionDenied,
)

User = get_user_model()


def _make_owner(email: str, phone: str = "+1 555 0100") -> User:
    return User.objects.create_user(
        username=email,
        email=email,
        password="TestPass123!",
        display_name=email.split("@")[0].title(),
        phone_number=phone,
        role=UserRole.OWNER,
    )


def _make_responder(email: str, tier: str) -> User:
    user = User.objects.create_user(
        username=email,
        email=email,
        password="TestPass123!",
        display_name=email.split("@")[0].title(),
        role=UserRole.RESPONDER,
    )
    ResponderProfile.objects.create(user=user, tier=tier)
    return user


def _profile(user: User) -> ResponderProfile:
    return ResponderProfile.objects.get(user=user)


class LifecycleTestBase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.owner = _make_owner("alex@example.com")
        cls.student = _make_responder("sam@example.com", ResponderTier.STUDENT)
        cls.other_student = _make_responder("sky@example.com", ResponderTier.STUDENT)
        cls.graduate = _make_responder("gale@example.com", ResponderTier.GRADUATE)
        cls.expert = _make_responder("quinn@example.com", ResponderTier.QUALIFIED)

    def _create(self, severity: str = Severity.LOW, **extra) -> Case:
        data = {"symptoms": "Dog ate chocolate", "severity": severity}
        data.update(extra)
        return CaseCreationService.create_case(data, self.owner)


# ═══════════════════════════════════════════════════════════════════
#  Creation
# ═══════════════════════════════════════════════════════════════════


class TestCreateCase(LifecycleTestBase):

    def test_new_case_is_pending_and_unassigned(self):
        case = self._create(latitude=35.7, longitude=51.4)

        self.assertEqual(case.status, CaseStatus.PENDING)
        self.assertIsNone(case.assigned_responder)
        self.assertEqual(case.owner_name, "Alex")
        self.assertEqual(case.owner_phone, "+1 555 0100")
        self.assertEqual(case.latitude, 35.7)
        log = CaseStatusLog.objects.get(case=case)
        self.assertEqual(log.from_status, "")
        self.assertEqual(log.to_status, CaseStatus.PENDING)

    def test_missing_coordinates_store_null_location(self):
        case = self._create()

        self.assertIsNone(case.latitude)
        self.assertIsNone(case.longitude)
        self.assertFalse(case.has_location)

    def test_single_coordinate_defaults_other_to_zero(self):
        case = self._create(latitude=12.5)

        self.assertEqual(case.latitude, 12.5)
        self.assertEqual(case.longitude, 0.0)

    def test_owner_snapshot_survives_profile_edit(self):
        case = self._create()
        User.objects.filter(pk=self.owner.pk).update(phone_number="000", display_name="Changed")

        case.refresh_from_db()
        self.assertEqual(case.owner_phone, "+1 555 0100")
        self.assertEqual(case.owner_name, "Alex")

    def test_responders_cannot_raise_sos(self):
        with self.assertRaises(PermissionDenied):
            CaseCreationService.create_case(
                {"symptoms": "x", "severity": Severity.LOW}, self.student,
            )

    def test_blank_symptoms_rejected(self):
        with self.assertRaises(DomainError):
            self._create(symptoms="   ")
        self.assertFalse(Case.objects.exists())

    def test_unknown_severity_rejected(self):
        with self.assertRaises(DomainError):
            self._create(severity="critical")


# ═══════════════════════════════════════════════════════════════════
#  Accept
# ═══════════════════════════════════════════════════════════════════


class TestAccept(LifecycleTestBase):

    def test_accept_claims_pending_case(self):
        case = self._create()

        case = CaseLifecycleService.accept(case.pk, self.student)

        self.assertEqual(case.status, CaseStatus.ACCEPTED)
        self.assertEqual(case.assigned_responder_id, self.student.pk)
        self.assertEqual(case.assigned_responder_name, "Sam")
        self.assertEqual(case.assigned_responder_tier, ResponderTier.STUDENT)
        self.assertEqual(case.advice, DEFAULT_REVIEWING_ADVICE)
        self.assertEqual(case.help_type, HelpType.REMOTE)

    def test_senior_accept_helps_in_person(self):
        case = self._create(Severity.MID)

        case = CaseLifecycleService.accept(case.pk, self.graduate)

        self.assertEqual(case.help_type, HelpType.IN_PERSON)

    def test_tier_is_rechecked_at_accept(self):
        case = self._create(Severity.MID)

        with self.assertRaises(PermissionDenied):
            CaseLifecycleService.accept(case.pk, self.student)
        with self.assertRaises(PermissionDenied):
            CaseLifecycleService.accept(self._create(Severity.HIGH).pk, self.graduate)

    def test_second_accept_is_already_claimed(self):
        case = self._create()
        CaseLifecycleService.accept(case.pk, self.student)

        with self.assertRaises(AlreadyClaimed):
            CaseLifecycleService.accept(case.pk, self.other_student)

        case.refresh_from_db()
        self.assertEqual(case.assigned_responder_id, self.student.pk)

    def test_losing_a_race_reports_already_claimed(self):
        """
        Both responders read the case while it is pending; only the first
        conditional write applies.
        """
        case = self._create()
        stale = CaseStore.get(case.pk)
        CaseLifecycleService.accept(case.pk, self.student)

        real_get = CaseStore.get
        snapshots = iter([stale])

        def _get(case_id, **kwargs):
            try:
                return next(snapshots)
            except StopIteration:
                return real_get(case_id, **kwargs)

        with patch.object(CaseStore, "get", side_effect=_get):
            with self.assertRaises(AlreadyClaimed):
                CaseLifecycleService.accept(case.pk, self.other_student)

        case.refresh_from_db()
        self.assertEqual(case.assigned_responder_id, self.student.pk)
        self.assertEqual(
            CaseStatusLog.objects.filter(case=case, to_status=CaseStatus.ACCEPTED).count(), 1,
        )

    def test_conditional_update_applies_once(self):
        case = self._create()
        precondition = {"status": CaseStatus.PENDING, "assigned_responder__isnull": True}

        first = CaseStore.conditional_update(
            case.pk, precondition, {"status": CaseStatus.ACCEPTED, "assigned_responder": self.student},
        )
        second = CaseStore.conditional_update(
            case.pk, precondition, {"status": CaseStatus.ACCEPTED, "assigned_responder": self.graduate},
        )

        self.assertTrue(first)
        self.assertFalse(second)
        case.refresh_from_db()
        self.assertEqual(case.assigned_responder_id, self.student.pk)

    def test_owner_cannot_accept(self):
        case = self._create()

        with self.assertRaises(PermissionDenied):
            CaseLifecycleService.accept(case.pk, self.owner)

    def test_accept_missing_case(self):
        with self.assertRaises(NotFound):
            CaseLifecycleService.accept(999999, self.student)


# ═══════════════════════════════════════════════════════════════════
#  Instructions and On-the-way
# ═══════════════════════════════════════════════════════════════════


class TestInstructionsAndOnWay(LifecycleTestBase):

    def test_assignee_updates_instructions(self):
        case = self._create()
        CaseLifecycleService.accept(case.pk, self.student)

        case = CaseLifecycleService.update_instructions(case.pk, self.student, "Keep the dog calm.")

        self.assertEqual(case.volunteer_notes, "Keep the dog calm.")
        self.assertEqual(case.advice, "Keep the dog calm.")
        self.assertEqual(case.status, CaseStatus.ACCEPTED)

    def test_non_assignee_cannot_update_instructions(self):
        case = self._create()
        CaseLifecycleService.accept(case.pk, self.student)

        with self.assertRaises(PermissionDenied):
            CaseLifecycleService.update_instructions(case.pk, self.other_student, "Bad advice")

        case.refresh_from_db()
        self.assertEqual(case.advice, DEFAULT_REVIEWING_ADVICE)
        self.assertEqual(case.volunteer_notes, "")

    def test_qualified_non_assignee_cannot_update_instructions(self):
        case = self._create()
        CaseLifecycleService.accept(case.pk, self.student)

        with self.assertRaises(PermissionDenied):
            CaseLifecycleService.update_instructions(case.pk, self.expert, "Senior override")

        case.refresh_from_db()
        self.assertEqual(case.advice, DEFAULT_REVIEWING_ADVICE)
        self.assertEqual(case.volunteer_notes, "")
        self.assertEqual(case.assigned_responder_id, self.student.pk)

    def test_instruction_validation_runs_before_lookup(self):
        with self.assertRaises(DomainError) as ctx:
            CaseLifecycleService.update_instructions(
                999999, self.student, "x" * (INSTRUCTIONS_MAX_LENGTH + 1),
            )
        self.assertNotIsInstance(ctx.exception, NotFound)

        with self.assertRaises(DomainError) as ctx:
            CaseLifecycleService.update_instructions(999999, self.student, "   ")
        self.assertNotIsInstance(ctx.exception, NotFound)

    def test_instructions_at_limit_accepted(self):
        case = self._create()
        CaseLifecycleService.accept(case.pk, self.student)

        case = CaseLifecycleService.update_instructions(
            case.pk, self.student, "y" * INSTRUCTIONS_MAX_LENGTH,
        )

        self.assertEqual(len(case.volunteer_notes), INSTRUCTIONS_MAX_LENGTH)

    def test_graduate_marks_on_way(self):
        case = self._create(Severity.MID)
        CaseLifecycleService.accept(case.pk, self.graduate)

        case = CaseLifecycleService.mark_on_way(case.pk, self.graduate)

        self.assertEqual(case.status, CaseStatus.ON_WAY)
        with self.assertRaises(InvalidTransition):
            CaseLifecycleService.mark_on_way(case.pk, self.graduate)

    def test_student_cannot_mark_on_way(self):
        case = self._create()
        CaseLifecycleService.accept(case.pk, self.student)

        with self.assertRaises(PermissionDenied):
            CaseLifecycleService.mark_on_way(case.pk, self.student)

    def test_instructions_allowed_while_on_way(self):
        case = self._create()
        CaseLifecycleService.accept(case.pk, self.expert)
        CaseLifecycleService.mark_on_way(case.pk, self.expert)

        case = CaseLifecycleService.update_instructions(case.pk, self.expert, "Arriving in 5.")

        self.assertEqual(case.status, CaseStatus.ON_WAY)
        self.assertEqual(case.advice, "Arriving in 5.")


# ═══════════════════════════════════════════════════════════════════
#  Resolve
# ═══════════════════════════════════════════════════════════════════


class TestResolve(LifecycleTestBase):

    def test_resolve_awards_points_and_count(self):
        case = self._create()
        CaseLifecycleService.accept(case.pk, self.student)
        CaseLifecycleService.update_instructions(case.pk, self.student, "Induce vomiting at a vet.")

        case, payload = CaseLifecycleService.resolve(case.pk, self.student)

        self.assertEqual(case.status, CaseStatus.RESOLVED)
        self.assertIsNotNone(case.resolved_at)
        self.assertEqual(payload, {"points_earned": 10})
        profile = _profile(self.student)
        self.assertEqual(profile.points, 10)
        self.assertEqual(profile.resolved_count, 1)

    def test_resolve_is_idempotent(self):
        case = self._create(Severity.HIGH)
        CaseLifecycleService.accept(case.pk, self.expert)
        first_case, first = CaseLifecycleService.resolve(case.pk, self.expert, "Rush to clinic.")

        second_case, second = CaseLifecycleService.resolve(case.pk, self.expert)

        self.assertEqual(first["points_earned"], 50)
        self.assertEqual(second, {"points_earned": 0, "already_resolved": True})
        self.assertEqual(second_case.resolved_at, first_case.resolved_at)
        profile = _profile(self.expert)
        self.assertEqual(profile.points, 50)
        self.assertEqual(profile.resolved_count, 1)

    def test_resolve_requires_guidance(self):
        case = self._create()
        CaseLifecycleService.accept(case.pk, self.student)

        with self.assertRaises(DomainError):
            CaseLifecycleService.resolve(case.pk, self.student)

        case.refresh_from_db()
        self.assertEqual(case.status, CaseStatus.ACCEPTED)
        self.assertEqual(_profile(self.student).points, 0)

    def test_closing_advice_is_saved(self):
        case = self._create()
        CaseLifecycleService.accept(case.pk, self.student)

        case, _ = CaseLifecycleService.resolve(case.pk, self.student, "Give water, rest.")

        self.assertEqual(case.advice, "Give water, rest.")
        log = CaseStatusLog.objects.filter(case=case, to_status=CaseStatus.RESOLVED).get()
        self.assertEqual(log.message, "Give water, rest.")

    def test_only_assignee_can_resolve(self):
        case = self._create()
        CaseLifecycleService.accept(case.pk, self.student)

        with self.assertRaises(PermissionDenied):
            CaseLifecycleService.resolve(case.pk, self.other_student, "Advice")

    def test_pending_case_cannot_be_resolved(self):
        case = self._create()

        with self.assertRaises(PermissionDenied):
            CaseLifecycleService.resolve(case.pk, self.student, "Advice")


# ═══════════════════════════════════════════════════════════════════
#  Live location
# ═══════════════════════════════════════════════════════════════════


class TestLiveLocation(LifecycleTestBase):

    def test_distance_recorded_and_cleared_on_resolve(self):
        case = self._create(latitude=0.0, longitude=0.0)
        CaseLifecycleService.accept(case.pk, self.expert)

        case, payload = CaseLifecycleService.update_live_location(case.pk, self.expert, 1.0, 0.0)

        self.assertEqual(case.current_distance_km, Decimal("111.19"))
        self.assertEqual(payload, {"distance_km": 111.19})
        self.assertIsNotNone(case.location_updated_at)

        case, _ = CaseLifecycleService.resolve(case.pk, self.expert, "Done.")
        self.assertIsNone(case.current_distance_km)

    def test_owner_location_required(self):
        case = self._create()
        CaseLifecycleService.accept(case.pk, self.expert)

        with self.assertRaises(DomainError):
            CaseLifecycleService.update_live_location(case.pk, self.expert, 1.0, 1.0)

    def test_only_assignee_reports_location(self):
        case = self._create(latitude=1.0, longitude=1.0)
        CaseLifecycleService.accept(case.pk, self.expert)

        with self.assertRaises(PermissionDenied):
            CaseLifecycleService.update_live_location(case.pk, self.graduate, 1.0, 1.0)

    def test_out_of_range_coordinates(self):
        with self.assertRaises(DomainError):
            CaseLifecycleService.update_live_location(1, self.expert, 91.0, 0.0)


# ═══════════════════════════════════════════════════════════════════
#  Guarded fields
# ═══════════════════════════════════════════════════════════════════


class TestGuardedFields(LifecycleTestBase):

    def test_severity_cannot_change_after_creation(self):
        case = self._create(Severity.LOW)

        case.severity = Severity.HIGH
        with self.assertRaises(ImmutableFieldError):
            case.save()

        self.assertEqual(Case.objects.get(pk=case.pk).severity, Severity.LOW)

    def test_severity_guard_applies_to_loaded_rows(self):
        case = Case.objects.get(pk=self._create(Severity.MID).pk)

        case.severity = Severity.LOW
        with self.assertRaises(ImmutableFieldError):
            case.save()

    def test_status_cannot_be_saved_directly(self):
        case = Case.objects.get(pk=self._create().pk)

        case.status = CaseStatus.RESOLVED
        with self.assertRaises(ImmutableFieldError):
            case.save()

    def test_other_fields_still_save(self):
        case = Case.objects.get(pk=self._create().pk)

        case.symptoms = "Dog ate grapes"
        case.save()

        self.assertEqual(Case.objects.get(pk=case.pk).symptoms, "Dog ate grapes")
