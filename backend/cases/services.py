"""
Cases app Service Layer.

This module is the **single source of truth** for all business logic
in the ``cases`` app.  Views must remain thin: validate input via
serializers, call a service method, and return the result wrapped in
a DRF ``Response``.

Architecture
------------
- ``CaseQueryService``      — Feeds, history views and visibility checks.
- ``CaseCreationService``   — Owner raises an SOS.
- ``CaseLifecycleService``  — State-machine transitions and live tracking.
- ``CaseHistoryService``    — Archive, trash, restore and permanent delete.

Workflow State-Machine Overview
--------------------------------
  PENDING
    → ACCEPTED      (any responder whose tier can see the severity)
  ACCEPTED
    → ON_WAY        (assignee, graduate or qualified only)
    → ESCALATED     (assignee, student only; triage reward)
    → RESOLVED      (assignee, after giving instructions; resolve reward)
  ON_WAY
    → ESCALATED / RESOLVED  (as above)
  ESCALATED
    → ACCEPTED      (take-over by a graduate or qualified responder)
  RESOLVED          (terminal; a repeated resolve is a no-op success)

Every status write is a compare-and-set through ``CaseStore`` inside
``transaction.atomic``, together with the reward increment and the
status log row.  Push notifications go out after commit.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from accounts.models import ResponderTier
from accounts.services import ResponderDirectory
from core.constants import DEFAULT_REVIEWING_ADVICE, INSTRUCTIONS_MAX_LENGTH
from core.domain.exceptions import (
    AlreadyClaimed,
    Conflict,
    DomainError,
    InvalidTransition,
    NotFound,
    PermissionDenied,
)

from . import geo, policy
from .dispatch import CASE_CREATED, CASE_ESCALATED, NotificationDispatchPolicy
from .models import (
    ACTIVE_ASSIGNMENT_STATUSES,
    FEED_STATUSES,
    Case,
    CaseStatus,
    CaseStatusLog,
    HelpType,
    Severity,
)
from .rewards import RewardAccountingService
from .store import CaseStore

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Valid transition map
# ═══════════════════════════════════════════════════════════════════

#: Maps (from_status, to_status) → the operation that performs it.
#: Transitions not present here are illegal.
ALLOWED_TRANSITIONS: dict[tuple[str, str], str] = {
    (CaseStatus.PENDING, CaseStatus.ACCEPTED): "accept",
    (CaseStatus.ACCEPTED, CaseStatus.ON_WAY): "mark_on_way",
    (CaseStatus.ACCEPTED, CaseStatus.ESCALATED): "escalate",
    (CaseStatus.ON_WAY, CaseStatus.ESCALATED): "escalate",
    (CaseStatus.ESCALATED, CaseStatus.ACCEPTED): "take_over",
    (CaseStatus.ACCEPTED, CaseStatus.RESOLVED): "resolve",
    (CaseStatus.ON_WAY, CaseStatus.RESOLVED): "resolve",
}

#: Statuses in which owners and responders may file a case away.
HISTORY_MUTABLE_STATUSES = (CaseStatus.PENDING, CaseStatus.RESOLVED)


class HistoryView:
    ACTIVE = "active"
    ARCHIVED = "archived"
    TRASH = "trash"

    choices = (ACTIVE, ARCHIVED, TRASH)


def _require_transition(case: Case, target: str, operation: str) -> None:
    if ALLOWED_TRANSITIONS.get((case.status, target)) != operation:
        raise InvalidTransition(current=case.status, target=target)


def _require_assignee(case: Case, user: Any) -> None:
    if case.assigned_responder_id is None or case.assigned_responder_id != user.pk:
        raise PermissionDenied()


def _raise_stale(case_id: int, target: str) -> None:
    """
    The conditional write matched no row: someone else changed the case
    between our read and our write.  Report what it looks like now.
    """
    fresh = CaseStore.get(case_id)
    raise InvalidTransition(
        current=fresh.status,
        target=target,
        reason="the case changed while you were acting on it",
    )


def _log_transition(
    case_id: int,
    from_status: str,
    to_status: str,
    actor: Any,
    message: str = "",
) -> None:
    CaseStatusLog.objects.create(
        case_id=case_id,
        from_status=from_status,
        to_status=to_status,
        changed_by=actor,
        message=message,
    )
    logger.info(
        "Case #%s: %s -> %s by user %s",
        case_id,
        from_status or "-",
        to_status,
        getattr(actor, "pk", None),
    )


def _validate_instructions(text: str | None, *, required: bool) -> str:
    text = (text or "").strip()
    if required and not text:
        raise DomainError("Please enter instructions first.")
    if len(text) > INSTRUCTIONS_MAX_LENGTH:
        raise DomainError(
            f"Instructions cannot exceed {INSTRUCTIONS_MAX_LENGTH} characters."
        )
    return text


# ═══════════════════════════════════════════════════════════════════
#  Case Query Service
# ═══════════════════════════════════════════════════════════════════


class CaseQueryService:
    """
    Constructs the querysets behind every feed and history screen.

    All heavy query concerns (filter assembly, ordering) live here so the
    view stays thin.  Every list is newest first and excludes trashed
    cases unless the trash itself is requested.
    """

    @staticmethod
    def _base() -> QuerySet:
        return (
            Case.objects
            .select_related("owner", "assigned_responder", "prior_assignee")
            .order_by("-created_at", "-pk")
        )

    @staticmethod
    def stakeholder_filter(user: Any) -> Q:
        """Owners own their cases; responders hold what they were assigned or escalated."""
        if user.is_owner:
            return Q(owner=user)
        return Q(assigned_responder=user) | Q(prior_assignee=user)

    @staticmethod
    def responder_feed(user: Any) -> QuerySet:
        """Pending and in-progress cases within the responder's tier."""
        profile = ResponderDirectory.require_responder(user)
        return CaseQueryService._base().filter(
            status__in=FEED_STATUSES,
            severity__in=policy.visible_severities(profile.tier),
            is_deleted=False,
        )

    @staticmethod
    def escalated_feed(user: Any) -> QuerySet:
        """
        Cases waiting for a senior.

        Raises:
            PermissionDenied: for students.
        """
        profile = ResponderDirectory.require_responder(user)
        if not policy.is_senior(profile.tier):
            raise PermissionDenied()
        return CaseQueryService._base().filter(
            status=CaseStatus.ESCALATED,
            severity__in=policy.visible_severities(profile.tier),
            is_deleted=False,
        )

    @staticmethod
    def owner_cases(user: Any) -> QuerySet:
        if not user.is_owner:
            raise PermissionDenied()
        return CaseQueryService._base().filter(owner=user, is_deleted=False)

    @staticmethod
    def list_for_user(user: Any) -> QuerySet:
        """Owners see their own cases; responders see their live feed."""
        if user.is_owner:
            return CaseQueryService.owner_cases(user)
        return CaseQueryService.responder_feed(user)

    @staticmethod
    def history(user: Any, view: str = HistoryView.ACTIVE) -> QuerySet:
        """
        The caller's case history in one of three folders.

        ``active`` excludes archived and trashed cases, ``archived``
        excludes trashed ones, ``trash`` shows only trashed ones.
        """
        queryset = CaseQueryService._base().filter(CaseQueryService.stakeholder_filter(user))
        if view == HistoryView.TRASH:
            return queryset.filter(is_deleted=True)
        if view == HistoryView.ARCHIVED:
            return queryset.filter(is_archived=True, is_deleted=False)
        if view == HistoryView.ACTIVE:
            return queryset.filter(is_archived=False, is_deleted=False)
        raise DomainError(f"Unknown history view '{view}'.")

    @staticmethod
    def is_stakeholder(case: Case, user: Any) -> bool:
        if user.is_owner:
            return case.owner_id == user.pk
        return user.pk in (case.assigned_responder_id, case.prior_assignee_id)

    @staticmethod
    def get_visible_case(case_id: int, user: Any) -> Case:
        """
        Load a case the caller is allowed to look at.

        Stakeholders always see their case.  Other responders see it while
        it is on a feed their tier can read.  Everything else is reported
        as not found so existence is not leaked.
        """
        case = CaseStore.get(case_id)
        if CaseQueryService.is_stakeholder(case, user):
            return case
        if user.is_responder and not case.is_deleted:
            profile = ResponderDirectory.require_responder(user)
            if policy.can_act_on_severity(profile.tier, case.severity):
                if case.status in FEED_STATUSES:
                    return case
                if case.status == CaseStatus.ESCALATED and policy.is_senior(profile.tier):
                    return case
        raise NotFound(f"Case #{case_id} not found.")

    @staticmethod
    def status_log(case_id: int, user: Any) -> QuerySet:
        case = CaseQueryService.get_visible_case(case_id, user)
        return case.status_logs.select_related("changed_by")


# ═══════════════════════════════════════════════════════════════════
#  Case Creation Service
# ═══════════════════════════════════════════════════════════════════


class CaseCreationService:

    @staticmethod
    @transaction.atomic
    def create_case(validated_data: dict[str, Any], requesting_user: Any) -> Case:
        """
        Raise a new SOS.

        The case starts ``pending`` and unassigned.  The owner's display
        name and phone are snapshotted onto it, and every responder whose
        tier can see the severity is notified after commit.

        Parameters
        ----------
        validated_data : dict
            ``symptoms`` and ``severity`` are required; ``latitude``,
            ``longitude`` and ``image_url`` are optional.  When only one
            coordinate is supplied the other is stored as ``0``.
        requesting_user : User
            Must be an owner account.

        Raises
        ------
        PermissionDenied
            If the caller is not an owner.
        DomainError
            If symptoms are blank or the severity is unknown.
        """
        if not requesting_user.is_owner:
            raise PermissionDenied("Only pet owners can raise an SOS.")

        symptoms = (validated_data.get("symptoms") or "").strip()
        if not symptoms:
            raise DomainError("Please describe the symptoms.")

        severity = validated_data.get("severity")
        if severity not in Severity.values:
            raise DomainError(f"Unknown severity '{severity}'.")

        latitude = validated_data.get("latitude")
        longitude = validated_data.get("longitude")
        if latitude is not None or longitude is not None:
            latitude = latitude or 0.0
            longitude = longitude or 0.0

        case = Case.objects.create(
            owner=requesting_user,
            owner_name=requesting_user.display_name or requesting_user.username,
            owner_phone=requesting_user.phone_number,
            symptoms=symptoms,
            severity=severity,
            latitude=latitude,
            longitude=longitude,
            image_url=validated_data.get("image_url") or "",
            status=CaseStatus.PENDING,
            last_updated=timezone.now(),
        )
        _log_transition(case.pk, "", CaseStatus.PENDING, requesting_user)
        CaseStore.announce(case.pk)
        NotificationDispatchPolicy.dispatch(CASE_CREATED, case, requesting_user)
        return case


# ═══════════════════════════════════════════════════════════════════
#  Case Lifecycle Service
# ═══════════════════════════════════════════════════════════════════


class CaseLifecycleService:
    """
    Every status transition in the case lifecycle.

    Each method re-reads the case, checks role, tier and assignment,
    consults ``ALLOWED_TRANSITIONS``, then performs one conditional
    write whose precondition repeats the state it checked.  A write that
    matches no row means another device got there first.
    """

    @staticmethod
    @transaction.atomic
    def accept(case_id: int, responder: Any) -> Case:
        """
        Claim a pending case.

        Raises
        ------
        PermissionDenied
            If the responder's tier cannot act on the case's severity.
        AlreadyClaimed
            If another responder holds the case (including losing a race).
        InvalidTransition
            If the case is not pending for any other reason.
        """
        profile = ResponderDirectory.require_responder(responder)
        case = CaseStore.get(case_id)
        if not policy.can_act_on_severity(profile.tier, case.severity):
            raise PermissionDenied()
        if case.assigned_responder_id is not None:
            raise AlreadyClaimed()
        _require_transition(case, CaseStatus.ACCEPTED, "accept")

        now = timezone.now()
        applied = CaseStore.conditional_update(
            case_id,
            precondition={
                "status": CaseStatus.PENDING,
                "assigned_responder__isnull": True,
                "is_deleted": False,
            },
            fields={
                "status": CaseStatus.ACCEPTED,
                "assigned_responder": responder,
                "assigned_responder_name": responder.display_name,
                "assigned_responder_tier": profile.tier,
                "advice": DEFAULT_REVIEWING_ADVICE,
                "help_type": policy.help_type_for_tier(profile.tier),
                "last_updated": now,
            },
        )
        if not applied:
            fresh = CaseStore.get(case_id)
            if fresh.assigned_responder_id is not None:
                raise AlreadyClaimed()
            _raise_stale(case_id, CaseStatus.ACCEPTED)

        _log_transition(case_id, CaseStatus.PENDING, CaseStatus.ACCEPTED, responder)
        return CaseStore.get(case_id)

    @staticmethod
    @transaction.atomic
    def mark_on_way(case_id: int, responder: Any) -> Case:
        """
        Tell the owner the responder is travelling to them.

        Students give remote advice only and may not use this.
        """
        profile = ResponderDirectory.require_responder(responder)
        case = CaseStore.get(case_id)
        _require_assignee(case, responder)
        if profile.tier == ResponderTier.STUDENT:
            raise PermissionDenied()
        _require_transition(case, CaseStatus.ON_WAY, "mark_on_way")

        applied = CaseStore.conditional_update(
            case_id,
            precondition={"status": CaseStatus.ACCEPTED, "assigned_responder": responder},
            fields={"status": CaseStatus.ON_WAY, "last_updated": timezone.now()},
        )
        if not applied:
            _raise_stale(case_id, CaseStatus.ON_WAY)

        _log_transition(case_id, CaseStatus.ACCEPTED, CaseStatus.ON_WAY, responder)
        return CaseStore.get(case_id)

    @staticmethod
    @transaction.atomic
    def update_instructions(case_id: int, responder: Any, text: str) -> Case:
        """
        Replace the instructions shown to the owner.

        Status does not change.  Validation runs before the case is read.

        Raises
        ------
        DomainError
            If ``text`` is blank or longer than the instructions limit.
        PermissionDenied
            If the caller is not the assigned responder.
        """
        text = _validate_instructions(text, required=True)
        case = CaseStore.get(case_id)
        _require_assignee(case, responder)
        if case.status not in ACTIVE_ASSIGNMENT_STATUSES:
            raise InvalidTransition(
                current=case.status,
                target=case.status,
                reason="instructions can only be given on an active case",
            )

        applied = CaseStore.conditional_update(
            case_id,
            precondition={
                "status__in": ACTIVE_ASSIGNMENT_STATUSES,
                "assigned_responder": responder,
            },
            fields={
                "volunteer_notes": text,
                "advice": text,
                "last_updated": timezone.now(),
            },
        )
        if not applied:
            _raise_stale(case_id, case.status)
        return CaseStore.get(case_id)

    @staticmethod
    @transaction.atomic
    def escalate(case_id: int, responder: Any) -> tuple[Case, dict[str, int]]:
        """
        Hand a student's case to the graduate/qualified pool.

        The assignment is cleared, the student is recorded as
        ``prior_assignee`` and earns the triage reward, and seniors are
        notified after commit.

        Returns
        -------
        tuple[Case, dict]
            The updated case and ``{"points_earned": n}``.

        Raises
        ------
        PermissionDenied
            If the caller is not the assignee or is not a student, or
            if no triage reward exists for the case's severity.
        """
        profile = ResponderDirectory.require_responder(responder)
        case = CaseStore.get(case_id)
        _require_assignee(case, responder)
        if profile.tier != ResponderTier.STUDENT:
            raise PermissionDenied()
        _require_transition(case, CaseStatus.ESCALATED, "escalate")
        try:
            policy.reward_points(case.severity, policy.RewardOutcome.ESCALATE)
        except policy.UnreachableRewardError:
            logger.warning(
                "Refused escalation of %s case #%s by responder %s",
                case.severity, case_id, responder.pk,
            )
            raise PermissionDenied()

        applied = CaseStore.conditional_update(
            case_id,
            precondition={"status": case.status, "assigned_responder": responder},
            fields={
                "status": CaseStatus.ESCALATED,
                "is_escalated": True,
                "prior_assignee": responder,
                "assigned_responder": None,
                "assigned_responder_name": "",
                "assigned_responder_tier": "",
                "last_updated": timezone.now(),
            },
        )
        if not applied:
            _raise_stale(case_id, CaseStatus.ESCALATED)

        points = RewardAccountingService.award_for_escalation_triage(responder.pk, case.severity)
        _log_transition(case_id, case.status, CaseStatus.ESCALATED, responder)

        case = CaseStore.get(case_id)
        NotificationDispatchPolicy.dispatch(CASE_ESCALATED, case, responder)
        return case, {"points_earned": points}

    @staticmethod
    @transaction.atomic
    def take_over(case_id: int, responder: Any) -> Case:
        """
        A graduate or qualified responder claims an escalated case.

        Raises
        ------
        PermissionDenied
            For students, or if the tier cannot act on the severity.
        AlreadyClaimed
            If another senior took the case first.
        InvalidTransition
            If the case is not escalated.
        """
        profile = ResponderDirectory.require_responder(responder)
        if not policy.is_senior(profile.tier):
            raise PermissionDenied()
        case = CaseStore.get(case_id)
        if not policy.can_act_on_severity(profile.tier, case.severity):
            raise PermissionDenied()
        if (
            case.status in ACTIVE_ASSIGNMENT_STATUSES
            and case.prior_assignee_id is not None
            and case.assigned_responder_id != responder.pk
        ):
            raise AlreadyClaimed()
        _require_transition(case, CaseStatus.ACCEPTED, "take_over")

        applied = CaseStore.conditional_update(
            case_id,
            precondition={"status": CaseStatus.ESCALATED, "assigned_responder__isnull": True},
            fields={
                "status": CaseStatus.ACCEPTED,
                "assigned_responder": responder,
                "assigned_responder_name": responder.display_name,
                "assigned_responder_tier": profile.tier,
                "is_escalated": False,
                "help_type": HelpType.IN_PERSON,
                "last_updated": timezone.now(),
            },
        )
        if not applied:
            fresh = CaseStore.get(case_id)
            if fresh.assigned_responder_id is not None:
                raise AlreadyClaimed()
            _raise_stale(case_id, CaseStatus.ACCEPTED)

        _log_transition(case_id, CaseStatus.ESCALATED, CaseStatus.ACCEPTED, responder)
        return CaseStore.get(case_id)

    @staticmethod
    @transaction.atomic
    def resolve(case_id: int, responder: Any, advice: str = "") -> tuple[Case, dict[str, Any]]:
        """
        Close a case and award the resolve reward.

        Resolving requires guidance: either ``advice`` given now or
        instructions sent earlier.  Resolving an already resolved case is
        a success that awards nothing and leaves ``resolved_at`` alone.

        Returns
        -------
        tuple[Case, dict]
            The case and ``{"points_earned": n}``; ``n`` is ``0`` and
            ``already_resolved`` is ``True`` on a repeated call.
        """
        closing_advice = _validate_instructions(advice, required=False)
        ResponderDirectory.require_responder(responder)
        case = CaseStore.get(case_id)

        if case.status == CaseStatus.RESOLVED and case.assigned_responder_id == responder.pk:
            return case, {"points_earned": 0, "already_resolved": True}

        _require_assignee(case, responder)
        _require_transition(case, CaseStatus.RESOLVED, "resolve")

        guidance = closing_advice or case.volunteer_notes.strip()
        if not guidance:
            raise DomainError("Please provide medical instructions before resolving.")

        now = timezone.now()
        applied = CaseStore.conditional_update(
            case_id,
            precondition={"status": case.status, "assigned_responder": responder},
            fields={
                "status": CaseStatus.RESOLVED,
                "advice": guidance,
                "resolved_at": now,
                "last_updated": now,
                "current_distance_km": None,
            },
        )
        if not applied:
            fresh = CaseStore.get(case_id)
            if fresh.status == CaseStatus.RESOLVED and fresh.assigned_responder_id == responder.pk:
                return fresh, {"points_earned": 0, "already_resolved": True}
            _raise_stale(case_id, CaseStatus.RESOLVED)

        points = RewardAccountingService.award_for_resolve(responder.pk, case.severity)
        _log_transition(case_id, case.status, CaseStatus.RESOLVED, responder, guidance)
        return CaseStore.get(case_id), {"points_earned": points}

    @staticmethod
    @transaction.atomic
    def update_live_location(
        case_id: int,
        responder: Any,
        latitude: float,
        longitude: float,
    ) -> tuple[Case, dict[str, float]]:
        """
        Record the assigned responder's distance from the owner.

        Returns the case and ``{"distance_km": d}`` rounded to two places.

        Raises
        ------
        DomainError
            If coordinates are out of range or the case has no owner location.
        """
        if not geo.validate_coordinates(latitude, longitude):
            raise DomainError("Coordinates are out of range.")
        case = CaseStore.get(case_id)
        _require_assignee(case, responder)
        if case.status not in ACTIVE_ASSIGNMENT_STATUSES:
            raise InvalidTransition(
                current=case.status,
                target=case.status,
                reason="location is only tracked on an active case",
            )
        if not case.has_location:
            raise DomainError("Owner location missing.")

        distance = geo.distance_to_owner(latitude, longitude, case.latitude, case.longitude)
        applied = CaseStore.conditional_update(
            case_id,
            precondition={
                "status__in": ACTIVE_ASSIGNMENT_STATUSES,
                "assigned_responder": responder,
            },
            fields={
                "current_distance_km": distance,
                "location_updated_at": timezone.now(),
            },
        )
        if not applied:
            _raise_stale(case_id, case.status)
        return CaseStore.get(case_id), {"distance_km": float(distance)}


# ═══════════════════════════════════════════════════════════════════
#  Case History Service
# ═══════════════════════════════════════════════════════════════════


class CaseHistoryService:
    """
    Archive, trash, restore and permanent deletion for a case's
    stakeholders (its owner, its assignee, the student who escalated it).

    Cases someone is actively working on cannot be filed away.
    Permanent deletion only ever applies to cases already in the trash.
    """

    @staticmethod
    def _load_for_stakeholder(case_id: int, user: Any) -> Case:
        case = CaseStore.get(case_id)
        if not CaseQueryService.is_stakeholder(case, user):
            raise NotFound(f"Case #{case_id} not found.")
        return case

    @staticmethod
    def _require_filable(case: Case) -> None:
        if case.status not in HISTORY_MUTABLE_STATUSES:
            raise Conflict("A case cannot be filed away while a responder is working on it.")

    @staticmethod
    @transaction.atomic
    def archive_toggle(case_id: int, user: Any) -> Case:
        case = CaseHistoryService._load_for_stakeholder(case_id, user)
        CaseHistoryService._require_filable(case)
        applied = CaseStore.conditional_update(
            case_id,
            precondition={"is_archived": case.is_archived, "status__in": HISTORY_MUTABLE_STATUSES},
            fields={"is_archived": not case.is_archived},
        )
        if not applied:
            raise Conflict("The case changed while you were acting on it. Refresh and try again.")
        return CaseStore.get(case_id)

    @staticmethod
    @transaction.atomic
    def soft_delete(case_id: int, user: Any) -> Case:
        """Move a case to the trash.  Trashing it again is a no-op."""
        case = CaseHistoryService._load_for_stakeholder(case_id, user)
        if case.is_deleted:
            return case
        CaseHistoryService._require_filable(case)
        applied = CaseStore.conditional_update(
            case_id,
            precondition={"is_deleted": False, "status__in": HISTORY_MUTABLE_STATUSES},
            fields={"is_deleted": True, "deleted_at": timezone.now()},
        )
        if not applied:
            raise Conflict("The case changed while you were acting on it. Refresh and try again.")
        logger.info("Case #%s moved to trash by user %s", case_id, user.pk)
        return CaseStore.get(case_id)

    @staticmethod
    @transaction.atomic
    def restore(case_id: int, user: Any) -> Case:
        """Take a case back out of the trash.  Restoring a live case is a no-op."""
        case = CaseHistoryService._load_for_stakeholder(case_id, user)
        if not case.is_deleted:
            return case
        CaseStore.conditional_update(
            case_id,
            precondition={"is_deleted": True},
            fields={"is_deleted": False, "deleted_at": None},
        )
        return CaseStore.get(case_id)

    @staticmethod
    @transaction.atomic
    def permanent_delete(case_id: int, user: Any) -> None:
        """
        Physically remove one trashed case.

        Raises
        ------
        Conflict
            If the case is not in the trash.
        """
        CaseHistoryService._load_for_stakeholder(case_id, user)
        deleted, _ = Case.objects.filter(pk=case_id, is_deleted=True).delete()
        if not deleted:
            raise Conflict("Move the case to the trash before deleting it permanently.")
        CaseStore.announce(case_id)
        logger.info("Case #%s permanently deleted by user %s", case_id, user.pk)

    @staticmethod
    @transaction.atomic
    def empty_trash(user: Any) -> dict[str, int]:
        """Permanently delete every trashed case of the caller."""
        trashed = Case.objects.filter(CaseQueryService.stakeholder_filter(user), is_deleted=True)
        case_ids = list(trashed.values_list("pk", flat=True))
        if case_ids:
            Case.objects.filter(pk__in=case_ids).delete()
            for case_id in case_ids:
                CaseStore.announce(case_id)
        logger.info("User %s emptied trash: %d case(s)", user.pk, len(case_ids))
        return {"deleted_count": len(case_ids)}
