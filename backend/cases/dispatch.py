"""
cases.dispatch — Notification dispatch policy.

Decides *who* hears about a transition; delivery itself is delegated to
``core.domain.notifications.NotificationService``.

┌──────────────────┬──────────────────────────────────────────────┐
│ Event            │ Recipient cohort                             │
├──────────────────┼──────────────────────────────────────────────┤
│ case_created     │ every active responder whose tier can see    │
│                  │ the case's severity                          │
│ case_escalated   │ graduate and qualified responders only       │
│ anything else    │ nobody (clients follow via subscriptions)    │
└──────────────────┴──────────────────────────────────────────────┘

Delivery runs after commit and never raises into the caller.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db.models import QuerySet

from accounts.services import ResponderDirectory
from core.domain.notifications import NotificationService

from . import policy
from .models import Case

logger = logging.getLogger(__name__)

CASE_CREATED = "case_created"
CASE_ESCALATED = "case_escalated"


class NotificationDispatchPolicy:

    @staticmethod
    def recipients_for(event_type: str, case: Case) -> QuerySet | None:
        """
        Return the recipient queryset for ``event_type``, or ``None`` when
        the event is not pushed at all.
        """
        if event_type == CASE_CREATED:
            return ResponderDirectory.responders_in_tiers(policy.tiers_that_can_see(case.severity))
        if event_type == CASE_ESCALATED:
            return ResponderDirectory.responders_in_tiers(policy.SENIOR_TIERS)
        return None

    @staticmethod
    def dispatch(event_type: str, case: Case, actor: Any) -> None:
        """Queue delivery of ``event_type`` for after the transaction commits."""
        recipients = NotificationDispatchPolicy.recipients_for(event_type, case)
        if recipients is None:
            return

        logger.debug("Queueing %s for case #%s", event_type, case.pk)
        NotificationService.dispatch(
            actor=actor,
            recipients=recipients.exclude(pk=actor.pk),
            event_type=event_type,
            payload={
                "case_id": case.pk,
                "owner_name": case.owner_name,
                "symptoms": case.symptoms,
                "severity": case.severity,
            },
            related_object=case,
        )
