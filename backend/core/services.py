"""
Core app services.

Stateless helpers behind the ``/api/core/`` endpoints.

Architecture
------------
- ``SystemConstantsService``  — enumerations clients need to render
                                pickers and labels.
- ``InboxService``            — the caller's in-app notifications.

Creating notifications is not done here; see
``core.domain.notifications.NotificationService``.
"""

from __future__ import annotations

from typing import Any

from django.db.models import QuerySet

from core.constants import INSTRUCTIONS_MAX_LENGTH
from core.domain.exceptions import NotFound
from core.models import Notification


# ═══════════════════════════════════════════════════════════════════
#  System Constants Service
# ═══════════════════════════════════════════════════════════════════


class SystemConstantsService:
    """
    Gathers all system-wide choice enumerations into a single dict.

    This service is **stateless** — it does not depend on the requesting
    user.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        from accounts.models import ResponderTier
        from cases.models import CaseStatus, HelpType, Severity
        from cases.policy import visible_severities

        to_list = SystemConstantsService._choices_to_list

        return {
            "severities": to_list(Severity),
            "case_statuses": to_list(CaseStatus),
            "responder_tiers": to_list(ResponderTier),
            "help_types": to_list(HelpType),
            "tier_visibility": [
                {
                    "tier": str(tier),
                    "severities": [str(s) for s in Severity if s in visible_severities(tier)],
                }
                for tier in ResponderTier
            ],
            "instructions_max_length": INSTRUCTIONS_MAX_LENGTH,
        }

    @staticmethod
    def _choices_to_list(
        choices_class: type,
    ) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` class to a list of
        ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]


# ═══════════════════════════════════════════════════════════════════
#  Inbox Service
# ═══════════════════════════════════════════════════════════════════


class InboxService:
    """
    Handles listing and marking notifications as read for a given user.
    """

    def __init__(self, user: Any) -> None:
        self.user = user

    def list_notifications(
        self,
        unread_only: bool = False,
        event_type: str | None = None,
    ) -> QuerySet:
        """Return notifications for ``self.user``, most recent first."""
        queryset = (
            Notification.objects
            .filter(recipient=self.user)
            .select_related("content_type")
            .order_by("-created_at", "-pk")
        )
        if unread_only:
            queryset = queryset.filter(is_read=False)
        if event_type:
            queryset = queryset.filter(event_type=event_type)
        return queryset

    def mark_as_read(self, notification_id: int) -> Notification:
        """
        Mark a single notification as read.

        Raises:
            NotFound: if the notification does not exist or belongs to
                      someone else.
        """
        try:
            notification = Notification.objects.get(
                pk=notification_id,
                recipient=self.user,
            )
        except Notification.DoesNotExist:
            raise NotFound("Notification not found.")
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read", "updated_at"])
        return notification
