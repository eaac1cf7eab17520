"""
core.domain.notifications — Notification creation and push delivery helper.

Centralises notification creation so every app uses one consistent
entry-point rather than directly constructing ``Notification`` objects or
talking to the push backend.

Design decisions
----------------
* **After commit** — ``NotificationService.dispatch`` defers delivery with
  ``transaction.on_commit`` so a notification never announces a state
  change that was rolled back.
* **Best effort** — delivery failures are logged and swallowed.  The case
  transition that triggered them has already committed and stays valid.
  There is no synchronous retry.
* **Two channels** — one in-app ``Notification`` row per recipient plus a
  single batched push message to every recipient that registered a
  device token.

Usage::

    from core.domain.notifications import NotificationService

    NotificationService.dispatch(
        actor=owner,
        recipients=responders,
        event_type="case_created",
        payload={"case_id": case.pk, "owner_name": case.owner_name,
                 "symptoms": case.symptoms},
        related_object=case,
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

from django.contrib.contenttypes.models import ContentType
from django.db import models, transaction

from core.constants import PUSH_ESCALATION_PREVIEW_CHARS, PUSH_SYMPTOM_PREVIEW_CHARS
from core.domain.push import get_push_backend

if TYPE_CHECKING:
    from accounts.models import User
    from core.models import Notification

logger = logging.getLogger(__name__)

# ── Event-type → (title, message template, push data type) ──────────
# Templates are formatted with the dispatch payload plus a ``preview``
# key holding the truncated symptom text.
_EVENT_TEMPLATES: dict[str, tuple[str, str, str, int]] = {
    "case_created": (
        "NEW EMERGENCY",
        "{owner_name} needs help with: {preview}...",
        "SOS_ALERT",
        PUSH_SYMPTOM_PREVIEW_CHARS,
    ),
    "case_escalated": (
        "URGENT: Case Escalation",
        "A Student responder requires assistance. Case: {preview}...",
        "ESCALATION_ALERT",
        PUSH_ESCALATION_PREVIEW_CHARS,
    ),
}


def render_event(event_type: str, payload: dict[str, Any]) -> tuple[str, str, str]:
    """
    Return ``(title, message, push_type)`` for an event.

    Unknown event types fall back to a title derived from the type name.
    """
    if event_type not in _EVENT_TEMPLATES:
        return event_type.replace("_", " ").title(), f"Event: {event_type}", event_type.upper()

    title, template, push_type, preview_chars = _EVENT_TEMPLATES[event_type]
    context = dict(payload)
    context["owner_name"] = payload.get("owner_name") or "An owner"
    context["preview"] = (payload.get("symptoms") or "")[:preview_chars]
    return title, template.format(**context), push_type


class NotificationService:
    """
    Stateless helper for creating ``Notification`` records and sending push.

    All methods are classmethods — no instance state is needed.
    """

    @classmethod
    def dispatch(
        cls,
        *,
        actor: User,
        recipients: Iterable[User],
        event_type: str,
        payload: dict[str, Any] | None = None,
        related_object: models.Model | None = None,
    ) -> None:
        """
        Schedule delivery for when the current transaction commits.

        Outside a transaction ``on_commit`` runs the callback immediately.
        A ``QuerySet`` of recipients is evaluated at delivery time, so a
        failing lookup is handled like any other delivery failure.
        """
        payload = dict(payload or {})

        transaction.on_commit(
            lambda: cls.deliver(
                actor=actor,
                recipients=recipients,
                event_type=event_type,
                payload=payload,
                related_object=related_object,
            )
        )

    @classmethod
    def deliver(
        cls,
        *,
        actor: User,
        recipients: Iterable[User],
        event_type: str,
        payload: dict[str, Any],
        related_object: models.Model | None = None,
    ) -> list[Notification]:
        """
        Persist in-app notifications and send one push message.

        Never raises: any failure is logged with its traceback and an
        empty list is returned.
        """
        try:
            return cls.create(
                actor=actor,
                recipients=recipients,
                event_type=event_type,
                payload=payload,
                related_object=related_object,
            )
        except Exception:
            logger.exception(
                "Notification dispatch failed for event_type=%s by actor=%s",
                event_type,
                actor,
            )
            return []

    @classmethod
    def create(
        cls,
        *,
        actor: User,
        recipients: User | Iterable[User],
        event_type: str,
        payload: dict[str, Any] | None = None,
        related_object: models.Model | None = None,
    ) -> list[Notification]:
        """
        Create one ``Notification`` per recipient and push to their devices.

        Args:
            actor:          The user who performed the action (logged only).
            recipients:     A single ``User`` or iterable of ``User``
                            instances.
            event_type:     Key into ``_EVENT_TEMPLATES``.  If unknown
                            the raw event_type is used as title.
            payload:        Context dict used for message interpolation and
                            sent as push ``data``.
            related_object: Optional model instance linked via
                            ``GenericForeignKey``.

        Returns:
            List of created ``Notification`` instances.
        """
        from core.models import Notification  # lazy import — avoids circular deps

        # Normalise recipients to a list
        if isinstance(recipients, models.Model):
            recipients = [recipients]
        else:
            recipients = list(recipients)

        if not recipients:
            logger.warning(
                "NotificationService.create called with empty recipients "
                "for event_type=%s by actor=%s",
                event_type,
                actor,
            )
            return []

        payload = dict(payload or {})
        title, message, push_type = render_event(event_type, payload)

        # Resolve GenericFK fields
        content_type = None
        object_id = None
        if related_object is not None:
            content_type = ContentType.objects.get_for_model(related_object)
            object_id = related_object.pk

        notifications = Notification.objects.bulk_create(
            [
                Notification(
                    recipient=recipient,
                    title=title,
                    message=message,
                    event_type=event_type,
                    content_type=content_type,
                    object_id=object_id,
                )
                for recipient in recipients
            ]
        )

        logger.info(
            "Created %d notification(s) [%s] by actor=%s",
            len(notifications),
            event_type,
            actor,
        )

        tokens = [r.push_token for r in recipients if r.push_token]
        if tokens:
            metadata = {"type": push_type}
            if "case_id" in payload:
                metadata["caseId"] = payload["case_id"]
            get_push_backend().send(tokens, title, message, metadata)

        return notifications
