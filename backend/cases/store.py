"""
cases.store — Case persistence primitives and change subscriptions.

``CaseStore`` is the only code that writes ``Case.status``.  It offers:

* ``conditional_update`` — compare-and-set on one case.  The precondition
  and the write are a single ``UPDATE ... WHERE`` statement.
* ``atomic_increment``   — ``F()`` increments on a responder's counters.
* ``subscribe_case`` / ``subscribe_cases`` — explicit ``Subscription``
  handles that receive a fresh snapshot after every committed change.

Every committed change is announced through the ``case_changed`` signal.
Nothing subscribes globally: each consumer owns its handle and closes it
when done::

    with CaseStore.subscribe_case(case.pk, on_change):
        ...  # on_change(case_or_none) runs after each committed write
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Callable, Iterable, Mapping

from django.db import transaction
from django.dispatch import Signal

from accounts.models import ResponderProfile
from core.domain.exceptions import NotFound
from core.domain.transactions import atomic_increment, conditional_update

from .models import Case

logger = logging.getLogger(__name__)

#: Sent with ``sender=Case`` and ``case_id`` after a case change commits.
case_changed = Signal()

_subscription_ids = itertools.count(1)


class Subscription:
    """
    Handle for a live subscription; disconnects on ``close()`` or on
    leaving a ``with`` block.
    """

    def __init__(self, receiver: Callable[..., None]) -> None:
        self._uid = f"case-subscription-{next(_subscription_ids)}"
        self._receiver = receiver
        case_changed.connect(receiver, sender=Case, weak=False, dispatch_uid=self._uid)
        self.active = True

    def close(self) -> None:
        if self.active:
            case_changed.disconnect(sender=Case, dispatch_uid=self._uid)
            self.active = False

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class CaseStore:
    """Stateless persistence helpers for ``Case``."""

    @staticmethod
    def get(case_id: int, *, for_update: bool = False) -> Case:
        """
        Load a case by PK.

        Raises:
            NotFound: if no such case exists.
        """
        queryset = Case.objects.select_related("owner", "assigned_responder", "prior_assignee")
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=case_id)
        except Case.DoesNotExist:
            raise NotFound(f"Case #{case_id} not found.")

    @staticmethod
    def conditional_update(
        case_id: int,
        precondition: Mapping[str, Any],
        fields: Mapping[str, Any],
    ) -> bool:
        """
        Apply ``fields`` only if the case still matches ``precondition``.

        Returns ``True`` when the write applied.  A change announcement is
        queued for when the surrounding transaction commits.
        """
        applied = conditional_update(Case, pk=case_id, precondition=precondition, fields=fields)
        if applied:
            CaseStore.announce(case_id)
        return applied

    @staticmethod
    def atomic_increment(user_id: int, **deltas: int) -> None:
        """
        Increment a responder's counters (``points``, ``resolved_count``).

        Raises:
            NotFound: if the user has no responder profile.
        """
        updated = atomic_increment(ResponderProfile, {"user_id": user_id}, **deltas)
        if updated != 1:
            raise NotFound("Responder profile not found.")

    # ── Change notification ─────────────────────────────────────────

    @staticmethod
    def announce(case_id: int) -> None:
        """Send ``case_changed`` once the current transaction commits."""
        transaction.on_commit(lambda: CaseStore._send_changed(case_id))

    @staticmethod
    def _send_changed(case_id: int) -> None:
        for receiver, response in case_changed.send_robust(sender=Case, case_id=case_id):
            if isinstance(response, Exception):
                logger.error(
                    "Case subscriber %r failed for case #%s",
                    receiver,
                    case_id,
                    exc_info=(type(response), response, response.__traceback__),
                )

    @staticmethod
    def subscribe_case(case_id: int, callback: Callable[[Case | None], None]) -> Subscription:
        """
        Follow one case.

        ``callback`` receives the current snapshot immediately and again
        after every committed change, or ``None`` once the case is deleted.
        """

        def snapshot() -> Case | None:
            return (
                Case.objects
                .select_related("assigned_responder", "prior_assignee")
                .filter(pk=case_id)
                .first()
            )

        def receiver(sender, case_id: int, **kwargs) -> None:
            if case_id == target_id:
                callback(snapshot())

        target_id = case_id
        subscription = Subscription(receiver)
        callback(snapshot())
        return subscription

    @staticmethod
    def subscribe_cases(
        callback: Callable[[list[Case]], None],
        *,
        statuses: Iterable[str] | None = None,
        severities: Iterable[str] | None = None,
        **filters: Any,
    ) -> Subscription:
        """
        Follow a filtered case list, newest first.

        ``callback`` receives the full list immediately and again after
        every committed change to any case.  Trashed cases are excluded.
        """
        lookup = dict(filters)
        lookup.setdefault("is_deleted", False)
        if statuses is not None:
            lookup["status__in"] = list(statuses)
        if severities is not None:
            lookup["severity__in"] = list(severities)

        def snapshot() -> list[Case]:
            return list(Case.objects.filter(**lookup).order_by("-created_at", "-pk"))

        def receiver(sender, **kwargs) -> None:
            callback(snapshot())

        subscription = Subscription(receiver)
        callback(snapshot())
        return subscription
