"""
cases.rewards — Reward/ranking accounting.

Points and resolved counts on ``ResponderProfile`` change here and
nowhere else.  Each award is one ``F()`` increment executed inside the
caller's transaction, right after the conditional case write that
triggered it, so an award commits or rolls back together with its
transition.  The case's own status precondition is what prevents a
second award: a repeated resolve never reaches this module.
"""

from __future__ import annotations

import logging

from . import policy
from .policy import RewardOutcome
from .store import CaseStore

logger = logging.getLogger(__name__)


class RewardAccountingService:

    @staticmethod
    def award_for_resolve(responder_id: int, severity: str) -> int:
        """Award the resolve reward; returns the points granted."""
        return RewardAccountingService._award(responder_id, severity, RewardOutcome.RESOLVE)

    @staticmethod
    def award_for_escalation_triage(responder_id: int, severity: str) -> int:
        """
        Award the triage reward to the student who escalated.

        Also increments ``resolved_count``: a triaged hand-off counts
        towards the responder's displayed case total.
        """
        return RewardAccountingService._award(responder_id, severity, RewardOutcome.ESCALATE)

    @staticmethod
    def _award(responder_id: int, severity: str, outcome: str) -> int:
        points = policy.reward_points(severity, outcome)
        CaseStore.atomic_increment(responder_id, points=points, resolved_count=1)
        logger.info(
            "Awarded %d point(s) to responder %s for %s of a %s case",
            points,
            responder_id,
            outcome,
            severity,
        )
        return points
