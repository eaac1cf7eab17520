"""
cases.policy — Tier policy.

Pure functions with no database access.  They answer three questions:

* Which severities may a responder of a given tier see and act on?
* How many points does a resolve or an escalation earn?
* Does a responder of a given tier help remotely or in person?

The engine calls ``can_act_on_severity`` again at transition time; the
feed queries alone are not trusted to keep a responder within their tier.
"""

from __future__ import annotations

from django.db import models

from accounts.models import ResponderTier

from .models import HelpType, Severity


class RewardOutcome(models.TextChoices):
    RESOLVE = "resolve", "Resolved"
    ESCALATE = "escalate", "Triaged And Escalated"


class UnreachableRewardError(LookupError):
    """
    No reward is defined for this (severity, outcome) pair.

    Only raised for a ``high`` escalation, which the tier rules never
    allow a student to hold in the first place.  ``escalate`` checks
    for it before writing anything and refuses the transition.
    """

    def __init__(self, severity: str, outcome: str) -> None:
        super().__init__(f"No '{outcome}' reward is defined for '{severity}' severity.")
        self.severity = severity
        self.outcome = outcome


_VISIBLE_SEVERITIES: dict[str, frozenset[str]] = {
    ResponderTier.STUDENT: frozenset({Severity.LOW}),
    ResponderTier.GRADUATE: frozenset({Severity.LOW, Severity.MID}),
    ResponderTier.QUALIFIED: frozenset({Severity.LOW, Severity.MID, Severity.HIGH}),
}

_REWARD_TABLE: dict[str, dict[str, int]] = {
    RewardOutcome.RESOLVE: {
        Severity.LOW: 10,
        Severity.MID: 25,
        Severity.HIGH: 50,
    },
    RewardOutcome.ESCALATE: {
        Severity.LOW: 15,
        Severity.MID: 25,
    },
}

#: Tiers that form the senior pool for escalated cases.
SENIOR_TIERS: frozenset[str] = frozenset({ResponderTier.GRADUATE, ResponderTier.QUALIFIED})


def visible_severities(tier: str) -> frozenset[str]:
    """
    Severities a responder of ``tier`` may see.

    Raises ``ValueError`` for an unknown tier.
    """
    try:
        return _VISIBLE_SEVERITIES[ResponderTier(tier)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown responder tier: {tier!r}")


def can_act_on_severity(tier: str, severity: str) -> bool:
    return severity in visible_severities(tier)


def tiers_that_can_see(severity: str) -> list[str]:
    """Every tier whose visible set contains ``severity``, lowest first."""
    return [tier for tier in ResponderTier if severity in _VISIBLE_SEVERITIES[tier]]


def is_senior(tier: str) -> bool:
    return tier in SENIOR_TIERS


def reward_points(severity: str, outcome: str) -> int:
    """
    Points awarded for ``outcome`` on a case of ``severity``.

    Raises:
        UnreachableRewardError: for a ``high`` escalation.
    """
    try:
        return _REWARD_TABLE[outcome][severity]
    except KeyError:
        raise UnreachableRewardError(severity, outcome)


def help_type_for_tier(tier: str) -> str:
    """Students advise remotely; every other tier can attend in person."""
    if tier == ResponderTier.STUDENT:
        return HelpType.REMOTE
    return HelpType.IN_PERSON
