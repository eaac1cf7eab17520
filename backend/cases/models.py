"""
Cases app models.

Covers the emergency case lifecycle: an owner's SOS alert, its claim by a
volunteer responder, optional escalation from a student to the senior
pool, and resolution.  Status only ever changes through the conditional
writes in ``cases.store``; ``Case.save()`` refuses to touch it.
"""

from django.conf import settings
from django.db import models

from core.domain.exceptions import ImmutableFieldError
from core.models import TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class Severity(models.TextChoices):
    """Urgency chosen by the owner when raising the SOS.  Never changes."""

    LOW = "low", "Low"
    MID = "mid", "Medium"
    HIGH = "high", "High"


class CaseStatus(models.TextChoices):
    """
    Lifecycle states.

    ``pending`` is initial and ``resolved`` is terminal.  ``escalated``
    means a student handed the case to the graduate/qualified pool.
    """

    PENDING = "pending", "Pending"
    ACCEPTED = "accepted", "Accepted"
    ON_WAY = "on_way", "Responder On The Way"
    ESCALATED = "escalated", "Escalated To Seniors"
    RESOLVED = "resolved", "Resolved"


class HelpType(models.TextChoices):
    """How the assigned responder is helping."""

    REMOTE = "remote", "Remote Advice"
    IN_PERSON = "in_person", "In-Person Assistance"


#: Statuses in which a case has exactly one active assignee.
ACTIVE_ASSIGNMENT_STATUSES = (CaseStatus.ACCEPTED, CaseStatus.ON_WAY)

#: Statuses shown on the responder's live feed.
FEED_STATUSES = (CaseStatus.PENDING, CaseStatus.ACCEPTED, CaseStatus.ON_WAY)


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class Case(TimeStampedModel):
    """
    One emergency alert raised by a pet owner.

    * Owner name and phone are copied at creation so responders can call
      even if the owner later edits their profile.
    * ``assigned_responder`` is set iff status is accepted or on_way
      (a resolved case keeps its resolver for attribution).
    * ``prior_assignee`` records the student who escalated; it is never
      cleared once set.
    """

    # Fields only the lifecycle engine may change after creation.
    GUARDED_FIELDS = ("status", "severity")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="owned_cases",
        verbose_name="Owner",
    )
    owner_name = models.CharField(max_length=150, verbose_name="Owner Name")
    owner_phone = models.CharField(max_length=20, blank=True, default="", verbose_name="Owner Phone")

    symptoms = models.TextField(verbose_name="Symptoms")
    severity = models.CharField(
        max_length=10,
        choices=Severity.choices,
        verbose_name="Severity",
        db_index=True,
    )
    latitude = models.FloatField(null=True, blank=True, verbose_name="Latitude")
    longitude = models.FloatField(null=True, blank=True, verbose_name="Longitude")
    image_url = models.URLField(max_length=500, blank=True, default="", verbose_name="Photo URL")

    status = models.CharField(
        max_length=20,
        choices=CaseStatus.choices,
        default=CaseStatus.PENDING,
        verbose_name="Current Status",
        db_index=True,
    )

    # ── Assignment ──────────────────────────────────────────────────
    assigned_responder = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_cases",
        verbose_name="Assigned Responder",
    )
    assigned_responder_name = models.CharField(max_length=150, blank=True, default="")
    assigned_responder_tier = models.CharField(max_length=10, blank=True, default="")
    help_type = models.CharField(
        max_length=10,
        choices=HelpType.choices,
        blank=True,
        default="",
        verbose_name="Help Type",
    )
    prior_assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="escalated_cases",
        verbose_name="Prior Assignee",
        help_text="Student who triaged and escalated the case.",
    )
    is_escalated = models.BooleanField(default=False, verbose_name="Awaiting Senior")

    # ── Guidance for the owner ──────────────────────────────────────
    advice = models.TextField(blank=True, default="", verbose_name="Advice")
    volunteer_notes = models.TextField(blank=True, default="", verbose_name="Responder Instructions")

    # ── Live tracking ───────────────────────────────────────────────
    current_distance_km = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name="Responder Distance (km)",
    )
    location_updated_at = models.DateTimeField(null=True, blank=True)

    # ── History management ──────────────────────────────────────────
    is_archived = models.BooleanField(default=False, verbose_name="Archived")
    is_deleted = models.BooleanField(default=False, verbose_name="In Trash")
    deleted_at = models.DateTimeField(null=True, blank=True)

    last_updated = models.DateTimeField(null=True, blank=True, verbose_name="Last Transition")
    resolved_at = models.DateTimeField(null=True, blank=True, verbose_name="Resolved At")

    class Meta:
        verbose_name = "Case"
        verbose_name_plural = "Cases"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "severity"]),
            models.Index(fields=["owner", "is_deleted"]),
        ]

    def __str__(self):
        return f"Case #{self.pk} [{self.severity}] {self.status}"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_values = {
            name: getattr(instance, name)
            for name in cls.GUARDED_FIELDS
            if name in field_names
        }
        return instance

    def refresh_from_db(self, *args, **kwargs):
        super().refresh_from_db(*args, **kwargs)
        self._loaded_values = {name: getattr(self, name) for name in self.GUARDED_FIELDS}

    def save(self, *args, **kwargs):
        """
        Persist the case, refusing any change to ``status`` or ``severity``
        on an existing row.
        """
        if not self._state.adding:
            loaded = getattr(self, "_loaded_values", {})
            update_fields = kwargs.get("update_fields")
            for name in self.GUARDED_FIELDS:
                if update_fields is not None and name not in update_fields:
                    continue
                if name in loaded and getattr(self, name) != loaded[name]:
                    raise ImmutableFieldError(name)
        super().save(*args, **kwargs)
        self._loaded_values = {name: getattr(self, name) for name in self.GUARDED_FIELDS}

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def is_active(self) -> bool:
        """True while the case still needs a responder's attention."""
        return self.status != CaseStatus.RESOLVED


class CaseStatusLog(TimeStampedModel):
    """
    Immutable audit trail of every status transition for a case.

    Stores the previous/new status, who made the change, and an optional
    message (e.g. the instructions given at resolution).
    """

    case = models.ForeignKey(
        Case,
        on_delete=models.CASCADE,
        related_name="status_logs",
        verbose_name="Case",
    )
    from_status = models.CharField(
        max_length=20,
        choices=CaseStatus.choices,
        blank=True,
        verbose_name="Previous Status",
    )
    to_status = models.CharField(
        max_length=20,
        choices=CaseStatus.choices,
        verbose_name="New Status",
    )
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="case_status_changes",
        verbose_name="Changed By",
    )
    message = models.TextField(
        blank=True,
        default="",
        verbose_name="Message",
    )

    class Meta:
        verbose_name = "Case Status Log"
        verbose_name_plural = "Case Status Logs"
        ordering = ["-created_at", "-pk"]

    def __str__(self):
        return (
            f"Case #{self.case_id}: "
            f"{self.from_status or '-'} → {self.to_status}"
        )
