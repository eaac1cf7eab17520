"""
Accounts app models.

Defines a custom ``User`` with an explicit role discriminator (pet owner
vs. volunteer responder) and the ``ResponderProfile`` that carries a
responder's qualification tier and standing.

A user's role is **never** inferred from which fields happen to be filled
in; ``User.role`` is the only source of truth.
"""

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models

from core.models import TimeStampedModel


class UserRole(models.TextChoices):
    """Discriminator between the two kinds of account."""

    OWNER = "owner", "Pet Owner"
    RESPONDER = "responder", "Volunteer Responder"


class ResponderTier(models.TextChoices):
    """
    Qualification tier of a responder, lowest first.

    The declaration order doubles as the rank used by the tier policy
    (``student < graduate < qualified``).
    """

    STUDENT = "student", "Student"
    GRADUATE = "graduate", "Graduate"
    QUALIFIED = "qualified", "Qualified Expert"

    @property
    def rank(self) -> int:
        return list(ResponderTier).index(self)


class User(AbstractUser):
    """
    Custom user model for the SOS coordination backend.

    Registration requires a display name, email, password and (for owners)
    a contact phone number that is copied onto every case they open.
    Login is supported via username, email or phone number.
    """

    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    phone_number = models.CharField(
        max_length=20,
        blank=True,
        default="",
        verbose_name="Phone Number",
        db_index=True,
    )
    display_name = models.CharField(
        max_length=150,
        verbose_name="Display Name",
    )
    role = models.CharField(
        max_length=10,
        choices=UserRole.choices,
        verbose_name="Role",
        db_index=True,
    )
    push_token = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Push Token",
        help_text="Expo push token of the user's most recent device.",
    )

    REQUIRED_FIELDS = ["email", "display_name", "role"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return f"{self.username} ({self.display_name}) - {self.role}"

    @property
    def is_owner(self) -> bool:
        return self.role == UserRole.OWNER

    @property
    def is_responder(self) -> bool:
        return self.role == UserRole.RESPONDER


class ResponderProfile(TimeStampedModel):
    """
    Qualification and standing of a volunteer responder.

    ``points`` and ``resolved_count`` start at zero and are only ever
    increased, exclusively by ``cases.rewards.RewardAccountingService``
    through atomic ``F()`` increments.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="responder_profile",
        verbose_name="User",
    )
    tier = models.CharField(
        max_length=10,
        choices=ResponderTier.choices,
        default=ResponderTier.STUDENT,
        verbose_name="Tier",
        db_index=True,
    )
    points = models.PositiveIntegerField(
        default=0,
        verbose_name="Points",
        db_index=True,
    )
    resolved_count = models.PositiveIntegerField(
        default=0,
        verbose_name="Resolved Count",
        help_text="Cases resolved plus cases triaged and escalated.",
    )

    # ── Credentials supplied at registration ─────────────────────────
    university = models.CharField(max_length=255, blank=True, default="")
    student_id = models.CharField(max_length=64, blank=True, default="")
    certificate_no = models.CharField(max_length=64, blank=True, default="")
    license_no = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        verbose_name = "Responder Profile"
        verbose_name_plural = "Responder Profiles"
        ordering = ["-points"]

    def __str__(self):
        return f"{self.user.display_name} [{self.tier}] {self.points} pts"

    @property
    def tier_choice(self) -> ResponderTier:
        return ResponderTier(self.tier)
