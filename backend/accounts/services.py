"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service function / method, and
return the result wrapped in a DRF ``Response``.

Architecture
------------
- ``UserRegistrationService``  — owner and responder sign-up.
- ``ResponderDirectory``       — responder lookups used by the case engine
                                 (profile resolution, tier cohorts).
- ``CurrentUserService``       — "Me" endpoint helpers and push tokens.
- ``LeaderboardService``       — responder ranking by points.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from core.constants import LEADERBOARD_SIZE
from core.domain.exceptions import Conflict, NotFound, PermissionDenied

from .models import ResponderProfile, ResponderTier, UserRole

User = get_user_model()
logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("university", "student_id", "certificate_no", "license_no")


# ═══════════════════════════════════════════════════════════════════
#  Registration Service
# ═══════════════════════════════════════════════════════════════════


class UserRegistrationService:
    """
    Creates owner and responder accounts.

    The login username is the lower-cased e-mail address so that both
    account kinds sign in with the same identifier they registered with.
    """

    @staticmethod
    def _create_user(validated_data: dict[str, Any], role: str) -> User:
        password = validated_data.pop("password")
        validated_data.pop("password_confirm", None)
        email = validated_data["email"].lower()

        if User.objects.filter(email__iexact=email).exists():
            raise Conflict("An account with this email already exists.")

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    username=email,
                    email=email,
                    password=password,
                    display_name=validated_data["display_name"],
                    phone_number=validated_data.get("phone_number", ""),
                    role=role,
                )
        except IntegrityError:
            raise Conflict("An account with this email already exists.")
        return user

    @staticmethod
    def register_owner(validated_data: dict[str, Any]) -> User:
        """
        Create a pet-owner account.

        The owner's ``phone_number`` is what responders see on every case
        the owner opens, so it is required by the serializer.

        Raises
        ------
        core.domain.exceptions.Conflict
            If the e-mail is already registered.
        """
        user = UserRegistrationService._create_user(validated_data, UserRole.OWNER)
        logger.info("Registered owner %s", user.pk)
        return user

    @staticmethod
    @transaction.atomic
    def register_responder(validated_data: dict[str, Any]) -> User:
        """
        Create a responder account and its ``ResponderProfile``.

        Points and resolved count always start at zero regardless of the
        submitted payload.

        Raises
        ------
        core.domain.exceptions.Conflict
            If the e-mail is already registered.
        """
        tier = validated_data.pop("tier", ResponderTier.STUDENT)
        profile_data = {
            name: validated_data.pop(name, "") or ""
            for name in _PROFILE_FIELDS
        }

        user = UserRegistrationService._create_user(validated_data, UserRole.RESPONDER)
        ResponderProfile.objects.create(user=user, tier=tier, **profile_data)
        logger.info("Registered responder %s at tier %s", user.pk, tier)
        return user


# ═══════════════════════════════════════════════════════════════════
#  Responder Directory
# ═══════════════════════════════════════════════════════════════════


class ResponderDirectory:
    """Read-side helpers the case engine uses to reason about responders."""

    @staticmethod
    def require_responder(user: Any) -> ResponderProfile:
        """
        Return the caller's ``ResponderProfile``.

        Raises
        ------
        PermissionDenied
            If ``user`` is not a responder account.
        NotFound
            If the responder has no profile row.
        """
        if not getattr(user, "is_responder", False):
            raise PermissionDenied()
        try:
            return ResponderProfile.objects.select_related("user").get(user=user)
        except ResponderProfile.DoesNotExist:
            raise NotFound("Responder profile not found.")

    @staticmethod
    def responders_in_tiers(tiers: Iterable[str]) -> QuerySet:
        """Active responder users whose tier is in ``tiers``."""
        return (
            User.objects
            .filter(
                role=UserRole.RESPONDER,
                is_active=True,
                responder_profile__tier__in=list(tiers),
            )
            .order_by("pk")
        )


# ═══════════════════════════════════════════════════════════════════
#  Current User Service
# ═══════════════════════════════════════════════════════════════════


class CurrentUserService:
    """Helpers for the authenticated user's own account."""

    _UPDATABLE_FIELDS = ("display_name", "email", "phone_number")

    @staticmethod
    def get_profile(user: User) -> User:
        return (
            User.objects
            .select_related("responder_profile")
            .get(pk=user.pk)
        )

    @staticmethod
    def update_profile(user: User, validated_data: dict[str, Any]) -> User:
        """
        Update display name, e-mail and phone.

        Tier, points and resolved count are not editable here; the
        serializer does not expose them.
        """
        update_fields = []
        for name in CurrentUserService._UPDATABLE_FIELDS:
            if name in validated_data:
                setattr(user, name, validated_data[name])
                update_fields.append(name)

        if "email" in validated_data:
            email = validated_data["email"].lower()
            if User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
                raise Conflict("An account with this email already exists.")
            user.email = email
            user.username = email
            update_fields.append("username")

        if update_fields:
            user.save(update_fields=update_fields)
        return CurrentUserService.get_profile(user)

    @staticmethod
    def register_push_token(user: User, token: str) -> User:
        user.push_token = token
        user.save(update_fields=["push_token"])
        logger.info("Stored push token for user %s", user.pk)
        return user


# ═══════════════════════════════════════════════════════════════════
#  Leaderboard Service
# ═══════════════════════════════════════════════════════════════════


class LeaderboardService:
    """Responder ranking shown on the leaderboard screen."""

    @staticmethod
    def top_responders(limit: int = LEADERBOARD_SIZE) -> QuerySet:
        """
        Return the ``limit`` highest-scoring active responders.

        Ties are broken by resolved count, then by registration order.
        """
        return (
            ResponderProfile.objects
            .select_related("user")
            .filter(user__is_active=True)
            .order_by("-points", "-resolved_count", "created_at")[:limit]
        )
