"""
Accounts app serializers.

Contains all Request and Response serializers for the accounts API.
Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here — all domain
rules are delegated to ``services.py``.
"""

from __future__ import annotations

import re
from typing import Any

from django.contrib.auth import authenticate, get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import ResponderProfile, ResponderTier

User = get_user_model()

# ── Phone number validation regex ───────────────────────────────────
_PHONE_REGEX = re.compile(r"^\+?[\d\s\-()]{7,20}$")


# ═══════════════════════════════════════════════════════════════════
#  Registration Serializers
# ═══════════════════════════════════════════════════════════════════


class _BaseRegisterSerializer(serializers.Serializer):
    display_name = serializers.CharField(max_length=150, help_text="Full name shown to other users.")
    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        help_text="Minimum 8 characters.",
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        help_text="Must match 'password'.",
    )
    phone_number = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")

    def validate_phone_number(self, value: str) -> str:
        if value and not _PHONE_REGEX.match(value):
            raise serializers.ValidationError("Enter a valid phone number.")
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs["password"] != attrs["password_confirm"]:
            raise serializers.ValidationError(
                {"password_confirm": "Passwords do not match."}
            )
        attrs.pop("password_confirm")
        return attrs


class OwnerRegisterSerializer(_BaseRegisterSerializer):
    """
    Validates pet-owner sign-up.

    ``phone_number`` is mandatory: it is copied onto every SOS case so the
    responder can call the owner.
    """

    phone_number = serializers.CharField(max_length=20)


class ResponderRegisterSerializer(_BaseRegisterSerializer):
    """Validates responder sign-up, including tier and credential fields."""

    tier = serializers.ChoiceField(choices=ResponderTier.choices, default=ResponderTier.STUDENT)
    university = serializers.CharField(max_length=255, required=False, allow_blank=True)
    student_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    certificate_no = serializers.CharField(max_length=64, required=False, allow_blank=True)
    license_no = serializers.CharField(max_length=64, required=False, allow_blank=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """
        Require the credential matching the chosen tier:
        students give a student ID, graduates a certificate number,
        qualified experts a license number.
        """
        attrs = super().validate(attrs)
        required_credential = {
            ResponderTier.STUDENT: "student_id",
            ResponderTier.GRADUATE: "certificate_no",
            ResponderTier.QUALIFIED: "license_no",
        }[attrs["tier"]]
        if not attrs.get(required_credential):
            raise serializers.ValidationError(
                {required_credential: "This field is required for the selected tier."}
            )
        return attrs


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Custom SimpleJWT serializer that:

    1. Accepts ``identifier`` + ``password`` instead of
       ``username`` + ``password``.
    2. Resolves the user via the ``MultiFieldAuthBackend``.
    3. Injects ``role`` and ``tier`` claims into the JWT payload.
    """

    username_field = "identifier"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields.pop(self.username_field, None)
        self.fields["identifier"] = serializers.CharField(
            help_text="Username, email, or phone number.",
        )

    @classmethod
    def get_token(cls, user) -> Any:
        token = super().get_token(user)
        token["role"] = user.role
        profile = getattr(user, "responder_profile", None) if user.is_responder else None
        token["tier"] = profile.tier if profile else None
        return token

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        user = authenticate(
            request=self.context.get("request"),
            identifier=attrs.get("identifier"),
            password=attrs.get("password"),
        )

        if user is None:
            raise serializers.ValidationError(
                {"detail": "Invalid credentials."},
                code="authentication",
            )

        refresh = self.get_token(user)
        self.user = user
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


# ═══════════════════════════════════════════════════════════════════
#  User / Profile Serializers
# ═══════════════════════════════════════════════════════════════════


class ResponderProfileSerializer(serializers.ModelSerializer):
    """Responder standing; every field is read-only."""

    class Meta:
        model = ResponderProfile
        fields = [
            "tier",
            "points",
            "resolved_count",
            "university",
            "student_id",
            "certificate_no",
            "license_no",
        ]
        read_only_fields = fields


class UserDetailSerializer(serializers.ModelSerializer):
    responder_profile = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "display_name",
            "phone_number",
            "role",
            "date_joined",
            "responder_profile",
        ]
        read_only_fields = fields

    def get_responder_profile(self, obj: User) -> dict | None:
        if not obj.is_responder:
            return None
        profile = getattr(obj, "responder_profile", None)
        return ResponderProfileSerializer(profile).data if profile else None


class MeUpdateSerializer(serializers.Serializer):
    display_name = serializers.CharField(max_length=150, required=False)
    email = serializers.EmailField(required=False)
    phone_number = serializers.CharField(max_length=20, required=False, allow_blank=True)

    def validate_phone_number(self, value: str) -> str:
        if value and not _PHONE_REGEX.match(value):
            raise serializers.ValidationError("Enter a valid phone number.")
        return value


class PushTokenSerializer(serializers.Serializer):
    push_token = serializers.CharField(max_length=255)


class LeaderboardEntrySerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source="user.pk", read_only=True)
    display_name = serializers.CharField(source="user.display_name", read_only=True)

    class Meta:
        model = ResponderProfile
        fields = ["user_id", "display_name", "tier", "points", "resolved_count"]
        read_only_fields = fields
