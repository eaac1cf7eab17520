"""
Cases app serializers.

Contains all Request and Response serializers for the Cases API.
Serializers handle field definitions, read/write constraints, and field-level
validation only.  **No business logic or workflow transitions live here**
— those belong in ``services.py``.

Structure
---------
1. Query-param serializers
2. Case read serializers (list, detail, status log)
3. Case write serializers (create)
4. Workflow action serializers (instructions, resolve, location)
"""

from __future__ import annotations

from rest_framework import serializers

from accounts.models import ResponderTier
from core.constants import INSTRUCTIONS_MAX_LENGTH

from .models import Case, CaseStatusLog, Severity
from .services import HistoryView


# ═══════════════════════════════════════════════════════════════════
#  1. Query-Parameter Serializers
# ═══════════════════════════════════════════════════════════════════


class HistoryQuerySerializer(serializers.Serializer):
    """``GET /api/cases/history/?view=active|archived|trash``"""

    view = serializers.ChoiceField(choices=HistoryView.choices, default=HistoryView.ACTIVE)


# ═══════════════════════════════════════════════════════════════════
#  2. Case Read Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseListSerializer(serializers.ModelSerializer):
    """
    Compact representation for feeds and history folders.

    Leaves out contact details and instructions to keep list payloads
    small.
    """

    severity_display = serializers.CharField(source="get_severity_display", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Case
        fields = [
            "id",
            "owner_name",
            "symptoms",
            "severity",
            "severity_display",
            "status",
            "status_display",
            "assigned_responder",
            "assigned_responder_name",
            "is_escalated",
            "is_archived",
            "is_deleted",
            "created_at",
            "resolved_at",
        ]
        read_only_fields = fields


class CaseStatusLogSerializer(serializers.ModelSerializer):
    """Read-only serializer for the case audit trail."""

    changed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = CaseStatusLog
        fields = [
            "id",
            "from_status",
            "to_status",
            "changed_by",
            "changed_by_name",
            "message",
            "created_at",
        ]
        read_only_fields = fields

    def get_changed_by_name(self, obj: CaseStatusLog) -> str | None:
        if obj.changed_by is None:
            return None
        return obj.changed_by.display_name


class CaseDetailSerializer(serializers.ModelSerializer):
    """
    **Full case detail serializer.**

    Used for ``GET /api/cases/{id}/`` and as the response body of every
    workflow action.  The owner's phone number is withheld from student
    responders, who advise by text only.
    """

    severity_display = serializers.CharField(source="get_severity_display", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    help_type_display = serializers.CharField(source="get_help_type_display", read_only=True)
    owner_phone = serializers.SerializerMethodField()

    class Meta:
        model = Case
        fields = [
            "id",
            "owner",
            "owner_name",
            "owner_phone",
            "symptoms",
            "severity",
            "severity_display",
            "latitude",
            "longitude",
            "image_url",
            "status",
            "status_display",
            "assigned_responder",
            "assigned_responder_name",
            "assigned_responder_tier",
            "help_type",
            "help_type_display",
            "prior_assignee",
            "is_escalated",
            "advice",
            "volunteer_notes",
            "current_distance_km",
            "location_updated_at",
            "is_archived",
            "is_deleted",
            "deleted_at",
            "created_at",
            "updated_at",
            "last_updated",
            "resolved_at",
        ]
        read_only_fields = fields

    def get_owner_phone(self, obj: Case) -> str:
        request = self.context.get("request")
        user = getattr(request, "user", None)
        if user is not None and getattr(user, "is_responder", False):
            profile = getattr(user, "responder_profile", None)
            if profile is not None and profile.tier == ResponderTier.STUDENT:
                return ""
        return obj.owner_phone


# ═══════════════════════════════════════════════════════════════════
#  3. Case Write Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseCreateSerializer(serializers.Serializer):
    """
    Validates an owner's SOS.

    Coordinates are optional: a device that refused location permission
    sends neither.
    """

    symptoms = serializers.CharField(max_length=2000)
    severity = serializers.ChoiceField(choices=Severity.choices)
    latitude = serializers.FloatField(required=False, allow_null=True, min_value=-90, max_value=90)
    longitude = serializers.FloatField(required=False, allow_null=True, min_value=-180, max_value=180)
    image_url = serializers.URLField(max_length=500, required=False, allow_blank=True)


# ═══════════════════════════════════════════════════════════════════
#  4. Workflow Action Serializers
# ═══════════════════════════════════════════════════════════════════


class InstructionsSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=INSTRUCTIONS_MAX_LENGTH)


class ResolveSerializer(serializers.Serializer):
    advice = serializers.CharField(
        max_length=INSTRUCTIONS_MAX_LENGTH,
        required=False,
        allow_blank=True,
        default="",
        help_text="Closing instructions; required unless instructions were sent earlier.",
    )


class LiveLocationSerializer(serializers.Serializer):
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)


class ActionResultSerializer(serializers.Serializer):
    """Envelope returned by workflow actions."""

    success = serializers.BooleanField()
    case = CaseDetailSerializer(required=False)
    points_earned = serializers.IntegerField(required=False)
