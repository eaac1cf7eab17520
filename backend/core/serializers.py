"""
Core app serializers.

Response serializers for the cross-app endpoints: system constants for
client dropdowns and the in-app notification inbox.
"""

from __future__ import annotations

from rest_framework import serializers


class ChoiceItemSerializer(serializers.Serializer):
    """
    A single key-label pair representing one choice/enum option.

    Example::

        {"value": "on_way", "label": "Responder On The Way"}
    """

    value = serializers.CharField(
        help_text="Machine-readable value to send in API requests.",
    )
    label = serializers.CharField(
        help_text="Human-readable display label for the UI.",
    )


class TierVisibilitySerializer(serializers.Serializer):
    tier = serializers.CharField()
    severities = serializers.ListField(child=serializers.CharField())


class SystemConstantsSerializer(serializers.Serializer):
    """
    Top-level response serializer for ``GET /api/core/constants/``.

    Response shape::

        {
            "severities": [{"value": "low", "label": "Low"}, ...],
            "case_statuses": [...],
            "responder_tiers": [...],
            "help_types": [...],
            "tier_visibility": [{"tier": "student", "severities": ["low"]}, ...],
            "instructions_max_length": 500
        }
    """

    severities = ChoiceItemSerializer(many=True)
    case_statuses = ChoiceItemSerializer(many=True)
    responder_tiers = ChoiceItemSerializer(many=True)
    help_types = ChoiceItemSerializer(many=True)
    tier_visibility = TierVisibilitySerializer(many=True)
    instructions_max_length = serializers.IntegerField()


class NotificationSerializer(serializers.Serializer):
    """
    Read-only serializer for ``Notification`` instances.

    Used by the Notification ViewSet to list and retrieve notifications
    for the authenticated user.
    """

    id = serializers.IntegerField(read_only=True, help_text="Notification PK.")
    title = serializers.CharField(
        read_only=True,
        help_text="Short notification title.",
    )
    message = serializers.CharField(
        read_only=True,
        help_text="Full notification message body.",
    )
    is_read = serializers.BooleanField(
        read_only=True,
        help_text="Whether the recipient has marked this notification as read.",
    )
    event_type = serializers.CharField(
        read_only=True,
        help_text="Case event that produced the notification.",
    )
    created_at = serializers.DateTimeField(
        read_only=True,
        help_text="When the notification was created.",
    )
    content_type = serializers.StringRelatedField(
        read_only=True,
        help_text="Related content type (if any).",
    )
    object_id = serializers.IntegerField(
        read_only=True,
        allow_null=True,
        help_text="PK of the related case (if any).",
    )
