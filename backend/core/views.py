"""
Core app views — **Thin Views**.

Each view delegates all business logic to the corresponding service in
``core.services``.  Views are responsible only for:

1. Extracting and validating query parameters from the request.
2. Calling the service with the authenticated user and parameters.
3. Serialising the result and returning an HTTP ``Response``.
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import NotificationSerializer, SystemConstantsSerializer
from .services import InboxService, SystemConstantsService


class SystemConstantsView(APIView):
    """
    **GET /api/core/constants/**

    Return severities, statuses, tiers and the tier visibility table so
    clients can build pickers and labels without hardcoding values.

    **Authentication**: Not required (``AllowAny``).
    These constants are public configuration data.
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="System constants",
        responses={200: OpenApiResponse(response=SystemConstantsSerializer, description="System constants.")},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        data = SystemConstantsService.get_constants()
        serializer = SystemConstantsSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)


class NotificationViewSet(viewsets.ViewSet):
    """
    **Notification API** — list and mark-as-read for the authenticated user.

    Endpoints
    ---------
    GET  /api/core/notifications/              → list notifications (``?unread=true``, ``?event_type=``)
    POST /api/core/notifications/{id}/read/    → mark a notification as read

    **Authentication**: Required (``IsAuthenticated``).
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="List notifications",
        parameters=[
            OpenApiParameter(
                name="unread",
                type=bool,
                location=OpenApiParameter.QUERY,
                description="Only unread notifications when 'true'.",
            ),
            OpenApiParameter(
                name="event_type",
                type=str,
                location=OpenApiParameter.QUERY,
                description="Only notifications of one event, e.g. 'case_escalated'.",
            ),
        ],
        responses={200: OpenApiResponse(response=NotificationSerializer(many=True), description="Notification list.")},
        tags=["Notifications"],
    )
    def list(self, request: Request) -> Response:
        unread_only = request.query_params.get("unread", "").lower() in ("1", "true", "yes")
        service = InboxService(user=request.user)
        notifications = service.list_notifications(
            unread_only=unread_only,
            event_type=request.query_params.get("event_type") or None,
        )
        serializer = NotificationSerializer(notifications, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Mark notification as read",
        request=None,
        responses={200: OpenApiResponse(response=NotificationSerializer, description="Updated notification.")},
        tags=["Notifications"],
    )
    @action(detail=True, methods=["post"], url_path="read")
    def mark_as_read(self, request: Request, pk: str = None) -> Response:
        service = InboxService(user=request.user)
        notification = service.mark_as_read(notification_id=int(pk))
        serializer = NotificationSerializer(notification)
        return Response(serializer.data, status=status.HTTP_200_OK)
