"""
Cases app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to the appropriate service class.
    3. Serialize the result and return a DRF ``Response``.

Domain exceptions raised by the services are turned into the
``{"success": false, "error": ..., "error_kind": ...}`` envelope by
``core.domain.exception_handler``; views never catch them.

ViewSets
--------
- ``CaseViewSet`` — The single ViewSet for all case-related endpoints.
  Custom @action methods handle every lifecycle and history operation so
  the URL structure stays clean and discoverable.
"""

from __future__ import annotations

import logging
from typing import Any

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from core.domain.results import OperationResult

from .models import Case
from .serializers import (
    ActionResultSerializer,
    CaseCreateSerializer,
    CaseDetailSerializer,
    CaseListSerializer,
    CaseStatusLogSerializer,
    HistoryQuerySerializer,
    InstructionsSerializer,
    LiveLocationSerializer,
    ResolveSerializer,
)
from .services import (
    CaseCreationService,
    CaseHistoryService,
    CaseLifecycleService,
    CaseQueryService,
)

logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    400: OpenApiResponse(description="Invalid input."),
    403: OpenApiResponse(description="Not permitted."),
    404: OpenApiResponse(description="Case not found."),
    409: OpenApiResponse(description="Already claimed or invalid transition."),
}


class CaseViewSet(viewsets.ViewSet):
    """
    Central ViewSet for the cases app.

    Uses ``viewsets.ViewSet`` (not ``ModelViewSet``) so every action is
    explicitly defined, preventing accidental exposure of unintended
    CRUD operations (there is no update: severity and status are never
    written directly).

    Permission Strategy
    -------------------
    The base permission is ``IsAuthenticated``.  Role, tier and
    assignment checks are enforced exclusively inside the service layer
    — never in the view.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    # ── Helpers ──────────────────────────────────────────────────────

    def _action_response(
        self,
        request: Request,
        case: Case | None,
        payload: dict[str, Any] | None = None,
        http_status: int = status.HTTP_200_OK,
    ) -> Response:
        """Wrap a successful operation in the ``{"success": true, ...}`` envelope."""
        data = OperationResult.ok(case, **(payload or {})).as_dict()
        if case is not None:
            data["case"] = CaseDetailSerializer(case, context={"request": request}).data
        return Response(data, status=http_status)

    # ── Standard CRUD ────────────────────────────────────────────────

    @extend_schema(
        summary="List cases",
        description=(
            "Owners receive their own cases.  Responders receive the live feed: "
            "pending and in-progress cases whose severity their tier may see, "
            "newest first."
        ),
        responses={200: OpenApiResponse(response=CaseListSerializer(many=True), description="Cases.")},
        tags=["Cases"],
    )
    def list(self, request: Request) -> Response:
        """GET /api/cases/"""
        queryset = CaseQueryService.list_for_user(request.user)
        return Response(CaseListSerializer(queryset, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Raise an SOS",
        request=CaseCreateSerializer,
        responses={201: OpenApiResponse(response=ActionResultSerializer, description="Case created."), **_ERROR_RESPONSES},
        tags=["Cases"],
    )
    def create(self, request: Request) -> Response:
        """POST /api/cases/ — owners only."""
        serializer = CaseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        case = CaseCreationService.create_case(serializer.validated_data, request.user)
        return self._action_response(request, case, http_status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve a case",
        responses={200: OpenApiResponse(response=CaseDetailSerializer, description="Case."), 404: _ERROR_RESPONSES[404]},
        tags=["Cases"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        """GET /api/cases/{id}/"""
        case = CaseQueryService.get_visible_case(int(pk), request.user)
        return Response(
            CaseDetailSerializer(case, context={"request": request}).data,
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        summary="Delete a trashed case permanently",
        responses={200: OpenApiResponse(description="Deleted."), **_ERROR_RESPONSES},
        tags=["Cases – History"],
    )
    def destroy(self, request: Request, pk: str = None) -> Response:
        """DELETE /api/cases/{id}/ — only for a case already in the trash."""
        CaseHistoryService.permanent_delete(int(pk), request.user)
        return self._action_response(request, None)

    # ── Feeds ────────────────────────────────────────────────────────

    @extend_schema(
        summary="Escalated cases",
        description="Cases handed off by students, for graduate and qualified responders.",
        responses={200: OpenApiResponse(response=CaseListSerializer(many=True), description="Escalated cases."), 403: _ERROR_RESPONSES[403]},
        tags=["Cases"],
    )
    @action(detail=False, methods=["get"], url_path="escalated")
    def escalated(self, request: Request) -> Response:
        queryset = CaseQueryService.escalated_feed(request.user)
        return Response(CaseListSerializer(queryset, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Case history",
        parameters=[
            OpenApiParameter(
                name="view",
                type=str,
                location=OpenApiParameter.QUERY,
                description="One of 'active' (default), 'archived' or 'trash'.",
            ),
        ],
        responses={200: OpenApiResponse(response=CaseListSerializer(many=True), description="History folder.")},
        tags=["Cases – History"],
    )
    @action(detail=False, methods=["get"], url_path="history")
    def history(self, request: Request) -> Response:
        query = HistoryQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        queryset = CaseQueryService.history(request.user, query.validated_data["view"])
        return Response(CaseListSerializer(queryset, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Empty the trash",
        request=None,
        responses={200: OpenApiResponse(description="Number of cases deleted.")},
        tags=["Cases – History"],
    )
    @action(detail=False, methods=["post"], url_path="empty-trash")
    def empty_trash(self, request: Request) -> Response:
        result = CaseHistoryService.empty_trash(request.user)
        return self._action_response(request, None, result)

    # ── Lifecycle ────────────────────────────────────────────────────

    @extend_schema(
        summary="Accept a pending case",
        request=None,
        responses={200: OpenApiResponse(response=ActionResultSerializer, description="Case accepted."), **_ERROR_RESPONSES},
        tags=["Cases – Lifecycle"],
    )
    @action(detail=True, methods=["post"], url_path="accept")
    def accept(self, request: Request, pk: str = None) -> Response:
        case = CaseLifecycleService.accept(int(pk), request.user)
        return self._action_response(request, case)

    @extend_schema(
        summary="Mark on the way",
        request=None,
        responses={200: OpenApiResponse(response=ActionResultSerializer, description="Responder on the way."), **_ERROR_RESPONSES},
        tags=["Cases – Lifecycle"],
    )
    @action(detail=True, methods=["post"], url_path="on-way")
    def on_way(self, request: Request, pk: str = None) -> Response:
        case = CaseLifecycleService.mark_on_way(int(pk), request.user)
        return self._action_response(request, case)

    @extend_schema(
        summary="Send instructions to the owner",
        request=InstructionsSerializer,
        responses={200: OpenApiResponse(response=ActionResultSerializer, description="Instructions updated."), **_ERROR_RESPONSES},
        tags=["Cases – Lifecycle"],
    )
    @action(detail=True, methods=["post"], url_path="instructions")
    def instructions(self, request: Request, pk: str = None) -> Response:
        serializer = InstructionsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        case = CaseLifecycleService.update_instructions(
            int(pk), request.user, serializer.validated_data["text"],
        )
        return self._action_response(request, case)

    @extend_schema(
        summary="Escalate to senior responders",
        description="Students only.  Earns the triage reward.",
        request=None,
        responses={200: OpenApiResponse(response=ActionResultSerializer, description="Case escalated."), **_ERROR_RESPONSES},
        tags=["Cases – Lifecycle"],
    )
    @action(detail=True, methods=["post"], url_path="escalate")
    def escalate(self, request: Request, pk: str = None) -> Response:
        case, payload = CaseLifecycleService.escalate(int(pk), request.user)
        return self._action_response(request, case, payload)

    @extend_schema(
        summary="Take over an escalated case",
        request=None,
        responses={200: OpenApiResponse(response=ActionResultSerializer, description="Case taken over."), **_ERROR_RESPONSES},
        tags=["Cases – Lifecycle"],
    )
    @action(detail=True, methods=["post"], url_path="take-over")
    def take_over(self, request: Request, pk: str = None) -> Response:
        case = CaseLifecycleService.take_over(int(pk), request.user)
        return self._action_response(request, case)

    @extend_schema(
        summary="Resolve a case",
        request=ResolveSerializer,
        responses={200: OpenApiResponse(response=ActionResultSerializer, description="Case resolved."), **_ERROR_RESPONSES},
        tags=["Cases – Lifecycle"],
    )
    @action(detail=True, methods=["post"], url_path="resolve")
    def resolve(self, request: Request, pk: str = None) -> Response:
        serializer = ResolveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        case, payload = CaseLifecycleService.resolve(
            int(pk), request.user, serializer.validated_data["advice"],
        )
        return self._action_response(request, case, payload)

    @extend_schema(
        summary="Report the responder's live location",
        request=LiveLocationSerializer,
        responses={200: OpenApiResponse(response=ActionResultSerializer, description="Distance updated."), **_ERROR_RESPONSES},
        tags=["Cases – Lifecycle"],
    )
    @action(detail=True, methods=["post"], url_path="location")
    def location(self, request: Request, pk: str = None) -> Response:
        serializer = LiveLocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        case, payload = CaseLifecycleService.update_live_location(
            int(pk),
            request.user,
            serializer.validated_data["latitude"],
            serializer.validated_data["longitude"],
        )
        return self._action_response(request, case, payload)

    @extend_schema(
        summary="Case status log",
        responses={200: OpenApiResponse(response=CaseStatusLogSerializer(many=True), description="Audit trail.")},
        tags=["Cases"],
    )
    @action(detail=True, methods=["get"], url_path="status-log")
    def status_log(self, request: Request, pk: str = None) -> Response:
        logs = CaseQueryService.status_log(int(pk), request.user)
        return Response(CaseStatusLogSerializer(logs, many=True).data, status=status.HTTP_200_OK)

    # ── History management ───────────────────────────────────────────

    @extend_schema(
        summary="Archive or un-archive a case",
        request=None,
        responses={200: OpenApiResponse(response=ActionResultSerializer, description="Archive flag toggled."), **_ERROR_RESPONSES},
        tags=["Cases – History"],
    )
    @action(detail=True, methods=["post"], url_path="archive")
    def archive(self, request: Request, pk: str = None) -> Response:
        case = CaseHistoryService.archive_toggle(int(pk), request.user)
        return self._action_response(request, case)

    @extend_schema(
        summary="Move a case to the trash",
        request=None,
        responses={200: OpenApiResponse(response=ActionResultSerializer, description="Case trashed."), **_ERROR_RESPONSES},
        tags=["Cases – History"],
    )
    @action(detail=True, methods=["post"], url_path="trash")
    def trash(self, request: Request, pk: str = None) -> Response:
        case = CaseHistoryService.soft_delete(int(pk), request.user)
        return self._action_response(request, case)

    @extend_schema(
        summary="Restore a case from the trash",
        request=None,
        responses={200: OpenApiResponse(response=ActionResultSerializer, description="Case restored."), **_ERROR_RESPONSES},
        tags=["Cases – History"],
    )
    @action(detail=True, methods=["post"], url_path="restore")
    def restore(self, request: Request, pk: str = None) -> Response:
        case = CaseHistoryService.restore(int(pk), request.user)
        return self._action_response(request, case)
