"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.  **No business logic** resides here.

View Map
--------
- ``OwnerRegisterView``      — POST /auth/register/owner/
- ``ResponderRegisterView``  — POST /auth/register/responder/
- ``LoginView``              — POST /auth/login/
- ``MeView``                 — GET / PATCH /me/
- ``PushTokenView``          — POST /me/push-token/
- ``LeaderboardView``        — GET /leaderboard/
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import (
    CustomTokenObtainPairSerializer,
    LeaderboardEntrySerializer,
    MeUpdateSerializer,
    OwnerRegisterSerializer,
    PushTokenSerializer,
    ResponderRegisterSerializer,
    UserDetailSerializer,
)
from .services import (
    CurrentUserService,
    LeaderboardService,
    UserRegistrationService,
)


# ═══════════════════════════════════════════════════════════════════
#  Authentication Views
# ═══════════════════════════════════════════════════════════════════


class OwnerRegisterView(generics.CreateAPIView):
    """
    POST /api/accounts/auth/register/owner/

    Public endpoint.  Creates a pet-owner account.

    Request body  → ``OwnerRegisterSerializer``
    Response body → ``UserDetailSerializer`` (201 Created)
    """

    permission_classes = [AllowAny]
    serializer_class = OwnerRegisterSerializer

    @extend_schema(
        summary="Register a pet owner",
        responses={
            201: OpenApiResponse(response=UserDetailSerializer, description="Owner created."),
            400: OpenApiResponse(description="Validation error."),
            409: OpenApiResponse(description="E-mail already registered."),
        },
        tags=["Accounts"],
    )
    def post(self, request: Request, *args, **kwargs) -> Response:
        return self.create(request, *args, **kwargs)

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserRegistrationService.register_owner(dict(serializer.validated_data))
        return Response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)


class ResponderRegisterView(generics.CreateAPIView):
    """
    POST /api/accounts/auth/register/responder/

    Public endpoint.  Creates a responder account with its tier and
    credentials.  Points and resolved count always start at zero.
    """

    permission_classes = [AllowAny]
    serializer_class = ResponderRegisterSerializer

    @extend_schema(
        summary="Register a responder",
        responses={
            201: OpenApiResponse(response=UserDetailSerializer, description="Responder created."),
            400: OpenApiResponse(description="Validation error."),
            409: OpenApiResponse(description="E-mail already registered."),
        },
        tags=["Accounts"],
    )
    def post(self, request: Request, *args, **kwargs) -> Response:
        return self.create(request, *args, **kwargs)

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserRegistrationService.register_responder(dict(serializer.validated_data))
        user = CurrentUserService.get_profile(user)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    POST /api/accounts/auth/login/

    Public endpoint.  Authenticates a user via username, e-mail or phone
    number plus password and returns a JWT pair with the user's profile.
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Log in",
        request=CustomTokenObtainPairSerializer,
        responses={
            200: OpenApiResponse(description="Access and refresh tokens plus the user profile."),
            400: OpenApiResponse(description="Invalid credentials."),
        },
        tags=["Accounts"],
    )
    def post(self, request: Request) -> Response:
        serializer = CustomTokenObtainPairSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)

        payload = serializer.validated_data  # contains 'access' and 'refresh'
        user = CurrentUserService.get_profile(serializer.user)
        payload["user"] = UserDetailSerializer(user).data

        return Response(payload, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  Current User ("Me") Views
# ═══════════════════════════════════════════════════════════════════


class MeView(APIView):
    """
    GET   /api/accounts/me/ → Retrieve current user profile.
    PATCH /api/accounts/me/ → Update display name, e-mail or phone.

    Responders also receive their tier, points and resolved count.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current user profile",
        responses={200: OpenApiResponse(response=UserDetailSerializer, description="Profile.")},
        tags=["Accounts"],
    )
    def get(self, request: Request) -> Response:
        user = CurrentUserService.get_profile(request.user)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Update current user profile",
        request=MeUpdateSerializer,
        responses={
            200: OpenApiResponse(response=UserDetailSerializer, description="Updated profile."),
            400: OpenApiResponse(description="Validation error."),
            409: OpenApiResponse(description="E-mail already registered."),
        },
        tags=["Accounts"],
    )
    def patch(self, request: Request) -> Response:
        serializer = MeUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = CurrentUserService.update_profile(request.user, serializer.validated_data)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)


class PushTokenView(APIView):
    """POST /api/accounts/me/push-token/ → store the device's Expo push token."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Register push token",
        request=PushTokenSerializer,
        responses={200: OpenApiResponse(description="Token stored.")},
        tags=["Accounts"],
    )
    def post(self, request: Request) -> Response:
        serializer = PushTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        CurrentUserService.register_push_token(
            request.user, serializer.validated_data["push_token"],
        )
        return Response({"success": True}, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  Leaderboard
# ═══════════════════════════════════════════════════════════════════


class LeaderboardView(APIView):
    """GET /api/accounts/leaderboard/ → top responders by points."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Responder leaderboard",
        responses={200: OpenApiResponse(response=LeaderboardEntrySerializer(many=True), description="Top responders.")},
        tags=["Accounts"],
    )
    def get(self, request: Request) -> Response:
        profiles = LeaderboardService.top_responders()
        return Response(
            LeaderboardEntrySerializer(profiles, many=True).data,
            status=status.HTTP_200_OK,
        )
