"""
Accounts app URL configuration.

All routes are namespaced under ``accounts`` and designed to be included
in the project-level ``urls.py`` as::

    path('api/accounts/', include('accounts.urls')),

Endpoint Map
------------
Authentication
    POST   /auth/register/owner/        → OwnerRegisterView
    POST   /auth/register/responder/    → ResponderRegisterView
    POST   /auth/login/                 → LoginView
    POST   /auth/token/refresh/         → TokenRefreshView (SimpleJWT)

Current User Profile ("Me")
    GET    /me/                         → MeView  (retrieve)
    PATCH  /me/                         → MeView  (partial update)
    POST   /me/push-token/              → PushTokenView

Ranking
    GET    /leaderboard/                → LeaderboardView
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    LeaderboardView,
    LoginView,
    MeView,
    OwnerRegisterView,
    PushTokenView,
    ResponderRegisterView,
)

app_name = "accounts"

urlpatterns = [
    # ── Authentication ───────────────────────────────────────────────
    path("auth/register/owner/", OwnerRegisterView.as_view(), name="register-owner"),
    path("auth/register/responder/", ResponderRegisterView.as_view(), name="register-responder"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path(
        "auth/token/refresh/",
        TokenRefreshView.as_view(),
        name="token-refresh",
    ),

    # ── Current User (Me) ───────────────────────────────────────────
    path("me/", MeView.as_view(), name="me"),
    path("me/push-token/", PushTokenView.as_view(), name="push-token"),

    # ── Ranking ─────────────────────────────────────────────────────
    path("leaderboard/", LeaderboardView.as_view(), name="leaderboard"),
]
