"""
Integration tests — multi-identifier login, the "me" endpoint, push-token
registration and the leaderboard.

Endpoints under test:
    POST  /api/accounts/auth/login/       (accounts:login)
    GET   /api/accounts/me/               (accounts:me)
    PATCH /api/accounts/me/
    POST  /api/accounts/me/push-token/    (accounts:push-token)
    GET   /api/accounts/leaderboard/      (accounts:leaderboard)
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import ResponderProfile, ResponderTier, UserRole

User = get_user_model()

_PASSWORD = "Str0ng!Pass99"


def _make_responder(email: str, tier: str, points: int = 0, resolved: int = 0, **kwargs) -> User:
    user = User.objects.create_user(
        username=email,
        email=email,
        password=_PASSWORD,
        display_name=email.split("@")[0].title(),
        role=UserRole.RESPONDER,
        **kwargs,
    )
    ResponderProfile.objects.create(user=user, tier=tier, points=points, resolved_count=resolved)
    return user


class TestLogin(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.owner = User.objects.create_user(
            username="login_owner@example.com",
            email="login_owner@example.com",
            password=_PASSWORD,
            display_name="Login Owner",
            phone_number="09130000099",
            role=UserRole.OWNER,
        )
        cls.responder = _make_responder("login_responder@example.com", ResponderTier.QUALIFIED)

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("accounts:login")

    def _login(self, identifier: str, password: str = _PASSWORD):
        return self.client.post(
            self.url, {"identifier": identifier, "password": password}, format="json",
        )

    def test_login_with_email(self):
        response = self._login("login_owner@example.com")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)
        self.assertEqual(response.data["user"]["id"], self.owner.pk)

    def test_login_with_phone_number(self):
        response = self._login("09130000099")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["user"]["role"], UserRole.OWNER)

    def test_login_email_is_case_insensitive(self):
        response = self._login("LOGIN_OWNER@example.com")

        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_token_carries_role_and_tier(self):
        response = self._login("login_responder@example.com")

        token = AccessToken(response.data["access"])
        self.assertEqual(token["role"], UserRole.RESPONDER)
        self.assertEqual(token["tier"], ResponderTier.QUALIFIED)

    def test_wrong_password_rejected(self):
        response = self._login("login_owner@example.com", "nope-nope-nope")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertNotIn("access", response.data)

    def test_unknown_identifier_rejected(self):
        response = self._login("ghost@example.com")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class TestMeAndPushToken(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.responder = _make_responder(
            "me_responder@example.com", ResponderTier.STUDENT, points=40, resolved=3,
        )
        cls.other = User.objects.create_user(
            username="taken@example.com",
            email="taken@example.com",
            password=_PASSWORD,
            display_name="Taken",
            role=UserRole.OWNER,
        )

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=self.responder)

    def test_me_requires_authentication(self):
        response = APIClient().get(reverse("accounts:me"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_includes_responder_stats(self):
        response = self.client.get(reverse("accounts:me"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["responder_profile"]["points"], 40)
        self.assertEqual(response.data["responder_profile"]["resolved_count"], 3)
        self.assertEqual(response.data["responder_profile"]["tier"], ResponderTier.STUDENT)

    def test_patch_updates_display_name(self):
        response = self.client.patch(
            reverse("accounts:me"), {"display_name": "Renamed"}, format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["display_name"], "Renamed")

    def test_patch_cannot_change_points(self):
        self.client.patch(reverse("accounts:me"), {"points": 9999}, format="json")

        self.responder.responder_profile.refresh_from_db()
        self.assertEqual(self.responder.responder_profile.points, 40)

    def test_patch_duplicate_email_conflicts(self):
        response = self.client.patch(
            reverse("accounts:me"), {"email": "taken@example.com"}, format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_register_push_token(self):
        response = self.client.post(
            reverse("accounts:push-token"),
            {"push_token": "ExponentPushToken[abc123]"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"success": True})
        self.responder.refresh_from_db()
        self.assertEqual(self.responder.push_token, "ExponentPushToken[abc123]")


class TestLeaderboard(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.top = _make_responder("top@example.com", ResponderTier.QUALIFIED, points=120, resolved=4)
        cls.mid = _make_responder("mid@example.com", ResponderTier.GRADUATE, points=60, resolved=3)
        cls.tied = _make_responder("tied@example.com", ResponderTier.STUDENT, points=60, resolved=5)
        cls.inactive = _make_responder(
            "gone@example.com", ResponderTier.QUALIFIED, points=500, is_active=False,
        )

    def test_leaderboard_orders_by_points_then_resolved_count(self):
        client = APIClient()
        client.force_authenticate(user=self.mid)

        response = client.get(reverse("accounts:leaderboard"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [entry["user_id"] for entry in response.data]
        self.assertEqual(ids, [self.top.pk, self.tied.pk, self.mid.pk])
        self.assertEqual(response.data[0]["points"], 120)
        self.assertEqual(response.data[0]["display_name"], "Top")

    def test_leaderboard_respects_limit(self):
        from accounts.services import LeaderboardService

        self.assertEqual(len(LeaderboardService.top_responders(limit=2)), 2)
