"""
Integration tests — owner and responder registration.

Endpoints under test:
    POST /api/accounts/auth/register/owner/      (accounts:register-owner)
    POST /api/accounts/auth/register/responder/  (accounts:register-responder)

Owners must supply a phone number (it is copied onto every SOS).
Responders pick a tier and supply the credential matching it; their
points and resolved count always start at zero.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import ResponderProfile, ResponderTier, UserRole

User = get_user_model()

_PASSWORD = "Str0ng!Pass99"


class TestOwnerRegistration(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("accounts:register-owner")

    def _payload(self, **overrides):
        payload = {
            "display_name": "Dana Owner",
            "email": "Dana@Example.com",
            "password": _PASSWORD,
            "password_confirm": _PASSWORD,
            "phone_number": "+1 555 0100",
        }
        payload.update(overrides)
        return payload

    def test_register_owner_success(self):
        response = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["role"], UserRole.OWNER)
        self.assertEqual(response.data["email"], "dana@example.com")
        self.assertIsNone(response.data["responder_profile"])
        self.assertNotIn("password", response.data)

        user = User.objects.get(email="dana@example.com")
        self.assertTrue(user.is_owner)
        self.assertTrue(user.check_password(_PASSWORD))
        self.assertFalse(ResponderProfile.objects.filter(user=user).exists())

    def test_phone_number_is_required(self):
        payload = self._payload()
        payload.pop("phone_number")

        response = self.client.post(self.url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error_kind"], "invalid_input")
        self.assertIn("phone_number", response.data["fields"])

    def test_password_mismatch_rejected(self):
        response = self.client.post(
            self.url, self._payload(password_confirm="Different!Pass1"), format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password_confirm", response.data["fields"])

    def test_duplicate_email_conflicts(self):
        self.client.post(self.url, self._payload(), format="json")

        response = self.client.post(
            self.url, self._payload(email="dana@example.com"), format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["success"], False)
        self.assertEqual(response.data["error_kind"], "conflict")


class TestResponderRegistration(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("accounts:register-responder")

    def _payload(self, **overrides):
        payload = {
            "display_name": "Riley Vet",
            "email": "riley@example.com",
            "password": _PASSWORD,
            "password_confirm": _PASSWORD,
            "tier": ResponderTier.GRADUATE,
            "university": "State Veterinary College",
            "certificate_no": "CERT-42",
        }
        payload.update(overrides)
        return payload

    def test_register_responder_success(self):
        response = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["role"], UserRole.RESPONDER)
        profile_data = response.data["responder_profile"]
        self.assertEqual(profile_data["tier"], ResponderTier.GRADUATE)
        self.assertEqual(profile_data["points"], 0)
        self.assertEqual(profile_data["resolved_count"], 0)
        self.assertEqual(profile_data["certificate_no"], "CERT-42")

    def test_counters_cannot_be_seeded_at_signup(self):
        response = self.client.post(
            self.url, self._payload(points=999, resolved_count=50), format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        profile = ResponderProfile.objects.get(user__email="riley@example.com")
        self.assertEqual(profile.points, 0)
        self.assertEqual(profile.resolved_count, 0)

    def test_tier_credential_required(self):
        response = self.client.post(
            self.url,
            self._payload(tier=ResponderTier.QUALIFIED, certificate_no=""),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("license_no", response.data["fields"])

    def test_student_registration_needs_student_id(self):
        response = self.client.post(
            self.url,
            self._payload(tier=ResponderTier.STUDENT, student_id="S-1001"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["responder_profile"]["tier"], ResponderTier.STUDENT)

    def test_unknown_tier_rejected(self):
        response = self.client.post(self.url, self._payload(tier="professor"), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("tier", response.data["fields"])
