"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``push_outbox`` autouse fixture routing push delivery to the
    in-memory ``LocmemPushBackend`` and clearing its outbox.
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_owner`` / ``create_responder`` factory fixtures.
  - ``auth_header`` fixture for authenticated requests (JWT).
"""

from __future__ import annotations

import pytest
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def push_outbox(settings):
    """Capture push messages in memory instead of calling Expo."""
    from core.domain import push

    settings.PUSH_NOTIFICATIONS = {"BACKEND": "core.domain.push.LocmemPushBackend"}
    push.outbox.clear()
    yield push.outbox
    push.outbox.clear()


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def create_owner(db):
    """
    Factory fixture that creates a pet-owner account.

    Usage::

        def test_something(create_owner):
            owner = create_owner(display_name="Dana")
    """
    from accounts.models import User, UserRole

    _counter = 0

    def _factory(
        *,
        display_name: str | None = None,
        password: str = "TestPass123!",
        email: str | None = None,
        phone_number: str | None = None,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if email is None:
            email = f"owner{_counter}@test.local"
        if phone_number is None:
            phone_number = f"0912{_counter:07d}"
        return User.objects.create_user(
            username=email,
            email=email,
            password=password,
            display_name=display_name or f"Owner {_counter}",
            phone_number=phone_number,
            role=UserRole.OWNER,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def create_responder(db):
    """
    Factory fixture that creates a responder with a profile.

    Usage::

        def test_something(create_responder):
            student = create_responder(tier="student")
            expert = create_responder(tier="qualified", push_token="ExponentPushToken[x]")
    """
    from accounts.models import ResponderProfile, ResponderTier, User, UserRole

    _counter = 0

    def _factory(
        *,
        tier: str = ResponderTier.STUDENT,
        display_name: str | None = None,
        password: str = "TestPass123!",
        email: str | None = None,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if email is None:
            email = f"responder{_counter}@test.local"
        user = User.objects.create_user(
            username=email,
            email=email,
            password=password,
            display_name=display_name or f"Responder {_counter}",
            role=UserRole.RESPONDER,
            **kwargs,
        )
        ResponderProfile.objects.create(user=user, tier=tier)
        return user

    return _factory


@pytest.fixture()
def auth_header():
    """
    Returns a helper that builds an ``Authorization`` header dict with a
    valid JWT access token for an existing user.

    Usage::

        def test_protected(auth_header, api_client, create_owner):
            owner = create_owner()
            api_client.credentials(HTTP_AUTHORIZATION=auth_header(owner)["Authorization"])
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(user) -> dict[str, str]:
        token = AccessToken.for_user(user)
        return {"Authorization": f"Bearer {token}"}

    return _make
