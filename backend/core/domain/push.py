"""
core.domain.push — Push-notification delivery backends.

Delivery is a fire-and-forget boundary: the engine hands a list of device
tokens and a message to a backend and never consumes a return value.
Backends are swappable through settings, the same way Django swaps e-mail
backends::

    PUSH_NOTIFICATIONS = {
        "BACKEND": "core.domain.push.ExpoPushBackend",
        "EXPO_PUSH_URL": "https://exp.host/--/api/v2/push/send",
        "TIMEOUT": 10.0,
    }

Backends
--------
ExpoPushBackend    POSTs to the Expo push API with ``httpx``.
ConsolePushBackend Logs messages instead of sending them (development).
LocmemPushBackend  Appends messages to ``core.domain.push.outbox`` (tests).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx
from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)

DEFAULT_EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"
DEFAULT_TIMEOUT = 10.0

#: Messages captured by ``LocmemPushBackend``.
outbox: list[PushMessage] = []


@dataclass(frozen=True)
class PushMessage:
    tokens: tuple[str, ...]
    title: str
    body: str
    metadata: dict[str, Any] = field(default_factory=dict)


class BasePushBackend:
    """Interface every push backend implements."""

    def __init__(self, **options: Any) -> None:
        self.options = options

    def send(
        self,
        tokens: list[str],
        title: str,
        body: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        raise NotImplementedError


class ExpoPushBackend(BasePushBackend):
    """
    Deliver through the Expo push service in a single batched request.

    Transport errors propagate to the caller; ``NotificationService``
    is responsible for logging them without affecting case state.
    """

    def _build_client(self) -> httpx.Client:
        return httpx.Client(timeout=self.options.get("TIMEOUT", DEFAULT_TIMEOUT))

    def send(self, tokens, title, body, metadata=None) -> None:
        if not tokens:
            return

        message = {
            "to": list(tokens),
            "sound": "default",
            "title": title,
            "body": body,
            "data": metadata or {},
            "priority": "high",
            "channelId": "emergency",
        }
        url = self.options.get("EXPO_PUSH_URL", DEFAULT_EXPO_PUSH_URL)

        with self._build_client() as client:
            response = client.post(
                url,
                json=message,
                headers={
                    "Accept": "application/json",
                    "Accept-Encoding": "gzip, deflate",
                },
            )
            response.raise_for_status()

        logger.info("Expo push accepted for %d token(s): %s", len(tokens), title)


class ConsolePushBackend(BasePushBackend):
    def send(self, tokens, title, body, metadata=None) -> None:
        logger.info(
            "[push] to=%d token(s) title=%r body=%r data=%r",
            len(tokens), title, body, metadata or {},
        )


class LocmemPushBackend(BasePushBackend):
    def send(self, tokens, title, body, metadata=None) -> None:
        outbox.append(
            PushMessage(
                tokens=tuple(tokens),
                title=title,
                body=body,
                metadata=dict(metadata or {}),
            )
        )


def get_push_backend() -> BasePushBackend:
    """Instantiate the backend configured in ``settings.PUSH_NOTIFICATIONS``."""
    config = dict(getattr(settings, "PUSH_NOTIFICATIONS", {}))
    backend_path = config.pop("BACKEND", "core.domain.push.ConsolePushBackend")
    backend_class = import_string(backend_path)
    return backend_class(**config)
