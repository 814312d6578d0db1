from __future__ import annotations

import logging
from typing import Any

from concierge.application.ports.notifier import NotifierPort
from concierge.infrastructure.backend.backend_client import TravelBackendClient

WELCOME_PATH = "/api/send-welcome-email"


class HttpNotifier(NotifierPort):
    def __init__(self, client: TravelBackendClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

    async def send_welcome(
        self,
        email: str,
        name: str,
        code: str,
        category: str,
        preferences: dict[str, Any],
    ) -> None:
        await self._client.post_json(
            WELCOME_PATH,
            {"email": email, "name": name, "code": code, "category": category, "preferences": preferences},
        )
        self._logger.info("Welcome notification sent", extra={"code": code, "category": category})


class LogNotifier(NotifierPort):
    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def send_welcome(
        self,
        email: str,
        name: str,
        code: str,
        category: str,
        preferences: dict[str, Any],
    ) -> None:
        self._logger.info("WOULD_SEND_WELCOME", extra={"code": code, "category": category})
