from __future__ import annotations

import logging
import uuid
from typing import Callable

from concierge.application.use_cases.onboarding_dialogue import OnboardingDialogue


class OnboardingSessions:
    """
    In-process registry of onboarding dialogues keyed by session id.

    Dialogues are rebuilt from the stored snapshot when a known session id
    is opened after a restart.
    """

    def __init__(self, factory: Callable[[str], OnboardingDialogue]) -> None:
        self._factory = factory
        self._dialogues: dict[str, OnboardingDialogue] = {}
        self._logger = logging.getLogger(__name__)

    async def open(self, session_id: str | None = None) -> tuple[str, OnboardingDialogue]:
        session_id = session_id or uuid.uuid4().hex
        dialogue = self._dialogues.get(session_id)
        if dialogue is None:
            dialogue = self._factory(session_id)
            self._dialogues[session_id] = dialogue
            await dialogue.start()
            self._logger.info("Onboarding session opened", extra={"session_id": session_id})
        return session_id, dialogue

    def get(self, session_id: str) -> OnboardingDialogue | None:
        return self._dialogues.get(session_id)

    async def close(self, session_id: str) -> None:
        dialogue = self._dialogues.pop(session_id, None)
        if dialogue is not None:
            await dialogue.close()

    async def close_all(self) -> None:
        for session_id in list(self._dialogues):
            await self.close(session_id)
