from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from concierge.application.exceptions import InvalidResponseShape
from concierge.application.ports.assistant import AssistantPort
from concierge.infrastructure.llm.keyword_responder import KeywordResponder


@dataclass(frozen=True)
class AssistantAnswer:
    text: str
    source: str  # "primary" | "fallback"


class AssistantReplyUseCase:
    """
    Primary AI call with a deterministic local fallback.

    Never raises for service failures: timeouts, transport errors and empty
    or malformed answers all degrade to the keyword responder.
    """

    def __init__(
        self,
        primary: AssistantPort | None,
        fallback: KeywordResponder,
        timeout_seconds: float = 20.0,
    ) -> None:
        self._primary = primary
        self._fallback = fallback
        self._timeout = timeout_seconds
        self._logger = logging.getLogger(__name__)

    async def execute(self, message: str, history: list[dict[str, str]], personality: str) -> AssistantAnswer:
        history = [{"role": h["role"], "content": h["content"]} for h in history]

        if self._primary is not None:
            try:
                text = await asyncio.wait_for(
                    self._primary.reply(message=message, history=history, personality=personality),
                    timeout=self._timeout,
                )
                if not isinstance(text, str) or not text.strip():
                    raise InvalidResponseShape("Assistant returned empty text.")
                return AssistantAnswer(text=text.strip(), source="primary")
            except asyncio.TimeoutError:
                self._logger.warning(
                    "Assistant timed out, using fallback",
                    extra={"source": "fallback", "reason": f"timeout after {self._timeout}s"},
                )
            except Exception as e:
                self._logger.warning(
                    "Assistant failed, using fallback",
                    extra={"source": "fallback", "reason": f"{type(e).__name__}: {e}"},
                )

        return AssistantAnswer(text=self._fallback.respond(message), source="fallback")
