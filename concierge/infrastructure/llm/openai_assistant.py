from __future__ import annotations

from openai import APITimeoutError, AsyncOpenAI

from concierge.application.exceptions import InvalidResponseShape, NetworkFailure, ServiceTimeout
from concierge.application.ports.assistant import AssistantPort
from concierge.core.config import settings
from concierge.infrastructure.llm.prompts import build_messages


class OpenAIAssistant(AssistantPort):
    """
    OpenAI-backed adapter implementing AssistantPort.

    Raises:
        ServiceTimeout: the request timed out
        NetworkFailure: networking/provider failures
        InvalidResponseShape: empty completion
    """

    def __init__(self, client: AsyncOpenAI | None = None) -> None:
        self.client = client or AsyncOpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.AI_TIMEOUT_SECONDS)

    async def reply(self, message: str, history: list[dict[str, str]], personality: str) -> str:
        try:
            resp = await self.client.chat.completions.create(
                model=settings.OPENAI_MODEL_CHAT,
                messages=build_messages(message, history, personality),
                temperature=settings.OPENAI_TEMPERATURE_CHAT,
                max_tokens=600,
            )
        except APITimeoutError as e:
            raise ServiceTimeout(f"OpenAI API timeout: {e}") from e
        except Exception as e:
            raise NetworkFailure(f"OpenAI API error: {e}") from e

        content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not content:
            raise InvalidResponseShape("LLM returned empty response text.")

        return content
