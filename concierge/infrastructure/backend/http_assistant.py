from __future__ import annotations

from concierge.application.ports.assistant import AssistantPort
from concierge.infrastructure.backend.backend_client import TravelBackendClient, require_str

CHAT_PATH = "/api/chat"


class HttpAssistant(AssistantPort):
    def __init__(self, client: TravelBackendClient) -> None:
        self._client = client

    async def reply(self, message: str, history: list[dict[str, str]], personality: str) -> str:
        data = await self._client.post_json(
            CHAT_PATH,
            {
                "message": message,
                "history": [{"role": h["role"], "content": h["content"]} for h in history],
                "personality": personality,
            },
        )
        return require_str(data, "message", CHAT_PATH)
