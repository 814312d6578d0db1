from __future__ import annotations

from typing import Any

from concierge.application.ports.classifier import ClassifierPort, CodeImagePort
from concierge.domain.entities.classification import Classification
from concierge.infrastructure.backend.backend_client import TravelBackendClient, require_str

ANALYZE_PATH = "/api/analyze-preferences"
QR_PATH = "/api/qr-code"


class HttpClassifier(ClassifierPort):
    def __init__(self, client: TravelBackendClient) -> None:
        self._client = client

    async def classify(self, name: str, email: str, preferences: dict[str, Any]) -> Classification:
        data = await self._client.post_json(
            ANALYZE_PATH,
            {"name": name, "email": email, "preferences": preferences},
        )
        summary = data.get("summary")
        return Classification(
            code=require_str(data, "code", ANALYZE_PATH),
            category=require_str(data, "category", ANALYZE_PATH),
            summary=summary.strip() if isinstance(summary, str) else "",
        )


class HttpCodeImage(CodeImagePort):
    def __init__(self, client: TravelBackendClient) -> None:
        self._client = client

    async def render(self, code: str) -> str:
        data = await self._client.post_json(QR_PATH, {"code": code})
        return require_str(data, "imageUrl", QR_PATH)
