from __future__ import annotations

import logging
from typing import Any

import httpx

from concierge.application.exceptions import InvalidResponseShape, NetworkFailure, ServiceTimeout


class TravelBackendClient:
    """Thin JSON-over-HTTP client for the travel backend."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)
        self._logger = logging.getLogger(__name__)

    async def post_json(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = await self._client.post(path, json=payload)
        except httpx.TimeoutException as e:
            raise ServiceTimeout(f"{path}: request timed out") from e
        except httpx.HTTPError as e:
            raise NetworkFailure(f"{path}: {e}") from e

        if resp.status_code >= 400:
            self._logger.error(
                "Backend call failed",
                extra={"path": path, "status": resp.status_code, "reason": resp.text[:200]},
            )
            raise NetworkFailure(f"{path}: HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            snippet = resp.text[:200].replace("\n", " ")
            raise InvalidResponseShape(f"{path}: invalid JSON. Snippet: {snippet!r}") from e

        if not isinstance(data, dict):
            raise InvalidResponseShape(f"{path}: expected a JSON object.")
        return data

    async def aclose(self) -> None:
        await self._client.aclose()


def require_str(data: dict[str, Any], key: str, path: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidResponseShape(f"{path}: '{key}' must be a non-empty string.")
    return value.strip()
