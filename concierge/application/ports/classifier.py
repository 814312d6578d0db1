from abc import ABC, abstractmethod
from typing import Any

from concierge.domain.entities.classification import Classification


class ClassifierPort(ABC):
    @abstractmethod
    async def classify(self, name: str, email: str, preferences: dict[str, Any]) -> Classification:
        """
        Categorize a traveler and issue a short code.

        Returns a Classification with non-empty `code` and `category`.
        Raises a ServiceError subclass on any failure.
        """
        raise NotImplementedError


class CodeImagePort(ABC):
    @abstractmethod
    async def render(self, code: str) -> str:
        """Return a URL of a QR image for `code`. Raises ServiceError on failure."""
        raise NotImplementedError
