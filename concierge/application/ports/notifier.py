from abc import ABC, abstractmethod
from typing import Any


class NotifierPort(ABC):
    @abstractmethod
    async def send_welcome(
        self,
        email: str,
        name: str,
        code: str,
        category: str,
        preferences: dict[str, Any],
    ) -> None:
        raise NotImplementedError
