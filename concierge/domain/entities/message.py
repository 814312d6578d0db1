from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from concierge.domain.entities.prompt import Prompt


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    id: int
    role: Role
    content: str
    timestamp: float
    expects_response: bool = False
    prompt: Prompt | None = None  # set only when expects_response
    selections: tuple[str, ...] = ()
    pending: bool = False
    meta: dict[str, Any] = field(default_factory=dict)

    def as_history_item(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}
