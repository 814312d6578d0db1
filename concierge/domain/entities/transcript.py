from __future__ import annotations

import time
from dataclasses import replace
from typing import Any, Callable, Iterator

from concierge.domain.entities.message import Message, Role
from concierge.domain.entities.prompt import Prompt


class Transcript:
    """
    Ordered, append-only message log.

    Messages are frozen; the only in-place changes are swaps of the same id
    (selection toggles, clearing `pending`). At most one message, the latest
    assistant prompt, has `expects_response=True`.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._messages: list[Message] = []
        self._next_id = 1
        self._clock = clock

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def append(
        self,
        role: Role,
        content: str,
        prompt: Prompt | None = None,
        pending: bool = False,
        meta: dict[str, Any] | None = None,
    ) -> Message:
        self._close_active_prompt()
        message = Message(
            id=self._next_id,
            role=role,
            content=content,
            timestamp=self._clock(),
            expects_response=prompt is not None,
            prompt=prompt,
            pending=pending,
            meta=dict(meta or {}),
        )
        self._next_id += 1
        self._messages.append(message)
        return message

    def get(self, message_id: int) -> Message | None:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def update(self, message_id: int, **changes: Any) -> Message:
        for i, message in enumerate(self._messages):
            if message.id == message_id:
                updated = replace(message, **changes)
                self._messages[i] = updated
                return updated
        raise KeyError(message_id)

    def active_prompt(self) -> Message | None:
        if not self._messages:
            return None
        last = self._messages[-1]
        if last.role is Role.ASSISTANT and last.expects_response:
            return last
        return None

    def has_pending(self) -> bool:
        return any(m.pending for m in self._messages)

    def history(self) -> list[dict[str, str]]:
        return [m.as_history_item() for m in self._messages if not m.pending and m.content]

    def _close_active_prompt(self) -> None:
        for i, message in enumerate(self._messages):
            if message.expects_response:
                self._messages[i] = replace(message, expects_response=False)
