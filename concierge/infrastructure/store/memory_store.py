from __future__ import annotations

from dataclasses import replace

from concierge.application.ports.session_store import SessionStorePort
from concierge.domain.entities.session_state import SessionState


class MemorySessionStore(SessionStorePort):
    def __init__(self) -> None:
        self._states: dict[str, SessionState] = {}

    def load(self, key: str) -> SessionState | None:
        return self._states.get(key)

    def save(self, key: str, state: SessionState) -> None:
        self._states[key] = replace(state, answers=dict(state.answers))

    def clear(self, key: str) -> None:
        self._states.pop(key, None)
