from abc import ABC, abstractmethod

from concierge.domain.entities.session_state import SessionState


class SessionStorePort(ABC):
    @abstractmethod
    def load(self, key: str) -> SessionState | None:
        """Return the snapshot stored under `key`, or None if there is none."""
        raise NotImplementedError

    @abstractmethod
    def save(self, key: str, state: SessionState) -> None:
        """Replace the snapshot under `key` with `state` in a single write."""
        raise NotImplementedError

    @abstractmethod
    def clear(self, key: str) -> None:
        raise NotImplementedError
