from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path
from typing import Any

from concierge.application.ports.session_store import SessionStorePort
from concierge.domain.entities.session_state import SessionState

_UNSAFE_KEY_RE = re.compile(r"[^A-Za-z0-9_.-]")


class JsonSessionStore(SessionStorePort):
    def __init__(self, data_dir: str = "./data/sessions") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # Lock for managing locks dict
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, key: str) -> threading.Lock:
        """Get or create a lock for a storage key."""
        with self._lock_lock:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def _get_file_path(self, key: str) -> Path:
        return self._data_dir / f"{_UNSAFE_KEY_RE.sub('_', key)}.json"

    def load(self, key: str) -> SessionState | None:
        file_path = self._get_file_path(key)
        with self._get_lock(key):
            if not file_path.exists():
                return None
            try:
                with open(file_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                # Corrupted snapshot: start over rather than block onboarding
                self._logger.warning("Discarding unreadable snapshot", extra={"reason": str(e)})
                return None

        state = data.get("state") if isinstance(data, dict) else None
        if not isinstance(state, dict):
            self._logger.warning("Discarding unreadable snapshot", extra={"reason": "snapshot is not an object"})
            return None
        return self._deserialize_state(state)

    def save(self, key: str, state: SessionState) -> None:
        """Save the snapshot atomically."""
        file_path = self._get_file_path(key)
        temp_path = file_path.with_suffix(".json.tmp")
        data = {"key": key, "state": self._serialize_state(state), "version": 1}

        with self._get_lock(key):
            try:
                with open(temp_path, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                temp_path.replace(file_path)
            except Exception:
                if temp_path.exists():
                    temp_path.unlink(missing_ok=True)
                raise

    def clear(self, key: str) -> None:
        with self._get_lock(key):
            self._get_file_path(key).unlink(missing_ok=True)

    def _serialize_state(self, state: SessionState) -> dict[str, Any]:
        return {
            "name": state.name,
            "email": state.email,
            "answers": {k: (list(v) if isinstance(v, (list, tuple)) else v) for k, v in state.answers.items()},
            "cursor": state.cursor,
            "issued_code": state.issued_code,
            "category": state.category,
            "summary": state.summary,
            "qr_image_url": state.qr_image_url,
            "created_at": state.created_at,
            "updated_at": state.updated_at,
        }

    def _deserialize_state(self, data: dict[str, Any]) -> SessionState:
        answers = data.get("answers") or {}
        if not isinstance(answers, dict):
            answers = {}

        try:
            cursor = max(0, int(data.get("cursor") or 0))
        except (TypeError, ValueError):
            cursor = 0

        return SessionState(
            name=data.get("name"),
            email=data.get("email"),
            answers=dict(answers),
            cursor=cursor,
            issued_code=data.get("issued_code"),
            category=data.get("category"),
            summary=data.get("summary"),
            qr_image_url=data.get("qr_image_url"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
