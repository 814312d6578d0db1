from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SessionState:
    name: str | None = None
    email: str | None = None
    answers: dict[str, list[str] | str] = field(default_factory=dict)
    cursor: int = 0  # next unanswered catalog step
    # Set once during finalization
    issued_code: str | None = None
    category: str | None = None
    summary: str | None = None
    qr_image_url: str | None = None
    created_at: float | None = None
    updated_at: float | None = None

    @property
    def is_finalized(self) -> bool:
        return bool(self.issued_code)
