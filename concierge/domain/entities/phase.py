from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from concierge.domain.entities.session_state import SessionState


class PhaseKind(str, Enum):
    NAME = "name"
    EMAIL = "email"
    STEP = "step"
    FINALIZING = "finalizing"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Phase:
    kind: PhaseKind
    step_index: int | None = None  # only for PhaseKind.STEP

    @staticmethod
    def of(state: SessionState, catalog_size: int) -> "Phase":
        if not state.name:
            return Phase(PhaseKind.NAME)
        if not state.email:
            return Phase(PhaseKind.EMAIL)
        if state.cursor < catalog_size:
            return Phase(PhaseKind.STEP, step_index=state.cursor)
        if not state.is_finalized:
            return Phase(PhaseKind.FINALIZING)
        return Phase(PhaseKind.COMPLETE)

    def __str__(self) -> str:
        if self.kind is PhaseKind.STEP:
            return f"step({self.step_index})"
        return self.kind.value
