from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StepKind(str, Enum):
    TEXT = "text"
    DESTINATION_LIST = "destination_list"
    SINGLE_SELECT = "single_select"
    MULTI_SELECT = "multi_select"


@dataclass(frozen=True)
class StepOption:
    id: str
    label: str


@dataclass(frozen=True)
class StepDefinition:
    id: str
    title: str
    kind: StepKind
    description: str | None = None
    options: tuple[StepOption, ...] = ()

    @property
    def prompt_text(self) -> str:
        if self.description:
            return f"{self.title}\n\n{self.description}"
        return self.title

    def option(self, option_id: str) -> StepOption | None:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None
