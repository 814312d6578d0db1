from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from concierge.domain.entities.step import StepOption


@dataclass(frozen=True)
class FreeTextPrompt:
    kind: ClassVar[str] = "free_text"


@dataclass(frozen=True)
class EmailPrompt:
    kind: ClassVar[str] = "email"


@dataclass(frozen=True)
class DestinationListPrompt:
    kind: ClassVar[str] = "destination_list"


@dataclass(frozen=True)
class SelectPrompt:
    options: tuple[StepOption, ...]
    multiple: bool = True

    @property
    def kind(self) -> str:
        return "multi_select" if self.multiple else "single_select"

    def option(self, option_id: str) -> StepOption | None:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None


Prompt = Union[FreeTextPrompt, EmailPrompt, DestinationListPrompt, SelectPrompt]

TEXT_PROMPTS = (FreeTextPrompt, EmailPrompt, DestinationListPrompt)
