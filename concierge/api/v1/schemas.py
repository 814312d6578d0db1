from pydantic import BaseModel, Field
from typing import Any

from concierge.domain.entities.message import Message
from concierge.domain.entities.prompt import SelectPrompt
from concierge.domain.entities.session_state import SessionState


class OptionSchema(BaseModel):
    id: str
    label: str


class PromptSchema(BaseModel):
    kind: str
    options: list[OptionSchema] = Field(default_factory=list)


class MessageSchema(BaseModel):
    id: int
    role: str
    content: str
    timestamp: float
    expects_response: bool = False
    prompt: PromptSchema | None = None
    selections: list[str] = Field(default_factory=list)
    pending: bool = False
    meta: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_message(cls, m: Message) -> "MessageSchema":
        prompt = None
        if m.prompt is not None:
            options = m.prompt.options if isinstance(m.prompt, SelectPrompt) else ()
            prompt = PromptSchema(
                kind=m.prompt.kind,
                options=[OptionSchema(id=o.id, label=o.label) for o in options],
            )
        return cls(
            id=m.id,
            role=m.role.value,
            content=m.content,
            timestamp=m.timestamp,
            expects_response=m.expects_response,
            prompt=prompt,
            selections=list(m.selections),
            pending=m.pending,
            meta=dict(m.meta),
        )


class SessionStateSchema(BaseModel):
    name: str | None = None
    email: str | None = None
    answers: dict[str, list[str] | str] = Field(default_factory=dict)
    cursor: int = 0
    issued_code: str | None = None
    category: str | None = None
    summary: str | None = None
    qr_image_url: str | None = None

    @classmethod
    def from_state(cls, s: SessionState) -> "SessionStateSchema":
        return cls(
            name=s.name,
            email=s.email,
            answers=dict(s.answers),
            cursor=s.cursor,
            issued_code=s.issued_code,
            category=s.category,
            summary=s.summary,
            qr_image_url=s.qr_image_url,
        )


class OpenSessionRequestSchema(BaseModel):
    session_id: str | None = None


class TextSubmissionSchema(BaseModel):
    value: str


class ToggleRequestSchema(BaseModel):
    option_id: str


class OnboardingResponseSchema(BaseModel):
    session_id: str
    phase: str
    progress: float
    result: str | None = None
    state: SessionStateSchema
    messages: list[MessageSchema]


class HistoryItemSchema(BaseModel):
    role: str
    content: str


class ChatRequestSchema(BaseModel):
    message: str = Field(min_length=1)
    history: list[HistoryItemSchema] = Field(default_factory=list)
    personality: str | None = None


class ChatResponseSchema(BaseModel):
    message: str
    source: str
