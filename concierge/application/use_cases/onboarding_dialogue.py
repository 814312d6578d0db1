from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import replace
from enum import Enum
from typing import Any, Awaitable, Callable, Coroutine

from concierge.application.ports.notifier import NotifierPort
from concierge.application.ports.session_store import SessionStorePort
from concierge.application.use_cases.classify_traveler import ClassifyTravelerUseCase
from concierge.application.use_cases.voice import TextToSpeech
from concierge.application.utils.validation import is_valid_email, parse_destinations
from concierge.domain.catalog import STEP_CATALOG
from concierge.domain.entities.classification import Classification
from concierge.domain.entities.message import Message, Role
from concierge.domain.entities.phase import Phase, PhaseKind
from concierge.domain.entities.prompt import (
    DestinationListPrompt,
    EmailPrompt,
    FreeTextPrompt,
    Prompt,
    SelectPrompt,
    TEXT_PROMPTS,
)
from concierge.domain.entities.session_state import SessionState
from concierge.domain.entities.step import StepDefinition, StepKind
from concierge.domain.entities.transcript import Transcript

GREETING = (
    "Hi there! Welcome to JET AI. I'm your travel AI Assistant. "
    "Let's personalize your experience. What should I call you?"
)

CompletionCallback = Callable[[SessionState], "Awaitable[None] | None"]


class SubmissionResult(str, Enum):
    ACCEPTED = "accepted"
    IGNORED = "ignored"  # validation no-op: nothing appended, nothing persisted
    BUSY = "busy"  # an assistant turn or a backend call is in flight


def prompt_for_step(step: StepDefinition) -> Prompt:
    if step.kind is StepKind.DESTINATION_LIST:
        return DestinationListPrompt()
    if step.kind is StepKind.SINGLE_SELECT:
        return SelectPrompt(options=step.options, multiple=False)
    if step.kind is StepKind.MULTI_SELECT:
        return SelectPrompt(options=step.options, multiple=True)
    return FreeTextPrompt()


class OnboardingDialogue:
    """
    Drives the onboarding conversation: name, email, every catalog step, then
    code issuance.

    Transitions only move forward. Each accepted submission appends the user
    message immediately, persists the session snapshot, and schedules the
    assistant's next message after the thinking delay. Scheduled turns are
    tasks owned by the dialogue and are cancelled by `close()`.
    """

    def __init__(
        self,
        store: SessionStorePort,
        classify: ClassifyTravelerUseCase,
        catalog: tuple[StepDefinition, ...] = STEP_CATALOG,
        storage_key: str = "onboarding_progress",
        notifier: NotifierPort | None = None,
        speech: TextToSpeech | None = None,
        on_complete: CompletionCallback | None = None,
        thinking_delay: float = 1.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._classify = classify
        self._catalog = catalog
        self._storage_key = storage_key
        self._notifier = notifier
        self._speech = speech
        self._on_complete = on_complete
        self._thinking_delay = thinking_delay
        self._clock = clock

        self._transcript = Transcript(clock=clock)
        self._state = SessionState()
        self._tasks: set[asyncio.Task] = set()
        self._turn_scheduled = False
        self._completion_fired = False
        self._started = False
        self._closed = False
        self._logger = logging.getLogger(__name__)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def transcript(self) -> Transcript:
        return self._transcript

    @property
    def catalog(self) -> tuple[StepDefinition, ...]:
        return self._catalog

    @property
    def phase(self) -> Phase:
        return Phase.of(self._state, len(self._catalog))

    @property
    def is_busy(self) -> bool:
        return self._turn_scheduled or self._transcript.has_pending()

    @property
    def progress(self) -> float:
        total = len(self._catalog) + 2  # name and email
        done = int(bool(self._state.name)) + int(bool(self._state.email)) + self._state.cursor
        return min(1.0, done / total)

    async def start(self) -> None:
        """Resume from the stored snapshot, or open a fresh session with the greeting."""
        if self._started:
            return
        self._started = True

        snapshot = self._store.load(self._storage_key)
        if snapshot is None:
            now = self._clock()
            self._state = SessionState(created_at=now, updated_at=now)
            self._transcript.append(Role.ASSISTANT, GREETING, prompt=FreeTextPrompt())
            self._logger.info("Onboarding started", extra={"session_id": self._storage_key, "phase": "name"})
            return

        self._state = replace(snapshot, cursor=min(snapshot.cursor, len(self._catalog)))
        phase = self.phase
        self._logger.info("Onboarding resumed", extra={"session_id": self._storage_key, "phase": str(phase)})

        if phase.kind is PhaseKind.COMPLETE:
            self._append_code_message(self._classification_from_state())
            await self._fire_completion()
            return

        greeting = f"Welcome back, {self._state.name}!" if self._state.name else "Welcome back!"
        self._transcript.append(Role.ASSISTANT, f"{greeting} Let's pick up where you left off.")
        if phase.kind is PhaseKind.FINALIZING:
            self._schedule_turn()
        else:
            self._append_prompt(phase)

    async def submit_text(self, value: str) -> SubmissionResult:
        if self._closed:
            return SubmissionResult.IGNORED
        if self.is_busy:
            return SubmissionResult.BUSY

        active = self._transcript.active_prompt()
        if active is None or not isinstance(active.prompt, TEXT_PROMPTS):
            return SubmissionResult.IGNORED

        value = (value or "").strip()
        if not value:
            return SubmissionResult.IGNORED

        phase = self.phase
        prompt = active.prompt
        if isinstance(prompt, EmailPrompt):
            if phase.kind is not PhaseKind.EMAIL or not is_valid_email(value):
                return SubmissionResult.IGNORED
            new_state = replace(self._state, email=value)
        elif isinstance(prompt, DestinationListPrompt):
            destinations = parse_destinations(value)
            if phase.kind is not PhaseKind.STEP or not destinations:
                return SubmissionResult.IGNORED
            new_state = self._record_answer(phase, destinations)
        elif phase.kind is PhaseKind.NAME:
            new_state = replace(self._state, name=value)
        elif phase.kind is PhaseKind.STEP:
            new_state = self._record_answer(phase, value)
        else:
            return SubmissionResult.IGNORED

        self._accept(value, new_state)
        return SubmissionResult.ACCEPTED

    def toggle_option(self, message_id: int, option_id: str) -> bool:
        """Toggle an option on the active prompt. Historical messages are never touched."""
        if self._closed or self.is_busy:
            return False
        active = self._transcript.active_prompt()
        if active is None or active.id != message_id or not isinstance(active.prompt, SelectPrompt):
            return False
        if active.prompt.option(option_id) is None:
            return False

        selections = list(active.selections)
        if option_id in selections:
            selections.remove(option_id)
        elif active.prompt.multiple:
            selections.append(option_id)
        else:
            selections = [option_id]

        self._transcript.update(message_id, selections=tuple(selections))
        return True

    async def submit_selections(self, message_id: int) -> SubmissionResult:
        if self._closed:
            return SubmissionResult.IGNORED
        if self.is_busy:
            return SubmissionResult.BUSY

        active = self._transcript.active_prompt()
        if active is None or active.id != message_id or not isinstance(active.prompt, SelectPrompt):
            return SubmissionResult.IGNORED
        if not active.selections:
            return SubmissionResult.IGNORED

        phase = self.phase
        if phase.kind is not PhaseKind.STEP:
            return SubmissionResult.IGNORED

        chosen = [opt for opt in active.prompt.options if opt.id in active.selections]
        new_state = self._record_answer(phase, [opt.id for opt in chosen])
        self._accept(", ".join(opt.label for opt in chosen), new_state)
        return SubmissionResult.ACCEPTED

    async def settle(self) -> None:
        """Wait until every scheduled turn and side task has finished."""
        while self._tasks:
            await asyncio.wait(set(self._tasks))

    async def close(self) -> None:
        """Cancel scheduled turns and speech. The stored snapshot is kept for resume."""
        self._closed = True
        tasks = set(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.wait(tasks)
        if self._speech is not None:
            await self._speech.close()

    def _accept(self, user_text: str, new_state: SessionState) -> None:
        if self._speech is not None and self._speech.is_speaking:
            self._speech.stop()
        self._transcript.append(Role.USER, user_text)
        self._commit(new_state)
        self._schedule_turn()

    def _record_answer(self, phase: Phase, answer: list[str] | str) -> SessionState:
        step = self._catalog[phase.step_index]
        answers = dict(self._state.answers)
        answers[step.id] = answer
        return replace(self._state, answers=answers, cursor=self._state.cursor + 1)

    def _commit(self, new_state: SessionState) -> None:
        self._state = replace(new_state, updated_at=self._clock())
        try:
            self._store.save(self._storage_key, self._state)
        except Exception as e:
            # The next accepted mutation rewrites the whole snapshot
            self._logger.error(
                "Onboarding snapshot save failed",
                extra={
                    "session_id": self._storage_key,
                    "phase": str(self.phase),
                    "error": f"{type(e).__name__}: {e}",
                },
            )
            return
        self._logger.info(
            "Onboarding progress saved",
            extra={"session_id": self._storage_key, "phase": str(self.phase)},
        )

    def _append_prompt(self, phase: Phase) -> Message | None:
        if phase.kind is PhaseKind.NAME:
            return self._transcript.append(Role.ASSISTANT, GREETING, prompt=FreeTextPrompt())
        if phase.kind is PhaseKind.EMAIL:
            return self._transcript.append(
                Role.ASSISTANT,
                f"Nice to meet you, {self._state.name}! What's your email address so we can create your account?",
                prompt=EmailPrompt(),
            )
        if phase.kind is PhaseKind.STEP:
            step = self._catalog[phase.step_index]
            return self._transcript.append(Role.ASSISTANT, step.prompt_text, prompt=prompt_for_step(step))
        return None

    def _schedule_turn(self) -> None:
        self._turn_scheduled = True
        self._spawn(self._next_turn())

    async def _next_turn(self) -> None:
        try:
            await asyncio.sleep(self._thinking_delay)
            phase = self.phase
            if phase.kind is PhaseKind.FINALIZING:
                await self._finalize()
            else:
                self._append_prompt(phase)
        finally:
            self._turn_scheduled = False

    async def _finalize(self) -> None:
        state = self._state
        pending = self._transcript.append(
            Role.ASSISTANT,
            f"Thanks {state.name}! Your custom travel dashboard is being prepared "
            f"with your preferences for {len(state.answers)} categories.",
            pending=True,
        )
        self._logger.info("Finalizing onboarding", extra={"session_id": self._storage_key, "phase": "finalizing"})

        classification = await self._classify.execute(
            name=state.name or "",
            email=state.email or "",
            answers=dict(state.answers),
        )

        self._transcript.update(pending.id, pending=False)
        self._commit(
            replace(
                self._state,
                issued_code=classification.code,
                category=classification.category,
                summary=classification.summary,
                qr_image_url=classification.qr_image_url,
            )
        )
        self._append_code_message(classification)
        self._logger.info(
            "Traveler code issued",
            extra={
                "session_id": self._storage_key,
                "code": classification.code,
                "category": classification.category,
                "source": classification.source,
            },
        )

        if self._notifier is not None:
            self._spawn(self._send_welcome(classification))
        await self._fire_completion()

    def _append_code_message(self, classification: Classification) -> Message:
        summary = f"\n\n{classification.summary}" if classification.summary else ""
        return self._transcript.append(
            Role.ASSISTANT,
            f"You're all set! Your JET AI code is {classification.code}. "
            f"Traveler category: {classification.category}.{summary}",
            meta={
                "code": classification.code,
                "category": classification.category,
                "qr_image_url": classification.qr_image_url,
                "source": classification.source,
            },
        )

    def _classification_from_state(self) -> Classification:
        return Classification(
            code=self._state.issued_code or "",
            category=self._state.category or "",
            summary=self._state.summary or "",
            qr_image_url=self._state.qr_image_url,
            source="snapshot",
        )

    async def _send_welcome(self, classification: Classification) -> None:
        state = self._state
        try:
            await self._notifier.send_welcome(
                email=state.email or "",
                name=state.name or "",
                code=classification.code,
                category=classification.category,
                preferences=dict(state.answers),
            )
        except Exception as e:
            self._logger.warning(
                "Welcome notification failed",
                extra={"session_id": self._storage_key, "code": classification.code, "reason": str(e)},
            )

    async def _fire_completion(self) -> None:
        if self._completion_fired:
            return
        self._completion_fired = True
        self._logger.info("Onboarding complete", extra={"session_id": self._storage_key, "phase": "complete"})
        if self._on_complete is None:
            return
        try:
            result = self._on_complete(self._state)
            if inspect.isawaitable(result):
                await result
        except Exception:
            self._logger.exception("Completion callback failed", extra={"session_id": self._storage_key})

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._logger.error(
                "Dialogue task failed",
                extra={"session_id": self._storage_key, "error": f"{type(error).__name__}: {error}"},
                exc_info=error,
            )
