from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from concierge.application.use_cases.assistant_reply import AssistantReplyUseCase
from concierge.application.use_cases.onboarding_dialogue import SubmissionResult
from concierge.application.use_cases.voice import SpeechToText, TextToSpeech
from concierge.domain.entities.message import Role
from concierge.domain.entities.transcript import Transcript

GREETING = "Hello! I'm your AI travel assistant. How can I help you plan your next adventure?"


class AssistantChat:
    """Free-form travel assistant conversation with optional voice in and out."""

    def __init__(
        self,
        reply: AssistantReplyUseCase,
        personality: str = "friendly",
        speech_output: TextToSpeech | None = None,
        speech_input: SpeechToText | None = None,
        speak_replies: bool = False,
        auto_submit_delay: float = 0.5,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._reply = reply
        self._personality = personality
        self._tts = speech_output
        self._stt = speech_input
        self._speak_replies = speak_replies
        self._auto_submit_delay = auto_submit_delay
        self._transcript = Transcript(clock=clock)
        self._transcript.append(Role.ASSISTANT, GREETING)
        self._speech_task: asyncio.Task | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def transcript(self) -> Transcript:
        return self._transcript

    @property
    def speech_output(self) -> TextToSpeech | None:
        return self._tts

    @property
    def speech_input(self) -> SpeechToText | None:
        return self._stt

    @property
    def is_busy(self) -> bool:
        return self._transcript.has_pending()

    async def send(self, text: str) -> SubmissionResult:
        text = (text or "").strip()
        if not text:
            return SubmissionResult.IGNORED
        if self.is_busy:
            return SubmissionResult.BUSY

        self.stop_speaking()
        history = self._transcript.history()
        self._transcript.append(Role.USER, text)
        pending = self._transcript.append(Role.ASSISTANT, "", pending=True)

        answer = None
        try:
            answer = await self._reply.execute(text, history, self._personality)
        finally:
            if answer is None:
                self._transcript.update(pending.id, pending=False, meta={"source": "cancelled"})
        self._transcript.update(pending.id, content=answer.text, pending=False, meta={"source": answer.source})
        self._logger.info("Assistant replied", extra={"source": answer.source})

        if self._speak_replies and self._tts is not None:
            self._speech_task = asyncio.create_task(self._tts.speak(answer.text))
        return SubmissionResult.ACCEPTED

    async def send_voice(self) -> SubmissionResult:
        """Listen once and auto-submit the transcript after the grace period."""
        if self._stt is None:
            return SubmissionResult.IGNORED
        if self.is_busy:
            return SubmissionResult.BUSY

        self.stop_speaking()
        heard = await self._stt.listen()
        if not heard:
            return SubmissionResult.IGNORED
        await asyncio.sleep(self._auto_submit_delay)
        return await self.send(heard)

    def stop_speaking(self) -> None:
        task = self._speech_task
        if task is not None and not task.done():
            task.cancel()
        if self._tts is not None and self._tts.is_speaking:
            self._tts.stop()

    async def close(self) -> None:
        if self._stt is not None:
            self._stt.stop()
        if self._tts is not None:
            await self._tts.close()
        task = self._speech_task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})
