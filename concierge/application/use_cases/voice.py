from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from concierge.application.exceptions import SpeechPermissionDenied, SpeechUnsupported
from concierge.application.ports.speech import SpeechInput, SpeechOutput, SynthesisEngine
from concierge.application.utils.speech_text import clean_text_for_speech, select_voice
from concierge.domain.entities.voice import VoicePreference


class ListenState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"


class SpeechFailure(str, Enum):
    UNSUPPORTED = "unsupported"
    PERMISSION_DENIED = "permission_denied"
    RECOGNITION_ERROR = "recognition_error"


@dataclass(frozen=True)
class SpeechNotice:
    failure: SpeechFailure
    detail: str


class SpeechToText:
    """
    Single-shot speech recognition with typed failures.

    Failures are reported through `on_notice` and never retried. Unsupported
    platforms and denied microphone access disable listening for the rest of
    the session, so the notice is shown once.
    """

    def __init__(
        self,
        speech_input: SpeechInput | None,
        locale: str = "en-US",
        on_notice: Callable[[SpeechNotice], None] | None = None,
        before_listen: Callable[[], None] | None = None,
    ) -> None:
        self._input = speech_input
        self._locale = locale
        self._on_notice = on_notice
        self._before_listen = before_listen
        self._state = ListenState.IDLE
        self._enabled = True
        self._task: asyncio.Task | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def state(self) -> ListenState:
        return self._state

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def listen(self) -> str | None:
        """Return the recognized transcript, or None on failure, stop, or a concurrent start."""
        if self._state is ListenState.LISTENING:
            self._logger.info("Listen ignored, recognition already active")
            return None
        if not self._enabled:
            return None
        if self._input is None or not self._input.is_supported():
            self._disable(SpeechFailure.UNSUPPORTED, "Speech recognition is not supported on this platform.")
            return None

        if self._before_listen is not None:
            self._before_listen()

        self._state = ListenState.LISTENING
        task = asyncio.create_task(self._input.recognize(self._locale))
        self._task = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            self._input.abort()
            raise
        finally:
            self._state = ListenState.IDLE
            self._task = None

        if task.cancelled():
            return None

        error = task.exception()
        if error is None:
            transcript = (task.result() or "").strip()
            return transcript or None

        if isinstance(error, SpeechPermissionDenied):
            self._disable(SpeechFailure.PERMISSION_DENIED, "Microphone access was denied.")
        elif isinstance(error, SpeechUnsupported):
            self._disable(SpeechFailure.UNSUPPORTED, "Speech recognition is not supported on this platform.")
        else:
            self._notify(SpeechFailure.RECOGNITION_ERROR, f"Recognition error: {error}")
        return None

    def stop(self) -> None:
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            if self._input is not None:
                self._input.abort()
        self._state = ListenState.IDLE

    def _disable(self, failure: SpeechFailure, detail: str) -> None:
        self._enabled = False
        self._notify(failure, detail)

    def _notify(self, failure: SpeechFailure, detail: str) -> None:
        self._logger.warning("Speech input unavailable", extra={"reason": failure.value})
        if self._on_notice is not None:
            self._on_notice(SpeechNotice(failure=failure, detail=detail))


class TextToSpeech:
    """
    Speaks assistant text, networked voice first and the local engine second.

    Exactly one playback is active: every `speak` stops the previous one on
    both providers before starting.
    """

    def __init__(
        self,
        network: SpeechOutput | None,
        local: SynthesisEngine | None,
        voice: VoicePreference | None = None,
    ) -> None:
        self._network = network
        self._local = local
        self._voice = voice or VoicePreference()
        self._task: asyncio.Task | None = None
        self._source: str | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def is_speaking(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def source(self) -> str | None:
        """Provider of the current or last playback: "network" or "local"."""
        return self._source

    async def speak(self, text: str, voice: VoicePreference | None = None) -> None:
        """Resolve when playback ends or is superseded."""
        cleaned = clean_text_for_speech(text)
        if not cleaned:
            return

        self.stop()
        task = asyncio.create_task(self._play(cleaned, voice or self._voice))
        self._task = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            if self._task is task and task.done():
                self._task = None

    def stop(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
        if self._network is not None:
            self._network.stop()
        if self._local is not None:
            self._local.cancel()

    async def close(self) -> None:
        task = self._task
        self.stop()
        if task is not None:
            await asyncio.wait({task})

    async def _play(self, text: str, voice: VoicePreference) -> None:
        if self._network is not None:
            try:
                self._source = "network"
                await self._network.speak(text, voice)
                return
            except Exception as e:
                self._logger.warning(
                    "Networked speech failed, using local engine",
                    extra={"source": "local", "reason": f"{type(e).__name__}: {e}"},
                )

        if self._local is None or not self._local.is_supported():
            self._logger.warning("No speech synthesis available", extra={"reason": "unsupported"})
            return

        self._source = "local"
        try:
            await self._local.say(text, select_voice(self._local.voices(), voice))
        except Exception as e:
            self._logger.error("Local speech synthesis failed", extra={"reason": f"{type(e).__name__}: {e}"})
