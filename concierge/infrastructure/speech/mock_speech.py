from __future__ import annotations

import asyncio
import logging

from concierge.application.exceptions import RecognitionError
from concierge.application.ports.speech import AudioPlayer, SpeechInput, SynthesisEngine
from concierge.domain.entities.voice import Voice


class MockSpeechInput(SpeechInput):
    """
    Stand-in recognizer for servers and local runs.

    With no scripted transcripts the platform reports no recognition support.
    """

    def __init__(self, transcripts: list[str] | None = None, latency: float = 0.2) -> None:
        self._transcripts = list(transcripts or [])
        self._supported = transcripts is not None
        self._latency = latency
        self._logger = logging.getLogger(__name__)

    def queue(self, transcript: str) -> None:
        """Script the result of the next recognition."""
        self._transcripts.append(transcript)

    def is_supported(self) -> bool:
        return self._supported

    async def recognize(self, locale: str) -> str:
        await asyncio.sleep(self._latency)
        if not self._transcripts:
            raise RecognitionError("no-speech")
        transcript = self._transcripts.pop(0)
        self._logger.info("Mock recognition result", extra={"source": "mock"})
        return transcript

    def abort(self) -> None:
        self._logger.info("Mock recognition aborted")


class MockSynthesisEngine(SynthesisEngine):
    """Local engine that logs utterances and takes time proportional to their length."""

    DEFAULT_VOICES = (
        Voice(name="Samantha", lang="en-US", gender="female"),
        Voice(name="Daniel", lang="en-GB", gender="male"),
        Voice(name="Monica", lang="es-ES", gender="female"),
    )

    def __init__(self, voices: tuple[Voice, ...] = DEFAULT_VOICES, seconds_per_char: float = 0.0) -> None:
        self._voices = list(voices)
        self._seconds_per_char = seconds_per_char
        self._logger = logging.getLogger(__name__)

    def is_supported(self) -> bool:
        return True

    def voices(self) -> list[Voice]:
        return list(self._voices)

    async def say(self, text: str, voice: Voice | None) -> None:
        self._logger.info(
            "Mock speech synthesis",
            extra={"source": "local", "reason": voice.name if voice else "default-voice"},
        )
        await asyncio.sleep(len(text) * self._seconds_per_char)

    def cancel(self) -> None:
        self._logger.info("Mock speech synthesis cancelled")


class LogAudioPlayer(AudioPlayer):
    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def play(self, url: str) -> None:
        self._logger.info("WOULD_PLAY_AUDIO", extra={"source": url})

    def stop(self) -> None:
        pass
