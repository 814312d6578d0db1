from abc import ABC, abstractmethod

from concierge.domain.entities.voice import Voice, VoicePreference


class SpeechInput(ABC):
    """Platform speech recognition: one non-continuous, single-result session at a time."""

    @abstractmethod
    def is_supported(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def recognize(self, locale: str) -> str:
        """
        Listen once and return the final transcript.

        Raises:
            SpeechPermissionDenied: microphone access refused
            RecognitionError: no speech, aborted, or engine failure
        Cancelling the awaiting task must end the session.
        """
        raise NotImplementedError

    @abstractmethod
    def abort(self) -> None:
        raise NotImplementedError


class SpeechOutput(ABC):
    """Networked high-quality synthesis."""

    @abstractmethod
    async def speak(self, text: str, voice: VoicePreference) -> None:
        """Resolve when playback ends. Raises ServiceError when synthesis or playback fails."""
        raise NotImplementedError

    @abstractmethod
    def stop(self) -> None:
        raise NotImplementedError


class SynthesisEngine(ABC):
    """Local/offline synthesis."""

    @abstractmethod
    def is_supported(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def voices(self) -> list[Voice]:
        raise NotImplementedError

    @abstractmethod
    async def say(self, text: str, voice: Voice | None) -> None:
        """Resolve when the utterance ends."""
        raise NotImplementedError

    @abstractmethod
    def cancel(self) -> None:
        raise NotImplementedError


class AudioPlayer(ABC):
    @abstractmethod
    async def play(self, url: str) -> None:
        """Resolve when the clip ends."""
        raise NotImplementedError

    @abstractmethod
    def stop(self) -> None:
        raise NotImplementedError
