from __future__ import annotations

import logging

from concierge.application.ports.speech import AudioPlayer, SpeechOutput
from concierge.domain.entities.voice import VoicePreference
from concierge.infrastructure.backend.backend_client import TravelBackendClient, require_str

TTS_PATH = "/api/tts/synthesize"


class HttpSpeechOutput(SpeechOutput):
    """Premium synthesis through the backend; the returned clip is played by `player`."""

    def __init__(self, client: TravelBackendClient, player: AudioPlayer) -> None:
        self._client = client
        self._player = player
        self._logger = logging.getLogger(__name__)

    async def speak(self, text: str, voice: VoicePreference) -> None:
        data = await self._client.post_json(TTS_PATH, {"text": text, "voice": voice.name})
        audio_url = require_str(data, "audioUrl", TTS_PATH)
        self._logger.info("Playing synthesized audio", extra={"source": "network"})
        await self._player.play(audio_url)

    def stop(self) -> None:
        self._player.stop()
