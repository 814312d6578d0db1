"""
Tests for the voice adapter: speech cleanup, voice choice, recognition
failures and single active playback.
"""

from __future__ import annotations

import asyncio
import json

import httpx

from concierge.application.exceptions import RecognitionError, SpeechPermissionDenied
from concierge.application.use_cases.assistant_chat import AssistantChat
from concierge.application.use_cases.assistant_reply import AssistantReplyUseCase
from concierge.application.use_cases.onboarding_dialogue import SubmissionResult
from concierge.application.use_cases.voice import ListenState, SpeechFailure, SpeechToText, TextToSpeech
from concierge.application.utils.speech_text import clean_text_for_speech, select_voice
from concierge.domain.entities.voice import Voice, VoicePreference
from concierge.infrastructure.llm.keyword_responder import KeywordResponder
from concierge.infrastructure.speech.http_speech_output import HttpSpeechOutput
from concierge.infrastructure.speech.mock_speech import MockSpeechInput
from concierge.wiring.dependencies import build_assistant_chat
from tests.fakes import (
    FakeSpeechInput,
    FakeSpeechOutput,
    FakeSynthesisEngine,
    RecordingPlayer,
    ScriptedAssistant,
    answer_everything,
    backend,
    make_dialogue,
)


def test_clean_text_strips_markdown_and_emoji():
    """Markdown markers, links and emoji are removed and line breaks become sentence breaks."""
    text = "**Paris** is *lovely*.\n\n## Tips\n- Go in [spring](http://x)\n- Pack `light` 🎒✨"
    assert clean_text_for_speech(text) == "Paris is lovely. Tips. Go in spring. Pack light"
    assert clean_text_for_speech("![map](http://x/map.png) See you soon!") == "See you soon!"
    assert clean_text_for_speech("   ") == ""


def test_select_voice_preferences():
    """Gender wins over premium markers, which win over the first voice."""
    voices = [
        Voice(name="Alex", lang="en-US", gender="male"),
        Voice(name="Google US English", lang="en-US"),
        Voice(name="Samantha", lang="en-US", gender="female"),
        Voice(name="Amelie", lang="fr-FR", gender="female"),
    ]
    assert select_voice(voices, VoicePreference(gender="female")).name == "Samantha"
    assert select_voice(voices, VoicePreference(gender=None)).name == "Google US English"
    assert select_voice(voices[:1], VoicePreference(gender="female")).name == "Alex"
    assert select_voice(voices, VoicePreference(gender="female", lang="fr-FR")).name == "Amelie"
    assert select_voice([], VoicePreference()) is None


def test_recognition_unsupported_notifies_once_and_leaves_dialogue_alone():
    """On a platform without recognition the adapter stays Idle, notifies once and mutates nothing."""
    notices = []

    async def scenario():
        dialogue = make_dialogue()
        await dialogue.start()
        state, messages = dialogue.state, dialogue.transcript.messages
        stt = SpeechToText(FakeSpeechInput(supported=False), on_notice=notices.append)
        first = await stt.listen()
        second = await stt.listen()
        return dialogue, stt, state, messages, first, second

    dialogue, stt, state, messages, first, second = asyncio.run(scenario())
    assert first is None and second is None
    assert stt.state is ListenState.IDLE
    assert stt.enabled is False
    assert [n.failure for n in notices] == [SpeechFailure.UNSUPPORTED]
    assert dialogue.state == state
    assert dialogue.transcript.messages == messages


def test_permission_denied_disables_listening():
    """A refused microphone is reported once and never retried."""
    notices = []
    speech_input = FakeSpeechInput(error=SpeechPermissionDenied("not-allowed"))

    async def scenario():
        stt = SpeechToText(speech_input, on_notice=notices.append)
        await stt.listen()
        await stt.listen()
        return stt

    stt = asyncio.run(scenario())
    assert speech_input.started == 1
    assert [n.failure for n in notices] == [SpeechFailure.PERMISSION_DENIED]
    assert stt.state is ListenState.IDLE


def test_recognition_error_keeps_listening_available():
    """Transient recognition errors notify but leave the microphone enabled."""
    notices = []
    speech_input = FakeSpeechInput(error=RecognitionError("network"))

    async def scenario():
        stt = SpeechToText(speech_input, on_notice=notices.append)
        first = await stt.listen()
        speech_input.error = None
        speech_input.transcript = "  Lisbon, Porto  "
        second = await stt.listen()
        return stt, first, second

    stt, first, second = asyncio.run(scenario())
    assert first is None
    assert second == "Lisbon, Porto"
    assert stt.enabled
    assert [n.failure for n in notices] == [SpeechFailure.RECOGNITION_ERROR]


def test_second_listen_while_listening_is_rejected():
    """Only one recognition session runs at a time and stop() ends it."""
    speech_input = FakeSpeechInput(transcript="hello", delay=1.0)
    stopped_speech = []

    async def scenario():
        stt = SpeechToText(speech_input, before_listen=lambda: stopped_speech.append(True))
        first = asyncio.create_task(stt.listen())
        await asyncio.sleep(0.01)
        listening = stt.state
        second = await stt.listen()
        stt.stop()
        return listening, second, await first, stt

    listening, second, first, stt = asyncio.run(scenario())
    assert listening is ListenState.LISTENING
    assert second is None
    assert first is None
    assert stt.state is ListenState.IDLE
    assert speech_input.started == 1
    assert speech_input.aborted == 1
    assert stopped_speech == [True]


def test_newest_speech_request_wins():
    """Starting playback while speaking leaves exactly one active playback, the newest."""
    output = FakeSpeechOutput(duration=0.2)

    async def scenario():
        tts = TextToSpeech(network=output, local=FakeSynthesisEngine())
        first = asyncio.create_task(tts.speak("First answer"))
        await asyncio.sleep(0.01)
        second = asyncio.create_task(tts.speak("Second answer"))
        await asyncio.sleep(0.01)
        active = output.active
        await asyncio.gather(first, second)
        return tts, active

    tts, active = asyncio.run(scenario())
    assert active == 1
    assert output.max_active == 1
    assert output.started == ["First answer", "Second answer"]
    assert output.finished == ["Second answer"]
    assert not tts.is_speaking


def test_network_failure_falls_back_to_local_engine():
    """A failing networked voice hands the cleaned text to the local engine with the preferred voice."""
    engine = FakeSynthesisEngine()

    async def scenario():
        tts = TextToSpeech(network=FakeSpeechOutput(fail=True), local=engine, voice=VoicePreference(gender="female"))
        await tts.speak("**Welcome** aboard! ✈️")
        return tts

    tts = asyncio.run(scenario())
    assert tts.source == "local"
    assert engine.said == [("Welcome aboard!", Voice(name="Samantha", lang="en-US", gender="female"))]


def test_stop_cancels_both_providers():
    """stop() ends playback on the networked and the local provider."""
    output = FakeSpeechOutput(duration=1.0)
    engine = FakeSynthesisEngine()

    async def scenario():
        tts = TextToSpeech(network=output, local=engine)
        task = asyncio.create_task(tts.speak("A long story"))
        await asyncio.sleep(0.01)
        tts.stop()
        await task
        return tts

    tts = asyncio.run(scenario())
    assert not tts.is_speaking
    assert output.finished == []
    assert output.stops >= 1
    assert engine.cancels >= 1


def test_http_speech_output_plays_returned_clip():
    """The networked voice posts text and voice and plays the returned audio URL."""
    seen = {}
    player = RecordingPlayer()

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"audioUrl": "https://cdn.test/a.mp3"})

    async def scenario():
        client = backend(handler)
        tts = TextToSpeech(network=HttpSpeechOutput(client, player), local=None, voice=VoicePreference(name="nova"))
        await tts.speak("Hello *there*")
        await client.aclose()
        return tts

    tts = asyncio.run(scenario())
    assert tts.source == "network"
    assert seen == {"path": "/api/tts/synthesize", "body": {"text": "Hello there", "voice": "nova"}}
    assert player.played == ["https://cdn.test/a.mp3"]


def test_submitting_stops_speech():
    """An accepted onboarding answer interrupts the assistant's voice."""
    output = FakeSpeechOutput(duration=1.0)

    async def scenario():
        tts = TextToSpeech(network=output, local=None)
        dialogue = make_dialogue(speech=tts)
        await dialogue.start()
        speaking = asyncio.create_task(tts.speak("Hi there! What should I call you?"))
        await asyncio.sleep(0.01)
        await dialogue.submit_text("Ana")
        await speaking
        await dialogue.close()

    asyncio.run(scenario())
    assert output.finished == []


def test_voice_message_is_auto_submitted():
    """A recognized utterance is sent to the assistant after the grace period."""
    primary = ScriptedAssistant(text="Porto has great food.")

    async def scenario():
        chat = AssistantChat(
            AssistantReplyUseCase(primary, KeywordResponder()),
            speech_input=SpeechToText(FakeSpeechInput(transcript="Where should I eat?")),
            auto_submit_delay=0.01,
        )
        result = await chat.send_voice()
        return chat, result

    chat, result = asyncio.run(scenario())
    assert result is SubmissionResult.ACCEPTED
    assert chat.transcript.messages[1].content == "Where should I eat?"
    assert chat.transcript.messages[-1].content == "Porto has great food."


def test_dialogue_completes_with_speech_attached():
    """Speech output does not interfere with reaching completion."""

    async def scenario():
        tts = TextToSpeech(network=None, local=FakeSynthesisEngine())
        dialogue = make_dialogue(speech=tts)
        await answer_everything(dialogue)
        await dialogue.close()
        return dialogue

    dialogue = asyncio.run(scenario())
    assert dialogue.state.issued_code


def test_voice_input_silences_reply_before_listening():
    """Starting voice input while a reply is still playing stops the playback before recognition begins."""
    output = FakeSpeechOutput(duration=1.0)
    speech_input = FakeSpeechInput(transcript="And in Porto?", delay=0.2)

    async def scenario():
        tts = TextToSpeech(network=output, local=None)
        stt = SpeechToText(speech_input)
        chat = AssistantChat(
            AssistantReplyUseCase(ScriptedAssistant(text="Lisbon is sunny."), KeywordResponder()),
            speech_output=tts,
            speech_input=stt,
            speak_replies=True,
            auto_submit_delay=0.01,
        )
        await chat.send("Weather in Lisbon?")
        await asyncio.sleep(0.01)
        speaking_before = tts.is_speaking
        listening = asyncio.create_task(chat.send_voice())
        await asyncio.sleep(0.01)
        state, speaking_during = stt.state, tts.is_speaking
        result = await listening
        await chat.close()
        return speaking_before, state, speaking_during, result

    speaking_before, state, speaking_during, result = asyncio.run(scenario())
    assert speaking_before
    assert state is ListenState.LISTENING
    assert not speaking_during
    assert result is SubmissionResult.ACCEPTED
    assert output.started[0] == "Lisbon is sunny."
    assert output.finished == []


def test_voice_assistant_wiring_builds_both_adapters():
    """The voice-enabled assistant factory attaches speech output and a recognizer that silences it."""
    mic = MockSpeechInput(transcripts=[], latency=0.0)
    chat = build_assistant_chat(voice=True, speech_input=mic)
    assert isinstance(chat.speech_output, TextToSpeech)
    assert isinstance(chat.speech_input, SpeechToText)
    assert build_assistant_chat().speech_input is None

    async def scenario():
        mic.queue("Paris")
        speaking = asyncio.create_task(chat.speech_output.speak("Bonjour, where to next?"))
        await asyncio.sleep(0)
        heard = await chat.speech_input.listen()
        await asyncio.wait({speaking})
        stopped = not chat.speech_output.is_speaking
        await chat.close()
        return heard, stopped

    heard, stopped = asyncio.run(scenario())
    assert heard == "Paris"
    assert stopped


if __name__ == "__main__":
    test_clean_text_strips_markdown_and_emoji()
    test_select_voice_preferences()
    test_recognition_unsupported_notifies_once_and_leaves_dialogue_alone()
    test_permission_denied_disables_listening()
    test_recognition_error_keeps_listening_available()
    test_second_listen_while_listening_is_rejected()
    test_newest_speech_request_wins()
    test_network_failure_falls_back_to_local_engine()
    test_stop_cancels_both_providers()
    test_http_speech_output_plays_returned_clip()
    test_submitting_stops_speech()
    test_voice_message_is_auto_submitted()
    test_dialogue_completes_with_speech_attached()
    test_voice_input_silences_reply_before_listening()
    test_voice_assistant_wiring_builds_both_adapters()
    print("All tests passed!")
