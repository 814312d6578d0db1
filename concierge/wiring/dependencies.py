from functools import lru_cache
import logging
from typing import Callable

from concierge.core.config import settings
from concierge.application.ports.assistant import AssistantPort
from concierge.application.ports.notifier import NotifierPort
from concierge.application.ports.session_store import SessionStorePort
from concierge.application.ports.speech import SpeechInput
from concierge.application.use_cases.assistant_chat import AssistantChat
from concierge.application.use_cases.assistant_reply import AssistantReplyUseCase
from concierge.application.use_cases.classify_traveler import ClassifyTravelerUseCase
from concierge.application.use_cases.onboarding_dialogue import CompletionCallback, OnboardingDialogue
from concierge.application.use_cases.onboarding_sessions import OnboardingSessions
from concierge.application.use_cases.voice import SpeechNotice, SpeechToText, TextToSpeech
from concierge.domain.entities.voice import VoicePreference
from concierge.infrastructure.backend.backend_client import TravelBackendClient
from concierge.infrastructure.backend.http_assistant import HttpAssistant
from concierge.infrastructure.backend.http_classifier import HttpClassifier, HttpCodeImage
from concierge.infrastructure.backend.http_notifier import HttpNotifier, LogNotifier
from concierge.infrastructure.llm.keyword_responder import KeywordResponder
from concierge.infrastructure.llm.openai_assistant import OpenAIAssistant
from concierge.infrastructure.speech.http_speech_output import HttpSpeechOutput
from concierge.infrastructure.speech.mock_speech import LogAudioPlayer, MockSpeechInput, MockSynthesisEngine
from concierge.infrastructure.store.json_store import JsonSessionStore
from concierge.infrastructure.store.memory_store import MemorySessionStore


@lru_cache
def get_backend_client() -> TravelBackendClient | None:
    if not settings.BACKEND_BASE_URL:
        logging.getLogger(__name__).info("BACKEND_BASE_URL not set, backend calls use local fallbacks")
        return None
    return TravelBackendClient(base_url=settings.BACKEND_BASE_URL, timeout=settings.BACKEND_TIMEOUT_SECONDS)


@lru_cache
def get_assistant() -> AssistantPort | None:
    client = get_backend_client()
    if client is not None:
        return HttpAssistant(client)
    if settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.strip():
        return OpenAIAssistant()
    return None


@lru_cache
def get_session_store() -> SessionStorePort:
    if settings.STORE_PROVIDER.lower() == "memory":
        return MemorySessionStore()
    return JsonSessionStore(settings.DATA_DIR)


def get_assistant_reply_use_case() -> AssistantReplyUseCase:
    return AssistantReplyUseCase(
        primary=get_assistant(),
        fallback=KeywordResponder(),
        timeout_seconds=settings.AI_TIMEOUT_SECONDS,
    )


def get_classify_use_case() -> ClassifyTravelerUseCase:
    client = get_backend_client()
    return ClassifyTravelerUseCase(
        classifier=HttpClassifier(client) if client is not None else None,
        code_images=HttpCodeImage(client) if client is not None else None,
        timeout_seconds=settings.AI_TIMEOUT_SECONDS,
    )


def get_notifier() -> NotifierPort:
    client = get_backend_client()
    if client is None:
        return LogNotifier()
    return HttpNotifier(client)


def get_voice_preference() -> VoicePreference:
    return VoicePreference(name=settings.TTS_VOICE, gender=settings.TTS_VOICE_GENDER, lang=settings.SPEECH_LOCALE)


def build_text_to_speech() -> TextToSpeech:
    client = get_backend_client()
    network = HttpSpeechOutput(client, LogAudioPlayer()) if client is not None else None
    return TextToSpeech(network=network, local=MockSynthesisEngine(), voice=get_voice_preference())


def build_speech_to_text(
    speech_input: SpeechInput | None = None,
    on_notice: Callable[[SpeechNotice], None] | None = None,
    before_listen: Callable[[], None] | None = None,
) -> SpeechToText:
    return SpeechToText(
        speech_input=speech_input or MockSpeechInput(),
        locale=settings.SPEECH_LOCALE,
        on_notice=on_notice,
        before_listen=before_listen,
    )


def build_onboarding_dialogue(
    storage_key: str | None = None,
    speech: TextToSpeech | None = None,
    on_complete: CompletionCallback | None = None,
) -> OnboardingDialogue:
    return OnboardingDialogue(
        store=get_session_store(),
        classify=get_classify_use_case(),
        storage_key=storage_key or settings.ONBOARDING_STORAGE_KEY,
        notifier=get_notifier(),
        speech=speech,
        on_complete=on_complete,
        thinking_delay=settings.THINKING_DELAY_SECONDS,
    )


def build_assistant_chat(
    voice: bool = False,
    speech_input: SpeechInput | None = None,
    on_notice: Callable[[SpeechNotice], None] | None = None,
) -> AssistantChat:
    """With `voice`, replies are spoken and listening first silences the assistant."""
    tts = build_text_to_speech() if voice else None
    stt = build_speech_to_text(speech_input, on_notice=on_notice, before_listen=tts.stop) if voice else None
    return AssistantChat(
        reply=get_assistant_reply_use_case(),
        personality=settings.ASSISTANT_PERSONALITY,
        speech_output=tts,
        speech_input=stt,
        speak_replies=voice,
        auto_submit_delay=settings.VOICE_AUTO_SUBMIT_DELAY_SECONDS,
    )


@lru_cache
def get_onboarding_sessions() -> OnboardingSessions:
    return OnboardingSessions(
        factory=lambda session_id: build_onboarding_dialogue(f"{settings.ONBOARDING_STORAGE_KEY}_{session_id}")
    )
