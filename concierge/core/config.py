from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL_CHAT: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE_CHAT: float = 0.7

    # Travel backend exposing /api/chat, /api/analyze-preferences, /api/qr-code,
    # /api/send-welcome-email and /api/tts/synthesize
    BACKEND_BASE_URL: str | None = None
    BACKEND_TIMEOUT_SECONDS: float = 10.0
    AI_TIMEOUT_SECONDS: float = 20.0

    ASSISTANT_PERSONALITY: str = "friendly"

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    STORE_PROVIDER: str = "json"  # "json" | "memory"
    DATA_DIR: str = "./data/sessions"
    ONBOARDING_STORAGE_KEY: str = "onboarding_progress"

    THINKING_DELAY_SECONDS: float = 1.0

    SPEECH_LOCALE: str = "en-US"
    TTS_VOICE: str | None = None
    TTS_VOICE_GENDER: str = "female"
    VOICE_AUTO_SUBMIT_DELAY_SECONDS: float = 0.5


settings = Settings()
