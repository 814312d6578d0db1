from dataclasses import dataclass


@dataclass(frozen=True)
class Voice:
    name: str
    lang: str = "en-US"
    gender: str | None = None  # "female" | "male" | None when the platform does not say


@dataclass(frozen=True)
class VoicePreference:
    name: str | None = None  # provider voice id for the networked synthesizer
    gender: str | None = "female"
    lang: str = "en-US"
