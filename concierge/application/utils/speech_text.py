from __future__ import annotations

import re

from concierge.domain.entities.voice import Voice, VoicePreference

_CODE_BLOCK_RE = re.compile(r"```.*?```", re.DOTALL)
_IMAGE_RE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_LINK_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_BOLD_RE = re.compile(r"(?<!\w)(\*\*|__)(?!\s)(.+?)(?<!\s)\1(?!\w)")
_ITALIC_RE = re.compile(r"(?<!\w)(\*|_)(?!\s)(.+?)(?<!\s)\1(?!\w)")
_INLINE_CODE_RE = re.compile(r"`([^`]*)`")
_HEADING_RE = re.compile(r"^\s*#{1,6}\s+", re.MULTILINE)
_BULLET_RE = re.compile(r"^\s*(?:[-*+]|\d+\.)\s+", re.MULTILINE)
_NEWLINES_RE = re.compile(r"\s*\n+\s*")
_EMOJI_RE = re.compile("[\U0001F300-\U0001FAFF\U00002600-\U000027BF\U0001F1E6-\U0001F1FF\u200d\ufe0f]+")
_SPACES_RE = re.compile(r"[ \t]{2,}")

PREMIUM_VOICE_MARKERS = ("google", "premium", "natural", "neural")


def clean_text_for_speech(text: str) -> str:
    """
    Strip markdown formatting and emoji, and turn line breaks into sentence
    breaks so the synthesizer reads prose.

    "**Paris** is *lovely*.\\n\\n## Tips\\n- Go in [spring](http://x)"
    becomes "Paris is lovely. Tips. Go in spring".
    """
    out = _CODE_BLOCK_RE.sub("", text or "")
    out = _IMAGE_RE.sub("", out)
    out = _LINK_RE.sub(r"\1", out)
    out = _BOLD_RE.sub(r"\2", out)
    out = _ITALIC_RE.sub(r"\2", out)
    out = _INLINE_CODE_RE.sub(r"\1", out)
    out = _HEADING_RE.sub("", out)
    out = _BULLET_RE.sub("", out)
    out = _EMOJI_RE.sub("", out)

    joined = ""
    for sentence in _NEWLINES_RE.split(out.strip()):
        sentence = sentence.strip()
        if not sentence:
            continue
        if joined and joined[-1] not in ".!?:;":
            joined += "."
        joined = f"{joined} {sentence}" if joined else sentence
    return _SPACES_RE.sub(" ", joined).strip()


def select_voice(voices: list[Voice], preference: VoicePreference) -> Voice | None:
    if not voices:
        return None

    lang_prefix = (preference.lang or "").split("-")[0].lower()
    in_lang = [v for v in voices if v.lang.lower().startswith(lang_prefix)] or list(voices)

    if preference.gender:
        wanted = preference.gender.lower()
        name_match = re.compile(rf"\b{re.escape(wanted)}\b", re.IGNORECASE)
        for voice in in_lang:
            if (voice.gender or "").lower() == wanted or name_match.search(voice.name):
                return voice

    for voice in in_lang:
        if any(marker in voice.name.lower() for marker in PREMIUM_VOICE_MARKERS):
            return voice

    return in_lang[0]
