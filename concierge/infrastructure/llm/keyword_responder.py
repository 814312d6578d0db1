from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class CannedAnswer:
    keywords: tuple[str, ...]
    text: str


CANNED_ANSWERS: tuple[CannedAnswer, ...] = (
    CannedAnswer(
        keywords=("paris", "france"),
        text=(
            "Paris is a wonderful destination! Known as the City of Light, it offers iconic landmarks "
            "like the Eiffel Tower, the Louvre Museum and Notre-Dame Cathedral.\n\n"
            "The best time to visit is spring (April-June) or fall (September-October), when the weather "
            "is pleasant and there are fewer tourists. Would you like a day-by-day plan?"
        ),
    ),
    CannedAnswer(
        keywords=("tokyo", "japan", "kyoto"),
        text=(
            "Japan blends ancient tradition with modern energy. In Tokyo, explore Shibuya and Asakusa, "
            "then take the Shinkansen to Kyoto for temples and tea houses.\n\n"
            "Cherry blossom season (late March-early April) and autumn foliage (November) are the most "
            "beautiful times to go. A Japan Rail Pass can save you money on longer trips."
        ),
    ),
    CannedAnswer(
        keywords=("budget", "cheap", "affordable"),
        text=(
            "For budget travel, consider Southeast Asia (Thailand, Vietnam), Eastern Europe (Poland, "
            "Hungary) or South America (Colombia, Peru).\n\n"
            "These destinations offer great value with affordable accommodation, food and activities. "
            "Traveling in shoulder season stretches your budget even further."
        ),
    ),
    CannedAnswer(
        keywords=("flight", "booking", "fly", "flying"),
        text=(
            "I can help you find flights! Booking 1-3 months in advance usually yields the best prices.\n\n"
            "Be flexible with your dates and consider mid-week departures for better deals. "
            "Would you like me to check specific routes for you?"
        ),
    ),
    CannedAnswer(
        keywords=("hotel", "stay", "staying", "accommodation"),
        text=(
            "Where you stay shapes the whole trip. Central neighborhoods save commuting time, while "
            "boutique hotels and vacation rentals often give better value for longer stays.\n\n"
            "Tell me your destination, dates and budget and I will suggest a few options."
        ),
    ),
    CannedAnswer(
        keywords=("itinerary", "plan", "planning", "schedule"),
        text=(
            "I'd be happy to help create an itinerary!\n\n"
            "Please share your destination, travel dates, interests (history, food, nature...) and any "
            "must-see attractions, and I will craft a personalized day-by-day plan for your trip."
        ),
    ),
)

DEFAULT_ANSWER = (
    "Thank you for your message! I can help with destination recommendations, flight and hotel "
    "bookings, itinerary planning, budget tips and local insights.\n\n"
    "Could you share a few more details about what you're looking for?"
)


class KeywordResponder:
    """Offline assistant: first canned answer with a keyword among the message's words (plurals included)."""

    def __init__(self, answers: tuple[CannedAnswer, ...] = CANNED_ANSWERS, default: str = DEFAULT_ANSWER) -> None:
        self._default = default
        self._patterns = [
            (re.compile(r"\b(?:" + "|".join(re.escape(k) for k in a.keywords) + r")(?:s|es)?\b", re.IGNORECASE), a.text)
            for a in answers
        ]

    def respond(self, message: str) -> str:
        for pattern, text in self._patterns:
            if pattern.search(message or ""):
                return text
        return self._default
