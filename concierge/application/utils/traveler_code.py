"""
Rule-based traveler categorization and deterministic code issuance.

Used when the classification backend is unreachable. The code has the form
JET-<first three letters of the category>-<four digits>; the digits come from
a SHA-256 digest of the normalized name, email and answers, so the same input
always yields the same code.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from concierge.domain.entities.classification import Classification

CODE_PREFIX = "JET"
DEFAULT_CATEGORY = "Explorer"

TRAVELER_CATEGORIES: dict[str, str] = {
    "VIP": "Luxury traveler with a taste for premium experiences and exclusive destinations.",
    "Explorer": "Curious traveler seeking authentic cultural experiences and hidden gems.",
    "Adventurer": "Thrill-seeking explorer who craves active, outdoorsy experiences.",
    "Culturist": "Culture-focused traveler with a passion for history, arts, and local traditions.",
    "Relaxer": "Leisure-oriented traveler who prioritizes comfort and relaxation.",
    "Globetrotter": "Experienced world traveler with diverse interests and preferences.",
    "Families": "Family-oriented traveler who values kid-friendly activities and accommodations.",
    "Digital Nomad": "Remote worker combining travel with professional responsibilities.",
    "Budget Master": "Value-focused traveler who excels at maximizing experiences on minimal spending.",
    "Gourmand": "Food-centric traveler exploring the world through its culinary treasures.",
}


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def score_preferences(answers: dict[str, Any]) -> dict[str, int]:
    interests = set(_as_list(answers.get("interests")))
    traveler_type = set(_as_list(answers.get("traveler_type")))
    budget = set(_as_list(answers.get("budget")))
    accommodation = set(_as_list(answers.get("accommodation")))

    scores = {
        "luxury": 0,
        "budget": 0,
        "adventure": 0,
        "cultural": 0,
        "relaxation": 0,
        "food": 0,
        "family": 0,
        "business": 0,
    }

    if "luxury" in traveler_type:
        scores["luxury"] += 1
    if budget & {"luxury", "ultra_luxury"}:
        scores["luxury"] += 2
    if accommodation & {"luxury_hotel", "resort", "all_inclusive"}:
        scores["luxury"] += 1

    if "budget" in traveler_type:
        scores["budget"] += 1
    if "economy" in budget:
        scores["budget"] += 2
    if accommodation & {"hostel", "budget_hotel"}:
        scores["budget"] += 1

    scores["adventure"] += len(interests & {"adventure", "outdoors", "wildlife"})
    if "adventure" in traveler_type:
        scores["adventure"] += 1

    scores["cultural"] += len(interests & {"history", "art"})
    if "cultural" in traveler_type:
        scores["cultural"] += 1

    if "beach" in interests:
        scores["relaxation"] += 1
    if "beach" in traveler_type:
        scores["relaxation"] += 1
    if accommodation & {"resort", "all_inclusive"}:
        scores["relaxation"] += 1

    if "food" in interests:
        scores["food"] += 1
    if "family" in traveler_type:
        scores["family"] += 2
    if "business" in traveler_type:
        scores["business"] += 2

    return scores


def categorize(answers: dict[str, Any]) -> str:
    if not answers:
        return DEFAULT_CATEGORY

    scores = score_preferences(answers)
    interests = _as_list(answers.get("interests"))
    destinations = _as_list(answers.get("upcoming_destinations"))

    if scores["luxury"] >= 3:
        return "VIP"
    if scores["family"] >= 2:
        return "Families"
    if scores["business"] >= 2:
        return "Digital Nomad"
    if scores["budget"] >= 3:
        return "Budget Master"
    if scores["adventure"] >= 2:
        return "Adventurer"
    if scores["cultural"] >= 2:
        return "Culturist"
    if scores["relaxation"] >= 2:
        return "Relaxer"
    if scores["food"] and len(interests) <= 2:
        return "Gourmand"
    if len(destinations) >= 3:
        return "Globetrotter"
    return DEFAULT_CATEGORY


def generate_code(name: str, email: str, answers: dict[str, Any], category: str) -> str:
    normalized = {
        "name": (name or "").strip().lower(),
        "email": (email or "").strip().lower(),
        "answers": {k: sorted(_as_list(v)) for k, v in (answers or {}).items()},
    }
    digest = hashlib.sha256(json.dumps(normalized, sort_keys=True).encode("utf-8")).hexdigest()
    number = 1000 + int(digest, 16) % 9000

    letters = "".join(ch for ch in category if ch.isalpha())
    level = (letters[:3] or CODE_PREFIX).upper()
    return f"{CODE_PREFIX}-{level}-{number}"


def local_classification(name: str, email: str, answers: dict[str, Any]) -> Classification:
    category = categorize(answers)
    return Classification(
        code=generate_code(name, email, answers, category),
        category=category,
        summary=TRAVELER_CATEGORIES.get(category, TRAVELER_CATEGORIES[DEFAULT_CATEGORY]),
        source="fallback",
    )
