"""Travel onboarding questions, in the order they are asked."""

from __future__ import annotations

from concierge.domain.entities.step import StepDefinition, StepKind, StepOption


def _options(*pairs: tuple[str, str]) -> tuple[StepOption, ...]:
    return tuple(StepOption(id=option_id, label=label) for option_id, label in pairs)


STEP_CATALOG: tuple[StepDefinition, ...] = (
    StepDefinition(
        id="interests",
        title="What are your travel interests?",
        description="Select all that apply.",
        kind=StepKind.MULTI_SELECT,
        options=_options(
            ("food", "Food"),
            ("art", "Art & Museums"),
            ("history", "History"),
            ("outdoors", "Outdoor Activities"),
            ("shopping", "Shopping"),
            ("nightlife", "Nightlife"),
            ("beach", "Beach & Relaxation"),
            ("adventure", "Adventure Sports"),
            ("wildlife", "Wildlife & Nature"),
            ("photography", "Photography"),
        ),
    ),
    StepDefinition(
        id="traveler_type",
        title="What type of traveler are you?",
        description="This helps us tailor our recommendations to your style.",
        kind=StepKind.SINGLE_SELECT,
        options=_options(
            ("luxury", "Luxury traveler"),
            ("budget", "Budget backpacker"),
            ("family", "Family traveler"),
            ("business", "Business traveler"),
            ("adventure", "Adventure seeker"),
            ("cultural", "Cultural explorer"),
            ("beach", "Beach lounger"),
        ),
    ),
    StepDefinition(
        id="upcoming_destinations",
        title="Where are you planning to travel next?",
        description="Enter destinations separated by commas.",
        kind=StepKind.DESTINATION_LIST,
    ),
    StepDefinition(
        id="budget",
        title="What is your typical travel budget?",
        description="This helps us find options in your price range.",
        kind=StepKind.SINGLE_SELECT,
        options=_options(
            ("economy", "Economy (under $100/day)"),
            ("mid_range", "Mid-range ($100-300/day)"),
            ("luxury", "Luxury ($300-600/day)"),
            ("ultra_luxury", "Ultra-Luxury ($600+/day)"),
        ),
    ),
    StepDefinition(
        id="accommodation",
        title="What type of accommodation do you prefer?",
        kind=StepKind.SINGLE_SELECT,
        options=_options(
            ("luxury_hotel", "Luxury Hotels"),
            ("boutique_hotel", "Boutique Hotels"),
            ("mid_range_hotel", "Mid-range Hotels"),
            ("budget_hotel", "Budget Hotels"),
            ("vacation_rental", "Vacation Rentals"),
            ("hostel", "Hostels"),
            ("resort", "Resorts"),
            ("all_inclusive", "All-Inclusive"),
        ),
    ),
    StepDefinition(
        id="dietary_restrictions",
        title="Do you have any dietary restrictions?",
        description="This helps us suggest appropriate dining options.",
        kind=StepKind.MULTI_SELECT,
        options=_options(
            ("vegetarian", "Vegetarian"),
            ("vegan", "Vegan"),
            ("gluten_free", "Gluten-free"),
            ("nut_allergy", "Nut Allergy"),
            ("lactose_intolerant", "Lactose Intolerant"),
            ("kosher", "Kosher"),
            ("halal", "Halal"),
            ("none", "None"),
        ),
    ),
    StepDefinition(
        id="languages",
        title="What languages do you speak?",
        kind=StepKind.MULTI_SELECT,
        options=_options(
            ("en", "English"),
            ("es", "Spanish"),
            ("fr", "French"),
            ("de", "German"),
            ("it", "Italian"),
            ("pt", "Portuguese"),
            ("zh", "Chinese"),
            ("ja", "Japanese"),
            ("ko", "Korean"),
            ("ru", "Russian"),
            ("ar", "Arabic"),
        ),
    ),
)
