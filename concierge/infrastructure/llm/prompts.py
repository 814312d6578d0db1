PERSONALITY_RULES = {
    "friendly": "Warm, upbeat and encouraging. Use plain language.",
    "professional": "Concise and precise, like a seasoned travel agent.",
    "adventurous": "Energetic, suggest off-the-beaten-path ideas.",
    "luxury": "Refined and attentive, favor premium experiences.",
}


def build_system_prompt(personality: str) -> str:
    tone = PERSONALITY_RULES.get((personality or "").strip().lower(), PERSONALITY_RULES["friendly"])
    return (
        "You are JET AI, a travel planning assistant.\n"
        "Help with destinations, flights, hotels, itineraries, budgets and local tips.\n"
        "Rules:\n"
        "  - Answer in at most three short paragraphs.\n"
        "  - Ask one follow-up question when details are missing.\n"
        "  - Never invent prices or availability; suggest checking live results instead.\n"
        f"Tone: {tone}\n"
    )


def build_messages(message: str, history: list[dict[str, str]], personality: str, max_history: int = 20) -> list[dict[str, str]]:
    out = [{"role": "system", "content": build_system_prompt(personality)}]
    for item in history[-max_history:]:
        role = item.get("role")
        content = (item.get("content") or "").strip()
        if role in ("user", "assistant") and content:
            out.append({"role": role, "content": content})
    out.append({"role": "user", "content": message})
    return out
