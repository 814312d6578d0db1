"""
Tests for the AI response and classification fallback chains.
"""

from __future__ import annotations

import asyncio
import json
import re
from types import SimpleNamespace

import httpx

from concierge.application.exceptions import NetworkFailure
from concierge.application.use_cases.assistant_chat import GREETING, AssistantChat
from concierge.application.use_cases.assistant_reply import AssistantReplyUseCase
from concierge.application.use_cases.classify_traveler import ClassifyTravelerUseCase
from concierge.application.use_cases.onboarding_dialogue import SubmissionResult
from concierge.application.utils.traveler_code import categorize, generate_code, local_classification
from concierge.domain.entities.classification import Classification
from concierge.domain.entities.message import Role
from concierge.infrastructure.backend.http_assistant import HttpAssistant
from concierge.infrastructure.backend.http_classifier import HttpClassifier, HttpCodeImage
from concierge.infrastructure.llm.keyword_responder import DEFAULT_ANSWER, KeywordResponder
from concierge.infrastructure.llm.openai_assistant import OpenAIAssistant
from concierge.infrastructure.llm.prompts import build_messages
from tests.fakes import ScriptedAssistant, StaticClassifier, backend

ANSWERS = {"interests": ["history", "art"], "traveler_type": ["cultural"], "upcoming_destinations": ["Rome"]}


def _reply(primary, message="Tell me about Paris", timeout=1.0):
    uc = AssistantReplyUseCase(primary=primary, fallback=KeywordResponder(), timeout_seconds=timeout)
    return asyncio.run(uc.execute(message, [{"role": "user", "content": "hi"}], "friendly"))


def test_keyword_responder_matches_topics():
    """Keyword groups answer their topic and anything else gets the default answer."""
    responder = KeywordResponder()
    assert responder.respond("What to see in PARIS?").startswith("Paris is a wonderful destination!")
    assert responder.respond("Is Kyoto nice in autumn?").startswith("Japan blends")
    assert responder.respond("How do I knit a scarf?") == DEFAULT_ANSWER


def test_keyword_responder_matches_whole_words():
    """Keywords only count as whole words or their plurals, never inside longer words."""
    responder = KeywordResponder()
    assert responder.respond("Tell me about the planet Mars") == DEFAULT_ANSWER
    assert responder.respond("Where can I see a butterfly?") == DEFAULT_ANSWER
    assert responder.respond("Any flights to Lima?").startswith("I can help you find flights!")
    assert responder.respond("Planning a trip").startswith("I'd be happy to help create an itinerary!")
    assert responder.respond("Cheap hotels near the beach").startswith("For budget travel")


def test_no_primary_answers_from_fallback():
    """Without any configured assistant the keyword responder answers directly."""
    answer = _reply(None)
    assert answer.source == "fallback"
    assert answer.text == KeywordResponder().respond("Tell me about Paris")


def test_primary_answer_is_used():
    """A healthy primary answers and receives the history and personality."""
    primary = ScriptedAssistant(text="  Bonjour!  ")
    answer = _reply(primary)
    assert answer.text == "Bonjour!"
    assert answer.source == "primary"
    assert primary.calls[0]["history"] == [{"role": "user", "content": "hi"}]
    assert primary.calls[0]["personality"] == "friendly"


def test_primary_failure_falls_back():
    """Transport errors, empty answers and timeouts all degrade to the fallback."""
    failing = _reply(ScriptedAssistant(error=NetworkFailure("/api/chat: HTTP 502")))
    empty = _reply(ScriptedAssistant(text="   "))
    slow = _reply(ScriptedAssistant(text="too late", delay=1.0), timeout=0.05)
    for answer in (failing, empty, slow):
        assert answer.source == "fallback"
        assert answer.text.startswith("Paris is a wonderful destination!")


def test_http_assistant_posts_chat_payload():
    """The HTTP assistant sends message, history and personality and reads `message`."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"message": "Try the Marais."})

    async def scenario():
        client = backend(handler)
        uc = AssistantReplyUseCase(primary=HttpAssistant(client), fallback=KeywordResponder())
        answer = await uc.execute("Paris tips?", [{"role": "assistant", "content": "Hello!"}], "luxury")
        await client.aclose()
        return answer

    answer = asyncio.run(scenario())
    assert answer.source == "primary"
    assert answer.text == "Try the Marais."
    assert seen["path"] == "/api/chat"
    assert seen["body"] == {
        "message": "Paris tips?",
        "history": [{"role": "assistant", "content": "Hello!"}],
        "personality": "luxury",
    }


def test_http_assistant_bad_shapes_fall_back():
    """Error statuses, non-JSON bodies and missing fields are absorbed by the fallback."""
    responses = [
        httpx.Response(503, text="unavailable"),
        httpx.Response(200, text="<html>oops</html>"),
        httpx.Response(200, json={"reply": "wrong key"}),
        httpx.Response(200, json=["not", "an", "object"]),
    ]

    async def scenario():
        results = []
        for response in responses:
            client = backend(lambda request, r=response: r)
            uc = AssistantReplyUseCase(primary=HttpAssistant(client), fallback=KeywordResponder())
            results.append(await uc.execute("hotel ideas?", [], "friendly"))
            await client.aclose()
        return results

    for answer in asyncio.run(scenario()):
        assert answer.source == "fallback"
        assert answer.text == KeywordResponder().respond("hotel ideas?")


def test_openai_assistant_errors_fall_back():
    """Provider exceptions from the OpenAI adapter surface as a fallback answer."""

    async def create(**kwargs):
        raise RuntimeError("connection reset")

    fake_client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    answer = _reply(OpenAIAssistant(client=fake_client))
    assert answer.source == "fallback"


def test_openai_assistant_returns_completion_text():
    """The OpenAI adapter sends the system prompt and returns the first choice."""
    captured = {}

    async def create(**kwargs):
        captured.update(kwargs)
        message = SimpleNamespace(content=" Visit Montmartre. ")
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    fake_client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    answer = _reply(OpenAIAssistant(client=fake_client))
    assert answer.source == "primary"
    assert answer.text == "Visit Montmartre."
    assert captured["messages"][0]["role"] == "system"
    assert captured["messages"][-1] == {"role": "user", "content": "Tell me about Paris"}


def test_build_messages_trims_history():
    """Only the last turns with real content are forwarded to the model."""
    history = [{"role": "user", "content": f"m{i}"} for i in range(30)]
    history.append({"role": "assistant", "content": "   "})
    messages = build_messages("next", history, "professional", max_history=5)
    assert len(messages) == 1 + 4 + 1
    assert messages[1]["content"] == "m26"
    assert "seasoned travel agent" in messages[0]["content"]


def test_local_code_is_deterministic():
    """Identical name, email and answers always give the same code."""
    first = generate_code("Ana", "ana@x.com", ANSWERS, "Culturist")
    second = generate_code("  ana ", "ANA@X.COM", {k: list(reversed(v)) for k, v in ANSWERS.items()}, "Culturist")
    other = generate_code("Bea", "bea@x.com", ANSWERS, "Culturist")
    assert first == second
    assert first != other
    assert re.match(r"^JET-CUL-\d{4}$", first)


def test_categorize_rules():
    """The rule-based categorizer picks the strongest signal and defaults to Explorer."""
    assert categorize({}) == "Explorer"
    assert categorize(ANSWERS) == "Culturist"
    assert categorize({"budget": ["ultra_luxury"], "traveler_type": ["luxury"]}) == "VIP"
    assert categorize({"traveler_type": ["family"]}) == "Families"
    assert categorize({"interests": ["adventure", "outdoors"]}) == "Adventurer"
    assert categorize({"interests": ["food"]}) == "Gourmand"
    assert categorize({"upcoming_destinations": ["Rome", "Lima", "Oslo"]}) == "Globetrotter"


def test_classification_primary_with_qr():
    """The backend decides the code and the QR endpoint adds the image."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/analyze-preferences":
            body = json.loads(request.content)
            assert body["preferences"] == ANSWERS
            return httpx.Response(200, json={"code": "JET-CUL-7777", "category": "Culturist", "summary": "Loves museums."})
        return httpx.Response(200, json={"imageUrl": "https://cdn.test/qr/JET-CUL-7777.png"})

    async def scenario():
        client = backend(handler)
        uc = ClassifyTravelerUseCase(HttpClassifier(client), HttpCodeImage(client), timeout_seconds=1.0)
        result = await uc.execute("Ana", "ana@x.com", ANSWERS)
        await client.aclose()
        return result

    result = asyncio.run(scenario())
    assert result == Classification(
        code="JET-CUL-7777",
        category="Culturist",
        summary="Loves museums.",
        qr_image_url="https://cdn.test/qr/JET-CUL-7777.png",
        source="primary",
    )


def test_classification_qr_failure_is_not_fatal():
    """A broken QR endpoint leaves the issued code untouched."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/analyze-preferences":
            return httpx.Response(200, json={"code": "JET-CUL-7777", "category": "Culturist"})
        return httpx.Response(500)

    async def scenario():
        client = backend(handler)
        uc = ClassifyTravelerUseCase(HttpClassifier(client), HttpCodeImage(client), timeout_seconds=1.0)
        result = await uc.execute("Ana", "ana@x.com", ANSWERS)
        await client.aclose()
        return result

    result = asyncio.run(scenario())
    assert result.code == "JET-CUL-7777"
    assert result.summary == ""
    assert result.qr_image_url is None


def test_classification_failures_use_local_categorizer():
    """Exceptions, incomplete results and timeouts all issue the local code."""
    expected = local_classification("Ana", "ana@x.com", ANSWERS)

    class Slow(StaticClassifier):
        async def classify(self, name, email, preferences):
            await asyncio.sleep(1.0)
            return Classification(code="JET-LAT-0001", category="Late", summary="")

    classifiers = [
        StaticClassifier(error=NetworkFailure("/api/analyze-preferences: HTTP 500")),
        StaticClassifier(Classification(code="", category="", summary="")),
        Slow(),
        None,
    ]

    async def scenario():
        results = []
        for classifier in classifiers:
            uc = ClassifyTravelerUseCase(classifier, timeout_seconds=0.05)
            results.append(await uc.execute("Ana", "ana@x.com", ANSWERS))
        return results

    for result in asyncio.run(scenario()):
        assert result == expected
        assert result.source == "fallback"
        assert result.category == "Culturist"


def test_assistant_chat_conversation():
    """The chat keeps a transcript, tags the answer source and ignores empty input."""
    primary = ScriptedAssistant(text="Lisbon is lovely in May.")

    async def scenario():
        chat = AssistantChat(AssistantReplyUseCase(primary, KeywordResponder()), personality="adventurous")
        empty = await chat.send("   ")
        result = await chat.send("Where should I go in May?")
        await chat.close()
        return chat, empty, result

    chat, empty, result = asyncio.run(scenario())
    messages = chat.transcript.messages
    assert empty is SubmissionResult.IGNORED
    assert result is SubmissionResult.ACCEPTED
    assert messages[0].content == GREETING
    assert [m.role for m in messages] == [Role.ASSISTANT, Role.USER, Role.ASSISTANT]
    assert messages[-1].content == "Lisbon is lovely in May."
    assert messages[-1].meta == {"source": "primary"}
    assert not messages[-1].pending
    assert primary.calls[0]["history"] == [{"role": "assistant", "content": GREETING}]
    assert primary.calls[0]["personality"] == "adventurous"


def test_assistant_chat_rejects_second_message_while_pending():
    """Only one assistant answer is in flight at a time."""
    primary = ScriptedAssistant(text="Sure.", delay=0.05)

    async def scenario():
        chat = AssistantChat(AssistantReplyUseCase(primary, KeywordResponder()))
        first = asyncio.create_task(chat.send("first"))
        await asyncio.sleep(0)
        second = await chat.send("second")
        return chat, await first, second

    chat, first, second = asyncio.run(scenario())
    assert first is SubmissionResult.ACCEPTED
    assert second is SubmissionResult.BUSY
    assert len(chat.transcript) == 3


def test_cancelled_send_releases_the_chat():
    """Cancelling a send mid-flight clears the pending reply so the next message is accepted."""
    primary = ScriptedAssistant(text="Slow answer.", delay=1.0)

    async def scenario():
        chat = AssistantChat(AssistantReplyUseCase(primary, KeywordResponder()))
        sending = asyncio.create_task(chat.send("first"))
        await asyncio.sleep(0.01)
        sending.cancel()
        try:
            await sending
        except asyncio.CancelledError:
            pass
        busy = chat.is_busy
        primary.delay = 0.0
        primary.text = "Fast answer."
        result = await chat.send("second")
        return chat, busy, result

    chat, busy, result = asyncio.run(scenario())
    assert not busy
    assert result is SubmissionResult.ACCEPTED
    assert chat.transcript.messages[-1].content == "Fast answer."
    assert all(item["content"] for item in chat.transcript.history())
    assert primary.calls[1]["history"] == [
        {"role": "assistant", "content": GREETING},
        {"role": "user", "content": "first"},
    ]


if __name__ == "__main__":
    test_keyword_responder_matches_topics()
    test_keyword_responder_matches_whole_words()
    test_no_primary_answers_from_fallback()
    test_primary_answer_is_used()
    test_primary_failure_falls_back()
    test_http_assistant_posts_chat_payload()
    test_http_assistant_bad_shapes_fall_back()
    test_openai_assistant_errors_fall_back()
    test_openai_assistant_returns_completion_text()
    test_build_messages_trims_history()
    test_local_code_is_deterministic()
    test_categorize_rules()
    test_classification_primary_with_qr()
    test_classification_qr_failure_is_not_fatal()
    test_classification_failures_use_local_categorizer()
    test_assistant_chat_conversation()
    test_assistant_chat_rejects_second_message_while_pending()
    test_cancelled_send_releases_the_chat()
    print("All tests passed!")
