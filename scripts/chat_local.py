#!/usr/bin/env python3
"""
Interactive local harness (no HTTP).

Usage:
  python3 scripts/chat_local.py                      # onboarding wizard
  python3 scripts/chat_local.py assistant            # free-form travel assistant
  python3 scripts/chat_local.py assistant --voice    # assistant with spoken replies and /say
  python3 scripts/chat_local.py --voice              # wizard with spoken prompts

What it does:
- Runs the onboarding dialogue against the configured session store, so
  quitting halfway and starting again resumes where you left off
- Select prompts accept option numbers ("1 3") or ids ("food history")
- In assistant mode, sends each line through the AI reply chain and prints
  which source answered (primary or fallback)
- With --voice, assistant messages go through text-to-speech (logged by the
  mock engine) and "/say <text>" feeds the mock recognizer, which silences
  any reply still playing before it listens
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from concierge.application.use_cases.onboarding_dialogue import OnboardingDialogue, SubmissionResult
from concierge.application.use_cases.voice import SpeechNotice, TextToSpeech
from concierge.core.config import settings
from concierge.domain.entities.message import Message, Role
from concierge.domain.entities.prompt import SelectPrompt
from concierge.infrastructure.speech.mock_speech import MockSpeechInput
from concierge.wiring.dependencies import (
    build_assistant_chat,
    build_onboarding_dialogue,
    build_text_to_speech,
    get_session_store,
)


def _print_notice(notice: SpeechNotice) -> None:
    print(f"\n(voice) {notice.failure.value}: {notice.detail}")


def _speak(tts: TextToSpeech | None, m: Message, tasks: set[asyncio.Task]) -> None:
    if tts is None or m.role is not Role.ASSISTANT or not m.content:
        return
    task = asyncio.create_task(tts.speak(m.content))
    tasks.add(task)
    task.add_done_callback(tasks.discard)


def _print_completion(state) -> None:
    print(f"\n*** Onboarding complete: {state.issued_code} ({state.category}) ***")


def _print_header(mode: str) -> None:
    print("\nJET AI Local Harness")
    print("-" * 60)
    print(f"mode: {mode}")
    print("Commands: /reset (forget onboarding progress), /quit, /help")
    print("-" * 60)


def _print_message(m: Message) -> None:
    who = "you" if m.role is Role.USER else "assistant"
    print(f"\n({who}) {m.content}")
    if isinstance(m.prompt, SelectPrompt) and m.expects_response:
        for i, opt in enumerate(m.prompt.options, start=1):
            print(f"  {i:>2}. {opt.label} [{opt.id}]")
        print("  (single choice)" if not m.prompt.multiple else "  (pick one or more)")
    if m.meta.get("qr_image_url"):
        print(f"  QR: {m.meta['qr_image_url']}")


def _resolve_options(prompt: SelectPrompt, text: str) -> list[str]:
    ids = []
    for token in text.replace(",", " ").split():
        if token.isdigit() and 1 <= int(token) <= len(prompt.options):
            ids.append(prompt.options[int(token) - 1].id)
        elif prompt.option(token) is not None:
            ids.append(token)
    return ids


async def _answer(dialogue: OnboardingDialogue, text: str) -> SubmissionResult:
    active = dialogue.transcript.active_prompt()
    if active is None:
        return SubmissionResult.IGNORED
    if not isinstance(active.prompt, SelectPrompt):
        return await dialogue.submit_text(text)

    for option_id in _resolve_options(active.prompt, text):
        if option_id not in dialogue.transcript.get(active.id).selections:
            dialogue.toggle_option(active.id, option_id)
    return await dialogue.submit_selections(active.id)


async def run_onboarding(voice: bool = False) -> None:
    _print_header("onboarding (voice)" if voice else "onboarding")
    tts = build_text_to_speech() if voice else None
    speaking: set[asyncio.Task] = set()
    dialogue = build_onboarding_dialogue(speech=tts, on_complete=_print_completion)
    await dialogue.start()
    shown = 0

    try:
        while True:
            await dialogue.settle()
            messages = dialogue.transcript.messages
            for m in messages[shown:]:
                _print_message(m)
            if len(messages) > shown:
                _speak(tts, messages[-1], speaking)
            shown = len(messages)

            if dialogue.transcript.active_prompt() is None:
                print("\nNothing left to answer. Use /reset to start over or /quit.")

            try:
                user_text = input("\n> ").strip()
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                return

            cmd = user_text.lower()
            if cmd in ("/quit", "/exit"):
                print("Bye!")
                return
            if cmd == "/help":
                print("Commands:")
                print("  /reset -> clear stored progress and restart the wizard")
                print("  /quit  -> exit (progress is kept)")
                continue
            if cmd == "/reset":
                await dialogue.close()
                get_session_store().clear(settings.ONBOARDING_STORAGE_KEY)
                tts = build_text_to_speech() if voice else None
                dialogue = build_onboarding_dialogue(speech=tts, on_complete=_print_completion)
                await dialogue.start()
                shown = 0
                continue

            result = await _answer(dialogue, user_text)
            if result is SubmissionResult.IGNORED:
                print("(not accepted, try again)")
            elif result is SubmissionResult.BUSY:
                print("(assistant is still responding)")
    finally:
        await dialogue.close()
        for task in list(speaking):
            task.cancel()


async def run_assistant(voice: bool = False) -> None:
    _print_header("assistant (voice)" if voice else "assistant")
    mic = MockSpeechInput(transcripts=[], latency=0.3)
    chat = build_assistant_chat(voice=voice, speech_input=mic, on_notice=_print_notice)
    _print_message(chat.transcript.messages[0])
    if voice:
        print('Say something with "/say <text>" (goes through the recognizer).')

    try:
        while True:
            try:
                user_text = input("\n> ").strip()
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                return

            if user_text.lower() in ("/quit", "/exit"):
                print("Bye!")
                return
            if not user_text:
                continue

            if voice and user_text.lower().startswith("/say"):
                mic.queue(user_text[len("/say"):].strip())
                result = await chat.send_voice()
            else:
                result = await chat.send(user_text)
            if result is not SubmissionResult.ACCEPTED:
                print(f"({result.value})")
                continue

            last = chat.transcript.messages[-1]
            print(f"\n(assistant, {last.meta.get('source')}) {last.content}")
            print("-" * 60)
    finally:
        await chat.close()


def main() -> None:
    args = sys.argv[1:]
    voice = "--voice" in args
    mode = next((a for a in args if not a.startswith("--")), "onboarding")
    if mode == "assistant":
        asyncio.run(run_assistant(voice))
    else:
        asyncio.run(run_onboarding(voice))


if __name__ == "__main__":
    main()
