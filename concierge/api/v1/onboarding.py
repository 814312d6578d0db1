from fastapi import APIRouter, Depends, HTTPException

from concierge.api.v1.schemas import (
    MessageSchema,
    OnboardingResponseSchema,
    OpenSessionRequestSchema,
    SessionStateSchema,
    TextSubmissionSchema,
    ToggleRequestSchema,
)
from concierge.application.use_cases.onboarding_dialogue import OnboardingDialogue, SubmissionResult
from concierge.application.use_cases.onboarding_sessions import OnboardingSessions
from concierge.wiring.dependencies import get_onboarding_sessions

router = APIRouter()


def _response(session_id: str, dialogue: OnboardingDialogue, result: str | None = None) -> OnboardingResponseSchema:
    return OnboardingResponseSchema(
        session_id=session_id,
        phase=str(dialogue.phase),
        progress=dialogue.progress,
        result=result,
        state=SessionStateSchema.from_state(dialogue.state),
        messages=[MessageSchema.from_message(m) for m in dialogue.transcript],
    )


def _dialogue_or_404(sessions: OnboardingSessions, session_id: str) -> OnboardingDialogue:
    dialogue = sessions.get(session_id)
    if dialogue is None:
        raise HTTPException(status_code=404, detail=f"Unknown onboarding session: {session_id}")
    return dialogue


async def _finish(session_id: str, dialogue: OnboardingDialogue, result: SubmissionResult) -> OnboardingResponseSchema:
    if result is SubmissionResult.BUSY:
        raise HTTPException(status_code=409, detail="The assistant is still responding.")
    # The next assistant turn is part of this response
    await dialogue.settle()
    return _response(session_id, dialogue, result.value)


@router.post("/sessions", response_model=OnboardingResponseSchema)
async def open_session(
    req: OpenSessionRequestSchema | None = None,
    sessions: OnboardingSessions = Depends(get_onboarding_sessions),
):
    session_id, dialogue = await sessions.open(req.session_id if req else None)
    await dialogue.settle()
    return _response(session_id, dialogue)


@router.get("/sessions/{session_id}", response_model=OnboardingResponseSchema)
async def get_session(
    session_id: str,
    sessions: OnboardingSessions = Depends(get_onboarding_sessions),
):
    return _response(session_id, _dialogue_or_404(sessions, session_id))


@router.post("/sessions/{session_id}/text", response_model=OnboardingResponseSchema)
async def submit_text(
    session_id: str,
    req: TextSubmissionSchema,
    sessions: OnboardingSessions = Depends(get_onboarding_sessions),
):
    dialogue = _dialogue_or_404(sessions, session_id)
    result = await dialogue.submit_text(req.value)
    return await _finish(session_id, dialogue, result)


@router.post("/sessions/{session_id}/messages/{message_id}/toggle", response_model=OnboardingResponseSchema)
async def toggle_option(
    session_id: str,
    message_id: int,
    req: ToggleRequestSchema,
    sessions: OnboardingSessions = Depends(get_onboarding_sessions),
):
    dialogue = _dialogue_or_404(sessions, session_id)
    if dialogue.is_busy:
        raise HTTPException(status_code=409, detail="The assistant is still responding.")
    changed = dialogue.toggle_option(message_id, req.option_id)
    return _response(session_id, dialogue, "accepted" if changed else "ignored")


@router.post("/sessions/{session_id}/messages/{message_id}/submit", response_model=OnboardingResponseSchema)
async def submit_selections(
    session_id: str,
    message_id: int,
    sessions: OnboardingSessions = Depends(get_onboarding_sessions),
):
    dialogue = _dialogue_or_404(sessions, session_id)
    result = await dialogue.submit_selections(message_id)
    return await _finish(session_id, dialogue, result)
