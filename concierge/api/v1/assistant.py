from fastapi import APIRouter, Depends

from concierge.api.v1.schemas import ChatRequestSchema, ChatResponseSchema
from concierge.application.use_cases.assistant_reply import AssistantReplyUseCase
from concierge.core.config import settings
from concierge.wiring.dependencies import get_assistant_reply_use_case

router = APIRouter()


@router.post("/chat", response_model=ChatResponseSchema)
async def chat(
    req: ChatRequestSchema,
    uc: AssistantReplyUseCase = Depends(get_assistant_reply_use_case),
):
    # Service failures degrade to the keyword responder
    answer = await uc.execute(
        message=req.message,
        history=[h.model_dump() for h in req.history],
        personality=req.personality or settings.ASSISTANT_PERSONALITY,
    )
    return ChatResponseSchema(message=answer.text, source=answer.source)
