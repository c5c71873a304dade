#  Latam Site - AI Chat Route
#
#  Server-side proxy for the site's chat widget.
#
#  Depends on: container.py, services/ai_chat.py
#  Used by:    app.py

from dependency_injector.wiring import inject, Provide
from fastapi import APIRouter, Depends

from latam_site.config import AI_CHAT_MAX_PROMPT_CHARS
from latam_site.container import Container
from latam_site.exceptions import ValidationError
from latam_site.models.schemas import ChatOut, ChatRequest
from latam_site.services.ai_chat import AIChatService

router = APIRouter(tags=["ai-chat"])


@router.post("/ai-chat")
@inject
async def ai_chat(
    body: ChatRequest,
    chat: AIChatService = Depends(Provide[Container.ai_chat]),
) -> ChatOut:
    prompt = (body.prompt or "").strip()
    if not prompt:
        raise ValidationError("Prompt requerido")
    if len(prompt) > AI_CHAT_MAX_PROMPT_CHARS:
        raise ValidationError("El prompt excede la longitud permitida")
    return ChatOut(result=await chat.complete(prompt))
