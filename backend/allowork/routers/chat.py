from fastapi import APIRouter

from allowork.models import ChatRequest, ChatResponse
from allowork.services.ai_assistant import ASSISTANT_GREETING, ai_assistant

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("", response_model=ChatResponse)
def greeting():
    return ChatResponse(answer=ASSISTANT_GREETING)


@router.post("", response_model=ChatResponse)
def chat(request: ChatRequest):
    if not request.message.strip():
        return ChatResponse(answer=ASSISTANT_GREETING)
    return ChatResponse(answer=ai_assistant.chat_assistant_response(request.message.strip()))
