"""AI assistant endpoints for GConnect v1.

The assistant is optional: when no GCP project is configured the
lifespan leaves ``app.state.chat_assistant`` as ``None`` and every
message gets the standard apology.  Each exchange is saved to the
user's history either way.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel

from config.settings import settings
from gconnect.middleware.auth import get_storage, require_user
from gconnect.models.chat import ChatMessage, ChatReply, ChatRequest
from gconnect.models.user_profile import User
from gconnect.services.llm import ChatAssistant, fallback_reply
from gconnect.services.storage import InMemoryStorage

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


class ChatHistoryResponse(BaseModel):
    messages: list[ChatMessage]
    total: int


@router.post("", response_model=ChatReply)
async def chat(
    body: ChatRequest,
    request: Request,
    user: User = Depends(require_user),
    store: InMemoryStorage = Depends(get_storage),
) -> ChatReply:
    """Answer a question about government schemes."""
    assistant: ChatAssistant | None = getattr(request.app.state, "chat_assistant", None)

    if assistant is None:
        logger.warning("api.chat.assistant_unavailable")
        reply = fallback_reply(body.message)
    else:
        reply = await assistant.process_chat(body.message, user.to_profile())

    # An explicit language in the request wins over the model's guess.
    language = body.language or reply.language
    store.save_chat_message(user.user_id, body.message, reply.message, language)

    return reply.model_copy(update={"language": language})


@router.get("/history", response_model=ChatHistoryResponse)
async def chat_history(
    limit: int = Query(default=settings.chat_history_limit, ge=1, le=200),
    user: User = Depends(require_user),
    store: InMemoryStorage = Depends(get_storage),
) -> ChatHistoryResponse:
    messages = store.get_user_chat_history(user.user_id, limit)
    return ChatHistoryResponse(messages=messages, total=len(messages))
