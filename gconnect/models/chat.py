from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from gconnect.models.enums import ChatLanguage


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=2000)
    language: ChatLanguage | None = None


class SuggestedScheme(BaseModel):
    name: str
    description: str = ""
    eligibility: str = ""


class ChatReply(BaseModel):
    """Assistant answer returned to the client."""

    message: str
    schemes: list[SuggestedScheme] = Field(default_factory=list)
    language: ChatLanguage = ChatLanguage.EN


class ChatMessage(BaseModel):
    """One stored exchange in a user's chat history."""

    message_id: int
    user_id: int | None = None
    message: str
    response: str
    language: ChatLanguage = ChatLanguage.EN
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
