# app/schemas/chatbot.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.core.enums import ConversationStatus, MessageSender, ReactionKind


class ChatMessageIn(BaseModel):
    content: str = Field(max_length=5000)
    conversation_id: Optional[str] = None


class ReactionIn(BaseModel):
    kind: ReactionKind


class FeedbackIn(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=1000)
    conversation_id: Optional[str] = None


class ChatMessageOut(BaseModel):
    id: int
    sender: MessageSender
    content: str
    intent: Optional[str] = None
    reaction: Optional[ReactionKind] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ConversationOut(BaseModel):
    conversation_id: str
    status: ConversationStatus
    total_messages: int
    user_messages: int
    bot_messages: int
    satisfaction_rating: Optional[int] = None
    last_activity: datetime
    created_at: datetime

    class Config:
        from_attributes = True


class ConversationWithMessages(ConversationOut):
    messages: List[ChatMessageOut] = []


class IntentCount(BaseModel):
    intent: str
    count: int


class ChatbotAnalytics(BaseModel):
    total_conversations: int
    active_conversations: int
    total_messages: int
    average_satisfaction: Optional[float] = None
    top_intents: List[IntentCount] = []
