from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import PageParams, chat_rate_limit, get_current_user, get_db, page_params, require_teacher
from app.core.config import settings
from app.crud import chatbot as crud_chatbot
from app.db.models.user import User
from app.schemas.chatbot import (
    ChatbotAnalytics,
    ChatMessageIn,
    ChatMessageOut,
    ConversationOut,
    ConversationWithMessages,
    FeedbackIn,
    ReactionIn,
)
from app.schemas.common import Envelope, Pagination

router = APIRouter()


def _with_recent_messages(db: Session, conversation) -> ConversationWithMessages:
    recent = crud_chatbot.recent_messages(db, conversation, settings.CHATBOT_HISTORY_LIMIT)
    return ConversationWithMessages(
        **ConversationOut.model_validate(conversation).model_dump(),
        messages=[ChatMessageOut.model_validate(m) for m in recent],
    )


@router.get("/conversation", response_model=Envelope[ConversationWithMessages])
def read_conversation(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    conversation = crud_chatbot.get_or_create_conversation(db, current_user)
    return Envelope(data=_with_recent_messages(db, conversation))


@router.post(
    "/message",
    response_model=Envelope[ConversationWithMessages],
    dependencies=[Depends(chat_rate_limit)],
)
def send_message(
    message_in: ChatMessageIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    conversation = crud_chatbot.send_message(
        db, current_user, message_in.content, conversation_id=message_in.conversation_id
    )
    return Envelope(data=_with_recent_messages(db, conversation))


@router.get("/conversation/{conversation_id}/messages", response_model=Envelope[List[ChatMessageOut]])
def read_messages(
    conversation_id: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    messages = crud_chatbot.get_messages(db, current_user, conversation_id, limit=limit, offset=offset)
    return Envelope(data=[ChatMessageOut.model_validate(m) for m in messages])


@router.post("/conversation/{conversation_id}/close", response_model=Envelope[ConversationOut])
def close_conversation(
    conversation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    conversation = crud_chatbot.close_conversation(db, current_user, conversation_id)
    return Envelope(data=ConversationOut.model_validate(conversation))


@router.post("/message/{message_id}/reaction", response_model=Envelope[ChatMessageOut])
def react_to_message(
    message_id: int,
    reaction_in: ReactionIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    message = crud_chatbot.add_reaction(db, current_user, message_id, reaction_in.kind)
    return Envelope(data=ChatMessageOut.model_validate(message))


@router.post("/feedback", response_model=Envelope[ConversationOut])
def submit_feedback(
    feedback_in: FeedbackIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    conversation = crud_chatbot.submit_feedback(
        db,
        current_user,
        feedback_in.rating,
        comment=feedback_in.comment,
        conversation_id=feedback_in.conversation_id,
    )
    return Envelope(data=ConversationOut.model_validate(conversation))


@router.get("/history", response_model=Envelope[List[ConversationOut]])
def read_history(
    paging: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    conversations, total = crud_chatbot.history(db, current_user, page=paging.page, limit=paging.limit)
    return Envelope(
        data=[ConversationOut.model_validate(c) for c in conversations],
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


@router.get("/analytics", response_model=Envelope[ChatbotAnalytics])
def read_analytics(db: Session = Depends(get_db), current_user: User = Depends(require_teacher)):
    return Envelope(data=ChatbotAnalytics(**crud_chatbot.analytics(db)))
