import logging
import uuid

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core import chatbot as bot
from app.core.enums import ConversationStatus, MessageSender
from app.core.errors import InvalidState, NotFound, ValidationError
from app.core.timeutils import utcnow
from app.crud.base import paginate
from app.db.models.chatbot import ChatbotConversation, ChatbotMessage

logger = logging.getLogger(__name__)


def _new_conversation(db: Session, user) -> ChatbotConversation:
    conversation = ChatbotConversation(
        conversation_id=uuid.uuid4().hex,
        user_id=user.id,
        user_role=user.role,
    )
    db.add(conversation)
    db.commit()
    db.refresh(conversation)
    return conversation


def get_or_create_conversation(db: Session, user) -> ChatbotConversation:
    conversation = (
        db.query(ChatbotConversation)
        .filter(
            ChatbotConversation.user_id == user.id,
            ChatbotConversation.status == ConversationStatus.ACTIVE,
        )
        .order_by(ChatbotConversation.last_activity.desc(), ChatbotConversation.id.desc())
        .first()
    )
    if conversation is None:
        conversation = _new_conversation(db, user)
    return conversation


def get_conversation_or_404(db: Session, user, conversation_id: str) -> ChatbotConversation:
    conversation = (
        db.query(ChatbotConversation)
        .filter(
            ChatbotConversation.conversation_id == conversation_id,
            ChatbotConversation.user_id == user.id,
        )
        .first()
    )
    if conversation is None:
        raise NotFound("Conversation not found")
    return conversation


def _append(conversation: ChatbotConversation, sender: MessageSender, content: str, intent: str):
    conversation.messages.append(ChatbotMessage(sender=sender, content=content, intent=intent))
    conversation.total_messages += 1
    if sender == MessageSender.USER:
        conversation.user_messages += 1
    else:
        conversation.bot_messages += 1


def send_message(db: Session, user, content: str, conversation_id: str | None = None):
    """Append the user's message and the scripted reply; returns the conversation."""
    text = content.strip()
    if not text:
        raise ValidationError("Message content is required")

    if conversation_id:
        conversation = get_conversation_or_404(db, user, conversation_id)
        if conversation.status == ConversationStatus.CLOSED:
            raise InvalidState("Conversation is closed")
    else:
        conversation = get_or_create_conversation(db, user)

    _append(conversation, MessageSender.USER, text, "user_query")
    intent, response = bot.reply(text)
    _append(conversation, MessageSender.BOT, response, intent)

    conversation.user_role = user.role
    conversation.last_activity = utcnow()
    db.commit()
    db.refresh(conversation)
    logger.debug("Chatbot conversation %s matched intent %s", conversation.conversation_id, intent)
    return conversation


def recent_messages(db: Session, conversation: ChatbotConversation, limit: int) -> list[ChatbotMessage]:
    rows = (
        db.query(ChatbotMessage)
        .filter(ChatbotMessage.conversation_id == conversation.id)
        .order_by(ChatbotMessage.id.desc())
        .limit(limit)
        .all()
    )
    return list(reversed(rows))


def get_messages(db: Session, user, conversation_id: str, limit: int = 20, offset: int = 0):
    conversation = get_conversation_or_404(db, user, conversation_id)
    query = db.query(ChatbotMessage).filter(ChatbotMessage.conversation_id == conversation.id)
    # newest first
    return query.order_by(ChatbotMessage.id.desc()).offset(offset).limit(limit).all()


def add_reaction(db: Session, user, message_id: int, kind) -> ChatbotMessage:
    message = (
        db.query(ChatbotMessage)
        .join(ChatbotConversation, ChatbotConversation.id == ChatbotMessage.conversation_id)
        .filter(ChatbotMessage.id == message_id, ChatbotConversation.user_id == user.id)
        .first()
    )
    if message is None:
        raise NotFound("Message not found")
    if message.sender != MessageSender.BOT:
        raise ValidationError("Only assistant messages can be rated")
    message.reaction = kind
    db.commit()
    db.refresh(message)
    return message


def submit_feedback(
    db: Session, user, rating: int, comment: str | None = None, conversation_id: str | None = None
) -> ChatbotConversation:
    if conversation_id:
        conversation = get_conversation_or_404(db, user, conversation_id)
    else:
        conversation = (
            db.query(ChatbotConversation)
            .filter(ChatbotConversation.user_id == user.id)
            .order_by(ChatbotConversation.last_activity.desc(), ChatbotConversation.id.desc())
            .first()
        )
        if conversation is None:
            raise NotFound("No conversation found")
    conversation.satisfaction_rating = rating
    conversation.feedback_count += 1
    if comment:
        conversation.feedback_comment = comment
    db.commit()
    db.refresh(conversation)
    return conversation


def close_conversation(db: Session, user, conversation_id: str) -> ChatbotConversation:
    conversation = get_conversation_or_404(db, user, conversation_id)
    conversation.status = ConversationStatus.CLOSED
    db.commit()
    db.refresh(conversation)
    return conversation


def history(db: Session, user, page: int = 1, limit: int = 10):
    query = (
        db.query(ChatbotConversation)
        .filter(ChatbotConversation.user_id == user.id)
        .order_by(ChatbotConversation.last_activity.desc(), ChatbotConversation.id.desc())
    )
    return paginate(query, page, limit)


def analytics(db: Session) -> dict:
    total = db.query(func.count(ChatbotConversation.id)).scalar()
    active = (
        db.query(func.count(ChatbotConversation.id))
        .filter(ChatbotConversation.status == ConversationStatus.ACTIVE)
        .scalar()
    )
    messages = db.query(func.coalesce(func.sum(ChatbotConversation.total_messages), 0)).scalar()
    satisfaction = db.query(func.avg(ChatbotConversation.satisfaction_rating)).scalar()
    intents = (
        db.query(ChatbotMessage.intent, func.count(ChatbotMessage.id).label("hits"))
        .filter(ChatbotMessage.sender == MessageSender.BOT)
        .group_by(ChatbotMessage.intent)
        .order_by(func.count(ChatbotMessage.id).desc(), ChatbotMessage.intent)
        .limit(10)
        .all()
    )
    return {
        "total_conversations": total,
        "active_conversations": active,
        "total_messages": messages,
        "average_satisfaction": round(float(satisfaction), 2) if satisfaction is not None else None,
        "top_intents": [{"intent": intent, "count": hits} for intent, hits in intents],
    }
