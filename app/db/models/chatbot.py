from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.core.enums import ConversationStatus, MessageSender, ReactionKind, UserRole
from app.core.timeutils import utcnow
from app.db.base import Base, str_enum


class ChatbotConversation(Base):
    __tablename__ = "chatbot_conversations"

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(String(32), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        str_enum(ConversationStatus, "conversation_status"),
        default=ConversationStatus.ACTIVE,
        nullable=False,
    )
    # last known role of the user, the only context kept between messages
    user_role = Column(str_enum(UserRole, "chatbot_user_role"), nullable=True)

    total_messages = Column(Integer, default=0, nullable=False)
    user_messages = Column(Integer, default=0, nullable=False)
    bot_messages = Column(Integer, default=0, nullable=False)
    satisfaction_rating = Column(Integer, nullable=True)  # 1..5
    feedback_count = Column(Integer, default=0, nullable=False)
    feedback_comment = Column(Text, nullable=True)

    last_activity = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    messages = relationship(
        "ChatbotMessage",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="ChatbotMessage.id",
    )


class ChatbotMessage(Base):
    __tablename__ = "chatbot_messages"

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(
        Integer, ForeignKey("chatbot_conversations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sender = Column(str_enum(MessageSender, "message_sender"), nullable=False)
    content = Column(Text, nullable=False)
    intent = Column(String(50), nullable=True)
    reaction = Column(str_enum(ReactionKind, "reaction_kind"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    conversation = relationship("ChatbotConversation", back_populates="messages")
