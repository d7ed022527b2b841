from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from showroom_chat.db.session import Base


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    chat_session_id = Column(Integer, ForeignKey("chat_sessions.id"), index=True, nullable=False)
    content = Column(Text, nullable=False)
    # True for the visitor, False for the assistant
    is_from_user = Column(Boolean, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    chat_session = relationship("ChatSession", back_populates="messages")
