from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from showroom_chat.db.session import Base


class ChatSession(Base):
    __tablename__ = "chat_sessions"

    id = Column(Integer, primary_key=True, index=True)
    # Client-chosen token; stable across the turns of one conversation
    session_id = Column(String(128), index=True, nullable=False)
    # Nullable for anonymous visitors
    user_id = Column(String(64), index=True, nullable=True)
    # Remote assistant thread bound to this session
    thread_id = Column(String(128), nullable=True)
    shop_id = Column(String(36), nullable=True)
    vehicle_id = Column(String(36), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_activity = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    messages = relationship("ChatMessage", back_populates="chat_session", order_by="ChatMessage.id")
