from sqlalchemy import Boolean, Column, Integer, String

from showroom_chat.db.session import Base


class ChatQuestion(Base):
    __tablename__ = "chat_questions"

    id = Column(Integer, primary_key=True, index=True)
    question = Column(String(500), nullable=False)
    # 1 = conversation just started, 2 = a vehicle is being discussed
    step = Column(Integer, default=1, nullable=False)
    is_enabled = Column(Boolean, default=True, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
