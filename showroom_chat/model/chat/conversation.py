"""
Domain records exchanged between the chat services and the store.

They are detached from the ORM so that a store can be swapped (tests use
in-memory stubs) and so that nothing outlives its database session.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationSession(BaseModel):
    id: Optional[int] = None
    session_id: str
    user_id: Optional[str] = None
    thread_id: Optional[str] = None
    shop_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    is_active: bool = True
    last_activity: datetime = Field(default_factory=utcnow)

    def context(self) -> tuple:
        return (self.shop_id, self.vehicle_id)


class ConversationTurn(BaseModel):
    chat_session_id: int
    content: str
    is_from_user: bool
    timestamp: datetime = Field(default_factory=utcnow)


class CatalogSubject(BaseModel):
    id: str
    shop_id: str
    shop_name: Optional[str] = None
    label: str
    photo_urls: List[str] = Field(default_factory=list)


class ParsedReply(BaseModel):
    message: str
    mood: str
    photos: Optional[List[str]] = None
