from datetime import datetime
from pydantic import BaseModel
from typing import Optional


class SessionSummary(BaseModel):
    session_id: str
    user_id: Optional[str] = None
    last_activity: datetime
    is_active: bool
    message_count: int


class MessageItem(BaseModel):
    content: str
    is_from_user: bool
    timestamp: datetime
    user_id: Optional[str] = None


class KeywordCount(BaseModel):
    keyword: str
    count: int
