from pydantic import BaseModel, Field
from typing import List, Optional


class ChatResponse(BaseModel):
    session_id: str = Field(..., description="Client-chosen token identifying the conversation")
    message: str = Field(..., description="Assistant's reply")
    mood: str = Field(..., description="Short mood tag for the assistant avatar")
    photos: Optional[List[str]] = Field(None, description="Photos of the vehicles mentioned in the reply")
    follow_up_prompts: List[str] = Field(default_factory=list)


class ResetResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
