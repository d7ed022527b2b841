from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID


class ChatRequest(BaseModel):
    session_id: str = Field(..., min_length=1, description="Client-chosen token identifying the conversation")
    message: str = Field(..., min_length=1, description="Visitor's message to the assistant")
    vehicle_id: Optional[UUID] = Field(None, description="Vehicle under discussion, when started from a listing")
    shop_id: Optional[UUID] = Field(None, description="Shop owning the vehicle under discussion")
    user_id: Optional[str] = Field(None, description="Authenticated caller, absent for anonymous visitors")


class ResetRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
