from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
import uuid


class DirectMessageCreate(BaseModel):
    receiver_id: uuid.UUID
    text: str = Field(..., min_length=1)
    price: Optional[int] = Field(None, ge=1)  # Set for PPV messages


class MassMessageCreate(BaseModel):
    text: str = Field(..., min_length=1)
    price: Optional[int] = Field(None, ge=1)


class Message(BaseModel):
    id: uuid.UUID
    conversation_id: uuid.UUID
    sender_id: uuid.UUID
    receiver_id: uuid.UUID
    text: str
    price: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class RecipientResult(BaseModel):
    recipient_id: str
    success: bool
    error: Optional[str] = None


class MassMessageResponse(BaseModel):
    sent: int
    failed: int
    results: List[RecipientResult]
