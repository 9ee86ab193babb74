from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, Literal
import uuid

from app.models.transaction import TransactionStatus, TransactionType


class TipCreate(BaseModel):
    creator_id: uuid.UUID
    amount: int = Field(..., description="Tip amount in cents")
    message: Optional[str] = Field(None, max_length=500)


class ContentPurchaseCreate(BaseModel):
    creator_id: uuid.UUID
    content_id: str
    price: int = Field(..., description="Price in cents")
    type: Literal["PPV Message", "PPV Post"] = "PPV Post"


class PaymentInitiated(BaseModel):
    """Handed to the frontend to confirm the PaymentIntent with Stripe.js"""
    client_secret: Optional[str] = None
    transaction_id: uuid.UUID


class Transaction(BaseModel):
    id: uuid.UUID
    fan_id: uuid.UUID
    creator_id: uuid.UUID
    type: TransactionType
    amount: int
    platform_fee: int
    creator_payout: int
    currency: str
    status: TransactionStatus
    related_content_id: Optional[str] = None
    message: Optional[str] = None
    payment_gateway_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
