from pydantic import BaseModel
from datetime import datetime
from typing import Optional
import uuid

from app.models.subscription import SubscriptionStatus


class SubscriptionCreate(BaseModel):
    creator_id: uuid.UUID
    tier_id: str  # Stripe price id
    payment_method_id: str  # pm_... from Stripe.js


class SubscriptionTierUpdate(BaseModel):
    new_tier_id: str


class Subscription(BaseModel):
    id: str
    fan_id: uuid.UUID
    creator_id: uuid.UUID
    tier_id: str
    status: SubscriptionStatus
    start_date: datetime
    end_date: Optional[datetime] = None
    next_billing_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
