"""
Gateway-side objects, trimmed to the fields the ledger mirrors.

Stripe returns rich objects; the gateway adapter copies what the lifecycle
managers need into these models so services never touch raw Stripe objects.
"""
from pydantic import BaseModel
from typing import Optional


class GatewayCustomer(BaseModel):
    id: str
    email: Optional[str] = None


class GatewayPaymentIntent(BaseModel):
    id: str
    client_secret: Optional[str] = None
    status: str
    amount: int  # Amount in cents


class GatewaySubscription(BaseModel):
    id: str
    status: str
    price_id: Optional[str] = None
    item_id: Optional[str] = None  # First subscription item; needed to swap prices
    current_period_start: int  # Unix timestamp
    current_period_end: int  # Unix timestamp
    cancel_at_period_end: bool = False
    cancel_at: Optional[int] = None  # Unix timestamp


class GatewayEvent(BaseModel):
    """Verified webhook event: {id, type, data.object}."""
    id: str
    type: str
    object: dict
