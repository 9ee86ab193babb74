from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.db.session import get_db
from app.api.deps import get_caller, get_gateway
from app.core.security import CallerContext
from app.schemas.subscription import SubscriptionCreate, SubscriptionTierUpdate, Subscription as SubscriptionSchema
from app.services.payment_gateway import StripeGateway
from app.services import subscriptions

router = APIRouter()


@router.get("", response_model=List[SubscriptionSchema])
def get_my_subscriptions(
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller)
):
    """All of the caller's subscriptions, newest first."""
    return subscriptions.list_my_subscriptions(db, caller)


@router.post("", response_model=SubscriptionSchema, status_code=status.HTTP_201_CREATED)
def create_subscription(
    body: SubscriptionCreate,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_gateway),
    caller: CallerContext = Depends(get_caller)
):
    return subscriptions.create_subscription(
        db, gateway, caller, body.creator_id, body.tier_id, body.payment_method_id
    )


@router.put("/{subscription_id}", response_model=SubscriptionSchema)
def update_subscription(
    subscription_id: str,
    body: SubscriptionTierUpdate,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_gateway),
    caller: CallerContext = Depends(get_caller)
):
    """Move the subscription to another tier (owner only)."""
    return subscriptions.change_subscription_tier(db, gateway, caller, subscription_id, body.new_tier_id)


@router.delete("/{subscription_id}", response_model=SubscriptionSchema)
def cancel_subscription(
    subscription_id: str,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_gateway),
    caller: CallerContext = Depends(get_caller)
):
    """Cancel at period end (owner only). Access continues until end_date."""
    return subscriptions.cancel_subscription(db, gateway, caller, subscription_id)
