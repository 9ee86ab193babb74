"""
Payments API: tips and pay-per-view purchases.
The Stripe webhook that settles these lives in app.api.webhooks.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.db.session import get_db
from app.api.deps import get_caller, get_gateway
from app.core.security import CallerContext
from app.schemas.transaction import TipCreate, ContentPurchaseCreate, PaymentInitiated, Transaction as TransactionSchema
from app.services.payment_gateway import StripeGateway
from app.services import transactions

router = APIRouter()


@router.post("/tip", response_model=PaymentInitiated, status_code=status.HTTP_201_CREATED)
def send_tip(
    tip: TipCreate,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_gateway),
    caller: CallerContext = Depends(get_caller)
):
    """Start a tip; the frontend confirms the returned client secret with Stripe.js."""
    return transactions.initiate_tip(db, gateway, caller, tip.creator_id, tip.amount, tip.message)


@router.post("/purchase", response_model=PaymentInitiated, status_code=status.HTTP_201_CREATED)
def purchase_content(
    purchase: ContentPurchaseCreate,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_gateway),
    caller: CallerContext = Depends(get_caller)
):
    """Start a pay-per-view purchase of a post or message."""
    return transactions.initiate_content_purchase(
        db, gateway, caller, purchase.creator_id, purchase.content_id, purchase.price, purchase.type
    )


@router.get("/transactions", response_model=List[TransactionSchema])
def list_my_transactions(
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller)
):
    return transactions.list_transactions(db, caller)
