"""
Stripe webhook handler.
Verifies webhook signatures, records each event once and reconciles the ledger.
"""
import logging

from fastapi import APIRouter, Request, Header, Depends
from sqlalchemy.orm import Session
from typing import Optional

from app.db.session import get_db
from app.api.deps import get_gateway
from app.services.payment_gateway import StripeGateway
from app.services.stripe_processor import record_and_process

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_gateway),
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature")
):
    """
    Handle Stripe webhook events.

    - Signature failures are rejected (400) so forged deliveries never touch the ledger
    - Verified events are always acknowledged with 200, including event types
      we do not handle and events we cannot match to a transaction, so Stripe
      does not keep redelivering them
    - Redelivered event ids are acknowledged without reprocessing
    - A failure while applying a verified event returns 503 and the event
      stays unprocessed, so the Stripe retry applies it
    """
    # Raw body is required for signature verification
    body = await request.body()
    event = gateway.parse_event(body, stripe_signature)

    logger.info(f"[WEBHOOK] Received Stripe event: {event.type} (ID: {event.id})")
    record_and_process(db, event)
    return {"received": True}
