"""
Processor for verified Stripe webhook events.

Handles:
- payment_intent.succeeded -> transaction Cleared
- payment_intent.payment_failed -> transaction Failed

Everything else is logged and acknowledged so Stripe stops redelivering it.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.core.errors import WebhookProcessingError
from app.models.stripe_event import StripeEvent
from app.schemas.stripe import GatewayEvent
from app.services.transactions import reconcile_gateway_event

logger = logging.getLogger(__name__)


def _now():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def process_stripe_event(db: Session, event: GatewayEvent):
    """Dispatch one event to the ledger reconciliation it drives."""
    if event.type.startswith("payment_intent."):
        reconcile_gateway_event(db, event.type, event.object)
    else:
        logger.info(f"[WEBHOOK] Event type {event.type} not handled - skipping")


def record_and_process(db: Session, event: GatewayEvent) -> bool:
    """
    Store the event, process it once, and mark it processed.

    Returns False when the event id was already processed (a redelivery),
    True otherwise. Unmatched events are acknowledged by the reconciler. Any
    other processing error leaves the event stored as unprocessed and raises
    WebhookProcessingError, so Stripe redelivers it and the retry runs again.
    """
    stored = db.query(StripeEvent).filter(StripeEvent.stripe_event_id == event.id).first()
    if stored and stored.processed:
        logger.info(f"[WEBHOOK] Event {event.id} already processed")
        return False

    if not stored:
        stored = StripeEvent(
            stripe_event_id=event.id,
            type=event.type,
            payload=event.model_dump(),
            processed=False,
            received_at=_now(),
        )
        db.add(stored)
        db.commit()

    try:
        process_stripe_event(db, event)
    except Exception as e:
        logger.exception(f"[WEBHOOK] ERROR processing Stripe event {event.id} ({event.type}): {str(e)}")
        db.rollback()
        raise WebhookProcessingError(f"Could not process event {event.id}. Stripe will retry.") from e

    stored.processed = True
    stored.processed_at = _now()
    db.commit()
    logger.info(f"[WEBHOOK] Processed event {event.id} ({event.type})")
    return True
