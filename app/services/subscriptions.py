"""
Subscription lifecycle: create, change tier, cancel.

The ledger row mirrors one Stripe subscription and shares its id. Stripe is
always written first; the ledger follows. When the ledger write fails after
Stripe created a subscription, the Stripe subscription is cancelled on the
spot so no fan is billed for a subscription we have no record of. The same
happens when Stripe reports the first invoice unpaid (status incomplete).

State machine: (none) -> active -> canceled. Cancellation is at period end:
the fan keeps access until end_date.
"""
import logging
from datetime import datetime, timezone
from typing import List
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AuthorizationError, GatewayError, NotFoundError, ValidationError
from app.core.security import CallerContext
from app.models.subscription import Subscription, SubscriptionStatus
from app.models.user import Profile, UserRole
from app.services.payment_gateway import StripeGateway
from app.services.transactions import get_payer_customer_id

logger = logging.getLogger(__name__)

# Stripe statuses whose first invoice has been paid (or needs no payment yet)
BILLABLE_STATUSES = {"active", "trialing"}

NOT_FOUND_OR_NOT_OWNER = "Subscription not found or you are not authorized to modify it."


def _from_timestamp(ts):
    # Naive UTC, matching the utcnow column defaults
    return datetime.fromtimestamp(ts, tz=timezone.utc).replace(tzinfo=None) if ts else None


def _get_owned_subscription(db: Session, subscription_id: str, caller: CallerContext) -> Subscription:
    """Missing and not-owned raise the same error so other fans' ids stay hidden."""
    subscription = db.get(Subscription, subscription_id)
    if not subscription or subscription.fan_id != caller.id:
        raise AuthorizationError(NOT_FOUND_OR_NOT_OWNER)
    return subscription


def _cancel_unrecorded(gateway: StripeGateway, subscription_id: str, fan_id: uuid.UUID):
    """Cancel a Stripe subscription that will not get a ledger row."""
    try:
        gateway.cancel_subscription_now(subscription_id)
    except GatewayError as cancel_error:
        # Stripe keeps billing until someone cancels it by hand
        logger.critical(
            f"[SUBSCRIPTION] ORPHANED Stripe subscription {subscription_id} for fan {fan_id}: "
            f"{cancel_error.message}"
        )


def create_subscription(
    db: Session,
    gateway: StripeGateway,
    caller: CallerContext,
    creator_id: uuid.UUID,
    tier_id: str,
    payment_method_id: str,
) -> Subscription:
    if caller.id == creator_id:
        raise ValidationError("You cannot subscribe to yourself.")

    fan = db.get(Profile, caller.id)
    if not fan:
        raise NotFoundError("Profile not found.")
    creator = db.get(Profile, creator_id)
    if not creator or creator.role != UserRole.CREATOR:
        raise NotFoundError("Creator not found.")

    existing = db.query(Subscription).filter(
        Subscription.fan_id == fan.id,
        Subscription.creator_id == creator.id,
        Subscription.tier_id == tier_id,
        Subscription.status == SubscriptionStatus.ACTIVE,
    ).first()
    if existing:
        raise ValidationError("You already have an active subscription to this tier.")

    fan_id = fan.id
    customer_id = get_payer_customer_id(db, gateway, fan)

    gateway.attach_payment_method(customer_id, payment_method_id)
    gateway.set_default_payment_method(customer_id, payment_method_id)
    gateway_sub = gateway.create_subscription(
        customer_id,
        tier_id,
        metadata={"fan_id": str(fan.id), "creator_id": str(creator.id)},
    )

    if gateway_sub.status not in BILLABLE_STATUSES:
        # First invoice was not paid; no ledger row and no access
        logger.warning(
            f"[SUBSCRIPTION] Stripe subscription {gateway_sub.id} is {gateway_sub.status}. "
            f"Cancelling it in Stripe."
        )
        _cancel_unrecorded(gateway, gateway_sub.id, fan_id)
        raise GatewayError("Subscription payment did not go through. You have not been charged.")

    subscription = Subscription(
        id=gateway_sub.id,
        fan_id=fan.id,
        creator_id=creator.id,
        tier_id=tier_id,
        status=SubscriptionStatus.ACTIVE,
        start_date=_from_timestamp(gateway_sub.current_period_start),
        next_billing_date=_from_timestamp(gateway_sub.current_period_end),
    )
    try:
        db.add(subscription)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            f"[SUBSCRIPTION] Ledger write failed for Stripe subscription {gateway_sub.id}: {str(e)}. "
            f"Cancelling it in Stripe."
        )
        _cancel_unrecorded(gateway, gateway_sub.id, fan_id)
        raise GatewayError("Failed to save subscription after payment. No charge will recur.")

    db.refresh(subscription)
    logger.info(
        f"[SUBSCRIPTION] Fan {fan.id} subscribed to creator {creator.id} "
        f"(tier {tier_id}, subscription {subscription.id})"
    )
    return subscription


def cancel_subscription(
    db: Session,
    gateway: StripeGateway,
    caller: CallerContext,
    subscription_id: str,
) -> Subscription:
    subscription = _get_owned_subscription(db, subscription_id, caller)
    if subscription.status == SubscriptionStatus.CANCELED:
        return subscription
    if subscription.status != SubscriptionStatus.ACTIVE:
        raise ValidationError(f"Subscription is {subscription.status.value} and cannot be canceled.")

    gateway_sub = gateway.cancel_subscription_at_period_end(subscription_id)
    ends_at = gateway_sub.cancel_at or gateway_sub.current_period_end

    # Stripe is already canceled; a failure here leaves the ledger stale until resynced
    subscription.status = SubscriptionStatus.CANCELED
    subscription.end_date = _from_timestamp(ends_at)
    db.commit()
    db.refresh(subscription)
    logger.info(f"[SUBSCRIPTION] {subscription_id} canceled, access until {subscription.end_date}")
    return subscription


def change_subscription_tier(
    db: Session,
    gateway: StripeGateway,
    caller: CallerContext,
    subscription_id: str,
    new_tier_id: str,
) -> Subscription:
    subscription = _get_owned_subscription(db, subscription_id, caller)
    if subscription.status != SubscriptionStatus.ACTIVE:
        raise ValidationError("Only active subscriptions can change tier.")
    if subscription.tier_id == new_tier_id:
        return subscription

    gateway_sub = gateway.change_subscription_price(subscription_id, new_tier_id)

    subscription.tier_id = new_tier_id
    subscription.next_billing_date = _from_timestamp(gateway_sub.current_period_end)
    db.commit()
    db.refresh(subscription)
    logger.info(f"[SUBSCRIPTION] {subscription_id} moved to tier {new_tier_id}")
    return subscription


def list_my_subscriptions(db: Session, caller: CallerContext) -> List[Subscription]:
    return db.query(Subscription).filter(
        Subscription.fan_id == caller.id
    ).order_by(Subscription.created_at.desc()).all()


def list_active_subscribers(db: Session, creator_id: uuid.UUID) -> List[Subscription]:
    """Subscriptions to a creator that are still in the active state."""
    return db.query(Subscription).filter(
        Subscription.creator_id == creator_id,
        Subscription.status == SubscriptionStatus.ACTIVE,
    ).all()
