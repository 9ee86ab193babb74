"""
Transaction lifecycle: tips and pay-per-view purchases.

Flow for every one-off payment:
1. Validate the amount (no side effects on failure)
2. Split the gross into platform fee / creator payout
3. Write a Pending transaction to the ledger
4. Create a Stripe PaymentIntent tagged with the ledger id
5. Return the client secret; the transaction stays Pending until the
   payment_intent.* webhook moves it to Cleared or Failed

State machine: Pending -> Cleared, Pending -> Failed. Nothing leaves a
terminal state.
"""
import logging
from typing import List, Optional
import uuid

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import GatewayError, NotFoundError, ReconciliationError, ValidationError
from app.core.security import CallerContext
from app.models.transaction import Transaction, TransactionStatus, TransactionType
from app.models.user import Profile, UserRole
from app.services.fees import compute_split
from app.services.payment_gateway import StripeGateway

logger = logging.getLogger(__name__)

# Metadata key carrying the ledger transaction id on every PaymentIntent
CORRELATION_KEY = "transaction_id"

EVENT_TARGET_STATUS = {
    "payment_intent.succeeded": TransactionStatus.CLEARED,
    "payment_intent.payment_failed": TransactionStatus.FAILED,
}

PPV_TYPES = {
    TransactionType.PPV_MESSAGE.value: TransactionType.PPV_MESSAGE,
    TransactionType.PPV_POST.value: TransactionType.PPV_POST,
}


def _get_creator(db: Session, creator_id: uuid.UUID) -> Profile:
    creator = db.get(Profile, creator_id)
    if not creator or creator.role != UserRole.CREATOR:
        raise NotFoundError("Creator not found.")
    if not creator.stripe_account_id:
        raise ValidationError("This creator cannot receive payments yet.")
    return creator


def get_payer_customer_id(db: Session, gateway: StripeGateway, fan: Profile) -> str:
    """Return the fan's Stripe customer id, creating the customer on first payment."""
    if fan.stripe_customer_id:
        return fan.stripe_customer_id

    customer = gateway.create_customer(email=fan.email, profile_id=str(fan.id))
    fan.stripe_customer_id = customer.id
    db.commit()
    logger.info(f"[PAYMENT] Created Stripe customer {customer.id} for profile {fan.id}")
    return customer.id


def _mark_failed(db: Session, transaction_id: uuid.UUID):
    # Keyed on the ledger id: a rejected PaymentIntent never produced a gateway id
    transaction = db.get(Transaction, transaction_id)
    if transaction and transaction.status == TransactionStatus.PENDING:
        transaction.status = TransactionStatus.FAILED
        db.commit()


def _initiate_payment(
    db: Session,
    gateway: StripeGateway,
    caller: CallerContext,
    creator_id: uuid.UUID,
    amount: int,
    transaction_type: TransactionType,
    related_content_id: Optional[str] = None,
    message: Optional[str] = None,
) -> dict:
    if caller.id == creator_id:
        raise ValidationError("You cannot pay yourself.")

    fan = db.get(Profile, caller.id)
    if not fan:
        raise NotFoundError("Profile not found.")
    creator = _get_creator(db, creator_id)
    customer_id = get_payer_customer_id(db, gateway, fan)

    platform_fee, creator_payout = compute_split(amount, settings.COMMISSION_RATE)

    pending = Transaction(
        fan_id=fan.id,
        creator_id=creator.id,
        type=transaction_type,
        amount=amount,
        platform_fee=platform_fee,
        creator_payout=creator_payout,
        currency=settings.DEFAULT_CURRENCY,
        status=TransactionStatus.PENDING,
        related_content_id=related_content_id,
        message=message,
    )
    db.add(pending)
    db.commit()
    db.refresh(pending)
    transaction_id = pending.id

    try:
        intent = gateway.create_payment_intent(
            amount=amount,
            currency=settings.DEFAULT_CURRENCY,
            customer_id=customer_id,
            destination_account_id=creator.stripe_account_id,
            application_fee=platform_fee,
            metadata={CORRELATION_KEY: str(transaction_id), "type": transaction_type.value},
            idempotency_key=f"txn_{transaction_id}",
        )
    except GatewayError:
        logger.warning(f"[PAYMENT] Gateway rejected transaction {transaction_id}; marking Failed")
        _mark_failed(db, transaction_id)
        raise

    pending.payment_gateway_id = intent.id
    db.commit()
    logger.info(
        f"[PAYMENT] {transaction_type.value} {transaction_id} pending: "
        f"amount={amount} fee={platform_fee} payout={creator_payout} intent={intent.id}"
    )
    return {"client_secret": intent.client_secret, "transaction_id": transaction_id}


def initiate_tip(
    db: Session,
    gateway: StripeGateway,
    caller: CallerContext,
    creator_id: uuid.UUID,
    amount: int,
    message: Optional[str] = None,
) -> dict:
    """Start a tip from the caller to a creator. Amount is in cents."""
    if amount < settings.MINIMUM_TIP_AMOUNT:
        raise ValidationError(
            f"Tip amount must be at least {settings.MINIMUM_TIP_AMOUNT} cents."
        )
    return _initiate_payment(db, gateway, caller, creator_id, amount, TransactionType.TIP, message=message)


def initiate_content_purchase(
    db: Session,
    gateway: StripeGateway,
    caller: CallerContext,
    creator_id: uuid.UUID,
    content_id: str,
    price: int,
    purchase_type: str = TransactionType.PPV_POST.value,
) -> dict:
    """Start a pay-per-view purchase of a post or message."""
    transaction_type = PPV_TYPES.get(purchase_type)
    if transaction_type is None:
        raise ValidationError(f"Unsupported purchase type: {purchase_type}")
    if price < 1:
        raise ValidationError("Price must be a positive amount in cents.")
    return _initiate_payment(
        db, gateway, caller, creator_id, price, transaction_type, related_content_id=content_id
    )


def _find_transaction_for_event(db: Session, payload: dict) -> Transaction:
    correlation_id = (payload.get("metadata") or {}).get(CORRELATION_KEY)
    if correlation_id:
        try:
            transaction = db.get(Transaction, uuid.UUID(str(correlation_id)))
        except ValueError:
            transaction = None
        if transaction:
            return transaction

    intent_id = payload.get("id")
    if intent_id:
        transaction = db.query(Transaction).filter(
            Transaction.payment_gateway_id == intent_id
        ).first()
        if transaction:
            return transaction

    raise ReconciliationError(
        f"No transaction for correlation id {correlation_id!r} / intent {intent_id!r}"
    )


def apply_status(db: Session, transaction: Transaction, target: TransactionStatus) -> Transaction:
    """Move a Pending transaction to a terminal status. Re-applying is a no-op."""
    if transaction.status == target:
        return transaction
    if transaction.status != TransactionStatus.PENDING:
        logger.warning(
            f"[RECONCILE] Ignoring {target.value} for transaction {transaction.id}: "
            f"already {transaction.status.value}"
        )
        return transaction

    transaction.status = target
    db.commit()
    db.refresh(transaction)
    return transaction


def reconcile_gateway_event(db: Session, event_kind: str, payload: dict) -> Optional[Transaction]:
    """
    Apply a payment_intent.* event to the ledger.

    Returns the affected transaction, or None when the event kind is not
    handled or its correlation id resolves to nothing. Neither case is an
    error for the gateway: both are logged and acknowledged.
    """
    target = EVENT_TARGET_STATUS.get(event_kind)
    if target is None:
        logger.info(f"[RECONCILE] Unhandled Stripe event type: {event_kind}")
        return None

    try:
        transaction = _find_transaction_for_event(db, payload)
    except ReconciliationError as e:
        logger.warning(f"[RECONCILE] {e.message}")
        return None

    if transaction.payment_gateway_id is None and payload.get("id"):
        transaction.payment_gateway_id = payload["id"]
        db.commit()

    transaction = apply_status(db, transaction, target)
    logger.info(f"[RECONCILE] {event_kind} -> transaction {transaction.id} is {transaction.status.value}")
    return transaction


def list_transactions(db: Session, caller: CallerContext) -> List[Transaction]:
    """Transactions where the caller paid or was paid, newest first."""
    return db.query(Transaction).filter(
        or_(Transaction.fan_id == caller.id, Transaction.creator_id == caller.id)
    ).order_by(Transaction.created_at.desc()).all()
