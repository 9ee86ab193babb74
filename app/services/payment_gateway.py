"""
Stripe adapter used by the transaction and subscription lifecycle managers.

Every Stripe call goes through StripeGateway so that:
- Stripe failures surface as GatewayError, never as raw stripe exceptions
- Stripe objects are copied into the small models in app.schemas.stripe
- tests can swap in an in-memory gateway via the get_payment_gateway dependency
"""
import json
import logging
from typing import Optional

import stripe

from app.core.config import settings
from app.core.errors import GatewayError, ValidationError
from app.schemas.stripe import (
    GatewayCustomer,
    GatewayEvent,
    GatewayPaymentIntent,
    GatewaySubscription,
)

logger = logging.getLogger(__name__)


def _stripe_message(e: Exception) -> str:
    return getattr(e, "user_message", None) or str(e)


def _to_subscription(sub) -> GatewaySubscription:
    items = sub["items"]["data"]
    first_item = items[0] if items else None
    if first_item is None:
        raise GatewayError("Stripe subscription has no subscription item.")

    # Newer API versions report the billing period per item instead of per subscription
    period_start = getattr(first_item, "current_period_start", None) or getattr(sub, "current_period_start", None)
    period_end = getattr(first_item, "current_period_end", None) or getattr(sub, "current_period_end", None)

    return GatewaySubscription(
        id=sub.id,
        status=sub.status,
        price_id=first_item["price"]["id"],
        item_id=first_item.id,
        current_period_start=period_start,
        current_period_end=period_end,
        cancel_at_period_end=bool(getattr(sub, "cancel_at_period_end", False)),
        cancel_at=getattr(sub, "cancel_at", None),
    )


class StripeGateway:
    def __init__(self, api_key: Optional[str] = None, webhook_secret: Optional[str] = None):
        self.api_key = api_key or settings.STRIPE_SECRET_KEY
        self.webhook_secret = webhook_secret or settings.STRIPE_WEBHOOK_SECRET
        if self.api_key:
            stripe.api_key = self.api_key
        if settings.STRIPE_API_VERSION:
            stripe.api_version = settings.STRIPE_API_VERSION

    def _require_key(self):
        if not self.api_key:
            raise GatewayError("Stripe secret key not configured. Set STRIPE_SECRET_KEY in environment.")

    # Customers

    def create_customer(self, email: str, profile_id: str) -> GatewayCustomer:
        self._require_key()
        try:
            customer = stripe.Customer.create(email=email, metadata={"profile_id": profile_id})
        except stripe.StripeError as e:
            logger.error(f"[STRIPE] Customer create failed for profile {profile_id}: {_stripe_message(e)}")
            raise GatewayError(f"Stripe Error: {_stripe_message(e)}")
        return GatewayCustomer(id=customer.id, email=getattr(customer, "email", None))

    # One-off payments

    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        customer_id: str,
        destination_account_id: str,
        application_fee: int,
        metadata: dict,
        idempotency_key: Optional[str] = None,
    ) -> GatewayPaymentIntent:
        """Charge the fan; Stripe keeps application_fee and transfers the rest to the creator."""
        self._require_key()
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=currency,
                customer=customer_id,
                application_fee_amount=application_fee,
                transfer_data={"destination": destination_account_id},
                metadata=metadata,
                idempotency_key=idempotency_key,
            )
        except stripe.StripeError as e:
            logger.error(f"[STRIPE] PaymentIntent create failed: {_stripe_message(e)}")
            raise GatewayError(f"Stripe Error: {_stripe_message(e)}")
        return GatewayPaymentIntent(
            id=intent.id,
            client_secret=getattr(intent, "client_secret", None),
            status=intent.status,
            amount=intent.amount,
        )

    # Payment methods

    def attach_payment_method(self, customer_id: str, payment_method_id: str):
        self._require_key()
        try:
            stripe.PaymentMethod.attach(payment_method_id, customer=customer_id)
        except stripe.StripeError as e:
            raise GatewayError(f"Stripe Error: {_stripe_message(e)}")

    def set_default_payment_method(self, customer_id: str, payment_method_id: str):
        self._require_key()
        try:
            stripe.Customer.modify(
                customer_id,
                invoice_settings={"default_payment_method": payment_method_id},
            )
        except stripe.StripeError as e:
            raise GatewayError(f"Stripe Error: {_stripe_message(e)}")

    # Recurring billing

    def create_subscription(self, customer_id: str, price_id: str, metadata: Optional[dict] = None) -> GatewaySubscription:
        self._require_key()
        try:
            sub = stripe.Subscription.create(
                customer=customer_id,
                items=[{"price": price_id}],
                metadata=metadata or {},
                expand=["latest_invoice.payment_intent"],
            )
        except stripe.StripeError as e:
            logger.error(f"[STRIPE] Subscription create failed for customer {customer_id}: {_stripe_message(e)}")
            raise GatewayError(f"Stripe Error: {_stripe_message(e)}")

        try:
            return _to_subscription(sub)
        except GatewayError:
            # Created in Stripe but unusable here: cancel before anyone is billed
            logger.error(f"[STRIPE] Subscription {sub.id} could not be read back; cancelling it")
            try:
                stripe.Subscription.cancel(sub.id)
            except stripe.StripeError as e:
                logger.critical(f"[STRIPE] ORPHANED Stripe subscription {sub.id}: {_stripe_message(e)}")
            raise

    def cancel_subscription_at_period_end(self, subscription_id: str) -> GatewaySubscription:
        self._require_key()
        try:
            sub = stripe.Subscription.modify(subscription_id, cancel_at_period_end=True)
        except stripe.StripeError as e:
            raise GatewayError(f"Stripe Error: {_stripe_message(e)}")
        return _to_subscription(sub)

    def cancel_subscription_now(self, subscription_id: str) -> GatewaySubscription:
        """Immediate cancel; only used to undo a subscription the ledger failed to record."""
        self._require_key()
        try:
            sub = stripe.Subscription.cancel(subscription_id)
        except stripe.StripeError as e:
            raise GatewayError(f"Stripe Error: {_stripe_message(e)}")
        return _to_subscription(sub)

    def change_subscription_price(self, subscription_id: str, new_price_id: str) -> GatewaySubscription:
        self._require_key()
        try:
            current = _to_subscription(stripe.Subscription.retrieve(subscription_id))
            sub = stripe.Subscription.modify(
                subscription_id,
                items=[{"id": current.item_id, "price": new_price_id}],
                proration_behavior="create_prorations",
            )
        except stripe.StripeError as e:
            raise GatewayError(f"Stripe Error: {_stripe_message(e)}")
        return _to_subscription(sub)

    # Webhooks

    def parse_event(self, payload: bytes, signature: Optional[str]) -> GatewayEvent:
        """
        Verify a webhook delivery and return it as a GatewayEvent.

        Raises GatewayError when no signing secret is configured and
        ValidationError for a bad signature or payload.
        """
        if not self.webhook_secret:
            logger.error("[WEBHOOK] STRIPE_WEBHOOK_SECRET not configured")
            raise GatewayError("Webhook configuration error.", status_code=500)
        if not signature:
            raise ValidationError("No Stripe signature found.")

        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except ValueError as e:
            raise ValidationError(f"Webhook Error: invalid payload ({str(e)})")
        except stripe.SignatureVerificationError as e:
            raise ValidationError(f"Webhook Error: {str(e)}")

        # Signature is valid; read the body as plain JSON rather than Stripe objects
        event = json.loads(payload)
        return GatewayEvent(
            id=event["id"],
            type=event["type"],
            object=event.get("data", {}).get("object", {}),
        )


_gateway: Optional[StripeGateway] = None


def get_payment_gateway() -> StripeGateway:
    """FastAPI dependency returning the process-wide gateway."""
    global _gateway
    if _gateway is None:
        _gateway = StripeGateway()
    return _gateway
