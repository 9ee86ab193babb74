"""Shared fixtures: in-memory SQLite ledger, fake Stripe gateway, API client."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test")

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.api.deps import get_caller, get_gateway
from app.core.errors import GatewayError
from app.core.security import CallerContext
from app.db.session import Base, get_db
from app.main import app as fastapi_app
from app.models.user import Profile, UserRole
from app.schemas.stripe import GatewayCustomer, GatewayPaymentIntent, GatewaySubscription
from app.services.payment_gateway import StripeGateway

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

PERIOD_START = 1_767_225_600  # 2026-01-01T00:00:00Z
PERIOD_END = PERIOD_START + 31 * 24 * 3600


class FakeGateway:
    """In-memory stand-in for StripeGateway that records every call."""

    def __init__(self):
        self.calls = []
        self.fail_on = set()
        self.subscriptions = {}
        self.subscription_status = "active"
        self._counter = 0

    def _next(self, prefix):
        self._counter += 1
        return f"{prefix}_test_{self._counter}"

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail_on:
            raise GatewayError(f"Stripe Error: {name} declined")

    def call_names(self):
        return [c[0] for c in self.calls]

    def create_customer(self, email, profile_id):
        self._record("create_customer", email, profile_id)
        return GatewayCustomer(id=self._next("cus"), email=email)

    def create_payment_intent(self, amount, currency, customer_id, destination_account_id,
                              application_fee, metadata, idempotency_key=None):
        self._record("create_payment_intent", amount, application_fee, destination_account_id, dict(metadata))
        intent_id = self._next("pi")
        return GatewayPaymentIntent(id=intent_id, client_secret=f"{intent_id}_secret", status="requires_confirmation", amount=amount)

    def attach_payment_method(self, customer_id, payment_method_id):
        self._record("attach_payment_method", customer_id, payment_method_id)

    def set_default_payment_method(self, customer_id, payment_method_id):
        self._record("set_default_payment_method", customer_id, payment_method_id)

    def create_subscription(self, customer_id, price_id, metadata=None):
        self._record("create_subscription", customer_id, price_id)
        sub = GatewaySubscription(
            id=self._next("sub"),
            status=self.subscription_status,
            price_id=price_id,
            item_id=self._next("si"),
            current_period_start=PERIOD_START,
            current_period_end=PERIOD_END,
        )
        self.subscriptions[sub.id] = sub
        return sub

    def cancel_subscription_at_period_end(self, subscription_id):
        self._record("cancel_subscription_at_period_end", subscription_id)
        sub = self.subscriptions[subscription_id].model_copy(
            update={"cancel_at_period_end": True, "cancel_at": PERIOD_END}
        )
        self.subscriptions[subscription_id] = sub
        return sub

    def cancel_subscription_now(self, subscription_id):
        self._record("cancel_subscription_now", subscription_id)
        sub = self.subscriptions[subscription_id].model_copy(update={"status": "canceled"})
        self.subscriptions[subscription_id] = sub
        return sub

    def parse_event(self, payload, signature):
        # Real signature verification against the test signing secret
        return StripeGateway(api_key="sk_test_fake", webhook_secret="whsec_test").parse_event(payload, signature)

    def change_subscription_price(self, subscription_id, new_price_id):
        self._record("change_subscription_price", subscription_id, new_price_id)
        sub = self.subscriptions[subscription_id].model_copy(update={"price_id": new_price_id})
        self.subscriptions[subscription_id] = sub
        return sub


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def gateway():
    return FakeGateway()


def _make_profile(db, role, **fields):
    profile = Profile(
        id=uuid.uuid4(),
        email=f"{role.value}-{uuid.uuid4().hex[:8]}@example.com",
        role=role,
        **fields,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture
def fan(db):
    return _make_profile(db, UserRole.FAN, stripe_customer_id="cus_existing")


@pytest.fixture
def creator(db):
    return _make_profile(db, UserRole.CREATOR, stripe_account_id="acct_creator")


@pytest.fixture
def make_profile(db):
    def factory(role=UserRole.FAN, **fields):
        return _make_profile(db, role, **fields)
    return factory


def caller_for(profile):
    return CallerContext(id=profile.id, role=profile.role.value)


@pytest.fixture
def api(db, gateway):
    """
    TestClient wired to the test database and fake gateway.
    Set api.caller to a CallerContext to authenticate subsequent requests.
    """
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    client = TestClient(fastapi_app)
    client.caller = None

    def override_get_caller():
        return client.caller

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_gateway] = lambda: gateway
    fastapi_app.dependency_overrides[get_caller] = override_get_caller
    yield client
    fastapi_app.dependency_overrides.clear()


def sign_payload(payload: str, secret: str = "whsec_test", timestamp: int = None) -> str:
    """Build a stripe-signature header the same way Stripe does."""
    import hashlib
    import hmac
    import time

    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"
