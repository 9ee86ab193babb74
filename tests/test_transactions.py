"""Tip / pay-per-view initiation and webhook reconciliation against the ledger"""
import uuid

import pytest

from app.core.errors import GatewayError, NotFoundError, ValidationError
from app.models.transaction import Transaction, TransactionStatus, TransactionType
from app.models.user import UserRole
from app.services import transactions
from tests.conftest import caller_for


def _succeeded(transaction_id, intent_id="pi_x"):
    return {"id": intent_id, "object": "payment_intent", "metadata": {"transaction_id": str(transaction_id)}}


def test_tip_creates_pending_transaction_with_split(db, gateway, fan, creator):
    result = transactions.initiate_tip(db, gateway, caller_for(fan), creator.id, 1000, "great stream")

    txn = db.get(Transaction, result["transaction_id"])
    assert txn.status == TransactionStatus.PENDING
    assert txn.type == TransactionType.TIP
    assert (txn.amount, txn.platform_fee, txn.creator_payout) == (1000, 125, 875)
    assert txn.message == "great stream"
    assert txn.payment_gateway_id == "pi_test_1"
    assert result["client_secret"] == "pi_test_1_secret"

    name, amount, fee, destination, metadata = gateway.calls[-1]
    assert name == "create_payment_intent"
    assert (amount, fee, destination) == (1000, 125, "acct_creator")
    assert metadata["transaction_id"] == str(txn.id)


def test_tip_below_minimum_rejected_before_any_gateway_call(db, gateway, fan, creator):
    with pytest.raises(ValidationError):
        transactions.initiate_tip(db, gateway, caller_for(fan), creator.id, 50)

    assert gateway.calls == []
    assert db.query(Transaction).count() == 0


def test_tip_creates_stripe_customer_on_first_payment(db, gateway, make_profile, creator):
    new_fan = make_profile(UserRole.FAN)
    transactions.initiate_tip(db, gateway, caller_for(new_fan), creator.id, 500)

    assert gateway.call_names() == ["create_customer", "create_payment_intent"]
    db.refresh(new_fan)
    assert new_fan.stripe_customer_id == "cus_test_1"


def test_tip_to_creator_without_connected_account_rejected(db, gateway, fan, make_profile):
    unpaid_creator = make_profile(UserRole.CREATOR)
    with pytest.raises(ValidationError):
        transactions.initiate_tip(db, gateway, caller_for(fan), unpaid_creator.id, 500)
    assert gateway.calls == []


def test_tip_to_non_creator_not_found(db, gateway, fan, make_profile):
    other_fan = make_profile(UserRole.FAN)
    with pytest.raises(NotFoundError):
        transactions.initiate_tip(db, gateway, caller_for(fan), other_fan.id, 500)


def test_gateway_rejection_marks_transaction_failed(db, gateway, fan, creator):
    gateway.fail_on.add("create_payment_intent")

    with pytest.raises(GatewayError):
        transactions.initiate_tip(db, gateway, caller_for(fan), creator.id, 1000)

    txn = db.query(Transaction).one()
    assert txn.status == TransactionStatus.FAILED
    assert txn.payment_gateway_id is None


def test_content_purchase_records_related_content(db, gateway, fan, creator):
    result = transactions.initiate_content_purchase(
        db, gateway, caller_for(fan), creator.id, "post-42", 799, "PPV Post"
    )
    txn = db.get(Transaction, result["transaction_id"])
    assert txn.type == TransactionType.PPV_POST
    assert txn.related_content_id == "post-42"
    assert txn.platform_fee + txn.creator_payout == 799


def test_content_purchase_rejects_unknown_type(db, gateway, fan, creator):
    with pytest.raises(ValidationError):
        transactions.initiate_content_purchase(db, gateway, caller_for(fan), creator.id, "x", 100, "Tip")


def test_succeeded_event_clears_transaction(db, gateway, fan, creator):
    result = transactions.initiate_tip(db, gateway, caller_for(fan), creator.id, 1000)

    txn = transactions.reconcile_gateway_event(db, "payment_intent.succeeded", _succeeded(result["transaction_id"]))
    assert txn.status == TransactionStatus.CLEARED


def test_failed_event_fails_transaction(db, gateway, fan, creator):
    result = transactions.initiate_tip(db, gateway, caller_for(fan), creator.id, 1000)

    txn = transactions.reconcile_gateway_event(
        db, "payment_intent.payment_failed", _succeeded(result["transaction_id"])
    )
    assert txn.status == TransactionStatus.FAILED


def test_reconciliation_is_idempotent(db, gateway, fan, creator):
    result = transactions.initiate_tip(db, gateway, caller_for(fan), creator.id, 1000)
    payload = _succeeded(result["transaction_id"])

    first = transactions.reconcile_gateway_event(db, "payment_intent.succeeded", payload)
    first_updated_at = first.updated_at
    second = transactions.reconcile_gateway_event(db, "payment_intent.succeeded", payload)

    assert second.status == TransactionStatus.CLEARED
    assert second.updated_at == first_updated_at


def test_terminal_status_is_never_left(db, gateway, fan, creator):
    result = transactions.initiate_tip(db, gateway, caller_for(fan), creator.id, 1000)
    payload = _succeeded(result["transaction_id"])

    transactions.reconcile_gateway_event(db, "payment_intent.succeeded", payload)
    txn = transactions.reconcile_gateway_event(db, "payment_intent.payment_failed", payload)
    assert txn.status == TransactionStatus.CLEARED


def test_reconciliation_only_touches_status(db, gateway, fan, creator):
    result = transactions.initiate_tip(db, gateway, caller_for(fan), creator.id, 1000)
    txn = db.get(Transaction, result["transaction_id"])
    before = (txn.amount, txn.platform_fee, txn.creator_payout, txn.type, txn.fan_id, txn.creator_id)

    transactions.reconcile_gateway_event(db, "payment_intent.succeeded", _succeeded(txn.id))
    db.refresh(txn)
    assert (txn.amount, txn.platform_fee, txn.creator_payout, txn.type, txn.fan_id, txn.creator_id) == before


def test_event_falls_back_to_gateway_id(db, gateway, fan, creator):
    transactions.initiate_tip(db, gateway, caller_for(fan), creator.id, 1000)

    txn = transactions.reconcile_gateway_event(
        db, "payment_intent.succeeded", {"id": "pi_test_1", "metadata": {}}
    )
    assert txn.status == TransactionStatus.CLEARED


def test_unknown_correlation_id_is_swallowed(db):
    assert transactions.reconcile_gateway_event(
        db, "payment_intent.succeeded", _succeeded(uuid.uuid4(), intent_id="pi_unknown")
    ) is None


def test_unhandled_event_kind_is_ignored(db, gateway, fan, creator):
    result = transactions.initiate_tip(db, gateway, caller_for(fan), creator.id, 1000)

    assert transactions.reconcile_gateway_event(
        db, "charge.dispute.created", _succeeded(result["transaction_id"])
    ) is None
    assert db.get(Transaction, result["transaction_id"]).status == TransactionStatus.PENDING


def test_list_transactions_covers_both_sides(db, gateway, fan, creator, make_profile):
    transactions.initiate_tip(db, gateway, caller_for(fan), creator.id, 1000)
    bystander = make_profile(UserRole.FAN)

    assert len(transactions.list_transactions(db, caller_for(fan))) == 1
    assert len(transactions.list_transactions(db, caller_for(creator))) == 1
    assert transactions.list_transactions(db, caller_for(bystander)) == []
