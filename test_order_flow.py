# test_order_flow.py
from datetime import datetime, timezone
from decimal import Decimal

import pytest

import schemas
from order_flow import (
    InvalidTransition,
    MissingCardData,
    OrderStatus,
    TotalMismatch,
    apply_gateway_status,
    apply_status_change,
    can_transition,
    check_total,
    compute_total,
    is_terminal,
    require_card_data,
    transition,
)


def items():
    return [
        schemas.ProductSnapshot(product_id="p1", name="Açaí 300ml", price=Decimal("12.90"), quantity=2),
        schemas.ProductSnapshot(product_id="p2", name="Açaí 500ml", price=Decimal("18.90"), quantity=1),
    ]


def test_happy_path_transitions():
    status = OrderStatus.PENDING
    for target in ("paid", "processing", "delivered"):
        status = transition(status, target)
    assert status == OrderStatus.DELIVERED
    assert is_terminal(status)


@pytest.mark.parametrize("current", ["pending", "paid", "processing"])
def test_any_open_order_can_be_cancelled(current):
    assert transition(current, "cancelled") == OrderStatus.CANCELLED


@pytest.mark.parametrize("current,target", [
    ("pending", "delivered"),
    ("pending", "processing"),
    ("paid", "pending"),
    ("delivered", "cancelled"),
    ("cancelled", "pending"),
])
def test_invalid_transitions(current, target):
    assert not can_transition(current, target)
    with pytest.raises(InvalidTransition):
        transition(current, target)


def test_pix_orders_need_no_card():
    require_card_data("pix", None)


def test_card_orders_need_every_card_field():
    with pytest.raises(MissingCardData) as exc_info:
        require_card_data("credit_card", schemas.CardData(card_number="4111111111111111", card_name="Maria",
                                                          card_expiry="12/30", card_cvv="  "))
    assert exc_info.value.missing == ["card_cvv"]

    with pytest.raises(MissingCardData) as exc_info:
        require_card_data("credit_card", None)
    assert len(exc_info.value.missing) == 4


def test_compute_total_includes_toppings():
    toppings = [schemas.ToppingSnapshot(id="t", name="Nutella", price=Decimal("3.50"), quantity=2, category="extra")]
    assert compute_total(items()) == Decimal("44.70")
    assert compute_total(items(), toppings) == Decimal("51.70")


def test_check_total_rejects_mismatch():
    assert check_total(Decimal("44.7"), items()) == Decimal("44.70")
    with pytest.raises(TotalMismatch) as exc_info:
        check_total(Decimal("10.00"), items())
    assert exc_info.value.computed == Decimal("44.70")


def pending_pair():
    order = {"id": "o1", "status": "pending", "payment_status": "pending"}
    transaction = {"id": "t1", "status": "pending"}
    return order, transaction


@pytest.mark.parametrize("gateway_status", ["CONCLUIDA", "paid", "APPROVED"])
def test_confirmed_payment_marks_order_paid(gateway_status):
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    order, transaction = pending_pair()
    changes = apply_gateway_status(order, transaction, gateway_status, now=now)
    assert changes["transaction"] == {"status": "approved", "captured_at": now}
    assert changes["order"] == {"payment_status": "paid", "status": "paid"}


def test_confirmation_keeps_a_cancelled_order_cancelled():
    order, transaction = pending_pair()
    order["status"] = "cancelled"
    changes = apply_gateway_status(order, transaction, "CONCLUIDA")
    assert changes["order"] == {"payment_status": "paid"}


@pytest.mark.parametrize("gateway_status", ["REMOVIDA_PELO_PSP", "EXPIRED", "rejected"])
def test_failed_payment(gateway_status):
    order, transaction = pending_pair()
    changes = apply_gateway_status(order, transaction, gateway_status)
    assert changes["transaction"] == {"status": "rejected"}
    assert changes["order"] == {"payment_status": "failed"}


def test_unknown_or_repeated_status_changes_nothing():
    order, transaction = pending_pair()
    assert apply_gateway_status(order, transaction, "ATIVA") == {"order": {}, "transaction": {}}

    transaction["status"] = "approved"
    assert apply_gateway_status(order, transaction, "CONCLUIDA") == {"order": {}, "transaction": {}}


def test_admin_paid_settles_payment_and_transaction():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    order, transaction = pending_pair()
    changes = apply_status_change(order, transaction, "paid", now=now)
    assert changes["order"] == {"status": "paid", "payment_status": "paid"}
    assert changes["transaction"] == {"status": "approved", "captured_at": now}


def test_admin_paid_leaves_a_settled_transaction_alone():
    order, transaction = pending_pair()
    transaction["status"] = "approved"
    changes = apply_status_change(order, transaction, "paid")
    assert changes["transaction"] == {}

    changes = apply_status_change(order, None, "paid")
    assert changes == {"order": {"status": "paid", "payment_status": "paid"}, "transaction": {}}


def test_admin_cancel_cancels_pending_transaction():
    order, transaction = pending_pair()
    changes = apply_status_change(order, transaction, "cancelled")
    assert changes["order"] == {"status": "cancelled"}
    assert changes["transaction"] == {"status": "cancelled"}


def test_admin_processing_touches_only_the_order():
    order, transaction = pending_pair()
    order["status"] = "paid"
    order["payment_status"] = "paid"
    transaction["status"] = "approved"
    assert apply_status_change(order, transaction, "processing") == {"order": {"status": "processing"}, "transaction": {}}


def test_admin_invalid_move_is_rejected():
    order, transaction = pending_pair()
    with pytest.raises(InvalidTransition):
        apply_status_change(order, transaction, "delivered")
