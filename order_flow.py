# order_flow.py
"""Order and payment lifecycle.

Order status:       pending -> paid -> processing -> delivered
                    any non-terminal state -> cancelled
Payment status:     pending -> paid | failed
Transaction status: pending -> approved | rejected | cancelled

Orders are created as pending/pending with exactly one pending transaction.
After that they only move through `apply_status_change` (admin actions) and
`apply_gateway_status` (payment provider confirmations).
"""
import enum
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


ORDER_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PAID: set(),
    PaymentStatus.FAILED: set(),
}

# Provider statuses. Pagou.ai follows the BACEN cob status names.
CONFIRMED_GATEWAY_STATUSES = {"CONCLUIDA", "PAID", "APPROVED"}
FAILED_GATEWAY_STATUSES = {
    "REMOVIDA_PELO_USUARIO_RECEBEDOR",
    "REMOVIDA_PELO_PSP",
    "REJECTED",
    "FAILED",
    "EXPIRED",
}

CENTS = Decimal("0.01")


class CheckoutError(ValueError):
    """Checkout input that can't become an order."""


class MissingCardData(CheckoutError):
    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Dados do cartão incompletos: {', '.join(self.missing)}")


class TotalMismatch(CheckoutError):
    def __init__(self, submitted: Decimal, computed: Decimal):
        self.submitted = submitted
        self.computed = computed
        super().__init__(f"Total informado {submitted} difere do total calculado {computed}")


class InvalidTransition(Exception):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move from '{current}' to '{target}'")


def is_terminal(status) -> bool:
    return not ORDER_TRANSITIONS[OrderStatus(status)]


def can_transition(current, target) -> bool:
    return OrderStatus(target) in ORDER_TRANSITIONS[OrderStatus(current)]


def transition(current, target) -> OrderStatus:
    if not can_transition(current, target):
        raise InvalidTransition(current, target)
    return OrderStatus(target)


def can_transition_payment(current, target) -> bool:
    return PaymentStatus(target) in PAYMENT_TRANSITIONS[PaymentStatus(current)]


CARD_FIELDS = ("card_number", "card_name", "card_expiry", "card_cvv")


def require_card_data(payment_method: str, card_data) -> None:
    """Credit card orders need every card field before anything is stored."""
    if payment_method != "credit_card":
        return
    missing = [
        field for field in CARD_FIELDS
        if card_data is None or not (getattr(card_data, field, None) or "").strip()
    ]
    if missing:
        raise MissingCardData(missing)


def quantize(amount) -> Decimal:
    return Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_total(items: Iterable, toppings: Iterable = ()) -> Decimal:
    total = sum((Decimal(i.price) * i.quantity for i in items), Decimal("0"))
    total += sum((Decimal(t.price) * t.quantity for t in toppings), Decimal("0"))
    return quantize(total)


def check_total(submitted, items, toppings=()) -> Decimal:
    computed = compute_total(items, toppings)
    if quantize(submitted) != computed:
        raise TotalMismatch(quantize(submitted), computed)
    return computed


def apply_gateway_status(order: dict, transaction: dict, gateway_status: str,
                         now: Optional[datetime] = None) -> dict:
    """Work out what a provider status means for an order and its transaction.

    Returns a dict with "order" and "transaction" keys holding the column
    updates to persist; both are empty when nothing changes. Settled
    transactions are left alone, so repeated notifications are harmless.
    """
    changes = {"order": {}, "transaction": {}}
    status = (gateway_status or "").strip().upper()

    if transaction["status"] != TransactionStatus.PENDING.value:
        return changes

    if status in CONFIRMED_GATEWAY_STATUSES:
        changes["transaction"] = {
            "status": TransactionStatus.APPROVED.value,
            "captured_at": now or datetime.now(timezone.utc),
        }
        if can_transition_payment(order["payment_status"], PaymentStatus.PAID):
            changes["order"]["payment_status"] = PaymentStatus.PAID.value
        if order["status"] == OrderStatus.PENDING.value:
            changes["order"]["status"] = OrderStatus.PAID.value
    elif status in FAILED_GATEWAY_STATUSES:
        changes["transaction"] = {"status": TransactionStatus.REJECTED.value}
        if can_transition_payment(order["payment_status"], PaymentStatus.FAILED):
            changes["order"]["payment_status"] = PaymentStatus.FAILED.value

    return changes


def apply_status_change(order: dict, transaction: Optional[dict], target,
                        now: Optional[datetime] = None) -> dict:
    """Admin move of an order, mirrored into its payment and transaction.

    Raises InvalidTransition when the move is not allowed. Returns the same
    {"order": ..., "transaction": ...} shape as `apply_gateway_status`.
    """
    new_status = transition(order["status"], target)
    changes = {"order": {"status": new_status.value}, "transaction": {}}
    pending = bool(transaction) and transaction["status"] == TransactionStatus.PENDING.value

    if new_status == OrderStatus.PAID:
        if can_transition_payment(order["payment_status"], PaymentStatus.PAID):
            changes["order"]["payment_status"] = PaymentStatus.PAID.value
        if pending:
            changes["transaction"] = {
                "status": TransactionStatus.APPROVED.value,
                "captured_at": now or datetime.now(timezone.utc),
            }
    elif new_status == OrderStatus.CANCELLED and pending:
        changes["transaction"] = {"status": TransactionStatus.CANCELLED.value}

    return changes
