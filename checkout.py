# checkout.py
"""Turns a checkout submission into an order and its payment transaction."""
import logging

from databases import Database

import crud
import schemas
from order_flow import (
    OrderStatus,
    PaymentStatus,
    TransactionStatus,
    check_total,
    require_card_data,
)
from pagouai import PagouAiService, create_mock_pix_payment
from toppings import validate_topping_selection
from validators import detect_card_brand, only_digits

logger = logging.getLogger(__name__)

PLACEHOLDER_DOCUMENT = "00000000000"


async def _pix_transaction(gateway: PagouAiService, order: schemas.OrderCreate, total, order_ref: str) -> dict:
    values = {
        "payment_method": "pix",
        "amount": total,
        "status": TransactionStatus.PENDING.value,
    }

    if gateway.is_available():
        pix = await gateway.create_pix_payment(
            amount=total,
            customer_name=order.customer_name,
            customer_email=order.customer_email or "",
            customer_document=order.customer_document or PLACEHOLDER_DOCUMENT,
            customer_phone=order.customer_phone,
            description=f"Pedido Açaí Prime #{order_ref}",
            order_id=order_ref,
        )
        if pix.success:
            values.update(
                payment_gateway="pagouai",
                gateway_txid=pix.txid,
                pix_qr_code=pix.qr_code,
                pix_qr_code_base64=pix.qr_code_image,
                pix_copy_paste=pix.copy_paste_code,
                pix_expires_at=pix.expires_at,
            )
            return values
        logger.warning("Pagou.ai unavailable for order %s, falling back to mock PIX: %s", order_ref, pix.error)

    mock = create_mock_pix_payment(total)
    values.update(
        payment_gateway="mock",
        pix_qr_code=mock.qr_code,
        pix_qr_code_base64=mock.qr_code_image,
        pix_copy_paste=mock.copy_paste_code,
    )
    return values


def _card_transaction(order: schemas.OrderCreate, total) -> dict:
    # Settled in person; only what identifies the card is kept.
    card = order.card_data
    number = only_digits(card.card_number)
    brand = detect_card_brand(number)
    return {
        "payment_method": "credit_card",
        "payment_gateway": "mercadopago",
        "amount": total,
        "status": TransactionStatus.PENDING.value,
        "card_last4": number[-4:],
        "card_brand": brand,
        "card_data": {
            "holder": card.card_name.strip(),
            "brand": brand,
            "last4": number[-4:],
            "expiry": card.card_expiry.strip(),
        },
    }


async def place_order(db: Database, gateway: PagouAiService, order: schemas.OrderCreate) -> str:
    """Validate a checkout and persist the order with exactly one transaction.

    Raises a CheckoutError subclass (or ToppingLimitExceeded) before anything
    is written when the submission is invalid. Gateway trouble never fails
    the checkout.
    """
    require_card_data(order.payment_method, order.card_data)
    validate_topping_selection(order.toppings)
    total = check_total(order.total_amount, order.items, order.toppings)

    order_ref = crud.new_id()
    if order.payment_method == "pix":
        transaction_values = await _pix_transaction(gateway, order, total, order_ref)
    else:
        transaction_values = _card_transaction(order, total)

    order_values = order.model_dump(
        mode="json",
        by_alias=True,
        include={"items", "toppings"},
    )
    order_values.update(
        order.model_dump(exclude={"items", "toppings", "card_data", "total_amount"}),
        total_amount=total,
        payment_status=PaymentStatus.PENDING.value,
        status=OrderStatus.PENDING.value,
    )

    order_id = await crud.create_order_with_transaction(db, order_values, transaction_values, order_id=order_ref)
    logger.info("Order %s created (%s via %s, total %s)",
                order_id, order.payment_method, transaction_values["payment_gateway"], total)
    return order_id
