from fastapi import APIRouter, Depends, Header, HTTPException
from typing import Optional
import hmac
import logging

import config
import crud
import schemas
from database import get_db
from order_flow import apply_gateway_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("/pagouai/webhook")
async def pagouai_webhook(
    notification: schemas.PaymentWebhook,
    x_webhook_token: Optional[str] = Header(default=None),
    db=Depends(get_db),
):
    """Payment confirmation pushed by Pagou.ai."""
    if not config.PAGOUAI_WEBHOOK_SECRET:
        raise HTTPException(status_code=503, detail="Webhook não configurado")
    if not x_webhook_token or not hmac.compare_digest(x_webhook_token, config.PAGOUAI_WEBHOOK_SECRET):
        raise HTTPException(status_code=401, detail="Token inválido")

    transaction = await crud.get_transaction_by_txid(db, notification.txid)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transação não encontrada")
    order = await crud.get_order(db, transaction["order_id"])

    changes = apply_gateway_status(order, transaction, notification.status)
    await crud.apply_payment_changes(db, order, transaction, changes)
    logger.info("Webhook %s for txid %s applied: %s", notification.status, notification.txid, changes)

    updated = await crud.get_order(db, order["id"])
    return {
        "orderId": updated["id"],
        "status": updated["status"],
        "paymentStatus": updated["payment_status"],
    }
