from fastapi import APIRouter, Depends, HTTPException
import logging

from database import get_db
from dependencies import get_payment_gateway
from checkout import place_order
import crud
import schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["orders"])

PIX_FIELDS = ("payment_gateway", "pix_qr_code", "pix_qr_code_base64", "pix_copy_paste", "pix_expires_at")


@router.post("/orders", response_model=schemas.OrderCreated)
async def create_order(order: schemas.OrderCreate, db=Depends(get_db), gateway=Depends(get_payment_gateway)):
    logger.info("Creating %s order for %s (%d items)", order.payment_method, order.customer_name, len(order.items))
    order_id = await place_order(db, gateway, order)
    return {"order_id": order_id}


@router.get("/orders/{order_id}", response_model=schemas.OrderDetail)
async def read_order(order_id: str, db=Depends(get_db)):
    db_order = await crud.get_order(db, order_id)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Pedido não encontrado")

    transaction = await crud.get_transaction_by_order(db, order_id) or {}
    return {**db_order, **{field: transaction.get(field) for field in PIX_FIELDS}}
