# admin_api.py
from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile, status
from typing import List, Optional
import logging

import config
import crud
import schemas
from database import get_db
from dependencies import client_ip, get_current_admin, get_payment_gateway, get_rate_limiter
from order_flow import InvalidTransition, apply_gateway_status, apply_status_change
from rate_limit import RateLimitExceeded
from uploads import save_image

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


# ========== AUTH ENDPOINTS ==========
@router.post("/login", response_model=schemas.AdminUser)
async def admin_login(
    admin_login: schemas.AdminLogin,
    request: Request,
    response: Response,
    db=Depends(get_db),
    limiter=Depends(get_rate_limiter),
):
    ip = client_ip(request)
    try:
        limiter.check(ip)
    except RateLimitExceeded as e:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Muitas tentativas. Tente novamente em 15 minutos.",
            headers={"Retry-After": str(e.retry_after)},
        )

    admin = await crud.authenticate_admin(db, admin_login.email, admin_login.password)
    if not admin:
        attempts = limiter.register_failure(ip)
        logger.warning("Failed admin login for %s from %s (%d attempts)", admin_login.email, ip, attempts)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Email ou senha incorretos")

    limiter.register_success(ip)
    await crud.update_admin_last_login(db, admin["id"])

    access_token = crud.create_access_token(data={"sub": admin["id"], "role": admin["role"]})
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=access_token,
        max_age=config.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=config.IS_PRODUCTION,
        samesite="lax",
    )
    logger.info("Admin %s logged in", admin["email"])
    return admin


@router.post("/logout", response_model=schemas.MessageResponse)
async def admin_logout(response: Response):
    response.delete_cookie(config.SESSION_COOKIE_NAME)
    return {"message": "Logout realizado com sucesso"}


@router.get("/me", response_model=schemas.AdminUser)
async def read_admin_me(current_admin=Depends(get_current_admin)):
    return current_admin


# ========== ANALYTICS ==========
@router.get("/analytics", response_model=schemas.AnalyticsSummary)
async def get_analytics(db=Depends(get_db), current_admin=Depends(get_current_admin)):
    return await crud.get_analytics_summary(db)


# ========== PRODUCT MANAGEMENT ==========
@router.get("/products", response_model=List[schemas.Product])
async def admin_read_products(db=Depends(get_db), current_admin=Depends(get_current_admin)):
    return await crud.get_products(db, active_only=False)


@router.get("/products/{product_id}", response_model=schemas.Product)
async def admin_read_product(product_id: str, db=Depends(get_db), current_admin=Depends(get_current_admin)):
    db_product = await crud.get_product(db, product_id=product_id)
    if db_product is None:
        raise HTTPException(status_code=404, detail="Produto não encontrado")
    return db_product


@router.post("/products", response_model=schemas.Product, status_code=201)
async def admin_create_product(
    product: schemas.ProductCreate,
    db=Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    return await crud.create_product(db, product)


@router.put("/products/{product_id}", response_model=schemas.Product)
async def admin_update_product(
    product_id: str,
    product_update: schemas.ProductUpdate,
    db=Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    db_product = await crud.update_product(db, product_id=product_id, product_update=product_update)
    if db_product is None:
        raise HTTPException(status_code=404, detail="Produto não encontrado")
    return db_product


@router.delete("/products/{product_id}", response_model=schemas.MessageResponse)
async def admin_delete_product(product_id: str, db=Depends(get_db), current_admin=Depends(get_current_admin)):
    if not await crud.delete_product(db, product_id):
        raise HTTPException(status_code=404, detail="Produto não encontrado")
    return {"message": "Produto deletado com sucesso"}


# ========== REVIEW MANAGEMENT ==========
@router.get("/reviews", response_model=List[schemas.Review])
async def admin_read_reviews(db=Depends(get_db), current_admin=Depends(get_current_admin)):
    return await crud.get_reviews(db, published_only=False)


@router.post("/reviews", response_model=schemas.Review, status_code=201)
async def admin_create_review(
    review: schemas.ReviewCreate,
    db=Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    return await crud.create_review(db, review)


@router.put("/reviews/{review_id}", response_model=schemas.Review)
async def admin_update_review(
    review_id: str,
    review_update: schemas.ReviewUpdate,
    db=Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    db_review = await crud.update_review(db, review_id, review_update)
    if db_review is None:
        raise HTTPException(status_code=404, detail="Avaliação não encontrada")
    return db_review


@router.delete("/reviews/{review_id}", response_model=schemas.MessageResponse)
async def admin_delete_review(review_id: str, db=Depends(get_db), current_admin=Depends(get_current_admin)):
    if not await crud.delete_review(db, review_id):
        raise HTTPException(status_code=404, detail="Avaliação não encontrada")
    return {"message": "Avaliação deletada com sucesso"}


# ========== ORDER MANAGEMENT ==========
@router.get("/orders", response_model=List[schemas.Order])
async def admin_read_orders(
    status: Optional[schemas.OrderStatusName] = None,
    skip: int = 0,
    limit: int = 100,
    db=Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    return await crud.get_orders(db, status=status, skip=skip, limit=limit)


@router.get("/orders/{order_id}", response_model=schemas.Order)
async def admin_read_order(order_id: str, db=Depends(get_db), current_admin=Depends(get_current_admin)):
    db_order = await crud.get_order(db, order_id)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Pedido não encontrado")
    return db_order


@router.patch("/orders/{order_id}/status", response_model=schemas.Order)
async def admin_update_order_status(
    order_id: str,
    status_update: schemas.OrderStatusUpdate,
    db=Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    db_order = await crud.get_order(db, order_id)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Pedido não encontrado")

    transaction = await crud.get_transaction_by_order(db, order_id)
    try:
        changes = apply_status_change(db_order, transaction, status_update.status)
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    await crud.apply_payment_changes(db, db_order, transaction or {}, changes)

    logger.info("Order %s moved %s -> %s by %s",
                order_id, db_order["status"], changes["order"]["status"], current_admin["email"])
    return await crud.get_order(db, order_id)


# ========== TRANSACTIONS ==========
@router.get("/transactions", response_model=List[schemas.Transaction])
async def admin_read_transactions(
    skip: int = 0,
    limit: int = 100,
    db=Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    return await crud.get_transactions(db, skip=skip, limit=limit)


@router.post("/transactions/{transaction_id}/sync", response_model=schemas.Transaction)
async def admin_sync_transaction(
    transaction_id: str,
    db=Depends(get_db),
    gateway=Depends(get_payment_gateway),
    current_admin=Depends(get_current_admin),
):
    """Ask the PIX provider for the current status and apply it."""
    transaction = await crud.get_transaction(db, transaction_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transação não encontrada")
    if transaction["payment_gateway"] != "pagouai" or not transaction["gateway_txid"]:
        raise HTTPException(status_code=400, detail="Transação sem cobrança na Pagou.ai")

    remote = await gateway.check_payment_status(transaction["gateway_txid"])
    if remote is None:
        raise HTTPException(status_code=502, detail="Não foi possível consultar a Pagou.ai")

    order = await crud.get_order(db, transaction["order_id"])
    changes = apply_gateway_status(order, transaction, remote.get("status", ""))
    await crud.apply_payment_changes(db, order, transaction, changes)
    return await crud.get_transaction(db, transaction_id)


# ========== UPLOADS ==========
@router.post("/upload-image", response_model=schemas.UploadResponse)
async def upload_product_image(image: UploadFile = File(...), current_admin=Depends(get_current_admin)):
    return {"url": await save_image(image, "product_images")}


@router.post("/upload-review-image", response_model=schemas.UploadResponse)
async def upload_review_image(image: UploadFile = File(...), current_admin=Depends(get_current_admin)):
    return {"url": await save_image(image, "reviews")}
