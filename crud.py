# crud.py
from sqlalchemy import func, select, update, delete, distinct
from databases import Database
from models import Product, Topping, Order, Transaction, AdminUser, Review, AnalyticsEvent
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional, List
import hashlib
import hmac
import json
import secrets
import uuid
import jwt

import config
import schemas

products_table = Product.__table__
toppings_table = Topping.__table__
orders_table = Order.__table__
transactions_table = Transaction.__table__
admin_users_table = AdminUser.__table__
reviews_table = Review.__table__
analytics_events_table = AnalyticsEvent.__table__

JSON_COLUMNS = {"items", "toppings", "conversion_metadata", "card_data", "metadata"}


def new_id() -> str:
    return str(uuid.uuid4())


def _row(record, table) -> Optional[dict]:
    if record is None:
        return None
    data = {column.name: record[column.name] for column in table.columns}
    for key in JSON_COLUMNS.intersection(data):
        if isinstance(data[key], str):
            data[key] = json.loads(data[key])
    return data


def _now():
    return datetime.now(timezone.utc)


# ========== PASSWORD HASHING ==========
def get_password_hash(password: str, salt: Optional[str] = None,
                      iterations: int = config.PASSWORD_HASH_ITERATIONS) -> str:
    """PBKDF2-SHA256, stored as pbkdf2_sha256$<iterations>$<salt>$<hex digest>"""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations).hex()
    return f"pbkdf2_sha256${iterations}${salt}${digest}"


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        algorithm, iterations, salt, _ = password_hash.split("$")
    except (AttributeError, ValueError):
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    expected = get_password_hash(plain_password, salt=salt, iterations=int(iterations))
    return hmac.compare_digest(expected, password_hash)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = _now() + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


# ========== ADMIN CRUD ==========
def _public_admin(admin: Optional[dict]) -> Optional[dict]:
    if admin is None:
        return None
    admin = dict(admin)
    admin.pop("password_hash", None)
    return admin


async def get_admin_by_email(db: Database, email: str) -> Optional[dict]:
    query = select(admin_users_table).where(admin_users_table.c.email == email.strip().lower())
    return _row(await db.fetch_one(query), admin_users_table)


async def get_admin_user(db: Database, admin_id: str) -> Optional[dict]:
    query = select(admin_users_table).where(admin_users_table.c.id == admin_id)
    return _public_admin(_row(await db.fetch_one(query), admin_users_table))


async def authenticate_admin(db: Database, email: str, password: str) -> Optional[dict]:
    """Return the admin (without the hash) or None on bad credentials."""
    admin = await get_admin_by_email(db, email)
    if not admin or not verify_password(password, admin.get("password_hash") or ""):
        return None
    return _public_admin(admin)


async def create_admin_user(db: Database, email: str, password: str, name: str, role: str = "admin") -> dict:
    admin_id = new_id()
    query = admin_users_table.insert().values(
        id=admin_id,
        email=email.strip().lower(),
        password_hash=get_password_hash(password),
        name=name,
        role=role,
    )
    await db.execute(query)
    return await get_admin_user(db, admin_id)


async def update_admin_last_login(db: Database, admin_id: str):
    query = update(admin_users_table).where(admin_users_table.c.id == admin_id).values(last_login=_now())
    await db.execute(query)


# ========== PRODUCT CRUD ==========
async def get_products(db: Database, active_only: bool = True) -> List[dict]:
    query = select(products_table)
    if active_only:
        query = query.where(products_table.c.is_active == True)  # noqa: E712
    query = query.order_by(products_table.c.highlight_order.desc(), products_table.c.name)
    results = await db.fetch_all(query)
    return [_row(product, products_table) for product in results]


async def get_product(db: Database, product_id: str) -> Optional[dict]:
    query = select(products_table).where(products_table.c.id == product_id)
    return _row(await db.fetch_one(query), products_table)


async def create_product(db: Database, product: schemas.ProductCreate) -> dict:
    product_id = new_id()
    query = products_table.insert().values(id=product_id, **product.model_dump())
    await db.execute(query)
    return await get_product(db, product_id)


async def update_product(db: Database, product_id: str, product_update: schemas.ProductUpdate) -> Optional[dict]:
    product = await get_product(db, product_id)
    if not product:
        return None

    update_data = product_update.model_dump(exclude_unset=True)
    if update_data:
        query = update(products_table).where(products_table.c.id == product_id).values(**update_data)
        await db.execute(query)

    return await get_product(db, product_id)


async def delete_product(db: Database, product_id: str) -> bool:
    if not await get_product(db, product_id):
        return False
    await db.execute(delete(products_table).where(products_table.c.id == product_id))
    return True


# ========== TOPPING CRUD ==========
async def get_toppings(db: Database, active_only: bool = True) -> List[dict]:
    query = select(toppings_table)
    if active_only:
        query = query.where(toppings_table.c.is_active == True)  # noqa: E712
    query = query.order_by(toppings_table.c.category, toppings_table.c.display_order)
    results = await db.fetch_all(query)
    return [_row(topping, toppings_table) for topping in results]


async def create_topping(db: Database, name: str, category: str, price: Decimal = Decimal("0.00"),
                         display_order: int = 0, stock: int = 999, is_active: bool = True) -> str:
    topping_id = new_id()
    query = toppings_table.insert().values(
        id=topping_id,
        name=name,
        category=category,
        price=price,
        display_order=display_order,
        stock=stock,
        is_active=is_active,
    )
    await db.execute(query)
    return topping_id


# ========== REVIEW CRUD ==========
async def get_reviews(db: Database, published_only: bool = True) -> List[dict]:
    query = select(reviews_table)
    if published_only:
        query = query.where(reviews_table.c.status == "published")
    query = query.order_by(reviews_table.c.created_at.desc())
    results = await db.fetch_all(query)
    return [_row(review, reviews_table) for review in results]


async def get_review(db: Database, review_id: str) -> Optional[dict]:
    query = select(reviews_table).where(reviews_table.c.id == review_id)
    return _row(await db.fetch_one(query), reviews_table)


async def create_review(db: Database, review: schemas.ReviewCreate) -> dict:
    review_id = new_id()
    query = reviews_table.insert().values(id=review_id, **review.model_dump())
    await db.execute(query)
    return await get_review(db, review_id)


async def update_review(db: Database, review_id: str, review_update: schemas.ReviewUpdate) -> Optional[dict]:
    if not await get_review(db, review_id):
        return None

    update_data = review_update.model_dump(exclude_unset=True)
    if update_data:
        query = update(reviews_table).where(reviews_table.c.id == review_id).values(**update_data)
        await db.execute(query)

    return await get_review(db, review_id)


async def delete_review(db: Database, review_id: str) -> bool:
    if not await get_review(db, review_id):
        return False
    await db.execute(delete(reviews_table).where(reviews_table.c.id == review_id))
    return True


# ========== ORDER CRUD ==========
async def create_order_with_transaction(db: Database, order_values: dict, transaction_values: dict,
                                        order_id: Optional[str] = None) -> str:
    """Insert an order and its single transaction atomically. Returns the order id."""
    order_id = order_id or new_id()
    async with db.transaction():
        await db.execute(orders_table.insert().values(id=order_id, **order_values))
        await db.execute(
            transactions_table.insert().values(id=new_id(), order_id=order_id, **transaction_values)
        )
    return order_id


async def get_order(db: Database, order_id: str) -> Optional[dict]:
    query = select(orders_table).where(orders_table.c.id == order_id)
    return _row(await db.fetch_one(query), orders_table)


async def get_orders(db: Database, status: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[dict]:
    query = select(orders_table)
    if status:
        query = query.where(orders_table.c.status == status)
    query = query.order_by(orders_table.c.created_at.desc()).offset(skip).limit(limit)
    results = await db.fetch_all(query)
    return [_row(order, orders_table) for order in results]


async def update_order(db: Database, order_id: str, values: dict) -> Optional[dict]:
    if values:
        query = update(orders_table).where(orders_table.c.id == order_id).values(**values)
        await db.execute(query)
    return await get_order(db, order_id)


# ========== TRANSACTION CRUD ==========
async def get_transactions(db: Database, skip: int = 0, limit: int = 100) -> List[dict]:
    query = select(transactions_table).order_by(transactions_table.c.created_at.desc()).offset(skip).limit(limit)
    results = await db.fetch_all(query)
    return [_row(transaction, transactions_table) for transaction in results]


async def get_transaction(db: Database, transaction_id: str) -> Optional[dict]:
    query = select(transactions_table).where(transactions_table.c.id == transaction_id)
    return _row(await db.fetch_one(query), transactions_table)


async def get_transaction_by_order(db: Database, order_id: str) -> Optional[dict]:
    query = select(transactions_table).where(transactions_table.c.order_id == order_id)
    return _row(await db.fetch_one(query), transactions_table)


async def get_transaction_by_txid(db: Database, txid: str) -> Optional[dict]:
    query = select(transactions_table).where(transactions_table.c.gateway_txid == txid)
    return _row(await db.fetch_one(query), transactions_table)


async def update_transaction(db: Database, transaction_id: str, values: dict) -> Optional[dict]:
    if values:
        query = update(transactions_table).where(transactions_table.c.id == transaction_id).values(**values)
        await db.execute(query)
    return await get_transaction(db, transaction_id)


async def apply_payment_changes(db: Database, order: dict, transaction: dict, changes: dict):
    """Persist the order/transaction updates worked out by order_flow."""
    async with db.transaction():
        if changes["transaction"]:
            await update_transaction(db, transaction["id"], changes["transaction"])
        if changes["order"]:
            await update_order(db, order["id"], changes["order"])


# ========== ANALYTICS ==========
async def create_analytics_event(db: Database, event: schemas.AnalyticsEventCreate) -> str:
    event_id = new_id()
    query = analytics_events_table.insert().values(id=event_id, **event.model_dump())
    await db.execute(query)
    return event_id


async def get_analytics_summary(db: Database) -> dict:
    total_orders = await db.fetch_val(select(func.count()).select_from(orders_table)) or 0

    total_revenue = await db.fetch_val(select(func.sum(orders_table.c.total_amount))) or 0
    total_revenue = Decimal(str(total_revenue)).quantize(Decimal("0.01"))

    total_pix = await db.fetch_val(
        select(func.count()).select_from(transactions_table).where(transactions_table.c.payment_method == "pix")
    ) or 0
    total_card = await db.fetch_val(
        select(func.count()).select_from(transactions_table)
        .where(transactions_table.c.payment_method == "credit_card")
    ) or 0

    page_views = analytics_events_table.c.event_type == "page_view"
    total_page_views = await db.fetch_val(
        select(func.count()).select_from(analytics_events_table).where(page_views)
    ) or 0
    visiting_sessions = await db.fetch_val(
        select(func.count(distinct(analytics_events_table.c.session_id))).where(page_views)
    ) or 0
    conversion_rate = f"{(total_orders / visiting_sessions * 100):.1f}%" if visiting_sessions else "0%"

    status_rows = await db.fetch_all(
        select(orders_table.c.status, func.count().label("count"))
        .group_by(orders_table.c.status)
        .order_by(orders_table.c.status)
    )
    orders_by_status = [{"status": row["status"], "count": row["count"]} for row in status_rows]

    return {
        "total_page_views": total_page_views,
        "total_orders": total_orders,
        "total_pix_generated": total_pix,
        "total_card_payments": total_card,
        "total_revenue": f"{total_revenue:.2f}",
        "conversion_rate": conversion_rate,
        "orders_by_status": orders_by_status,
        "recent_orders": await get_orders(db, limit=10),
    }
