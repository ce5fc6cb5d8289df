# models.py
from sqlalchemy import Column, Integer, String, Numeric, Boolean, Text, DateTime, JSON, text, true
from sqlalchemy.sql import func
from database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    size = Column(String, nullable=False)  # "300ml", "500ml", "2x 300ml"
    image = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, server_default=true())
    stock = Column(Integer, server_default=text("999"))
    promo_badge = Column(String)
    promo_end_at = Column(DateTime(timezone=True))
    highlight_order = Column(Integer, server_default=text("0"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Topping(Base):
    __tablename__ = "toppings"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False)  # "fruit", "topping", "extra"
    price = Column(Numeric(10, 2), nullable=False, server_default=text("0"))
    image = Column(String)
    is_active = Column(Boolean, nullable=False, server_default=true())
    stock = Column(Integer, server_default=text("999"))
    display_order = Column(Integer, server_default=text("0"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, index=True)
    customer_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=False)
    customer_email = Column(String)
    customer_document = Column(String)  # CPF, digits only
    delivery_address = Column(Text, nullable=False)
    delivery_cep = Column(String, nullable=False)
    delivery_city = Column(String, nullable=False)
    delivery_state = Column(String(2), nullable=False)
    delivery_complement = Column(String)
    items = Column(JSON, nullable=False)  # [{productId, name, price, quantity}]
    toppings = Column(JSON)  # [{id, name, price, quantity, category}]
    total_amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String, nullable=False)  # "pix" or "credit_card"
    payment_status = Column(String, nullable=False, server_default="pending")
    status = Column(String, nullable=False, server_default="pending", index=True)
    source = Column(String, server_default="web")
    conversion_metadata = Column(JSON)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, index=True)
    order_id = Column(String(36), nullable=False, unique=True, index=True)
    payment_method = Column(String, nullable=False)
    payment_gateway = Column(String, nullable=False, server_default="mercadopago")  # "pagouai", "mock", "mercadopago"
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String, nullable=False, server_default="pending")
    gateway_txid = Column(String, index=True)
    pix_qr_code = Column(Text)
    pix_qr_code_base64 = Column(Text)
    pix_copy_paste = Column(Text)
    pix_expires_at = Column(String)
    card_data = Column(JSON)  # holder, brand, last4, expiry; never the full number or CVV
    card_last4 = Column(String(4))
    card_brand = Column(String)
    captured_at = Column(DateTime(timezone=True))
    metadata_ = Column("metadata", JSON)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class AdminUser(Base):
    __tablename__ = "admin_users"

    id = Column(String(36), primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, server_default="admin")  # "admin", "manager"
    last_login = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, index=True)
    product_id = Column(String(36))
    customer_name = Column(String, nullable=False)
    rating = Column(Integer, nullable=False)  # 1-5 stars
    comment = Column(Text, nullable=False)
    review_date = Column(String, nullable=False)
    photo_url = Column(String)
    status = Column(String, nullable=False, server_default="published")  # "draft", "published", "rejected"
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class AnalyticsEvent(Base):
    __tablename__ = "analytics_events"

    id = Column(String(36), primary_key=True, index=True)
    event_type = Column(String, nullable=False, index=True)  # "page_view", "add_to_cart", "checkout_start", ...
    user_id = Column(String)
    session_id = Column(String)
    product_id = Column(String(36))
    order_id = Column(String(36))
    metadata_ = Column("metadata", JSON)
    occurred_at = Column(DateTime(timezone=True), server_default=func.now())
