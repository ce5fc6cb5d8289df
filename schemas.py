# schemas.py
from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime
from decimal import Decimal

from validators import only_digits, validate_card_expiry, validate_cpf, validate_cep, validate_phone

ToppingCategory = Literal["fruit", "topping", "extra"]
PaymentMethod = Literal["pix", "credit_card"]
OrderStatusName = Literal["pending", "paid", "processing", "delivered", "cancelled"]
ReviewStatus = Literal["draft", "published", "rejected"]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ========== AUTHENTICATION SCHEMAS ==========
class AdminLogin(CamelModel):
    email: str
    password: str


class AdminUser(CamelModel):
    id: str
    email: str
    name: str
    role: str = "admin"
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


# ========== PRODUCT SCHEMAS ==========
class ProductBase(CamelModel):
    name: str
    description: str
    price: Decimal = Field(ge=0, decimal_places=2)
    size: str
    image: str
    is_active: bool = True
    stock: int = 999
    promo_badge: Optional[str] = None
    promo_end_at: Optional[datetime] = None
    highlight_order: int = 0


class ProductCreate(ProductBase):
    pass


class ProductUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    size: Optional[str] = None
    image: Optional[str] = None
    is_active: Optional[bool] = None
    stock: Optional[int] = None
    promo_badge: Optional[str] = None
    promo_end_at: Optional[datetime] = None
    highlight_order: Optional[int] = None

    @field_validator("name", "description", "price", "size", "image", "is_active", mode="before")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Campo não pode ser nulo")
        return value


class Product(ProductBase):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ========== TOPPING SCHEMAS ==========
class Topping(CamelModel):
    id: str
    name: str
    category: ToppingCategory
    price: Decimal = Decimal("0.00")
    image: Optional[str] = None
    is_active: bool = True
    stock: Optional[int] = 999
    display_order: Optional[int] = 0


# ========== ORDER SCHEMAS ==========
class ProductSnapshot(CamelModel):
    """Cart line captured at checkout; never follows later product edits."""
    product_id: str
    name: str
    price: Decimal = Field(ge=0, decimal_places=2)
    quantity: int = Field(ge=1)


class ToppingSnapshot(CamelModel):
    id: str
    name: str
    price: Decimal = Field(default=Decimal("0.00"), ge=0, decimal_places=2)
    quantity: int = Field(default=1, ge=1)
    category: ToppingCategory


class CardData(CamelModel):
    card_number: Optional[str] = None
    card_name: Optional[str] = None
    card_expiry: Optional[str] = None
    card_cvv: Optional[str] = None

    # Blank fields pass through; require_card_data reports them as missing.
    @field_validator("card_number")
    @classmethod
    def check_number(cls, value: Optional[str]) -> Optional[str]:
        if value and value.strip() and not 13 <= len(only_digits(value)) <= 19:
            raise ValueError("Número do cartão inválido")
        return value

    @field_validator("card_expiry")
    @classmethod
    def check_expiry(cls, value: Optional[str]) -> Optional[str]:
        if value and value.strip() and not validate_card_expiry(value):
            raise ValueError("Validade inválida")
        return value

    @field_validator("card_cvv")
    @classmethod
    def check_cvv(cls, value: Optional[str]) -> Optional[str]:
        if value and value.strip() and not (only_digits(value) == value.strip() and len(value.strip()) in (3, 4)):
            raise ValueError("CVV inválido")
        return value


class OrderCreate(CamelModel):
    customer_name: str = Field(min_length=3)
    customer_phone: str
    customer_email: Optional[EmailStr] = None
    customer_document: Optional[str] = None
    delivery_address: str = Field(min_length=5)
    delivery_cep: str
    delivery_city: str = Field(min_length=2)
    delivery_state: str
    delivery_complement: Optional[str] = None
    items: List[ProductSnapshot] = Field(min_length=1)
    toppings: List[ToppingSnapshot] = []
    total_amount: Decimal = Field(ge=0)
    payment_method: PaymentMethod
    card_data: Optional[CardData] = None
    source: Optional[str] = "web"
    conversion_metadata: Optional[Dict[str, Any]] = None

    @field_validator("customer_email", "customer_document", "delivery_complement", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("customer_phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        if not validate_phone(value):
            raise ValueError("Telefone inválido")
        return only_digits(value)

    @field_validator("customer_document")
    @classmethod
    def check_document(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not validate_cpf(value):
            raise ValueError("CPF inválido")
        return only_digits(value)

    @field_validator("delivery_cep")
    @classmethod
    def check_cep(cls, value: str) -> str:
        if not validate_cep(value):
            raise ValueError("CEP inválido")
        return only_digits(value)

    @field_validator("delivery_state")
    @classmethod
    def check_state(cls, value: str) -> str:
        value = value.strip().upper()
        if len(value) != 2 or not value.isalpha():
            raise ValueError("UF deve ter 2 letras")
        return value


class OrderCreated(CamelModel):
    order_id: str


class Order(CamelModel):
    id: str
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    customer_document: Optional[str] = None
    delivery_address: str
    delivery_cep: str
    delivery_city: str
    delivery_state: str
    delivery_complement: Optional[str] = None
    items: List[ProductSnapshot]
    toppings: Optional[List[ToppingSnapshot]] = None
    total_amount: Decimal
    payment_method: str
    payment_status: str = "pending"
    status: str = "pending"
    source: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderDetail(Order):
    payment_gateway: Optional[str] = None
    pix_qr_code: Optional[str] = None
    pix_qr_code_base64: Optional[str] = None
    pix_copy_paste: Optional[str] = None
    pix_expires_at: Optional[str] = None


class OrderStatusUpdate(CamelModel):
    status: OrderStatusName


# ========== TRANSACTION SCHEMAS ==========
class Transaction(CamelModel):
    id: str
    order_id: str
    payment_method: str
    payment_gateway: str
    amount: Decimal
    status: str
    gateway_txid: Optional[str] = None
    pix_qr_code: Optional[str] = None
    pix_copy_paste: Optional[str] = None
    pix_expires_at: Optional[str] = None
    card_data: Optional[Dict[str, Any]] = None
    card_last4: Optional[str] = None
    card_brand: Optional[str] = None
    captured_at: Optional[datetime] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaymentWebhook(CamelModel):
    txid: str
    status: str


# ========== REVIEW SCHEMAS ==========
class ReviewBase(CamelModel):
    product_id: Optional[str] = None
    customer_name: str
    rating: int = Field(ge=1, le=5)
    comment: str
    review_date: str
    photo_url: Optional[str] = None
    status: ReviewStatus = "published"


class ReviewCreate(ReviewBase):
    pass


class ReviewUpdate(CamelModel):
    product_id: Optional[str] = None
    customer_name: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = None
    review_date: Optional[str] = None
    photo_url: Optional[str] = None
    status: Optional[ReviewStatus] = None

    @field_validator("customer_name", "rating", "comment", "review_date", "status", mode="before")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Campo não pode ser nulo")
        return value


class Review(ReviewBase):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ========== ANALYTICS SCHEMAS ==========
class AnalyticsEventCreate(CamelModel):
    event_type: str = Field(min_length=1)
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    product_id: Optional[str] = None
    order_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class StatusCount(CamelModel):
    status: str
    count: int


class AnalyticsSummary(CamelModel):
    total_page_views: int
    total_orders: int
    total_pix_generated: int
    total_card_payments: int
    total_revenue: str
    conversion_rate: str
    orders_by_status: List[StatusCount]
    recent_orders: List[Order]


# ========== UPLOAD SCHEMAS ==========
class UploadResponse(CamelModel):
    url: str


class MessageResponse(CamelModel):
    message: str
