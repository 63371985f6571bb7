import math
import secrets
import string
import time
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"
    # Объявлен, но ни один статус шлюза в него не переводит (expire -> failed).
    EXPIRED = "expired"


TERMINAL_STATUSES = frozenset({PaymentStatus.SUCCESS, PaymentStatus.FAILED, PaymentStatus.EXPIRED})

_ALLOWED_TRANSITIONS = {
    PaymentStatus.PENDING: {
        PaymentStatus.PENDING,
        PaymentStatus.PROCESSING,
        PaymentStatus.SUCCESS,
        PaymentStatus.FAILED,
        PaymentStatus.EXPIRED,
    },
    PaymentStatus.PROCESSING: {
        PaymentStatus.PROCESSING,
        PaymentStatus.SUCCESS,
        PaymentStatus.FAILED,
        PaymentStatus.EXPIRED,
    },
}


class Category(BaseModel):
    """Value Object: категория каталога"""
    id: str
    name: str
    icon: str = ""
    created_at: Optional[datetime] = None


class Product(BaseModel):
    id: str
    name: str
    description: str = ""
    price: Decimal
    category_id: Optional[str] = None
    image_url: Optional[str] = None
    specs: dict[str, Any] = Field(default_factory=dict)
    stock: int
    is_active: bool = True
    category: Optional[Category] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductFilter(BaseModel):
    category: Optional[str] = None
    search: Optional[str] = None
    page: int = 1
    # Верхняя граница не задана: клиент может запросить сколько угодно строк.
    page_size: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class ProductPage(BaseModel):
    items: list[Product]
    page: int
    page_size: int
    total_count: int
    total_pages: int

    @classmethod
    def build(cls, items: list[Product], flt: ProductFilter, total_count: int) -> "ProductPage":
        return cls(
            items=items,
            page=flt.page,
            page_size=flt.page_size,
            total_count=total_count,
            total_pages=math.ceil(total_count / flt.page_size),
        )


class CustomerInfo(BaseModel):
    """Снимок данных покупателя на момент заказа"""
    name: str
    email: str
    phone: str
    address: str


class OrderItem(BaseModel):
    id: Optional[str] = None
    order_id: Optional[str] = None
    product_id: str
    product_name: str
    product_price: Decimal
    quantity: int
    subtotal: Decimal
    created_at: Optional[datetime] = None

    @classmethod
    def from_product(cls, product: Product, quantity: int) -> "OrderItem":
        return cls(
            product_id=product.id,
            product_name=product.name,
            product_price=product.price,
            quantity=quantity,
            subtotal=product.price * quantity,
        )


class Order(BaseModel):
    """Domain Entity: заказ"""
    id: str
    customer: CustomerInfo
    total_amount: Decimal
    payment_status: PaymentStatus = PaymentStatus.PENDING
    gateway_transaction_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: list[OrderItem] = Field(default_factory=list)

    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.SUCCESS

    def is_settled(self) -> bool:
        """Бизнес-правило: success/failed/expired больше не меняются"""
        return self.payment_status in TERMINAL_STATUSES

    def can_transition_to(self, target: PaymentStatus) -> bool:
        return target in _ALLOWED_TRANSITIONS.get(self.payment_status, set())


def generate_order_id() -> str:
    alphabet = string.ascii_uppercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(7))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"
