from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictInt

from storefront.domain.models import PaymentStatus

T = TypeVar("T")


class ErrorBody(BaseModel):
    message: str
    code: Optional[str] = None
    details: Optional[Any] = None


class ApiResponse(BaseModel, Generic[T]):
    """Единый конверт ответа"""

    success: bool = True
    data: Optional[T] = None
    error: Optional[ErrorBody] = None


def success_response(data) -> dict:
    return {"success": True, "data": data}


def error_response(message: str, code: Optional[str] = None, details: Any = None) -> dict:
    return {"success": False, "error": {"message": message, "code": code, "details": details}}


# Каталог

class CategoryOut(BaseModel):
    id: str
    name: str
    icon: str = ""
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, category):
        return cls(id=category.id, name=category.name, icon=category.icon, created_at=category.created_at)


class ProductOut(BaseModel):
    id: str
    name: str
    description: str
    price: float
    category_id: Optional[str] = None
    image_url: Optional[str] = None
    specs: dict[str, Any]
    stock: int
    is_active: bool
    category: CategoryOut
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, product):
        if product.category:
            category = CategoryOut.from_domain(product.category)
        else:
            category = CategoryOut(id="", name="Unknown", icon="")
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            category_id=product.category_id,
            image_url=product.image_url,
            specs=product.specs,
            stock=product.stock,
            is_active=product.is_active,
            category=category,
            created_at=product.created_at,
            updated_at=product.updated_at
        )


class PaginationOut(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class ProductListOut(BaseModel):
    products: List[ProductOut]
    pagination: PaginationOut

    @classmethod
    def from_domain(cls, page):
        return cls(
            products=[ProductOut.from_domain(p) for p in page.items],
            pagination=PaginationOut(
                page=page.page,
                limit=page.page_size,
                total=page.total_count,
                totalPages=page.total_pages
            )
        )


# Заказы

class CustomerInfoIn(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=10)
    address: str = Field(min_length=10)


class OrderLineIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: UUID = Field(alias="productId")
    quantity: StrictInt = Field(ge=1)


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_info: CustomerInfoIn = Field(alias="customerInfo")
    items: List[OrderLineIn] = Field(min_length=1)


class CreateOrderOut(BaseModel):
    orderId: str
    totalAmount: float
    createdAt: datetime


class OrderItemOut(BaseModel):
    id: Optional[str] = None
    order_id: Optional[str] = None
    product_id: str
    product_name: str
    product_price: float
    quantity: int
    subtotal: float
    created_at: Optional[datetime] = None


class OrderOut(BaseModel):
    id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    customer_address: str
    total_amount: float
    payment_status: PaymentStatus
    gateway_transaction_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemOut]

    @classmethod
    def from_domain(cls, order):
        return cls(
            id=order.id,
            customer_name=order.customer.name,
            customer_email=order.customer.email,
            customer_phone=order.customer.phone,
            customer_address=order.customer.address,
            total_amount=order.total_amount,
            payment_status=order.payment_status,
            gateway_transaction_id=order.gateway_transaction_id,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[OrderItemOut(**item.model_dump()) for item in order.items]
        )


# Оплата

class CreateTransactionRequest(BaseModel):
    orderId: str = Field(min_length=1)


class CreateTransactionOut(BaseModel):
    token: str
    redirectUrl: str


class PaymentNotificationRequest(BaseModel):
    """Webhook Midtrans. Лишние поля игнорируются."""

    order_id: str
    transaction_status: str
    status_code: str
    gross_amount: str
    signature_key: str
    fraud_status: Optional[str] = None
    transaction_id: Optional[str] = None
    transaction_time: Optional[str] = None
    payment_type: Optional[str] = None


class PaymentStatusOut(BaseModel):
    orderId: str
    paymentStatus: PaymentStatus
    transactionStatus: str
    paidAt: Optional[str] = None


class MessageOut(BaseModel):
    message: str
