import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status

from storefront.container import Container
from storefront.domain.models import CustomerInfo, ProductFilter
from storefront.application.create_order import CreateOrderDTO, OrderLineDTO
from storefront.application.process_notification import PaymentNotificationDTO
from storefront.presentation.schemas import (
    ApiResponse, CategoryOut, ProductOut, ProductListOut, CreateOrderRequest, CreateOrderOut,
    OrderOut, CreateTransactionRequest, CreateTransactionOut, PaymentNotificationRequest,
    PaymentStatusOut, MessageOut, success_response
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_container(request: Request) -> Container:
    return request.app.state.container


# Каталог

@router.get("/categories", response_model=ApiResponse[List[CategoryOut]])
async def list_categories(container: Container = Depends(get_container)):
    """Категории по алфавиту"""
    categories = await container.list_categories()
    return success_response([CategoryOut.from_domain(c) for c in categories])


@router.get("/products", response_model=ApiResponse[ProductListOut])
async def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    container: Container = Depends(get_container)
):
    """Список активных товаров с фильтрами и пагинацией"""
    flt = ProductFilter(category=category or None, search=search or None, page=page, page_size=limit)
    result = await container.list_products(flt)
    return success_response(ProductListOut.from_domain(result))


@router.get("/products/{product_id}", response_model=ApiResponse[ProductOut])
async def get_product(product_id: str, container: Container = Depends(get_container)):
    product = await container.get_product(product_id)
    return success_response(ProductOut.from_domain(product))


# Заказы

@router.post(
    "/orders",
    response_model=ApiResponse[CreateOrderOut],
    status_code=status.HTTP_201_CREATED
)
async def create_order(request: CreateOrderRequest, container: Container = Depends(get_container)):
    """Создать новый заказ"""
    dto = CreateOrderDTO(
        customer=CustomerInfo(**request.customer_info.model_dump()),
        items=[OrderLineDTO(product_id=str(item.product_id), quantity=item.quantity) for item in request.items]
    )
    created = await container.create_order(dto)
    return success_response(CreateOrderOut(
        orderId=created.order_id,
        totalAmount=created.total_amount,
        createdAt=created.created_at
    ))


@router.get("/orders/{order_id}", response_model=ApiResponse[OrderOut])
async def get_order(order_id: str, container: Container = Depends(get_container)):
    """Получить заказ с позициями"""
    order = await container.get_order(order_id)
    return success_response(OrderOut.from_domain(order))


# Оплата

@router.post("/payment/create-transaction", response_model=ApiResponse[CreateTransactionOut])
async def create_transaction(request: CreateTransactionRequest, container: Container = Depends(get_container)):
    transaction = await container.create_transaction(request.orderId)
    return success_response(CreateTransactionOut(token=transaction.token, redirectUrl=transaction.redirect_url))


@router.post("/payment/notification", response_model=ApiResponse[MessageOut])
async def payment_notification(payload: Any = Body(None), container: Container = Depends(get_container)):
    """Webhook Midtrans. Всегда 200, иначе шлюз будет слать повторно."""
    order_id = payload.get("order_id") if isinstance(payload, dict) else None
    logger.info(f"Получено уведомление Midtrans для заказа {order_id}")
    try:
        notification = PaymentNotificationRequest.model_validate(payload)
        await container.process_notification(PaymentNotificationDTO(**notification.model_dump()))
    except Exception as e:
        logger.error(f"Ошибка обработки уведомления для заказа {order_id}: {e}")
        return success_response(MessageOut(message="Notification received"))
    return success_response(MessageOut(message="Notification processed successfully"))


@router.get("/payment/status/{order_id}", response_model=ApiResponse[PaymentStatusOut])
async def payment_status(order_id: str, container: Container = Depends(get_container)):
    view = await container.check_payment_status(order_id)
    return success_response(PaymentStatusOut(
        orderId=view.order_id,
        paymentStatus=view.payment_status,
        transactionStatus=view.transaction_status,
        paidAt=view.paid_at
    ))
