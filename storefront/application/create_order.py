import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List

from pydantic import BaseModel

from storefront.domain.models import CustomerInfo, Order, OrderItem, PaymentStatus, generate_order_id
from storefront.domain.exceptions import InsufficientStock, PersistenceError, ProductNotFound


logger = logging.getLogger(__name__)


class OrderLineDTO(BaseModel):
    product_id: str
    quantity: int


class CreateOrderDTO(BaseModel):
    customer: CustomerInfo
    items: List[OrderLineDTO]


class CreatedOrder(BaseModel):
    order_id: str
    total_amount: Decimal
    created_at: datetime


class CreateOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_data: CreateOrderDTO) -> CreatedOrder:
        order_id = generate_order_id()
        logger.info(f"Создание заказа {order_id} для {order_data.customer.email}")

        # 1. Проверка каталога. Остаток только проверяется, не резервируется:
        # списание произойдёт при успешной оплате, до неё товар можно перепродать.
        items: List[OrderItem] = []
        total_amount = Decimal("0")
        async with self._uow() as uow:
            for line in order_data.items:
                product = await uow.products.get_by_id(line.product_id)
                if not product:
                    raise ProductNotFound(line.product_id)
                if product.stock < line.quantity:
                    raise InsufficientStock(product.id, product.name, product.stock, line.quantity)

                item = OrderItem.from_product(product, line.quantity)
                total_amount += item.subtotal
                items.append(item)

        # 2. Запись заказа
        now = datetime.now(timezone.utc)
        order = Order(
            id=order_id,
            customer=order_data.customer,
            total_amount=total_amount,
            payment_status=PaymentStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        async with self._uow() as uow:
            await uow.orders.create(order)
            await uow.commit()

        # 3. Запись позиций; при ошибке компенсирующее удаление заказа
        try:
            async with self._uow() as uow:
                await uow.order_items.add_many(order_id, items)
                await uow.commit()
        except Exception as e:
            logger.error(f"Ошибка записи позиций заказа {order_id}, удаляем заказ: {e}")
            await self._compensate(order_id)
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError("Failed to create order") from e

        logger.info(f"Заказ создан: {order_id}, сумма {total_amount}")
        return CreatedOrder(order_id=order_id, total_amount=total_amount, created_at=order.created_at)

    async def _compensate(self, order_id: str) -> None:
        try:
            async with self._uow() as uow:
                await uow.orders.delete(order_id)
                await uow.commit()
            logger.info(f"Заказ {order_id} удалён (компенсация)")
        except PersistenceError as e:
            logger.error(f"Не удалось удалить заказ {order_id} без позиций: {e}")
