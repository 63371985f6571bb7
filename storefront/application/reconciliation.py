import logging
from typing import Optional

from pydantic import BaseModel

from storefront.domain.models import Order, PaymentStatus
from storefront.domain.exceptions import (
    InsufficientStock, OrderNotFound, PostPaymentStockShortfall, ProductNotFound
)
from storefront.application.inventory import InventoryLedger

logger = logging.getLogger(__name__)

_FAILED_TRANSACTION_STATUSES = frozenset({"cancel", "deny", "expire"})


def map_notification_status(transaction_status: str, fraud_status: Optional[str]) -> PaymentStatus:
    """Статус транзакции шлюза (webhook) -> статус оплаты заказа."""
    if transaction_status == "capture":
        return PaymentStatus.SUCCESS if fraud_status == "accept" else PaymentStatus.PENDING
    if transaction_status == "settlement":
        return PaymentStatus.SUCCESS
    if transaction_status in _FAILED_TRANSACTION_STATUSES:
        return PaymentStatus.FAILED
    return PaymentStatus.PENDING


def map_polled_status(transaction_status: str) -> PaymentStatus:
    """То же для опроса статуса: fraud-сигнала нет, capture считается успехом."""
    if transaction_status in ("capture", "settlement"):
        return PaymentStatus.SUCCESS
    if transaction_status in _FAILED_TRANSACTION_STATUSES:
        return PaymentStatus.FAILED
    return PaymentStatus.PENDING


class ReconciliationResult(BaseModel):
    order_id: str
    previous_status: PaymentStatus
    payment_status: PaymentStatus
    changed: bool = False
    stock_debited: bool = False


class PaymentReconciler:
    """Применяет переход статуса оплаты и однократно списывает остатки.

    Запись статуса идёт через compare-and-set по прежнему статусу, поэтому
    из нескольких одновременных сигналов об успехе списание выполнит ровно один.
    Переход в success и списание фиксируются одной транзакцией: при ошибке
    хранилища откатываются оба, и повторный сигнал спишет остатки заново.
    """

    def __init__(self, unit_of_work, inventory: InventoryLedger):
        self._uow = unit_of_work
        self._inventory = inventory

    async def apply(
        self,
        order_id: str,
        target: PaymentStatus,
        transaction_id: Optional[str] = None,
        current: Optional[Order] = None,
    ) -> ReconciliationResult:
        if current is None:
            current = await self._load(order_id)
        previous = current.payment_status

        if current.is_settled():
            if target != previous:
                logger.warning(
                    f"Заказ {order_id} уже в конечном статусе {previous.value}, "
                    f"сигнал {target.value} проигнорирован"
                )
            return ReconciliationResult(order_id=order_id, previous_status=previous, payment_status=previous)

        if not current.can_transition_to(target):
            logger.warning(f"Недопустимый переход {previous.value} -> {target.value} для заказа {order_id}")
            return ReconciliationResult(order_id=order_id, previous_status=previous, payment_status=previous)

        shortfalls = []
        async with self._uow() as uow:
            applied = await uow.orders.update_payment_status(
                order_id, target, transaction_id=transaction_id, expected_status=previous
            )
            if applied and target == PaymentStatus.SUCCESS:
                shortfalls = await self._debit_stock(uow, order_id)
            await uow.commit()

        if not applied:
            # Кто-то успел изменить статус между чтением и записью
            latest = await self._load(order_id)
            logger.warning(
                f"Статус заказа {order_id} изменён параллельно "
                f"({previous.value} -> {latest.payment_status.value}), переход {target.value} пропущен"
            )
            return ReconciliationResult(
                order_id=order_id, previous_status=previous, payment_status=latest.payment_status
            )

        logger.info(f"Статус оплаты заказа {order_id} -> {target.value}")
        result = ReconciliationResult(
            order_id=order_id,
            previous_status=previous,
            payment_status=target,
            changed=target != previous,
            stock_debited=target == PaymentStatus.SUCCESS,
        )
        if shortfalls:
            logger.error(f"Заказ {order_id} оплачен, но остатков не хватило: {shortfalls}")
            raise PostPaymentStockShortfall(order_id, shortfalls)
        return result

    async def _load(self, order_id: str) -> Order:
        async with self._uow() as uow:
            order = await uow.orders.get_by_id(order_id)
        if not order:
            raise OrderNotFound(order_id)
        return order

    async def _debit_stock(self, uow, order_id: str) -> list[dict]:
        """Списывает все позиции заказа; нехватку и удалённые товары возвращает списком."""
        items = await uow.order_items.list_for_order(order_id)

        shortfalls = []
        # Порядок по товару одинаков для всех заказов, блокировки строк не встают крест-накрест
        for item in sorted(items, key=lambda i: i.product_id):
            try:
                await self._inventory.debit_in(uow, item.product_id, item.quantity)
            except InsufficientStock as e:
                shortfalls.append({
                    "productId": item.product_id,
                    "required": e.required,
                    "available": e.available,
                    "reason": "insufficient_stock",
                })
            except ProductNotFound:
                shortfalls.append({
                    "productId": item.product_id,
                    "required": item.quantity,
                    "available": 0,
                    "reason": "not_found",
                })

        if not shortfalls:
            logger.info(f"Остатки списаны для заказа {order_id}")
        return shortfalls
