import logging
from typing import Optional

from pydantic import BaseModel

from storefront.domain.models import PaymentStatus
from storefront.application.get_order import GetOrderUseCase
from storefront.application.interfaces import PaymentGateway
from storefront.application.reconciliation import PaymentReconciler, map_polled_status

logger = logging.getLogger(__name__)


class PaymentStatusView(BaseModel):
    order_id: str
    payment_status: PaymentStatus
    transaction_status: str
    paid_at: Optional[str] = None


class CheckPaymentStatusUseCase:
    def __init__(self, unit_of_work, gateway: PaymentGateway, reconciler: PaymentReconciler):
        self._get_order = GetOrderUseCase(unit_of_work)
        self._gateway = gateway
        self._reconciler = reconciler

    async def __call__(self, order_id: str) -> PaymentStatusView:
        order = await self._get_order(order_id)
        status = await self._gateway.query_status(order_id)
        target = map_polled_status(status.transaction_status)

        payment_status = order.payment_status
        if target != order.payment_status:
            result = await self._reconciler.apply(
                order_id, target, transaction_id=status.transaction_id, current=order
            )
            payment_status = result.payment_status
        else:
            logger.debug(f"Статус заказа {order_id} не изменился: {payment_status.value}")

        return PaymentStatusView(
            order_id=order_id,
            payment_status=payment_status,
            transaction_status=status.transaction_status,
            paid_at=status.settlement_time,
        )
