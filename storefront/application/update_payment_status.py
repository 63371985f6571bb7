import logging
from typing import Optional

from storefront.domain.models import PaymentStatus

logger = logging.getLogger(__name__)


class UpdatePaymentStatusUseCase:
    """Запись статуса оплаты без бизнес-правил.

    Если передан expected_status, запись выполняется только при совпадении
    текущего статуса (compare-and-set). Возвращает True, если строка обновлена.
    """

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(
        self,
        order_id: str,
        status: PaymentStatus,
        transaction_id: Optional[str] = None,
        expected_status: Optional[PaymentStatus] = None,
    ) -> bool:
        async with self._uow() as uow:
            updated = await uow.orders.update_payment_status(
                order_id, status, transaction_id=transaction_id, expected_status=expected_status
            )
            await uow.commit()

        if updated:
            logger.info(f"Статус оплаты заказа {order_id} -> {status.value}")
        return updated
