import logging

from storefront.domain.exceptions import OrderAlreadyPaid
from storefront.application.get_order import GetOrderUseCase
from storefront.application.interfaces import GatewayTransaction, PaymentGateway

logger = logging.getLogger(__name__)


class CreateTransactionUseCase:
    def __init__(self, unit_of_work, gateway: PaymentGateway):
        self._get_order = GetOrderUseCase(unit_of_work)
        self._gateway = gateway

    async def __call__(self, order_id: str) -> GatewayTransaction:
        order = await self._get_order(order_id)
        if order.is_paid():
            raise OrderAlreadyPaid(order_id)

        logger.info(f"Создание транзакции в шлюзе для заказа {order_id}")
        transaction = await self._gateway.create_transaction(order)
        logger.info(f"Транзакция создана для заказа {order_id}")
        return transaction
