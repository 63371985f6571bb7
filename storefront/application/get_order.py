from storefront.domain.models import Order
from storefront.domain.exceptions import OrderNotFound


class GetOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: str) -> Order:
        async with self._uow() as uow:
            order = await uow.orders.get_by_id(order_id)
            if not order:
                raise OrderNotFound(order_id)
            items = await uow.order_items.list_for_order(order_id)
        return order.model_copy(update={"items": items})
