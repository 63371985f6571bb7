import logging

from storefront.domain.exceptions import InsufficientStock, ProductNotFound

logger = logging.getLogger(__name__)


class InventoryLedger:
    """Списание остатков. Само по себе не идемпотентно, защита в PaymentReconciler."""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def debit(self, product_id: str, quantity: int) -> None:
        async with self._uow() as uow:
            await self.debit_in(uow, product_id, quantity)
            await uow.commit()

    async def debit_in(self, uow, product_id: str, quantity: int) -> None:
        """Списание внутри чужой транзакции; commit остаётся за вызывающим."""
        # Свежее чтение прямо перед записью; скрытые товары тоже списываются
        product = await uow.products.get_by_id(product_id, include_inactive=True)
        if not product:
            raise ProductNotFound(product_id)
        if product.stock < quantity:
            raise InsufficientStock(product.id, product.name, product.stock, quantity)

        debited = await uow.products.decrement_stock(product_id, quantity)
        if not debited:
            # Остаток ушёл между чтением и записью
            current = await uow.products.get_by_id(product_id, include_inactive=True)
            available = current.stock if current else 0
            raise InsufficientStock(product.id, product.name, available, quantity)

        logger.info(f"Остаток товара {product_id} уменьшен на {quantity}")
