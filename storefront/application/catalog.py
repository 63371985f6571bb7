import logging
from typing import List

from storefront.domain.models import Category, Product, ProductFilter, ProductPage
from storefront.domain.exceptions import PersistenceError, ProductNotFound, StoreUnavailable

logger = logging.getLogger(__name__)


class ListCategoriesUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self) -> List[Category]:
        try:
            async with self._uow() as uow:
                return await uow.categories.list_all()
        except PersistenceError as e:
            logger.error(f"Не удалось получить категории: {e}")
            raise StoreUnavailable("Failed to retrieve categories") from e


class ListProductsUseCase:
    """Только активные товары, фильтр по категории и подстроке в названии."""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, flt: ProductFilter) -> ProductPage:
        try:
            async with self._uow() as uow:
                items, total = await uow.products.list_active(flt)
        except PersistenceError as e:
            logger.error(f"Не удалось получить товары: {e}")
            raise StoreUnavailable("Failed to retrieve products") from e
        return ProductPage.build(items, flt, total)


class GetProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: str) -> Product:
        async with self._uow() as uow:
            product = await uow.products.get_by_id(product_id)
        if not product:
            raise ProductNotFound(product_id)
        return product
