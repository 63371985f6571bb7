import unittest

from storefront.domain.models import ProductFilter
from storefront.domain.exceptions import InsufficientStock, ProductNotFound, StoreUnavailable
from storefront.application.catalog import GetProductUseCase, ListCategoriesUseCase, ListProductsUseCase
from storefront.application.inventory import InventoryLedger

from fakes import FakeUnitOfWork, InMemoryStore, make_category, make_product


class TestCatalog(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.store = InMemoryStore()
        self.uow = FakeUnitOfWork(self.store)
        self.audio = make_category("Audio", icon="headphones")
        self.store.categories[self.audio.id] = self.audio
        for i in range(12):
            product = make_product(f"Speaker {i:02d}", category=self.audio)
            self.store.products[product.id] = product

    async def test_page_math(self):
        page = await ListProductsUseCase(self.uow)(ProductFilter(page=2, page_size=5))

        self.assertEqual(len(page.items), 5)
        self.assertEqual(page.total_count, 12)
        self.assertEqual(page.total_pages, 3)
        self.assertEqual(page.page, 2)

    async def test_defaults(self):
        page = await ListProductsUseCase(self.uow)(ProductFilter())

        self.assertEqual((page.page, page.page_size), (1, 10))
        self.assertEqual(len(page.items), 10)

    async def test_page_size_has_no_upper_bound(self):
        # Известный пробел: размер страницы не ограничен сверху
        page = await ListProductsUseCase(self.uow)(ProductFilter(page_size=10_000))

        self.assertEqual(len(page.items), 12)
        self.assertEqual(page.total_pages, 1)

    async def test_empty_result_has_zero_pages(self):
        page = await ListProductsUseCase(self.uow)(ProductFilter(search="nothing-like-this"))

        self.assertEqual(page.items, [])
        self.assertEqual(page.total_pages, 0)

    async def test_store_failure_is_store_unavailable(self):
        self.store.fail_on.update({"categories.list_all", "products.list_active"})

        with self.assertRaises(StoreUnavailable):
            await ListCategoriesUseCase(self.uow)()
        with self.assertRaises(StoreUnavailable):
            await ListProductsUseCase(self.uow)(ProductFilter())

    async def test_get_product_hides_inactive(self):
        hidden = make_product("Hidden", is_active=False)
        self.store.products[hidden.id] = hidden

        with self.assertRaises(ProductNotFound):
            await GetProductUseCase(self.uow)(hidden.id)


class TestInventoryLedger(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.store = InMemoryStore()
        self.uow = FakeUnitOfWork(self.store)
        self.product = make_product(stock=3)
        self.store.products[self.product.id] = self.product
        self.ledger = InventoryLedger(self.uow)

    async def test_debit(self):
        await self.ledger.debit(self.product.id, 2)

        self.assertEqual(self.store.products[self.product.id].stock, 1)

    async def test_debit_to_zero(self):
        await self.ledger.debit(self.product.id, 3)

        self.assertEqual(self.store.products[self.product.id].stock, 0)

    async def test_debit_more_than_stock(self):
        with self.assertRaises(InsufficientStock):
            await self.ledger.debit(self.product.id, 4)
        self.assertEqual(self.store.products[self.product.id].stock, 3)

    async def test_debit_unknown_product(self):
        with self.assertRaises(ProductNotFound):
            await self.ledger.debit("00000000-0000-4000-8000-000000000000", 1)

    async def test_debit_is_not_idempotent(self):
        await self.ledger.debit(self.product.id, 1)
        await self.ledger.debit(self.product.id, 1)

        self.assertEqual(self.store.products[self.product.id].stock, 1)


if __name__ == "__main__":
    unittest.main()
