import unittest
from decimal import Decimal

from storefront.domain.models import PaymentStatus
from storefront.domain.exceptions import InsufficientStock, OrderNotFound, PersistenceError, ProductNotFound
from storefront.application.create_order import CreateOrderDTO, CreateOrderUseCase, OrderLineDTO
from storefront.application.get_order import GetOrderUseCase
from storefront.application.update_payment_status import UpdatePaymentStatusUseCase

from fakes import FakeUnitOfWork, InMemoryStore, make_customer, make_product


class TestCreateOrder(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.store = InMemoryStore()
        self.uow = FakeUnitOfWork(self.store)
        self.keyboard = make_product("Keyboard", price="25000.00", stock=5)
        self.mouse = make_product("Mouse", price="12500.50", stock=3)
        for product in (self.keyboard, self.mouse):
            self.store.products[product.id] = product
        self.create_order = CreateOrderUseCase(self.uow)
        self.get_order = GetOrderUseCase(self.uow)

    def _dto(self, *lines):
        return CreateOrderDTO(
            customer=make_customer(),
            items=[OrderLineDTO(product_id=pid, quantity=qty) for pid, qty in lines]
        )

    async def test_total_is_sum_of_price_times_quantity(self):
        created = await self.create_order(self._dto((self.keyboard.id, 2), (self.mouse.id, 3)))

        self.assertEqual(created.total_amount, Decimal("25000.00") * 2 + Decimal("12500.50") * 3)
        self.assertTrue(created.order_id.startswith("ORD-"))

    async def test_fetched_order_has_same_items_and_total(self):
        created = await self.create_order(self._dto((self.keyboard.id, 2), (self.mouse.id, 1)))

        order = await self.get_order(created.order_id)
        self.assertEqual(order.total_amount, created.total_amount)
        self.assertEqual(order.payment_status, PaymentStatus.PENDING)
        self.assertEqual(
            [(i.product_id, i.product_name, i.product_price, i.quantity, i.subtotal) for i in order.items],
            [
                (self.keyboard.id, "Keyboard", Decimal("25000.00"), 2, Decimal("50000.00")),
                (self.mouse.id, "Mouse", Decimal("12500.50"), 1, Decimal("12500.50")),
            ]
        )
        self.assertEqual(sum(i.subtotal for i in order.items), order.total_amount)
        self.assertEqual(order.customer, make_customer())

    async def test_item_snapshot_survives_price_change(self):
        created = await self.create_order(self._dto((self.keyboard.id, 1)))
        self.store.products[self.keyboard.id] = self.keyboard.model_copy(update={"price": Decimal("99999.00")})

        order = await self.get_order(created.order_id)
        self.assertEqual(order.items[0].product_price, Decimal("25000.00"))
        self.assertEqual(order.total_amount, Decimal("25000.00"))

    async def test_missing_product_fails_and_persists_nothing(self):
        missing = "6f1c3c1e-0000-4000-8000-000000000000"

        with self.assertRaises(ProductNotFound) as ctx:
            await self.create_order(self._dto((self.keyboard.id, 1), (missing, 1)))

        self.assertIn(missing, ctx.exception.message)
        self.assertEqual(self.store.orders, {})
        self.assertEqual(self.store.order_items, {})

    async def test_inactive_product_is_not_found(self):
        hidden = make_product("Hidden", is_active=False)
        self.store.products[hidden.id] = hidden

        with self.assertRaises(ProductNotFound):
            await self.create_order(self._dto((hidden.id, 1)))
        self.assertEqual(self.store.orders, {})

    async def test_insufficient_stock_fails_and_persists_nothing(self):
        with self.assertRaises(InsufficientStock) as ctx:
            await self.create_order(self._dto((self.keyboard.id, 1), (self.mouse.id, 4)))

        self.assertEqual(ctx.exception.available, 3)
        self.assertEqual(ctx.exception.required, 4)
        self.assertEqual(self.store.orders, {})

    async def test_item_write_failure_removes_order(self):
        self.store.fail_on.add("order_items.add_many")

        with self.assertRaises(PersistenceError):
            await self.create_order(self._dto((self.keyboard.id, 1)))

        self.assertEqual(self.store.orders, {})
        self.assertEqual(self.store.order_items, {})

    async def test_creation_does_not_touch_stock(self):
        await self.create_order(self._dto((self.keyboard.id, 5)))

        self.assertEqual(self.store.products[self.keyboard.id].stock, 5)
        self.assertEqual(self.store.debits, [])

    async def test_stock_is_not_reserved_between_orders(self):
        # Известный пробел: остаток только проверяется, поэтому два заказа
        # на весь остаток проходят оба.
        first = await self.create_order(self._dto((self.keyboard.id, 5)))
        second = await self.create_order(self._dto((self.keyboard.id, 5)))

        self.assertNotEqual(first.order_id, second.order_id)
        self.assertEqual(len(self.store.orders), 2)


class TestGetOrder(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.store = InMemoryStore()
        self.uow = FakeUnitOfWork(self.store)

    async def test_unknown_order(self):
        with self.assertRaises(OrderNotFound):
            await GetOrderUseCase(self.uow)("ORD-0-NOPE")

    async def test_order_without_items_returns_empty_list(self):
        product = make_product()
        self.store.products[product.id] = product
        created = await CreateOrderUseCase(self.uow)(CreateOrderDTO(
            customer=make_customer(), items=[OrderLineDTO(product_id=product.id, quantity=1)]
        ))
        self.store.order_items.pop(created.order_id)

        order = await GetOrderUseCase(self.uow)(created.order_id)
        self.assertEqual(order.items, [])


class TestUpdatePaymentStatus(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.store = InMemoryStore()
        self.uow = FakeUnitOfWork(self.store)
        product = make_product()
        self.store.products[product.id] = product
        created = await CreateOrderUseCase(self.uow)(CreateOrderDTO(
            customer=make_customer(), items=[OrderLineDTO(product_id=product.id, quantity=1)]
        ))
        self.order_id = created.order_id
        self.update = UpdatePaymentStatusUseCase(self.uow)

    async def test_unconditional_update_sets_status_and_transaction(self):
        updated = await self.update(self.order_id, PaymentStatus.FAILED, transaction_id="txn-9")

        self.assertTrue(updated)
        order = self.store.orders[self.order_id]
        self.assertEqual(order.payment_status, PaymentStatus.FAILED)
        self.assertEqual(order.gateway_transaction_id, "txn-9")

    async def test_expected_status_mismatch_leaves_order_untouched(self):
        updated = await self.update(
            self.order_id, PaymentStatus.SUCCESS, expected_status=PaymentStatus.PROCESSING
        )

        self.assertFalse(updated)
        self.assertEqual(self.store.orders[self.order_id].payment_status, PaymentStatus.PENDING)

    async def test_store_error_surfaces_as_persistence_error(self):
        self.store.fail_on.add("orders.update_payment_status")

        with self.assertRaises(PersistenceError):
            await self.update(self.order_id, PaymentStatus.SUCCESS)


if __name__ == "__main__":
    unittest.main()
