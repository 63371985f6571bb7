import uuid
from typing import Optional, List
from datetime import datetime, timezone
from sqlalchemy import select, insert, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.domain.models import (
    Category, Product, ProductFilter, CustomerInfo, Order, OrderItem, PaymentStatus
)
from storefront.infrastructure.db_schema import categories_tbl, products_tbl, orders_tbl, order_items_tbl
from storefront.application.interfaces import (
    CategoryRepository, ProductRepository, OrderRepository, OrderItemRepository
)


class SQLAlchemyCategoryRepository(CategoryRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_all(self) -> List[Category]:
        result = await self._session.execute(
            select(categories_tbl).order_by(categories_tbl.c.name.asc())
        )
        return [
            Category(id=row.id, name=row.name, icon=row.icon or "", created_at=row.created_at)
            for row in result.fetchall()
        ]


class SQLAlchemyProductRepository(ProductRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    def _select(self):
        return (
            select(
                products_tbl,
                categories_tbl.c.name.label("category_name"),
                categories_tbl.c.icon.label("category_icon"),
            )
            .select_from(
                products_tbl.outerjoin(categories_tbl, products_tbl.c.category_id == categories_tbl.c.id)
            )
        )

    async def get_by_id(self, product_id: str, include_inactive: bool = False) -> Optional[Product]:
        stmt = self._select().where(products_tbl.c.id == product_id)
        if not include_inactive:
            stmt = stmt.where(products_tbl.c.is_active.is_(True))
        result = await self._session.execute(stmt)
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def list_active(self, flt: ProductFilter) -> tuple[List[Product], int]:
        conditions = [products_tbl.c.is_active.is_(True)]
        if flt.category:
            conditions.append(products_tbl.c.category_id == flt.category)
        if flt.search:
            conditions.append(products_tbl.c.name.ilike(f"%{flt.search}%"))

        total = await self._session.scalar(
            select(func.count()).select_from(products_tbl).where(*conditions)
        )
        result = await self._session.execute(
            self._select()
            .where(*conditions)
            .order_by(products_tbl.c.name.asc(), products_tbl.c.id.asc())
            .offset(flt.offset)
            .limit(flt.page_size)
        )
        return [self._to_domain(row) for row in result.fetchall()], total or 0

    async def decrement_stock(self, product_id: str, quantity: int) -> bool:
        stmt = (
            update(products_tbl)
            .where(products_tbl.c.id == product_id, products_tbl.c.stock >= quantity)
            .values(
                stock=products_tbl.c.stock - quantity,
                updated_at=datetime.now(timezone.utc)
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    def _to_domain(self, row) -> Product:
        """Трансформация DB → Domain"""
        category = None
        if row.category_id and row.category_name is not None:
            category = Category(id=row.category_id, name=row.category_name, icon=row.category_icon or "")
        return Product(
            id=row.id,
            name=row.name,
            description=row.description or "",
            price=row.price,
            category_id=row.category_id,
            image_url=row.image_url,
            specs=row.specs or {},
            stock=row.stock,
            is_active=row.is_active,
            category=category,
            created_at=row.created_at,
            updated_at=row.updated_at
        )


class SQLAlchemyOrderRepository(OrderRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        result = await self._session.execute(
            select(orders_tbl).where(orders_tbl.c.id == order_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def create(self, order: Order) -> None:
        stmt = insert(orders_tbl).values(
            id=order.id,
            customer_name=order.customer.name,
            customer_email=order.customer.email,
            customer_phone=order.customer.phone,
            customer_address=order.customer.address,
            total_amount=order.total_amount,
            payment_status=order.payment_status,
            gateway_transaction_id=order.gateway_transaction_id,
            created_at=order.created_at,
            updated_at=order.updated_at
        )
        await self._session.execute(stmt)

    async def delete(self, order_id: str) -> None:
        await self._session.execute(
            delete(order_items_tbl).where(order_items_tbl.c.order_id == order_id)
        )
        await self._session.execute(
            delete(orders_tbl).where(orders_tbl.c.id == order_id)
        )

    async def update_payment_status(
        self,
        order_id: str,
        status: PaymentStatus,
        transaction_id: Optional[str] = None,
        expected_status: Optional[PaymentStatus] = None,
    ) -> bool:
        values = {"payment_status": status, "updated_at": datetime.now(timezone.utc)}
        if transaction_id:
            values["gateway_transaction_id"] = transaction_id

        stmt = update(orders_tbl).where(orders_tbl.c.id == order_id)
        if expected_status is not None:
            stmt = stmt.where(orders_tbl.c.payment_status == expected_status)
        result = await self._session.execute(stmt.values(**values))
        return result.rowcount == 1

    def _to_domain(self, row) -> Order:
        """Трансформация DB → Domain"""
        return Order(
            id=row.id,
            customer=CustomerInfo(
                name=row.customer_name,
                email=row.customer_email,
                phone=row.customer_phone,
                address=row.customer_address
            ),
            total_amount=row.total_amount,
            payment_status=PaymentStatus(row.payment_status),
            gateway_transaction_id=row.gateway_transaction_id,
            created_at=row.created_at,
            updated_at=row.updated_at
        )


class SQLAlchemyOrderItemRepository(OrderItemRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def add_many(self, order_id: str, items: List[OrderItem]) -> None:
        if not items:
            return
        now = datetime.now(timezone.utc)
        await self._session.execute(
            insert(order_items_tbl),
            [
                {
                    "id": str(uuid.uuid4()),
                    "order_id": order_id,
                    "position": position,
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "product_price": item.product_price,
                    "quantity": item.quantity,
                    "subtotal": item.subtotal,
                    "created_at": now
                }
                for position, item in enumerate(items)
            ]
        )

    async def list_for_order(self, order_id: str) -> List[OrderItem]:
        result = await self._session.execute(
            select(order_items_tbl)
            .where(order_items_tbl.c.order_id == order_id)
            .order_by(order_items_tbl.c.position.asc())
        )
        return [
            OrderItem(
                id=row.id,
                order_id=row.order_id,
                product_id=row.product_id,
                product_name=row.product_name,
                product_price=row.product_price,
                quantity=row.quantity,
                subtotal=row.subtotal,
                created_at=row.created_at
            )
            for row in result.fetchall()
        ]
