import logging
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.domain.exceptions import PersistenceError
from storefront.infrastructure.repositories import (
    SQLAlchemyCategoryRepository,
    SQLAlchemyProductRepository,
    SQLAlchemyOrderRepository,
    SQLAlchemyOrderItemRepository
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def __call__(self):
        try:
            async with self._session_factory() as session:
                try:
                    yield _UnitOfWorkImpl(session)
                    # Если commit не вызван, rollback
                    await session.rollback()
                except Exception:
                    await session.rollback()
                    raise
        except (SQLAlchemyError, OSError) as e:
            # Ошибки БД наружу не выходят как есть
            logger.error(f"Ошибка хранилища: {e}")
            raise PersistenceError("Backing store error") from e


class _UnitOfWorkImpl:
    def __init__(self, session: AsyncSession):
        self._session = session
        self.categories = SQLAlchemyCategoryRepository(session)
        self.products = SQLAlchemyProductRepository(session)
        self.orders = SQLAlchemyOrderRepository(session)
        self.order_items = SQLAlchemyOrderItemRepository(session)

    async def commit(self):
        await self._session.commit()

    async def rollback(self):
        await self._session.rollback()
