from abc import ABC, abstractmethod
from typing import Optional, List

from pydantic import BaseModel

from storefront.domain.models import (
    Category, Product, ProductFilter, Order, OrderItem, PaymentStatus
)


class CategoryRepository(ABC):
    @abstractmethod
    async def list_all(self) -> List[Category]:
        pass


class ProductRepository(ABC):
    @abstractmethod
    async def get_by_id(self, product_id: str, include_inactive: bool = False) -> Optional[Product]:
        pass

    @abstractmethod
    async def list_active(self, flt: ProductFilter) -> tuple[List[Product], int]:
        pass

    @abstractmethod
    async def decrement_stock(self, product_id: str, quantity: int) -> bool:
        """Списывает остаток, только если его хватает. False, если не списано."""
        pass


class OrderRepository(ABC):
    @abstractmethod
    async def get_by_id(self, order_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def create(self, order: Order) -> None:
        pass

    @abstractmethod
    async def delete(self, order_id: str) -> None:
        pass

    @abstractmethod
    async def update_payment_status(
        self,
        order_id: str,
        status: PaymentStatus,
        transaction_id: Optional[str] = None,
        expected_status: Optional[PaymentStatus] = None,
    ) -> bool:
        pass


class OrderItemRepository(ABC):
    @abstractmethod
    async def add_many(self, order_id: str, items: List[OrderItem]) -> None:
        pass

    @abstractmethod
    async def list_for_order(self, order_id: str) -> List[OrderItem]:
        pass


class UnitOfWork(ABC):
    @property
    @abstractmethod
    def categories(self) -> CategoryRepository:
        pass

    @property
    @abstractmethod
    def products(self) -> ProductRepository:
        pass

    @property
    @abstractmethod
    def orders(self) -> OrderRepository:
        pass

    @property
    @abstractmethod
    def order_items(self) -> OrderItemRepository:
        pass

    @abstractmethod
    async def __call__(self):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass


class GatewayTransaction(BaseModel):
    token: str
    redirect_url: str


class GatewayStatus(BaseModel):
    transaction_status: str
    transaction_id: Optional[str] = None
    fraud_status: Optional[str] = None
    settlement_time: Optional[str] = None


class PaymentGateway(ABC):
    @abstractmethod
    async def create_transaction(self, order: Order) -> GatewayTransaction:
        pass

    @abstractmethod
    async def query_status(self, order_id: str) -> GatewayStatus:
        pass

    @abstractmethod
    def verify_signature(self, order_id: str, status_code: str, gross_amount: str, signature_key: str) -> bool:
        pass
