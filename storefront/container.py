from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from storefront.config import Settings
from storefront.database import build_engine, build_session_factory
from storefront.application.interfaces import PaymentGateway
from storefront.application.catalog import ListCategoriesUseCase, ListProductsUseCase, GetProductUseCase
from storefront.application.inventory import InventoryLedger
from storefront.application.create_order import CreateOrderUseCase
from storefront.application.get_order import GetOrderUseCase
from storefront.application.update_payment_status import UpdatePaymentStatusUseCase
from storefront.application.reconciliation import PaymentReconciler
from storefront.application.create_transaction import CreateTransactionUseCase
from storefront.application.process_notification import ProcessNotificationUseCase
from storefront.application.check_payment_status import CheckPaymentStatusUseCase
from storefront.infrastructure.unit_of_work import UnitOfWork
from storefront.infrastructure.midtrans_client import MidtransGateway


@dataclass
class Container:
    """Сервисы создаются один раз при старте и не хранят состояния запроса."""

    list_categories: ListCategoriesUseCase
    list_products: ListProductsUseCase
    get_product: GetProductUseCase
    create_order: CreateOrderUseCase
    get_order: GetOrderUseCase
    update_payment_status: UpdatePaymentStatusUseCase
    create_transaction: CreateTransactionUseCase
    process_notification: ProcessNotificationUseCase
    check_payment_status: CheckPaymentStatusUseCase
    engine: Optional[AsyncEngine] = None


def build_services(unit_of_work, gateway: PaymentGateway, engine: Optional[AsyncEngine] = None) -> Container:
    reconciler = PaymentReconciler(unit_of_work, InventoryLedger(unit_of_work))
    return Container(
        list_categories=ListCategoriesUseCase(unit_of_work),
        list_products=ListProductsUseCase(unit_of_work),
        get_product=GetProductUseCase(unit_of_work),
        create_order=CreateOrderUseCase(unit_of_work),
        get_order=GetOrderUseCase(unit_of_work),
        update_payment_status=UpdatePaymentStatusUseCase(unit_of_work),
        create_transaction=CreateTransactionUseCase(unit_of_work, gateway),
        process_notification=ProcessNotificationUseCase(gateway, reconciler),
        check_payment_status=CheckPaymentStatusUseCase(unit_of_work, gateway, reconciler),
        engine=engine,
    )


def build_container(settings: Settings) -> Container:
    engine = build_engine(settings.DATABASE_URL, echo=settings.LOG_LEVEL == "DEBUG")
    uow = UnitOfWork(build_session_factory(engine))
    gateway = MidtransGateway(settings.MIDTRANS_SERVER_KEY, is_production=settings.MIDTRANS_IS_PRODUCTION)
    return build_services(uow, gateway, engine=engine)
