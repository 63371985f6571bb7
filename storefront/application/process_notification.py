import logging
from typing import Optional

from pydantic import BaseModel

from storefront.domain.exceptions import (
    InvalidSignature, NotificationProcessingFailed, PostPaymentStockShortfall
)
from storefront.application.interfaces import PaymentGateway
from storefront.application.reconciliation import (
    PaymentReconciler, ReconciliationResult, map_notification_status
)

logger = logging.getLogger(__name__)


class PaymentNotificationDTO(BaseModel):
    order_id: str
    transaction_status: str
    status_code: str
    gross_amount: str
    signature_key: str
    fraud_status: Optional[str] = None
    transaction_id: Optional[str] = None


class ProcessNotificationUseCase:
    def __init__(self, gateway: PaymentGateway, reconciler: PaymentReconciler):
        self._gateway = gateway
        self._reconciler = reconciler

    async def __call__(self, dto: PaymentNotificationDTO) -> ReconciliationResult:
        logger.info(f"Обработка уведомления шлюза для заказа {dto.order_id}: {dto.transaction_status}")

        if not self._gateway.verify_signature(dto.order_id, dto.status_code, dto.gross_amount, dto.signature_key):
            logger.warning(f"Неверная подпись уведомления для заказа {dto.order_id}")
            raise InvalidSignature(dto.order_id)

        try:
            target = map_notification_status(dto.transaction_status, dto.fraud_status)
            result = await self._reconciler.apply(dto.order_id, target, transaction_id=dto.transaction_id)
        except PostPaymentStockShortfall:
            raise
        except Exception as e:
            raise NotificationProcessingFailed(dto.order_id, e) from e

        logger.info(f"Уведомление обработано: {dto.order_id} -> {result.payment_status.value}")
        return result
