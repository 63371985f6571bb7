import hashlib
import hmac
import logging
from decimal import Decimal
from typing import Optional

import httpx

from storefront.domain.models import Order
from storefront.domain.exceptions import GatewayError
from storefront.application.interfaces import GatewayStatus, GatewayTransaction, PaymentGateway

logger = logging.getLogger(__name__)

SNAP_SANDBOX_URL = "https://app.sandbox.midtrans.com/snap/v1"
SNAP_PRODUCTION_URL = "https://app.midtrans.com/snap/v1"
CORE_SANDBOX_URL = "https://api.sandbox.midtrans.com/v2"
CORE_PRODUCTION_URL = "https://api.midtrans.com/v2"


def compute_signature(order_id: str, status_code: str, gross_amount: str, server_key: str) -> str:
    """SHA-512 от order_id + status_code + gross_amount + server_key, hex."""
    payload = f"{order_id}{status_code}{gross_amount}{server_key}"
    return hashlib.sha512(payload.encode()).hexdigest()


def _amount(value: Decimal):
    # Midtrans ждёт целое число для рупий
    return int(value) if value == value.to_integral_value() else float(value)


class MidtransGateway(PaymentGateway):
    def __init__(
        self,
        server_key: str,
        is_production: bool = False,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._server_key = server_key
        self._snap_url = SNAP_PRODUCTION_URL if is_production else SNAP_SANDBOX_URL
        self._core_url = CORE_PRODUCTION_URL if is_production else CORE_SANDBOX_URL
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            auth=(self._server_key, ""),
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            timeout=self._timeout,
            transport=self._transport
        )

    async def create_transaction(self, order: Order) -> GatewayTransaction:
        payload = {
            "transaction_details": {
                "order_id": order.id,
                "gross_amount": _amount(order.total_amount),
            },
            "customer_details": {
                "first_name": order.customer.name,
                "email": order.customer.email,
                "phone": order.customer.phone,
            },
            "item_details": [
                {
                    "id": item.product_id,
                    "price": _amount(item.product_price),
                    "quantity": item.quantity,
                    "name": item.product_name,
                }
                for item in order.items
            ],
        }
        try:
            async with self._client() as client:
                response = await client.post(f"{self._snap_url}/transactions", json=payload)
        except httpx.RequestError as e:
            logger.error(f"Midtrans недоступен: {e}")
            raise GatewayError(f"Payment gateway unavailable: {e}") from e

        if response.status_code != 201:
            message = self._error_message(response)
            logger.error(f"Midtrans вернул {response.status_code} для заказа {order.id}: {message}")
            raise GatewayError(message)

        data = response.json()
        return GatewayTransaction(token=data["token"], redirect_url=data["redirect_url"])

    async def query_status(self, order_id: str) -> GatewayStatus:
        try:
            async with self._client() as client:
                response = await client.get(f"{self._core_url}/{order_id}/status")
        except httpx.RequestError as e:
            logger.error(f"Midtrans недоступен: {e}")
            raise GatewayError(f"Payment gateway unavailable: {e}") from e

        if response.status_code >= 400:
            raise GatewayError(self._error_message(response))

        data = response.json()
        # Core API отдаёт HTTP 200 и код ошибки в теле
        status_code = str(data.get("status_code", "200"))
        if status_code.isdigit() and int(status_code) >= 400:
            raise GatewayError(data.get("status_message") or f"Midtrans error {status_code}")

        return GatewayStatus(
            transaction_status=data.get("transaction_status", ""),
            transaction_id=data.get("transaction_id"),
            fraud_status=data.get("fraud_status"),
            settlement_time=data.get("settlement_time")
        )

    def verify_signature(self, order_id: str, status_code: str, gross_amount: str, signature_key: str) -> bool:
        expected = compute_signature(order_id, status_code, gross_amount, self._server_key)
        return hmac.compare_digest(expected.encode(), (signature_key or "").encode())

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return f"Midtrans error {response.status_code}"
        messages = data.get("error_messages") if isinstance(data, dict) else None
        if messages:
            return "; ".join(messages)
        if isinstance(data, dict) and data.get("status_message"):
            return data["status_message"]
        return f"Midtrans error {response.status_code}"
