from typing import Any, Optional


class DomainException(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(DomainException):
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFound(DomainException):
    status_code = 404
    code = "NOT_FOUND"


class ProductNotFound(NotFound):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class OrderNotFound(NotFound):
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__("Order not found")


class InsufficientStock(DomainException):
    status_code = 400
    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: str, product_name: str, available: int, required: int):
        self.product_id = product_id
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient stock for {product_name}. Available: {available}",
            details={"productId": product_id, "available": available, "required": required},
        )


class OrderAlreadyPaid(DomainException):
    status_code = 400
    code = "ORDER_ALREADY_PAID"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__("Order already paid")


class PostPaymentStockShortfall(DomainException):
    """Оплата прошла, но списать остатки не удалось."""

    status_code = 409
    code = "POST_PAYMENT_STOCK_SHORTFALL"

    def __init__(self, order_id: str, shortfalls: list[dict]):
        self.order_id = order_id
        self.shortfalls = shortfalls
        super().__init__(
            f"Order {order_id} was paid but stock could not be debited",
            details=shortfalls,
        )


class InvalidSignature(DomainException):
    status_code = 403
    code = "INVALID_SIGNATURE"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__("Invalid notification signature")


class GatewayError(DomainException):
    status_code = 502
    code = "GATEWAY_ERROR"


class PersistenceError(DomainException):
    status_code = 500
    code = "PERSISTENCE_ERROR"


class StoreUnavailable(PersistenceError):
    status_code = 503
    code = "STORE_UNAVAILABLE"


class NotificationProcessingFailed(DomainException):
    code = "NOTIFICATION_PROCESSING_FAILED"

    def __init__(self, order_id: str, cause: Exception):
        self.order_id = order_id
        self.cause = cause
        super().__init__(f"Failed to process payment notification: {cause}")
