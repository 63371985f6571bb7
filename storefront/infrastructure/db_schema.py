from sqlalchemy import (
    Table, Column, String, Integer, Numeric, Boolean, Text, Enum, DateTime, JSON, MetaData, ForeignKey,
    CheckConstraint
)
from sqlalchemy.sql import func

from storefront.domain.models import PaymentStatus

metadata = MetaData()


categories_tbl = Table(
    "categories",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String, nullable=False),
    Column("icon", String, nullable=False, default=""),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)


products_tbl = Table(
    "products",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String, nullable=False, index=True),
    Column("description", Text, nullable=False, default=""),
    Column("price", Numeric(12, 2), nullable=False),
    Column("category_id", String(36), ForeignKey("categories.id"), nullable=True, index=True),
    Column("image_url", String, nullable=True),
    Column("specs", JSON, nullable=False, default=dict),
    Column("stock", Integer, nullable=False, default=0),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now()),
    CheckConstraint("stock >= 0", name="ck_products_stock_non_negative")
)


orders_tbl = Table(
    "orders",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("customer_name", String, nullable=False),
    Column("customer_email", String, nullable=False),
    Column("customer_phone", String, nullable=False),
    Column("customer_address", Text, nullable=False),
    Column("total_amount", Numeric(12, 2), nullable=False),
    Column(
        "payment_status",
        Enum(
            PaymentStatus,
            name="payment_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=PaymentStatus.PENDING,
    ),
    Column("gateway_transaction_id", String, nullable=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
)


order_items_tbl = Table(
    "order_items",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("order_id", String(64), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("product_id", String(36), nullable=False),
    Column("product_name", String, nullable=False),
    Column("product_price", Numeric(12, 2), nullable=False),
    Column("position", Integer, nullable=False, default=0),
    Column("quantity", Integer, nullable=False),
    Column("subtotal", Numeric(12, 2), nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)
