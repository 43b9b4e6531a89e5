from sqlalchemy import (
    Table, Column, String, Integer, Boolean, Enum, DateTime, MetaData,
    ForeignKey, CheckConstraint, PrimaryKeyConstraint, Index
)
from sqlalchemy.sql import func

from hostel_market.domain.models import OrderStatus, Hostel, PaymentMethod

metadata = MetaData()


def _values(enum_cls):
    return [member.value for member in enum_cls]


hostel_enum = Enum(Hostel, name="hostel", values_callable=_values)
order_status_enum = Enum(OrderStatus, name="order_status", values_callable=_values)
payment_method_enum = Enum(PaymentMethod, name="payment_method", values_callable=_values)


products_tbl = Table(
    "products",
    metadata,
    Column("id", String, primary_key=True),
    Column("title", String, nullable=False),
    Column("description", String, nullable=False),
    Column("price", Integer, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("image", String, nullable=True),
    Column("hostel", hostel_enum, nullable=False),
    Column("seller_id", String, nullable=False, index=True),
    Column("seller_name", String, nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now()),
    CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
    CheckConstraint("price > 0", name="ck_products_price_positive"),
)


orders_tbl = Table(
    "orders",
    metadata,
    Column("id", String, primary_key=True),
    Column("buyer_id", String, nullable=False, index=True),
    Column("buyer_name", String, nullable=False),
    Column("buyer_email", String, nullable=False),
    Column("contact_number", String, nullable=False),
    Column("hostel", hostel_enum, nullable=False),
    Column("room_number", String, nullable=False),
    Column("payment_method", payment_method_enum, nullable=False),
    Column("delivery_charge", Integer, nullable=False),
    Column("total_amount", Integer, nullable=False),
    Column("status", order_status_enum, nullable=False, default=OrderStatus.PENDING, index=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), index=True),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now()),
)


order_lines_tbl = Table(
    "order_lines",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", String, ForeignKey("orders.id"), nullable=False, index=True),
    Column("position", Integer, nullable=False),
    Column("product_id", String, nullable=False),
    Column("title", String, nullable=False),
    Column("price", Integer, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("seller_id", String, nullable=False, index=True),
)


# Уведомления принадлежат заказу: одна запись на продавца в заказе
order_notifications_tbl = Table(
    "order_notifications",
    metadata,
    Column("order_id", String, ForeignKey("orders.id"), nullable=False),
    Column("seller_id", String, nullable=False),
    Column("is_read", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    PrimaryKeyConstraint("order_id", "seller_id"),
    Index("ix_order_notifications_seller_unread", "seller_id", "is_read"),
)


# Журнал статусов только дополняется, порядок задает id
order_status_history_tbl = Table(
    "order_status_history",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", String, ForeignKey("orders.id"), nullable=False, index=True),
    Column("status", order_status_enum, nullable=False),
    Column("changed_at", DateTime(timezone=True), nullable=False),
    Column("changed_by", String, nullable=False),
)
