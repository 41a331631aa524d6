# backend/multistore/db/models/order_model.py
"""
Este archivo contiene el modelo de pedido para la aplicación.

Las transiciones de estado (pago, envío, entrega, cancelación) se expresan
como funciones puras que validan el estado actual y devuelven los cambios
a aplicar, sin modificar el objeto recibido.
"""

import enum
from typing import Any, Dict

from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey, JSON, Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from multistore.core.exceptions import InvalidStateException
from multistore.db.database import Base
from multistore.db.models.common import stamp, utc_now


class OrderStatus(str, enum.Enum):
    """Define los posibles estados de un pedido."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, enum.Enum):
    """Define los posibles estados del pago de un pedido."""
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    display_id = Column(String(20), unique=True, nullable=False, index=True)
    order_number = Column(String(50), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(
        SAEnum(OrderStatus, name="order_status", native_enum=False, length=20, values_callable=_enum_values),
        nullable=False, default=OrderStatus.PENDING,
    )
    payment_status = Column(
        SAEnum(PaymentStatus, name="payment_status", native_enum=False, length=30, values_callable=_enum_values),
        nullable=False, default=PaymentStatus.PENDING,
    )
    customer_email = Column(String(255), nullable=False, index=True)
    customer_phone = Column(String(50), nullable=True)
    customer_name = Column(String(255), nullable=False)
    shipping_address = Column(JSON, nullable=False)
    billing_address = Column(JSON, nullable=True)
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax_amount = Column(Numeric(12, 2), nullable=False, default=0)
    shipping_amount = Column(Numeric(12, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="YER")
    shipping_method = Column(String(100), nullable=True)
    tracking_number = Column(String(100), nullable=True)
    shipped_at = Column(TIMESTAMP(timezone=True), nullable=True)
    delivered_at = Column(TIMESTAMP(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    coupon_code = Column(String(50), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    @property
    def can_be_cancelled(self) -> bool:
        return self.status in (OrderStatus.PENDING, OrderStatus.CONFIRMED)

    @property
    def is_shippable(self) -> bool:
        return self.status == OrderStatus.PROCESSING and self.payment_status == PaymentStatus.PAID

    def __repr__(self):
        return f"<Order(id={self.id}, number='{self.order_number}', status='{self.status}')>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # Instantánea del producto en el momento de la compra (sin FK)
    product_id = Column(Integer, nullable=False)
    product_name = Column(String(255), nullable=False)
    product_name_ar = Column(String(255), nullable=True)
    product_sku = Column(String(100), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    attributes = Column(JSON, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem(id={self.id}, order_id={self.order_id}, product_id={self.product_id})>"


# ========================================
# TRANSICIONES DE ESTADO (funciones puras)
# ========================================

def status_changes(new_status: OrderStatus) -> Dict[str, Any]:
    return stamp({"status": new_status})


def payment_status_changes(order: Order, payment_status: PaymentStatus) -> Dict[str, Any]:
    """Un pago confirmado sobre un pedido pendiente lo pasa a CONFIRMED."""
    changes: Dict[str, Any] = {"payment_status": payment_status}
    if payment_status == PaymentStatus.PAID and order.status == OrderStatus.PENDING:
        changes["status"] = OrderStatus.CONFIRMED
    return stamp(changes)


def ship_changes(order: Order, tracking_number: str) -> Dict[str, Any]:
    if not order.is_shippable:
        raise InvalidStateException(
            f"Order cannot be shipped in current state: {order.status.value} / {order.payment_status.value}",
            "لا يمكن شحن الطلب في حالته الحالية",
        )
    return stamp({
        "status": OrderStatus.SHIPPED,
        "tracking_number": tracking_number,
        "shipped_at": utc_now(),
    })


def deliver_changes(order: Order) -> Dict[str, Any]:
    if order.status != OrderStatus.SHIPPED:
        raise InvalidStateException(
            f"Order must be shipped before delivery, current state: {order.status.value}",
            "يجب شحن الطلب قبل التسليم",
        )
    return stamp({"status": OrderStatus.DELIVERED, "delivered_at": utc_now()})


def cancel_changes(order: Order) -> Dict[str, Any]:
    if not order.can_be_cancelled:
        raise InvalidStateException(
            f"Order cannot be cancelled in current state: {order.status.value}",
            "لا يمكن إلغاء الطلب في حالته الحالية",
        )
    return stamp({"status": OrderStatus.CANCELLED})
