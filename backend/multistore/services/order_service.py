# backend/multistore/services/order_service.py
"""
Servicio para la gestión de pedidos.

Calcula los importes del pedido a partir de sus líneas y aplica las
transiciones de estado definidas en el modelo (pago, envío, entrega y
cancelación), que rechazan con 409 los cambios no permitidos.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from multistore.core.constants import AppConstants, app_constants
from multistore.core.exceptions import BusinessException, ResourceNotFoundException
from multistore.crud import order_crud, user_crud
from multistore.db.models.order_model import (
    Order,
    OrderStatus,
    PaymentStatus,
    cancel_changes,
    deliver_changes,
    payment_status_changes,
    ship_changes,
    status_changes,
)
from multistore.schemas import order_schema
from multistore.utils.identifiers import ORDER_PREFIX, generate_display_id, generate_order_number
from multistore.utils.pagination import PageRequest

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


def _money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def calculate_order_totals(
    items: List[order_schema.OrderItemCreate], constants: AppConstants = app_constants
) -> Tuple[List[Dict[str, Any]], Dict[str, Decimal]]:
    """
    Calcula las líneas y los importes de un pedido.

    subtotal = Σ(unit_price × quantity); impuestos y descuento a 0;
    el envío es la tarifa fija configurada.

    Returns:
        (datos de las líneas, importes del pedido)
    """
    lines: List[Dict[str, Any]] = []
    subtotal = Decimal("0.00")
    for item in items:
        unit_price = _money(item.unit_price)
        total_price = _money(unit_price * item.quantity)
        subtotal += total_price
        lines.append({**item.model_dump(), "unit_price": unit_price, "total_price": total_price})

    tax_amount = Decimal("0.00")
    shipping_amount = _money(constants.DEFAULT_SHIPPING_COST)
    discount_amount = Decimal("0.00")
    totals = {
        "subtotal": subtotal,
        "tax_amount": tax_amount,
        "shipping_amount": shipping_amount,
        "discount_amount": discount_amount,
        "total_amount": subtotal + tax_amount + shipping_amount - discount_amount,
    }
    return lines, totals


class OrderService:
    """
    Servicio para la gestión de pedidos.

    Todas las operaciones devuelven el pedido con sus líneas cargadas.
    """

    async def create_order(
        self, db: AsyncSession, order_in: order_schema.OrderCreate, constants: AppConstants = app_constants
    ) -> Order:
        """
        Crea un pedido en estado pendiente a partir de sus líneas.

        Raises:
            BusinessException: Sin líneas o con más de MAX_ORDER_ITEMS (400)
            ResourceNotFoundException: El usuario indicado no existe (404)
        """
        if not order_in.items:
            raise BusinessException.bad_request("Order must contain at least one item", "يجب أن يحتوي الطلب على عنصر واحد على الأقل")
        if len(order_in.items) > constants.MAX_ORDER_ITEMS:
            raise BusinessException.bad_request(
                f"Order cannot contain more than {constants.MAX_ORDER_ITEMS} items",
                "عدد عناصر الطلب يتجاوز الحد الأقصى",
            )

        if order_in.user_id is not None and not await user_crud.get_user(db, order_in.user_id):
            raise ResourceNotFoundException("User", order_in.user_id)

        lines, totals = calculate_order_totals(order_in.items, constants)

        order_number = generate_order_number()
        while await order_crud.order_number_exists(db, order_number):
            order_number = generate_order_number()

        order_data = order_in.model_dump(exclude={"items"})
        order_data.update(totals)
        order_data.update({
            "display_id": generate_display_id(ORDER_PREFIX),
            "order_number": order_number,
            "status": OrderStatus.PENDING,
            "payment_status": PaymentStatus.PENDING,
            "currency": constants.DEFAULT_CURRENCY,
        })

        order = await order_crud.create_order(db, order_data, lines)
        logger.info(
            f"🛒 Pedido creado: {order.order_number} ({len(lines)} líneas, total {order.total_amount} {order.currency})"
        )
        return order

    # ========================================
    # CONSULTAS
    # ========================================

    async def get_order_by_id(self, db: AsyncSession, order_id: int) -> Order:
        order = await order_crud.get_order(db, order_id)
        if not order:
            raise ResourceNotFoundException("Order", order_id)
        return order

    async def get_order_by_display_id(self, db: AsyncSession, display_id: str) -> Order:
        order = await order_crud.get_order_by_display_id(db, display_id)
        if not order:
            raise ResourceNotFoundException("Order", display_id, "display_id")
        return order

    async def get_order_by_number(self, db: AsyncSession, order_number: str) -> Order:
        order = await order_crud.get_order_by_number(db, order_number)
        if not order:
            raise ResourceNotFoundException("Order", order_number, "order_number")
        return order

    async def get_all_orders(self, db: AsyncSession, page_request: PageRequest) -> Tuple[List[Order], int]:
        return await order_crud.get_orders(db, page_request)

    async def get_orders_by_user(self, db: AsyncSession, user_id: int, page_request: PageRequest) -> Tuple[List[Order], int]:
        return await order_crud.get_orders(db, page_request, user_id=user_id)

    async def get_orders_by_status(
        self, db: AsyncSession, status: OrderStatus, page_request: PageRequest
    ) -> Tuple[List[Order], int]:
        return await order_crud.get_orders(db, page_request, status=status)

    # ========================================
    # TRANSICIONES DE ESTADO
    # ========================================

    async def update_order_status(self, db: AsyncSession, order_id: int, status: OrderStatus) -> Order:
        order = await self.get_order_by_id(db, order_id)
        previous = order.status
        order = await order_crud.update_order(db, order, status_changes(status))
        logger.info(f"🔁 Pedido {order.order_number}: {previous.value} -> {order.status.value}")
        return order

    async def update_payment_status(self, db: AsyncSession, order_id: int, payment_status: PaymentStatus) -> Order:
        order = await self.get_order_by_id(db, order_id)
        order = await order_crud.update_order(db, order, payment_status_changes(order, payment_status))
        logger.info(f"💳 Pedido {order.order_number}: pago {order.payment_status.value}, estado {order.status.value}")
        return order

    async def ship_order(self, db: AsyncSession, order_id: int, tracking_number: str) -> Order:
        order = await self.get_order_by_id(db, order_id)
        order = await order_crud.update_order(db, order, ship_changes(order, tracking_number))
        logger.info(f"🚚 Pedido {order.order_number} enviado (seguimiento {tracking_number})")
        return order

    async def deliver_order(self, db: AsyncSession, order_id: int) -> Order:
        order = await self.get_order_by_id(db, order_id)
        order = await order_crud.update_order(db, order, deliver_changes(order))
        logger.info(f"📬 Pedido {order.order_number} entregado")
        return order

    async def cancel_order(self, db: AsyncSession, order_id: int) -> Order:
        order = await self.get_order_by_id(db, order_id)
        order = await order_crud.update_order(db, order, cancel_changes(order))
        logger.info(f"❌ Pedido {order.order_number} cancelado")
        return order


order_service = OrderService()
