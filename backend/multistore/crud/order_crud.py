# backend/multistore/crud/order_crud.py
"""
Operaciones CRUD para los modelos Order y OrderItem.

Las líneas del pedido se cargan siempre con selectinload para que la
respuesta pueda serializarse sin cargas perezosas en contexto asíncrono.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from multistore.crud.common_crud import apply_changes, fetch_page, stage_changes
from multistore.db.models.order_model import Order, OrderItem, OrderStatus
from multistore.utils.pagination import PageRequest


def _order_query():
    # populate_existing recarga también los pedidos ya presentes en la sesión
    return select(Order).options(selectinload(Order.items)).execution_options(populate_existing=True)


# ========================================
# OPERACIONES DE LECTURA (READ)
# ========================================

async def get_order(db: AsyncSession, order_id: int) -> Optional[Order]:
    result = await db.execute(_order_query().filter(Order.id == order_id))
    return result.scalars().first()


async def get_order_by_display_id(db: AsyncSession, display_id: str) -> Optional[Order]:
    result = await db.execute(_order_query().filter(Order.display_id == display_id))
    return result.scalars().first()


async def get_order_by_number(db: AsyncSession, order_number: str) -> Optional[Order]:
    result = await db.execute(_order_query().filter(Order.order_number == order_number))
    return result.scalars().first()


async def order_number_exists(db: AsyncSession, order_number: str) -> bool:
    result = await db.execute(select(Order.id).filter(Order.order_number == order_number).limit(1))
    return result.first() is not None


async def get_orders(
    db: AsyncSession,
    page_request: PageRequest,
    user_id: Optional[int] = None,
    status: Optional[OrderStatus] = None,
) -> Tuple[List[Order], int]:
    """Página de pedidos, opcionalmente filtrada por usuario y/o estado."""
    query = _order_query()
    if user_id is not None:
        query = query.filter(Order.user_id == user_id)
    if status is not None:
        query = query.filter(Order.status == status)
    return await fetch_page(db, query, Order, page_request)

# ========================================
# OPERACIONES DE ESCRITURA (CREATE, UPDATE)
# ========================================

async def create_order(db: AsyncSession, order_data: Dict[str, Any], items_data: List[Dict[str, Any]]) -> Order:
    """
    Crea el pedido y sus líneas en una sola transacción.

    Se devuelve el pedido recargado para que `items` esté disponible
    sin necesidad de cargas perezosas.
    """
    db_order = Order(**order_data)
    db_order.items = [OrderItem(**item) for item in items_data]
    db.add(db_order)
    await db.commit()
    return await get_order(db, db_order.id)


async def update_order(db: AsyncSession, db_order: Order, changes: Dict[str, Any]) -> Order:
    db_order = await apply_changes(db, db_order, changes)
    return await get_order(db, db_order.id)


def stage_order_changes(db: AsyncSession, db_order: Order, changes: Dict[str, Any]) -> Order:
    """Cambios del pedido que se confirman junto con otra escritura (p. ej. un pago)."""
    return stage_changes(db, db_order, changes)
