# backend/multistore/crud/inventory_crud.py
"""
Operaciones CRUD para el libro de movimientos de inventario.

Los movimientos solo se insertan; no existen operaciones de actualización
ni de borrado individuales (se eliminan en cascada con su producto).
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.crud.common_crud import fetch_page
from multistore.db.models.inventory_model import InventoryMovement, MovementType
from multistore.db.models.product_model import Product
from multistore.utils.pagination import PageRequest


async def get_movement(db: AsyncSession, movement_id: int) -> Optional[InventoryMovement]:
    result = await db.execute(select(InventoryMovement).filter(InventoryMovement.id == movement_id))
    return result.scalars().first()


async def get_movements_by_product(
    db: AsyncSession, product_id: int, page_request: PageRequest
) -> Tuple[List[InventoryMovement], int]:
    query = select(InventoryMovement).filter(InventoryMovement.product_id == product_id)
    return await fetch_page(db, query, InventoryMovement, page_request)


async def get_ledger_balance(db: AsyncSession, product_id: int) -> Tuple[int, int]:
    """
    Calcula el saldo del libro (suma de cantidades con signo) y el número de movimientos.

    El signo sigue a MovementType.effective_quantity: IN/RELEASED suman,
    OUT/RESERVED restan y ADJUSTMENT aplica la cantidad tal cual.
    """
    signed_quantity = case(
        (InventoryMovement.movement_type.in_([MovementType.OUT, MovementType.RESERVED]), -InventoryMovement.quantity),
        else_=InventoryMovement.quantity,
    )
    query = select(
        func.coalesce(func.sum(signed_quantity), 0),
        func.count(InventoryMovement.id),
    ).filter(InventoryMovement.product_id == product_id)
    result = await db.execute(query)
    balance, count = result.one()
    return int(balance), int(count)


async def lock_product(db: AsyncSession, product_id: int) -> Optional[Product]:
    """
    Obtiene el producto bloqueando su fila hasta el final de la transacción,
    para que dos movimientos concurrentes no pisen el stock.
    """
    result = await db.execute(select(Product).filter(Product.id == product_id).with_for_update())
    return result.scalars().first()


async def add_movement(db: AsyncSession, movement_data: Dict[str, Any]) -> InventoryMovement:
    """
    Añade un movimiento a la sesión sin confirmar.
    El commit se gestiona en la transacción de nivel superior que llama a esta función.
    """
    db_movement = InventoryMovement(**movement_data)
    db.add(db_movement)
    await db.flush()
    return db_movement
