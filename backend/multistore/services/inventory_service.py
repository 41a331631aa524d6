# backend/multistore/services/inventory_service.py
"""
Servicio del libro de inventario.

Registrar un movimiento bloquea la fila del producto, aplica la cantidad
efectiva al stock (si el producto controla inventario) e inserta el
movimiento, todo en una misma transacción.
"""

import logging
from typing import List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from multistore.core.constants import AppConstants, app_constants
from multistore.core.exceptions import BusinessException, ResourceNotFoundException
from multistore.crud import inventory_crud, product_crud
from multistore.db.models.inventory_model import InventoryMovement, MovementType
from multistore.db.models.product_model import stock_changes
from multistore.schemas import inventory_schema
from multistore.utils.identifiers import MOVEMENT_PREFIX, generate_display_id
from multistore.utils.pagination import PageRequest

logger = logging.getLogger(__name__)


class InventoryService:

    async def record_movement(
        self,
        db: AsyncSession,
        movement_in: inventory_schema.MovementCreate,
        constants: AppConstants = app_constants,
    ) -> InventoryMovement:
        """
        Registra un movimiento de inventario.

        Raises:
            ResourceNotFoundException: El producto no existe (404)
            BusinessException: El stock resultante quedaría fuera de [0, MAX_STOCK_QUANTITY] (400)
        """
        product = await inventory_crud.lock_product(db, movement_in.product_id)
        if not product:
            raise ResourceNotFoundException("Product", movement_in.product_id)

        movement_type = MovementType(movement_in.movement_type)
        effective = movement_type.effective_quantity(movement_in.quantity)

        if product.track_inventory:
            new_quantity = product.stock_quantity + effective
            if new_quantity < 0:
                logger.warning(
                    f"⚠️ Movimiento {movement_type.value} rechazado para {product.display_id}: "
                    f"stock insuficiente ({product.stock_quantity}, efecto {effective})"
                )
                raise BusinessException.bad_request(
                    f"Insufficient stock for product {product.display_id}: available {product.stock_quantity}",
                    "المخزون غير كافٍ",
                )
            if new_quantity > constants.MAX_STOCK_QUANTITY:
                raise BusinessException.bad_request(
                    f"Stock quantity cannot exceed {constants.MAX_STOCK_QUANTITY}",
                    "كمية المخزون تتجاوز الحد الأقصى",
                )

        movement_data = movement_in.model_dump()
        movement_data["display_id"] = generate_display_id(MOVEMENT_PREFIX)
        movement_data["movement_type"] = movement_type
        movement = await inventory_crud.add_movement(db, movement_data)

        if product.track_inventory:
            # El commit de apply_changes confirma también el movimiento
            await product_crud.update_product(db, product, stock_changes(product.stock_quantity + effective))
        else:
            await db.commit()
        await db.refresh(movement)

        logger.info(
            f"📦 Movimiento {movement.display_id}: {movement_type.value} {movement.quantity} "
            f"sobre {product.display_id} (stock {product.stock_quantity})"
        )
        return movement

    async def get_movement(self, db: AsyncSession, movement_id: int) -> InventoryMovement:
        movement = await inventory_crud.get_movement(db, movement_id)
        if not movement:
            raise ResourceNotFoundException("InventoryMovement", movement_id)
        return movement

    async def get_product_movements(
        self, db: AsyncSession, product_id: int, page_request: PageRequest
    ) -> Tuple[List[InventoryMovement], int]:
        await self._ensure_product(db, product_id)
        return await inventory_crud.get_movements_by_product(db, product_id, page_request)

    async def get_stock_balance(self, db: AsyncSession, product_id: int) -> inventory_schema.StockBalanceResponse:
        """Saldo del libro (suma de cantidades efectivas) junto al stock actual."""
        product = await self._ensure_product(db, product_id)
        balance, count = await inventory_crud.get_ledger_balance(db, product_id)
        return inventory_schema.StockBalanceResponse(
            product_id=product_id,
            ledger_balance=balance,
            stock_quantity=product.stock_quantity,
            movement_count=count,
        )

    async def _ensure_product(self, db: AsyncSession, product_id: int):
        product = await product_crud.get_product(db, product_id)
        if not product:
            raise ResourceNotFoundException("Product", product_id)
        return product


inventory_service = InventoryService()
