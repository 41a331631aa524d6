# backend/multistore/api/v1/endpoints/inventory.py
"""
Endpoints REST del libro de movimientos de inventario.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.api import deps
from multistore.core.constants import AppConstants
from multistore.schemas import inventory_schema
from multistore.schemas.common_schema import ApiResponse, PaginatedResponse
from multistore.services.inventory_service import inventory_service
from multistore.utils.pagination import PageRequest

router = APIRouter()

MovementPage = PaginatedResponse[inventory_schema.MovementResponse]


@router.post("/movements", response_model=ApiResponse[inventory_schema.MovementResponse], status_code=status.HTTP_201_CREATED)
async def record_movement(
    *,
    db: AsyncSession = Depends(deps.get_db),
    constants: AppConstants = Depends(deps.get_constants),
    movement_in: inventory_schema.MovementCreate,
):
    """
    Registra un movimiento y aplica su efecto al stock del producto.

    Solo los ajustes (ADJUSTMENT) admiten cantidades negativas.
    """
    movement = await inventory_service.record_movement(db, movement_in, constants)
    return ApiResponse.created(
        inventory_schema.MovementResponse.from_movement(movement),
        "Inventory movement recorded",
        "تم تسجيل حركة المخزون",
    )


@router.get("/movements/{movement_id}", response_model=ApiResponse[inventory_schema.MovementResponse])
async def read_movement(movement_id: int, db: AsyncSession = Depends(deps.get_db)):
    movement = await inventory_service.get_movement(db, movement_id)
    return ApiResponse.ok(inventory_schema.MovementResponse.from_movement(movement))


@router.get("/products/{product_id}/movements", response_model=ApiResponse[MovementPage])
async def read_product_movements(
    product_id: int,
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params()),
):
    """Movimientos de un producto, del más reciente al más antiguo."""
    movements, total = await inventory_service.get_product_movements(db, product_id, page_request)
    content = [inventory_schema.MovementResponse.from_movement(movement) for movement in movements]
    return ApiResponse.ok(MovementPage.build(content, page_request, total))


@router.get("/products/{product_id}/balance", response_model=ApiResponse[inventory_schema.StockBalanceResponse])
async def read_stock_balance(product_id: int, db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(await inventory_service.get_stock_balance(db, product_id))
