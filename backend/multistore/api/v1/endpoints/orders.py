# backend/multistore/api/v1/endpoints/orders.py
"""
Endpoints REST para la gestión de pedidos.

Las transiciones no permitidas (enviar un pedido sin pagar, entregar uno
no enviado, cancelar uno ya enviado...) responden 409.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.api import deps
from multistore.core.constants import AppConstants
from multistore.db.models.order_model import OrderStatus
from multistore.schemas import order_schema
from multistore.schemas.common_schema import ApiResponse, HealthResponse, PaginatedResponse
from multistore.services.order_service import order_service
from multistore.utils.pagination import PageRequest

router = APIRouter()

OrderPage = PaginatedResponse[order_schema.OrderResponse]


def _one(order) -> order_schema.OrderResponse:
    return order_schema.OrderResponse.model_validate(order)


def _page(orders, page_request: PageRequest, total: int) -> OrderPage:
    return OrderPage.build([_one(order) for order in orders], page_request, total)


@router.post("/", response_model=ApiResponse[order_schema.OrderResponse], status_code=status.HTTP_201_CREATED)
async def create_order(
    *,
    db: AsyncSession = Depends(deps.get_db),
    constants: AppConstants = Depends(deps.get_constants),
    order_in: order_schema.OrderCreate,
):
    """Crea un pedido pendiente; los importes se calculan a partir de las líneas."""
    order = await order_service.create_order(db, order_in, constants)
    return ApiResponse.created(_one(order), "Order created successfully", "تم إنشاء الطلب بنجاح")


@router.get("/", response_model=ApiResponse[OrderPage])
async def read_orders(
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params()),
):
    orders, total = await order_service.get_all_orders(db, page_request)
    return ApiResponse.ok(_page(orders, page_request, total))


@router.get("/health", response_model=HealthResponse)
async def orders_health():
    return HealthResponse(service="orders")


@router.get("/display/{display_id}", response_model=ApiResponse[order_schema.OrderResponse])
async def read_order_by_display_id(display_id: str, db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(_one(await order_service.get_order_by_display_id(db, display_id)))


@router.get("/number/{order_number}", response_model=ApiResponse[order_schema.OrderResponse])
async def read_order_by_number(order_number: str, db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(_one(await order_service.get_order_by_number(db, order_number)))


@router.get("/user/{user_id}", response_model=ApiResponse[OrderPage])
async def read_user_orders(
    user_id: int,
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params("created_at", "desc")),
):
    """Pedidos de un usuario, del más reciente al más antiguo."""
    orders, total = await order_service.get_orders_by_user(db, user_id, page_request)
    return ApiResponse.ok(_page(orders, page_request, total))


@router.get("/status/{order_status}", response_model=ApiResponse[OrderPage])
async def read_orders_by_status(
    order_status: OrderStatus,
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params()),
):
    orders, total = await order_service.get_orders_by_status(db, order_status, page_request)
    return ApiResponse.ok(_page(orders, page_request, total))


@router.get("/{order_id}", response_model=ApiResponse[order_schema.OrderResponse])
async def read_order(order_id: int, db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(_one(await order_service.get_order_by_id(db, order_id)))


# ========================================
# TRANSICIONES DE ESTADO
# ========================================

@router.put("/{order_id}/status", response_model=ApiResponse[order_schema.OrderResponse])
async def update_order_status(
    *,
    db: AsyncSession = Depends(deps.get_db),
    order_id: int,
    status_in: order_schema.OrderStatusUpdate,
):
    order = await order_service.update_order_status(db, order_id, status_in.status)
    return ApiResponse.ok(_one(order), "Order status updated", "تم تحديث حالة الطلب")


@router.put("/{order_id}/payment-status", response_model=ApiResponse[order_schema.OrderResponse])
async def update_payment_status(
    *,
    db: AsyncSession = Depends(deps.get_db),
    order_id: int,
    payment_in: order_schema.PaymentStatusUpdate,
):
    """Actualiza el pago; un pago confirmado sobre un pedido pendiente lo confirma."""
    order = await order_service.update_payment_status(db, order_id, payment_in.payment_status)
    return ApiResponse.ok(_one(order), "Payment status updated", "تم تحديث حالة الدفع")


@router.put("/{order_id}/ship", response_model=ApiResponse[order_schema.OrderResponse])
async def ship_order(
    *,
    db: AsyncSession = Depends(deps.get_db),
    order_id: int,
    ship_in: order_schema.OrderShipRequest,
):
    order = await order_service.ship_order(db, order_id, ship_in.tracking_number)
    return ApiResponse.ok(_one(order), "Order shipped", "تم شحن الطلب")


@router.put("/{order_id}/deliver", response_model=ApiResponse[order_schema.OrderResponse])
async def deliver_order(order_id: int, db: AsyncSession = Depends(deps.get_db)):
    order = await order_service.deliver_order(db, order_id)
    return ApiResponse.ok(_one(order), "Order delivered", "تم تسليم الطلب")


@router.put("/{order_id}/cancel", response_model=ApiResponse[order_schema.OrderResponse])
async def cancel_order(order_id: int, db: AsyncSession = Depends(deps.get_db)):
    order = await order_service.cancel_order(db, order_id)
    return ApiResponse.ok(_one(order), "Order cancelled", "تم إلغاء الطلب")
