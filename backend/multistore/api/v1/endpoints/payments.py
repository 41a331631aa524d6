# backend/multistore/api/v1/endpoints/payments.py
"""
Endpoints REST para los pagos de pedidos.

Las transiciones no permitidas (confirmar un pago ya cerrado, reembolsar
uno no completado...) responden 409.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.api import deps
from multistore.core.constants import AppConstants
from multistore.db.models.payment_model import PaymentMethod, TransactionStatus
from multistore.schemas import payment_schema
from multistore.schemas.common_schema import ApiResponse, HealthResponse, PaginatedResponse
from multistore.services.payment_service import payment_service
from multistore.utils.pagination import PageRequest

router = APIRouter()

PaymentPage = PaginatedResponse[payment_schema.PaymentResponse]


def _one(payment) -> payment_schema.PaymentResponse:
    return payment_schema.PaymentResponse.model_validate(payment)


def _page(payments, page_request: PageRequest, total: int) -> PaymentPage:
    return PaymentPage.build([_one(payment) for payment in payments], page_request, total)


@router.post("/", response_model=ApiResponse[payment_schema.PaymentResponse], status_code=status.HTTP_201_CREATED)
async def create_payment(
    *,
    db: AsyncSession = Depends(deps.get_db),
    constants: AppConstants = Depends(deps.get_constants),
    payment_in: payment_schema.PaymentCreate,
):
    """Registra un pago; sin importe explícito se cobra el total del pedido."""
    payment = await payment_service.create_payment(db, payment_in, constants)
    return ApiResponse.created(_one(payment), "Payment created successfully", "تم إنشاء الدفع بنجاح")


@router.get("/", response_model=ApiResponse[PaymentPage])
async def read_payments(
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params()),
):
    payments, total = await payment_service.get_all_payments(db, page_request)
    return ApiResponse.ok(_page(payments, page_request, total))


@router.get("/health", response_model=HealthResponse)
async def payments_health():
    return HealthResponse(service="payments")


@router.get("/statistics", response_model=ApiResponse[payment_schema.PaymentStatisticsResponse])
async def read_payment_statistics(db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(await payment_service.get_statistics(db))


@router.get("/display/{display_id}", response_model=ApiResponse[payment_schema.PaymentResponse])
async def read_payment_by_display_id(display_id: str, db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(_one(await payment_service.get_payment_by_display_id(db, display_id)))


@router.get("/transaction/{transaction_id}", response_model=ApiResponse[payment_schema.PaymentResponse])
async def read_payment_by_transaction_id(transaction_id: str, db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(_one(await payment_service.get_payment_by_transaction_id(db, transaction_id)))


@router.get("/order/{order_id}", response_model=ApiResponse[List[payment_schema.PaymentResponse]])
async def read_order_payments(order_id: int, db: AsyncSession = Depends(deps.get_db)):
    payments = await payment_service.get_order_payments(db, order_id)
    return ApiResponse.ok([_one(payment) for payment in payments])


@router.get("/status/{payment_status}", response_model=ApiResponse[PaymentPage])
async def read_payments_by_status(
    payment_status: TransactionStatus,
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params()),
):
    payments, total = await payment_service.get_all_payments(db, page_request, status=payment_status)
    return ApiResponse.ok(_page(payments, page_request, total))


@router.get("/method/{payment_method}", response_model=ApiResponse[PaymentPage])
async def read_payments_by_method(
    payment_method: PaymentMethod,
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params()),
):
    payments, total = await payment_service.get_all_payments(db, page_request, payment_method=payment_method)
    return ApiResponse.ok(_page(payments, page_request, total))


@router.get("/{payment_id}", response_model=ApiResponse[payment_schema.PaymentResponse])
async def read_payment(payment_id: int, db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(_one(await payment_service.get_payment_by_id(db, payment_id)))


# ========================================
# TRANSICIONES DE ESTADO
# ========================================

@router.put("/{payment_id}/confirm", response_model=ApiResponse[payment_schema.PaymentResponse])
async def confirm_payment(
    *,
    db: AsyncSession = Depends(deps.get_db),
    payment_id: int,
    confirm_in: payment_schema.PaymentConfirm,
):
    """Completa el pago; el pedido queda pagado y, si estaba pendiente, confirmado."""
    payment = await payment_service.confirm_payment(db, payment_id, confirm_in)
    return ApiResponse.ok(_one(payment), "Payment confirmed", "تم تأكيد الدفع")


@router.put("/{payment_id}/reject", response_model=ApiResponse[payment_schema.PaymentResponse])
async def reject_payment(
    *,
    db: AsyncSession = Depends(deps.get_db),
    payment_id: int,
    reject_in: payment_schema.PaymentReject,
):
    payment = await payment_service.reject_payment(db, payment_id, reject_in.reason)
    return ApiResponse.ok(_one(payment), "Payment rejected", "تم رفض الدفع")


@router.put("/{payment_id}/refund", response_model=ApiResponse[payment_schema.PaymentResponse])
async def refund_payment(payment_id: int, db: AsyncSession = Depends(deps.get_db)):
    payment = await payment_service.refund_payment(db, payment_id)
    return ApiResponse.ok(_one(payment), "Payment refunded", "تم استرداد الدفع")
