# backend/multistore/services/payment_service.py
"""
Servicio de pagos de pedidos.

Registra los intentos de pago de un pedido y aplica sus transiciones
(confirmar, rechazar, reembolsar). Cada transición actualiza también el
PaymentStatus agregado del pedido en la misma transacción, de modo que un
pago confirmado confirma el pedido pendiente igual que PUT /orders/{id}/payment-status.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from multistore.core.constants import AppConstants, app_constants
from multistore.core.exceptions import InvalidStateException, ResourceNotFoundException
from multistore.crud import order_crud, payment_crud
from multistore.db.models.common import utc_now
from multistore.db.models.order_model import Order, OrderStatus, PaymentStatus, payment_status_changes
from multistore.db.models.payment_model import (
    Payment,
    PaymentMethod,
    TransactionStatus,
    complete_changes,
    fail_changes,
    refund_changes,
)
from multistore.schemas import payment_schema
from multistore.utils.identifiers import PAYMENT_PREFIX, generate_display_id, generate_transaction_id
from multistore.utils.pagination import PageRequest

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Servicio para la gestión de pagos.

    Reglas principales:
    - No se aceptan pagos de pedidos cancelados ni de pedidos ya pagados (409)
    - Los pagos con monedero quedan en PROCESSING hasta su confirmación;
      contra reembolso y transferencia quedan en PENDING
    - Solo un pago completado puede reembolsarse (409)
    """

    # ========================================
    # OPERACIONES DE CONSULTA
    # ========================================

    async def get_payment_by_id(self, db: AsyncSession, payment_id: int) -> Payment:
        payment = await payment_crud.get_payment(db, payment_id)
        if not payment:
            raise ResourceNotFoundException("Payment", payment_id)
        return payment

    async def get_payment_by_display_id(self, db: AsyncSession, display_id: str) -> Payment:
        payment = await payment_crud.get_payment_by_display_id(db, display_id)
        if not payment:
            raise ResourceNotFoundException("Payment", display_id, "display_id")
        return payment

    async def get_payment_by_transaction_id(self, db: AsyncSession, transaction_id: str) -> Payment:
        payment = await payment_crud.get_payment_by_transaction_id(db, transaction_id)
        if not payment:
            raise ResourceNotFoundException("Payment", transaction_id, "transaction_id")
        return payment

    async def get_order_payments(self, db: AsyncSession, order_id: int) -> List[Payment]:
        """Pagos de un pedido existente (404 si el pedido no existe)."""
        await self._get_order(db, order_id)
        return await payment_crud.get_payments_by_order(db, order_id)

    async def get_all_payments(
        self,
        db: AsyncSession,
        page_request: PageRequest,
        status: Optional[TransactionStatus] = None,
        payment_method: Optional[PaymentMethod] = None,
    ) -> Tuple[List[Payment], int]:
        return await payment_crud.get_payments(db, page_request, status=status, payment_method=payment_method)

    async def get_statistics(self, db: AsyncSession) -> payment_schema.PaymentStatisticsResponse:
        """
        Resumen de pagos: recuentos por estado y por medio de pago, importe
        total cobrado e importe cobrado hoy (UTC).
        """
        by_status = await payment_crud.count_by_status(db)
        by_method = await payment_crud.count_by_method(db)
        start_of_day = utc_now().replace(hour=0, minute=0, second=0, microsecond=0)

        return payment_schema.PaymentStatisticsResponse(
            total_payments=sum(by_status.values()),
            successful_payments=by_status.get(TransactionStatus.COMPLETED, 0),
            failed_payments=by_status.get(TransactionStatus.FAILED, 0),
            pending_payments=by_status.get(TransactionStatus.PENDING, 0) + by_status.get(TransactionStatus.PROCESSING, 0),
            refunded_payments=by_status.get(TransactionStatus.REFUNDED, 0),
            total_amount=await payment_crud.sum_completed_amount(db),
            today_amount=await payment_crud.sum_completed_amount(db, since=start_of_day),
            method_statistics={method.value: by_method.get(method, 0) for method in PaymentMethod},
        )

    # ========================================
    # OPERACIONES DE ESCRITURA CON LÓGICA DE NEGOCIO
    # ========================================

    async def create_payment(
        self, db: AsyncSession, payment_in: payment_schema.PaymentCreate, constants: AppConstants = app_constants
    ) -> Payment:
        """
        Registra un pago para un pedido.

        Raises:
            ResourceNotFoundException: El pedido no existe (404)
            InvalidStateException: Pedido cancelado o ya pagado (409)
        """
        order = await self._get_order(db, payment_in.order_id)
        if order.status == OrderStatus.CANCELLED:
            raise InvalidStateException("Cannot pay a cancelled order", "لا يمكن دفع طلب ملغى")
        if order.payment_status == PaymentStatus.PAID:
            raise InvalidStateException("Order is already paid", "تم دفع الطلب مسبقاً")

        method = payment_in.payment_method
        transaction_id = generate_transaction_id()
        while await payment_crud.transaction_id_exists(db, transaction_id):
            transaction_id = generate_transaction_id()

        payment_data: Dict[str, Any] = {
            "display_id": generate_display_id(PAYMENT_PREFIX),
            "order_id": order.id,
            "payment_method": method,
            "transaction_id": transaction_id,
            "amount": Decimal(str(payment_in.amount)) if payment_in.amount is not None else order.total_amount,
            "currency": payment_in.currency or constants.DEFAULT_CURRENCY,
            "status": TransactionStatus.PROCESSING if method.is_e_wallet else TransactionStatus.PENDING,
            "notes": payment_in.notes,
        }
        if method.is_e_wallet:
            payment_data["payment_gateway"] = f"{method.value}_gateway"
            payment_data["wallet_phone"] = payment_in.wallet_phone.strip()
        elif method == PaymentMethod.BANK_TRANSFER and payment_in.bank_reference:
            payment_data["gateway_transaction_id"] = payment_in.bank_reference

        payment = await payment_crud.create_payment(db, payment_data)
        logger.info(
            f"💳 Pago registrado: {payment.display_id} ({method.value}, {payment.amount} {payment.currency}) "
            f"para el pedido {order.order_number}"
        )
        return payment

    async def confirm_payment(
        self, db: AsyncSession, payment_id: int, confirm_in: payment_schema.PaymentConfirm
    ) -> Payment:
        """Completa el pago y marca el pedido como pagado (un pedido pendiente pasa a CONFIRMED)."""
        payment = await self.get_payment_by_id(db, payment_id)
        changes = complete_changes(payment, confirm_in.gateway_transaction_id)
        if confirm_in.gateway_response is not None:
            changes["gateway_response"] = confirm_in.gateway_response

        order = await self._get_order(db, payment.order_id)
        order_crud.stage_order_changes(db, order, payment_status_changes(order, PaymentStatus.PAID))

        payment = await payment_crud.update_payment(db, payment, changes)
        logger.info(f"✅ Pago {payment.display_id} completado; pedido {payment.order_id} pagado")
        return payment

    async def reject_payment(self, db: AsyncSession, payment_id: int, reason: str) -> Payment:
        """Marca el pago como fallido; el pedido pendiente de pago pasa a FAILED."""
        payment = await self.get_payment_by_id(db, payment_id)
        changes = fail_changes(payment, reason)

        order = await self._get_order(db, payment.order_id)
        if order.payment_status == PaymentStatus.PENDING:
            order_crud.stage_order_changes(db, order, payment_status_changes(order, PaymentStatus.FAILED))

        payment = await payment_crud.update_payment(db, payment, changes)
        logger.warning(f"⚠️ Pago {payment.display_id} rechazado: {reason}")
        return payment

    async def refund_payment(self, db: AsyncSession, payment_id: int) -> Payment:
        payment = await self.get_payment_by_id(db, payment_id)
        changes = refund_changes(payment)

        order = await self._get_order(db, payment.order_id)
        order_crud.stage_order_changes(db, order, payment_status_changes(order, PaymentStatus.REFUNDED))

        payment = await payment_crud.update_payment(db, payment, changes)
        logger.info(f"↩️ Pago {payment.display_id} reembolsado")
        return payment

    async def _get_order(self, db: AsyncSession, order_id: int) -> Order:
        order = await order_crud.get_order(db, order_id)
        if not order:
            raise ResourceNotFoundException("Order", order_id)
        return order


# ========================================
# INSTANCIA SINGLETON DEL SERVICIO
# ========================================

payment_service = PaymentService()
