# backend/multistore/crud/payment_crud.py
"""
Operaciones CRUD para el modelo Payment, incluidas las agregaciones
que alimentan las estadísticas de pagos.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.crud.common_crud import apply_changes, fetch_page
from multistore.db.models.payment_model import Payment, PaymentMethod, TransactionStatus
from multistore.utils.pagination import PageRequest


def _payment_query():
    return select(Payment).execution_options(populate_existing=True)


# ========================================
# OPERACIONES DE LECTURA (READ)
# ========================================

async def get_payment(db: AsyncSession, payment_id: int) -> Optional[Payment]:
    result = await db.execute(_payment_query().filter(Payment.id == payment_id))
    return result.scalars().first()


async def get_payment_by_display_id(db: AsyncSession, display_id: str) -> Optional[Payment]:
    result = await db.execute(_payment_query().filter(Payment.display_id == display_id))
    return result.scalars().first()


async def get_payment_by_transaction_id(db: AsyncSession, transaction_id: str) -> Optional[Payment]:
    result = await db.execute(_payment_query().filter(Payment.transaction_id == transaction_id))
    return result.scalars().first()


async def transaction_id_exists(db: AsyncSession, transaction_id: str) -> bool:
    result = await db.execute(select(Payment.id).filter(Payment.transaction_id == transaction_id).limit(1))
    return result.first() is not None


async def get_payments_by_order(db: AsyncSession, order_id: int) -> List[Payment]:
    """Pagos de un pedido en orden de creación."""
    result = await db.execute(
        _payment_query().filter(Payment.order_id == order_id).order_by(Payment.created_at, Payment.id)
    )
    return list(result.scalars().all())


async def get_payments(
    db: AsyncSession,
    page_request: PageRequest,
    status: Optional[TransactionStatus] = None,
    payment_method: Optional[PaymentMethod] = None,
) -> Tuple[List[Payment], int]:
    query = _payment_query()
    if status is not None:
        query = query.filter(Payment.status == status)
    if payment_method is not None:
        query = query.filter(Payment.payment_method == payment_method)
    return await fetch_page(db, query, Payment, page_request)


# ========================================
# AGREGACIONES
# ========================================

async def count_by_status(db: AsyncSession) -> Dict[TransactionStatus, int]:
    result = await db.execute(select(Payment.status, func.count(Payment.id)).group_by(Payment.status))
    return {TransactionStatus(status): count for status, count in result.all()}


async def count_by_method(db: AsyncSession) -> Dict[PaymentMethod, int]:
    result = await db.execute(select(Payment.payment_method, func.count(Payment.id)).group_by(Payment.payment_method))
    return {PaymentMethod(method): count for method, count in result.all()}


async def sum_completed_amount(db: AsyncSession, since: Optional[datetime] = None) -> Decimal:
    """Importe total de los pagos completados, opcionalmente desde `since` (por processed_at)."""
    query = select(func.coalesce(func.sum(Payment.amount), 0)).filter(Payment.status == TransactionStatus.COMPLETED)
    if since is not None:
        query = query.filter(Payment.processed_at >= since)
    total = (await db.execute(query)).scalar_one()
    return Decimal(str(total)).quantize(Decimal("0.01"))


# ========================================
# OPERACIONES DE ESCRITURA (CREATE, UPDATE)
# ========================================

async def create_payment(db: AsyncSession, payment_data: Dict[str, Any]) -> Payment:
    db_payment = Payment(**payment_data)
    db.add(db_payment)
    await db.commit()
    await db.refresh(db_payment)
    return db_payment


async def update_payment(db: AsyncSession, db_payment: Payment, changes: Dict[str, Any]) -> Payment:
    """Aplica los cambios y confirma; también se confirma lo que ya esté preparado en la sesión."""
    return await apply_changes(db, db_payment, changes)
