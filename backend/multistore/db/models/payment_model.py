# backend/multistore/db/models/payment_model.py
"""
Modelo de pagos de pedidos.

Un pedido puede acumular varios intentos de pago (uno rechazado y otro
completado, por ejemplo). Cada pago pasa por PENDING/PROCESSING hasta un
estado final; las transiciones son funciones puras como las del pedido.
"""

import enum
import re
from typing import Any, Dict, Optional

from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey, JSON, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from multistore.core.exceptions import InvalidStateException
from multistore.db.database import Base
from multistore.db.models.common import stamp, utc_now


class PaymentMethod(str, enum.Enum):
    """Medios de pago aceptados."""
    JEEB = "jeeb"
    FLOUSI = "flousi"
    MOBILE_MONEY = "mobile_money"
    CASH_ON_DELIVERY = "cash_on_delivery"
    BANK_TRANSFER = "bank_transfer"

    @property
    def label_ar(self) -> str:
        return _METHOD_LABELS[self]

    @property
    def is_electronic(self) -> bool:
        return self != PaymentMethod.CASH_ON_DELIVERY

    @property
    def is_e_wallet(self) -> bool:
        return self in (PaymentMethod.JEEB, PaymentMethod.FLOUSI, PaymentMethod.MOBILE_MONEY)


_METHOD_LABELS = {
    PaymentMethod.JEEB: "جيب",
    PaymentMethod.FLOUSI: "فلوسي",
    PaymentMethod.MOBILE_MONEY: "موبايل موني",
    PaymentMethod.CASH_ON_DELIVERY: "الدفع عند التسليم",
    PaymentMethod.BANK_TRANSFER: "تحويل بنكي",
}


class TransactionStatus(str, enum.Enum):
    """Estado de un pago concreto (distinto del PaymentStatus agregado del pedido)."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    @property
    def is_final(self) -> bool:
        return self in (
            TransactionStatus.COMPLETED,
            TransactionStatus.FAILED,
            TransactionStatus.CANCELLED,
            TransactionStatus.REFUNDED,
        )


class WalletType(str, enum.Enum):
    """
    Monederos electrónicos locales.

    Cada monedero solo admite números de su operador: 9 dígitos locales con
    el prefijo correspondiente (77 Jeeb, 73 Flousi, 70/71/78 Mobile Money).
    """
    JEEB = "jeeb"
    FLOUSI = "flousi"
    MOBILE_MONEY = "mobile_money"

    @property
    def label_ar(self) -> str:
        return _METHOD_LABELS[PaymentMethod(self.value)]

    def supports_phone(self, phone: Optional[str]) -> bool:
        if not phone or len(phone) < 8:
            return False
        digits = re.sub(r"\D", "", phone)
        # Se acepta también el número internacional (+967 / 00967)
        for country_code in ("00967", "967"):
            if len(digits) > 9 and digits.startswith(country_code):
                digits = digits[len(country_code):]
                break
        return len(digits) == 9 and digits.startswith(_WALLET_PREFIXES[self])


_WALLET_PREFIXES = {
    WalletType.JEEB: ("77",),
    WalletType.FLOUSI: ("73",),
    WalletType.MOBILE_MONEY: ("70", "71", "78"),
}


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    display_id = Column(String(20), unique=True, nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    payment_method = Column(
        SAEnum(PaymentMethod, name="payment_method", native_enum=False, length=30, values_callable=_enum_values),
        nullable=False,
    )
    payment_gateway = Column(String(50), nullable=True)
    transaction_id = Column(String(100), unique=True, nullable=False, index=True)
    gateway_transaction_id = Column(String(255), nullable=True)
    wallet_phone = Column(String(20), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="YER")
    status = Column(
        SAEnum(TransactionStatus, name="transaction_status", native_enum=False, length=20, values_callable=_enum_values),
        nullable=False, default=TransactionStatus.PENDING, index=True,
    )
    gateway_response = Column(JSON, nullable=True)
    failure_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    processed_at = Column(TIMESTAMP(timezone=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def can_be_processed(self) -> bool:
        return self.status in (TransactionStatus.PENDING, TransactionStatus.PROCESSING)

    @property
    def is_successful(self) -> bool:
        return self.status == TransactionStatus.COMPLETED

    @property
    def method_label_ar(self) -> str:
        return PaymentMethod(self.payment_method).label_ar

    def __repr__(self):
        return f"<Payment(id={self.id}, transaction='{self.transaction_id}', status='{self.status}')>"


# ========================================
# TRANSICIONES DE ESTADO (funciones puras)
# ========================================

def complete_changes(payment: Payment, gateway_transaction_id: Optional[str] = None) -> Dict[str, Any]:
    if not payment.can_be_processed:
        raise InvalidStateException(
            f"Payment cannot be processed in current state: {payment.status.value}",
            "لا يمكن معالجة الدفع في حالته الحالية",
        )
    changes: Dict[str, Any] = {"status": TransactionStatus.COMPLETED, "processed_at": utc_now()}
    if gateway_transaction_id:
        changes["gateway_transaction_id"] = gateway_transaction_id
    return stamp(changes)


def fail_changes(payment: Payment, reason: str) -> Dict[str, Any]:
    if payment.status.is_final:
        raise InvalidStateException(
            f"Payment is already final: {payment.status.value}",
            "تمت معالجة الدفع مسبقاً",
        )
    return stamp({"status": TransactionStatus.FAILED, "failure_reason": reason, "processed_at": utc_now()})


def refund_changes(payment: Payment) -> Dict[str, Any]:
    if not payment.is_successful:
        raise InvalidStateException(
            f"Only completed payments can be refunded, current state: {payment.status.value}",
            "لا يمكن استرداد إلا المدفوعات المكتملة",
        )
    return stamp({"status": TransactionStatus.REFUNDED})
