# backend/multistore/schemas/payment_schema.py
"""
Esquemas Pydantic para los pagos de pedidos.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from multistore.db.models.payment_model import PaymentMethod, TransactionStatus, WalletType


class PaymentCreate(BaseModel):
    """
    Esquema para registrar un pago de un pedido.

    Si no se indica `amount` se cobra el total del pedido. Los pagos con
    monedero electrónico exigen un teléfono válido para ese monedero.
    """
    order_id: int = Field(..., description="ID del pedido")
    payment_method: PaymentMethod
    amount: Optional[float] = Field(None, gt=0, le=99999999.99, description="Importe; por defecto el total del pedido")
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    wallet_phone: Optional[str] = Field(None, max_length=20, description="Teléfono del monedero electrónico")
    bank_reference: Optional[str] = Field(None, max_length=255, description="Referencia de la transferencia")
    notes: Optional[str] = Field(None, max_length=5000)

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v):
        return v.upper() if v else v

    @model_validator(mode="after")
    def validate_wallet_phone(self):
        if self.payment_method.is_e_wallet:
            wallet = WalletType(self.payment_method.value)
            if not self.wallet_phone or not self.wallet_phone.strip():
                raise ValueError("wallet phone is required for e-wallet payments")
            if not wallet.supports_phone(self.wallet_phone):
                raise ValueError(f"invalid phone number for {wallet.value} wallet")
        return self


class PaymentConfirm(BaseModel):
    gateway_transaction_id: Optional[str] = Field(None, max_length=255)
    gateway_response: Optional[Dict[str, Any]] = None


class PaymentReject(BaseModel):
    reason: str = Field(..., min_length=1, max_length=1000, description="Motivo del rechazo")

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v):
        if not v.strip():
            raise ValueError("reason is required")
        return v.strip()


class PaymentResponse(BaseModel):
    """Esquema de respuesta de un pago."""
    id: int
    display_id: str
    order_id: int
    payment_method: PaymentMethod
    method_label_ar: str
    payment_gateway: Optional[str] = None
    transaction_id: str
    gateway_transaction_id: Optional[str] = None
    wallet_phone: Optional[str] = None
    amount: float
    currency: str
    status: TransactionStatus
    gateway_response: Optional[Dict[str, Any]] = None
    failure_reason: Optional[str] = None
    notes: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentStatisticsResponse(BaseModel):
    """Resumen agregado de pagos."""
    total_payments: int = 0
    successful_payments: int = 0
    failed_payments: int = 0
    pending_payments: int = 0
    refunded_payments: int = 0
    total_amount: float = 0
    today_amount: float = 0
    method_statistics: Dict[str, int] = {}
