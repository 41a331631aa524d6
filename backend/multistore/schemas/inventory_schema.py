# backend/multistore/schemas/inventory_schema.py
"""
Esquemas Pydantic para los movimientos de inventario.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from multistore.db.models.inventory_model import MovementType


class MovementCreate(BaseModel):
    """Esquema para registrar un movimiento. Solo ADJUSTMENT admite cantidades negativas."""
    product_id: int
    movement_type: MovementType
    quantity: int = Field(..., description="Unidades del movimiento")
    reference_type: Optional[str] = Field(None, max_length=50)
    reference_id: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=5000)
    created_by: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def validate_quantity_sign(self):
        if self.quantity == 0:
            raise ValueError("quantity must not be zero")
        if self.quantity < 0 and self.movement_type != MovementType.ADJUSTMENT:
            raise ValueError("only ADJUSTMENT movements may have a negative quantity")
        return self


class MovementResponse(BaseModel):
    """Esquema de respuesta de un movimiento, con su efecto firmado sobre el stock."""
    id: int
    display_id: str
    product_id: int
    movement_type: MovementType
    movement_type_ar: str
    quantity: int
    effective_quantity: int
    is_inbound: bool
    is_outbound: bool
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_movement(cls, movement) -> "MovementResponse":
        movement_type = MovementType(movement.movement_type)
        return cls(
            id=movement.id,
            display_id=movement.display_id,
            product_id=movement.product_id,
            movement_type=movement_type,
            movement_type_ar=movement_type.label_ar,
            quantity=movement.quantity,
            effective_quantity=movement.effective_quantity,
            is_inbound=movement.is_inbound,
            is_outbound=movement.is_outbound,
            reference_type=movement.reference_type,
            reference_id=movement.reference_id,
            notes=movement.notes,
            created_by=movement.created_by,
            created_at=movement.created_at,
        )


class StockBalanceResponse(BaseModel):
    """Saldo calculado a partir del libro frente al stock actual del producto."""
    product_id: int
    ledger_balance: int
    stock_quantity: int
    movement_count: int
