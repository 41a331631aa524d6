# backend/multistore/db/models/inventory_model.py
"""
Modelo del libro de movimientos de inventario.

Cada fila es un asiento inmutable (solo se inserta, nunca se actualiza):
entradas, salidas, reservas, liberaciones y ajustes manuales de stock.
"""

import enum

from sqlalchemy import Column, Integer, String, Text, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from multistore.db.database import Base


class MovementType(str, enum.Enum):
    """Tipo de movimiento de inventario."""
    IN = "IN"
    OUT = "OUT"
    ADJUSTMENT = "ADJUSTMENT"
    RESERVED = "RESERVED"
    RELEASED = "RELEASED"

    @property
    def label_ar(self) -> str:
        return _ARABIC_LABELS[self]

    @property
    def is_inbound(self) -> bool:
        return self in (MovementType.IN, MovementType.RELEASED)

    @property
    def is_outbound(self) -> bool:
        return self in (MovementType.OUT, MovementType.RESERVED)

    def effective_quantity(self, quantity: int) -> int:
        """
        Cantidad con signo que el movimiento aplica al stock.

        IN/RELEASED suman, OUT/RESERVED restan. ADJUSTMENT no es entrada ni
        salida: aplica la cantidad tal cual, que puede ser negativa.
        """
        if self.is_inbound:
            return quantity
        if self.is_outbound:
            return -quantity
        return quantity


_ARABIC_LABELS = {
    MovementType.IN: "دخول",
    MovementType.OUT: "خروج",
    MovementType.ADJUSTMENT: "تعديل",
    MovementType.RESERVED: "محجوز",
    MovementType.RELEASED: "محرر",
}


class InventoryMovement(Base):
    __tablename__ = "inventory_movements"

    id = Column(Integer, primary_key=True, index=True)
    display_id = Column(String(20), unique=True, nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    movement_type = Column(SAEnum(MovementType, name="movement_type", native_enum=False, length=20), nullable=False)
    quantity = Column(Integer, nullable=False)
    reference_type = Column(String(50), nullable=True)
    reference_id = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(String(100), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    product = relationship("Product", back_populates="movements")

    @property
    def is_inbound(self) -> bool:
        return MovementType(self.movement_type).is_inbound

    @property
    def is_outbound(self) -> bool:
        return MovementType(self.movement_type).is_outbound

    @property
    def effective_quantity(self) -> int:
        return MovementType(self.movement_type).effective_quantity(self.quantity)

    def __repr__(self):
        return f"<InventoryMovement(id={self.id}, product_id={self.product_id}, type='{self.movement_type}', qty={self.quantity})>"
