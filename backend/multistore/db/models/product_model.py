# backend/multistore/db/models/product_model.py
"""
Este archivo contiene el modelo de producto para la aplicación.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict

from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from multistore.db.database import Base
from multistore.db.models.common import stamp


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    display_id = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    name_ar = Column(String(255), nullable=True)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    description_ar = Column(Text, nullable=True)
    short_description = Column(String(500), nullable=True)
    short_description_ar = Column(String(500), nullable=True)
    sku = Column(String(100), unique=True, nullable=False, index=True)
    barcode = Column(String(100), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="SET NULL"), nullable=True, index=True)
    price = Column(Numeric(12, 2), nullable=False)
    compare_price = Column(Numeric(12, 2), nullable=True)
    cost_price = Column(Numeric(12, 2), nullable=True)
    weight = Column(Numeric(10, 3), nullable=True)
    stock_quantity = Column(Integer, nullable=False, default=0)
    min_stock_level = Column(Integer, nullable=False, default=5)
    track_inventory = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    is_digital = Column(Boolean, nullable=False, default=False)
    requires_shipping = Column(Boolean, nullable=False, default=True)
    attributes = Column(JSON, nullable=True)
    tags = Column(JSON, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    category = relationship("Category", back_populates="products")
    brand = relationship("Brand", back_populates="products")
    movements = relationship("InventoryMovement", back_populates="product", cascade="all, delete-orphan", passive_deletes=True)

    # ========================================
    # PROPIEDADES DE NEGOCIO (solo lectura)
    # ========================================

    @property
    def is_available(self) -> bool:
        return bool(self.is_active) and (self.stock_quantity or 0) > 0

    @property
    def is_low_stock(self) -> bool:
        return (self.stock_quantity or 0) <= (self.min_stock_level or 0)

    @property
    def is_out_of_stock(self) -> bool:
        return (self.stock_quantity or 0) == 0

    @property
    def discount_percentage(self) -> Decimal:
        """Porcentaje de descuento respecto a compare_price, con dos decimales."""
        if self.compare_price is None or Decimal(self.compare_price) <= 0:
            return Decimal("0")
        compare = Decimal(self.compare_price)
        discount = (compare - Decimal(self.price)) / compare * 100
        return discount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def __repr__(self):
        return f"<Product(id={self.id}, sku='{self.sku}', stock={self.stock_quantity})>"


def stock_changes(new_quantity: int) -> Dict[str, Any]:
    """Cambios para fijar un nuevo nivel de stock."""
    return stamp({"stock_quantity": new_quantity})
