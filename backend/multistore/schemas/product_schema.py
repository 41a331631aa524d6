# backend/multistore/schemas/product_schema.py
"""
Esquemas Pydantic para el modelo Product.

Se encarga de definir los esquemas de entrada (creación, actualización,
stock, estado) y de respuesta, incluyendo los campos derivados
(is_available, is_low_stock, discount_percentage).
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from multistore.core.constants import app_constants
from multistore.schemas.common_schema import strip_required


def _parse_attributes(value):
    """Permite que attributes se reciba como un string JSON y lo parsea."""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            raise ValueError("Invalid JSON string for attributes")
        if not isinstance(value, dict):
            raise ValueError("attributes must be a JSON object")
    return value

# ========================================
# ESQUEMA BASE
# ========================================

class ProductBase(BaseModel):
    """Propiedades comunes compartidas entre esquemas de producto."""
    name: str = Field(..., min_length=1, max_length=app_constants.MAX_NAME_LENGTH)
    name_ar: Optional[str] = Field(None, max_length=app_constants.MAX_NAME_LENGTH)
    description: Optional[str] = Field(None, max_length=app_constants.MAX_DESCRIPTION_LENGTH)
    description_ar: Optional[str] = Field(None, max_length=app_constants.MAX_DESCRIPTION_LENGTH)
    short_description: Optional[str] = Field(None, max_length=500)
    short_description_ar: Optional[str] = Field(None, max_length=500)
    barcode: Optional[str] = Field(None, max_length=100)
    category_id: Optional[int] = None
    brand_id: Optional[int] = None
    price: float = Field(..., gt=0, le=99999999.99)
    compare_price: Optional[float] = Field(None, ge=0, le=99999999.99)
    cost_price: Optional[float] = Field(None, ge=0, le=99999999.99)
    weight: Optional[float] = Field(None, ge=0)
    min_stock_level: int = Field(5, ge=0)
    track_inventory: bool = True
    is_active: bool = True
    is_featured: bool = False
    is_digital: bool = False
    requires_shipping: bool = True
    attributes: Optional[Dict[str, Any]] = None
    tags: Optional[List[str]] = None


# ========================================
# ESQUEMAS PARA OPERACIONES
# ========================================

class ProductCreate(ProductBase):
    """Esquema para crear un nuevo producto. Si no se indica slug, se genera del nombre."""
    sku: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=255)
    stock_quantity: int = Field(0, ge=0)

    @field_validator("name", "sku")
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        return strip_required(value)

    @field_validator("attributes", mode="before")
    @classmethod
    def parse_attributes(cls, value):
        return _parse_attributes(value)


class ProductUpdate(ProductBase):
    """
    Esquema para actualizar un producto. Todos los campos son opcionales.
    El stock no se modifica aquí sino en PUT /{id}/stock, que deja rastro en el libro.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=app_constants.MAX_NAME_LENGTH)
    sku: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=255)
    price: Optional[float] = Field(None, gt=0, le=99999999.99)
    min_stock_level: Optional[int] = Field(None, ge=0)
    track_inventory: Optional[bool] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_digital: Optional[bool] = None
    requires_shipping: Optional[bool] = None

    @field_validator("name", "sku")
    @classmethod
    def validate_required_text(cls, value: Optional[str]) -> Optional[str]:
        return strip_required(value)

    @field_validator("attributes", mode="before")
    @classmethod
    def parse_attributes(cls, value):
        return _parse_attributes(value)


class ProductStatusUpdate(BaseModel):
    """Esquema para activar o desactivar un producto."""
    is_active: bool


class ProductStockUpdate(BaseModel):
    """Esquema para fijar el nivel de stock de un producto."""
    stock_quantity: int = Field(..., description="Nuevo nivel de stock")
    reason: Optional[str] = Field(None, max_length=500, description="Motivo del ajuste")


# ========================================
# ESQUEMA DE RESPUESTA
# ========================================

class ProductResponse(ProductBase):
    """Esquema de respuesta para un producto con sus campos derivados."""
    id: int
    display_id: str
    sku: str
    slug: str
    stock_quantity: int
    is_available: bool
    is_low_stock: bool
    discount_percentage: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
