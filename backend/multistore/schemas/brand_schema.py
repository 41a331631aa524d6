# backend/multistore/schemas/brand_schema.py

"""
Esquemas Pydantic para el modelo Brand.

Patrón de esquemas utilizado:
- BrandBase: Propiedades comunes compartidas
- BrandCreate: Para crear nuevas marcas (POST)
- BrandUpdate: Para actualizar marcas existentes (PUT), campos opcionales
- BrandResponse: Para respuestas de la API (GET)
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from multistore.core.constants import app_constants
from multistore.schemas.common_schema import strip_required

# ========================================
# ESQUEMA BASE
# ========================================

class BrandBase(BaseModel):
    """Propiedades comunes compartidas entre esquemas de marca."""
    name: str = Field(..., min_length=1, max_length=app_constants.MAX_NAME_LENGTH)
    name_ar: Optional[str] = Field(None, max_length=app_constants.MAX_NAME_LENGTH)
    description: Optional[str] = Field(None, max_length=app_constants.MAX_DESCRIPTION_LENGTH)
    description_ar: Optional[str] = Field(None, max_length=app_constants.MAX_DESCRIPTION_LENGTH)
    logo_url: Optional[str] = Field(None, max_length=500)
    website_url: Optional[str] = Field(None, max_length=500)
    sort_order: int = Field(0, ge=app_constants.MIN_SORT_ORDER, le=app_constants.MAX_SORT_ORDER)
    is_active: bool = True


# ========================================
# ESQUEMAS PARA OPERACIONES
# ========================================

class BrandCreate(BrandBase):
    """Esquema para crear una nueva marca. El slug se genera a partir del nombre."""

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return strip_required(value)


class BrandUpdate(BrandBase):
    """Esquema para actualizar una marca. Todos los campos son opcionales."""
    name: Optional[str] = Field(None, min_length=1, max_length=app_constants.MAX_NAME_LENGTH)
    sort_order: Optional[int] = Field(None, ge=app_constants.MIN_SORT_ORDER, le=app_constants.MAX_SORT_ORDER)
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        return strip_required(value)


# ========================================
# ESQUEMA DE RESPUESTA
# ========================================

class BrandResponse(BrandBase):
    """Esquema para las respuestas de la API al leer marcas."""
    id: int
    display_id: str
    slug: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    product_count: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)
