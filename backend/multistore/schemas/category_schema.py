# backend/multistore/schemas/category_schema.py

"""
Esquemas Pydantic para el modelo Category.

Patrón de esquemas utilizado:
- CategoryBase: Propiedades comunes compartidas
- CategoryCreate: Para crear nuevas categorías (POST)
- CategoryUpdate: Para actualizar categorías existentes (PUT)
- CategoryResponse: Para respuestas de la API (GET), con hijos opcionales
- CategoryTreeResponse: Árbol completo con contadores
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from multistore.core.constants import app_constants
from multistore.schemas.common_schema import strip_required

# ========================================
# ESQUEMA BASE
# ========================================

class CategoryBase(BaseModel):
    """Propiedades comunes compartidas entre esquemas de categoría."""
    name: str = Field(..., min_length=1, max_length=app_constants.MAX_NAME_LENGTH)
    name_ar: Optional[str] = Field(None, max_length=app_constants.MAX_NAME_LENGTH)
    description: Optional[str] = Field(None, max_length=app_constants.MAX_DESCRIPTION_LENGTH)
    description_ar: Optional[str] = Field(None, max_length=app_constants.MAX_DESCRIPTION_LENGTH)
    parent_id: Optional[int] = None
    image_url: Optional[str] = Field(None, max_length=500)
    icon: Optional[str] = Field(None, max_length=100)
    sort_order: int = Field(0, ge=app_constants.MIN_SORT_ORDER, le=app_constants.MAX_SORT_ORDER)
    is_active: bool = True


# ========================================
# ESQUEMAS PARA OPERACIONES
# ========================================

class CategoryCreate(CategoryBase):
    """Esquema para crear una nueva categoría."""

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return strip_required(value)


class CategoryUpdate(CategoryBase):
    """Esquema para actualizar una categoría. Todos los campos son opcionales."""
    name: Optional[str] = Field(None, min_length=1, max_length=app_constants.MAX_NAME_LENGTH)
    sort_order: Optional[int] = Field(None, ge=app_constants.MIN_SORT_ORDER, le=app_constants.MAX_SORT_ORDER)
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        return strip_required(value)


# ========================================
# ESQUEMAS DE RESPUESTA
# ========================================

class CategoryResponse(CategoryBase):
    """Esquema para las respuestas de la API al leer categorías."""
    id: int
    display_id: str
    slug: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    product_count: Optional[int] = None
    children: Optional[List["CategoryResponse"]] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_orm_flat(cls, category) -> "CategoryResponse":
        """Convierte sin tocar la relación `children` (evita cargas perezosas)."""
        data = {field: getattr(category, field, None) for field in cls.model_fields if field not in ("children", "product_count")}
        return cls(**data)


class CategoryTreeResponse(BaseModel):
    """
    Árbol de categorías activas.

    `categories` contiene las raíces con sus hijos anidados; los contadores
    se calculan sobre todos los nodos del árbol, así que siempre se cumple
    total_categories == parent_categories + child_categories.
    """
    categories: List[CategoryResponse]
    total_categories: int
    active_categories: int
    parent_categories: int
    child_categories: int

    @classmethod
    def from_roots(cls, roots: List[CategoryResponse]) -> "CategoryTreeResponse":
        nodes: List[CategoryResponse] = []
        pending = list(roots)
        while pending:
            node = pending.pop()
            nodes.append(node)
            pending.extend(node.children or [])

        return cls(
            categories=roots,
            total_categories=len(nodes),
            active_categories=sum(1 for node in nodes if node.is_active),
            parent_categories=sum(1 for node in nodes if node.parent_id is None),
            child_categories=sum(1 for node in nodes if node.parent_id is not None),
        )


CategoryResponse.model_rebuild()
