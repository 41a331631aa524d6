# backend/multistore/schemas/common_schema.py

"""
Esquemas compartidos por todas las respuestas de la API.

Toda respuesta (éxito o error) se envuelve en ApiResponse para que los clientes
tengan un formato único; los listados usan además PaginatedResponse.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar

from pydantic import BaseModel, Field

from multistore.utils.pagination import PageRequest, calculate_total_pages

T = TypeVar("T")


def new_request_id() -> str:
    """Identificador corto de petición para correlacionar logs y respuestas."""
    return uuid.uuid4().hex[:8]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def strip_required(value: Optional[str]) -> Optional[str]:
    """Validador compartido: recorta espacios y rechaza cadenas vacías."""
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


# ========================================
# ENVOLTURA GENÉRICA
# ========================================

class ApiResponse(BaseModel, Generic[T]):
    """Envoltura estándar de todas las respuestas."""
    success: bool = True
    message: Optional[str] = None
    message_ar: Optional[str] = None
    data: Optional[T] = None
    errors: Optional[Dict[str, Any]] = None
    status_code: int = 200
    timestamp: datetime = Field(default_factory=utc_now)
    request_id: str = Field(default_factory=new_request_id)
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def ok(cls, data: Any = None, message: str = "Success", message_ar: Optional[str] = "تم بنجاح") -> "ApiResponse":
        return cls(data=data, message=message, message_ar=message_ar)

    @classmethod
    def created(cls, data: Any = None, message: str = "Created successfully", message_ar: Optional[str] = "تم الإنشاء بنجاح") -> "ApiResponse":
        return cls(data=data, message=message, message_ar=message_ar, status_code=201)

    @classmethod
    def error(
        cls,
        message: str,
        status_code: int,
        message_ar: Optional[str] = None,
        errors: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ApiResponse":
        return cls(
            success=False,
            message=message,
            message_ar=message_ar,
            errors=errors,
            status_code=status_code,
            metadata=metadata,
        )


# ========================================
# PAGINACIÓN
# ========================================

class PageInfo(BaseModel):
    page_number: int
    page_size: int
    total_elements: int
    total_pages: int
    has_next: bool
    has_previous: bool
    is_first: bool
    is_last: bool

    @classmethod
    def from_counts(cls, page: int, size: int, total_elements: int) -> "PageInfo":
        total_pages = calculate_total_pages(total_elements, size)
        return cls(
            page_number=page,
            page_size=size,
            total_elements=total_elements,
            total_pages=total_pages,
            has_next=page < total_pages - 1,
            has_previous=page > 0,
            is_first=page == 0,
            is_last=page >= total_pages - 1,
        )


class PaginatedResponse(BaseModel, Generic[T]):
    """Página de resultados con su metainformación."""
    content: List[T]
    page_info: PageInfo

    @classmethod
    def build(cls, content: List[Any], page_request: PageRequest, total_elements: int) -> "PaginatedResponse":
        return cls(
            content=content,
            page_info=PageInfo.from_counts(page_request.page, page_request.size, total_elements),
        )


class HealthResponse(BaseModel):
    status: str = "UP"
    service: str


def update_payload(update_in: BaseModel, non_nullable: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Campos enviados explícitamente en una actualización.

    Un null en una columna obligatoria se interpreta como "sin cambios".
    """
    data = update_in.model_dump(exclude_unset=True)
    return {key: value for key, value in data.items() if value is not None or key not in non_nullable}
