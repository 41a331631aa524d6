# backend/multistore/core/exceptions.py
"""
Excepciones de negocio de la aplicación.

Todas heredan de HTTPException para que los servicios las lancen en los mismos
puntos donde lanzarían un HTTPException normal; el manejador global
(`core.error_handlers`) las convierte en la envoltura ApiResponse.
"""

from typing import Any, Optional

from fastapi import HTTPException
from starlette import status


class BusinessException(HTTPException):
    """Violación de una regla de negocio. Por defecto responde 400."""

    def __init__(self, message: str, message_ar: Optional[str] = None, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.message_ar = message_ar

    @classmethod
    def bad_request(cls, message: str, message_ar: Optional[str] = None) -> "BusinessException":
        return cls(message, message_ar, status.HTTP_400_BAD_REQUEST)

    @classmethod
    def conflict(cls, message: str, message_ar: Optional[str] = None) -> "BusinessException":
        return cls(message, message_ar, status.HTTP_409_CONFLICT)

    @classmethod
    def forbidden(cls, message: str, message_ar: Optional[str] = None) -> "BusinessException":
        return cls(message, message_ar, status.HTTP_403_FORBIDDEN)


class ResourceNotFoundException(BusinessException):
    """El recurso solicitado no existe (404)."""

    def __init__(self, resource_type: str, identifier: Any, field: str = "id"):
        super().__init__(
            f"{resource_type} not found with {field}: {identifier}",
            "المورد غير موجود",
            status.HTTP_404_NOT_FOUND,
        )
        self.resource_type = resource_type
        self.field = field
        self.identifier = identifier


class DuplicateResourceException(BusinessException):
    """Ya existe un recurso con el mismo valor en un campo único (409)."""

    def __init__(self, resource_type: str, field: str, value: Any):
        super().__init__(
            f"{resource_type} already exists with {field}: '{value}'",
            "المورد موجود مسبقاً",
            status.HTTP_409_CONFLICT,
        )
        self.resource_type = resource_type
        self.field = field
        self.value = value


class InvalidStateException(BusinessException):
    """La transición de estado solicitada no es válida (409)."""

    def __init__(self, message: str, message_ar: Optional[str] = None):
        super().__init__(message, message_ar, status.HTTP_409_CONFLICT)
