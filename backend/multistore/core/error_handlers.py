# backend/multistore/core/error_handlers.py
"""
Manejadores globales de excepciones.

Convierte cualquier error en una respuesta JSON con la envoltura ApiResponse
(success=False), de modo que los clientes reciben siempre el mismo formato.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from multistore.core.exceptions import BusinessException
from multistore.schemas.common_schema import ApiResponse

logger = logging.getLogger(__name__)


def _error_response(
    request: Request,
    exc: Exception,
    status_code: int,
    message: str,
    message_ar: Optional[str] = None,
    errors: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = ApiResponse.error(
        message=message,
        status_code=status_code,
        message_ar=message_ar,
        errors=errors,
        metadata={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
    )
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


def _validation_errors(exc: RequestValidationError) -> Dict[str, str]:
    """Aplana los errores de pydantic a un diccionario campo -> mensaje."""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(location) or "request"
        errors.setdefault(field, error.get("msg", "Invalid value"))
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """Registra los manejadores de excepciones en la aplicación."""

    @app.exception_handler(BusinessException)
    async def business_exception_handler(request: Request, exc: BusinessException):
        logger.warning(f"⚠️ NEGOCIO: {exc.message} ({request.method} {request.url.path})")
        return _error_response(request, exc, exc.status_code, exc.message, exc.message_ar, headers=exc.headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(request, exc, exc.status_code, str(exc.detail), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = _validation_errors(exc)
        logger.info(f"📝 VALIDACIÓN: {request.method} {request.url.path} -> {errors}")
        return _error_response(
            request, exc, status.HTTP_400_BAD_REQUEST,
            "Validation failed", "فشل التحقق من البيانات", errors=errors,
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, str(exc), "قيمة غير صالحة")

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.error(f"❌ INTEGRIDAD: {exc.orig}")
        return _error_response(
            request, exc, status.HTTP_409_CONFLICT,
            "Data integrity violation", "انتهاك سلامة البيانات",
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"❌ ERROR: Excepción no controlada en {request.method} {request.url.path}")
        return _error_response(
            request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred", "حدث خطأ غير متوقع",
        )
