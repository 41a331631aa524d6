# backend/multistore/api/deps.py
"""
Módulo de dependencias para FastAPI.

Este archivo centraliza todas las dependencias que pueden ser inyectadas
en los endpoints de la API: sesión de base de datos, configuración,
constantes de la aplicación, parámetros de paginación y validación de la API key.
"""

from typing import AsyncGenerator, Callable, Optional

from fastapi import Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status

from multistore.core.config import Settings, settings
from multistore.core.constants import AppConstants, app_constants
from multistore.core.exceptions import BusinessException
from multistore.core.security import extract_api_key, is_valid_api_key
from multistore.db.database import AsyncSessionLocal
from multistore.utils.pagination import PageRequest, create_page_request


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependencia de FastAPI para obtener una sesión de base de datos asíncrona.
    Si el endpoint falla se deshace la transacción en curso; la sesión se
    cierra siempre después de la petición.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def get_settings() -> Settings:
    """
    Dependencia de FastAPI para obtener el objeto de configuración.
    """
    return settings


def get_constants() -> AppConstants:
    """Constantes inmutables de la aplicación, construidas al arrancar."""
    return app_constants


def pagination_params(default_sort_by: Optional[str] = None, default_sort_dir: Optional[str] = None) -> Callable[..., PageRequest]:
    """
    Fábrica de dependencias de paginación.

    Cada listado puede fijar su propio orden por defecto, p.ej. las marcas
    se ordenan por nombre ascendente.
    """

    def dependency(
        page: Optional[int] = Query(0, description="Número de página (base 0)"),
        size: Optional[int] = Query(None, description="Tamaño de página"),
        sort_by: Optional[str] = Query(None, description="Campo de ordenación"),
        sort_dir: Optional[str] = Query(None, description="Dirección: asc o desc"),
        constants: AppConstants = Depends(get_constants),
    ) -> PageRequest:
        return create_page_request(
            page,
            size,
            sort_by or default_sort_by,
            sort_dir or default_sort_dir,
            constants=constants,
        )

    return dependency


async def verify_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    authorization: Optional[str] = Header(None),
    config: Settings = Depends(get_settings),
    constants: AppConstants = Depends(get_constants),
) -> None:
    """
    Valida la API key enviada en X-API-Key o en 'Authorization: Bearer <clave>'.

    Raises:
        BusinessException: Clave ausente o incorrecta (401)
    """
    if not config.API_KEY_ENABLED:
        return

    provided = extract_api_key(x_api_key, authorization, constants)
    if not is_valid_api_key(provided, config.API_KEY):
        raise BusinessException("Invalid API Key", "مفتاح API غير صحيح", status.HTTP_401_UNAUTHORIZED)
