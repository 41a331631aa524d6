# backend/multistore/main.py
"""
Punto de entrada principal de la aplicación FastAPI.

Este módulo configura y inicializa la aplicación FastAPI completa,
incluyendo la configuración de rutas, middleware, manejadores de errores
y eventos del ciclo de vida de la aplicación.

Características principales:
- Configuración centralizada de la aplicación
- Limitación de peticiones por IP (ventana fija)
- Respuestas de error homogéneas (ApiResponse)
- Registro de routers de la API protegidos por API key
"""

import logging

from fastapi import Depends, FastAPI

from multistore.api import deps
from multistore.api.v1.api_router import api_router_v1
from multistore.core.config import settings
from multistore.core.constants import app_constants
from multistore.core.error_handlers import register_exception_handlers
from multistore.core.logging_config import setup_logging
from multistore.core.rate_limiter import RateLimiter, RateLimitMiddleware
from multistore.db import base  # noqa: F401 (registra todos los modelos)
from multistore.db.database import create_tables

setup_logging(settings)
logger = logging.getLogger(__name__)

# ========================================
# CONFIGURACIÓN DE LA APLICACIÓN FASTAPI
# ========================================

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    version=settings.PROJECT_VERSION,
    description="API multitienda: catálogo, inventario, pedidos y usuarios",
)

# Contador compartido por todas las peticiones; los tests lo reinician entre casos
rate_limiter = RateLimiter(app_constants.RATE_LIMIT_REQUESTS, app_constants.RATE_LIMIT_PERIOD_SECONDS)
app.add_middleware(
    RateLimitMiddleware,
    limiter=rate_limiter,
    constants=app_constants,
    enabled=settings.RATE_LIMIT_ENABLED,
)

register_exception_handlers(app)

# ========================================
# REGISTRO DE ROUTERS DE LA API
# ========================================

# Todas las rutas de /api/v1 exigen la API key; / y /health son públicas
app.include_router(
    api_router_v1,
    prefix=app_constants.API_BASE_PATH,
    dependencies=[Depends(deps.verify_api_key)],
)


# ========================================
# ENDPOINTS RAÍZ Y VERIFICACIÓN DE ESTADO
# ========================================

@app.get("/", tags=["Root"])
async def read_root():
    """
    Endpoint raíz para verificación básica del estado de la API.

    Example:
        GET /
        Response: {"message": "Bienvenido a Multistore API v0.1.0"}
    """
    return {"message": f"Bienvenido a {settings.PROJECT_NAME} v{settings.PROJECT_VERSION}"}


@app.get("/health", tags=["Root"])
async def health_check():
    return {"status": "healthy"}


# ========================================
# EVENTOS DEL CICLO DE VIDA DE LA APLICACIÓN
# ========================================

@app.on_event("startup")
async def startup_event():
    """
    Evento ejecutado al iniciar la aplicación.

    Crea las tablas si CREATE_TABLES_ON_STARTUP está activo (desarrollo local);
    en producción el esquema se gestiona fuera de la aplicación.
    """
    logger.info(f"🚀 Iniciando {settings.PROJECT_NAME} v{settings.PROJECT_VERSION}")
    if settings.CREATE_TABLES_ON_STARTUP:
        await create_tables()
        logger.info("✅ Tablas de base de datos verificadas/creadas")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("multistore.main:app", host=settings.HOST, port=settings.PORT)
