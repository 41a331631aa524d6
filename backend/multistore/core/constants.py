# backend/multistore/core/constants.py
"""
Constantes de la aplicación.

Se agrupan en un dataclass inmutable que se construye una sola vez al arrancar
(a partir de `settings`) y se inyecta en los endpoints mediante
`deps.get_constants`. Ningún módulo debe modificarlas en tiempo de ejecución.
"""

from dataclasses import dataclass, replace

from multistore.core.config import Settings, settings


@dataclass(frozen=True)
class AppConstants:
    # API
    API_BASE_PATH: str = "/api/v1"
    API_KEY_HEADER: str = "X-API-Key"
    AUTHORIZATION_HEADER: str = "Authorization"
    BEARER_PREFIX: str = "Bearer "

    # Paginación
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    DEFAULT_SORT_BY: str = "created_at"
    DEFAULT_SORT_DIR: str = "desc"

    # Rate limiting
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_PERIOD_SECONDS: int = 60
    RATE_LIMIT_HEADER: str = "X-RateLimit-Limit"
    RATE_LIMIT_REMAINING_HEADER: str = "X-RateLimit-Remaining"
    RATE_LIMIT_RESET_HEADER: str = "X-RateLimit-Reset"

    # Inventario
    MAX_STOCK_QUANTITY: int = 999999

    # Pedidos
    DEFAULT_SHIPPING_COST: float = 5000.0
    DEFAULT_CURRENCY: str = "YER"
    MAX_ORDER_ITEMS: int = 50

    # Validación
    MAX_NAME_LENGTH: int = 255
    MIN_PASSWORD_LENGTH: int = 6
    MAX_DESCRIPTION_LENGTH: int = 5000
    MIN_SORT_ORDER: int = 0
    MAX_SORT_ORDER: int = 9999


def build_constants(config: Settings) -> AppConstants:
    """Aplica sobre los valores por defecto lo que también existe en la configuración."""
    return replace(
        AppConstants(),
        API_BASE_PATH=config.API_V1_STR,
        RATE_LIMIT_REQUESTS=config.RATE_LIMIT_REQUESTS,
        RATE_LIMIT_PERIOD_SECONDS=config.RATE_LIMIT_PERIOD_SECONDS,
        DEFAULT_SHIPPING_COST=config.DEFAULT_SHIPPING_COST,
        DEFAULT_CURRENCY=config.DEFAULT_CURRENCY,
    )


# Instancia única construida al importar la configuración
app_constants = build_constants(settings)
