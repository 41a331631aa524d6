# backend/multistore/core/config.py
"""
Este archivo contiene la configuración de la aplicación.
"""

from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path
import os

# Apunta al directorio 'backend/'
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic BaseSettings.
    Variables sensibles desde .env, defaults seguros para el resto.
    """
    # Configuración general del proyecto
    BASE_DIR: Path = BASE_DIR
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Multistore API"
    PROJECT_VERSION: str = "0.1.0"

    # Configuración de la base de datos
    POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "postgres")
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "user")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "password")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "multistore_db")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")

    # Permite apuntar a otra base (p.ej. sqlite+aiosqlite) sin tocar las variables POSTGRES_*
    DATABASE_URL_OVERRIDE: Optional[str] = None
    CREATE_TABLES_ON_STARTUP: bool = False

    @property
    def DATABASE_URL(self) -> str:
        """URL de conexión a la base de datos asíncrona."""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # API Key - Del .env (sensible)
    API_KEY: str = "default-api-key"
    API_KEY_ENABLED: bool = True

    # Logging - Defaults seguros
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE_PATH: Optional[str] = None

    # Server - Del .env con defaults
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Rate Limiting - Ventana fija por IP
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_PERIOD_SECONDS: int = 60

    # Comercio - Valores por defecto de pedidos
    DEFAULT_CURRENCY: str = "YER"
    DEFAULT_SHIPPING_COST: float = 5000.0

    class Config:
        env_file = ".env"
        case_sensitive = False

# Instancia global de la configuración
settings = Settings()
