# backend/multistore/core/logging_config.py
"""
Configuración del sistema de logging.

Cada módulo obtiene su propio logger con `logging.getLogger(__name__)`;
aquí solo se configuran los handlers del logger raíz una vez al arrancar.
"""

import logging
import sys
from pathlib import Path

from multistore.core.config import Settings


def setup_logging(config: Settings) -> None:
    """Configura el logger raíz con el nivel y formato definidos en settings."""
    root_logger = logging.getLogger()
    root_logger.setLevel(config.LOG_LEVEL.upper())

    formatter = logging.Formatter(config.LOG_FORMAT)

    if not any(getattr(h, "_multistore", False) for h in root_logger.handlers):
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(formatter)
        stream_handler._multistore = True
        root_logger.addHandler(stream_handler)

        if config.LOG_FILE_PATH:
            log_path = Path(config.LOG_FILE_PATH)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            file_handler._multistore = True
            root_logger.addHandler(file_handler)

    # SQLAlchemy es muy verboso en DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
