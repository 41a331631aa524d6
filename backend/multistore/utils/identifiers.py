# backend/multistore/utils/identifiers.py
"""
Identificadores visibles para el usuario (display IDs, números de pedido y
referencias de transacción).
"""

import uuid
from datetime import datetime, timezone

BRAND_PREFIX = "BRD"
CATEGORY_PREFIX = "CAT"
PRODUCT_PREFIX = "PRD"
MOVEMENT_PREFIX = "INV"
ORDER_PREFIX = "ORD"
USER_PREFIX = "USR"
PAYMENT_PREFIX = "PAY"
TRANSACTION_PREFIX = "TXN"


def generate_display_id(prefix: str) -> str:
    """Ej.: generate_display_id("BRD") -> "BRD-3F9A1C07"."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


def generate_order_number() -> str:
    """Ej.: "ORD-20240115-7C21AF"."""
    today = datetime.now(timezone.utc).strftime("%Y%m%d")
    return f"{ORDER_PREFIX}-{today}-{uuid.uuid4().hex[:6].upper()}"


def generate_transaction_id() -> str:
    """Ej.: "TXN-20240115093012-4B7E19C2"."""
    now = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"{TRANSACTION_PREFIX}-{now}-{uuid.uuid4().hex[:8].upper()}"
