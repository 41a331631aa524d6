# backend/multistore/db/base.py
"""
Importa todos los modelos para que queden registrados en Base.metadata
(necesario para create_all y para resolver las relaciones por nombre).
"""

from multistore.db.database import Base  # noqa: F401
from multistore.db.models.brand_model import Brand  # noqa: F401
from multistore.db.models.category_model import Category  # noqa: F401
from multistore.db.models.product_model import Product  # noqa: F401
from multistore.db.models.inventory_model import InventoryMovement  # noqa: F401
from multistore.db.models.order_model import Order, OrderItem  # noqa: F401
from multistore.db.models.user_model import User  # noqa: F401
from multistore.db.models.payment_model import Payment  # noqa: F401
