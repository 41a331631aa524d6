# backend/multistore/api/v1/api_router.py
"""
Este archivo contiene el router principal para la API versión 1.

Se encarga de registrar y configurar todos los routers de la versión 1 de la API.
La validación de la API key se aplica al incluir este router en la aplicación.
"""

from fastapi import APIRouter

from multistore.api.v1.endpoints import (
    brands,
    categories,
    inventory,
    orders,
    payments,
    products,
    users,
)

# ========================================
# CONFIGURACIÓN DEL ROUTER PRINCIPAL V1
# ========================================

api_router_v1 = APIRouter()

# ========================================
# REGISTRO DE ROUTERS POR DOMINIO DE NEGOCIO
# ========================================

# CATÁLOGO: marcas, categorías jerárquicas y productos
api_router_v1.include_router(
    brands.router,
    prefix="/brands",               # Prefijo: /api/v1/brands
    tags=["Brands"]
)

api_router_v1.include_router(
    categories.router,
    prefix="/categories",
    tags=["Categories"]
)

api_router_v1.include_router(
    products.router,
    prefix="/products",
    tags=["Products"]
)

# INVENTARIO: libro de movimientos de stock
api_router_v1.include_router(
    inventory.router,
    prefix="/inventory",
    tags=["Inventory"]
)

# VENTAS: pedidos y usuarios
api_router_v1.include_router(
    orders.router,
    prefix="/orders",
    tags=["Orders"]
)

api_router_v1.include_router(
    users.router,
    prefix="/users",
    tags=["Users"]
)

# PAGOS: intentos de pago de los pedidos
api_router_v1.include_router(
    payments.router,
    prefix="/payments",
    tags=["Payments"]
)
