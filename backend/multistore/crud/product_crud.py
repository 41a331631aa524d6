# backend/multistore/crud/product_crud.py

"""
Operaciones CRUD para el modelo Product.

Este módulo es el corazón del catálogo: consultas por identificadores
(ID, display_id, SKU, slug), listados filtrados por categoría, marca y rango
de precio, búsqueda por texto y las consultas de inventario bajo/agotado.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.crud.common_crud import LIKE_ESCAPE, apply_changes, contains_pattern, fetch_page
from multistore.db.models.product_model import Product
from multistore.utils.pagination import PageRequest

import logging

logger = logging.getLogger(__name__)

# ========================================
# OPERACIONES DE LECTURA (READ)
# ========================================

async def get_product(db: AsyncSession, product_id: int) -> Optional[Product]:
    result = await db.execute(select(Product).filter(Product.id == product_id))
    return result.scalars().first()


async def get_product_by_display_id(db: AsyncSession, display_id: str) -> Optional[Product]:
    result = await db.execute(select(Product).filter(Product.display_id == display_id))
    return result.scalars().first()


async def get_product_by_sku(db: AsyncSession, sku: str) -> Optional[Product]:
    """Obtiene un producto por su SKU."""
    result = await db.execute(select(Product).filter(Product.sku == sku))
    return result.scalars().first()


async def get_product_by_slug(db: AsyncSession, slug: str) -> Optional[Product]:
    result = await db.execute(select(Product).filter(Product.slug == slug))
    return result.scalars().first()


async def sku_exists(db: AsyncSession, sku: str, exclude_id: Optional[int] = None) -> bool:
    query = select(Product.id).filter(Product.sku == sku)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.first() is not None


async def slug_exists(db: AsyncSession, slug: str, exclude_id: Optional[int] = None) -> bool:
    query = select(Product.id).filter(Product.slug == slug)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.first() is not None


async def get_products(
    db: AsyncSession,
    page_request: PageRequest,
    active_only: bool = False,
    category_id: Optional[int] = None,
    brand_id: Optional[int] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
) -> Tuple[List[Product], int]:
    """
    Obtiene una página de productos aplicando los filtros indicados.
    Los filtros son combinables; los que llegan a None se ignoran.
    """
    query = select(Product)

    if active_only:
        query = query.filter(Product.is_active.is_(True))
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if brand_id is not None:
        query = query.filter(Product.brand_id == brand_id)
    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)

    return await fetch_page(db, query, Product, page_request)


async def get_featured_products(db: AsyncSession) -> List[Product]:
    result = await db.execute(
        select(Product)
        .filter(Product.is_featured.is_(True), Product.is_active.is_(True))
        .order_by(Product.created_at.desc(), Product.id.desc())
    )
    return list(result.scalars().all())


async def search_products(db: AsyncSession, search_term: str, page_request: PageRequest) -> Tuple[List[Product], int]:
    """
    Búsqueda por subcadena (sin distinguir mayúsculas) en nombre, nombre árabe,
    descripciones y SKU. Solo productos activos.
    """
    pattern = contains_pattern(search_term)
    query = select(Product).filter(
        Product.is_active.is_(True),
        or_(
            func.lower(Product.name).like(pattern, escape=LIKE_ESCAPE),
            func.lower(Product.name_ar).like(pattern, escape=LIKE_ESCAPE),
            func.lower(Product.description).like(pattern, escape=LIKE_ESCAPE),
            func.lower(Product.description_ar).like(pattern, escape=LIKE_ESCAPE),
            func.lower(Product.sku).like(pattern, escape=LIKE_ESCAPE),
        ),
    )
    products, total = await fetch_page(db, query, Product, page_request)
    logger.info(f"Búsqueda por término '{search_term}' encontró {total} productos.")
    return products, total


async def get_low_stock_products(db: AsyncSession) -> List[Product]:
    """Productos activos con inventario controlado cuyo stock está en o bajo su mínimo."""
    result = await db.execute(
        select(Product)
        .filter(
            Product.track_inventory.is_(True),
            Product.is_active.is_(True),
            Product.stock_quantity <= Product.min_stock_level,
        )
        .order_by(Product.stock_quantity, Product.id)
    )
    return list(result.scalars().all())


async def get_out_of_stock_products(db: AsyncSession) -> List[Product]:
    """Productos activos con inventario controlado y stock a cero."""
    result = await db.execute(
        select(Product)
        .filter(
            Product.track_inventory.is_(True),
            Product.is_active.is_(True),
            Product.stock_quantity == 0,
        )
        .order_by(Product.id)
    )
    return list(result.scalars().all())

# ========================================
# OPERACIONES DE ESCRITURA (CREATE, UPDATE, DELETE)
# ========================================

async def create_product(db: AsyncSession, product_data: Dict[str, Any], commit: bool = True) -> Product:
    """
    Crea un nuevo producto.

    Con commit=False solo se hace flush, para que el llamador pueda añadir
    más filas (p.ej. el movimiento de stock inicial) en la misma transacción.
    """
    db_product = Product(**product_data)
    db.add(db_product)
    if commit:
        await db.commit()
        await db.refresh(db_product)
    else:
        await db.flush()
    return db_product


async def update_product(db: AsyncSession, db_product: Product, changes: Dict[str, Any]) -> Product:
    return await apply_changes(db, db_product, changes)


async def delete_product(db: AsyncSession, db_product: Product) -> Product:
    """Elimina un producto y, en cascada, su libro de movimientos."""
    await db.delete(db_product)
    await db.commit()
    return db_product
