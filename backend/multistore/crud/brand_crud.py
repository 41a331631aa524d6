# backend/multistore/crud/brand_crud.py

"""
Operaciones CRUD para el modelo Brand.

Funcionalidades principales:
- Consultas por ID, display_id, slug y nombre
- Comprobaciones de existencia para validar duplicados
- Listados paginados, marcas activas y búsqueda por texto
- Conteo de productos asociados
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.crud.common_crud import LIKE_ESCAPE, apply_changes, contains_pattern, fetch_page
from multistore.db.models.brand_model import Brand
from multistore.db.models.product_model import Product
from multistore.utils.pagination import PageRequest

# ========================================
# OPERACIONES DE LECTURA (READ)
# ========================================

async def get_brand(db: AsyncSession, brand_id: int) -> Optional[Brand]:
    """Obtiene una marca por su ID."""
    result = await db.execute(select(Brand).filter(Brand.id == brand_id))
    return result.scalars().first()


async def get_brand_by_display_id(db: AsyncSession, display_id: str) -> Optional[Brand]:
    result = await db.execute(select(Brand).filter(Brand.display_id == display_id))
    return result.scalars().first()


async def get_brand_by_slug(db: AsyncSession, slug: str) -> Optional[Brand]:
    result = await db.execute(select(Brand).filter(Brand.slug == slug))
    return result.scalars().first()


async def name_exists(db: AsyncSession, name: str, exclude_id: Optional[int] = None) -> bool:
    """
    Indica si ya existe una marca con ese nombre (sin distinguir mayúsculas).

    Args:
        exclude_id: ID de la marca a ignorar (útil al actualizar)
    """
    query = select(Brand.id).filter(func.lower(Brand.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Brand.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.first() is not None


async def slug_exists(db: AsyncSession, slug: str) -> bool:
    result = await db.execute(select(Brand.id).filter(Brand.slug == slug).limit(1))
    return result.first() is not None


async def get_brands(db: AsyncSession, page_request: PageRequest) -> Tuple[List[Brand], int]:
    """Obtiene una página de marcas (activas e inactivas)."""
    return await fetch_page(db, select(Brand), Brand, page_request)


async def get_active_brands(db: AsyncSession) -> List[Brand]:
    """Marcas activas ordenadas por sort_order y nombre."""
    result = await db.execute(
        select(Brand).filter(Brand.is_active.is_(True)).order_by(Brand.sort_order, Brand.name)
    )
    return list(result.scalars().all())


async def search_brands(db: AsyncSession, search_term: str, page_request: PageRequest) -> Tuple[List[Brand], int]:
    """Búsqueda por subcadena en nombre, nombre árabe o descripción (solo activas)."""
    pattern = contains_pattern(search_term)
    query = select(Brand).filter(
        Brand.is_active.is_(True),
        or_(
            func.lower(Brand.name).like(pattern, escape=LIKE_ESCAPE),
            func.lower(Brand.name_ar).like(pattern, escape=LIKE_ESCAPE),
            func.lower(Brand.description).like(pattern, escape=LIKE_ESCAPE),
        ),
    )
    return await fetch_page(db, query, Brand, page_request)


async def count_products_by_brand(db: AsyncSession, brand_id: int) -> int:
    result = await db.execute(select(func.count(Product.id)).filter(Product.brand_id == brand_id))
    return result.scalar_one()

# ========================================
# OPERACIONES DE ESCRITURA (CREATE, UPDATE, DELETE)
# ========================================

async def create_brand(db: AsyncSession, brand_data: Dict[str, Any]) -> Brand:
    """Crea una marca. El slug y el display_id deben venir ya resueltos."""
    db_brand = Brand(**brand_data)
    db.add(db_brand)
    await db.commit()
    await db.refresh(db_brand)
    return db_brand


async def update_brand(db: AsyncSession, db_brand: Brand, changes: Dict[str, Any]) -> Brand:
    return await apply_changes(db, db_brand, changes)


async def delete_brand(db: AsyncSession, db_brand: Brand) -> Brand:
    await db.delete(db_brand)
    await db.commit()
    return db_brand
