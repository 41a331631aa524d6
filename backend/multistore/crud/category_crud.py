# backend/multistore/crud/category_crud.py

"""
Operaciones CRUD para el modelo Category.

Este módulo implementa las operaciones de Create, Read, Update, Delete para categorías,
proporcionando una capa de abstracción entre los servicios y la base de datos.

Funcionalidades principales:
- Consultas por ID, display_id, slug y nombre
- Manejo de jerarquías (categorías padre/hijo y descendencia completa vía CTE)
- Listado ordenado para reconstruir el árbol
- Búsqueda paginada y conteo de productos
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.crud.common_crud import LIKE_ESCAPE, apply_changes, contains_pattern, fetch_page
from multistore.db.models.category_model import Category
from multistore.db.models.product_model import Product
from multistore.utils.pagination import PageRequest

# ========================================
# OPERACIONES DE LECTURA (READ)
# ========================================

async def get_category(db: AsyncSession, category_id: int) -> Optional[Category]:
    """
    Obtiene una categoría por su ID.

    Args:
        db: Sesión asíncrona de SQLAlchemy
        category_id: ID único de la categoría

    Returns:
        Objeto Category si existe, None si no se encuentra
    """
    result = await db.execute(select(Category).filter(Category.id == category_id))
    return result.scalars().first()


async def get_category_by_display_id(db: AsyncSession, display_id: str) -> Optional[Category]:
    result = await db.execute(select(Category).filter(Category.display_id == display_id))
    return result.scalars().first()


async def get_category_by_slug(db: AsyncSession, slug: str) -> Optional[Category]:
    result = await db.execute(select(Category).filter(Category.slug == slug))
    return result.scalars().first()


async def name_exists(db: AsyncSession, name: str, exclude_id: Optional[int] = None) -> bool:
    """Indica si ya existe una categoría con ese nombre (sin distinguir mayúsculas)."""
    query = select(Category.id).filter(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.first() is not None


async def slug_exists(db: AsyncSession, slug: str) -> bool:
    result = await db.execute(select(Category.id).filter(Category.slug == slug).limit(1))
    return result.first() is not None


async def get_categories(db: AsyncSession, page_request: PageRequest) -> Tuple[List[Category], int]:
    """Obtiene una página de categorías (activas e inactivas)."""
    return await fetch_page(db, select(Category), Category, page_request)


async def get_root_categories(db: AsyncSession) -> List[Category]:
    """Obtiene las categorías raíz activas ordenadas por sort_order."""
    result = await db.execute(
        select(Category)
        .filter(Category.parent_id.is_(None), Category.is_active.is_(True))
        .order_by(Category.sort_order, Category.id)
    )
    return list(result.scalars().all())


async def get_subcategories(db: AsyncSession, parent_id: int) -> List[Category]:
    """Obtiene las subcategorías activas directas de una categoría padre."""
    result = await db.execute(
        select(Category)
        .filter(Category.parent_id == parent_id, Category.is_active.is_(True))
        .order_by(Category.sort_order, Category.id)
    )
    return list(result.scalars().all())


async def has_active_children(db: AsyncSession, category_id: int) -> bool:
    result = await db.execute(
        select(Category.id)
        .filter(Category.parent_id == category_id, Category.is_active.is_(True))
        .limit(1)
    )
    return result.first() is not None


async def get_category_tree_rows(db: AsyncSession) -> List[Category]:
    """
    Obtiene todas las categorías activas en orden de árbol:
    primero las raíces (parent_id NULL) y después por sort_order.
    """
    result = await db.execute(
        select(Category)
        .filter(Category.is_active.is_(True))
        .order_by(Category.parent_id.is_not(None), Category.parent_id, Category.sort_order, Category.id)
    )
    return list(result.scalars().all())


async def get_category_and_all_children_ids(db: AsyncSession, category_id: int) -> List[int]:
    """
    Obtiene el ID de la categoría dada y los IDs de toda su descendencia.
    Utiliza una consulta recursiva (CTE) para recorrer la jerarquía.
    """
    category_cte = select(Category.id).filter(Category.id == category_id).cte(name="category_cte", recursive=True)

    recursive_part = select(Category.id).join(category_cte, Category.parent_id == category_cte.c.id)

    full_cte = category_cte.union_all(recursive_part)

    result = await db.execute(select(full_cte.c.id))

    return [r[0] for r in result.fetchall()]


async def search_categories(db: AsyncSession, search_term: str, page_request: PageRequest) -> Tuple[List[Category], int]:
    """Búsqueda por subcadena en nombre, nombre árabe o descripción (solo activas)."""
    pattern = contains_pattern(search_term)
    query = select(Category).filter(
        Category.is_active.is_(True),
        or_(
            func.lower(Category.name).like(pattern, escape=LIKE_ESCAPE),
            func.lower(Category.name_ar).like(pattern, escape=LIKE_ESCAPE),
            func.lower(Category.description).like(pattern, escape=LIKE_ESCAPE),
        ),
    )
    return await fetch_page(db, query, Category, page_request)


async def count_products_by_category(db: AsyncSession, category_id: int) -> int:
    result = await db.execute(select(func.count(Product.id)).filter(Product.category_id == category_id))
    return result.scalar_one()

# ========================================
# OPERACIONES DE ESCRITURA (CREATE, UPDATE, DELETE)
# ========================================

async def create_category(db: AsyncSession, category_data: Dict[str, Any]) -> Category:
    """Crea una categoría. Validar duplicados y padre antes de llamar esta función."""
    db_category = Category(**category_data)
    db.add(db_category)
    await db.commit()  # Persiste en la base de datos
    await db.refresh(db_category)  # Recarga el objeto con datos actualizados de la BD
    return db_category


async def update_category(db: AsyncSession, db_category: Category, changes: Dict[str, Any]) -> Category:
    """Actualiza solo los campos presentes en `changes`."""
    return await apply_changes(db, db_category, changes)


async def delete_category(db: AsyncSession, db_category: Category) -> Category:
    """
    Elimina una categoría.

    Efectos colaterales:
        - Productos asociados: category_id pasa a NULL
        - Subcategorías inactivas: parent_id pasa a NULL (se vuelven raíz)
    """
    await db.delete(db_category)
    await db.commit()
    return db_category
