# backend/multistore/services/category_service.py
"""
Servicio para operaciones de negocio relacionadas con categorías.

Este servicio se encarga de gestionar la lógica de negocio para el manejo de categorías,
incluyendo validaciones complejas, verificación de integridad referencial
y orquestación de operaciones que involucran múltiples entidades.
"""

import logging
from typing import Dict, List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from multistore.core.exceptions import BusinessException, DuplicateResourceException, ResourceNotFoundException
from multistore.crud import category_crud
from multistore.db.models.category_model import Category
from multistore.db.models.common import activation_changes, stamp
from multistore.schemas import category_schema
from multistore.schemas.common_schema import update_payload
from multistore.utils.identifiers import CATEGORY_PREFIX, generate_display_id
from multistore.utils.pagination import PageRequest
from multistore.utils.slug import generate_unique_slug

logger = logging.getLogger(__name__)


class CategoryService:
    """
    Servicio para operaciones de negocio relacionadas con categorías.

    Características:
    - Validación de duplicados por nombre
    - Verificación de integridad referencial padre-hijo
    - Prevención de ciclos en la jerarquía (una categoría no puede colgar de sí
      misma ni de uno de sus descendientes)
    - Construcción del árbol completo de categorías activas
    """

    # ========================================
    # OPERACIONES DE CONSULTA
    # ========================================

    async def get_category_by_id(self, db: AsyncSession, category_id: int) -> Category:
        """
        Obtiene una categoría por su ID.

        Raises:
            ResourceNotFoundException: Si la categoría no existe (404)
        """
        category = await category_crud.get_category(db, category_id)
        if not category:
            raise ResourceNotFoundException("Category", category_id)
        return category

    async def get_category_response(self, db: AsyncSession, category: Category) -> category_schema.CategoryResponse:
        """Respuesta de una categoría con su número de productos."""
        response = category_schema.CategoryResponse.from_orm_flat(category)
        response.product_count = await category_crud.count_products_by_category(db, category.id)
        return response

    async def get_category_by_display_id(self, db: AsyncSession, display_id: str) -> Category:
        category = await category_crud.get_category_by_display_id(db, display_id)
        if not category:
            raise ResourceNotFoundException("Category", display_id, "display_id")
        return category

    async def get_category_by_slug(self, db: AsyncSession, slug: str) -> Category:
        category = await category_crud.get_category_by_slug(db, slug)
        if not category:
            raise ResourceNotFoundException("Category", slug, "slug")
        return category

    async def get_all_categories(self, db: AsyncSession, page_request: PageRequest) -> Tuple[List[Category], int]:
        return await category_crud.get_categories(db, page_request)

    async def get_main_categories(self, db: AsyncSession) -> List[Category]:
        """
        Obtiene las categorías principales (nivel raíz) para navegación.

        Esta función es especialmente importante para la construcción de
        menús de navegación y estructuras jerárquicas en la interfaz de usuario.
        """
        return await category_crud.get_root_categories(db)

    async def get_subcategories(self, db: AsyncSession, parent_id: int) -> List[Category]:
        """Subcategorías activas directas. El padre debe existir (404 en caso contrario)."""
        await self.get_category_by_id(db, parent_id)
        return await category_crud.get_subcategories(db, parent_id)

    async def search_categories(self, db: AsyncSession, query: str, page_request: PageRequest) -> Tuple[List[Category], int]:
        return await category_crud.search_categories(db, query.strip(), page_request)

    async def get_category_tree(self, db: AsyncSession) -> category_schema.CategoryTreeResponse:
        """
        Construye el árbol de categorías activas.

        Las filas llegan ordenadas con las raíces primero. Cada nodo se cuelga de
        su padre; un nodo cuyo padre no está activo queda fuera del árbol junto
        con toda su descendencia.
        """
        rows = await category_crud.get_category_tree_rows(db)

        nodes: Dict[int, category_schema.CategoryResponse] = {}
        for row in rows:
            node = category_schema.CategoryResponse.from_orm_flat(row)
            node.children = []
            nodes[row.id] = node

        roots: List[category_schema.CategoryResponse] = []
        for row in rows:
            node = nodes[row.id]
            if row.parent_id is None:
                roots.append(node)
            elif row.parent_id in nodes:
                nodes[row.parent_id].children.append(node)

        for node in nodes.values():
            node.children.sort(key=lambda child: (child.sort_order, child.id))
        roots.sort(key=lambda root: (root.sort_order, root.id))

        return category_schema.CategoryTreeResponse.from_roots(roots)

    # ========================================
    # OPERACIONES DE ESCRITURA CON LÓGICA DE NEGOCIO
    # ========================================

    async def create_new_category(self, db: AsyncSession, category_in: category_schema.CategoryCreate) -> Category:
        """
        Crea una nueva categoría con validaciones completas de negocio.

        Raises:
            DuplicateResourceException: Nombre ya en uso (409)
            ResourceNotFoundException: La categoría padre no existe (404)
        """
        if await category_crud.name_exists(db, category_in.name):
            logger.warning(f"⚠️ Categoría duplicada rechazada: '{category_in.name}'")
            raise DuplicateResourceException("Category", "name", category_in.name)

        if category_in.parent_id is not None:
            await self._get_parent(db, category_in.parent_id)

        display_id = generate_display_id(CATEGORY_PREFIX)
        category_data = category_in.model_dump()
        category_data["display_id"] = display_id
        category_data["slug"] = await generate_unique_slug(
            category_in.name, lambda slug: category_crud.slug_exists(db, slug), fallback=display_id
        )

        category = await category_crud.create_category(db, category_data)
        logger.info(f"✅ Categoría creada: {category.display_id} ('{category.name}', padre={category.parent_id})")
        return category

    async def update_existing_category(
        self, db: AsyncSession, category_id: int, category_in: category_schema.CategoryUpdate
    ) -> Category:
        """
        Actualiza una categoría existente con validaciones complejas de negocio.

        Esta función maneja actualizaciones que pueden afectar la integridad
        de la jerarquía de categorías, incluyendo cambios de nombre que podrían
        causar duplicados y cambios de padre que podrían crear ciclos.

        Raises:
            ResourceNotFoundException: Categoría o nuevo padre inexistente (404)
            DuplicateResourceException: Nombre en uso por otra categoría (409)
            BusinessException: El nuevo padre es la propia categoría o un descendiente,
                o se desactiva una categoría con subcategorías activas (400)
        """
        category = await self.get_category_by_id(db, category_id)
        update_data = update_payload(category_in, ("name", "sort_order", "is_active"))

        if update_data.get("is_active") is False and await category_crud.has_active_children(db, category_id):
            raise BusinessException.bad_request(
                "Cannot deactivate a category with active subcategories",
                "لا يمكن تعطيل فئة تحتوي على فئات فرعية نشطة",
            )

        new_parent_id = update_data.get("parent_id")
        if new_parent_id is not None:
            if new_parent_id == category_id:
                raise BusinessException.bad_request(
                    "A category cannot be its own parent",
                    "لا يمكن أن تكون الفئة أصلاً لنفسها",
                )
            await self._get_parent(db, new_parent_id)

            descendant_ids = await category_crud.get_category_and_all_children_ids(db, category_id)
            if new_parent_id in descendant_ids:
                logger.warning(f"⚠️ Ciclo rechazado: {category_id} no puede colgar de su descendiente {new_parent_id}")
                raise BusinessException.bad_request(
                    "Cannot move a category under one of its own descendants",
                    "لا يمكن نقل الفئة تحت إحدى فئاتها الفرعية",
                )

        new_name = update_data.get("name")
        if new_name is not None and new_name != category.name:
            if await category_crud.name_exists(db, new_name, exclude_id=category_id):
                raise DuplicateResourceException("Category", "name", new_name)

            async def slug_taken(slug: str) -> bool:
                return slug != category.slug and await category_crud.slug_exists(db, slug)

            update_data["slug"] = await generate_unique_slug(new_name, slug_taken, fallback=category.display_id)

        category = await category_crud.update_category(db, category, stamp(update_data))
        logger.info(f"✏️ Categoría actualizada: {category.display_id}")
        return category

    async def set_category_active(self, db: AsyncSession, category_id: int, is_active: bool) -> Category:
        """
        Activa o desactiva una categoría.

        No se permite desactivar una categoría que todavía tiene subcategorías activas.
        """
        category = await self.get_category_by_id(db, category_id)
        if not is_active and await category_crud.has_active_children(db, category_id):
            raise BusinessException.bad_request(
                "Cannot deactivate a category with active subcategories",
                "لا يمكن تعطيل فئة تحتوي على فئات فرعية نشطة",
            )

        category = await category_crud.update_category(db, category, activation_changes(is_active))
        logger.info(f"🔁 Categoría {category.display_id} {'activada' if is_active else 'desactivada'}")
        return category

    async def delete_existing_category(self, db: AsyncSession, category_id: int) -> None:
        """
        Elimina una categoría con validaciones de integridad de negocio.

        Los productos asociados quedan sin categoría y las subcategorías
        inactivas pasan a ser raíz.

        Raises:
            ResourceNotFoundException: Si la categoría no existe (404)
            BusinessException: Si tiene subcategorías activas (409)
        """
        category = await self.get_category_by_id(db, category_id)
        if await category_crud.has_active_children(db, category_id):
            logger.warning(f"⚠️ No se puede eliminar la categoría {category.display_id}: tiene subcategorías activas")
            raise BusinessException.conflict(
                "Cannot delete a category with active subcategories",
                "لا يمكن حذف فئة تحتوي على فئات فرعية نشطة",
            )

        await category_crud.delete_category(db, category)
        logger.info(f"🗑️ Categoría eliminada: {category.display_id}")

    async def _get_parent(self, db: AsyncSession, parent_id: int) -> Category:
        parent = await category_crud.get_category(db, parent_id)
        if not parent:
            raise ResourceNotFoundException("Parent category", parent_id)
        return parent

# ========================================
# INSTANCIA SINGLETON DEL SERVICIO
# ========================================

# Instancia única del servicio para uso en endpoints
category_service = CategoryService()
