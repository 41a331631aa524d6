# backend/multistore/services/brand_service.py
"""
Servicio para operaciones de negocio relacionadas con marcas.

Este servicio se encarga de la lógica que no pertenece a la capa CRUD:
validación de duplicados, generación de slugs únicos, identificadores
visibles y las comprobaciones previas al borrado.
"""

import logging
from typing import List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from multistore.core.exceptions import BusinessException, DuplicateResourceException, ResourceNotFoundException
from multistore.crud import brand_crud
from multistore.db.models.brand_model import Brand
from multistore.db.models.common import activation_changes, stamp
from multistore.schemas import brand_schema
from multistore.schemas.common_schema import update_payload
from multistore.utils.identifiers import BRAND_PREFIX, generate_display_id
from multistore.utils.pagination import PageRequest
from multistore.utils.slug import generate_unique_slug

logger = logging.getLogger(__name__)


class BrandService:
    """
    Servicio para operaciones de negocio relacionadas con marcas.

    Todas las búsquedas que no encuentran la marca lanzan
    ResourceNotFoundException, de modo que los endpoints nunca reciben None.
    """

    # ========================================
    # OPERACIONES DE CONSULTA
    # ========================================

    async def get_brand_by_id(self, db: AsyncSession, brand_id: int) -> Brand:
        brand = await brand_crud.get_brand(db, brand_id)
        if not brand:
            raise ResourceNotFoundException("Brand", brand_id)
        return brand

    async def get_brand_response(self, db: AsyncSession, brand: Brand) -> brand_schema.BrandResponse:
        """Construye la respuesta de una marca incluyendo su número de productos."""
        response = brand_schema.BrandResponse.model_validate(brand)
        response.product_count = await brand_crud.count_products_by_brand(db, brand.id)
        return response

    async def get_brand_by_display_id(self, db: AsyncSession, display_id: str) -> Brand:
        brand = await brand_crud.get_brand_by_display_id(db, display_id)
        if not brand:
            raise ResourceNotFoundException("Brand", display_id, "display_id")
        return brand

    async def get_brand_by_slug(self, db: AsyncSession, slug: str) -> Brand:
        brand = await brand_crud.get_brand_by_slug(db, slug)
        if not brand:
            raise ResourceNotFoundException("Brand", slug, "slug")
        return brand

    async def get_all_brands(self, db: AsyncSession, page_request: PageRequest) -> Tuple[List[Brand], int]:
        return await brand_crud.get_brands(db, page_request)

    async def get_active_brands(self, db: AsyncSession) -> List[Brand]:
        return await brand_crud.get_active_brands(db)

    async def search_brands(self, db: AsyncSession, query: str, page_request: PageRequest) -> Tuple[List[Brand], int]:
        return await brand_crud.search_brands(db, query.strip(), page_request)

    # ========================================
    # OPERACIONES DE ESCRITURA CON LÓGICA DE NEGOCIO
    # ========================================

    async def create_brand(self, db: AsyncSession, brand_in: brand_schema.BrandCreate) -> Brand:
        """
        Crea una nueva marca.

        Raises:
            DuplicateResourceException: Si ya existe una marca con ese nombre (409)
        """
        if await brand_crud.name_exists(db, brand_in.name):
            logger.warning(f"⚠️ Marca duplicada rechazada: '{brand_in.name}'")
            raise DuplicateResourceException("Brand", "name", brand_in.name)

        display_id = generate_display_id(BRAND_PREFIX)
        brand_data = brand_in.model_dump()
        brand_data["display_id"] = display_id
        brand_data["slug"] = await generate_unique_slug(
            brand_in.name, lambda slug: brand_crud.slug_exists(db, slug), fallback=display_id
        )

        brand = await brand_crud.create_brand(db, brand_data)
        logger.info(f"✅ Marca creada: {brand.display_id} ('{brand.name}')")
        return brand

    async def update_brand(self, db: AsyncSession, brand_id: int, brand_in: brand_schema.BrandUpdate) -> Brand:
        """
        Actualiza una marca. Si cambia el nombre se comprueba que no esté en uso
        por otra marca y se regenera el slug.
        """
        brand = await self.get_brand_by_id(db, brand_id)
        update_data = update_payload(brand_in, ("name", "sort_order", "is_active"))

        new_name = update_data.get("name")
        if new_name is not None and new_name != brand.name:
            if await brand_crud.name_exists(db, new_name, exclude_id=brand_id):
                raise DuplicateResourceException("Brand", "name", new_name)

            async def slug_taken(slug: str) -> bool:
                return slug != brand.slug and await brand_crud.slug_exists(db, slug)

            update_data["slug"] = await generate_unique_slug(new_name, slug_taken, fallback=brand.display_id)

        brand = await brand_crud.update_brand(db, brand, stamp(update_data))
        logger.info(f"✏️ Marca actualizada: {brand.display_id}")
        return brand

    async def set_brand_active(self, db: AsyncSession, brand_id: int, is_active: bool) -> Brand:
        brand = await self.get_brand_by_id(db, brand_id)
        brand = await brand_crud.update_brand(db, brand, activation_changes(is_active))
        logger.info(f"🔁 Marca {brand.display_id} {'activada' if is_active else 'desactivada'}")
        return brand

    async def delete_brand(self, db: AsyncSession, brand_id: int) -> None:
        """
        Elimina una marca.

        Raises:
            ResourceNotFoundException: Si la marca no existe (404)
            BusinessException: Si todavía hay productos asociados (409)
        """
        brand = await self.get_brand_by_id(db, brand_id)
        product_count = await brand_crud.count_products_by_brand(db, brand_id)
        if product_count > 0:
            logger.warning(f"⚠️ No se puede eliminar la marca {brand.display_id}: {product_count} productos asociados")
            raise BusinessException.conflict(
                f"Cannot delete brand with {product_count} associated products",
                "لا يمكن حذف العلامة التجارية لوجود منتجات مرتبطة بها",
            )

        await brand_crud.delete_brand(db, brand)
        logger.info(f"🗑️ Marca eliminada: {brand.display_id}")

# ========================================
# INSTANCIA SINGLETON DEL SERVICIO
# ========================================

brand_service = BrandService()
