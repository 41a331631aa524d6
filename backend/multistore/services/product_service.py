# backend/multistore/services/product_service.py
"""
Servicio de productos con lógica de negocio.

Este módulo implementa la capa de servicio para productos, orquestando
operaciones CRUD con validaciones de negocio y el registro de movimientos
de inventario cuando cambia el stock.

Responsabilidades principales:
- Validación de unicidad de SKU y slug
- Verificación de integridad referencial (categoría y marca)
- Generación de identificadores visibles y slugs únicos
- Ajustes de stock con rastro en el libro de inventario
- Consultas de catálogo (destacados, búsqueda, rango de precios, inventario bajo)
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from multistore.core.constants import AppConstants, app_constants
from multistore.core.exceptions import BusinessException, DuplicateResourceException, ResourceNotFoundException
from multistore.crud import brand_crud, category_crud, inventory_crud, product_crud
from multistore.db.models.common import activation_changes, stamp
from multistore.db.models.inventory_model import MovementType
from multistore.db.models.product_model import Product, stock_changes
from multistore.schemas import product_schema
from multistore.schemas.common_schema import update_payload
from multistore.utils.identifiers import MOVEMENT_PREFIX, PRODUCT_PREFIX, generate_display_id
from multistore.utils.pagination import PageRequest
from multistore.utils.slug import generate_unique_slug, is_valid_slug

logger = logging.getLogger(__name__)

# Columnas obligatorias: un null explícito en la actualización se ignora
_NON_NULLABLE_FIELDS = (
    "name", "sku", "slug", "price", "min_stock_level", "track_inventory",
    "is_active", "is_featured", "is_digital", "requires_shipping",
)


class ProductService:
    """
    Servicio de productos que encapsula la lógica de negocio.

    Esta clase actúa como una capa intermedia entre los endpoints de la API
    y las operaciones CRUD, implementando validaciones, reglas de negocio
    y el registro de movimientos de inventario.
    """

    # ========================================
    # OPERACIONES DE CONSULTA
    # ========================================

    async def get_product_by_id(self, db: AsyncSession, product_id: int) -> Product:
        product = await product_crud.get_product(db, product_id)
        if not product:
            raise ResourceNotFoundException("Product", product_id)
        return product

    async def get_product_by_display_id(self, db: AsyncSession, display_id: str) -> Product:
        product = await product_crud.get_product_by_display_id(db, display_id)
        if not product:
            raise ResourceNotFoundException("Product", display_id, "display_id")
        return product

    async def get_product_by_sku(self, db: AsyncSession, sku: str) -> Product:
        product = await product_crud.get_product_by_sku(db, sku)
        if not product:
            raise ResourceNotFoundException("Product", sku, "sku")
        return product

    async def get_product_by_slug(self, db: AsyncSession, slug: str) -> Product:
        product = await product_crud.get_product_by_slug(db, slug)
        if not product:
            raise ResourceNotFoundException("Product", slug, "slug")
        return product

    async def get_all_products(self, db: AsyncSession, page_request: PageRequest) -> Tuple[List[Product], int]:
        return await product_crud.get_products(db, page_request)

    async def get_active_products(self, db: AsyncSession, page_request: PageRequest) -> Tuple[List[Product], int]:
        return await product_crud.get_products(db, page_request, active_only=True)

    async def get_featured_products(self, db: AsyncSession) -> List[Product]:
        return await product_crud.get_featured_products(db)

    async def search_products(self, db: AsyncSession, query: str, page_request: PageRequest) -> Tuple[List[Product], int]:
        return await product_crud.search_products(db, query.strip(), page_request)

    async def get_products_by_category(
        self, db: AsyncSession, category_id: int, page_request: PageRequest
    ) -> Tuple[List[Product], int]:
        await self._ensure_category(db, category_id)
        return await product_crud.get_products(db, page_request, active_only=True, category_id=category_id)

    async def get_products_by_brand(
        self, db: AsyncSession, brand_id: int, page_request: PageRequest
    ) -> Tuple[List[Product], int]:
        await self._ensure_brand(db, brand_id)
        return await product_crud.get_products(db, page_request, active_only=True, brand_id=brand_id)

    async def get_products_by_price_range(
        self,
        db: AsyncSession,
        page_request: PageRequest,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> Tuple[List[Product], int]:
        """
        Productos activos cuyo precio está en [min_price, max_price].

        Raises:
            BusinessException: Si min_price es mayor que max_price (400)
        """
        if min_price is not None and max_price is not None and min_price > max_price:
            raise BusinessException.bad_request(
                "Minimum price cannot be greater than maximum price",
                "لا يمكن أن يكون الحد الأدنى للسعر أكبر من الحد الأقصى",
            )
        return await product_crud.get_products(
            db, page_request, active_only=True, min_price=min_price, max_price=max_price
        )

    async def get_low_stock_products(self, db: AsyncSession) -> List[Product]:
        return await product_crud.get_low_stock_products(db)

    async def get_out_of_stock_products(self, db: AsyncSession) -> List[Product]:
        return await product_crud.get_out_of_stock_products(db)

    # ========================================
    # OPERACIONES DE ESCRITURA CON LÓGICA DE NEGOCIO
    # ========================================

    async def create_product(self, db: AsyncSession, product_in: product_schema.ProductCreate) -> Product:
        """
        Crea un nuevo producto con validaciones de negocio.

        Validaciones aplicadas:
        1. El SKU no debe existir (409)
        2. Un slug explícito debe ser válido (400) y no estar en uso (409)
        3. La categoría y la marca, si se indican, deben existir (404)

        Si el producto controla inventario y arranca con stock, se registra
        un movimiento IN de stock inicial en la misma transacción.
        """
        if await product_crud.sku_exists(db, product_in.sku):
            logger.warning(f"⚠️ SKU duplicado rechazado: {product_in.sku}")
            raise DuplicateResourceException("Product", "sku", product_in.sku)

        if product_in.slug is not None:
            await self._validate_explicit_slug(db, product_in.slug)

        if product_in.category_id is not None:
            await self._ensure_category(db, product_in.category_id)
        if product_in.brand_id is not None:
            await self._ensure_brand(db, product_in.brand_id)

        display_id = generate_display_id(PRODUCT_PREFIX)
        product_data = product_in.model_dump()
        product_data["display_id"] = display_id
        if product_in.slug is None:
            product_data["slug"] = await generate_unique_slug(
                product_in.name, lambda slug: product_crud.slug_exists(db, slug), fallback=display_id
            )

        records_initial_stock = product_in.track_inventory and product_in.stock_quantity > 0
        if not records_initial_stock:
            product = await product_crud.create_product(db, product_data)
        else:
            product = await product_crud.create_product(db, product_data, commit=False)
            await inventory_crud.add_movement(db, {
                "display_id": generate_display_id(MOVEMENT_PREFIX),
                "product_id": product.id,
                "movement_type": MovementType.IN,
                "quantity": product_in.stock_quantity,
                "reference_type": "initial_stock",
                "reference_id": product.display_id,
                "notes": "Initial stock",
            })
            await db.commit()
            await db.refresh(product)

        logger.info(f"✅ Producto creado: {product.display_id} (SKU {product.sku}, stock {product.stock_quantity})")
        return product

    async def update_product(
        self, db: AsyncSession, product_id: int, product_in: product_schema.ProductUpdate
    ) -> Product:
        """
        Actualización parcial: solo se aplican los campos enviados.

        Un cambio de nombre sin slug explícito regenera el slug.
        Activar track_inventory concilia el libro de inventario con el stock actual.
        """
        product = await self.get_product_by_id(db, product_id)
        update_data = update_payload(product_in, _NON_NULLABLE_FIELDS)

        new_sku = update_data.get("sku")
        if new_sku is not None and new_sku != product.sku:
            if await product_crud.sku_exists(db, new_sku, exclude_id=product_id):
                raise DuplicateResourceException("Product", "sku", new_sku)

        new_slug = update_data.get("slug")
        if new_slug is not None and new_slug != product.slug:
            await self._validate_explicit_slug(db, new_slug, exclude_id=product_id)
        elif new_slug is None and "name" in update_data and update_data["name"] != product.name:

            async def slug_taken(slug: str) -> bool:
                return await product_crud.slug_exists(db, slug, exclude_id=product_id)

            update_data["slug"] = await generate_unique_slug(update_data["name"], slug_taken, fallback=product.display_id)

        if update_data.get("category_id") is not None:
            await self._ensure_category(db, update_data["category_id"])
        if update_data.get("brand_id") is not None:
            await self._ensure_brand(db, update_data["brand_id"])

        if update_data.get("track_inventory") is True and not product.track_inventory:
            await self._reconcile_ledger(db, product)

        product = await product_crud.update_product(db, product, stamp(update_data))
        logger.info(f"✏️ Producto actualizado: {product.display_id}")
        return product

    async def update_product_status(self, db: AsyncSession, product_id: int, is_active: bool) -> Product:
        product = await self.get_product_by_id(db, product_id)
        product = await product_crud.update_product(db, product, activation_changes(is_active))
        logger.info(f"🔁 Producto {product.display_id} {'activado' if is_active else 'desactivado'}")
        return product

    async def update_stock(
        self,
        db: AsyncSession,
        product_id: int,
        stock_in: product_schema.ProductStockUpdate,
        constants: AppConstants = app_constants,
    ) -> Product:
        """
        Fija el nivel de stock de un producto.

        Si el producto controla inventario y el nivel cambia, la diferencia
        queda registrada como movimiento ADJUSTMENT (con signo).

        Raises:
            BusinessException: Cantidad negativa o por encima del máximo (400)
        """
        new_quantity = stock_in.stock_quantity
        if new_quantity < 0:
            raise BusinessException.bad_request("Stock quantity cannot be negative", "لا يمكن أن تكون كمية المخزون سالبة")
        if new_quantity > constants.MAX_STOCK_QUANTITY:
            raise BusinessException.bad_request(
                f"Stock quantity cannot exceed {constants.MAX_STOCK_QUANTITY}",
                "كمية المخزون تتجاوز الحد الأقصى",
            )

        product = await inventory_crud.lock_product(db, product_id)
        if not product:
            raise ResourceNotFoundException("Product", product_id)

        delta = new_quantity - product.stock_quantity
        if delta != 0 and product.track_inventory:
            await inventory_crud.add_movement(db, {
                "display_id": generate_display_id(MOVEMENT_PREFIX),
                "product_id": product.id,
                "movement_type": MovementType.ADJUSTMENT,
                "quantity": delta,
                "reference_type": "stock_update",
                "reference_id": product.display_id,
                "notes": stock_in.reason,
            })

        product = await product_crud.update_product(db, product, stock_changes(new_quantity))
        logger.info(f"📦 Stock de {product.display_id}: {new_quantity - delta} -> {new_quantity}")
        return product

    async def delete_product(self, db: AsyncSession, product_id: int) -> None:
        product = await self.get_product_by_id(db, product_id)
        await product_crud.delete_product(db, product)
        logger.info(f"🗑️ Producto eliminado: {product.display_id} (SKU {product.sku})")

    # ========================================
    # VALIDACIONES AUXILIARES
    # ========================================

    async def _validate_explicit_slug(self, db: AsyncSession, slug: str, exclude_id: Optional[int] = None) -> None:
        if not is_valid_slug(slug):
            raise BusinessException.bad_request(f"Invalid slug: '{slug}'", "الرابط المختصر غير صالح")
        if await product_crud.slug_exists(db, slug, exclude_id=exclude_id):
            raise DuplicateResourceException("Product", "slug", slug)

    async def _ensure_category(self, db: AsyncSession, category_id: int) -> None:
        if not await category_crud.get_category(db, category_id):
            raise ResourceNotFoundException("Category", category_id)

    async def _ensure_brand(self, db: AsyncSession, brand_id: int) -> None:
        if not await brand_crud.get_brand(db, brand_id):
            raise ResourceNotFoundException("Brand", brand_id)

    async def _reconcile_ledger(self, db: AsyncSession, product: Product) -> None:
        """
        Al activar el control de inventario, registra un ajuste para que el saldo
        del libro vuelva a coincidir con el stock actual del producto.
        """
        balance, _ = await inventory_crud.get_ledger_balance(db, product.id)
        delta = product.stock_quantity - balance
        if delta == 0:
            return
        await inventory_crud.add_movement(db, {
            "display_id": generate_display_id(MOVEMENT_PREFIX),
            "product_id": product.id,
            "movement_type": MovementType.ADJUSTMENT,
            "quantity": delta,
            "reference_type": "tracking_enabled",
            "reference_id": product.display_id,
            "notes": "Inventory tracking enabled",
        })
        logger.info(f"📒 Libro de {product.display_id} conciliado con el stock (ajuste {delta:+d})")

# ========================================
# INSTANCIA SINGLETON DEL SERVICIO
# ========================================

product_service = ProductService()
