# backend/multistore/api/v1/endpoints/products.py
"""
Endpoints REST para la gestión de productos.

Incluye el CRUD del catálogo, las consultas por identificadores alternativos
(display_id, SKU, slug), filtros por categoría, marca y precio, la gestión
de estado y stock, y los listados de inventario bajo o agotado.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.api import deps
from multistore.core.constants import AppConstants
from multistore.schemas import product_schema
from multistore.schemas.common_schema import ApiResponse, HealthResponse, PaginatedResponse
from multistore.services.product_service import product_service
from multistore.utils.pagination import PageRequest

router = APIRouter()

ProductPage = PaginatedResponse[product_schema.ProductResponse]


def _one(product) -> product_schema.ProductResponse:
    return product_schema.ProductResponse.model_validate(product)


def _many(products) -> List[product_schema.ProductResponse]:
    return [_one(product) for product in products]


# ========================================
# CREACIÓN
# ========================================

@router.post("/", response_model=ApiResponse[product_schema.ProductResponse], status_code=status.HTTP_201_CREATED)
async def create_product(
    *,
    db: AsyncSession = Depends(deps.get_db),
    product_in: product_schema.ProductCreate,
):
    """
    Crea un nuevo producto.

    Si el producto controla inventario y se crea con stock, se registra
    automáticamente un movimiento de entrada de stock inicial.
    """
    product = await product_service.create_product(db, product_in)
    return ApiResponse.created(_one(product), "Product created successfully", "تم إنشاء المنتج بنجاح")


# ========================================
# CONSULTAS (rutas literales antes que /{product_id})
# ========================================

@router.get("/", response_model=ApiResponse[ProductPage])
async def read_products(
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params()),
):
    products, total = await product_service.get_all_products(db, page_request)
    return ApiResponse.ok(ProductPage.build(_many(products), page_request, total))


@router.get("/active", response_model=ApiResponse[ProductPage])
async def read_active_products(
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params()),
):
    products, total = await product_service.get_active_products(db, page_request)
    return ApiResponse.ok(ProductPage.build(_many(products), page_request, total))


@router.get("/featured", response_model=ApiResponse[List[product_schema.ProductResponse]])
async def read_featured_products(db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(_many(await product_service.get_featured_products(db)))


@router.get("/search", response_model=ApiResponse[ProductPage])
async def search_products(
    query: str = Query(..., min_length=1, description="Texto a buscar en nombre, descripción o SKU"),
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params()),
):
    products, total = await product_service.search_products(db, query, page_request)
    return ApiResponse.ok(ProductPage.build(_many(products), page_request, total))


@router.get("/price-range", response_model=ApiResponse[ProductPage])
async def read_products_by_price_range(
    min_price: Optional[float] = Query(None, ge=0, description="Precio mínimo"),
    max_price: Optional[float] = Query(None, ge=0, description="Precio máximo"),
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params("price", "asc")),
):
    products, total = await product_service.get_products_by_price_range(db, page_request, min_price, max_price)
    return ApiResponse.ok(ProductPage.build(_many(products), page_request, total))


@router.get("/inventory/low-stock", response_model=ApiResponse[List[product_schema.ProductResponse]])
async def read_low_stock_products(db: AsyncSession = Depends(deps.get_db)):
    """Productos activos cuyo stock está en o por debajo de su nivel mínimo."""
    return ApiResponse.ok(_many(await product_service.get_low_stock_products(db)))


@router.get("/inventory/out-of-stock", response_model=ApiResponse[List[product_schema.ProductResponse]])
async def read_out_of_stock_products(db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(_many(await product_service.get_out_of_stock_products(db)))


@router.get("/health", response_model=HealthResponse)
async def products_health():
    return HealthResponse(service="products")


@router.get("/display/{display_id}", response_model=ApiResponse[product_schema.ProductResponse])
async def read_product_by_display_id(display_id: str, db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(_one(await product_service.get_product_by_display_id(db, display_id)))


@router.get("/sku/{sku}", response_model=ApiResponse[product_schema.ProductResponse])
async def read_product_by_sku(sku: str, db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(_one(await product_service.get_product_by_sku(db, sku)))


@router.get("/slug/{slug}", response_model=ApiResponse[product_schema.ProductResponse])
async def read_product_by_slug(slug: str, db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(_one(await product_service.get_product_by_slug(db, slug)))


@router.get("/category/{category_id}", response_model=ApiResponse[ProductPage])
async def read_products_by_category(
    category_id: int,
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params()),
):
    products, total = await product_service.get_products_by_category(db, category_id, page_request)
    return ApiResponse.ok(ProductPage.build(_many(products), page_request, total))


@router.get("/brand/{brand_id}", response_model=ApiResponse[ProductPage])
async def read_products_by_brand(
    brand_id: int,
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params()),
):
    products, total = await product_service.get_products_by_brand(db, brand_id, page_request)
    return ApiResponse.ok(ProductPage.build(_many(products), page_request, total))


@router.get("/{product_id}", response_model=ApiResponse[product_schema.ProductResponse])
async def read_product(product_id: int, db: AsyncSession = Depends(deps.get_db)):
    """Obtiene un producto por su ID."""
    return ApiResponse.ok(_one(await product_service.get_product_by_id(db, product_id)))


# ========================================
# ACTUALIZACIÓN Y BORRADO
# ========================================

@router.put("/{product_id}", response_model=ApiResponse[product_schema.ProductResponse])
async def update_product(
    *,
    db: AsyncSession = Depends(deps.get_db),
    product_id: int,
    product_in: product_schema.ProductUpdate,
):
    """Actualización parcial: solo se modifican los campos enviados."""
    product = await product_service.update_product(db, product_id, product_in)
    return ApiResponse.ok(_one(product), "Product updated successfully", "تم تحديث المنتج بنجاح")


@router.put("/{product_id}/status", response_model=ApiResponse[product_schema.ProductResponse])
async def update_product_status(
    *,
    db: AsyncSession = Depends(deps.get_db),
    product_id: int,
    status_in: product_schema.ProductStatusUpdate,
):
    product = await product_service.update_product_status(db, product_id, status_in.is_active)
    return ApiResponse.ok(_one(product), "Product status updated", "تم تحديث حالة المنتج")


@router.put("/{product_id}/stock", response_model=ApiResponse[product_schema.ProductResponse])
async def update_product_stock(
    *,
    db: AsyncSession = Depends(deps.get_db),
    constants: AppConstants = Depends(deps.get_constants),
    product_id: int,
    stock_in: product_schema.ProductStockUpdate,
):
    """Fija el stock del producto; la diferencia queda registrada como ajuste de inventario."""
    product = await product_service.update_stock(db, product_id, stock_in, constants)
    return ApiResponse.ok(_one(product), "Product stock updated", "تم تحديث مخزون المنتج")


@router.delete("/{product_id}", response_model=ApiResponse[None])
async def delete_product(product_id: int, db: AsyncSession = Depends(deps.get_db)):
    await product_service.delete_product(db, product_id)
    return ApiResponse.ok(None, "Product deleted successfully", "تم حذف المنتج بنجاح")
