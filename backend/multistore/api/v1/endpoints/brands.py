# backend/multistore/api/v1/endpoints/brands.py
"""
Endpoints REST para la gestión de marcas.

Las rutas literales (/active, /search, /display/..., /slug/...) se declaran
antes que /{brand_id} para que no se interpreten como un ID.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.api import deps
from multistore.schemas import brand_schema
from multistore.schemas.common_schema import ApiResponse, PaginatedResponse
from multistore.services.brand_service import brand_service
from multistore.utils.pagination import PageRequest

router = APIRouter()

BrandPage = PaginatedResponse[brand_schema.BrandResponse]


def _page(brands, page_request: PageRequest, total: int) -> BrandPage:
    content = [brand_schema.BrandResponse.model_validate(brand) for brand in brands]
    return BrandPage.build(content, page_request, total)


@router.post("/", response_model=ApiResponse[brand_schema.BrandResponse], status_code=status.HTTP_201_CREATED)
async def create_brand(
    *,
    db: AsyncSession = Depends(deps.get_db),
    brand_in: brand_schema.BrandCreate,
):
    """Crea una nueva marca. El slug se genera a partir del nombre."""
    brand = await brand_service.create_brand(db, brand_in)
    return ApiResponse.created(
        brand_schema.BrandResponse.model_validate(brand),
        "Brand created successfully",
        "تم إنشاء العلامة التجارية بنجاح",
    )


@router.get("/", response_model=ApiResponse[BrandPage])
async def read_brands(
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params("name", "asc")),
):
    """Listado paginado de marcas, por defecto ordenado por nombre."""
    brands, total = await brand_service.get_all_brands(db, page_request)
    return ApiResponse.ok(_page(brands, page_request, total))


@router.get("/active", response_model=ApiResponse[List[brand_schema.BrandResponse]])
async def read_active_brands(db: AsyncSession = Depends(deps.get_db)):
    brands = await brand_service.get_active_brands(db)
    return ApiResponse.ok([brand_schema.BrandResponse.model_validate(brand) for brand in brands])


@router.get("/search", response_model=ApiResponse[BrandPage])
async def search_brands(
    query: str = Query(..., min_length=1, description="Texto a buscar"),
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params("name", "asc")),
):
    brands, total = await brand_service.search_brands(db, query, page_request)
    return ApiResponse.ok(_page(brands, page_request, total))


@router.get("/display/{display_id}", response_model=ApiResponse[brand_schema.BrandResponse])
async def read_brand_by_display_id(display_id: str, db: AsyncSession = Depends(deps.get_db)):
    brand = await brand_service.get_brand_by_display_id(db, display_id)
    return ApiResponse.ok(await brand_service.get_brand_response(db, brand))


@router.get("/slug/{slug}", response_model=ApiResponse[brand_schema.BrandResponse])
async def read_brand_by_slug(slug: str, db: AsyncSession = Depends(deps.get_db)):
    brand = await brand_service.get_brand_by_slug(db, slug)
    return ApiResponse.ok(await brand_service.get_brand_response(db, brand))


@router.get("/{brand_id}", response_model=ApiResponse[brand_schema.BrandResponse])
async def read_brand(brand_id: int, db: AsyncSession = Depends(deps.get_db)):
    """Detalle de una marca, incluyendo su número de productos."""
    brand = await brand_service.get_brand_by_id(db, brand_id)
    return ApiResponse.ok(await brand_service.get_brand_response(db, brand))


@router.put("/{brand_id}", response_model=ApiResponse[brand_schema.BrandResponse])
async def update_brand(
    *,
    db: AsyncSession = Depends(deps.get_db),
    brand_id: int,
    brand_in: brand_schema.BrandUpdate,
):
    brand = await brand_service.update_brand(db, brand_id, brand_in)
    return ApiResponse.ok(
        brand_schema.BrandResponse.model_validate(brand),
        "Brand updated successfully",
        "تم تحديث العلامة التجارية بنجاح",
    )


@router.patch("/{brand_id}/activate", response_model=ApiResponse[brand_schema.BrandResponse])
async def activate_brand(brand_id: int, db: AsyncSession = Depends(deps.get_db)):
    brand = await brand_service.set_brand_active(db, brand_id, True)
    return ApiResponse.ok(brand_schema.BrandResponse.model_validate(brand), "Brand activated", "تم تفعيل العلامة التجارية")


@router.patch("/{brand_id}/deactivate", response_model=ApiResponse[brand_schema.BrandResponse])
async def deactivate_brand(brand_id: int, db: AsyncSession = Depends(deps.get_db)):
    brand = await brand_service.set_brand_active(db, brand_id, False)
    return ApiResponse.ok(brand_schema.BrandResponse.model_validate(brand), "Brand deactivated", "تم تعطيل العلامة التجارية")


@router.delete("/{brand_id}", response_model=ApiResponse[None])
async def delete_brand(brand_id: int, db: AsyncSession = Depends(deps.get_db)):
    """Elimina una marca. Falla con 409 si tiene productos asociados."""
    await brand_service.delete_brand(db, brand_id)
    return ApiResponse.ok(None, "Brand deleted successfully", "تم حذف العلامة التجارية بنجاح")
