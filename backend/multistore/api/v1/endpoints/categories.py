# backend/multistore/api/v1/endpoints/categories.py
"""
Endpoints REST para operaciones CRUD de categorías.

Las categorías se serializan siempre con CategoryResponse.from_orm_flat para
no disparar la carga perezosa de `children` en contexto asíncrono.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.api import deps
from multistore.schemas import category_schema
from multistore.schemas.common_schema import ApiResponse, PaginatedResponse
from multistore.services.category_service import category_service
from multistore.utils.pagination import PageRequest

router = APIRouter()

CategoryPage = PaginatedResponse[category_schema.CategoryResponse]


def _flat(categories) -> List[category_schema.CategoryResponse]:
    return [category_schema.CategoryResponse.from_orm_flat(category) for category in categories]


@router.post("/", response_model=ApiResponse[category_schema.CategoryResponse], status_code=status.HTTP_201_CREATED)
async def create_category(
    *,
    db: AsyncSession = Depends(deps.get_db),
    category_in: category_schema.CategoryCreate,
):
    """Crea una nueva categoría en el sistema."""
    category = await category_service.create_new_category(db, category_in)
    return ApiResponse.created(
        category_schema.CategoryResponse.from_orm_flat(category),
        "Category created successfully",
        "تم إنشاء الفئة بنجاح",
    )


@router.get("/", response_model=ApiResponse[CategoryPage])
async def read_categories(
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params()),
):
    """Obtiene una lista paginada de categorías."""
    categories, total = await category_service.get_all_categories(db, page_request)
    return ApiResponse.ok(CategoryPage.build(_flat(categories), page_request, total))


@router.get("/parents", response_model=ApiResponse[List[category_schema.CategoryResponse]])
async def read_parent_categories(db: AsyncSession = Depends(deps.get_db)):
    """Categorías raíz activas, ordenadas por sort_order."""
    return ApiResponse.ok(_flat(await category_service.get_main_categories(db)))


@router.get("/tree", response_model=ApiResponse[category_schema.CategoryTreeResponse])
async def read_category_tree(db: AsyncSession = Depends(deps.get_db)):
    """Árbol completo de categorías activas con sus contadores."""
    return ApiResponse.ok(await category_service.get_category_tree(db))


@router.get("/search", response_model=ApiResponse[CategoryPage])
async def search_categories(
    query: str = Query(..., min_length=1, description="Texto a buscar"),
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params("name", "asc")),
):
    categories, total = await category_service.search_categories(db, query, page_request)
    return ApiResponse.ok(CategoryPage.build(_flat(categories), page_request, total))


@router.get("/display/{display_id}", response_model=ApiResponse[category_schema.CategoryResponse])
async def read_category_by_display_id(display_id: str, db: AsyncSession = Depends(deps.get_db)):
    category = await category_service.get_category_by_display_id(db, display_id)
    return ApiResponse.ok(await category_service.get_category_response(db, category))


@router.get("/slug/{slug}", response_model=ApiResponse[category_schema.CategoryResponse])
async def read_category_by_slug(slug: str, db: AsyncSession = Depends(deps.get_db)):
    category = await category_service.get_category_by_slug(db, slug)
    return ApiResponse.ok(await category_service.get_category_response(db, category))


@router.get("/{parent_id}/children", response_model=ApiResponse[List[category_schema.CategoryResponse]])
async def read_subcategories(parent_id: int, db: AsyncSession = Depends(deps.get_db)):
    """Subcategorías activas directas de una categoría."""
    return ApiResponse.ok(_flat(await category_service.get_subcategories(db, parent_id)))


@router.get("/{category_id}", response_model=ApiResponse[category_schema.CategoryResponse])
async def read_category(category_id: int, db: AsyncSession = Depends(deps.get_db)):
    """Obtiene los detalles de una categoría específica por su ID."""
    category = await category_service.get_category_by_id(db, category_id)
    return ApiResponse.ok(await category_service.get_category_response(db, category))


@router.put("/{category_id}", response_model=ApiResponse[category_schema.CategoryResponse])
async def update_category(
    *,
    db: AsyncSession = Depends(deps.get_db),
    category_id: int,
    category_in: category_schema.CategoryUpdate,
):
    """Actualiza una categoría existente."""
    category = await category_service.update_existing_category(db, category_id, category_in)
    return ApiResponse.ok(
        category_schema.CategoryResponse.from_orm_flat(category),
        "Category updated successfully",
        "تم تحديث الفئة بنجاح",
    )


@router.patch("/{category_id}/activate", response_model=ApiResponse[category_schema.CategoryResponse])
async def activate_category(category_id: int, db: AsyncSession = Depends(deps.get_db)):
    category = await category_service.set_category_active(db, category_id, True)
    return ApiResponse.ok(category_schema.CategoryResponse.from_orm_flat(category), "Category activated", "تم تفعيل الفئة")


@router.patch("/{category_id}/deactivate", response_model=ApiResponse[category_schema.CategoryResponse])
async def deactivate_category(category_id: int, db: AsyncSession = Depends(deps.get_db)):
    category = await category_service.set_category_active(db, category_id, False)
    return ApiResponse.ok(category_schema.CategoryResponse.from_orm_flat(category), "Category deactivated", "تم تعطيل الفئة")


@router.delete("/{category_id}", response_model=ApiResponse[None])
async def delete_category(category_id: int, db: AsyncSession = Depends(deps.get_db)):
    """Elimina una categoría del sistema."""
    await category_service.delete_existing_category(db, category_id)
    return ApiResponse.ok(None, "Category deleted successfully", "تم حذف الفئة بنجاح")
