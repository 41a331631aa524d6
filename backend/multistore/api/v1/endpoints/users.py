# backend/multistore/api/v1/endpoints/users.py
"""
Endpoints REST para el registro y la administración de usuarios.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.api import deps
from multistore.schemas import user_schema
from multistore.schemas.common_schema import ApiResponse, HealthResponse, PaginatedResponse
from multistore.services.user_service import user_service
from multistore.utils.pagination import PageRequest

router = APIRouter()

UserPage = PaginatedResponse[user_schema.UserResponse]


def _one(user) -> user_schema.UserResponse:
    return user_schema.UserResponse.model_validate(user)


@router.post("/register", response_model=ApiResponse[user_schema.UserResponse], status_code=status.HTTP_201_CREATED)
async def register_user(
    *,
    db: AsyncSession = Depends(deps.get_db),
    user_in: user_schema.UserCreate,
):
    """Registra un nuevo cliente. La respuesta nunca incluye la contraseña."""
    user = await user_service.register_user(db, user_in)
    return ApiResponse.created(_one(user), "User registered successfully", "تم تسجيل المستخدم بنجاح")


@router.get("/", response_model=ApiResponse[UserPage])
async def read_users(
    db: AsyncSession = Depends(deps.get_db),
    page_request: PageRequest = Depends(deps.pagination_params()),
):
    users, total = await user_service.get_all_users(db, page_request)
    return ApiResponse.ok(UserPage.build([_one(user) for user in users], page_request, total))


@router.get("/health", response_model=HealthResponse)
async def users_health():
    return HealthResponse(service="users")


@router.get("/display/{display_id}", response_model=ApiResponse[user_schema.UserResponse])
async def read_user_by_display_id(display_id: str, db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(_one(await user_service.get_user_by_display_id(db, display_id)))


@router.get("/email/{email}", response_model=ApiResponse[user_schema.UserResponse])
async def read_user_by_email(email: str, db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(_one(await user_service.get_user_by_email(db, email)))


@router.get("/{user_id}", response_model=ApiResponse[user_schema.UserResponse])
async def read_user(user_id: int, db: AsyncSession = Depends(deps.get_db)):
    return ApiResponse.ok(_one(await user_service.get_user_by_id(db, user_id)))


@router.put("/{user_id}/status", response_model=ApiResponse[user_schema.UserResponse])
async def update_user_status(
    *,
    db: AsyncSession = Depends(deps.get_db),
    user_id: int,
    status_in: user_schema.UserStatusUpdate,
):
    user = await user_service.update_user_status(db, user_id, status_in.is_active)
    return ApiResponse.ok(_one(user), "User status updated", "تم تحديث حالة المستخدم")


@router.put("/{user_id}/verify", response_model=ApiResponse[user_schema.UserResponse])
async def verify_user_email(user_id: int, db: AsyncSession = Depends(deps.get_db)):
    user = await user_service.verify_user_email(db, user_id)
    return ApiResponse.ok(_one(user), "Email verified", "تم التحقق من البريد الإلكتروني")
