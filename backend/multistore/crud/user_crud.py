# backend/multistore/crud/user_crud.py
"""
Operaciones CRUD para el modelo User.

El hash de la contraseña llega ya calculado desde la capa de servicio;
este módulo nunca trabaja con contraseñas en claro.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.crud.common_crud import apply_changes, fetch_page
from multistore.db.models.user_model import User
from multistore.utils.pagination import PageRequest


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    result = await db.execute(select(User).filter(User.id == user_id))
    return result.scalars().first()


async def get_user_by_display_id(db: AsyncSession, display_id: str) -> Optional[User]:
    result = await db.execute(select(User).filter(User.display_id == display_id))
    return result.scalars().first()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """Busca por email sin distinguir mayúsculas."""
    result = await db.execute(select(User).filter(func.lower(User.email) == email.lower()))
    return result.scalars().first()


async def email_exists(db: AsyncSession, email: str) -> bool:
    result = await db.execute(select(User.id).filter(func.lower(User.email) == email.lower()).limit(1))
    return result.first() is not None


async def phone_exists(db: AsyncSession, phone: str) -> bool:
    result = await db.execute(select(User.id).filter(User.phone == phone).limit(1))
    return result.first() is not None


async def get_users(db: AsyncSession, page_request: PageRequest) -> Tuple[List[User], int]:
    return await fetch_page(db, select(User), User, page_request)


async def create_user(db: AsyncSession, user_data: Dict[str, Any]) -> User:
    db_user = User(**user_data)
    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)
    return db_user


async def update_user(db: AsyncSession, db_user: User, changes: Dict[str, Any]) -> User:
    return await apply_changes(db, db_user, changes)
