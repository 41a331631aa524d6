# backend/multistore/services/user_service.py
"""
Servicio de usuarios: registro, consultas, estado de la cuenta y
verificación de credenciales.
"""

import logging
from typing import List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from multistore.core.exceptions import DuplicateResourceException, ResourceNotFoundException
from multistore.core.security import get_password_hash, verify_password
from multistore.crud import user_crud
from multistore.db.models.common import activation_changes
from multistore.db.models.user_model import User, UserRole, verification_changes
from multistore.schemas import user_schema
from multistore.utils.identifiers import USER_PREFIX, generate_display_id
from multistore.utils.pagination import PageRequest

logger = logging.getLogger(__name__)


class UserService:

    async def register_user(self, db: AsyncSession, user_in: user_schema.UserCreate) -> User:
        """
        Registra un nuevo cliente.

        El usuario se crea activo, sin verificar y con rol CUSTOMER; la
        contraseña se guarda únicamente como hash.

        Raises:
            DuplicateResourceException: Email o teléfono ya registrados (409)
        """
        email = str(user_in.email).lower()
        if await user_crud.email_exists(db, email):
            logger.warning(f"⚠️ Registro rechazado, email en uso: {email}")
            raise DuplicateResourceException("User", "email", email)
        if user_in.phone and await user_crud.phone_exists(db, user_in.phone):
            raise DuplicateResourceException("User", "phone", user_in.phone)

        user_data = user_in.model_dump(exclude={"password"})
        user_data.update({
            "email": email,
            "display_id": generate_display_id(USER_PREFIX),
            "password_hash": get_password_hash(user_in.password),
            "role": UserRole.CUSTOMER,
            "is_active": True,
            "is_verified": False,
        })

        user = await user_crud.create_user(db, user_data)
        logger.info(f"👤 Usuario registrado: {user.display_id} ({user.full_name})")
        return user

    async def get_user_by_id(self, db: AsyncSession, user_id: int) -> User:
        user = await user_crud.get_user(db, user_id)
        if not user:
            raise ResourceNotFoundException("User", user_id)
        return user

    async def get_user_by_display_id(self, db: AsyncSession, display_id: str) -> User:
        user = await user_crud.get_user_by_display_id(db, display_id)
        if not user:
            raise ResourceNotFoundException("User", display_id, "display_id")
        return user

    async def get_user_by_email(self, db: AsyncSession, email: str) -> User:
        user = await user_crud.get_user_by_email(db, email)
        if not user:
            raise ResourceNotFoundException("User", email, "email")
        return user

    async def get_all_users(self, db: AsyncSession, page_request: PageRequest) -> Tuple[List[User], int]:
        return await user_crud.get_users(db, page_request)

    async def update_user_status(self, db: AsyncSession, user_id: int, is_active: bool) -> User:
        user = await self.get_user_by_id(db, user_id)
        user = await user_crud.update_user(db, user, activation_changes(is_active))
        logger.info(f"🔁 Usuario {user.display_id} {'activado' if is_active else 'desactivado'}")
        return user

    async def verify_user_email(self, db: AsyncSession, user_id: int) -> User:
        user = await self.get_user_by_id(db, user_id)
        user = await user_crud.update_user(db, user, verification_changes())
        logger.info(f"✅ Email verificado: {user.email}")
        return user

    async def validate_login(self, db: AsyncSession, email: str, password: str) -> bool:
        """True solo si el usuario existe, está activo y la contraseña coincide."""
        user = await user_crud.get_user_by_email(db, email)
        if not user or not user.is_active:
            return False
        return verify_password(password, user.password_hash)


user_service = UserService()
