# backend/multistore/db/models/user_model.py
"""
Se encarga de definir el modelo de usuario y su rol.
"""

import enum
from typing import Any, Dict

from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP, TypeDecorator

from multistore.db.database import Base
from multistore.db.models.common import stamp


class UserRole(str, enum.Enum):
    """Roles cerrados del sistema. Se persisten como su valor en minúsculas."""
    CUSTOMER = "customer"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"
    MERCHANT = "merchant"

    @classmethod
    def from_value(cls, value: str) -> "UserRole":
        """
        Convierte el valor persistido en el rol correspondiente.

        Raises:
            ValueError: Si el valor no corresponde a ningún rol.
        """
        if value is not None:
            normalized = str(value).strip().lower()
            for role in cls:
                if role.value == normalized:
                    return role
        raise ValueError(f"Unknown user role: {value}")


class UserRoleType(TypeDecorator):
    """Columna String que guarda/lee UserRole mediante from_value."""
    impl = String(20)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return UserRole.from_value(value.value if isinstance(value, UserRole) else value).value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return UserRole.from_value(value)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    display_id = Column(String(20), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(50), unique=True, nullable=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    first_name_ar = Column(String(100), nullable=True)
    last_name_ar = Column(String(100), nullable=True)
    role = Column(UserRoleType(), nullable=False, default=UserRole.CUSTOMER)
    is_active = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"


def verification_changes() -> Dict[str, Any]:
    return stamp({"is_verified": True})
