# backend/multistore/schemas/user_schema.py
"""
Esquemas Pydantic para el modelo User.

La respuesta nunca incluye el hash de la contraseña.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from multistore.core.constants import app_constants
from multistore.db.models.user_model import UserRole
from multistore.schemas.common_schema import strip_required


class UserCreate(BaseModel):
    """Esquema de registro de un nuevo usuario."""
    email: EmailStr
    password: str = Field(..., min_length=app_constants.MIN_PASSWORD_LENGTH, max_length=128)
    phone: Optional[str] = Field(None, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    first_name_ar: Optional[str] = Field(None, max_length=100)
    last_name_ar: Optional[str] = Field(None, max_length=100)

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, value: str) -> str:
        return strip_required(value)

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class UserStatusUpdate(BaseModel):
    is_active: bool


class UserResponse(BaseModel):
    """Esquema de respuesta de usuario (sin datos sensibles)."""
    id: int
    display_id: str
    email: str
    phone: Optional[str] = None
    first_name: str
    last_name: str
    first_name_ar: Optional[str] = None
    last_name_ar: Optional[str] = None
    role: UserRole
    is_active: bool
    is_verified: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
