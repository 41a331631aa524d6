# backend/multistore/db/models/common.py
"""
Utilidades compartidas por los modelos.

Las transiciones de estado de las entidades no mutan el objeto ORM: son
funciones puras que devuelven un diccionario de cambios (con updated_at
refrescado) que la capa CRUD aplica después con setattr.
"""

from datetime import datetime, timezone
from typing import Any, Dict


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def stamp(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Devuelve una copia de `changes` con updated_at al instante actual."""
    return {**changes, "updated_at": utc_now()}


def activation_changes(is_active: bool) -> Dict[str, Any]:
    """Cambios para activar/desactivar cualquier entidad con is_active."""
    return stamp({"is_active": is_active})
