# backend/multistore/crud/common_crud.py

"""
Operaciones CRUD compartidas por todas las entidades.

- fetch_page: ejecuta una consulta paginada y devuelve (filas, total)
- stage_changes: aplica un diccionario de cambios sin confirmar la transacción
- apply_changes: aplica un diccionario de cambios a un objeto y lo persiste
- contains_pattern: patrón LIKE "contiene" con los comodines del usuario escapados
"""

from typing import Any, Dict, List, Tuple, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from multistore.utils.pagination import PageRequest, order_by_clauses

ModelT = TypeVar("ModelT")

LIKE_ESCAPE = "\\"


def contains_pattern(search_term: str) -> str:
    """Patrón LIKE en minúsculas que trata `%`, `_` y la barra invertida como literales."""
    escaped = (
        search_term.lower()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


async def fetch_page(db: AsyncSession, query: Select, model, page_request: PageRequest) -> Tuple[List[Any], int]:
    """
    Ejecuta `query` paginada según `page_request`.

    El total se calcula sobre la misma consulta sin ORDER BY ni LIMIT, así que
    respeta todos los filtros aplicados.
    """
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar_one()

    paged = (
        query.order_by(*order_by_clauses(model, page_request))
        .offset(page_request.offset)
        .limit(page_request.size)
    )
    result = await db.execute(paged)
    return list(result.scalars().all()), total


def stage_changes(db: AsyncSession, db_obj: ModelT, changes: Dict[str, Any]) -> ModelT:
    """Aplica los cambios en la sesión sin confirmar; el commit lo hace el llamador."""
    for key, value in changes.items():
        setattr(db_obj, key, value)

    db.add(db_obj)
    return db_obj


async def apply_changes(db: AsyncSession, db_obj: ModelT, changes: Dict[str, Any]) -> ModelT:
    """Aplica los cambios (solo las claves presentes) y recarga el objeto desde la BD."""
    stage_changes(db, db_obj, changes)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj
