# backend/multistore/utils/pagination.py
"""
Utilidades de paginación y ordenación.

Normaliza los parámetros recibidos en la query (página base 0, tamaño acotado
por MAX_PAGE_SIZE) y traduce el campo de ordenación a una columna real del
modelo para evitar ordenar por atributos arbitrarios.
"""

import math
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import asc, desc, inspect

from multistore.core.constants import AppConstants, app_constants
from multistore.core.exceptions import BusinessException

# Columnas que nunca se exponen como criterio de ordenación
UNSORTABLE_COLUMNS = frozenset({"password_hash"})


@dataclass(frozen=True)
class PageRequest:
    page: int
    size: int
    sort_by: str
    sort_dir: str

    @property
    def offset(self) -> int:
        return self.page * self.size


def create_page_request(
    page: Optional[int],
    size: Optional[int],
    sort_by: Optional[str] = None,
    sort_dir: Optional[str] = None,
    constants: AppConstants = app_constants,
) -> PageRequest:
    """
    Construye un PageRequest aplicando los valores por defecto.

    - page negativa o ausente -> 0
    - size <= 0 o ausente -> DEFAULT_PAGE_SIZE; mayor que MAX_PAGE_SIZE -> MAX_PAGE_SIZE
    - sort_dir distinto de "asc" -> "desc"
    """
    page_number = page if page is not None and page >= 0 else 0
    if size is not None and size > 0:
        page_size = min(size, constants.MAX_PAGE_SIZE)
    else:
        page_size = constants.DEFAULT_PAGE_SIZE
    sort_field = sort_by.strip() if sort_by and sort_by.strip() else constants.DEFAULT_SORT_BY
    direction = "asc" if sort_dir and sort_dir.lower() == "asc" else "desc"
    return PageRequest(page=page_number, size=page_size, sort_by=sort_field, sort_dir=direction)


def order_by_clauses(model, page_request: PageRequest):
    """
    Devuelve las cláusulas ORDER BY para el modelo; falla con 400 si la columna no existe
    o está en UNSORTABLE_COLUMNS.
    El id, en la misma dirección, desempata filas con el mismo valor.
    """
    columns = inspect(model).columns
    if page_request.sort_by not in columns or page_request.sort_by in UNSORTABLE_COLUMNS:
        raise BusinessException.bad_request(
            f"Invalid sort field '{page_request.sort_by}'",
            "حقل الترتيب غير صالح",
        )
    direction = asc if page_request.sort_dir == "asc" else desc
    clauses = [direction(columns[page_request.sort_by])]
    if page_request.sort_by != "id" and "id" in columns:
        clauses.append(direction(columns["id"]))
    return clauses


def calculate_total_pages(total_elements: int, page_size: int) -> int:
    if page_size <= 0:
        return 0
    return math.ceil(total_elements / page_size)
